"""Shard statistics for the web panel and its rolling logs."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from aegisbot.store import RedisStore

BOT_LOG_KEY = "config:log:bot"
LOG_KEEP = 1000


@dataclass
class ShardInfo:
    """Snapshot of one gateway shard."""

    id: int
    sequence: int = 0
    transfer: int = 0
    transfer_str: str = ""
    uptime_str: str = ""
    reconnects: int = 0
    connected: bool = False
    trace: list[str] = field(default_factory=list)


@dataclass
class GuildCount:
    guilds: int = 0
    members: int = 0


def shard_log_key(shard_id: int) -> str:
    return f"config:log:shard:{shard_id}"


def shard_status_key(shard_id: int) -> str:
    return f"config:shards:{shard_id}"


def count_guilds_per_shard(
    guilds: Iterable[tuple[int, int]], shard_count: int
) -> list[GuildCount]:
    """Tally guilds and members per shard from ``(shard_id, member_count)`` pairs.

    Raises IndexError for a shard id outside ``range(shard_count)``.
    """
    counts = [GuildCount() for _ in range(shard_count)]
    for shard_id, member_count in guilds:
        if not 0 <= shard_id < shard_count:
            raise IndexError(f"shard id {shard_id} out of range")
        entry = counts[shard_id]
        entry.guilds += 1
        entry.members += member_count
    return counts


def shard_log_entry(shard: ShardInfo, guild_count: int, member_count: int) -> dict[str, Any]:
    """History record pushed to a shard's log list."""
    return {
        "id": shard.id,
        "seq": shard.sequence,
        "servers": guild_count,
        "members": member_count,
        "transfer": shard.transfer,
        "reconnects": shard.reconnects,
        "connected": shard.connected,
    }


def shard_status_fields(
    shard: ShardInfo, guild_count: int, member_count: int, last_event_ms: int
) -> dict[str, str]:
    """Hash fields describing a shard's current status."""
    fields = {
        "id": str(shard.id),
        "seq": str(shard.sequence),
        "servers": str(guild_count),
        "members": str(member_count),
    }
    if shard.trace:
        fields["session1"] = shard.trace[0]
        if len(shard.trace) > 1:
            fields["session2"] = shard.trace[1]
    fields.update(
        {
            "uptime": shard.uptime_str,
            "last_message": str(last_event_ms),
            "transfer": shard.transfer_str,
            "reconnects": str(shard.reconnects),
            "connected": "true" if shard.connected else "false",
        }
    )
    return fields


def push_log(store: RedisStore, key: str, entry: dict[str, Any]) -> None:
    """Prepend a JSON record to a log list, keeping the newest entries."""
    store.basic_action("LPUSH", key, json.dumps(entry))
    store.basic_action("LTRIM", key, "0", str(LOG_KEEP - 1))