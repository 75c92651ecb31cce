"""Usage counters and the statistics reported about the running bot."""

from __future__ import annotations

import random
import subprocess
import threading
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

_SCALARS = ("dms", "messages", "presences", "rest_time", "rest", "events", "commands")
_MB = 1024 * 1024


class ActivityType(Enum):
    GAME = 0
    WATCHING = 3


@dataclass
class EventTiming:
    count: int = 0
    time: int = 0


@dataclass
class Counters:
    """Counters gathered between two reports."""

    dms: int = 0
    messages: int = 0
    presences: int = 0
    rest_time: int = 0
    rest: int = 0
    events: int = 0
    commands: int = 0
    msg: dict[str, EventTiming] = field(default_factory=dict)
    js: dict[str, EventTiming] = field(default_factory=dict)
    http_codes: Counter[int] = field(default_factory=Counter)
    command_counters: Counter[str] = field(default_factory=Counter)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_rest(self, code: int, micros: int) -> None:
        """Count one finished REST request."""
        with self.lock:
            self.http_codes[code] += 1
            self.rest_time += micros
            self.rest += 1

    def record_message_event(self, name: str, micros: int) -> None:
        with self.lock:
            timing = self.msg.setdefault(name, EventTiming())
            timing.count += 1
            timing.time += micros

    def record_js_event(self, name: str, micros: int) -> None:
        with self.lock:
            timing = self.js.setdefault(name, EventTiming())
            timing.count += 1
            timing.time += micros

    def take(self, name: str) -> int:
        """Return a scalar counter and reset it to zero."""
        if name not in _SCALARS:
            raise AttributeError(name)
        with self.lock:
            value = getattr(self, name)
            setattr(self, name, 0)
        return value


@dataclass
class BotSnapshot:
    """Figures about the running bot at one moment."""

    username: str = ""
    members: int = 0
    guilds: int = 0
    channels: int = 0
    uptime: str = ""
    shard_count: int = 1
    events_seen: int = 0
    memory_bytes: int = 0
    platform: str = ""
    version: str = ""


def system_uptime() -> str:
    """Output of the system ``uptime`` command, or "" when it cannot run."""
    try:
        result = subprocess.run(["uptime"], capture_output=True, text=True, check=False)
    except OSError:
        return ""
    return result.stdout


def _megabytes(value: int) -> str:
    return f"{value / _MB:g}"


class StatsReporter:
    """Builds the periodic statistics payloads and informational replies."""

    def __init__(
        self,
        snapshot: Callable[[], BotSnapshot],
        counters: Counters | None = None,
        *,
        is_production: bool = False,
        rng: random.Random | None = None,
        uptime_command: Callable[[], str] = system_uptime,
    ) -> None:
        self.snapshot = snapshot
        self.counters = counters if counters is not None else Counters()
        self.is_production = is_production
        self.run_commands = 0
        self._rng = rng or random.Random()
        self._uptime_command = uptime_command

    def _path(self, path: str) -> str:
        return path if self.is_production else f"/test{path}"

    @property
    def bot_path(self) -> str:
        return self._path("/bot")

    @property
    def cmds_path(self) -> str:
        return self._path("/cmds")

    def build_bot_payload(self) -> list[dict[str, Any]]:
        """Per-command, per-status-code and overall counts; resets them."""
        counters = self.counters
        payload: list[dict[str, Any]] = []
        with counters.lock:
            for name, count in counters.command_counters.items():
                payload.append({f"cmd:{name}": count})
                self.run_commands += count
            counters.command_counters.clear()
            for code, count in counters.http_codes.items():
                payload.append({f"code:{code}": count})
            counters.http_codes.clear()

        snap = self.snapshot()
        summary: dict[str, Any] = {
            "members": snap.members,
            "guilds": snap.guilds,
            "memory": snap.memory_bytes,
            "dms": counters.take("dms"),
            "msgs": counters.take("messages"),
            "presences": counters.take("presences"),
            "rest_time": counters.take("rest_time"),
            "rest": counters.take("rest"),
            "events": counters.take("events"),
            "commands": counters.take("commands"),
        }
        payload.append(summary)
        return payload

    def build_command_payload(self) -> dict[str, int]:
        """Counts and times of gateway events; resets them."""
        counters = self.counters
        payload: dict[str, int] = {}
        with counters.lock:
            for name, timing in counters.msg.items():
                payload[f"{name}.count"] = timing.count
                payload[f"{name}.time"] = timing.time
                timing.count = timing.time = 0
            for name, timing in counters.js.items():
                payload[f"{name}.js.count"] = timing.count
                payload[f"{name}.js.time"] = timing.time
                timing.count = timing.time = 0
        return payload

    def choose_status(self, choice: int | None = None) -> tuple[str, ActivityType]:
        """Presence text and activity type for one of six rotating statuses."""
        if choice is None:
            choice = self._rng.randrange(6)
        snap = self.snapshot()
        variant = choice % 6
        if variant == 0:
            return f"@{snap.username} help", ActivityType.GAME
        if variant == 1:
            return f"{snap.members} users", ActivityType.WATCHING
        if variant == 2:
            return f"{snap.guilds} servers", ActivityType.WATCHING
        if variant == 3:
            return f"{snap.uptime} Uptime", ActivityType.GAME
        if variant == 4:
            return f"{snap.shard_count} shards", ActivityType.GAME
        return "Running on Python", ActivityType.GAME

    def make_info_obj(self, shard_id: int) -> dict[str, Any]:
        """Embed describing the bot, as sent by the ``info`` command."""
        snap = self.snapshot()
        misc = (
            f"I am shard # {shard_id} of {snap.shard_count} running on `{snap.platform}`"
        )

        def entry(name: str, value: str, inline: bool = True) -> dict[str, Any]:
            return {"name": name, "value": value, "inline": inline}

        return {
            "title": "AegisBot",
            "description": f"Memory usage: {_megabytes(snap.memory_bytes)}MB",
            "color": self._rng.randrange(0xFFFFFF),
            "fields": [
                entry("Members", str(snap.members)),
                entry("Channels", str(snap.channels)),
                entry("Uptime", snap.uptime),
                entry("Guilds", str(snap.guilds)),
                entry("Events Seen", str(snap.events_seen)),
                entry("\u200b", "\u200b"),
                entry("misc", misc, inline=False),
            ],
            "footer": {"text": f"Running {snap.version}".rstrip()},
        }

    def make_stats_text(self, shard_id: int) -> str:
        """Plain-text statistics, as sent by the ``stats`` command."""
        snap = self.snapshot()
        text = (
            f"I am shard # {shard_id} of {snap.shard_count} running on `{snap.platform}`\n"
            f"Memory: {_megabytes(snap.memory_bytes)}MB\n\n"
            f"Members: {snap.members}\nChannels: {snap.channels}\n"
            f"Guilds: {snap.guilds}\nEvents: {snap.events_seen}\n"
            f"Commands run: {self.run_commands}"
        )
        uptime = self._uptime_command()
        if uptime:
            text += f"\n\n{uptime}"
        return text