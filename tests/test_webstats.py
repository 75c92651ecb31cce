import json

import pytest

from aegisbot.store import RedisStore
from aegisbot.webstats import (
    ShardInfo,
    count_guilds_per_shard,
    push_log,
    shard_log_entry,
    shard_log_key,
    shard_status_fields,
    shard_status_key,
)


class RecordingRedis:
    def __init__(self):
        self.commands = []

    def execute_command(self, action, *args):
        self.commands.append((action, *args))
        return 1


def test_count_guilds_per_shard_totals():
    guilds = [(0, 5), (1, 3), (0, 2)]
    counts = count_guilds_per_shard(guilds, 3)
    assert len(counts) == 3
    assert sum(c.guilds for c in counts) == len(guilds)
    assert sum(c.members for c in counts) == sum(m for _, m in guilds)
    assert counts[2].guilds == 0 and counts[2].members == 0
    assert counts[1].members == 3


def test_count_guilds_per_shard_rejects_bad_shard():
    with pytest.raises(IndexError):
        count_guilds_per_shard([(4, 1)], 2)


def test_shard_log_entry_fields():
    shard = ShardInfo(id=3, sequence=77, transfer=1024, reconnects=2, connected=True)
    entry = shard_log_entry(shard, 10, 500)
    assert entry == {
        "id": 3, "seq": 77, "servers": 10, "members": 500,
        "transfer": 1024, "reconnects": 2, "connected": True,
    }


def test_shard_status_fields_order_and_values():
    shard = ShardInfo(
        id=1, sequence=9, transfer_str="1KB", uptime_str="1h",
        reconnects=4, connected=False, trace=["a", "b", "c"],
    )
    fields = shard_status_fields(shard, 2, 20, 150)
    assert list(fields) == [
        "id", "seq", "servers", "members", "session1", "session2",
        "uptime", "last_message", "transfer", "reconnects", "connected",
    ]
    assert fields["connected"] == "false"
    assert fields["session2"] == "b"
    assert fields["last_message"] == "150"


def test_shard_status_fields_without_trace():
    shard = ShardInfo(id=0, connected=True)
    fields = shard_status_fields(shard, 0, 0, 0)
    assert "session1" not in fields
    assert fields["connected"] == "true"


def test_keys():
    assert shard_log_key(2) == "config:log:shard:2"
    assert shard_status_key(2) == "config:shards:2"


def test_push_log_trims_list():
    client = RecordingRedis()
    push_log(RedisStore(client), "config:log:bot", {"mem": 5})
    push, trim = client.commands
    assert push[:2] == ("LPUSH", "config:log:bot")
    assert json.loads(push[2]) == {"mem": 5}
    assert trim == ("LTRIM", "config:log:bot", "0", "999")