import random

import pytest

from aegisbot.stats import ActivityType, BotSnapshot, Counters, StatsReporter


def make_snapshot():
    return BotSnapshot(
        username="Aegis",
        members=120,
        guilds=7,
        channels=33,
        uptime="1h",
        shard_count=4,
        events_seen=900,
        memory_bytes=2 * 1024 * 1024,
        platform="Linux",
        version="v1",
    )


def reporter(**kwargs):
    kwargs.setdefault("uptime_command", lambda: "")
    return StatsReporter(make_snapshot, **kwargs)


def test_record_rest_and_payload_reset():
    counters = Counters()
    counters.record_rest(200, 10)
    counters.record_rest(200, 5)
    counters.command_counters["ping"] += 3
    counters.dms = 2
    stats = reporter(counters=counters)
    payload = stats.build_bot_payload()
    assert {"cmd:ping": 3} in payload
    assert {"code:200": 2} in payload
    summary = payload[-1]
    assert summary["rest"] == 2
    assert summary["rest_time"] == 15
    assert summary["dms"] == 2
    assert summary["members"] == 120
    assert stats.run_commands == 3
    again = stats.build_bot_payload()
    assert again[-1]["rest"] == 0
    assert again[-1]["dms"] == 0
    assert len(again) == 1


def test_take_unknown_counter():
    with pytest.raises(AttributeError):
        Counters().take("bogus")


def test_paths_depend_on_production():
    assert reporter(is_production=True).bot_path == "/bot"
    assert reporter().bot_path == "/test/bot"
    assert reporter().cmds_path == "/test/cmds"


def test_command_payload_reset():
    counters = Counters()
    counters.record_message_event("MESSAGE_CREATE", 4)
    counters.record_message_event("MESSAGE_CREATE", 6)
    counters.record_js_event("READY", 1)
    stats = reporter(counters=counters)
    payload = stats.build_command_payload()
    assert payload["MESSAGE_CREATE.count"] == 2
    assert payload["MESSAGE_CREATE.time"] == 10
    assert payload["READY.js.count"] == 1
    assert stats.build_command_payload()["MESSAGE_CREATE.count"] == 0


@pytest.mark.parametrize(
    "choice, text, kind",
    [
        (0, "@Aegis help", ActivityType.GAME),
        (1, "120 users", ActivityType.WATCHING),
        (2, "7 servers", ActivityType.WATCHING),
        (3, "1h Uptime", ActivityType.GAME),
        (4, "4 shards", ActivityType.GAME),
        (10, "4 shards", ActivityType.GAME),
    ],
)
def test_choose_status(choice, text, kind):
    assert reporter().choose_status(choice) == (text, kind)


def test_choose_status_random_is_one_of_six():
    stats = reporter(rng=random.Random(1))
    options = {stats.choose_status(n) for n in range(6)}
    assert stats.choose_status() in options


def test_info_obj_fields():
    info = reporter(rng=random.Random(3)).make_info_obj(2)
    assert info["title"] == "AegisBot"
    names = [f["name"] for f in info["fields"]]
    assert names == ["Members", "Channels", "Uptime", "Guilds", "Events Seen", "\u200b", "misc"]
    values = {f["name"]: f["value"] for f in info["fields"]}
    assert values["Members"] == "120"
    assert values["misc"] == "I am shard # 2 of 4 running on `Linux`"
    assert info["fields"][-1]["inline"] is False
    assert 0 <= info["color"] < 0xFFFFFF


def test_stats_text_with_and_without_uptime():
    plain = reporter().make_stats_text(1)
    assert plain.startswith("I am shard # 1 of 4 running on `Linux`\n")
    assert "Members: 120\nChannels: 33\nGuilds: 7\nEvents: 900" in plain
    assert plain.endswith("Commands run: 0")
    with_uptime = reporter(uptime_command=lambda: "up 3 days").make_stats_text(1)
    assert with_uptime == plain + "\n\nup 3 days"


def test_stats_text_counts_commands_run():
    counters = Counters()
    counters.command_counters["help"] += 4
    stats = reporter(counters=counters)
    stats.build_bot_payload()
    assert stats.make_stats_text(0).endswith("Commands run: 4")