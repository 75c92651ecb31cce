# aegisbot

Building blocks for a chat bot on a guild-based chat service: parsing command
text and mentions, keeping a short-lived message history, storing bot state in
Redis, and building the statistics that the bot reports.

## Installation

```
pip install .
```

Install the test extra to run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

### `aegisbot.text`

- `tokenize(text, delim="")` splits on spaces, newlines and any characters in
  `delim`. A token that starts with `"` runs to the next quote and comes back
  without the quotes. An unmatched quote takes the rest of the text, quote
  included.
- `tokenize_one(text)` returns the first token. It raises `ValueError` when a
  quoted token is not closed.
- `lineize(text)` returns the non-empty lines.
- `replace_all(text, old, new)` replaces every occurrence. An empty `old`
  raises `ValueError`.
- `analyze_mention(text)` returns a `(MentionType, id)` pair for user,
  nickname, role, channel, emoji and animated emoji mentions. Anything else
  gives `(MentionType.FAIL, 0)`.
- `parse_snowflake(name, members)` resolves a mention, a numeric id or a
  `name#discriminator` to an id. `members` maps ids to full names, and the
  result is 0 when nothing matches.
- `to_bool(value)` reads stored flags. `"1"` and `"true"` (in any case) are true.

### `aegisbot.config`

`load_config(path="config.json")` returns a `BotConfig` with `is_production`,
`logging_address`, `logging_port` and `redis_address`. The default for
`redis_address` is `127.0.0.1`. The values come from the optional `bot` object,
under the keys `production`, `logging-address`, `logging-port` and
`redis-address`. A missing or null key keeps its default. A missing file raises
`FileNotFoundError`, and a value of the wrong type raises `TypeError`.

### `aegisbot.store`

`RedisStore` wraps a Redis client. You can build it directly or with
`RedisStore.connect(host, port, password)`, which raises `ConnectionError` when
the server cannot be reached. It offers these helpers:

- `hset`, `hmset` and `hget` for hashes;
- `sadd` and `srem` for sets;
- `get`, `put` and `delete` for plain keys;
- `get_array` (a hash as a dict) and `get_vector` (a set as a list);
- `publish`;
- the generic `basic_action` and `result_action`.

Command failures are wrapped in `RedisCommandError` and logged, not raised.
When a call fails, `result_action`, `get_array` and `get_vector` return an
empty value.

### `aegisbot.history`

`MessageHistory` is a thread-safe store of messages keyed by id. It has these
methods:

- `insert` keeps the first copy of each id.
- `update` applies edits. An embed-only edit copies the embeds over.
- `delete` and `delete_bulk` move messages to a deleted history, which you read
  with `get_deleted`. `delete_bulk` stops at the first unknown id.
- `prune(now_ms, max_age_minutes=60)` drops messages older than the limit,
  judged by the timestamp in the message id (`snowflake_time`).
- `clear` empties the store.

It also supports `len()`, `in` and iteration.

### `aegisbot.stats`

`Counters` collects the counts gathered between two reports: messages, DMs,
presences, REST timings, HTTP status codes, per-command counts and event
timings.

`StatsReporter` takes a callable that returns a `BotSnapshot`. It builds:

- the bot metrics payload (`build_bot_payload`);
- the event timing payload (`build_command_payload`);
- a rotating presence line with its `ActivityType` (`choose_status`);
- the `info` embed (`make_info_obj`);
- the plain-text `stats` reply (`make_stats_text`).

The two payload builders reset the counters they report. By default,
`make_stats_text` appends the output of the system `uptime` command.

### `aegisbot.webstats`

These helpers build the web panel's shard records:

- `ShardInfo` holds a snapshot of one shard.
- `count_guilds_per_shard` tallies guilds and members for each shard.
- `shard_log_entry` builds the JSON history record.
- `shard_status_fields` builds the status hash fields.
- `push_log` prepends a record to a Redis list and keeps the newest 1000.

## Example

```python
from aegisbot.text import tokenize, analyze_mention, MentionType

tokenize('say "hello world" now', " ")
# ['say', 'hello world', 'now']

analyze_mention("<@!1234>")
# (MentionType.NICKNAME, 1234)
```

## What this package does not do

This package is a library of parts, not a running bot. It does not:

- connect to a chat gateway;
- dispatch gateway events;
- keep per-guild settings or command permissions;
- load or toggle feature modules;
- listen for commands from an administration website.

It has no command-line entry point. Your own program connects these parts to a
chat client and to Redis.