"""Redis-backed key/value store with logged, non-fatal failures."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any

import redis
from redis.exceptions import RedisError


class RedisCommandError(Exception):
    """A Redis command answered with an error or could not be run."""

    def __init__(self, action: str, detail: str, args: Iterable[str]) -> None:
        self.action = action
        self.detail = detail
        self.args_sent = list(args)
        super().__init__(
            f"{action} failure: {detail} || {' '.join(self.args_sent)}"
        )


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


class RedisStore:
    """Runs Redis commands, logging failures instead of raising them."""

    def __init__(self, client: Any, logger: logging.Logger | None = None) -> None:
        self._client = client
        self._lock = threading.Lock()
        self._log = logger or logging.getLogger("aegis")

    @classmethod
    def connect(
        cls,
        host: str = "127.0.0.1",
        port: int = 6379,
        password: str | None = None,
        logger: logging.Logger | None = None,
    ) -> RedisStore:
        """Connect to a Redis server, authenticating when a password is given.

        Raises ConnectionError when the server cannot be reached or refuses
        the credentials.
        """
        client = redis.Redis(host=host, port=port, password=password or None)
        try:
            client.ping()
        except RedisError as exc:
            raise ConnectionError(f"Can't connect to redis: {exc}") from exc
        return cls(client, logger)

    def _execute(self, action: str, args: tuple[Any, ...]) -> Any:
        values = [_text(arg) for arg in args]
        with self._lock:
            try:
                return self._client.execute_command(action, *values)
            except RedisError as exc:
                raise RedisCommandError(action, str(exc), values) from exc

    def basic_action(self, action: str, *args: Any) -> bool:
        """Run a command whose reply is not needed. Failures are logged."""
        try:
            self._execute(action, args)
        except RedisCommandError as exc:
            self._log.error("E: %s", exc)
        return True

    def result_action(self, action: str, *args: Any) -> str:
        """Run a command and return its reply as text, or "" on failure."""
        try:
            return _text(self._execute(action, args))
        except RedisCommandError as exc:
            query = " ".join([action, *(_text(arg) for arg in args)])
            self._log.error("E: %s || %s", exc, query)
            return ""

    def hset(self, key: str, field: str, value: Any) -> bool:
        return self.basic_action("HSET", key, field, value)

    def hmset(self, key: str, mapping: Mapping[str, Any]) -> bool:
        flattened = [item for pair in mapping.items() for item in pair]
        return self.basic_action("HMSET", key, *flattened)

    def hget(self, key: str, field: str) -> str:
        return self.result_action("HGET", key, field)

    def get(self, key: str) -> str:
        return self.result_action("GET", key)

    def put(self, key: str, value: Any) -> bool:
        return self.basic_action("SET", key, value)

    def sadd(self, key: str, *args: Any) -> bool:
        return self.basic_action("SADD", key, *args)

    def srem(self, key: str, *args: Any) -> bool:
        return self.basic_action("SREM", key, *args)

    def delete(self, key: str) -> bool:
        return self.basic_action("DEL", key)

    def get_array(self, key: str) -> dict[str, str]:
        """Return the fields of a hash, or an empty dict on failure."""
        try:
            reply = self._execute("HGETALL", (key,))
        except RedisCommandError as exc:
            self._log.error("E: %s || HGETALL %s", exc, key)
            return {}
        if reply is None:
            return {}
        if isinstance(reply, Mapping):
            return {_text(k): _text(v) for k, v in reply.items()}
        items = [_text(item) for item in reply]
        return dict(zip(items[0::2], items[1::2]))

    def get_vector(self, key: str) -> list[str]:
        """Return the members of a set, or an empty list on failure."""
        try:
            reply = self._execute("SMEMBERS", (key,))
        except RedisCommandError as exc:
            self._log.error("E: %s || SMEMBERS %s", exc, key)
            return []
        if reply is None:
            return []
        return [_text(item) for item in reply]

    def publish(self, channel: str, message: str) -> bool:
        return self.basic_action("PUBLISH", channel, message)