"""In-memory history of recently seen chat messages."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from typing import Any

DISCORD_EPOCH_MS = 1420070400000
DEFAULT_MAX_AGE_MINUTES = 60


def snowflake_time(snowflake: int) -> int:
    """Creation time of a snowflake id, in milliseconds since the Unix epoch."""
    return (snowflake >> 22) + DISCORD_EPOCH_MS


class MessageHistory:
    """Thread-safe store of live messages and of those seen being deleted."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._messages: dict[int, Any] = {}
        self._deleted: dict[int, Any] = {}

    def insert(self, message_id: int, message: Any) -> bool:
        """Store a message unless one with the same id is already kept.

        Returns True when the message was added.
        """
        with self._lock:
            if message_id in self._messages:
                return False
            self._messages[message_id] = message
            return True

    def update(self, message_id: int, message: Any, has_user: bool) -> None:
        """Apply an edit to a stored message, storing it if it is unknown.

        An edit that carries an author replaces the message. An embed-only
        edit copies the new embeds over, or replaces the message when it
        brings no embeds.
        """
        with self._lock:
            existing = self._messages.get(message_id)
            if existing is None:
                self._messages[message_id] = message
                return
            embeds = getattr(message, "embeds", None)
            if has_user or not embeds:
                self._messages[message_id] = message
            else:
                existing.embeds = embeds

    def delete(self, message_id: int) -> Any | None:
        """Move a message to the deleted history and return it.

        Returns None when the message is not known.
        """
        with self._lock:
            return self._move_to_deleted(message_id)

    def delete_bulk(self, message_ids: Iterable[int]) -> list[Any]:
        """Delete several messages, stopping at the first unknown id.

        Returns the messages that were moved, in order.
        """
        moved: list[Any] = []
        with self._lock:
            for message_id in message_ids:
                message = self._move_to_deleted(message_id)
                if message is None:
                    break
                moved.append(message)
        return moved

    def _move_to_deleted(self, message_id: int) -> Any | None:
        message = self._messages.pop(message_id, None)
        if message is None:
            return None
        self._deleted.setdefault(message_id, message)
        return message

    def prune(self, now_ms: int, max_age_minutes: int = DEFAULT_MAX_AGE_MINUTES) -> int:
        """Drop live messages older than ``max_age_minutes``.

        Age is taken from the message id's timestamp. Returns how many
        messages were dropped.
        """
        limit_ms = max_age_minutes * 60_000
        with self._lock:
            stale = [
                message_id
                for message_id in self._messages
                if now_ms - snowflake_time(message_id) > limit_ms
            ]
            for message_id in stale:
                del self._messages[message_id]
        return len(stale)

    def clear(self) -> None:
        """Forget every live message."""
        with self._lock:
            self._messages.clear()

    def get(self, message_id: int) -> Any | None:
        with self._lock:
            return self._messages.get(message_id)

    def get_deleted(self, message_id: int) -> Any | None:
        with self._lock:
            return self._deleted.get(message_id)

    def __contains__(self, message_id: object) -> bool:
        with self._lock:
            return message_id in self._messages

    def __iter__(self) -> Iterator[int]:
        with self._lock:
            return iter(sorted(self._messages))

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)