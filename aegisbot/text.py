"""Text helpers: command tokenizing and mention parsing."""

from __future__ import annotations

import re
import string
from collections.abc import Callable, Mapping
from enum import Enum

_UINT64 = 1 << 64
_DIGITS = re.compile(r"[0-9]*")
_C_WHITESPACE = " \t\n\v\f\r"


class MentionType(Enum):
    """Kind of Discord mention recognised by :func:`analyze_mention`."""

    FAIL = "fail"
    USER = "user"
    NICKNAME = "nickname"
    ROLE = "role"
    CHANNEL = "channel"
    EMOJI = "emoji"
    ANIMATED_EMOJI = "animated_emoji"


def _stoull(text: str) -> int:
    """Parse a leading unsigned 64-bit integer, ignoring trailing characters."""
    rest = text.lstrip(_C_WHITESPACE)
    negative = False
    if rest[:1] in ("+", "-"):
        negative = rest[0] == "-"
        rest = rest[1:]
    digits = _DIGITS.match(rest).group()
    if not digits:
        raise ValueError(f"no number in {text!r}")
    value = int(digits)
    if value >= _UINT64:
        raise ValueError(f"number out of range in {text!r}")
    return (-value) % _UINT64 if negative else value


def _find(text: str, start: int, predicate: Callable[[str], bool]) -> int | None:
    """Index of the first character at or after ``start`` matching ``predicate``."""
    return next(
        (index for index in range(start, len(text)) if predicate(text[index])),
        None,
    )


def _char(text: str, index: int) -> str:
    return text[index] if index < len(text) else ""


def replace_all(text: str, old: str, new: str) -> str:
    """Replace every occurrence of ``old`` with ``new``."""
    if not old:
        raise ValueError("the text to replace must not be empty")
    return text.replace(old, new)


def lineize(text: str) -> list[str]:
    """Split text into its non-empty lines."""
    return [line for line in text.split("\n") if line]


def tokenize(text: str, delim: str = "") -> list[str]:
    """Split text on spaces, newlines and ``delim`` characters.

    A token starting with a double quote runs to the next quote and is
    returned without the quotes; an unmatched quote takes the rest of the
    text, quote included.
    """
    delims = set(" \n" + delim)
    tokens: list[str] = []
    pos = 0
    while True:
        start = _find(text, pos, lambda c: c not in delims)
        if start is None:
            break
        if text[start] == '"':
            end = text.find('"', start + 1)
            if end == -1:
                tokens.append(text[start:])
                break
            tokens.append(text[start + 1:end])
            pos = end + 1
        else:
            end = _find(text, start + 1, lambda c: c in delims)
            if end is None:
                tokens.append(text[start:])
                break
            tokens.append(text[start:end])
            pos = end
    return tokens


def tokenize_one(text: str) -> str:
    """Return the first space-separated or quoted token of ``text``.

    Raises ValueError when a quoted token has no closing quote.
    """
    start = _find(text, 0, lambda c: c != " ")
    if start is None:
        return ""
    if text[start] == '"':
        end = text.find('"', start + 1)
        if end == -1:
            raise ValueError("Invalid parameters. No matching quote found.")
        return text[start + 1:end]
    end = text.find(" ", start + 1)
    return text[start:] if end == -1 else text[start:end]


def analyze_mention(text: str) -> tuple[MentionType, int]:
    """Classify a ``<...>`` mention and extract its id.

    Returns ``(MentionType.FAIL, 0)`` for anything that is not a mention.
    """
    fail = (MentionType.FAIL, 0)
    if not text or not (text.startswith("<") and text.endswith(">")) or len(text) < 2:
        return fail
    second, third = _char(text, 1), _char(text, 2)
    inner = text[:-1]
    try:
        if second == "@" and third == "!":
            return MentionType.NICKNAME, _stoull(inner[3:])
        if second == "@" and third == "&":
            return MentionType.ROLE, _stoull(inner[3:])
        if second == "@":
            return MentionType.USER, _stoull(inner[2:])
        if second == "#":
            return MentionType.CHANNEL, _stoull(inner[2:])
        if second == ":":
            return MentionType.EMOJI, _stoull(inner[text.rfind(":") + 1:])
        if second == "a" and third == ":":
            return MentionType.ANIMATED_EMOJI, _stoull(inner[text.rfind(":") + 1:])
    except ValueError:
        return fail
    return fail


def parse_snowflake(name: str, members: Mapping[int, str]) -> int:
    """Resolve a mention, a numeric id or a ``name#discriminator`` to an id.

    ``members`` maps member ids to full names. Returns 0 when nothing matches.
    """
    if not name:
        return 0
    try:
        if name[0] == "<":
            if ">" not in name:
                return 0
            if _char(name, 2) in ("!", "&"):
                return _stoull(name[3:])
            return _stoull(name[2:])
        if name[0] in string.digits:
            return _stoull(name)
    except ValueError:
        return 0
    if "#" in name:
        return next(
            (member_id for member_id, full_name in members.items() if full_name == name),
            0,
        )
    return 0


def to_bool(value: str | None) -> bool:
    """Interpret a stored flag such as ``"1"`` or ``"true"``."""
    if value is None:
        return False
    return value.strip().lower() in ("1", "true")