"""Bot configuration loaded from a JSON file."""

from __future__ import annotations

import json
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = "config.json"


@dataclass
class BotConfig:
    """Settings read from the ``bot`` section of the configuration file."""

    is_production: bool = False
    logging_address: str = ""
    logging_port: str = ""
    redis_address: str = "127.0.0.1"


def _string_setting(section: dict[str, Any], key: str) -> str | None:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"config value {key!r} must be a string")
    return value


def load_config(path: str | PathLike[str] = DEFAULT_CONFIG_PATH) -> BotConfig:
    """Read the configuration file at ``path``.

    Missing or null settings keep their defaults. Raises FileNotFoundError
    when the file does not exist, ValueError when it is not valid JSON and
    TypeError when a setting has the wrong type.
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise FileNotFoundError(f"{config_path} does not exist")
    document = json.loads(config_path.read_text(encoding="utf-8"))
    if not isinstance(document, dict):
        raise TypeError("configuration must be a JSON object")

    config = BotConfig()
    section = document.get("bot")
    if section is None:
        return config
    if not isinstance(section, dict):
        raise TypeError("config section 'bot' must be an object")

    production = section.get("production")
    if production is not None:
        if not isinstance(production, bool):
            raise TypeError("config value 'production' must be a boolean")
        config.is_production = production

    for key, attribute in (
        ("logging-address", "logging_address"),
        ("logging-port", "logging_port"),
        ("redis-address", "redis_address"),
    ):
        value = _string_setting(section, key)
        if value is not None:
            setattr(config, attribute, value)
    return config