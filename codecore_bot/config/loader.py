"""Configuration loading utilities."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from ..errors.internal import ConfigError
from .model import BotConfig

CONFIG_ENV_VAR = "CODECORE_CONF_FILE"
DEFAULT_CONFIG_FILE = "codecore_bot.json"


def default_config_path() -> str:
    return os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE)


def load_config(path: str | os.PathLike[str] | None = None) -> BotConfig:
    """Load and validate the bot configuration from a JSON file.

    Args:
        path: Config file path; defaults to ``$CODECORE_CONF_FILE``.

    Returns:
        A validated BotConfig.

    Raises:
        ConfigError: If the file is missing, unreadable, not JSON, or fails
            validation.
    """
    config_path = Path(path if path is not None else default_config_path())
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigError(
            f"Config file not found: {config_path}", data={"path": str(config_path)}
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Failed to read config file {config_path}: {e}",
            data={"path": str(config_path)},
        ) from e

    try:
        raw = json.loads(raw_text)
    except json.JSONDecodeError as e:
        raise ConfigError(
            f"Config file {config_path} is not valid JSON: {e}",
            data={"path": str(config_path)},
        ) from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {config_path} must contain a JSON object")

    try:
        config = BotConfig.model_validate(raw)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ConfigError(
            f"Invalid configuration in {config_path}: {fields}",
            data={"path": str(config_path), "errors": e.error_count()},
        ) from e

    logging.info(
        f"✅ Configuration loaded path={config_path} channel={config.channel_name} bot={config.bot_name} grant={config.permissions}"
    )
    return config
