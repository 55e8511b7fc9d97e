"""Configuration of the Video Player."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields
from typing import Any

import aiofiles
from mashumaro import DataClassDictMixin
from mashumaro.exceptions import InvalidFieldValue, MissingField

from video_player.constants import (
    CONF_ALLOWED_SCHEMES,
    CONF_FADE_DURATION,
    CONF_FULLSCREEN_SETTLE_DELAY,
    CONF_HIDE_DELAY,
    CONF_TICK_INTERVAL,
    DEFAULT_ALLOWED_SCHEMES,
    DEFAULT_FADE_DURATION,
    DEFAULT_FULLSCREEN_SETTLE_DELAY,
    DEFAULT_HIDE_DELAY,
    DEFAULT_TICK_INTERVAL,
    LOGGER_NAME,
)
from video_player.errors import InvalidConfigError

LOGGER = logging.getLogger(f"{LOGGER_NAME}.config")


@dataclass(frozen=True)
class PlayerConfig(DataClassDictMixin):
    """Timing and validation settings for the player."""

    hide_delay: float = DEFAULT_HIDE_DELAY
    fade_duration: float = DEFAULT_FADE_DURATION
    fullscreen_settle_delay: float = DEFAULT_FULLSCREEN_SETTLE_DELAY
    tick_interval: float = DEFAULT_TICK_INTERVAL
    allowed_schemes: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_SCHEMES))

    def __post_init__(self) -> None:
        """Validate the config values."""
        for key in (CONF_HIDE_DELAY, CONF_FADE_DURATION, CONF_FULLSCREEN_SETTLE_DELAY):
            if getattr(self, key) < 0:
                msg = f"Invalid value for {key}: must not be negative"
                raise InvalidConfigError(msg)
        if self.tick_interval <= 0:
            msg = f"Invalid value for {CONF_TICK_INTERVAL}: must be greater than 0"
            raise InvalidConfigError(msg)
        if not self.allowed_schemes:
            msg = f"Invalid value for {CONF_ALLOWED_SCHEMES}: at least one scheme is required"
            raise InvalidConfigError(msg)

    @classmethod
    def parse(cls, data: dict[str, Any]) -> PlayerConfig:
        """Parse a config from a (settings) dict, ignoring unknown keys."""
        known_keys = {x.name for x in fields(cls)}
        if unknown := set(data) - known_keys:
            LOGGER.debug("Ignoring unknown config key(s): %s", ", ".join(sorted(unknown)))
        try:
            return cls.from_dict({key: value for key, value in data.items() if key in known_keys})
        except (InvalidFieldValue, MissingField, TypeError, ValueError) as err:
            raise InvalidConfigError(str(err)) from err


async def load_config(path: str) -> PlayerConfig:
    """
    Load the player config from a (json) settings file.

    :param path: Path to the settings file. A missing file results in the default config.
    :raises InvalidConfigError: If the file can not be parsed or holds invalid values.
    """
    if not os.path.isfile(path):
        LOGGER.debug("Settings file %s does not exist, using defaults", path)
        return PlayerConfig()
    async with aiofiles.open(path, encoding="utf-8") as _file:
        raw = await _file.read()
    try:
        data = json.loads(raw) if raw.strip() else {}
    except json.JSONDecodeError as err:
        msg = f"Unable to parse settings file {path}: {err}"
        raise InvalidConfigError(msg) from err
    if not isinstance(data, dict):
        msg = f"Settings file {path} does not contain a json object"
        raise InvalidConfigError(msg)
    config = PlayerConfig.parse(data)
    LOGGER.debug("Loaded config from %s: %s", path, config.to_dict())
    return config
