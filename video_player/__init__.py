"""Video Player: playback controller for a single video."""

from __future__ import annotations

import logging

from .config import PlayerConfig, load_config
from .constants import VERBOSE_LOG_LEVEL
from .controllers.playback import PlaybackController
from .errors import (
    EngineCreationFailure,
    EngineRuntimeFailure,
    InvalidCommand,
    InvalidConfigError,
    InvalidLocatorError,
    VideoPlayerError,
)
from .player import VideoPlayer

logging.addLevelName(VERBOSE_LOG_LEVEL, "VERBOSE")

__all__ = [
    "EngineCreationFailure",
    "EngineRuntimeFailure",
    "InvalidCommand",
    "InvalidConfigError",
    "InvalidLocatorError",
    "PlaybackController",
    "PlayerConfig",
    "VideoPlayer",
    "VideoPlayerError",
    "load_config",
]
