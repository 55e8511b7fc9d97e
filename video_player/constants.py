"""All constants for the Video Player."""

from __future__ import annotations

from typing import Final

LOGGER_NAME: Final[str] = "video_player"
VERBOSE_LOG_LEVEL: Final[int] = 5

# timing defaults (seconds)
DEFAULT_HIDE_DELAY: Final[float] = 3.0
DEFAULT_FADE_DURATION: Final[float] = 0.3
DEFAULT_FULLSCREEN_SETTLE_DELAY: Final[float] = 0.5
DEFAULT_TICK_INTERVAL: Final[float] = 0.1

DEFAULT_ALLOWED_SCHEMES: Final[tuple[str, ...]] = ("http", "https")

# controls are only interactive above this opacity
CONTROLS_INTERACTIVE_OPACITY: Final[float] = 0.5

# config keys as used in the settings file
CONF_HIDE_DELAY: Final[str] = "hide_delay"
CONF_FADE_DURATION: Final[str] = "fade_duration"
CONF_FULLSCREEN_SETTLE_DELAY: Final[str] = "fullscreen_settle_delay"
CONF_TICK_INTERVAL: Final[str] = "tick_interval"
CONF_ALLOWED_SCHEMES: Final[str] = "allowed_schemes"

# snapshot attribute
ATTR_POSITION: Final[str] = "position"

# tracked task/timer ids
TASK_ID_HIDE_CONTROLS: Final[str] = "hide_controls"
TASK_ID_FULLSCREEN_SETTLE: Final[str] = "fullscreen_settle"
TASK_ID_SEEK: Final[str] = "seek"
TASK_ID_END_OF_MEDIA: Final[str] = "end_of_media"
