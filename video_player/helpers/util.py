"""Various helpers and utilities."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import Any
from urllib.parse import urlparse

from video_player.constants import LOGGER_NAME
from video_player.errors import InvalidLocatorError

LOGGER = logging.getLogger(f"{LOGGER_NAME}.helpers.util")


def format_time(seconds: float) -> str:
    """Format (fractional) seconds as MM:SS, or HH:MM:SS when at least an hour."""
    if not math.isfinite(seconds) or seconds < 0:
        return "00:00"
    total_seconds = int(seconds)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def is_valid_duration(value: Any) -> bool:
    """Return True if the given value is a usable (numeric, finite, positive) duration."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value) and value > 0


def clamp_position(position: float, duration: float) -> float:
    """
    Clamp a position (in seconds) to the valid range of the media.

    A duration of 0 means the duration is (still) unknown,
    in which case only negative values are corrected.
    """
    position = max(0.0, float(position))
    if duration > 0:
        return min(position, duration)
    return position


def validate_locator(locator: str, allowed_schemes: Iterable[str]) -> str:
    """
    Validate a media locator (url) before handing it to the media engine.

    :param locator: The url/locator of the media to load.
    :param allowed_schemes: The url schemes that are accepted.
    :return: The (stripped) locator.
    :raises InvalidLocatorError: If the locator is empty, malformed or uses
        a scheme that is not allowed.
    """
    locator = (locator or "").strip()
    if not locator:
        msg = "No media locator provided"
        raise InvalidLocatorError(msg)
    parsed = urlparse(locator)
    scheme = parsed.scheme.lower()
    allowed = {x.lower() for x in allowed_schemes}
    if scheme not in allowed:
        LOGGER.debug("Locator rejected (invalid scheme): %s", locator)
        msg = f"Unsupported locator scheme '{scheme or '<none>'}' for {locator}"
        raise InvalidLocatorError(msg)
    if scheme in ("http", "https") and not parsed.hostname:
        LOGGER.debug("Locator rejected (no hostname): %s", locator)
        msg = f"Locator {locator} has no hostname"
        raise InvalidLocatorError(msg)
    return locator


def get_changed_values(
    old: dict[str, Any],
    new: dict[str, Any],
) -> dict[str, tuple[Any, Any]]:
    """Return a dict of changed keys with their (old, new) value pairs."""
    changed: dict[str, tuple[Any, Any]] = {}
    for key in old.keys() | new.keys():
        old_value = old.get(key)
        new_value = new.get(key)
        if old_value != new_value:
            changed[key] = (old_value, new_value)
    return changed
