"""Model for the (device) orientation control consumed by the Video Player."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from video_player.constants import LOGGER_NAME

from .enums import OrientationLock


class OrientationController(ABC):
    """Base representation of the system api to lock the device orientation."""

    @abstractmethod
    def request_lock(self, lock: OrientationLock) -> None:
        """Request the device orientation to be locked (and rotated) to the given orientation."""


class NoopOrientationController(OrientationController):
    """Orientation control for hosts without a rotatable screen."""

    def __init__(self) -> None:
        """Initialize."""
        self.logger = logging.getLogger(LOGGER_NAME).getChild("orientation")
        self.current_lock = OrientationLock.PORTRAIT

    def request_lock(self, lock: OrientationLock) -> None:
        """Remember (and log) the requested orientation lock."""
        self.logger.debug("Orientation lock requested: %s", lock.value)
        self.current_lock = lock
