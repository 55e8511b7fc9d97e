"""All enums used by the Video Player models."""

from __future__ import annotations

from enum import Enum, StrEnum


class PlaybackState(StrEnum):
    """Enum for the (playback) state of the player."""

    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    FAILED = "failed"


class PlaybackSpeed(float, Enum):
    """Enum with the supported playback speeds (rate multipliers)."""

    SLOW = 0.5
    NORMAL = 1.0
    FAST = 2.0

    @property
    def label(self) -> str:
        """Return the display label for this speed."""
        return {
            PlaybackSpeed.SLOW: "0.5x",
            PlaybackSpeed.NORMAL: "1x",
            PlaybackSpeed.FAST: "2x",
        }[self]


class EventType(StrEnum):
    """Enum with the events the player signals to its subscribers."""

    STATE_UPDATED = "state_updated"
    CONTROLS_UPDATED = "controls_updated"
    ORIENTATION_UPDATED = "orientation_updated"


class EngineEventType(StrEnum):
    """Enum with the events a media engine delivers for a handle."""

    POSITION_TICK = "position_tick"
    END_OF_MEDIA = "end_of_media"
    STATUS_CHANGED = "status_changed"
    DURATION_RESOLVED = "duration_resolved"


class EngineStatus(StrEnum):
    """Enum with the status values of a media engine handle."""

    READY = "ready"
    FAILED = "failed"


class OrientationLock(StrEnum):
    """Enum with the device orientations the player can lock to."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"
