"""Models for the events sent by media engines and by the player."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .enums import EngineEventType, EngineStatus, EventType


@dataclass(frozen=True)
class EngineEvent:
    """Event delivered by a media engine for a specific handle."""

    type: EngineEventType
    position: float | None = None
    duration: float | None = None
    status: EngineStatus | None = None
    reason: str | None = None

    @classmethod
    def position_tick(cls, position: float) -> EngineEvent:
        """Create a (periodic) position tick event."""
        return cls(type=EngineEventType.POSITION_TICK, position=position)

    @classmethod
    def end_of_media(cls) -> EngineEvent:
        """Create an end-of-media event."""
        return cls(type=EngineEventType.END_OF_MEDIA)

    @classmethod
    def status_changed(cls, status: EngineStatus, reason: str | None = None) -> EngineEvent:
        """Create a status changed event."""
        return cls(type=EngineEventType.STATUS_CHANGED, status=status, reason=reason)

    @classmethod
    def duration_resolved(cls, duration: float) -> EngineEvent:
        """Create a duration resolved event."""
        return cls(type=EngineEventType.DURATION_RESOLVED, duration=duration)


@dataclass(frozen=True)
class PlayerEvent:
    """Event signaled by the player to its subscribers."""

    event: EventType
    data: Any = None
