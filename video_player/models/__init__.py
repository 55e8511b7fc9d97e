"""Models used by the Video Player."""

from __future__ import annotations

from .enums import (
    EngineEventType,
    EngineStatus,
    EventType,
    OrientationLock,
    PlaybackSpeed,
    PlaybackState,
)
from .event import EngineEvent, PlayerEvent
from .media import VideoItem
from .media_engine import EngineEventCallback, EngineHandle, MediaEngineAdapter
from .orientation import NoopOrientationController, OrientationController
from .session import ControlsVisibility, PlayerSession, PlayerSnapshot

__all__ = [
    "ControlsVisibility",
    "EngineEvent",
    "EngineEventCallback",
    "EngineEventType",
    "EngineHandle",
    "EngineStatus",
    "EventType",
    "MediaEngineAdapter",
    "NoopOrientationController",
    "OrientationController",
    "OrientationLock",
    "PlaybackSpeed",
    "PlaybackState",
    "PlayerEvent",
    "PlayerSession",
    "PlayerSnapshot",
    "VideoItem",
]
