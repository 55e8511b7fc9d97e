"""
Models for the playback session and the (snapshotted) state exposed to the presentation layer.

The PlayerSession is the mutable state aggregate that is exclusively owned
(and mutated) by the PlaybackController. The presentation layer never gets
access to the session itself: it receives immutable PlayerSnapshot objects
whenever the state changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import shortuuid
from mashumaro import DataClassDictMixin

from video_player.constants import CONTROLS_INTERACTIVE_OPACITY
from video_player.helpers.util import format_time

from .enums import PlaybackSpeed, PlaybackState

if TYPE_CHECKING:
    from .media_engine import EngineHandle


@dataclass
class PlayerSession:
    """Mutable state of a single playback instance."""

    locator: str | None = None
    state: PlaybackState = PlaybackState.IDLE
    position: float = 0.0
    # 0 means unknown
    duration: float = 0.0
    is_muted: bool = False
    speed: PlaybackSpeed = PlaybackSpeed.NORMAL
    is_fullscreen: bool = False
    is_seeking: bool = False
    pending_seek_target: float | None = None
    error: str | None = None
    handle: EngineHandle | None = None
    session_id: str = field(default_factory=lambda: shortuuid.random(8).lower())

    @property
    def display_position(self) -> float:
        """
        Return the position that may be shown to the user.

        While seeking, this is the pending seek target (if any)
        or else the last confirmed position, never a raw engine tick.
        """
        if self.is_seeking and self.pending_seek_target is not None:
            return self.pending_seek_target
        return self.position

    def snapshot(self) -> PlayerSnapshot:
        """Return an immutable snapshot of the current session state."""
        return PlayerSnapshot(
            state=self.state,
            position=self.display_position,
            duration=self.duration,
            is_muted=self.is_muted,
            speed=self.speed,
            is_fullscreen=self.is_fullscreen,
            is_seeking=self.is_seeking,
            error=self.error,
            locator=self.locator,
        )


@dataclass(frozen=True)
class PlayerSnapshot(DataClassDictMixin):
    """Immutable representation of the player state, as sent to observers."""

    state: PlaybackState
    position: float
    duration: float
    is_muted: bool
    speed: PlaybackSpeed
    is_fullscreen: bool
    is_seeking: bool
    error: str | None = None
    locator: str | None = None

    @property
    def is_playing(self) -> bool:
        """Return True if the player is currently playing."""
        return self.state == PlaybackState.PLAYING

    @property
    def progress(self) -> float:
        """Return the playback progress (0.0 - 1.0), 0 if the duration is unknown."""
        if self.duration <= 0:
            return 0.0
        return min(1.0, max(0.0, self.position / self.duration))

    @property
    def formatted_position(self) -> str:
        """Return the position formatted as (HH:)MM:SS."""
        return format_time(self.position)

    @property
    def formatted_duration(self) -> str:
        """Return the duration formatted as (HH:)MM:SS."""
        return format_time(self.duration)


@dataclass(frozen=True)
class ControlsVisibility(DataClassDictMixin):
    """Visibility of the on-screen playback controls."""

    opacity: float
    animated: bool = False
    transition_duration: float = 0.0

    @property
    def interactive(self) -> bool:
        """Return if the controls accept user interaction (not mostly hidden)."""
        return self.opacity > CONTROLS_INTERACTIVE_OPACITY
