"""
Base class/model for a MediaEngine that is consumed by the Video Player.

The media engine is the sole boundary to actual media I/O:
it owns decoding, rendering and network retrieval of the media.
The player never inspects (or retries) those internals, it only issues
the imperative commands below and consumes the events the engine delivers.
Any implementation of this interface is interchangeable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field

import shortuuid

from .event import EngineEvent

EngineEventCallback = Callable[[EngineEvent], None]


@dataclass(frozen=True)
class EngineHandle:
    """Opaque handle to media loaded in a media engine."""

    locator: str
    handle_id: str = field(default_factory=lambda: shortuuid.random(12))


class MediaEngineAdapter(ABC):
    """
    Base representation of a media engine.

    Engine implementations should inherit from this base model.
    Events may be delivered from any thread, the player takes care of
    marshaling them onto its own event loop.
    """

    @abstractmethod
    async def create_handle(self, locator: str) -> EngineHandle:
        """
        Create a playback handle for the given locator.

        :param locator: The url/locator of the media to load.
        :raises EngineCreationFailure: If the locator is invalid or unreachable.
        """

    @abstractmethod
    async def play(self, handle: EngineHandle) -> None:
        """Start/resume playback."""

    @abstractmethod
    async def pause(self, handle: EngineHandle) -> None:
        """Pause playback."""

    @abstractmethod
    async def seek(self, handle: EngineHandle, target: float) -> bool:
        """
        Seek to the given position (in seconds).

        Returns (once the seek settled) whether the seek completed,
        False if it was interrupted (e.g. by another seek).
        """

    @abstractmethod
    async def set_rate(self, handle: EngineHandle, rate: float) -> None:
        """Set the effective playback rate (0 means paused)."""

    @abstractmethod
    async def set_muted(self, handle: EngineHandle, muted: bool) -> None:
        """Mute/unmute the audio output."""

    @abstractmethod
    async def release_handle(self, handle: EngineHandle) -> None:
        """Release the handle and all engine resources attached to it."""

    @abstractmethod
    def subscribe(
        self, handle: EngineHandle, callback: EngineEventCallback
    ) -> Callable[[], None]:
        """
        Subscribe to the events of the given handle.

        Events: periodic position ticks, end-of-media, status changes (ready/failed)
        and duration-resolved. Returns function to remove the listener.
        """
