"""Demo media engine implementation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from video_player.constants import DEFAULT_TICK_INTERVAL, LOGGER_NAME, VERBOSE_LOG_LEVEL
from video_player.errors import EngineCreationFailure, EngineRuntimeFailure
from video_player.helpers.tasks import TaskTracker
from video_player.helpers.util import clamp_position, is_valid_duration
from video_player.models.enums import EngineStatus
from video_player.models.event import EngineEvent
from video_player.models.media_engine import EngineEventCallback, EngineHandle, MediaEngineAdapter

if TYPE_CHECKING:
    from video_player.config import PlayerConfig

DEFAULT_DEMO_DURATION = 60.0
DEFAULT_LOAD_DELAY = 0.05
DEFAULT_SEEK_LATENCY = 0.02


@dataclass
class DemoMedia:
    """Simulated media attached to a handle."""

    handle: EngineHandle
    duration: float
    position: float = 0.0
    rate: float = 0.0
    muted: bool = False
    playing: bool = False
    listeners: set[EngineEventCallback] = field(default_factory=set)
    pending_seek: asyncio.Future[bool] | None = None


class DemoMediaEngine(MediaEngineAdapter):
    """
    Example/demo media engine.

    All (simulated) activity runs as tasks on the event loop the handle was
    created on, so events are delivered on that loop as well.
    """

    def __init__(
        self,
        duration: float = DEFAULT_DEMO_DURATION,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        load_delay: float = DEFAULT_LOAD_DELAY,
        seek_latency: float = DEFAULT_SEEK_LATENCY,
        fail_load: str | None = None,
    ) -> None:
        """
        Initialize the demo engine.

        :param duration: The duration reported for all media, use NaN to simulate
            media with an indefinite duration.
        :param tick_interval: Interval (in seconds) of the position ticks while playing.
        :param load_delay: Delay (in seconds) before the duration resolves.
        :param seek_latency: Delay (in seconds) before a seek completes.
        :param fail_load: If set, creating a handle fails with this reason.
        """
        self.logger = logging.getLogger(LOGGER_NAME).getChild("demo_engine")
        self.duration = duration
        self.tick_interval = tick_interval
        self.load_delay = load_delay
        self.seek_latency = seek_latency
        self.fail_load = fail_load
        self._media: dict[str, DemoMedia] = {}
        self._tasks: TaskTracker | None = None

    @classmethod
    def from_config(cls, config: PlayerConfig, **kwargs: Any) -> DemoMediaEngine:
        """Create a demo engine that ticks at the interval of the player config."""
        return cls(tick_interval=config.tick_interval, **kwargs)

    @property
    def handles(self) -> list[EngineHandle]:
        """Return all handles that are currently loaded."""
        return [x.handle for x in self._media.values()]

    def get_media(self, handle: EngineHandle) -> DemoMedia:
        """Return the simulated media of the handle."""
        if not (media := self._media.get(handle.handle_id)):
            msg = f"Unknown handle {handle.handle_id}"
            raise EngineRuntimeFailure(msg)
        return media

    async def create_handle(self, locator: str) -> EngineHandle:
        """Create a playback handle and start resolving the duration."""
        if self.fail_load:
            raise EngineCreationFailure(self.fail_load)
        if self._tasks is None:
            self._tasks = TaskTracker(asyncio.get_running_loop(), self.logger)
        handle = EngineHandle(locator=locator)
        self._media[handle.handle_id] = DemoMedia(handle=handle, duration=self.duration)
        self.logger.debug("Created handle %s for %s", handle.handle_id, locator)
        # a real engine would now open the asset and read its metadata
        self._tasks.create_task(self._resolve_duration, handle, task_id=f"load_{handle.handle_id}")
        return handle

    async def play(self, handle: EngineHandle) -> None:
        """Start/resume playback."""
        media = self.get_media(handle)
        media.playing = True
        if media.rate == 0:
            media.rate = 1.0
        self.logger.debug("Playing %s at rate %s", handle.handle_id, media.rate)
        self._start_ticks(media)

    async def pause(self, handle: EngineHandle) -> None:
        """Pause playback."""
        media = self.get_media(handle)
        media.playing = False
        media.rate = 0.0
        self._stop_ticks(media)

    async def seek(self, handle: EngineHandle, target: float) -> bool:
        """Seek to the target, a newer seek interrupts this one."""
        media = self.get_media(handle)
        if media.pending_seek is not None and not media.pending_seek.done():
            media.pending_seek.set_result(False)
        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()
        media.pending_seek = future
        await asyncio.sleep(self.seek_latency)
        if future.done():
            # interrupted by a newer seek
            return future.result()
        duration = media.duration if is_valid_duration(media.duration) else 0.0
        media.position = clamp_position(target, duration)
        future.set_result(True)
        return True

    async def set_rate(self, handle: EngineHandle, rate: float) -> None:
        """Set the playback rate (0 means paused)."""
        media = self.get_media(handle)
        media.rate = rate
        if rate == 0:
            media.playing = False
            self._stop_ticks(media)

    async def set_muted(self, handle: EngineHandle, muted: bool) -> None:
        """Mute/unmute the (simulated) audio output."""
        self.get_media(handle).muted = muted

    async def release_handle(self, handle: EngineHandle) -> None:
        """Release the handle and stop all its activity."""
        media = self._media.pop(handle.handle_id, None)
        if media is None:
            return
        media.listeners.clear()
        if media.pending_seek is not None and not media.pending_seek.done():
            media.pending_seek.set_result(False)
        if self._tasks is not None:
            self._tasks.cancel_task(f"load_{handle.handle_id}")
        self._stop_ticks(media)
        self.logger.debug("Released handle %s", handle.handle_id)

    def subscribe(
        self, handle: EngineHandle, callback: EngineEventCallback
    ) -> Callable[[], None]:
        """Subscribe to the events of the given handle."""
        media = self.get_media(handle)
        media.listeners.add(callback)

        def remove_listener() -> None:
            media.listeners.discard(callback)

        return remove_listener

    def fail(self, handle: EngineHandle, reason: str) -> None:
        """Simulate a runtime failure of the engine for the given handle."""
        media = self.get_media(handle)
        media.playing = False
        self._stop_ticks(media)
        self._emit(media, EngineEvent.status_changed(EngineStatus.FAILED, reason))

    async def close(self) -> None:
        """Release all handles."""
        for handle in self.handles:
            await self.release_handle(handle)
        if self._tasks is not None:
            self._tasks.cancel_all()

    async def _resolve_duration(self, handle: EngineHandle) -> None:
        await asyncio.sleep(self.load_delay)
        if (media := self._media.get(handle.handle_id)) is None:
            return
        self._emit(media, EngineEvent.status_changed(EngineStatus.READY))
        self._emit(media, EngineEvent.duration_resolved(media.duration))

    async def _tick_loop(self, handle: EngineHandle) -> None:
        """Advance the position while playing and report it."""
        while (media := self._media.get(handle.handle_id)) and media.playing:
            await asyncio.sleep(self.tick_interval)
            if not media.playing or handle.handle_id not in self._media:
                break
            media.position += self.tick_interval * media.rate
            if is_valid_duration(media.duration) and media.position >= media.duration:
                media.position = media.duration
                media.playing = False
                self._emit(media, EngineEvent.position_tick(media.position))
                self._emit(media, EngineEvent.end_of_media())
                break
            self.logger.log(
                VERBOSE_LOG_LEVEL, "Position of %s: %s", handle.handle_id, media.position
            )
            self._emit(media, EngineEvent.position_tick(media.position))

    def _start_ticks(self, media: DemoMedia) -> None:
        if self._tasks is None:
            return
        self._tasks.create_task(self._tick_loop, media.handle, task_id=self._tick_task_id(media))

    def _stop_ticks(self, media: DemoMedia) -> None:
        if self._tasks is not None:
            self._tasks.cancel_task(self._tick_task_id(media))

    @staticmethod
    def _tick_task_id(media: DemoMedia) -> str:
        return f"ticks_{media.handle.handle_id}"

    def _emit(self, media: DemoMedia, event: EngineEvent) -> None:
        for callback in list(media.listeners):
            callback(event)

    def __repr__(self) -> str:
        """Return the representation."""
        return f"<DemoMediaEngine handles={len(self._media)}>"

