"""Helpers for testing the Video Player."""

import asyncio
from collections.abc import Callable

from video_player.controllers.playback import PlaybackController
from video_player.models.enums import EngineStatus
from video_player.models.event import EngineEvent, PlayerEvent
from video_player.models.media_engine import EngineEventCallback, EngineHandle, MediaEngineAdapter

TEST_URL = "https://example.com/video.mp4"


class FakeMediaEngine(MediaEngineAdapter):
    """Scripted media engine that records all calls made by the player.

    Seeks complete immediately unless `auto_complete_seeks` is disabled,
    in which case they wait until resolved with `complete_seek`.
    """

    def __init__(self) -> None:
        """Initialize."""
        self.calls: list[tuple[str, tuple[object, ...]]] = []
        self.handles: list[EngineHandle] = []
        self.released: list[EngineHandle] = []
        self.listeners: dict[str, set[EngineEventCallback]] = {}
        self.pending_seeks: list[tuple[float, asyncio.Future[bool]]] = []
        self.auto_complete_seeks = True
        self.create_error: Exception | None = None
        self.create_gate: asyncio.Event | None = None
        self.fail_on: set[str] = set()
        self.rate = 0.0
        self.muted = False
        self.playing = False

    @property
    def handle(self) -> EngineHandle:
        """Return the most recently created handle."""
        return self.handles[-1]

    def call_names(self) -> list[str]:
        """Return the names of all engine calls, in order."""
        return [name for name, _ in self.calls]

    def _record(self, name: str, *args: object) -> None:
        self.calls.append((name, args))
        if name in self.fail_on:
            msg = f"{name} exploded"
            raise RuntimeError(msg)

    async def create_handle(self, locator: str) -> EngineHandle:
        """Create a handle (optionally waiting for the gate)."""
        self._record("create_handle", locator)
        if self.create_gate is not None:
            await self.create_gate.wait()
        if self.create_error is not None:
            raise self.create_error
        handle = EngineHandle(locator=locator)
        self.handles.append(handle)
        self.listeners[handle.handle_id] = set()
        return handle

    async def play(self, handle: EngineHandle) -> None:
        """Start playback."""
        self._record("play", handle)
        self.playing = True

    async def pause(self, handle: EngineHandle) -> None:
        """Pause playback."""
        self._record("pause", handle)
        self.playing = False
        self.rate = 0.0

    async def seek(self, handle: EngineHandle, target: float) -> bool:
        """Seek, waits for `complete_seek` if seeks are not auto completed."""
        self._record("seek", handle, target)
        if self.auto_complete_seeks:
            return True
        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()
        self.pending_seeks.append((target, future))
        return await future

    async def set_rate(self, handle: EngineHandle, rate: float) -> None:
        """Set the playback rate."""
        self._record("set_rate", handle, rate)
        self.rate = rate

    async def set_muted(self, handle: EngineHandle, muted: bool) -> None:
        """Set the mute state."""
        self._record("set_muted", handle, muted)
        self.muted = muted

    async def release_handle(self, handle: EngineHandle) -> None:
        """Release the handle."""
        self._record("release_handle", handle)
        self.released.append(handle)
        self.listeners.pop(handle.handle_id, None)

    def subscribe(
        self, handle: EngineHandle, callback: EngineEventCallback
    ) -> Callable[[], None]:
        """Subscribe to the events of the handle."""
        listeners = self.listeners.setdefault(handle.handle_id, set())
        listeners.add(callback)

        def remove_listener() -> None:
            listeners.discard(callback)

        return remove_listener

    def emit(self, event: EngineEvent, handle: EngineHandle | None = None) -> None:
        """Deliver an event for the handle (defaults to the most recent handle)."""
        handle = handle or self.handle
        for callback in list(self.listeners.get(handle.handle_id, ())):
            callback(event)

    def complete_seek(self, index: int, completed: bool = True) -> None:
        """Resolve a pending seek."""
        self.pending_seeks[index][1].set_result(completed)


async def flush() -> None:
    """Let the event loop run all callbacks and tasks that are ready."""
    for _ in range(5):
        await asyncio.sleep(0)


async def load_media(
    controller: PlaybackController, engine: FakeMediaEngine, duration: float = 130.0
) -> None:
    """Initialize the controller and resolve the duration (ending in paused)."""
    await controller.initialize()
    engine.emit(EngineEvent.status_changed(EngineStatus.READY))
    engine.emit(EngineEvent.duration_resolved(duration))


class EventRecorder:
    """Collect the events signaled by the player."""

    def __init__(self) -> None:
        """Initialize."""
        self.events: list[PlayerEvent] = []

    def __call__(self, event: PlayerEvent) -> None:
        """Record the event."""
        self.events.append(event)

    def data(self) -> list[object]:
        """Return the data of all recorded events."""
        return [x.data for x in self.events]
