"""
PlaybackController: the state machine that owns the playback session.

The controller is the single owner of the PlayerSession: all commands and all
media engine events are serialized on the event loop the controller was
created on, so the session is never mutated concurrently.
Engine events that arrive from other threads are marshaled onto the loop first.
Commands additionally hold the command lock while they await the engine, so the
engine calls of two commands never interleave.

After every mutation the controller calculates a new (immutable) PlayerSnapshot
and signals it to all subscribers when it differs from the previous one.

Transitions (all other combinations are ignored):

    idle     --initialize-------->  loading
    failed   --initialize-------->  loading
    loading  --duration resolved->  paused
    paused   --play-------------->  playing
    playing  --pause------------->  paused
    playing  --end of media------>  paused (position reset to 0 by a seek)
    (any but failed) --engine error-->  failed(reason)
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import TYPE_CHECKING, Any, Concatenate, ParamSpec, TypeVar

from video_player.config import PlayerConfig
from video_player.constants import (
    ATTR_POSITION,
    LOGGER_NAME,
    TASK_ID_END_OF_MEDIA,
    TASK_ID_SEEK,
    VERBOSE_LOG_LEVEL,
)
from video_player.errors import (
    EngineCreationFailure,
    EngineRuntimeFailure,
    InvalidCommand,
)
from video_player.helpers.tasks import TaskTracker
from video_player.helpers.util import clamp_position, get_changed_values, validate_locator
from video_player.models.enums import (
    EngineEventType,
    EngineStatus,
    EventType,
    PlaybackSpeed,
    PlaybackState,
)
from video_player.models.event import EngineEvent, PlayerEvent
from video_player.models.session import PlayerSession, PlayerSnapshot

from .time_sync import TimeSync

if TYPE_CHECKING:
    from video_player.models.media_engine import EngineHandle, MediaEngineAdapter

EventCallBackType = Callable[[PlayerEvent], None] | Callable[[PlayerEvent], Awaitable[None]]
EventSubscriptionType = tuple[EventCallBackType, tuple[EventType, ...] | None]

NO_ENGINE_ERROR = "No media engine configured"

ControllerT = TypeVar("ControllerT", bound="PlaybackController")
P = ParamSpec("P")


def handle_playback_command(
    func: Callable[Concatenate[ControllerT, P], Awaitable[None]] | None = None,
    *,
    lock: bool = False,
) -> Any:
    """Check and log commands to the playback controller.

    Commands on a disposed controller are ignored, commands that are not valid
    for the current state (InvalidCommand) are ignored and logged and failures
    of the media engine move the session into the failed state.

    :param func: The function to wrap (when used without parentheses).
    :param lock: If True, acquire the command lock before executing,
        which serializes the command with all other locked commands.
    """

    def decorator(
        fn: Callable[Concatenate[ControllerT, P], Awaitable[None]],
    ) -> Callable[Concatenate[ControllerT, P], Coroutine[Any, Any, None]]:
        @functools.wraps(fn)
        async def wrapper(self: ControllerT, *args: P.args, **kwargs: P.kwargs) -> None:
            """Log and handle commands to the controller."""
            if self.is_disposed:
                self.logger.warning("Ignoring command %s on disposed player", fn.__name__)
                return
            self.logger.debug(
                "Handling command %s (state: %s)", fn.__name__, self.state.value
            )

            async def execute() -> None:
                try:
                    await fn(self, *args, **kwargs)
                except InvalidCommand as err:
                    self.logger.debug("Ignoring command %s: %s", fn.__name__, err)
                except (EngineCreationFailure, EngineRuntimeFailure) as err:
                    self.set_failed(str(err))

            if lock:
                async with self._command_lock:
                    # pending end of media handling goes before any later command
                    await self._finish_end_of_media()
                    await execute()
            else:
                await execute()

        return wrapper

    # Support both @handle_playback_command and @handle_playback_command(lock=True)
    if func is not None:
        return decorator(func)
    return decorator


class PlaybackController:
    """Controller holding all logic to control playback of a single video."""

    def __init__(
        self,
        engine: MediaEngineAdapter | None,
        locator: str | None = None,
        config: PlayerConfig | None = None,
    ) -> None:
        """Initialize the controller (must be called from within the event loop)."""
        self.logger = logging.getLogger(LOGGER_NAME).getChild("playback")
        self.config = config or PlayerConfig()
        self.loop = asyncio.get_running_loop()
        self.tasks = TaskTracker(self.loop, self.logger)
        self._engine = engine
        self._initial_locator = locator
        self._session = PlayerSession(locator=locator)
        self._last_snapshot = self._session.snapshot()
        self._subscribers: set[EventSubscriptionType] = set()
        self._command_lock = asyncio.Lock()
        self._unsub_engine: Callable[[], None] | None = None
        self._seek_seq = 0
        self._end_of_media_handle: EngineHandle | None = None
        self._disposed = False
        self.time_sync = TimeSync(self)

    @property
    def session(self) -> PlayerSession:
        """Return the (mutable) session, only to be mutated by the controller itself."""
        return self._session

    @property
    def state(self) -> PlaybackState:
        """Return the current playback state."""
        return self._session.state

    @property
    def snapshot(self) -> PlayerSnapshot:
        """Return the last signaled snapshot of the player state."""
        return self._last_snapshot

    @property
    def is_playing(self) -> bool:
        """Return True if the player is currently playing."""
        return self._session.state == PlaybackState.PLAYING

    @property
    def is_disposed(self) -> bool:
        """Return True if the controller has been disposed."""
        return self._disposed

    @property
    def seek_sequence(self) -> int:
        """Return the sequence number of the most recently issued seek."""
        return self._seek_seq

    # Commands

    @handle_playback_command(lock=True)
    async def initialize(self, locator: str | None = None) -> None:
        """
        Load media into the player (also used to reinitialize after a failure).

        :param locator: The url/locator of the media, defaults to the initial locator.
        """
        if self.state not in (PlaybackState.IDLE, PlaybackState.FAILED):
            raise InvalidCommand(f"Can not initialize while {self.state.value}")
        locator = locator or self._session.locator or self._initial_locator
        # any previous handle is released first, user preferences are kept
        await self._release_engine_handle()
        prev = self._session
        self._seek_seq += 1
        self._session = PlayerSession(
            locator=locator,
            state=PlaybackState.LOADING,
            is_muted=prev.is_muted,
            speed=prev.speed,
            is_fullscreen=prev.is_fullscreen,
        )
        session = self._session
        self.update_state()
        if self._engine is None:
            self.set_failed(NO_ENGINE_ERROR)
            return
        locator = validate_locator(locator or "", self.config.allowed_schemes)
        self.logger.debug("Requesting engine handle for %s", locator)
        try:
            handle = await self._engine.create_handle(locator)
        except EngineCreationFailure:
            raise
        except Exception as err:
            msg = f"Unable to load {locator}: {err}"
            raise EngineCreationFailure(msg) from err
        if self._disposed or self._session is not session:
            # disposed (or reinitialized) while the handle was being created
            self.logger.debug("Releasing stale engine handle for %s", locator)
            await self._engine.release_handle(handle)
            return
        session.handle = handle
        self._unsub_engine = self._engine.subscribe(
            handle, functools.partial(self._on_engine_event, handle)
        )
        if session.is_muted:
            await self._engine_call(self._engine.set_muted, handle, True)

    @handle_playback_command(lock=True)
    async def play(self) -> None:
        """Start (or resume) playback at the stored speed."""
        await self._play()

    @handle_playback_command(lock=True)
    async def pause(self) -> None:
        """Pause playback."""
        await self._pause()

    @handle_playback_command(lock=True)
    async def toggle_play_pause(self) -> None:
        """Toggle between play and pause."""
        if self.is_playing:
            await self._pause()
        else:
            await self._play()

    @handle_playback_command(lock=True)
    async def stop(self) -> None:
        """Stop playback and return to the start of the media."""
        if self.state not in (PlaybackState.PLAYING, PlaybackState.PAUSED):
            raise InvalidCommand(f"Can not stop while {self.state.value}")
        handle = self._require_handle()
        if self.is_playing:
            self._session.state = PlaybackState.PAUSED
            self.update_state()
            await self._engine_call(self._get_engine().pause, handle)
        self._issue_seek(0.0)

    @handle_playback_command(lock=True)
    async def toggle_mute(self) -> None:
        """Toggle the mute state."""
        if self.state == PlaybackState.FAILED:
            raise InvalidCommand("Can not toggle mute while failed")
        self._session.is_muted = not self._session.is_muted
        self.update_state()
        if (handle := self._session.handle) is not None:
            await self._engine_call(self._get_engine().set_muted, handle, self._session.is_muted)

    @handle_playback_command(lock=True)
    async def set_speed(self, speed: PlaybackSpeed | float) -> None:
        """
        Set the playback speed.

        The speed is only pushed to the engine while playing,
        while paused it is stored and applied by the next play command.
        """
        speed = PlaybackSpeed(speed)
        self._session.speed = speed
        self.update_state()
        if self.is_playing and (handle := self._session.handle) is not None:
            await self._engine_call(self._get_engine().set_rate, handle, speed.value)

    @handle_playback_command(lock=True)
    async def seek_start(self) -> None:
        """Mark the start of a (user) seek, position ticks are ignored from now on."""
        if self._session.handle is None or self.state == PlaybackState.FAILED:
            raise InvalidCommand(f"Can not seek while {self.state.value}")
        self._session.is_seeking = True
        self.update_state()

    @handle_playback_command(lock=True)
    async def seek_end(self, target: float) -> None:
        """
        Finish a (user) seek at the given target position (in seconds).

        The target is clamped to the media bounds. The position is applied
        once the engine confirms the seek, and only if no newer seek
        was issued in the meantime.
        """
        if self._session.handle is None or self.state == PlaybackState.FAILED:
            if self._session.is_seeking:
                self._session.is_seeking = False
                self.update_state()
            raise InvalidCommand(f"Can not seek while {self.state.value}")
        self._issue_seek(target)

    @handle_playback_command(lock=True)
    async def toggle_fullscreen(self) -> None:
        """Toggle fullscreen mode."""
        self._session.is_fullscreen = not self._session.is_fullscreen
        self.update_state()

    async def dispose(self) -> None:
        """
        Dispose the controller: cancel all subscriptions and timers and release the engine.

        Safe to call multiple times, only the first call has any effect.
        """
        if self._disposed:
            return
        self._disposed = True
        self.logger.debug("Disposing player session %s", self._session.session_id)
        self.tasks.cancel_all()
        await self._release_engine_handle()
        self._subscribers.clear()

    # Engine events

    def handle_engine_event(self, event: EngineEvent) -> None:
        """Handle an event delivered by the media engine (on the event loop)."""
        if self._disposed or self._session.handle is None:
            return
        if event.type == EngineEventType.POSITION_TICK:
            self.time_sync.on_position_tick(event.position)
        elif event.type == EngineEventType.DURATION_RESOLVED:
            self.time_sync.on_duration_resolved(event.duration)
        elif event.type == EngineEventType.END_OF_MEDIA:
            self._handle_end_of_media()
        elif event.type == EngineEventType.STATUS_CHANGED:
            if event.status == EngineStatus.FAILED:
                self.set_failed(event.reason or "Error loading video")
            else:
                self.logger.debug("Engine reported status %s", event.status)

    def set_failed(self, reason: str) -> None:
        """Move the session into the failed state (ignored when already failed)."""
        if self.state == PlaybackState.FAILED:
            return
        self.logger.warning("Playback failed: %s", reason)
        # invalidate any seek that is still in flight
        self._seek_seq += 1
        self._session.state = PlaybackState.FAILED
        self._session.error = reason
        self._session.is_seeking = False
        self._session.pending_seek_target = None
        self.update_state()

    def finish_loading(self) -> None:
        """Advance from loading to paused once the media is ready to play."""
        if self.state != PlaybackState.LOADING:
            self.logger.debug("Ignoring loaded media while %s", self.state.value)
            return
        self._session.state = PlaybackState.PAUSED
        self.update_state()

    # Notifications

    def update_state(self, force_update: bool = False) -> None:
        """
        Calculate a new snapshot of the session and signal it when changed.

        :param force_update: If True, a state update event will be
        pushed even if the state has not actually changed.
        """
        snapshot = self._session.snapshot()
        changed_values = get_changed_values(self._last_snapshot.to_dict(), snapshot.to_dict())
        if not changed_values and not force_update:
            return
        self._last_snapshot = snapshot
        if changed_values.keys() == {ATTR_POSITION}:
            self.logger.log(VERBOSE_LOG_LEVEL, "Position updated: %s", snapshot.position)
        else:
            self.logger.debug("State updated: %s", changed_values)
        self.signal_event(EventType.STATE_UPDATED, snapshot)

    def signal_event(self, event: EventType, data: Any = None) -> None:
        """Signal event to subscribers."""
        if self._disposed:
            return
        event_obj = PlayerEvent(event=event, data=data)
        for cb_func, event_filter in list(self._subscribers):
            if not (event_filter is None or event in event_filter):
                continue
            if asyncio.iscoroutinefunction(cb_func):
                self.tasks.create_task(cb_func, event_obj)
            else:
                self.loop.call_soon_threadsafe(cb_func, event_obj)

    def subscribe(
        self,
        cb_func: EventCallBackType,
        event_filter: EventType | tuple[EventType, ...] | None = None,
    ) -> Callable[[], None]:
        """
        Subscribe to the events of the player.

        :param cb_func: Callback (function or coroutine function) receiving a PlayerEvent.
        :param event_filter: Optional event type(s) to listen for, all events when omitted.
        :return: Function to remove the listener again.
        """
        if isinstance(event_filter, EventType):
            event_filter = (event_filter,)
        listener = (cb_func, event_filter)
        self._subscribers.add(listener)

        def remove_listener() -> None:
            self._subscribers.discard(listener)

        return remove_listener

    # Tracked tasks and timers (shared with the scheduler and coordinator)

    def create_task(
        self,
        target: Callable[..., Coroutine[Any, Any, Any]] | Awaitable[Any],
        *args: Any,
        task_id: str | None = None,
        **kwargs: Any,
    ) -> asyncio.Task[Any]:
        """Create a tracked task, cancelled on dispose."""
        return self.tasks.create_task(target, *args, task_id=task_id, **kwargs)

    def call_later(
        self,
        delay: float,
        target: Callable[..., Any],
        *args: Any,
        task_id: str | None = None,
    ) -> asyncio.TimerHandle:
        """Run callable after given delay, use task_id for debouncing."""
        return self.tasks.call_later(delay, target, *args, task_id=task_id)

    def cancel_timer(self, task_id: str) -> None:
        """Cancel existing scheduled timer."""
        self.tasks.cancel_timer(task_id)

    # Internals

    def _on_engine_event(self, handle: EngineHandle, event: EngineEvent) -> None:
        """Receive an engine event and marshal it onto the event loop if needed."""
        if not self.tasks.in_loop_thread:
            if not self.loop.is_closed():
                self.loop.call_soon_threadsafe(self._on_engine_event, handle, event)
            return
        if not self._is_current(handle):
            # event of a released (or replaced) handle
            return
        self.handle_engine_event(event)

    def _handle_end_of_media(self) -> None:
        """Handle the media playing to its end: pause and return to the start."""
        if not self.is_playing:
            self.logger.debug("Ignoring end of media while %s", self.state.value)
            return
        self.logger.debug("End of media reached")
        self._session.state = PlaybackState.PAUSED
        self.update_state()
        self._end_of_media_handle = self._require_handle()
        self.create_task(self._process_end_of_media, task_id=TASK_ID_END_OF_MEDIA)

    async def _process_end_of_media(self) -> None:
        """Pause the engine and return to the start, serialized with the commands."""
        async with self._command_lock:
            await self._finish_end_of_media()

    async def _finish_end_of_media(self) -> None:
        """Run the engine side of a pending end of media (if any), exactly once."""
        handle, self._end_of_media_handle = self._end_of_media_handle, None
        if handle is None or not self._is_current(handle):
            return
        await self._background_engine_call(handle, self._get_engine().pause)
        if self._is_current(handle) and self.state != PlaybackState.FAILED:
            self._issue_seek(0.0)

    async def _play(self) -> None:
        if self.state != PlaybackState.PAUSED:
            raise InvalidCommand(f"Can not play while {self.state.value}")
        handle = self._require_handle()
        self._session.state = PlaybackState.PLAYING
        self.update_state()
        await self._engine_call(self._get_engine().play, handle)
        await self._engine_call(self._get_engine().set_rate, handle, self._session.speed.value)

    async def _pause(self) -> None:
        if self.state != PlaybackState.PLAYING:
            raise InvalidCommand(f"Can not pause while {self.state.value}")
        handle = self._require_handle()
        self._session.state = PlaybackState.PAUSED
        self.update_state()
        await self._engine_call(self._get_engine().pause, handle)

    def _issue_seek(self, target: float) -> None:
        """Issue a seek on the engine, only the latest seek will be applied."""
        clamped = clamp_position(target, self._session.duration)
        if clamped != target:
            self.logger.debug("Seek target %s clamped to %s", target, clamped)
        self._seek_seq += 1
        seq = self._seek_seq
        self._session.is_seeking = True
        self._session.pending_seek_target = clamped
        self.update_state()
        handle = self._require_handle()
        self.create_task(
            self._perform_seek(handle, seq, clamped),
            task_id=f"{TASK_ID_SEEK}_{seq}",
        )

    async def _perform_seek(self, handle: EngineHandle, seq: int, target: float) -> None:
        """Perform the seek on the engine and apply its confirmation."""
        try:
            completed = await self._get_engine().seek(handle, target)
        except asyncio.CancelledError:
            raise
        except Exception as err:
            if self._is_current(handle) and seq == self._seek_seq:
                self.set_failed(f"Seek failed: {err}")
            return
        self._apply_seek_confirmation(handle, seq, target, completed)

    def _apply_seek_confirmation(
        self, handle: EngineHandle, seq: int, target: float, completed: bool
    ) -> None:
        """Apply the confirmation of a seek, if it is still the latest one."""
        if not self._is_current(handle):
            return
        if seq != self._seek_seq:
            self.logger.debug(
                "Ignoring stale seek confirmation to %s (seek %s, latest %s)",
                target,
                seq,
                self._seek_seq,
            )
            return
        if completed:
            self._session.position = clamp_position(target, self._session.duration)
        else:
            self.logger.debug("Seek to %s did not complete", target)
        self._session.is_seeking = False
        self._session.pending_seek_target = None
        self.update_state()

    def _is_current(self, handle: EngineHandle) -> bool:
        """Return True if the handle still belongs to the live (non disposed) session."""
        return not self._disposed and self._session.handle is handle

    def _require_handle(self) -> EngineHandle:
        """Return the engine handle of the session or raise InvalidCommand."""
        if (handle := self._session.handle) is None:
            raise InvalidCommand("No media loaded")
        return handle

    def _get_engine(self) -> MediaEngineAdapter:
        """Return the media engine or raise when none is configured."""
        if self._engine is None:
            raise EngineCreationFailure(NO_ENGINE_ERROR)
        return self._engine

    async def _engine_call(self, target: Callable[..., Awaitable[Any]], *args: Any) -> None:
        """Call the engine, translating any failure into an EngineRuntimeFailure."""
        try:
            await target(*args)
        except asyncio.CancelledError:
            raise
        except EngineRuntimeFailure:
            raise
        except Exception as err:
            name = getattr(target, "__name__", "command")
            msg = f"Media engine failed to {name}: {err}"
            raise EngineRuntimeFailure(msg) from err

    async def _background_engine_call(
        self, handle: EngineHandle, target: Callable[..., Awaitable[Any]], *args: Any
    ) -> None:
        """Call the engine from a background task, failing the session on errors."""
        try:
            await self._engine_call(target, handle, *args)
        except EngineRuntimeFailure as err:
            if self._is_current(handle):
                self.set_failed(str(err))

    async def _release_engine_handle(self) -> None:
        """Unsubscribe from the engine and release the handle (if any)."""
        if self._unsub_engine is not None:
            self._unsub_engine()
            self._unsub_engine = None
        handle = self._session.handle
        if handle is None:
            return
        self._session.handle = None
        if self._engine is None:
            return
        try:
            await self._engine.release_handle(handle)
        except Exception as err:
            self.logger.warning("Error while releasing engine handle: %s", err)
        else:
            self.logger.debug("Released engine handle %s", handle.handle_id)

    def __repr__(self) -> str:
        """Return the representation."""
        return (
            f"<PlaybackController session={self._session.session_id} "
            f"state={self.state.value} locator={self._session.locator}>"
        )


__all__ = ["PlaybackController", "handle_playback_command"]
