"""
OrientationCoordinator: couples fullscreen mode to the device orientation.

Entering fullscreen locks the device to landscape and keeps the controls
visible while the device rotates: the auto-hide is only restarted after a
short settle delay. Leaving fullscreen (or the view) locks back to portrait.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from video_player.constants import LOGGER_NAME, TASK_ID_FULLSCREEN_SETTLE
from video_player.models.enums import EventType, OrientationLock
from video_player.models.orientation import NoopOrientationController, OrientationController
from video_player.models.session import PlayerSnapshot

if TYPE_CHECKING:
    from collections.abc import Callable

    from video_player.models.event import PlayerEvent

    from .controls_visibility import ControlsVisibilityScheduler
    from .playback import PlaybackController


class OrientationCoordinator:
    """React to fullscreen changes of the controller with orientation locks."""

    def __init__(
        self,
        controller: PlaybackController,
        scheduler: ControlsVisibilityScheduler,
        orientation: OrientationController | None = None,
    ) -> None:
        """Initialize the coordinator and start listening to state updates."""
        self.controller = controller
        self.scheduler = scheduler
        self.orientation = orientation or NoopOrientationController()
        self.logger = logging.getLogger(LOGGER_NAME).getChild("orientation")
        self._is_fullscreen = controller.session.is_fullscreen
        self._current_lock: OrientationLock | None = None
        self._settle_generation = 0
        self._disposed = False
        self._unsub: Callable[[], None] | None = controller.subscribe(
            self._on_state_updated, EventType.STATE_UPDATED
        )

    @property
    def current_lock(self) -> OrientationLock | None:
        """Return the most recently requested orientation lock."""
        return self._current_lock

    @property
    def settle_pending(self) -> bool:
        """Return True if the fullscreen settle delay is still running."""
        return self.controller.tasks.get_timer(TASK_ID_FULLSCREEN_SETTLE) is not None

    def on_fullscreen_changed(self, is_fullscreen: bool) -> None:
        """Handle fullscreen mode being entered or left."""
        if self._disposed:
            return
        self._is_fullscreen = is_fullscreen
        if is_fullscreen:
            self._request_lock(OrientationLock.LANDSCAPE)
            self.scheduler.show()
            self.scheduler.cancel_hide()
            self._settle_generation += 1
            self.controller.call_later(
                self.controller.config.fullscreen_settle_delay,
                self._on_settled,
                self._settle_generation,
                task_id=TASK_ID_FULLSCREEN_SETTLE,
            )
        else:
            self._cancel_settle()
            self._request_lock(OrientationLock.PORTRAIT)
            self.scheduler.show()

    def release(self) -> None:
        """Force the portrait lock, regardless of the fullscreen mode (view disappeared)."""
        if self._disposed:
            return
        self._cancel_settle()
        self._request_lock(OrientationLock.PORTRAIT)

    def dispose(self) -> None:
        """Stop listening and force the portrait lock (idempotent)."""
        if self._disposed:
            return
        self.release()
        self._disposed = True
        if self._unsub is not None:
            self._unsub()
            self._unsub = None

    def _on_settled(self, generation: int) -> None:
        """Restart the auto-hide once the rotation has settled."""
        if self._disposed or self.controller.is_disposed:
            return
        if generation != self._settle_generation or not self._is_fullscreen:
            return
        self.logger.debug("Fullscreen settled, scheduling hide of the controls")
        self.scheduler.schedule_hide()

    def _on_state_updated(self, event: PlayerEvent) -> None:
        """Handle a state update of the controller."""
        if self._disposed or not isinstance(event.data, PlayerSnapshot):
            return
        if event.data.is_fullscreen != self._is_fullscreen:
            self.on_fullscreen_changed(event.data.is_fullscreen)

    def _cancel_settle(self) -> None:
        self._settle_generation += 1
        self.controller.cancel_timer(TASK_ID_FULLSCREEN_SETTLE)

    def _request_lock(self, lock: OrientationLock) -> None:
        """Request the orientation lock and signal it to subscribers."""
        self.logger.debug("Requesting orientation lock %s", lock.value)
        self.orientation.request_lock(lock)
        self._current_lock = lock
        self.controller.signal_event(EventType.ORIENTATION_UPDATED, lock)
