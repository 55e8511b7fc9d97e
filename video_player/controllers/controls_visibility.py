"""
ControlsVisibilityScheduler: auto-hide policy for the on-screen playback controls.

The controls are fully visible when the player is not playing. While playing,
they fade out after a (configurable) delay without user interaction.
There is at most one outstanding hide action at any time, identified by
a generation counter: a hide action that fires after it was superseded by
a newer `show()`/`schedule_hide()` call does nothing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from video_player.constants import LOGGER_NAME, TASK_ID_HIDE_CONTROLS
from video_player.models.enums import EventType, PlaybackState
from video_player.models.session import ControlsVisibility, PlayerSnapshot

if TYPE_CHECKING:
    from collections.abc import Callable

    from video_player.models.event import PlayerEvent

    from .playback import PlaybackController


class ControlsVisibilityScheduler:
    """Single-shot, restartable auto-hide timer for the playback controls."""

    def __init__(self, controller: PlaybackController) -> None:
        """Initialize the scheduler and start listening to state updates."""
        self.controller = controller
        self.config = controller.config
        self.logger = logging.getLogger(LOGGER_NAME).getChild("controls")
        self._visibility = ControlsVisibility(opacity=1.0)
        self._generation = 0
        self._last_state = controller.state
        self._disposed = False
        self._unsub: Callable[[], None] | None = controller.subscribe(
            self._on_state_updated, EventType.STATE_UPDATED
        )

    @property
    def visibility(self) -> ControlsVisibility:
        """Return the current visibility of the controls."""
        return self._visibility

    @property
    def opacity(self) -> float:
        """Return the current opacity of the controls."""
        return self._visibility.opacity

    @property
    def generation(self) -> int:
        """Return the generation of the most recent (re)scheduling."""
        return self._generation

    @property
    def hide_pending(self) -> bool:
        """Return True if a hide action is outstanding."""
        return self.controller.tasks.get_timer(TASK_ID_HIDE_CONTROLS) is not None

    def show(self) -> None:
        """Show the controls (fully opaque) and restart the auto-hide when playing."""
        if self._disposed:
            return
        self.cancel_hide()
        self._set_opacity(1.0)
        if self.controller.is_playing:
            self.schedule_hide()

    def schedule_hide(self) -> None:
        """(Re)start the auto-hide delay, only while playing."""
        if self._disposed:
            return
        self.cancel_hide()
        if not self.controller.is_playing:
            return
        generation = self._generation
        self.logger.debug("Hiding controls in %s seconds", self.config.hide_delay)
        self.controller.call_later(
            self.config.hide_delay,
            self._hide_controls,
            generation,
            task_id=TASK_ID_HIDE_CONTROLS,
        )

    def cancel_hide(self) -> None:
        """Cancel the outstanding hide action (if any)."""
        # bumping the generation turns an already fired but not yet applied hide into a no-op
        self._generation += 1
        self.controller.cancel_timer(TASK_ID_HIDE_CONTROLS)

    def user_interaction(self) -> None:
        """Handle a user interaction (tap, slider drag, button press)."""
        self.show()

    def dispose(self) -> None:
        """Cancel the outstanding hide action and stop listening (idempotent)."""
        if self._disposed:
            return
        self.cancel_hide()
        self._disposed = True
        if self._unsub is not None:
            self._unsub()
            self._unsub = None

    def _hide_controls(self, generation: int) -> None:
        """Hide the controls, unless this action was superseded."""
        if self._disposed or self.controller.is_disposed:
            return
        if generation != self._generation:
            self.logger.debug("Ignoring superseded hide action")
            return
        if not self.controller.is_playing:
            return
        self._set_opacity(0.0, animated=True)

    def _on_state_updated(self, event: PlayerEvent) -> None:
        """Handle a state update of the controller, only playback state changes matter."""
        if self._disposed or not isinstance(event.data, PlayerSnapshot):
            return
        state = event.data.state
        if state == self._last_state:
            return
        self._last_state = state
        if state in (PlaybackState.PAUSED, PlaybackState.FAILED):
            self.show()
        elif state == PlaybackState.PLAYING and self._visibility.interactive:
            self.schedule_hide()

    def _set_opacity(self, opacity: float, animated: bool = False) -> None:
        """Set the opacity of the controls and signal the change."""
        if opacity == self._visibility.opacity:
            return
        self._visibility = ControlsVisibility(
            opacity=opacity,
            animated=animated,
            transition_duration=self.config.fade_duration if animated else 0.0,
        )
        self.logger.debug("Controls opacity set to %s", opacity)
        self.controller.signal_event(EventType.CONTROLS_UPDATED, self._visibility)
