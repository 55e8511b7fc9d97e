"""
TimeSync: keeps the session position and duration in sync with the media engine.

The media engine delivers periodic position ticks and (once) the duration of
the media. Ticks are never applied while a seek is in progress, so the
position shown to the user does not jump back to a stale engine position.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from video_player.constants import LOGGER_NAME, VERBOSE_LOG_LEVEL
from video_player.helpers.util import clamp_position, is_valid_duration

if TYPE_CHECKING:
    from .playback import PlaybackController


class TimeSync:
    """Apply position ticks and duration updates of the engine to the session."""

    def __init__(self, controller: PlaybackController) -> None:
        """Initialize."""
        self.controller = controller
        self.logger = logging.getLogger(LOGGER_NAME).getChild("time_sync")

    def on_position_tick(self, position: float | None) -> None:
        """Handle a (periodic) position tick of the engine."""
        session = self.controller.session
        if position is None or session.handle is None:
            return
        if session.is_seeking:
            self.logger.log(VERBOSE_LOG_LEVEL, "Dropping position tick while seeking")
            return
        session.position = clamp_position(position, session.duration)
        self.controller.update_state()

    def on_duration_resolved(self, duration: Any) -> None:
        """
        Handle the duration of the media becoming available.

        The duration is only stored if it is a usable number, the media is
        considered loaded regardless (an indefinite duration stays unknown).
        """
        session = self.controller.session
        if is_valid_duration(duration):
            session.duration = float(duration)
            session.position = clamp_position(session.position, session.duration)
        else:
            self.logger.debug("Ignoring unusable duration: %s", duration)
        self.controller.finish_loading()
        # finish_loading only signals on a transition, so push the duration as well
        self.controller.update_state()
