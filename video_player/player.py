"""
VideoPlayer: the entry point for the presentation layer.

Wires a PlaybackController to the auto-hide policy of the controls and the
orientation coordination, and exposes the inbound commands of the view.
Every user command counts as an interaction with the controls.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from video_player.config import PlayerConfig, load_config
from video_player.constants import LOGGER_NAME
from video_player.controllers.controls_visibility import ControlsVisibilityScheduler
from video_player.controllers.orientation import OrientationCoordinator
from video_player.controllers.playback import PlaybackController
from video_player.models.enums import PlaybackSpeed, PlaybackState
from video_player.models.media import VideoItem

if TYPE_CHECKING:
    from collections.abc import Callable

    from video_player.controllers.playback import EventCallBackType
    from video_player.models.enums import EventType, OrientationLock
    from video_player.models.media_engine import MediaEngineAdapter
    from video_player.models.orientation import OrientationController
    from video_player.models.session import ControlsVisibility, PlayerSnapshot


class VideoPlayer:
    """Player for a single video, must be created from within the event loop."""

    def __init__(
        self,
        engine: MediaEngineAdapter | None,
        item: VideoItem | str | None = None,
        config: PlayerConfig | None = None,
        orientation: OrientationController | None = None,
    ) -> None:
        """Initialize the player and its components."""
        self.logger = logging.getLogger(LOGGER_NAME)
        if isinstance(item, str):
            item = VideoItem(title=item, url=item)
        self.item = item
        self.controller = PlaybackController(
            engine, locator=item.url if item else None, config=config
        )
        self.scheduler = ControlsVisibilityScheduler(self.controller)
        self.coordinator = OrientationCoordinator(self.controller, self.scheduler, orientation)

    @classmethod
    async def from_settings(
        cls,
        engine: MediaEngineAdapter | None,
        settings_path: str,
        item: VideoItem | str | None = None,
        orientation: OrientationController | None = None,
    ) -> VideoPlayer:
        """Create a player with its config loaded from a (json) settings file."""
        config = await load_config(settings_path)
        return cls(engine, item=item, config=config, orientation=orientation)

    @property
    def snapshot(self) -> PlayerSnapshot:
        """Return the current (immutable) state of the player."""
        return self.controller.snapshot

    @property
    def controls(self) -> ControlsVisibility:
        """Return the current visibility of the controls."""
        return self.scheduler.visibility

    @property
    def orientation_lock(self) -> OrientationLock | None:
        """Return the most recently requested orientation lock."""
        return self.coordinator.current_lock

    @property
    def is_disposed(self) -> bool:
        """Return True if the player has been disposed."""
        return self.controller.is_disposed

    def subscribe(
        self,
        cb_func: EventCallBackType,
        event_filter: EventType | tuple[EventType, ...] | None = None,
    ) -> Callable[[], None]:
        """Subscribe to player events, returns function to remove the listener."""
        return self.controller.subscribe(cb_func, event_filter)

    async def initialize(self, item: VideoItem | str | None = None) -> None:
        """Load (or reload after a failure) the video."""
        if isinstance(item, str):
            item = VideoItem(title=item, url=item)
        if item is not None:
            self.item = item
        await self.controller.initialize(item.url if item else None)
        self.scheduler.user_interaction()

    async def play(self) -> None:
        """Handle PLAY command."""
        await self.controller.play()
        self.scheduler.user_interaction()

    async def pause(self) -> None:
        """Handle PAUSE command."""
        await self.controller.pause()
        self.scheduler.user_interaction()

    async def toggle_play_pause(self) -> None:
        """Handle PLAY/PAUSE toggle command."""
        await self.controller.toggle_play_pause()
        self.scheduler.user_interaction()

    async def stop(self) -> None:
        """Handle STOP command: pause and return to the start."""
        await self.controller.stop()
        self.scheduler.user_interaction()

    async def toggle_mute(self) -> None:
        """Handle MUTE toggle command."""
        await self.controller.toggle_mute()
        self.scheduler.user_interaction()

    async def set_speed(self, speed: PlaybackSpeed | float) -> None:
        """Handle SPEED command."""
        await self.controller.set_speed(speed)
        self.scheduler.user_interaction()

    async def seek_start(self) -> None:
        """Handle the start of a seek (slider drag started)."""
        await self.controller.seek_start()
        self.scheduler.user_interaction()

    async def seek_end(self, target: float) -> None:
        """Handle the end of a seek (slider released) at the target position."""
        await self.controller.seek_end(target)
        self.scheduler.user_interaction()

    async def toggle_fullscreen(self) -> None:
        """Handle FULLSCREEN toggle command."""
        await self.controller.toggle_fullscreen()
        self.scheduler.user_interaction()

    def user_interaction(self) -> None:
        """Handle a user interaction with the view (e.g. a tap)."""
        self.scheduler.user_interaction()

    async def view_appeared(self) -> None:
        """Handle the view becoming visible: load the video if needed."""
        if self.controller.state == PlaybackState.IDLE:
            await self.initialize()
        self.scheduler.schedule_hide()

    async def view_disappeared(self) -> None:
        """Handle the view leaving the screen: pause and restore portrait."""
        if self.controller.is_playing:
            await self.controller.pause()
        self.coordinator.release()

    async def dispose(self) -> None:
        """Dispose the player and release all resources (idempotent)."""
        if self.is_disposed:
            return
        self.logger.debug("Disposing %s", self)
        self.coordinator.dispose()
        self.scheduler.dispose()
        await self.controller.dispose()

    def __repr__(self) -> str:
        """Return the representation."""
        title = self.item.title if self.item else None
        return f"<VideoPlayer title={title} state={self.controller.state.value}>"
