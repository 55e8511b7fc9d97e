"""Tests for the coordination of fullscreen mode and device orientation."""

import asyncio

import pytest

from tests.helpers import EventRecorder, FakeMediaEngine, flush, load_media
from video_player.constants import TASK_ID_FULLSCREEN_SETTLE, TASK_ID_HIDE_CONTROLS
from video_player.controllers.controls_visibility import ControlsVisibilityScheduler
from video_player.controllers.orientation import OrientationCoordinator
from video_player.controllers.playback import PlaybackController
from video_player.models.enums import EventType, OrientationLock
from video_player.models.orientation import OrientationController


class RecordingOrientationController(OrientationController):
    """Orientation control that records all requested locks."""

    def __init__(self) -> None:
        """Initialize."""
        self.requests: list[OrientationLock] = []

    def request_lock(self, lock: OrientationLock) -> None:
        """Record the requested lock."""
        self.requests.append(lock)


@pytest.fixture
def orientation() -> RecordingOrientationController:
    """Return a recording orientation controller."""
    return RecordingOrientationController()


@pytest.fixture
def scheduler(controller: PlaybackController) -> ControlsVisibilityScheduler:
    """Return a scheduler for the controller."""
    return ControlsVisibilityScheduler(controller)


@pytest.fixture
def coordinator(
    controller: PlaybackController,
    scheduler: ControlsVisibilityScheduler,
    orientation: RecordingOrientationController,
) -> OrientationCoordinator:
    """Return a coordinator for the controller."""
    return OrientationCoordinator(controller, scheduler, orientation)


async def start_playing(controller: PlaybackController, engine: FakeMediaEngine) -> None:
    """Load the media and start playback."""
    await load_media(controller, engine)
    await controller.play()
    await flush()


async def test_enter_fullscreen(
    controller: PlaybackController,
    engine: FakeMediaEngine,
    scheduler: ControlsVisibilityScheduler,
    coordinator: OrientationCoordinator,
    orientation: RecordingOrientationController,
) -> None:
    """Test entering fullscreen: landscape, controls visible, hide after the settle delay."""
    await start_playing(controller, engine)
    loop = asyncio.get_running_loop()
    start = loop.time()
    await controller.toggle_fullscreen()
    await flush()
    assert orientation.requests == [OrientationLock.LANDSCAPE]
    assert coordinator.current_lock == OrientationLock.LANDSCAPE
    assert scheduler.opacity == 1.0
    assert not scheduler.hide_pending
    settle_timer = controller.tasks.get_timer(TASK_ID_FULLSCREEN_SETTLE)
    assert settle_timer is not None
    assert settle_timer.when() == pytest.approx(start + 0.1, abs=0.05)

    await asyncio.sleep(0.15)
    assert not coordinator.settle_pending
    hide_timer = controller.tasks.get_timer(TASK_ID_HIDE_CONTROLS)
    assert hide_timer is not None
    assert hide_timer.when() == pytest.approx(start + 0.1 + 0.3, abs=0.05)


async def test_enter_fullscreen_cancels_pending_hide(
    controller: PlaybackController,
    engine: FakeMediaEngine,
    scheduler: ControlsVisibilityScheduler,
    coordinator: OrientationCoordinator,
) -> None:
    """Test that a hide that was pending before the rotation never fires."""
    await start_playing(controller, engine)
    assert scheduler.hide_pending
    await asyncio.sleep(0.25)
    await controller.toggle_fullscreen()
    await flush()
    # the original hide would have fired by now
    await asyncio.sleep(0.1)
    assert scheduler.opacity == 1.0


async def test_exit_fullscreen(
    controller: PlaybackController,
    engine: FakeMediaEngine,
    scheduler: ControlsVisibilityScheduler,
    coordinator: OrientationCoordinator,
    orientation: RecordingOrientationController,
) -> None:
    """Test leaving fullscreen: portrait and controls visible right away."""
    await start_playing(controller, engine)
    await controller.toggle_fullscreen()
    await flush()
    await controller.toggle_fullscreen()
    await flush()
    assert orientation.requests == [OrientationLock.LANDSCAPE, OrientationLock.PORTRAIT]
    # left during the settle delay: the settle action is cancelled
    assert not coordinator.settle_pending
    assert scheduler.opacity == 1.0
    # the regular auto-hide applies again (still playing)
    assert scheduler.hide_pending


async def test_stale_settle_is_ignored(
    controller: PlaybackController,
    engine: FakeMediaEngine,
    scheduler: ControlsVisibilityScheduler,
    coordinator: OrientationCoordinator,
) -> None:
    """Test that a settle action of a cancelled rotation does nothing."""
    await start_playing(controller, engine)
    await controller.toggle_fullscreen()
    await flush()
    coordinator._on_settled(0)
    assert not scheduler.hide_pending


async def test_orientation_events(
    controller: PlaybackController,
    coordinator: OrientationCoordinator,
) -> None:
    """Test that requested locks are signaled to subscribers."""
    recorder = EventRecorder()
    controller.subscribe(recorder, EventType.ORIENTATION_UPDATED)
    await controller.toggle_fullscreen()
    await flush()
    await flush()
    assert recorder.data() == [OrientationLock.LANDSCAPE]


async def test_release_forces_portrait(
    controller: PlaybackController,
    coordinator: OrientationCoordinator,
    orientation: RecordingOrientationController,
) -> None:
    """Test that the view disappearing always restores portrait."""
    await controller.toggle_fullscreen()
    await flush()
    coordinator.release()
    assert orientation.requests[-1] == OrientationLock.PORTRAIT
    assert not coordinator.settle_pending
    # the fullscreen flag itself is not touched
    assert controller.snapshot.is_fullscreen is True


async def test_dispose_forces_portrait(
    coordinator: OrientationCoordinator,
    orientation: RecordingOrientationController,
    controller: PlaybackController,
) -> None:
    """Test that dispose restores portrait, even when not in fullscreen, and only once."""
    coordinator.dispose()
    coordinator.dispose()
    assert orientation.requests == [OrientationLock.PORTRAIT]
    await controller.toggle_fullscreen()
    await flush()
    assert orientation.requests == [OrientationLock.PORTRAIT]
