"""Fixtures for testing the Video Player."""

import logging
from collections.abc import AsyncGenerator

import pytest

from tests.helpers import TEST_URL, FakeMediaEngine
from video_player.config import PlayerConfig
from video_player.controllers.playback import PlaybackController


@pytest.fixture(name="caplog")
def caplog_fixture(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Set log level to debug for tests using the caplog fixture."""
    caplog.set_level(logging.DEBUG)
    return caplog


@pytest.fixture
def engine() -> FakeMediaEngine:
    """Return a scripted media engine."""
    return FakeMediaEngine()


@pytest.fixture
def config() -> PlayerConfig:
    """Return a config with short delays, so timers can be tested in real time."""
    return PlayerConfig(hide_delay=0.3, fade_duration=0.05, fullscreen_settle_delay=0.1)


@pytest.fixture
async def controller(
    engine: FakeMediaEngine, config: PlayerConfig
) -> AsyncGenerator[PlaybackController, None]:
    """Return a playback controller for the scripted engine."""
    controller = PlaybackController(engine, locator=TEST_URL, config=config)
    try:
        yield controller
    finally:
        await controller.dispose()
