"""Tests for loading and validating the player config."""

import json
import pathlib

import aiofiles
import pytest

from video_player.config import PlayerConfig, load_config
from video_player.errors import InvalidConfigError


async def write_settings(path: pathlib.Path, content: str) -> str:
    """Write a settings file and return its path."""
    async with aiofiles.open(path, "w") as f:
        await f.write(content)
    return str(path)


def test_defaults() -> None:
    """Test the default config values."""
    config = PlayerConfig()
    assert config.hide_delay == 3.0
    assert config.fade_duration == 0.3
    assert config.fullscreen_settle_delay == 0.5
    assert config.tick_interval == 0.1
    assert config.allowed_schemes == ["http", "https"]


@pytest.mark.parametrize(
    "data",
    [
        {"hide_delay": -1},
        {"fullscreen_settle_delay": -0.5},
        {"tick_interval": 0},
        {"allowed_schemes": []},
        {"hide_delay": "soon"},
    ],
)
def test_invalid_values(data: dict[str, object]) -> None:
    """Test that invalid values are rejected."""
    with pytest.raises(InvalidConfigError):
        PlayerConfig.parse(data)


def test_parse_ignores_unknown_keys(caplog: pytest.LogCaptureFixture) -> None:
    """Test that unknown keys are ignored."""
    config = PlayerConfig.parse({"hide_delay": 5, "volume": 11})
    assert config.hide_delay == 5.0
    assert "Ignoring unknown config key(s): volume" in caplog.text


def test_round_trip() -> None:
    """Test that a config survives serialization."""
    config = PlayerConfig(hide_delay=1.5, allowed_schemes=["https"])
    assert PlayerConfig.from_dict(config.to_dict()) == config


async def test_load_config(tmp_path: pathlib.Path) -> None:
    """Test loading the config from a settings file."""
    path = await write_settings(
        tmp_path / "settings.json",
        json.dumps({"hide_delay": 2, "fade_duration": 0.1, "allowed_schemes": ["https"]}),
    )
    config = await load_config(path)
    assert config.hide_delay == 2.0
    assert config.fade_duration == 0.1
    assert config.fullscreen_settle_delay == 0.5
    assert config.allowed_schemes == ["https"]


async def test_load_config_missing_file(tmp_path: pathlib.Path) -> None:
    """Test that a missing settings file results in the defaults."""
    config = await load_config(str(tmp_path / "missing.json"))
    assert config == PlayerConfig()


async def test_load_config_empty_file(tmp_path: pathlib.Path) -> None:
    """Test that an empty settings file results in the defaults."""
    path = await write_settings(tmp_path / "settings.json", "  \n")
    assert await load_config(path) == PlayerConfig()


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"tick_interval": -1}'])
async def test_load_config_invalid(tmp_path: pathlib.Path, content: str) -> None:
    """Test that invalid settings files are rejected."""
    path = await write_settings(tmp_path / "settings.json", content)
    with pytest.raises(InvalidConfigError):
        await load_config(path)
