"""Custom errors and exceptions."""

from __future__ import annotations


class VideoPlayerError(Exception):
    """Custom Exception for all errors."""

    error_code = 0


class EngineCreationFailure(VideoPlayerError):
    """Error raised when the media engine could not create a handle for a locator."""

    error_code = 1


class InvalidLocatorError(EngineCreationFailure):
    """Error raised when a locator is malformed or uses an unsupported scheme."""

    error_code = 2


class EngineRuntimeFailure(VideoPlayerError):
    """Error raised when the media engine fails after the handle was created."""

    error_code = 3


class InvalidCommand(VideoPlayerError):
    """Error raised when a command is not valid for the current playback state."""

    error_code = 4


class InvalidConfigError(VideoPlayerError):
    """Error raised when a config value is invalid."""

    error_code = 5
