"""huestream exceptions."""

from __future__ import annotations


class HueStreamError(Exception):
    """Base exception for all huestream errors."""


class ActionAbortedError(HueStreamError):
    """Raised when a running action observes the cancellation signal."""


class HueDeviceError(HueStreamError):
    """Raised when the bridge rejects or fails a fixture command."""


class HueConnectionError(HueStreamError):
    """Raised when the bridge cannot be discovered or reached."""


class ColorResolutionError(HueStreamError):
    """Raised when a color command matches neither a hex code nor a scheme."""


class ConfigError(HueStreamError):
    """Raised when the configuration file is missing or invalid."""
