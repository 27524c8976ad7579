"""huestream

Async Philips Hue light effects driven by Twitch chat and stream events.
"""

from __future__ import annotations

from importlib.metadata import version as get_version

from huestream.bot import HueBot
from huestream.bridge import HueBridge, discover_bridge
from huestream.color import LightState, kelvin_to_mired
from huestream.config import BotConfig, ColorScheme, FixtureLayout, load_config
from huestream.effects import (
    ColorCommandResolver,
    EffectColorScheme,
    EffectFlashing,
    EffectOutcome,
    EffectReset,
    EffectRotating,
    EffectSelfTest,
    LightEffect,
)
from huestream.engine import EffectEngine
from huestream.exceptions import (
    ActionAbortedError,
    ColorResolutionError,
    ConfigError,
    HueConnectionError,
    HueDeviceError,
    HueStreamError,
)
from huestream.pacing import RatePacer
from huestream.scheduler import (
    ActionQueue,
    CancellationToken,
    SceneSnapshotStore,
    SchedulerContext,
    SubGiftCounter,
)

__version__ = get_version("huestream")  # type: ignore

__all__ = [
    # Version
    "__version__",
    # Bot
    "HueBot",
    "EffectEngine",
    # Bridge
    "HueBridge",
    "discover_bridge",
    # Configuration
    "BotConfig",
    "ColorScheme",
    "FixtureLayout",
    "load_config",
    # Color
    "LightState",
    "kelvin_to_mired",
    # Scheduling
    "ActionQueue",
    "CancellationToken",
    "RatePacer",
    "SceneSnapshotStore",
    "SchedulerContext",
    "SubGiftCounter",
    # Effects
    "ColorCommandResolver",
    "EffectColorScheme",
    "EffectFlashing",
    "EffectOutcome",
    "EffectReset",
    "EffectRotating",
    "EffectSelfTest",
    "LightEffect",
    # Exceptions
    "ActionAbortedError",
    "ColorResolutionError",
    "ConfigError",
    "HueConnectionError",
    "HueDeviceError",
    "HueStreamError",
]
