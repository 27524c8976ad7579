"""Light effects run by the action queue."""

from __future__ import annotations

from huestream.effects.base import Command, EffectOutcome, LightEffect
from huestream.effects.colors import (
    ColorCommandResolver,
    EffectColorScheme,
    ResolvedColors,
)
from huestream.effects.flashing import EffectFlashing
from huestream.effects.reset import EffectReset
from huestream.effects.rotating import EffectRotating
from huestream.effects.selftest import EffectSelfTest

__all__ = [
    "ColorCommandResolver",
    "Command",
    "EffectColorScheme",
    "EffectFlashing",
    "EffectOutcome",
    "EffectReset",
    "EffectRotating",
    "EffectSelfTest",
    "LightEffect",
    "ResolvedColors",
]
