"""Fixture state and color conversion helpers.

This module provides the LightState value type sent to and read from the
Hue bridge, together with the Kelvin, hex and RGB conversions the effects
and the color command resolver rely on.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import asdict, dataclass, replace
from typing import Any

from huestream.const import (
    BRIGHTNESS_MAX,
    EFFECT_NONE,
    KELVIN_MAX,
    KELVIN_MIN,
    MIRED_MAX,
    MIRED_MIN,
)

_HEX_COLOR = re.compile(r"^#?([0-9a-f]{6})$", re.IGNORECASE)


def kelvin_to_mired(kelvin: float) -> int:
    """Convert a color temperature in Kelvin into mireds (ct).

    The key lights only cover KELVIN_MIN..KELVIN_MAX, so the conversion is a
    linear inverse mapping of that range onto MIRED_MAX..MIRED_MIN. The
    result is always clamped to the mired range the bridge accepts.

    Args:
        kelvin: Color temperature in Kelvin

    Returns:
        Color temperature in mireds, within [MIRED_MIN, MIRED_MAX]
    """
    kelvin_range = KELVIN_MAX - KELVIN_MIN
    mired_range = MIRED_MAX - MIRED_MIN
    ratio = (kelvin - KELVIN_MIN) / kelvin_range
    # Halves round up
    mired = math.floor(MIRED_MAX - ratio * mired_range + 0.5)
    return min(MIRED_MAX, max(MIRED_MIN, mired))


def hex_to_rgb(code: str) -> tuple[int, int, int]:
    """Decode a 6-digit hex color code (with or without '#') into RGB.

    Raises:
        ValueError: If the code is not a 6-digit hex color
    """
    match = _HEX_COLOR.match(code.strip())
    if match is None:
        raise ValueError(f"Invalid hex color code: {code!r}")
    digits = match.group(1)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def _gamma(value: float) -> float:
    if value > 0.04045:
        return ((value + 0.055) / 1.055) ** 2.4
    return value / 12.92


def rgb_to_xy(rgb: tuple[int, int, int]) -> tuple[float, float]:
    """Convert an sRGB triple into CIE xy coordinates for the bridge.

    Args:
        rgb: Red, green and blue components (0-255)

    Returns:
        (x, y) chromaticity rounded to 4 decimals
    """
    r, g, b = (_gamma(component / 255.0) for component in rgb)

    # Wide gamut D65 conversion used by Hue color fixtures
    big_x = r * 0.664511 + g * 0.154324 + b * 0.162028
    big_y = r * 0.283881 + g * 0.668433 + b * 0.047685
    big_z = r * 0.000088 + g * 0.072310 + b * 0.986039

    total = big_x + big_y + big_z
    if total == 0:
        return (0.0, 0.0)
    return (round(big_x / total, 4), round(big_y / total, 4))


@dataclass(frozen=True)
class LightState:
    """A desired partial state for one fixture.

    Every attribute is optional; only the attributes that are set are sent
    to the bridge. Instances are immutable once constructed, use
    with_transition() or merge() to derive new states.

    Attributes:
        on: Power state
        bri: Brightness (0-254)
        ct: Color temperature in mireds (153-500)
        xy: CIE xy color coordinates
        hue: Hue (0-65535)
        sat: Saturation (0-254)
        rgb: RGB color, converted to xy when sent to the bridge
        effect: Named effect mode ("none", "colorloop")
        transition: Transition duration in milliseconds
    """

    on: bool | None = None
    bri: int | None = None
    ct: int | None = None
    xy: tuple[float, float] | None = None
    hue: int | None = None
    sat: int | None = None
    rgb: tuple[int, int, int] | None = None
    effect: str | None = None
    transition: int | None = None

    def __post_init__(self) -> None:
        if self.bri is not None and not (0 <= self.bri <= BRIGHTNESS_MAX):
            raise ValueError(f"Brightness must be 0-{BRIGHTNESS_MAX}, got {self.bri}")
        if self.ct is not None and not (MIRED_MIN <= self.ct <= MIRED_MAX):
            raise ValueError(
                f"Color temperature must be {MIRED_MIN}-{MIRED_MAX} mireds, "
                f"got {self.ct}"
            )
        if self.sat is not None and not (0 <= self.sat <= BRIGHTNESS_MAX):
            raise ValueError(f"Saturation must be 0-{BRIGHTNESS_MAX}, got {self.sat}")
        if self.hue is not None and not (0 <= self.hue <= 65535):
            raise ValueError(f"Hue must be 0-65535, got {self.hue}")
        if self.transition is not None and self.transition < 0:
            raise ValueError(f"Transition must be non-negative, got {self.transition}")

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> LightState:
        """Build a state from a configuration mapping.

        Accepts the bridge attribute names (on, bri, ct, xy, hue, sat,
        effect) plus "k" for a temperature in Kelvin, "rgb" and
        "transition". A "colormode" hint is accepted and ignored since the
        mode follows from the attributes that are set.

        Raises:
            ValueError: If a key is unknown or a value is out of range
        """
        values = dict(settings)
        values.pop("colormode", None)

        kelvin = values.pop("k", None)
        if kelvin is not None:
            values["ct"] = kelvin_to_mired(kelvin)

        unknown = set(values) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown light setting(s): {', '.join(sorted(unknown))}")

        if values.get("xy") is not None:
            values["xy"] = tuple(values["xy"])
        if values.get("rgb") is not None:
            values["rgb"] = tuple(values["rgb"])
        return cls(**values)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> LightState:
        """Build a state from the "state" object returned by the bridge."""
        xy = payload.get("xy")
        return cls(
            on=payload.get("on"),
            bri=payload.get("bri"),
            ct=payload.get("ct"),
            xy=tuple(xy) if xy is not None else None,
            hue=payload.get("hue"),
            sat=payload.get("sat"),
            effect=payload.get("effect"),
        )

    @property
    def has_effect(self) -> bool:
        """Return True if this state names an effect mode other than "none"."""
        return self.effect is not None and self.effect != EFFECT_NONE

    def with_transition(self, transition: int | None) -> LightState:
        """Return a copy of this state using the given transition (ms)."""
        return replace(self, transition=transition)

    def merge(self, **changes: Any) -> LightState:
        """Return a copy of this state with the given attributes replaced."""
        return replace(self, **changes)

    def to_payload(self) -> dict[str, Any]:
        """Serialize into a bridge light state request body.

        Transition is converted from milliseconds into the bridge's
        100 ms units, and an RGB color is converted into xy.
        """
        payload: dict[str, Any] = {}
        for key, value in asdict(self).items():
            if value is None or key in ("rgb", "transition"):
                continue
            payload[key] = list(value) if key == "xy" else value

        if self.rgb is not None and "xy" not in payload:
            payload["xy"] = list(rgb_to_xy(self.rgb))
        if self.transition is not None:
            payload["transitiontime"] = round(self.transition / 100)
        return payload

    def describe(self) -> dict[str, Any]:
        """Return the attributes that are set, for logging."""
        return {key: value for key, value in asdict(self).items() if value is not None}


LIGHT_OFF = LightState(on=False)
EFFECT_OFF = LightState(effect=EFFECT_NONE)
