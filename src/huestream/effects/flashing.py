"""Flashing effect: alternate a bright diagonal with a dim one."""

from __future__ import annotations

from typing import TYPE_CHECKING

from huestream.color import EFFECT_OFF, LIGHT_OFF, LightState, kelvin_to_mired
from huestream.const import BRIGHTNESS_MAX, BRIGHTNESS_MIN, KELVIN_MAX
from huestream.effects.base import EffectOutcome, LightEffect

if TYPE_CHECKING:
    from huestream.scheduler.context import SchedulerContext

# Each checkerboard state is held for this many pacing intervals
_HOLD_INTERVALS = 4


class EffectFlashing(LightEffect):
    """Checkerboard flash over the key lights and strips.

    Key lights and strips are set to the same white temperature; the left
    column and the right column swap between full and minimum brightness,
    every state being held for four pacing intervals::

        1 0    0 1    1 0
        1 0 -> 0 1 -> 1 0

    Attributes:
        kelvin: White temperature in Kelvin (default 6500)
        flashes: Number of left/right swaps (default 8)
    """

    def __init__(self, kelvin: int = KELVIN_MAX, flashes: int = 8) -> None:
        if flashes < 0:
            raise ValueError(f"Flashes must be non-negative, got {flashes}")
        self.kelvin = kelvin
        self.flashes = flashes

    @property
    def name(self) -> str:
        return "flashing lights"

    async def async_play(self, ctx: SchedulerContext) -> EffectOutcome:
        fixtures = ctx.fixtures
        hold = ctx.pacer.interval * _HOLD_INTERVALS
        ct = kelvin_to_mired(self.kelvin)

        if self.aborted(ctx):
            return EffectOutcome.ABORTED

        # Disable effects and unneeded lights
        await self.apply(
            ctx,
            [
                (fixtures.back, LIGHT_OFF.with_transition(0)),
                (fixtures.right_strip, EFFECT_OFF),
                (fixtures.left_strip, EFFECT_OFF),
            ],
        )

        if self.aborted(ctx):
            return EffectOutcome.ABORTED

        high = LightState(on=True, ct=ct, bri=BRIGHTNESS_MAX, transition=0)
        low = LightState(on=True, ct=ct, bri=BRIGHTNESS_MIN, transition=0)
        await self.apply(
            ctx,
            [
                (fixtures.right_key, low),
                (fixtures.left_key, high),
                (fixtures.right_strip, low),
                (fixtures.left_strip, high),
            ],
            hold=hold,
        )

        bright = LightState(bri=BRIGHTNESS_MAX, transition=0)
        dim = LightState(bri=BRIGHTNESS_MIN, transition=0)
        right_lit = [
            (fixtures.left_key, dim),
            (fixtures.right_key, bright),
            (fixtures.left_strip, dim),
            (fixtures.right_strip, bright),
        ]
        left_lit = [
            (fixtures.right_key, dim),
            (fixtures.left_key, bright),
            (fixtures.right_strip, dim),
            (fixtures.left_strip, bright),
        ]

        for _flash in range(self.flashes):
            for commands in (right_lit, left_lit):
                if self.aborted(ctx):
                    return EffectOutcome.ABORTED
                await self.apply(ctx, commands, hold=hold)

        return EffectOutcome.COMPLETED

    def __repr__(self) -> str:
        return f"EffectFlashing(kelvin={self.kelvin}, flashes={self.flashes})"
