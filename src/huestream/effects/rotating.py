"""Rotating effect: a diagonal chase around the key lights and strips."""

from __future__ import annotations

from typing import TYPE_CHECKING

from huestream.color import EFFECT_OFF, LIGHT_OFF, LightState, kelvin_to_mired
from huestream.const import BRIGHTNESS_MAX, BRIGHTNESS_MIN, KELVIN_MIN
from huestream.effects.base import Command, EffectOutcome, LightEffect

if TYPE_CHECKING:
    from huestream.config import FixtureLayout
    from huestream.scheduler.context import SchedulerContext


class EffectRotating(LightEffect):
    """Rotating beacon across the four fixtures framing the camera.

    The two strips glow in an accent color above the two key lights. Each
    phase brightens one fixture and dims another, so that a full rotation
    of four phases touches every fixture once and the bright pair travels
    around the frame::

        strips  0 0    0 1    1 1    1 0    0 0
        keys    1 1 -> 0 1 -> 0 0 -> 1 0 -> 1 1

    Phases are paced at the maximum request rate of the bridge.

    Attributes:
        rgb: Accent color of the strips (default orange)
        kelvin: Key light temperature in Kelvin (default 2000)
        rotations: Number of full rotations (default 8)
    """

    def __init__(
        self,
        rgb: tuple[int, int, int] = (255, 64, 0),
        kelvin: int = KELVIN_MIN,
        rotations: int = 8,
    ) -> None:
        if rotations < 0:
            raise ValueError(f"Rotations must be non-negative, got {rotations}")
        if any(not (0 <= c <= 255) for c in rgb):
            raise ValueError(f"RGB components must be 0-255, got {rgb}")

        self.rgb = rgb
        self.kelvin = kelvin
        self.rotations = rotations

    @property
    def name(self) -> str:
        return "rotating lights"

    @staticmethod
    def rotation(fixtures: FixtureLayout) -> list[tuple[int | None, int | None]]:
        """(brightened, dimmed) fixture pairs of one rotation, in order."""
        return [
            (fixtures.right_strip, fixtures.left_key),
            (fixtures.left_strip, fixtures.right_key),
            (fixtures.left_key, fixtures.right_strip),
            (fixtures.right_key, fixtures.left_strip),
        ]

    async def async_play(self, ctx: SchedulerContext) -> EffectOutcome:
        fixtures = ctx.fixtures
        rate = ctx.pacer.interval_ms
        hold = ctx.pacer.interval
        ct = kelvin_to_mired(self.kelvin)

        if self.aborted(ctx):
            return EffectOutcome.ABORTED

        # Disable effects and unneeded lights
        await self.apply(
            ctx,
            [
                (fixtures.back, LIGHT_OFF.with_transition(rate)),
                (fixtures.right_strip, EFFECT_OFF),
                (fixtures.left_strip, EFFECT_OFF),
            ],
            hold=hold,
        )

        if self.aborted(ctx):
            return EffectOutcome.ABORTED

        accent = LightState(on=True, rgb=self.rgb, bri=BRIGHTNESS_MIN, transition=rate)
        key = LightState(on=True, ct=ct, bri=BRIGHTNESS_MAX, transition=rate)
        await self.apply(
            ctx,
            [
                (fixtures.right_strip, accent),
                (fixtures.left_strip, accent),
                (fixtures.left_key, key),
                (fixtures.right_key, key),
            ],
            hold=hold,
        )

        bright = LightState(bri=BRIGHTNESS_MAX, transition=rate)
        dim = LightState(bri=BRIGHTNESS_MIN, transition=rate)
        for _rotation in range(self.rotations):
            for brightened, dimmed in self.rotation(fixtures):
                if self.aborted(ctx):
                    return EffectOutcome.ABORTED
                commands: list[Command] = [(brightened, bright), (dimmed, dim)]
                await self.apply(ctx, commands, hold=hold)

        return EffectOutcome.COMPLETED

    def __repr__(self) -> str:
        return (
            f"EffectRotating(rgb={self.rgb}, kelvin={self.kelvin}, "
            f"rotations={self.rotations})"
        )
