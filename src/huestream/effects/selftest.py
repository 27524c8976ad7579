"""Self-test effect: blink every fixture in turn."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from huestream.color import LIGHT_OFF, LightState, kelvin_to_mired
from huestream.const import (
    BRIGHTNESS_MAX,
    KELVIN_MAX,
    SELF_TEST_BLINK_TRANSITION,
    SELF_TEST_BLINKS,
    SELF_TEST_PAUSE,
)
from huestream.effects.base import EffectOutcome, LightEffect

if TYPE_CHECKING:
    from huestream.scheduler.context import SchedulerContext

_LOGGER = logging.getLogger(__name__)


class EffectSelfTest(LightEffect):
    """Blink each fixture in the fixed role order.

    Lets the broadcaster check that every fixture ID is mapped to the right
    physical light: all lights go dark, then each one blinks on its own.

    Attributes:
        blinks: Number of blinks per fixture (default 6)
        blink_transition: Duration of each on/off step in ms (default 250)
        pause: Dark pause before and after the blinks in seconds (default 1.5)
        kelvin: Color temperature of the blink (default 6500)

    Example:
        ```python
        queue.enqueue(partial(EffectSelfTest().run, ctx))
        ```
    """

    def __init__(
        self,
        blinks: int = SELF_TEST_BLINKS,
        blink_transition: int = SELF_TEST_BLINK_TRANSITION,
        pause: float = SELF_TEST_PAUSE,
        kelvin: int = KELVIN_MAX,
    ) -> None:
        if blinks < 1:
            raise ValueError(f"Blinks must be positive, got {blinks}")
        if blink_transition < 0:
            raise ValueError(
                f"Blink transition must be non-negative, got {blink_transition}"
            )
        if pause < 0:
            raise ValueError(f"Pause must be non-negative, got {pause}")

        self.blinks = blinks
        self.blink_transition = blink_transition
        self.pause = pause
        self.kelvin = kelvin

    @property
    def name(self) -> str:
        return "light test"

    async def async_play(self, ctx: SchedulerContext) -> EffectOutcome:
        if self.aborted(ctx):
            return EffectOutcome.ABORTED

        # Turn all the lights off
        dark = LIGHT_OFF.with_transition(0)
        await self.settle(
            self.clear_then_apply(ctx, fixture_id, dark)
            for fixture_id in ctx.fixtures.present
        )

        if self.aborted(ctx):
            return EffectOutcome.ABORTED

        await asyncio.sleep(self.pause)

        blink_on = LightState(
            on=True,
            ct=kelvin_to_mired(self.kelvin),
            bri=BRIGHTNESS_MAX,
            transition=self.blink_transition,
        )
        blink_off = LIGHT_OFF.with_transition(self.blink_transition)
        hold = self.blink_transition / 1000

        for fixture_id in ctx.fixtures.present:
            _LOGGER.info(
                {
                    "class": self.__class__.__name__,
                    "method": "async_play",
                    "action": "test_fixture",
                    "values": {
                        "fixture": ctx.fixtures.name(fixture_id),
                        "id": fixture_id,
                    },
                }
            )
            for _blink in range(self.blinks):
                if self.aborted(ctx):
                    return EffectOutcome.ABORTED
                await self.apply(ctx, [(fixture_id, blink_on)], hold=hold)
                if self.aborted(ctx):
                    return EffectOutcome.ABORTED
                await self.apply(ctx, [(fixture_id, blink_off)], hold=hold)

        if self.aborted(ctx):
            return EffectOutcome.ABORTED

        await asyncio.sleep(self.pause)
        return EffectOutcome.COMPLETED

    def __repr__(self) -> str:
        return (
            f"EffectSelfTest(blinks={self.blinks}, "
            f"blink_transition={self.blink_transition}, pause={self.pause}, "
            f"kelvin={self.kelvin})"
        )
