"""Reset effect: return every fixture to its configured initial setting."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from huestream.color import LightState
from huestream.const import RESET_TRANSITION
from huestream.effects.base import EffectOutcome, LightEffect

if TYPE_CHECKING:
    from huestream.scheduler.context import SchedulerContext


class EffectReset(LightEffect):
    """Apply the initial light settings to every configured fixture.

    Color fixtures have their named effect mode cleared first. All fixtures
    are handled concurrently. No snapshot is taken since there is no
    previous state worth restoring.

    Attributes:
        settings: Initial light state by fixture role
        transition: Transition duration in milliseconds (default 100)
    """

    uses_snapshot = False

    def __init__(
        self,
        settings: Mapping[str, LightState],
        transition: int = RESET_TRANSITION,
    ) -> None:
        if transition < 0:
            raise ValueError(f"Transition must be non-negative, got {transition}")
        self.settings = dict(settings)
        self.transition = transition

    @property
    def name(self) -> str:
        return "reset"

    async def async_play(self, ctx: SchedulerContext) -> EffectOutcome:
        if self.aborted(ctx):
            return EffectOutcome.ABORTED

        await self.settle(
            self.clear_then_apply(
                ctx,
                getattr(ctx.fixtures, role),
                state.with_transition(self.transition),
            )
            for role, state in self.settings.items()
        )
        return EffectOutcome.COMPLETED

    def __repr__(self) -> str:
        return f"EffectReset(roles={list(self.settings)}, transition={self.transition})"
