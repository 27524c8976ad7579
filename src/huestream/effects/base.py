"""Base class for the light effects.

This module provides LightEffect, the abstract base class every effect
derives from. An effect is a sequence of phases: each phase issues a batch
of fixture commands concurrently and completes once every command has
settled and the phase's hold time has elapsed. Between phases the effect
polls the cancellation token and returns EffectOutcome.ABORTED as soon as
a cancellation is observed.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Iterable
from enum import Enum
from typing import TYPE_CHECKING, Any

from huestream.color import EFFECT_OFF, LightState
from huestream.config import FixtureID
from huestream.exceptions import HueDeviceError

if TYPE_CHECKING:
    from huestream.scheduler.context import SchedulerContext

_LOGGER = logging.getLogger(__name__)

Command = tuple[FixtureID, LightState]


class EffectOutcome(Enum):
    """How an effect run ended."""

    COMPLETED = "completed"
    ABORTED = "aborted"
    FAILED = "failed"


class LightEffect(ABC):
    """Abstract base class for effects run by the action queue.

    Subclasses implement async_play() and return COMPLETED when the whole
    sequence played, or ABORTED when a checkpoint observed a cancellation.
    run() wraps the sequence with the scene snapshot save/restore pair and
    turns every failure into an outcome, so nothing raised by an effect
    ever reaches the queue.

    Attributes:
        uses_snapshot: Save the fixture states before playing and restore
            them afterwards (default True)

    Example:
        ```python
        class BlinkBackLight(LightEffect):
            @property
            def name(self) -> str:
                return "blink back light"

            async def async_play(self, ctx: SchedulerContext) -> EffectOutcome:
                back = ctx.fixtures.back
                for state in (LightState(on=True), LightState(on=False)):
                    if self.aborted(ctx):
                        return EffectOutcome.ABORTED
                    await self.apply(ctx, [(back, state)], hold=ctx.pacer.interval)
                return EffectOutcome.COMPLETED
        ```
    """

    uses_snapshot: bool = True

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable effect name used in logs."""

    @abstractmethod
    async def async_play(self, ctx: SchedulerContext) -> EffectOutcome:
        """Play the effect sequence.

        Args:
            ctx: Scheduler context holding the bridge and fixtures

        Returns:
            COMPLETED or ABORTED

        Raises:
            HueDeviceError: If a fixture command failed
        """

    async def run(self, ctx: SchedulerContext) -> EffectOutcome:
        """Run the effect inside its snapshot borrow window.

        On completion the snapshot is restored. An aborted effect leaves the
        snapshot live: the next queued effect reuses it and restores it when
        done. A failed effect attempts one restore on a best-effort basis.

        Args:
            ctx: Scheduler context holding the bridge and fixtures

        Returns:
            The outcome of the run
        """
        self._log("start", logging.INFO)
        try:
            if self.uses_snapshot:
                await ctx.snapshots.save()

            outcome = await self.async_play(ctx)

            if outcome is EffectOutcome.COMPLETED and self.uses_snapshot:
                if self.aborted(ctx):
                    outcome = EffectOutcome.ABORTED
                else:
                    await ctx.snapshots.restore()
        except asyncio.CancelledError:
            self._log("cancel")
            raise
        except Exception as e:
            _LOGGER.error(
                {
                    "class": self.__class__.__name__,
                    "method": "run",
                    "action": "error",
                    "error": str(e),
                    "values": {"effect": self.name},
                },
                exc_info=not isinstance(e, HueDeviceError),
            )
            outcome = EffectOutcome.FAILED
            if self.uses_snapshot:
                await self._restore_after_failure(ctx)

        self._log(outcome.value, logging.INFO)
        return outcome

    def aborted(self, ctx: SchedulerContext) -> bool:
        """Checkpoint: return True if the effect must stop now."""
        if ctx.aborted:
            self._log("checkpoint_abort")
            return True
        return False

    async def apply(
        self,
        ctx: SchedulerContext,
        commands: Iterable[Command],
        hold: float = 0.0,
    ) -> None:
        """Run one phase: issue the commands concurrently.

        Absent fixtures (None) are skipped. The phase lasts at least hold
        seconds, so the pacing is the same whether or not a fixture is
        configured.

        Args:
            ctx: Scheduler context
            commands: (fixture ID, state) pairs
            hold: Minimum phase duration in seconds

        Raises:
            HueDeviceError: If any command failed, once all have settled
        """
        await self.settle(
            (
                ctx.bridge.set_state(fixture_id, state)
                for fixture_id, state in commands
                if fixture_id is not None
            ),
            hold=hold,
        )

    async def settle(self, operations: Iterable[Awaitable[Any]], hold: float = 0.0) -> None:
        """Await operations concurrently, as a phase barrier.

        Every operation settles even if another one fails; the first failure
        is raised afterwards.

        Raises:
            HueDeviceError: If any operation failed
        """
        pending: list[Awaitable[Any]] = list(operations)
        if hold > 0:
            pending.append(asyncio.sleep(hold))

        results = await asyncio.gather(*pending, return_exceptions=True)
        errors = [result for result in results if isinstance(result, Exception)]
        for error in errors:
            _LOGGER.warning(
                {
                    "class": self.__class__.__name__,
                    "method": "settle",
                    "action": "command_failed",
                    "error": str(error),
                    "values": {"effect": self.name},
                }
            )
        if errors:
            raise HueDeviceError(
                f"{len(errors)} fixture command(s) failed: {errors[0]}"
            ) from errors[0]

    async def clear_then_apply(
        self, ctx: SchedulerContext, fixture_id: FixtureID, state: LightState
    ) -> None:
        """Disable the effect mode of a color fixture, then apply state."""
        if fixture_id is None:
            return
        if ctx.fixtures.has_color(fixture_id):
            await ctx.bridge.set_state(fixture_id, EFFECT_OFF)
        await ctx.bridge.set_state(fixture_id, state)

    async def _restore_after_failure(self, ctx: SchedulerContext) -> None:
        try:
            await ctx.snapshots.restore()
        except Exception as e:
            _LOGGER.error(
                {
                    "class": self.__class__.__name__,
                    "method": "run",
                    "action": "restore_failed",
                    "error": str(e),
                    "values": {"effect": self.name},
                }
            )

    def _log(self, action: str, level: int = logging.DEBUG) -> None:
        _LOGGER.log(
            level,
            {
                "class": self.__class__.__name__,
                "method": "run",
                "action": action,
                "values": {"effect": self.name},
            },
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
