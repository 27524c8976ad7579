"""Effect engine: entry points for every light reaction.

This module provides the EffectEngine class, the only way the chat
commands, the stream notifications and the HTTP triggers act on the
lights. Every entry point enqueues its effect on the action queue and
returns immediately.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from functools import partial
from typing import TYPE_CHECKING, Any

from huestream.config import DEFAULT_COLOR_SCHEMES, ColorScheme
from huestream.const import (
    BITS_EFFECT_THRESHOLD,
    DEFAULT_COLOR_TRANSITION,
    KELVIN_MAX,
    KELVIN_MIN,
    SUB_GIFT_BATCH_THRESHOLD,
)
from huestream.effects import (
    ColorCommandResolver,
    EffectColorScheme,
    EffectFlashing,
    EffectOutcome,
    EffectReset,
    EffectRotating,
    EffectSelfTest,
    LightEffect,
    ResolvedColors,
)
from huestream.exceptions import ColorResolutionError

if TYPE_CHECKING:
    from huestream.color import LightState
    from huestream.scheduler.context import SchedulerContext

_LOGGER = logging.getLogger(__name__)

RAID_ROTATIONS = 13
SUBSCRIBE_FLASHES = 5
SUB_GIFT_FLASHES = 11
BITS_FLASHES = 2


class EffectEngine:
    """Central entry point for triggering light effects.

    The engine owns no state of its own beyond configuration: the queue,
    the snapshot store and the gift counter all live in the scheduler
    context it is given.

    Example:
        ```python
        engine = EffectEngine(ctx, initial_settings=config.initial_settings)

        # React to stream events
        engine.on_raided("someone", 42)

        # Preempt everything, then play the subscription effect
        await engine.cancel_all()
        engine.do_subscribe_effect()
        ```
    """

    def __init__(
        self,
        ctx: SchedulerContext,
        initial_settings: Mapping[str, LightState] | None = None,
        color_schemes: Iterable[ColorScheme] = DEFAULT_COLOR_SCHEMES,
        color_transition: int = DEFAULT_COLOR_TRANSITION,
    ) -> None:
        """Initialize the engine.

        Args:
            ctx: Scheduler context shared by every effect
            initial_settings: Light states applied by the reset effect
            color_schemes: Palettes available to color commands
            color_transition: Color change transition in milliseconds
        """
        self.ctx = ctx
        self.initial_settings = dict(initial_settings or {})
        self.resolver = ColorCommandResolver(color_schemes)
        self.color_transition = color_transition

    def enqueue(self, effect: LightEffect) -> asyncio.Future[EffectOutcome]:
        """Queue an effect behind the running and pending actions."""
        _LOGGER.debug(
            {
                "class": self.__class__.__name__,
                "method": "enqueue",
                "values": {"effect": repr(effect), "pending": self.ctx.queue.pending},
            }
        )
        return self.ctx.queue.enqueue(partial(effect.run, self.ctx))

    async def cancel_all(self) -> None:
        """Abort the running effect and wait until the queue has drained."""
        await self.ctx.queue.cancel_all()

    async def reset_lights(self) -> EffectOutcome:
        """Apply the initial light settings right away, outside the queue.

        Used once at startup, before any trigger can enqueue an action.
        """
        return await EffectReset(self.initial_settings).run(self.ctx)

    def do_reset_lights(self) -> asyncio.Future[EffectOutcome]:
        return self.enqueue(EffectReset(self.initial_settings))

    def do_light_test(self) -> asyncio.Future[EffectOutcome]:
        return self.enqueue(EffectSelfTest())

    def do_raid_effect(self) -> asyncio.Future[EffectOutcome]:
        return self.enqueue(
            EffectRotating(rgb=(255, 64, 0), kelvin=KELVIN_MIN, rotations=RAID_ROTATIONS)
        )

    def do_subscribe_effect(self) -> asyncio.Future[EffectOutcome]:
        return self.enqueue(EffectFlashing(kelvin=KELVIN_MAX, flashes=SUBSCRIBE_FLASHES))

    def do_sub_gift_effect(self) -> asyncio.Future[EffectOutcome]:
        return self.enqueue(EffectFlashing(kelvin=KELVIN_MAX, flashes=SUB_GIFT_FLASHES))

    def do_bits_effect(self) -> asyncio.Future[EffectOutcome]:
        return self.enqueue(EffectFlashing(kelvin=KELVIN_MAX, flashes=BITS_FLASHES))

    def do_log_light_state(self) -> asyncio.Future[Any]:
        return self.ctx.queue.enqueue(self.log_light_state)

    async def log_light_state(self) -> None:
        """Log the current state of every configured fixture."""
        fixtures = self.ctx.fixtures
        for fixture_id in fixtures.present:
            state = await self.ctx.bridge.get_state(fixture_id)
            _LOGGER.info(
                {
                    "class": self.__class__.__name__,
                    "method": "log_light_state",
                    "values": {
                        "fixture": fixtures.name(fixture_id),
                        "id": fixture_id,
                        "state": state.describe(),
                    },
                }
            )

    def change_scene_color(self, message: str) -> ResolvedColors | None:
        """Change the strip colors from a free-text color command.

        When an effect holds a live snapshot, the change is deferred until
        right after that snapshot is restored, otherwise the restore would
        overwrite it.

        Args:
            message: Chat message holding hex codes or scheme keywords

        Returns:
            The resolved colors, or None if nothing could be resolved
        """
        try:
            colors = self.resolver.resolve(message)
        except ColorResolutionError as e:
            _LOGGER.info(
                {
                    "class": self.__class__.__name__,
                    "method": "change_scene_color",
                    "action": "unknown_scheme",
                    "error": str(e),
                }
            )
            return None

        effect = EffectColorScheme(colors, transition=self.color_transition)
        snapshots = self.ctx.snapshots
        deferred = snapshots.is_live
        if deferred:
            snapshots.defer(partial(effect.run, self.ctx))
            queue = self.ctx.queue
            if not queue.busy and not queue.pending:
                # Left live by an aborted effect, nothing queued will restore it
                queue.enqueue(snapshots.restore)
        else:
            self.enqueue(effect)

        _LOGGER.info(
            {
                "class": self.__class__.__name__,
                "method": "change_scene_color",
                "action": "deferred" if deferred else "queued",
                "values": {"scheme": colors.name},
            }
        )
        return colors

    # Stream notifications

    def on_raided(self, username: str, viewers: int) -> None:
        self._log_event("raided", username=username, viewers=viewers)
        self.do_raid_effect()

    def on_subscription(self, username: str) -> None:
        self._log_event("subscription", username=username)
        self.do_subscribe_effect()

    def on_resub(self, username: str, cumulative_months: int) -> None:
        self._log_event("resub", username=username, cumulative_months=cumulative_months)
        self.do_subscribe_effect()

    def on_subgift(self, username: str, recipient: str, streak_months: int = 0) -> None:
        """Play the subscription effect unless the gift belongs to a batch."""
        in_batch = self.ctx.gifts.consume_one_gift(username)
        self._log_event(
            "subgift",
            username=username,
            recipient=recipient,
            streak_months=streak_months,
            in_batch=in_batch,
        )
        if not in_batch:
            self.do_subscribe_effect()

    def on_submysterygift(self, username: str, count: int) -> None:
        """Register a gift batch and play the effect matching its size."""
        self._log_event("submysterygift", username=username, count=count)
        self.ctx.gifts.register_gift_batch(username, count)
        if count >= SUB_GIFT_BATCH_THRESHOLD:
            self.do_sub_gift_effect()
        else:
            self.do_subscribe_effect()

    def on_cheer(self, username: str, bits: int) -> None:
        self._log_event("cheer", username=username, bits=bits)
        if bits >= BITS_EFFECT_THRESHOLD:
            self.do_bits_effect()

    def _log_event(self, event: str, **values: Any) -> None:
        _LOGGER.info(
            {
                "class": self.__class__.__name__,
                "method": f"on_{event}",
                "action": "event",
                "values": values,
            }
        )

    def __repr__(self) -> str:
        return f"EffectEngine(queue={self.ctx.queue!r}, snapshots={self.ctx.snapshots!r})"
