"""Shared fixtures: a mocked bridge and a fast scheduler context."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from huestream.bridge import HueBridge
from huestream.color import LightState
from huestream.config import FixtureLayout
from huestream.pacing import RatePacer
from huestream.scheduler import SchedulerContext

# 1 ms pacing interval keeps the effect sequences short
FAST_RATE = 1000


@pytest.fixture
def bridge() -> MagicMock:
    """Create a mock bridge recording every fixture command."""
    bridge = MagicMock(spec=HueBridge)
    bridge.get_state = AsyncMock(return_value=LightState(on=True, bri=254, ct=153))
    bridge.set_state = AsyncMock()
    bridge.create_scene = AsyncMock(return_value="scene-1")
    bridge.activate_scene = AsyncMock()
    bridge.delete_scene = AsyncMock()
    return bridge


@pytest.fixture
def layout() -> FixtureLayout:
    return FixtureLayout(left_key=1, right_key=2, back=3, left_strip=4, right_strip=5)


@pytest.fixture
async def ctx(bridge: MagicMock, layout: FixtureLayout):
    """Create a scheduler context over the mock bridge."""
    context = SchedulerContext(bridge, layout, pacer=RatePacer(FAST_RATE))
    yield context
    await context.queue.close()


@pytest.fixture
def commands(bridge: MagicMock) -> Callable[[], list[tuple[int, LightState]]]:
    """Return a function listing the (fixture ID, state) commands sent so far."""

    def _commands() -> list[tuple[int, LightState]]:
        return [tuple(call.args) for call in bridge.set_state.await_args_list]

    return _commands
