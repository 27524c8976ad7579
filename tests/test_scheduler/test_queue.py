"""Tests for ActionQueue and CancellationToken."""

import asyncio

import pytest

from huestream.exceptions import ActionAbortedError
from huestream.scheduler import ActionQueue, CancellationToken


@pytest.fixture
async def queue():
    """Create a started ActionQueue, closed after the test."""
    queue = ActionQueue()
    queue.start()
    yield queue
    await queue.close()


def test_token_set_and_clear() -> None:
    """Test the cancellation flag toggles."""
    token = CancellationToken()
    assert token.aborted is False

    token.set()
    assert token.aborted is True
    with pytest.raises(ActionAbortedError):
        token.raise_if_aborted()

    token.clear()
    assert token.aborted is False
    token.raise_if_aborted()


async def test_enqueue_returns_immediately(queue: ActionQueue) -> None:
    """Test enqueue does not wait for the action to run."""
    started = asyncio.Event()
    release = asyncio.Event()

    async def action() -> str:
        started.set()
        await release.wait()
        return "done"

    future = queue.enqueue(action)
    assert not future.done()

    await asyncio.wait_for(started.wait(), timeout=1.0)
    assert queue.busy

    release.set()
    assert await asyncio.wait_for(future, timeout=1.0) == "done"


async def test_actions_run_in_order_without_interleaving(queue: ActionQueue) -> None:
    """Test A then B run fully one after another, whatever their delays."""
    events: list[str] = []

    def make_action(name: str, delays: list[float]):
        async def action() -> None:
            events.append(f"{name} start")
            for delay in delays:
                await asyncio.sleep(delay)
                events.append(f"{name} step")
            events.append(f"{name} end")

        return action

    first = queue.enqueue(make_action("A", [0.02, 0.0, 0.01]))
    second = queue.enqueue(make_action("B", [0.0, 0.0]))
    await asyncio.wait_for(asyncio.gather(first, second), timeout=1.0)

    assert events == [
        "A start",
        "A step",
        "A step",
        "A step",
        "A end",
        "B start",
        "B step",
        "B step",
        "B end",
    ]


async def test_plain_callables_are_supported(queue: ActionQueue) -> None:
    """Test actions returning a plain value instead of an awaitable."""
    future = queue.enqueue(lambda: 42)
    assert await asyncio.wait_for(future, timeout=1.0) == 42


async def test_failing_action_does_not_poison_queue(queue: ActionQueue) -> None:
    """Test the chain continues after an action raised."""

    async def broken() -> None:
        raise RuntimeError("boom")

    failed = queue.enqueue(broken)
    after = queue.enqueue(lambda: "still running")

    assert await asyncio.wait_for(after, timeout=1.0) == "still running"
    with pytest.raises(RuntimeError, match="boom"):
        await failed


async def test_pending_count(queue: ActionQueue) -> None:
    """Test pending counts the actions waiting behind the running one."""
    release = asyncio.Event()
    started = asyncio.Event()

    async def blocker() -> None:
        started.set()
        await release.wait()

    queue.enqueue(blocker)
    await asyncio.wait_for(started.wait(), timeout=1.0)
    queue.enqueue(lambda: None)
    queue.enqueue(lambda: None)

    assert queue.pending == 2

    release.set()
    await asyncio.wait_for(queue.join(), timeout=1.0)
    assert queue.pending == 0
    assert not queue.busy


async def test_cancel_all_sets_flag_until_drained(queue: ActionQueue) -> None:
    """Test running actions observe the flag and it is cleared afterwards."""
    observed: list[bool] = []
    started = asyncio.Event()

    async def polling_action() -> None:
        started.set()
        while not queue.token.aborted:
            await asyncio.sleep(0.001)
        observed.append(queue.token.aborted)

    queue.enqueue(polling_action)
    await asyncio.wait_for(started.wait(), timeout=1.0)

    await asyncio.wait_for(queue.cancel_all(), timeout=1.0)

    assert observed == [True]
    assert queue.token.aborted is False


async def test_queue_accepts_work_after_cancel_all(queue: ActionQueue) -> None:
    """Test an action enqueued after cancel_all runs with the flag cleared."""
    await asyncio.wait_for(queue.cancel_all(), timeout=1.0)

    future = queue.enqueue(lambda: queue.token.aborted)
    assert await asyncio.wait_for(future, timeout=1.0) is False


async def test_close_cancels_pending_actions() -> None:
    """Test close() cancels the futures of actions that never ran."""
    queue = ActionQueue()
    release = asyncio.Event()
    started = asyncio.Event()

    async def blocker() -> None:
        started.set()
        await release.wait()

    running = queue.enqueue(blocker)
    waiting = queue.enqueue(lambda: None)
    await asyncio.wait_for(started.wait(), timeout=1.0)

    await queue.close()

    assert running.cancelled()
    assert waiting.cancelled()


async def test_context_manager() -> None:
    """Test the queue works as an async context manager."""
    async with ActionQueue() as queue:
        assert await asyncio.wait_for(queue.enqueue(lambda: "ok"), timeout=1.0) == "ok"
