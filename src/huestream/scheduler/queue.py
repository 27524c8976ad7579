"""Serialized action queue.

This module provides the ActionQueue class that runs every light action
one at a time, in submission order.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from huestream.scheduler.cancellation import CancellationToken

if TYPE_CHECKING:
    from typing import Self

_LOGGER = logging.getLogger(__name__)

Action = Callable[[], Awaitable[Any] | Any]


def _retrieve_exception(future: asyncio.Future[Any]) -> None:
    # Failures are logged by the worker; nobody has to await the future.
    if not future.cancelled():
        future.exception()


def _action_name(action: Action) -> str:
    return getattr(action, "__qualname__", None) or type(action).__name__


class ActionQueue:
    """Strict FIFO queue of asynchronous actions consumed by one worker.

    Submission never blocks: enqueue() appends the action and returns a
    future resolved once the action has run. A single worker task awaits
    each action to completion before starting the next, so no two actions
    ever overlap. An action that raises is logged and the queue carries on
    with the next one.

    Attributes:
        token: Cancellation token shared with the running actions

    Example:
        ```python
        queue = ActionQueue()
        queue.enqueue(effect_a.run)
        queue.enqueue(effect_b.run)  # starts once effect_a has finished

        # Abort whatever runs, wait for the queue to settle
        await queue.cancel_all()
        ```
    """

    def __init__(self, token: CancellationToken | None = None) -> None:
        """Initialize the queue.

        Args:
            token: Cancellation token to share, a new one if None
        """
        self.token = token if token is not None else CancellationToken()
        self._pending: asyncio.Queue[tuple[Action, asyncio.Future[Any]]] = (
            asyncio.Queue()
        )
        self._worker: asyncio.Task[None] | None = None
        self._current: Action | None = None

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    @property
    def busy(self) -> bool:
        """True while an action is running."""
        return self._current is not None

    @property
    def pending(self) -> int:
        """Number of actions waiting behind the running one."""
        return self._pending.qsize()

    def start(self) -> None:
        """Start the worker task if it is not running.

        Must be called from within a running event loop. enqueue() calls it
        implicitly.
        """
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(
                self._run(), name="huestream-action-queue"
            )

    def enqueue(self, action: Action) -> asyncio.Future[Any]:
        """Append an action to the queue and return immediately.

        Args:
            action: Callable returning an awaitable (or a plain value)

        Returns:
            Future resolved with the action's result once it has run, or
            with its exception if it failed
        """
        self.start()
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        future.add_done_callback(_retrieve_exception)
        self._pending.put_nowait((action, future))
        _LOGGER.debug(
            {
                "class": self.__class__.__name__,
                "method": "enqueue",
                "values": {
                    "action": _action_name(action),
                    "pending": self._pending.qsize(),
                },
            }
        )
        return future

    async def join(self) -> None:
        """Wait until every action enqueued so far has run."""
        await asyncio.shield(self.enqueue(lambda: None))

    async def cancel_all(self) -> None:
        """Abort the running and pending actions, then wait for the queue.

        Sets the cancellation flag and queues an action that clears it. The
        effects ahead of that action observe the flag at their next
        checkpoint and end early; returns once the clearing action ran.
        """
        _LOGGER.debug(
            {
                "class": self.__class__.__name__,
                "method": "cancel_all",
                "values": {"busy": self.busy, "pending": self._pending.qsize()},
            }
        )
        self.token.set()
        await asyncio.shield(self.enqueue(self.token.clear))

    async def close(self) -> None:
        """Stop the worker and cancel the actions that have not run."""
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            await asyncio.gather(self._worker, return_exceptions=True)
        self._worker = None

        while not self._pending.empty():
            _action, future = self._pending.get_nowait()
            future.cancel()

    async def _run(self) -> None:
        """Worker loop: run queued actions one after another."""
        while True:
            action, future = await self._pending.get()
            self._current = action
            try:
                result = action()
                if inspect.isawaitable(result):
                    result = await result
            except asyncio.CancelledError:
                future.cancel()
                raise
            except Exception as e:
                _LOGGER.error(
                    {
                        "class": self.__class__.__name__,
                        "method": "_run",
                        "action": "error",
                        "error": str(e),
                        "values": {"action": _action_name(action)},
                    },
                    exc_info=True,
                )
                if not future.done():
                    future.set_exception(e)
            else:
                if not future.done():
                    future.set_result(result)
            finally:
                self._current = None
                self._pending.task_done()

    def __repr__(self) -> str:
        return f"ActionQueue(busy={self.busy}, pending={self.pending})"
