"""Cooperative cancellation shared by every queued action."""

from __future__ import annotations

from huestream.exceptions import ActionAbortedError


class CancellationToken:
    """Process-wide abort flag polled by effects at their checkpoints.

    The flag is set by ActionQueue.cancel_all() and cleared by an action
    queued behind the running one, so it only stays up for as long as the
    actions queued before the clear are draining.
    """

    def __init__(self) -> None:
        self._aborted = False

    @property
    def aborted(self) -> bool:
        """True while a cancellation is draining through the queue."""
        return self._aborted

    def set(self) -> None:
        self._aborted = True

    def clear(self) -> None:
        self._aborted = False

    def raise_if_aborted(self) -> None:
        """Raise ActionAbortedError if the flag is set.

        For callers outside the effect classes that prefer unwinding; the
        effects themselves test `aborted` and return an outcome instead.
        """
        if self._aborted:
            raise ActionAbortedError("Action aborted")

    def __repr__(self) -> str:
        return f"CancellationToken(aborted={self._aborted})"
