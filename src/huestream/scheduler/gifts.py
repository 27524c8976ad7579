"""Pending gift subscription bookkeeping."""

from __future__ import annotations

import logging

_LOGGER = logging.getLogger(__name__)


class SubGiftCounter:
    """Per-user count of gift subscriptions announced by a gift batch.

    When a user gives away a batch of subscriptions, the chat service first
    announces the batch and then sends one gift notification per recipient.
    The batch already played its own effect, so each of those individual
    gifts must not trigger the standalone subscription effect again.

    A username is present only while its count is positive; presence is
    what marks a gift as part of a batch.

    Example:
        ```python
        gifts = SubGiftCounter()
        gifts.register_gift_batch("alice", 2)
        gifts.consume_one_gift("alice")  # True
        gifts.consume_one_gift("alice")  # True
        gifts.consume_one_gift("alice")  # False, standalone gift
        ```
    """

    def __init__(self) -> None:
        self._pending: dict[str, int] = {}

    def register_gift_batch(self, username: str, count: int = 1) -> None:
        """Add count gifts to the pending total of username."""
        if count <= 0:
            return
        self._pending[username] = self._pending.get(username, 0) + count
        _LOGGER.debug(
            {
                "class": self.__class__.__name__,
                "method": "register_gift_batch",
                "values": {"username": username, "pending": self._pending[username]},
            }
        )

    def consume_one_gift(self, username: str) -> bool:
        """Account for one individual gift from username.

        Returns:
            True if the gift belonged to a registered batch (the caller must
            not play the standalone effect), False otherwise
        """
        if username not in self._pending:
            return False
        self._pending[username] -= 1
        if self._pending[username] <= 0:
            del self._pending[username]
        return True

    def pending(self, username: str) -> int:
        """Return the number of gifts still expected from username."""
        return self._pending.get(username, 0)

    def __contains__(self, username: object) -> bool:
        return username in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def __repr__(self) -> str:
        return f"SubGiftCounter(pending={self._pending})"
