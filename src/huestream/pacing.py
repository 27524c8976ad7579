"""Request pacing derived from the bridge's maximum request rate."""

from __future__ import annotations

import asyncio

from huestream.const import MAX_REQUESTS_PER_SECOND


class RatePacer:
    """Fixed minimum interval between two batches of fixture commands.

    Effects use the interval both as the transition duration of their
    commands and as the minimum hold time of a phase, so the sequence never
    issues requests faster than the bridge accepts them.

    Example:
        ```python
        pacer = RatePacer(max_requests_per_second=10)
        pacer.interval_ms  # 100
        await pacer.wait(4)  # hold for four intervals
        ```
    """

    def __init__(self, max_requests_per_second: float = MAX_REQUESTS_PER_SECOND) -> None:
        """Initialize the pacer.

        Args:
            max_requests_per_second: Maximum rate accepted by the device

        Raises:
            ValueError: If the rate is not positive
        """
        if max_requests_per_second <= 0:
            raise ValueError(
                f"Request rate must be positive, got {max_requests_per_second}"
            )
        self._rate = max_requests_per_second

    @property
    def rate(self) -> float:
        """Maximum number of requests per second."""
        return self._rate

    @property
    def interval(self) -> float:
        """Minimum interval between command batches, in seconds."""
        return 1.0 / self._rate

    @property
    def interval_ms(self) -> int:
        """Minimum interval between command batches, in milliseconds."""
        return round(1000 / self._rate)

    async def wait(self, intervals: float = 1) -> None:
        """Sleep for the given number of pacing intervals."""
        await asyncio.sleep(self.interval * intervals)

    def __repr__(self) -> str:
        return f"RatePacer(rate={self._rate})"
