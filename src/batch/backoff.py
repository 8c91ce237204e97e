# src/batch/backoff.py — v1
"""Decaying wait between batch status polls.

Starts long and shortens on each call down to a floor: batch jobs are slow
at the first check and finish quickly once close to completion. Every wait
consumes one unit of a fixed retry budget.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_DECAY = 0.666
DEFAULT_MIN_WAIT_MS = 10_000
DEFAULT_MAX_RETRIES = 30


class RetryBudgetExhausted(Exception):
    """All polling retries consumed before the batch reached a terminal status."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Batch did not finish after {attempts} polling attempts")


class DecayingBackoff:
    """Wait primitive with a decreasing, floored delay and a retry budget.

    Args:
        decay: Multiplier applied to the current wait on each subsequent call.
        min_wait_ms: Floor for the wait after the first call.
        max_retries: Number of waits allowed before RetryBudgetExhausted.
        sleep: Coroutine used to suspend, in seconds (injectable for tests).
    """

    def __init__(
        self,
        decay: float = DEFAULT_DECAY,
        min_wait_ms: int = DEFAULT_MIN_WAIT_MS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._decay = decay
        self._min_wait_ms = min_wait_ms
        self._max_retries = max_retries
        self._sleep = sleep
        self._current_wait_ms: int | None = None
        self._remaining = max_retries

    @property
    def current_wait_ms(self) -> int | None:
        return self._current_wait_ms

    @property
    def remaining_retries(self) -> int:
        return self._remaining

    async def wait(self, initial_ms: int) -> int:
        """Suspend for the next wait duration and return it in milliseconds.

        The first call adopts ``initial_ms``; later calls decay the current
        wait, never below the floor.

        Raises:
            ValueError: If initial_ms is not a positive number.
            RetryBudgetExhausted: If the retry budget is already spent.
        """
        if not initial_ms or initial_ms <= 0:
            raise ValueError("Initial wait time is required")
        if self._remaining <= 0:
            raise RetryBudgetExhausted(self._max_retries)

        if self._current_wait_ms is None:
            self._current_wait_ms = int(initial_ms)
        else:
            self._current_wait_ms = max(
                math.floor(self._current_wait_ms * self._decay), self._min_wait_ms,
            )

        self._remaining -= 1
        logger.debug(
            "Sleeping for %d ms (%d retries left)", self._current_wait_ms, self._remaining,
        )
        await self._sleep(self._current_wait_ms / 1000)
        return self._current_wait_ms

    def reset(self) -> None:
        """Forget the current wait and restore the full retry budget."""
        self._current_wait_ms = None
        self._remaining = self._max_retries
