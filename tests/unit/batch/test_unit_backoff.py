# tests/unit/batch/test_unit_backoff.py — v1
"""Tests for batch/backoff.py — decaying wait, floor and retry budget."""

from __future__ import annotations

import pytest

from ai_pull_review.batch.backoff import DecayingBackoff, RetryBudgetExhausted


class _SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _backoff(**kwargs) -> tuple[DecayingBackoff, _SleepRecorder]:
    recorder = _SleepRecorder()
    return DecayingBackoff(sleep=recorder, **kwargs), recorder


class TestDecayingBackoff:
    @pytest.mark.asyncio
    async def test_sequence_from_60s(self):
        backoff, recorder = _backoff()
        waits = [await backoff.wait(60_000) for _ in range(8)]
        assert waits == [60_000, 39_960, 26_613, 17_724, 11_804, 10_000, 10_000, 10_000]
        assert recorder.calls == [w / 1000 for w in waits]

    @pytest.mark.asyncio
    async def test_floor_binds_immediately_at_10s(self):
        backoff, _ = _backoff()
        waits = [await backoff.wait(10_000) for _ in range(5)]
        assert waits == [10_000] * 5

    @pytest.mark.asyncio
    async def test_initial_only_used_on_first_call(self):
        backoff, _ = _backoff()
        await backoff.wait(60_000)
        assert await backoff.wait(500_000) == 39_960

    @pytest.mark.asyncio
    async def test_budget_decrements_once_per_call(self):
        backoff, _ = _backoff(max_retries=30)
        for expected_left in range(29, -1, -1):
            await backoff.wait(20_000)
            assert backoff.remaining_retries == expected_left

    @pytest.mark.asyncio
    async def test_exhausts_after_30_calls(self):
        backoff, recorder = _backoff()
        for _ in range(30):
            await backoff.wait(60_000)
        with pytest.raises(RetryBudgetExhausted):
            await backoff.wait(60_000)
        assert len(recorder.calls) == 30

    @pytest.mark.asyncio
    async def test_missing_initial_raises(self):
        backoff, _ = _backoff()
        with pytest.raises(ValueError, match="Initial wait"):
            await backoff.wait(0)

    @pytest.mark.asyncio
    async def test_reset_restores_initial_state(self):
        backoff, _ = _backoff(max_retries=2)
        await backoff.wait(60_000)
        await backoff.wait(60_000)
        backoff.reset()
        assert backoff.current_wait_ms is None
        assert backoff.remaining_retries == 2
        assert await backoff.wait(30_000) == 30_000

    @pytest.mark.asyncio
    async def test_custom_floor(self):
        backoff, _ = _backoff(min_wait_ms=50_000)
        await backoff.wait(60_000)
        assert await backoff.wait(60_000) == 50_000
