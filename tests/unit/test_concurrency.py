"""Unit tests for throttled_gather."""

from __future__ import annotations

import asyncio

import pytest

from lncli.utils.concurrency import throttled_gather


class TestThrottledGather:
    @pytest.mark.asyncio
    async def test_results_keep_input_order(self) -> None:
        async def echo(value: int, delay: float) -> int:
            await asyncio.sleep(delay)
            return value

        results = await throttled_gather(
            [echo(1, 0.03), echo(2, 0.0), echo(3, 0.01)],
            semaphore=asyncio.Semaphore(3),
        )
        assert results == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_exceptions_returned_in_place(self) -> None:
        async def fail() -> int:
            raise ValueError("bad")

        async def ok() -> int:
            return 7

        results = await throttled_gather([ok(), fail()], semaphore=asyncio.Semaphore(1))
        assert results[0] == 7
        assert isinstance(results[1], ValueError)

    @pytest.mark.asyncio
    async def test_timeout_per_item(self) -> None:
        async def slow() -> int:
            await asyncio.sleep(5)
            return 1

        async def fast() -> int:
            return 2

        results = await throttled_gather(
            [slow(), fast()], semaphore=asyncio.Semaphore(2), timeout=0.05
        )
        assert isinstance(results[0], asyncio.TimeoutError)
        assert results[1] == 2

    @pytest.mark.asyncio
    async def test_semaphore_bounds_parallelism(self) -> None:
        active = 0
        peak = 0

        async def work() -> None:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1

        await throttled_gather([work() for _ in range(6)], semaphore=asyncio.Semaphore(2))
        assert peak == 2
