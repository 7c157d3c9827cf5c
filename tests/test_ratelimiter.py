"""Tests for the asyncio FIFO rate limiter."""

from __future__ import annotations

import asyncio

import pytest

from eveonline.ratelimiter import RateLimiter


class TestConstruction:
    @pytest.mark.parametrize("rate", [0, -1])
    def test_rate_must_be_positive(self, rate: float) -> None:
        with pytest.raises(ValueError):
            RateLimiter(per_second=rate)

    def test_per_second_property(self) -> None:
        assert RateLimiter(per_second=30).per_second == 30


class TestScheduling:
    @pytest.mark.asyncio
    async def test_job_result_resolves_future(self) -> None:
        limiter = RateLimiter(per_second=10)
        assert await limiter.enqueue(lambda: 42) == 42

    @pytest.mark.asyncio
    async def test_job_never_runs_inside_enqueue(self) -> None:
        limiter = RateLimiter(per_second=10)
        calls: list[str] = []
        future = limiter.enqueue(lambda: calls.append("ran"))
        assert calls == []
        await future
        assert calls == ["ran"]

    @pytest.mark.asyncio
    async def test_jobs_run_in_fifo_order(self) -> None:
        limiter = RateLimiter(per_second=200)
        order: list[int] = []
        futures = [limiter.enqueue(lambda i=i: order.append(i)) for i in range(5)]
        assert limiter.pending == 4
        await asyncio.gather(*futures)
        assert order == [0, 1, 2, 3, 4]
        assert limiter.pending == 0

    @pytest.mark.asyncio
    async def test_jobs_are_spaced_by_interval(self) -> None:
        per_second = 20
        limiter = RateLimiter(per_second=per_second)
        loop = asyncio.get_running_loop()
        started: list[float] = []

        await asyncio.gather(*[limiter.enqueue(lambda: started.append(loop.time())) for _ in range(4)])

        gaps = [b - a for a, b in zip(started, started[1:])]
        # Small tolerance for timer granularity of the event loop.
        assert all(gap >= 1 / per_second - 0.005 for gap in gaps)

    @pytest.mark.asyncio
    async def test_job_within_interval_waits_for_remainder(self) -> None:
        per_second = 10
        limiter = RateLimiter(per_second=per_second)
        loop = asyncio.get_running_loop()
        started: list[float] = []

        first = limiter.enqueue(lambda: started.append(loop.time()))
        second = limiter.enqueue(lambda: started.append(loop.time()))
        assert limiter.pending == 1
        await asyncio.gather(first, second)

        assert started[1] - started[0] >= 1 / per_second - 0.005

    @pytest.mark.asyncio
    async def test_idle_limiter_runs_next_job_promptly(self) -> None:
        limiter = RateLimiter(per_second=20)
        await limiter.enqueue(lambda: None)
        await asyncio.sleep(0.06)
        future = limiter.enqueue(lambda: "fresh")
        assert limiter.pending == 0
        assert await future == "fresh"

    @pytest.mark.asyncio
    async def test_coroutine_jobs_are_awaited(self) -> None:
        limiter = RateLimiter(per_second=10)

        async def job() -> str:
            await asyncio.sleep(0)
            return "done"

        assert await limiter.enqueue(job) == "done"


class TestFailures:
    @pytest.mark.asyncio
    async def test_failing_job_only_fails_its_future(self) -> None:
        limiter = RateLimiter(per_second=200)

        def boom() -> None:
            raise RuntimeError("boom")

        failing = limiter.enqueue(boom)
        ok = limiter.enqueue(lambda: "ok")

        with pytest.raises(RuntimeError, match="boom"):
            await failing
        assert await ok == "ok"

    @pytest.mark.asyncio
    async def test_failing_coroutine_job(self) -> None:
        limiter = RateLimiter(per_second=10)

        async def job() -> None:
            raise ValueError("bad")

        with pytest.raises(ValueError, match="bad"):
            await limiter.enqueue(job)

    @pytest.mark.asyncio
    async def test_cancelled_future_skips_job(self) -> None:
        limiter = RateLimiter(per_second=200)
        calls: list[int] = []
        first = limiter.enqueue(lambda: calls.append(1))
        second = limiter.enqueue(lambda: calls.append(2))
        second.cancel()
        await first
        await asyncio.sleep(0.02)
        assert calls == [1]
