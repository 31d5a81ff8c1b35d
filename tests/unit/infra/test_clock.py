"""Clock 단위 테스트."""

import asyncio
import time

import pytest

from trust_fabric.infra.clock import SystemClock, VirtualClock


class TestVirtualClock:
    @pytest.mark.asyncio
    async def test_sleep_advances_time(self):
        clock = VirtualClock(start=10.0)
        assert await clock.sleep(2.5) is False
        assert clock.monotonic() == 12.5
        assert clock.sleeps == [2.5]

    @pytest.mark.asyncio
    async def test_sleep_returns_immediately_when_cancelled(self):
        clock = VirtualClock()
        cancel = asyncio.Event()
        cancel.set()
        assert await clock.sleep(2, cancel) is True
        assert clock.monotonic() == 0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_tasks_have_independent_timelines(self):
        clock = VirtualClock()

        async def worker(n: int) -> float:
            for _ in range(n):
                await clock.sleep(2)
            return clock.monotonic()

        a, b = await asyncio.gather(worker(3), worker(10))
        assert (a, b) == (6, 20)
        # 부모 task 시각은 변하지 않음
        assert clock.monotonic() == 0


class TestSystemClock:
    @pytest.mark.asyncio
    async def test_sleep_without_cancel(self):
        assert await SystemClock().sleep(0.01) is False

    @pytest.mark.asyncio
    async def test_sleep_elapses(self):
        cancel = asyncio.Event()
        assert await SystemClock().sleep(0.01, cancel) is False

    @pytest.mark.asyncio
    async def test_cancel_wakes_sleep(self):
        cancel = asyncio.Event()
        asyncio.get_running_loop().call_later(0.05, cancel.set)
        started = time.monotonic()
        assert await SystemClock().sleep(30, cancel) is True
        assert time.monotonic() - started < 5
