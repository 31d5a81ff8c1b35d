"""시계 추상화 — 폴링 루프의 시간/대기를 주입 가능하게 분리.

SystemClock: time.monotonic + asyncio 대기 (취소 신호 즉시 반영).
VirtualClock: 실제 대기 없이 시간만 진행 (테스트용).

Usage:
    clock = SystemClock()
    cancelled = await clock.sleep(2.0, cancel_event)
"""

import asyncio
import contextvars
import itertools
import time
from typing import Protocol


class Clock(Protocol):
    def monotonic(self) -> float: ...

    async def sleep(self, seconds: float, cancel: asyncio.Event | None = None) -> bool:
        """seconds 동안 대기. 취소 신호로 깨어나면 True."""
        ...


class SystemClock:
    """실제 시계."""

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float, cancel: asyncio.Event | None = None) -> bool:
        if cancel is None:
            await asyncio.sleep(max(seconds, 0))
            return False
        if cancel.is_set():
            return True
        try:
            await asyncio.wait_for(cancel.wait(), timeout=max(seconds, 0))
        except TimeoutError:
            return False
        return True


_clock_ids = itertools.count()


class VirtualClock:
    """가상 시계 — sleep()은 즉시 반환하고 시간만 진행.

    현재 시각은 ContextVar에 저장되므로 asyncio task마다 독립된 타임라인을 가짐
    (task 생성 시점의 부모 시각에서 출발). 서비스별 poller가 서로의 대기 시간을
    소비하지 않음.
    """

    def __init__(self, start: float = 0.0):
        self._now: contextvars.ContextVar[float] = contextvars.ContextVar(
            f"virtual_clock_{next(_clock_ids)}", default=start
        )
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self._now.get()

    def advance(self, seconds: float) -> None:
        self._now.set(self._now.get() + seconds)

    async def sleep(self, seconds: float, cancel: asyncio.Event | None = None) -> bool:
        if cancel is not None and cancel.is_set():
            return True
        self.sleeps.append(seconds)
        self.advance(max(seconds, 0))
        # 다른 task에 실행 기회 양보
        await asyncio.sleep(0)
        return cancel is not None and cancel.is_set()
