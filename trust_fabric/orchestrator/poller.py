"""Health Poller — 단일 엔드포인트 liveness 폴링.

상태 전이: POLLING → READY | TIMED_OUT | CANCELLED

- 응답 코드가 accepted_codes에 포함 → READY
- 네트워크 오류(연결 거부, TLS, DNS, 응답 디코딩 실패)와 비허용 코드는 "아직 준비 안 됨"으로 재시도
- 데드라인(시작 + timeout) 경과 → TIMED_OUT
- 취소 신호 → CANCELLED (대기/요청 중에도 즉시)

Usage:
    async with httpx.AsyncClient() as client:
        outcome = await poll(endpoint, "/api/v1/status", client=client, timeout=120, interval=2)
"""

import asyncio
import contextlib
import logging
from collections.abc import Collection

import httpx

from trust_fabric.domain.enums import PollStatus
from trust_fabric.domain.health import PollOutcome
from trust_fabric.domain.services import ResolvedEndpoint
from trust_fabric.infra.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0
DEFAULT_INTERVAL = 2.0
DEFAULT_REQUEST_TIMEOUT = 5.0


class _Cancelled(Exception):
    """요청 대기 중 취소 신호 수신."""


async def _cancel_and_drain(task: asyncio.Future) -> None:
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError, Exception):
        await task


class HealthPoller:
    """단일 서비스 폴링 상태 머신."""

    def __init__(
        self,
        endpoint: ResolvedEndpoint,
        probe_path: str,
        *,
        client: httpx.AsyncClient,
        timeout: float = DEFAULT_TIMEOUT,
        interval: float = DEFAULT_INTERVAL,
        accepted_codes: Collection[int] = (200,),
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        cancel: asyncio.Event | None = None,
        clock: Clock | None = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.endpoint = endpoint
        self.url = endpoint.url(probe_path)
        self._client = client
        self._timeout = timeout
        self._interval = interval
        self._accepted = frozenset(accepted_codes)
        self._request_timeout = request_timeout
        self._cancel = cancel or asyncio.Event()
        self._clock = clock or SystemClock()

        self._attempts = 0
        self._last_code: int | None = None
        self._last_error: str | None = None

    async def run(self) -> PollOutcome:
        start = self._clock.monotonic()
        deadline = start + self._timeout
        logger.info("Waiting for %s at %s (timeout %.0fs)", self.endpoint.service, self.url, self._timeout)

        while True:
            if self._cancel.is_set():
                return self._finish(PollStatus.CANCELLED, start)

            remaining = deadline - self._clock.monotonic()
            try:
                code = await self._probe(max(min(self._request_timeout, remaining), 0.001))
            except _Cancelled:
                return self._finish(PollStatus.CANCELLED, start)

            if code is not None and code in self._accepted:
                return self._finish(PollStatus.READY, start)

            now = self._clock.monotonic()
            if now >= deadline:
                return self._finish(PollStatus.TIMED_OUT, start)

            if await self._clock.sleep(min(self._interval, deadline - now), self._cancel):
                return self._finish(PollStatus.CANCELLED, start)

    async def _probe(self, request_timeout: float) -> int | None:
        """요청 1회. 응답 코드 반환, 네트워크 오류면 None."""
        self._attempts += 1
        request = asyncio.ensure_future(self._client.get(self.url, timeout=request_timeout))
        waiter = asyncio.ensure_future(self._cancel.wait())
        try:
            await asyncio.wait({request, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            await _cancel_and_drain(waiter)

        if self._cancel.is_set():
            await _cancel_and_drain(request)
            raise _Cancelled

        try:
            resp = request.result()
        except httpx.RequestError as e:
            self._last_error = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            logger.debug("[%s] attempt %d: %s", self.endpoint.service, self._attempts, self._last_error)
            return None

        self._last_code = resp.status_code
        self._last_error = None
        logger.debug("[%s] attempt %d: HTTP %d", self.endpoint.service, self._attempts, resp.status_code)
        return resp.status_code

    def _finish(self, status: PollStatus, start: float) -> PollOutcome:
        outcome = PollOutcome(
            service=self.endpoint.service,
            status=status,
            elapsed_seconds=max(self._clock.monotonic() - start, 0.0),
            attempts=self._attempts,
            last_status_code=self._last_code,
            last_error=self._last_error,
        )
        if status == PollStatus.READY:
            logger.info(
                "%s is up (HTTP %s) after %.1fs", outcome.service, outcome.last_status_code, outcome.elapsed_seconds
            )
        elif status == PollStatus.TIMED_OUT:
            logger.warning("Timeout waiting for %s: %s", outcome.service, outcome.describe())
        else:
            logger.info("Stopped waiting for %s (cancelled)", outcome.service)
        return outcome


async def poll(
    endpoint: ResolvedEndpoint,
    probe_path: str,
    *,
    client: httpx.AsyncClient,
    timeout: float = DEFAULT_TIMEOUT,
    interval: float = DEFAULT_INTERVAL,
    accepted_codes: Collection[int] = (200,),
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    cancel: asyncio.Event | None = None,
    clock: Clock | None = None,
) -> PollOutcome:
    """엔드포인트가 준비될 때까지 폴링 (HealthPoller 단축 함수)."""
    poller = HealthPoller(
        endpoint,
        probe_path,
        client=client,
        timeout=timeout,
        interval=interval,
        accepted_codes=accepted_codes,
        request_timeout=request_timeout,
        cancel=cancel,
        clock=clock,
    )
    return await poller.run()
