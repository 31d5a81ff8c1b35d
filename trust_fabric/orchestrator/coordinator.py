"""Readiness Coordinator — 서비스 집합 병렬 폴링 + 정책 적용.

- 서비스마다 poller 하나를 asyncio task로 병렬 실행 (공유 취소 신호 1개)
- 완료 순서대로 ReadinessReport 슬롯에 기록
- required 서비스 TIMED_OUT → ReadinessFailed (optional 실패는 supplementary로 첨부)
- optional 서비스 실패 → DEGRADED_READY (경고만)

타임아웃은 서비스별. 느린 서비스가 다른 서비스의 대기 예산을 줄이지 않음.
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable, Iterable, Mapping

import httpx

from trust_fabric.domain.config import PollConfig
from trust_fabric.domain.enums import ReadinessStatus
from trust_fabric.domain.health import PollOutcome, ReadinessReport
from trust_fabric.domain.services import ResolvedEndpoint, ServiceDescriptor
from trust_fabric.infra.clock import Clock, SystemClock
from trust_fabric.infra.env import EnvSnapshot

from .poller import HealthPoller
from .resolver import resolve_descriptor

logger = logging.getLogger(__name__)

ClientFactory = Callable[[bool], httpx.AsyncClient]


def default_client_factory(verify_tls: bool) -> httpx.AsyncClient:
    """TLS 검증 모드별 AsyncClient (self-signed 서비스는 verify=False)."""
    return httpx.AsyncClient(verify=verify_tls, headers={"Accept": "application/json"})


class ReadinessCoordinator:
    """서비스 집합 readiness 대기.

    Usage:
        coordinator = ReadinessCoordinator(env)
        report = await coordinator.await_readiness([FIREFLY_ORG1, FIREFLY_REG])
        print(report.overall)  # ALL_READY | DEGRADED_READY
    """

    def __init__(
        self,
        env: EnvSnapshot,
        *,
        poll_config: PollConfig | None = None,
        clock: Clock | None = None,
        client_factory: ClientFactory | None = None,
    ):
        self._env = env
        self._poll = poll_config or PollConfig()
        self._clock = clock or SystemClock()
        self._client_factory = client_factory or default_client_factory

    async def await_readiness(
        self,
        descriptors: Iterable[ServiceDescriptor],
        *,
        cancel: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> ReadinessReport:
        """모든 서비스 폴링 후 통합 리포트 반환.

        Raises:
            ReadinessFailed: required 서비스 타임아웃
            ReadinessCancelled: 취소 신호로 required 서비스 대기 중단
            UnknownService / InvalidEndpointOverride: 주소 해석 실패 (폴링 전)
        """
        descriptors = list(descriptors)
        ids = [d.identifier for d in descriptors]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate service descriptors: {ids}")

        report = ReadinessReport(required=frozenset(d.identifier for d in descriptors if d.required))
        # 폴링 시작 전에 전체 주소 해석 (설정 오류는 즉시 실패)
        endpoints = {d.identifier: resolve_descriptor(d, self._env) for d in descriptors}
        cancel = cancel or asyncio.Event()

        async with contextlib.AsyncExitStack() as stack:
            clients: dict[bool, httpx.AsyncClient] = {}
            for verify in sorted({e.verify_tls for e in endpoints.values()}):
                clients[verify] = await stack.enter_async_context(self._client_factory(verify))

            tasks = []
            for d in descriptors:
                endpoint = endpoints[d.identifier]
                client = clients[endpoint.verify_tls]
                tasks.append(asyncio.ensure_future(self._poll_one(d, endpoint, client, cancel, timeout)))
            try:
                for next_done in asyncio.as_completed(tasks):
                    outcome = await next_done
                    report.record(outcome)
            finally:
                pending = [t for t in tasks if not t.done()]
                for t in pending:
                    t.cancel()
                await asyncio.gather(*pending, return_exceptions=True)

        # 완료 순서 → 요청 순서 (보고/첫 실패 서비스 결정적)
        report.outcomes = {sid: report.outcomes[sid] for sid in ids if sid in report.outcomes}
        overall = report.finalize()
        if overall == ReadinessStatus.DEGRADED_READY:
            for o in report.failures(required=False):
                logger.warning("Optional service %s not ready: %s", o.service, o.describe())
        elif overall == ReadinessStatus.ALL_READY:
            logger.info("All services ready: %s", ", ".join(ids))
        report.raise_for_status()
        return report

    async def _poll_one(
        self,
        descriptor: ServiceDescriptor,
        endpoint: ResolvedEndpoint,
        client: httpx.AsyncClient,
        cancel: asyncio.Event,
        timeout: float | None,
    ) -> PollOutcome:
        poller = HealthPoller(
            endpoint,
            descriptor.probe_path,
            client=client,
            timeout=timeout if timeout is not None else self._poll.timeout_sec,
            interval=self._poll.interval_sec,
            accepted_codes=self._poll.accepted_codes,
            request_timeout=self._poll.request_timeout_sec,
            cancel=cancel,
            clock=self._clock,
        )
        return await poller.run()


async def await_readiness(
    descriptors: Iterable[ServiceDescriptor],
    *,
    env: EnvSnapshot | Mapping[str, str],
    cancel: asyncio.Event | None = None,
    poll_config: PollConfig | None = None,
    clock: Clock | None = None,
    client_factory: ClientFactory | None = None,
) -> ReadinessReport:
    """ReadinessCoordinator 단축 함수."""
    coordinator = ReadinessCoordinator(env, poll_config=poll_config, clock=clock, client_factory=client_factory)
    return await coordinator.await_readiness(descriptors, cancel=cancel)
