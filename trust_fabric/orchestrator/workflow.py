"""스택 워크플로 — supervisor + coordinator + smoke + diagnostics 조합.

dev:     up → Data Exchange 대기 → FireFly 노드 대기 → 상태 출력
smoke:   대상 서비스 readiness 확인 후 스모크 1회
restart: 단일 프로세스 재시작 후 해당 서비스 readiness 대기
"""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from trust_fabric.domain.config import AppConfig
from trust_fabric.domain.diagnostics import DiagnosticsSummary
from trust_fabric.domain.enums import PollStatus
from trust_fabric.domain.errors import ReadinessCancelled, ReadinessFailed
from trust_fabric.domain.health import ReadinessReport, SmokeResult
from trust_fabric.domain.services import DEV_SERVICES, DEV_STAGES, DX_P2P, SERVICE_CATALOG, ServiceDescriptor
from trust_fabric.infra.clock import Clock, SystemClock
from trust_fabric.infra.compose.supervisor import ProcessSupervisor
from trust_fabric.infra.env import EnvSnapshot

from . import diagnostics, smoke
from .coordinator import ClientFactory, ReadinessCoordinator, default_client_factory
from .resolver import AddressResolver

logger = logging.getLogger(__name__)


@dataclass
class StatusEntry:
    """status 커맨드 결과 한 줄."""

    service: str
    base_url: str
    required: bool
    status_code: int | None = None
    body: dict | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """200 + JSON 본문일 때만 정상 (503 등의 JSON 에러 본문은 상태로 취급하지 않음)."""
        return self.status_code == 200 and self.error is None


@dataclass
class DevResult:
    reports: list[ReadinessReport] = field(default_factory=list)
    status: list[StatusEntry] = field(default_factory=list)


class StackOrchestrator:
    """로컬 스택 오케스트레이션 진입점.

    Usage:
        orchestrator = StackOrchestrator(ComposeSupervisor(config.compose), config, env)
        result = await orchestrator.dev()
    """

    def __init__(
        self,
        supervisor: ProcessSupervisor,
        config: AppConfig,
        env: EnvSnapshot,
        *,
        clock: Clock | None = None,
        client_factory: ClientFactory | None = None,
        cancel: asyncio.Event | None = None,
        root: Path | None = None,
    ):
        self.supervisor = supervisor
        self.config = config
        self.env = env
        self.resolver = AddressResolver(env)
        self.cancel = cancel or asyncio.Event()
        self._client_factory = client_factory or default_client_factory
        self._root = root
        self._coordinator = ReadinessCoordinator(
            env, poll_config=config.poll, clock=clock or SystemClock(), client_factory=self._client_factory
        )
        self.last_report: ReadinessReport | None = None

    def descriptors(self, identifiers: Iterable[str]) -> list[ServiceDescriptor]:
        return [self.resolver.descriptor(i) for i in identifiers]

    # ─── Process group ───────────────────────────────────────────

    def up(self) -> None:
        self.supervisor.start_all()

    def down(self, *, destroy: bool = False, confirm: bool = False) -> None:
        self.supervisor.stop_all(preserve_state=not destroy, confirm=confirm)

    def validate(self) -> str:
        return self.supervisor.render_config()

    # ─── Readiness ───────────────────────────────────────────────

    async def wait(self, identifiers: Sequence[str], *, timeout: float | None = None) -> ReadinessReport:
        """서비스 집합 readiness 대기 (ReadinessFailed/ReadinessCancelled 전파)."""
        descriptors = self.descriptors(identifiers)
        try:
            report = await self._coordinator.await_readiness(descriptors, cancel=self.cancel, timeout=timeout)
        except (ReadinessFailed, ReadinessCancelled) as e:
            self.last_report = e.report
            raise
        self.last_report = report
        return report

    async def restart(self, name: str, *, wait_for: str | None = None, timeout: float | None = None) -> None:
        """단일 프로세스 재시작. wait_for 지정 시 해당 서비스 readiness 대기."""
        if wait_for is not None:
            self.resolver.descriptor(wait_for)
        self.supervisor.restart(name)
        if wait_for is not None:
            await self.wait([wait_for], timeout=timeout)

    async def status(self, identifiers: Sequence[str]) -> list[StatusEntry]:
        """상태 엔드포인트 1회 조회 (대기 없음)."""
        descriptors = self.descriptors(identifiers)
        entries = []
        for verify in sorted({d.verify_tls for d in descriptors}):
            async with self._client_factory(verify) as client:
                for d in descriptors:
                    if d.verify_tls != verify:
                        continue
                    entries.append(await self._status_one(d, client))
        order = {d.identifier: i for i, d in enumerate(descriptors)}
        return sorted(entries, key=lambda e: order[e.service])

    async def _status_one(self, descriptor: ServiceDescriptor, client: httpx.AsyncClient) -> StatusEntry:
        endpoint = self.resolver.resolve(descriptor.identifier)
        entry = StatusEntry(service=descriptor.identifier, base_url=endpoint.base_url, required=descriptor.required)
        try:
            resp = await client.get(endpoint.url(descriptor.probe_path))
        except httpx.RequestError as e:
            entry.error = str(e) or type(e).__name__
            return entry
        entry.status_code = resp.status_code
        try:
            data = resp.json()
            entry.body = data if isinstance(data, dict) else {"data": data}
        except ValueError:
            entry.error = "non-JSON response"
        return entry

    # ─── Smoke ───────────────────────────────────────────────────

    async def smoke(self, identifier: str, *, timeout: float | None = None) -> SmokeResult:
        """readiness 확인 후 스모크 1회 (regulator는 read-only)."""
        descriptor = self.resolver.descriptor(identifier)
        report = await self.wait([identifier], timeout=timeout)
        outcome = report.get(identifier)
        if outcome is not None and outcome.status == PollStatus.CANCELLED:
            raise ReadinessCancelled(report=report)
        if outcome is None or not outcome.is_ready:
            # optional 서비스도 스모크 대상이면 준비 필수
            raise ReadinessFailed(identifier, report=report)
        endpoint = self.resolver.resolve(identifier)
        async with self._client_factory(descriptor.verify_tls) as client:
            return await smoke.verify(descriptor, smoke.build_payload(self.config.smoke), endpoint, client=client)

    # ─── Dev flow ────────────────────────────────────────────────

    async def dev(self, *, timeout: float | None = None, start: bool = True) -> DevResult:
        """up → wait-dx → wait-all → status."""
        result = DevResult()
        if start:
            self.up()
        for stage in DEV_STAGES:
            result.reports.append(await self.wait(stage, timeout=timeout))
        result.status = await self.status(list(DEV_SERVICES))
        return result

    # ─── Diagnostics ─────────────────────────────────────────────

    async def doctor(self) -> DiagnosticsSummary:
        return await diagnostics.report(
            list(SERVICE_CATALOG.values()),
            self.config.doctor.files,
            env=self.env,
            readiness=self.last_report,
            port_checks=[DX_P2P],
            root=self._root,
            tcp_timeout=self.config.doctor.tcp_timeout_sec,
        )

    async def env_dump(self) -> DiagnosticsSummary:
        return await diagnostics.report(
            [], [], env=self.env, env_prefixes=self.config.doctor.env_prefixes, root=self._root
        )
