"""Diagnostics Reporter — 주소/폴링 결과/파일 존재 여부 종합.

readiness 경로와 독립적이며 어떤 항목이 실패해도 리포트는 항상 완성됨.
"""

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from trust_fabric.domain.diagnostics import DiagnosticsSummary, FileCheck, PortCheck, ServiceDiagnostic
from trust_fabric.domain.errors import ConfigurationError
from trust_fabric.domain.health import ReadinessReport
from trust_fabric.domain.services import ServiceDescriptor, TcpTarget
from trust_fabric.infra.env import EnvSnapshot, sanitized_view

from .resolver import resolve_descriptor, resolve_port

logger = logging.getLogger(__name__)


def check_files(paths: Iterable[str | Path], *, root: Path | None = None) -> list[FileCheck]:
    """파일 존재 여부만 확인 (파싱/검증 없음)."""
    checks = []
    for p in paths:
        path = Path(p)
        if root is not None and not path.is_absolute():
            path = root / path
        try:
            present = path.is_file()
        except OSError:
            present = False
        checks.append(FileCheck(path=str(p), present=present))
    return checks


async def check_tcp(target: TcpTarget, env: EnvSnapshot, *, timeout: float = 2.0) -> PortCheck:
    """TCP 연결 가능 여부 (예: DX P2P 포트)."""
    try:
        port = resolve_port(env, target.port_env, target.default_port)
    except ConfigurationError as e:
        return PortCheck(name=target.name, host=target.host, error=str(e))

    try:
        _reader, writer = await asyncio.wait_for(asyncio.open_connection(target.host, port), timeout=timeout)
    except (OSError, TimeoutError) as e:
        return PortCheck(name=target.name, host=target.host, port=port, error=type(e).__name__)

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        logger.debug("Error closing probe connection to %s:%d", target.host, port)
    return PortCheck(name=target.name, host=target.host, port=port, open=True)


async def report(
    descriptors: Iterable[ServiceDescriptor],
    file_checklist: Iterable[str | Path],
    *,
    env: EnvSnapshot,
    readiness: ReadinessReport | None = None,
    port_checks: Iterable[TcpTarget] = (),
    env_prefixes: Iterable[str] = (),
    root: Path | None = None,
    tcp_timeout: float = 2.0,
) -> DiagnosticsSummary:
    """진단 요약 생성.

    Args:
        descriptors: 주소/상태를 표시할 서비스
        file_checklist: 존재 여부를 확인할 파일 경로 (root 기준 상대 경로 가능)
        env: 환경 스냅샷
        readiness: 마지막 readiness 리포트 (있으면 서비스별 결과 표시)
        port_checks: TCP 연결 확인 대상
        env_prefixes: 표시할 환경 변수 접두사 (비어 있으면 환경 섹션 생략)
    """
    services = []
    for d in descriptors:
        entry = ServiceDiagnostic(service=d.identifier, display_name=d.display_name, required=d.required)
        try:
            entry.base_url = resolve_descriptor(d, env).base_url
        except ConfigurationError as e:
            entry.error = str(e)
        if readiness is not None:
            entry.outcome = readiness.get(d.identifier)
        services.append(entry)

    ports = await asyncio.gather(*(check_tcp(t, env, timeout=tcp_timeout) for t in port_checks))
    prefixes = tuple(env_prefixes)

    summary = DiagnosticsSummary(
        services=services,
        files=check_files(file_checklist, root=root),
        ports=list(ports),
        environment=sanitized_view(env, prefixes) if prefixes else {},
    )
    if summary.missing_files:
        logger.warning("%d expected files missing", len(summary.missing_files))
    return summary
