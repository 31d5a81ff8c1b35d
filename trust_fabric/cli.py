"""trust-fabric CLI — 로컬 스택 기동/대기/스모크/진단.

Usage:
    trust-fabric dev                          # up → wait-dx → wait-all → status
    trust-fabric wait -s org1 -s reg --timeout 60
    trust-fabric smoke -s org1
    trust-fabric down --destroy --confirm     # 볼륨까지 삭제
    trust-fabric doctor

종료 코드:
    0   성공 (optional 서비스 미준비는 경고만)
    2   required 서비스 readiness 실패 (status/dev: required 상태 조회 비정상 포함)
    3   스모크 실패
    64  잘못된 서비스/설정, 확인 없는 파괴적 작업
    69  docker compose 실패
    130 사용자 중단
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import math
import signal
import sys
from collections.abc import Awaitable, Callable, Sequence
from enum import IntEnum
from pathlib import Path

from trust_fabric.domain.config import AppConfig, get_config
from trust_fabric.domain.enums import ReadinessStatus, SmokeMode
from trust_fabric.domain.errors import (
    ConfigurationError,
    DestructiveActionRefused,
    ReadinessCancelled,
    ReadinessFailed,
    SmokeCheckFailed,
    SmokeNotSupported,
    SupervisorError,
    UnknownService,
)
from trust_fabric.domain.health import ReadinessReport
from trust_fabric.domain.services import ARIES_SERVICES, DEV_SERVICES, FIREFLY_SERVICES, SERVICE_CATALOG
from trust_fabric.infra.compose.supervisor import ComposeSupervisor, ProcessSupervisor
from trust_fabric.infra.env import load_env_snapshot
from trust_fabric.infra.observability.logging import setup_logging
from trust_fabric.orchestrator.workflow import StackOrchestrator, StatusEntry

logger = logging.getLogger(__name__)

SERVICE_GROUPS = {
    "firefly": FIREFLY_SERVICES,
    "aries": ARIES_SERVICES,
    "dev": DEV_SERVICES,
}


class ExitCode(IntEnum):
    OK = 0
    REQUIRED_FAILED = 2
    SMOKE_FAILED = 3
    USAGE = 64
    SUPERVISOR_FAILED = 69
    CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trust-fabric", description="로컬 trust-fabric 스택 오케스트레이션")
    parser.add_argument("--env-file", help="서비스 포트 기본값 env 파일 (기본: COMPOSE_ENV_FILE)")
    parser.add_argument("--compose-file", help="docker compose 파일 (기본: COMPOSE_FILE)")
    parser.add_argument("--project", help="compose 프로젝트 이름 (기본: COMPOSE_PROJECT)")
    parser.add_argument("--verbose", "-v", action="store_true", help="상세 로깅")
    parser.add_argument("--json-logs", action="store_true", help="JSON 로그 출력")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("up", help="스택 기동 (detached, 이미 실행 중이어도 성공)")

    down = sub.add_parser("down", help="스택 중지 (기본: 볼륨 보존)")
    down.add_argument("--destroy", action="store_true", help="볼륨까지 삭제 (위험)")
    down.add_argument("--confirm", action="store_true", help="파괴적 작업 확인")

    restart = sub.add_parser("restart", help="단일 컨테이너 재시작")
    restart.add_argument("name", help="컨테이너/서비스 이름 (예: dx_org1)")
    restart.add_argument("--wait", dest="wait_for", choices=sorted(SERVICE_CATALOG), help="재시작 후 대기할 서비스")
    _add_timeout(restart)

    sub.add_parser("validate", help="유효 compose 설정 렌더링 (preflight)")

    wait = sub.add_parser("wait", help="서비스 readiness 대기")
    _add_service_selection(wait)
    _add_timeout(wait)

    status = sub.add_parser("status", help="상태 엔드포인트 JSON 출력")
    _add_service_selection(status)

    smoke = sub.add_parser("smoke", help="스모크 테스트 (org1: 쓰기, reg: 읽기 전용)")
    smoke.add_argument("-s", "--service", default="org1", choices=sorted(SERVICE_CATALOG))
    _add_timeout(smoke)

    health = sub.add_parser("health", help="컨테이너 헬스 상태 (docker inspect)")
    health.add_argument("container", help="컨테이너 이름 (예: evmconnect_org1)")

    sub.add_parser("doctor", help="주소/파일/포트 진단")
    sub.add_parser("env-dump", help="유효 환경 변수 (민감 값 마스킹)")

    dev = sub.add_parser("dev", help="up → wait-dx → wait-all → status")
    dev.add_argument("--no-up", action="store_true", help="기동 없이 대기만")
    _add_timeout(dev)

    return parser


def _positive_seconds(value: str) -> float:
    """--timeout 값 검증: 유한한 양수 초만 허용 (nan/inf/0/음수 거부)."""
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if not math.isfinite(seconds) or seconds <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive, finite number of seconds: {value!r}")
    return seconds


def _add_timeout(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--timeout", type=_positive_seconds, default=None, help="서비스별 대기 시간(초) (기본: POLL_TIMEOUT_SEC)"
    )


def _add_service_selection(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-s", "--service", action="append", dest="services", choices=sorted(SERVICE_CATALOG), help="대상 서비스 (반복)"
    )
    group.add_argument("--group", choices=sorted(SERVICE_GROUPS), help="서비스 그룹 (기본: firefly)")


def _selected_services(args: argparse.Namespace) -> list[str]:
    if args.services:
        return list(dict.fromkeys(args.services))
    return list(SERVICE_GROUPS[args.group or "firefly"])


def _apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    updates = {}
    if args.env_file:
        updates["env_file"] = args.env_file
    if args.compose_file:
        updates["file"] = args.compose_file
    if args.project:
        updates["project"] = args.project
    if updates:
        config = config.model_copy(update={"compose": config.compose.model_copy(update=updates)})
    return config


# ─── Output ─────────────────────────────────────────────────────


def print_status(entries: Sequence[StatusEntry]) -> bool:
    """상태 출력. required 서비스가 모두 정상이면 True."""
    for i, e in enumerate(entries):
        if i:
            print()
        print(f"Status for {e.service} @ {e.base_url}:")
        if e.ok:
            print(json.dumps(e.body, indent=2, ensure_ascii=False))
            continue
        reason = e.error or f"HTTP {e.status_code}"
        if e.error and e.status_code is not None:
            reason = f"HTTP {e.status_code}, {e.error}"
        print(f"(unavailable: {reason})")
        if not e.required:
            print(f"({e.service} may be read-only or still starting)")
    return all(e.ok for e in entries if e.required)


def print_report(report: ReadinessReport) -> None:
    for outcome in report.outcomes.values():
        kind = "required" if outcome.service in report.required else "optional"
        print(f"  {outcome.service:<16s} [{kind}] {outcome.describe()}")
    print(f"Overall: {report.overall}")


# ─── Commands ───────────────────────────────────────────────────


async def _run_command(args: argparse.Namespace, orchestrator: StackOrchestrator) -> ExitCode:
    cmd = args.command

    if cmd == "up":
        orchestrator.up()
    elif cmd == "down":
        orchestrator.down(destroy=args.destroy, confirm=args.confirm)
    elif cmd == "validate":
        print(orchestrator.validate())
    elif cmd == "restart":
        await orchestrator.restart(args.name, wait_for=args.wait_for, timeout=args.timeout)
    elif cmd == "wait":
        report = await orchestrator.wait(_selected_services(args), timeout=args.timeout)
        print_report(report)
        if report.overall == ReadinessStatus.DEGRADED_READY:
            print("WARNING: optional services not ready", file=sys.stderr)
    elif cmd == "status":
        if not print_status(await orchestrator.status(_selected_services(args))):
            return ExitCode.REQUIRED_FAILED
    elif cmd == "smoke":
        result = await orchestrator.smoke(args.service, timeout=args.timeout)
        if result.detail is not None and result.mode == SmokeMode.READ_ONLY:
            print(json.dumps(result.detail, indent=2, ensure_ascii=False))
        print(f"Smoke test passed (HTTP {result.status_code}).")
    elif cmd == "health":
        print(f"{args.container} health: {orchestrator.supervisor.container_health(args.container)}")
    elif cmd == "doctor":
        summary = await orchestrator.doctor()
        print(summary.render())
        print()
        print("== Compose status ==")
        try:
            print(orchestrator.supervisor.status())
        except SupervisorError as e:
            print(f"(unavailable: {e})")
    elif cmd == "env-dump":
        summary = await orchestrator.env_dump()
        print("# Effective environment (sanitized)")
        for key, value in summary.environment.items():
            print(f"{key}={value}")
    elif cmd == "dev":
        result = await orchestrator.dev(timeout=args.timeout, start=not args.no_up)
        for report in result.reports:
            print_report(report)
        print()
        if not print_status(result.status):
            return ExitCode.REQUIRED_FAILED
    return ExitCode.OK


async def _run_with_signals(orchestrator: StackOrchestrator, work: Callable[[], Awaitable[ExitCode]]) -> ExitCode:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, orchestrator.cancel.set)
    return await work()


def run(
    argv: Sequence[str] | None = None,
    *,
    supervisor: ProcessSupervisor | None = None,
    orchestrator_factory: Callable[..., StackOrchestrator] = StackOrchestrator,
) -> ExitCode:
    """CLI 실행 후 종료 코드 반환 (테스트에서 직접 호출)."""
    args = build_parser().parse_args(argv)

    config = _apply_overrides(get_config(), args)
    setup_logging(
        "trust-fabric",
        command=args.command,
        log_level="DEBUG" if args.verbose else config.log_level,
        json_output=args.json_logs or config.json_logs,
    )

    env = load_env_snapshot(config.compose.env_file)
    supervisor = supervisor or ComposeSupervisor(config.compose)
    orchestrator = orchestrator_factory(supervisor, config, env, root=Path.cwd())

    try:
        return asyncio.run(_run_with_signals(orchestrator, lambda: _run_command(args, orchestrator)))
    except ReadinessFailed as e:
        print(f"ERROR: {e}", file=sys.stderr)
        for o in e.supplementary:
            print(f"  also not ready (optional) {o.service}: {o.describe()}", file=sys.stderr)
        return ExitCode.REQUIRED_FAILED
    except ReadinessCancelled:
        print("Cancelled.", file=sys.stderr)
        return ExitCode.CANCELLED
    except (SmokeCheckFailed, SmokeNotSupported) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return ExitCode.SMOKE_FAILED
    except (UnknownService, ConfigurationError, DestructiveActionRefused) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return ExitCode.USAGE
    except SupervisorError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return ExitCode.SUPERVISOR_FAILED
    except KeyboardInterrupt:
        return ExitCode.CANCELLED


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
