"""오케스트레이터 예외 계층.

전이성 네트워크 오류(연결 거부, TLS, DNS)는 Poller 내부에서 재시도되므로
여기에 없음. 나머지는 호출자에게 서비스 식별자/상태 코드 등 컨텍스트와 함께 전파.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .health import PollOutcome, ReadinessReport


class OrchestratorError(Exception):
    """trust-fabric 오케스트레이터 공통 예외."""


class UnknownService(OrchestratorError):
    """카탈로그에 없는 서비스 식별자."""

    def __init__(self, identifier: str, known: list[str] | None = None):
        hint = f" (known: {', '.join(known)})" if known else ""
        super().__init__(f"Unknown service {identifier!r}{hint}")
        self.identifier = identifier


class ConfigurationError(OrchestratorError):
    """설정/환경 값 오류."""


class InvalidEndpointOverride(ConfigurationError):
    """주소 오버라이드 환경 변수(포트 또는 URL) 값이 유효하지 않음."""

    def __init__(self, variable: str, value: str, reason: str = "is not a valid port"):
        super().__init__(f"{variable}={value!r} {reason}")
        self.variable = variable
        self.value = value


class ReadinessTimeout(OrchestratorError):
    """서비스가 제한 시간 내에 준비되지 않음."""

    def __init__(self, service: str, message: str | None = None):
        super().__init__(message or f"Timeout waiting for {service}")
        self.service = service


class ReadinessFailed(ReadinessTimeout):
    """required 서비스 타임아웃 — 상위 워크플로 중단 대상.

    optional 서비스 실패가 동시에 있으면 supplementary에 첨부.
    """

    def __init__(
        self,
        service: str,
        *,
        report: ReadinessReport,
        failed_services: list[str] | None = None,
        supplementary: list[PollOutcome] | None = None,
    ):
        self.report = report
        self.failed_services = failed_services or [service]
        self.supplementary = supplementary or []
        outcome = report.get(service)
        detail = f": {outcome.describe()}" if outcome else ""
        message = f"Required service {service} not ready{detail}"
        if self.supplementary:
            message += f" (optional also not ready: {', '.join(o.service for o in self.supplementary)})"
        super().__init__(service, message)


class ReadinessCancelled(OrchestratorError):
    """사용자 중단 — 타임아웃과 구분."""

    def __init__(self, *, report: ReadinessReport | None = None):
        super().__init__("Readiness wait cancelled")
        self.report = report


class SmokeCheckFailed(OrchestratorError):
    """스모크 요청이 허용되지 않은 상태 코드로 응답."""

    def __init__(self, service: str, observed_code: int | None, detail: str = ""):
        observed = f"HTTP {observed_code}" if observed_code is not None else "no response"
        super().__init__(f"Smoke failed for {service}: {observed}" + (f": {detail}" if detail else ""))
        self.service = service
        self.observed_code = observed_code


class SmokeNotSupported(OrchestratorError):
    """스모크 대상이 아닌 서비스."""

    def __init__(self, service: str):
        super().__init__(f"Service {service} has no smoke check")
        self.service = service


class SupervisorError(OrchestratorError):
    """외부 프로세스 제어 도구(docker compose) 실패."""

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        super().__init__(f"{' '.join(command)} exited with {returncode}" + (f": {stderr.strip()}" if stderr else ""))
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class DestructiveActionRefused(OrchestratorError):
    """확인 플래그 없이 볼륨 삭제 요청."""

    def __init__(self, action: str):
        super().__init__(f"Refusing to {action} without confirmation. Re-run with --confirm")
        self.action = action
