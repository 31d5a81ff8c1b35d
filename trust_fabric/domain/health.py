"""헬스/준비 상태 모델 — Poller, Coordinator, Smoke Verifier 간 데이터 계약."""

from pydantic import BaseModel, Field

from .enums import PollStatus, ReadinessStatus, SmokeMode
from .errors import ReadinessCancelled, ReadinessFailed
from .types import Seconds, SemVer, ServiceId, StatusCode


class PollOutcome(BaseModel):
    """단일 서비스 폴링 결과 (생성 후 불변)."""

    service: ServiceId
    status: PollStatus
    elapsed_seconds: Seconds
    attempts: int = Field(ge=0)
    last_status_code: StatusCode | None = None
    last_error: str | None = None

    model_config = {"frozen": True}

    @property
    def is_ready(self) -> bool:
        return self.status == PollStatus.READY

    def describe(self) -> str:
        """사람이 읽기 쉬운 한 줄 요약."""
        observed = (
            f"HTTP {self.last_status_code}"
            if self.last_status_code is not None
            else (self.last_error or "no response")
        )
        return f"{self.status} after {self.elapsed_seconds:.1f}s ({self.attempts} attempts, last: {observed})"


class ReadinessReport(BaseModel):
    """서비스별 PollOutcome 집계.

    서비스당 슬롯 하나 — 해당 서비스 poller가 정확히 한 번 기록.
    overall은 finalize() 이후에만 채워짐.
    """

    outcomes: dict[str, PollOutcome] = {}
    required: frozenset[str] = frozenset()
    overall: ReadinessStatus | None = None

    def record(self, outcome: PollOutcome) -> None:
        if outcome.service in self.outcomes:
            raise RuntimeError(f"Outcome for {outcome.service!r} already recorded")
        self.outcomes[outcome.service] = outcome

    def get(self, service: str) -> PollOutcome | None:
        return self.outcomes.get(service)

    def failures(self, *, required: bool) -> list[PollOutcome]:
        """준비되지 않은 서비스 (required 여부로 필터)."""
        return [o for sid, o in self.outcomes.items() if (sid in self.required) == required and not o.is_ready]

    def finalize(self) -> ReadinessStatus:
        """전체 상태 계산.

        required TIMED_OUT → FAILED, required CANCELLED → CANCELLED,
        optional 실패만 있으면 DEGRADED_READY.
        """
        required_failures = self.failures(required=True)
        if any(o.status == PollStatus.TIMED_OUT for o in required_failures):
            self.overall = ReadinessStatus.FAILED
        elif required_failures:
            self.overall = ReadinessStatus.CANCELLED
        elif self.failures(required=False):
            self.overall = ReadinessStatus.DEGRADED_READY
        else:
            self.overall = ReadinessStatus.ALL_READY
        return self.overall

    def raise_for_status(self) -> None:
        """FAILED / CANCELLED 상태면 예외 발생."""
        overall = self.overall or self.finalize()
        if overall == ReadinessStatus.FAILED:
            timed_out = [o for o in self.failures(required=True) if o.status == PollStatus.TIMED_OUT]
            raise ReadinessFailed(
                timed_out[0].service,
                report=self,
                failed_services=[o.service for o in timed_out],
                supplementary=self.failures(required=False),
            )
        if overall == ReadinessStatus.CANCELLED:
            raise ReadinessCancelled(report=self)


class SmokeResult(BaseModel):
    """스모크 검증 결과."""

    service: ServiceId
    accepted: bool
    status_code: StatusCode | None = None
    mode: SmokeMode = SmokeMode.WRITE
    detail: dict | None = None

    model_config = {"frozen": True}


class DatatypeValidator(BaseModel):
    name: str = "json"


class SmokeDatatype(BaseModel):
    """스모크용 canary datatype (POST /api/v1/datatypes 본문)."""

    name: str
    version: SemVer
    validator: DatatypeValidator = Field(default_factory=DatatypeValidator)
