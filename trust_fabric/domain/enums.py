"""열거형 정의 — 오케스트레이터 전체에서 사용하는 상수값."""

from enum import StrEnum


class Protocol(StrEnum):
    """서비스 접속 프로토콜"""

    HTTP = "http"
    HTTPS = "https"  # self-signed 인증서 가능 (verify_tls=False)


class SmokeMode(StrEnum):
    """스모크 검증 방식"""

    WRITE = "WRITE"  # POST canary datatype (201/409 허용)
    READ_ONLY = "READ_ONLY"  # GET status only (regulator 등)
    NONE = "NONE"  # 스모크 대상 아님


class PollStatus(StrEnum):
    """단일 서비스 폴링 결과"""

    READY = "READY"
    TIMED_OUT = "TIMED_OUT"
    CANCELLED = "CANCELLED"


class ReadinessStatus(StrEnum):
    """전체 준비 상태"""

    ALL_READY = "ALL_READY"
    DEGRADED_READY = "DEGRADED_READY"  # optional 서비스만 실패
    FAILED = "FAILED"  # required 서비스 타임아웃
    CANCELLED = "CANCELLED"  # 사용자 중단
