"""trust-fabric 도메인 모델 — 오케스트레이터 컴포넌트 간 데이터 계약.

Usage:
    from trust_fabric.domain import ServiceDescriptor, PollOutcome, ReadinessReport
    from trust_fabric.domain.config import get_config
"""

# --- Types ---
from .types import Port, Seconds, SemVer, ServiceId, StatusCode, UrlPath

# --- Enums ---
from .enums import PollStatus, Protocol, ReadinessStatus, SmokeMode

# --- Errors ---
from .errors import (
    ConfigurationError,
    DestructiveActionRefused,
    InvalidEndpointOverride,
    OrchestratorError,
    ReadinessCancelled,
    ReadinessFailed,
    ReadinessTimeout,
    SmokeCheckFailed,
    SmokeNotSupported,
    SupervisorError,
    UnknownService,
)

# --- Services ---
from .services import SERVICE_CATALOG, ResolvedEndpoint, ServiceDescriptor, TcpTarget

# --- Health ---
from .health import PollOutcome, ReadinessReport, SmokeDatatype, SmokeResult

# --- Diagnostics ---
from .diagnostics import DiagnosticsSummary, FileCheck, PortCheck, ServiceDiagnostic

__all__ = [
    # Types
    "ServiceId",
    "Port",
    "UrlPath",
    "SemVer",
    "StatusCode",
    "Seconds",
    # Enums
    "Protocol",
    "SmokeMode",
    "PollStatus",
    "ReadinessStatus",
    # Errors
    "OrchestratorError",
    "UnknownService",
    "ConfigurationError",
    "InvalidEndpointOverride",
    "ReadinessTimeout",
    "ReadinessFailed",
    "ReadinessCancelled",
    "SmokeCheckFailed",
    "SmokeNotSupported",
    "SupervisorError",
    "DestructiveActionRefused",
    # Services
    "ServiceDescriptor",
    "ResolvedEndpoint",
    "TcpTarget",
    "SERVICE_CATALOG",
    # Health
    "PollOutcome",
    "ReadinessReport",
    "SmokeResult",
    "SmokeDatatype",
    # Diagnostics
    "ServiceDiagnostic",
    "FileCheck",
    "PortCheck",
    "DiagnosticsSummary",
]
