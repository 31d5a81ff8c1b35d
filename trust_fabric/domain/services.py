"""서비스 디스크립터 — 스택 구성 서비스의 정적 카탈로그.

각 서비스의 포트는 환경 변수(port_env)로 오버라이드 가능, 없으면 default_port.
url_env가 설정된 서비스는 전체 base URL 오버라이드(원격 노드, 리버스 프록시)가 포트보다 우선.
required=False 서비스(regulator 등)는 readiness 실패 시 경고만 남김.
"""

from pydantic import BaseModel, Field

from .enums import Protocol, SmokeMode
from .types import Port, ServiceId, UrlPath

DEFAULT_HOST = "localhost"
FIREFLY_STATUS_PATH = "/api/v1/status"
FIREFLY_DATATYPES_PATH = "/api/v1/datatypes"


class ServiceDescriptor(BaseModel):
    """서비스 하나의 접속/검증 규칙."""

    identifier: ServiceId
    display_name: str
    port_env: str
    default_port: Port
    url_env: str | None = None
    probe_path: UrlPath = FIREFLY_STATUS_PATH
    required: bool = True
    protocol: Protocol = Protocol.HTTP
    verify_tls: bool = True
    smoke_mode: SmokeMode = SmokeMode.NONE
    smoke_path: UrlPath | None = None

    model_config = {"frozen": True}


class ResolvedEndpoint(BaseModel):
    """디스크립터 + 환경 스냅샷으로 계산된 접속 주소 (캐싱하지 않음)."""

    service: ServiceId
    base_url: str
    verify_tls: bool = True

    model_config = {"frozen": True}

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


# --- Static catalog ---

FIREFLY_ORG1 = ServiceDescriptor(
    identifier="org1",
    display_name="FireFly org1",
    port_env="FF_ORG1",
    default_port=5000,
    url_env="FF_ORG1_URL",
    required=True,
    smoke_mode=SmokeMode.WRITE,
    smoke_path=FIREFLY_DATATYPES_PATH,
)

FIREFLY_REG = ServiceDescriptor(
    identifier="reg",
    display_name="FireFly regulator",
    port_env="FF_REG",
    default_port=5100,
    url_env="FF_REG_URL",
    required=False,
    smoke_mode=SmokeMode.READ_ONLY,
)

DATA_EXCHANGE = ServiceDescriptor(
    identifier="dx",
    display_name="Data Exchange",
    port_env="DX_PORT",
    default_port=3001,
    protocol=Protocol.HTTPS,
    verify_tls=False,  # dev 환경 self-signed
)

ACAPY_ISSUER = ServiceDescriptor(
    identifier="acapy_issuer",
    display_name="Aries issuer",
    port_env="ACAPY_ISSUER_ADMIN_PORT",
    default_port=8031,
    probe_path="/status",
)

ACAPY_VERIFIER = ServiceDescriptor(
    identifier="acapy_verifier",
    display_name="Aries verifier",
    port_env="ACAPY_VERIFIER_ADMIN_PORT",
    default_port=8041,
    probe_path="/status",
)

SERVICE_CATALOG: dict[str, ServiceDescriptor] = {
    d.identifier: d for d in (FIREFLY_ORG1, FIREFLY_REG, DATA_EXCHANGE, ACAPY_ISSUER, ACAPY_VERIFIER)
}

# 서비스 그룹 (CLI 기본 대상)
FIREFLY_SERVICES: tuple[str, ...] = ("org1", "reg")
ARIES_SERVICES: tuple[str, ...] = ("acapy_issuer", "acapy_verifier")
DEV_SERVICES: tuple[str, ...] = ("dx", "org1", "reg")
# dev 기동 순서: Data Exchange 먼저, 이후 FireFly 노드
DEV_STAGES: tuple[tuple[str, ...], ...] = (("dx",), FIREFLY_SERVICES)


class TcpTarget(BaseModel):
    """TCP 연결만 확인하는 대상 (예: DX P2P 포트)."""

    name: str
    port_env: str
    default_port: Port
    host: str = Field(default=DEFAULT_HOST)

    model_config = {"frozen": True}


DX_P2P = TcpTarget(name="dx_p2p", port_env="DX_P2P", default_port=41000)
