"""통합 설정 모델 — Pydantic Settings 기반.

오케스트레이터 자체의 동작 파라미터만 다룸. 서비스 포트 오버라이드(FF_ORG1 등)는
여기서 읽지 않고 EnvSnapshot으로 주입 (trust_fabric.infra.env 참조).

우선순위:
  1. 환경 변수
  2. Pydantic Settings 기본값
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_DOCTOR_FILES = [
    "ops/compose/config/dx/config.json",
    "ops/compose/config/dx/certs/ca.pem",
    "ops/compose/config/dx/certs/cert.pem",
    "ops/compose/config/dx/certs/key.pem",
    "ops/compose/config/dx/destinations/data.json",
    "ops/compose/config/dx/peers/data.json",
    "ops/compose/config/evmconnect/org1/config.yaml",
    "ops/compose/config/evmconnect/reg/config.yaml",
    "ops/compose/config/firefly/org1/firefly.core.yaml",
    "ops/compose/config/firefly/reg/firefly.core.yaml",
]

DEFAULT_ENV_PREFIXES = ["FF_", "BESU_", "IPFS_", "POSTGRES_", "ACAPY_", "DX_"]


class PollConfig(BaseSettings):
    """헬스 폴링 설정."""

    timeout_sec: float = Field(default=120.0, gt=0, allow_inf_nan=False)
    interval_sec: float = Field(default=2.0, gt=0, allow_inf_nan=False)
    request_timeout_sec: float = Field(default=5.0, gt=0, allow_inf_nan=False)
    accepted_codes: list[int] = [200]

    model_config = {"env_prefix": "POLL_"}


class SmokeConfig(BaseSettings):
    """스모크 canary datatype 설정."""

    datatype_name: str = "smoke"
    datatype_version: str = "1.0.0"
    validator_name: str = "json"

    model_config = {"env_prefix": "SMOKE_"}


class ComposeConfig(BaseSettings):
    """docker compose 프로세스 그룹 설정."""

    project: str = "trust-fabric"
    file: str = "ops/compose/firefly-besu-aries.yaml"
    env_file: str = "ops/compose/.env"
    docker_bin: str = "docker"

    model_config = {"env_prefix": "COMPOSE_"}


class DoctorConfig(BaseSettings):
    """진단 대상 파일/환경 변수 접두사."""

    files: list[str] = Field(default_factory=lambda: list(DEFAULT_DOCTOR_FILES))
    env_prefixes: list[str] = Field(default_factory=lambda: list(DEFAULT_ENV_PREFIXES))
    tcp_timeout_sec: float = 2.0

    model_config = {"env_prefix": "DOCTOR_"}


class AppConfig(BaseSettings):
    """최상위 설정 — 서브 설정 객체를 조합.

    Usage:
        from trust_fabric.domain.config import get_config
        config = get_config()
        print(config.poll.timeout_sec)
    """

    env: str = Field(default="development", description="development | ci")
    log_level: str = "INFO"
    json_logs: bool = False

    poll: PollConfig = Field(default_factory=PollConfig)
    smoke: SmokeConfig = Field(default_factory=SmokeConfig)
    compose: ComposeConfig = Field(default_factory=ComposeConfig)
    doctor: DoctorConfig = Field(default_factory=DoctorConfig)

    model_config = {"env_prefix": "APP_"}


@lru_cache
def get_config() -> AppConfig:
    """싱글턴 설정 인스턴스.

    프로세스 내에서 한 번만 환경 변수를 읽고 캐싱.
    테스트에서는 get_config.cache_clear()로 초기화.
    """
    return AppConfig()
