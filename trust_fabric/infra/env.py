"""환경 스냅샷 — 호출 시작 시점에 한 번 읽는 불변 매핑.

우선순위 (높은 순):
  1. 프로세스 환경 변수
  2. env 파일 (ops/compose/.env, 기본값 정의 역할)

env 파일이 없으면 프로세스 환경만 사용. 이 모듈 밖에서는 os.environ을 읽지 않음.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

EnvSnapshot = Mapping[str, str]


def snapshot_from(values: Mapping[str, str | None]) -> EnvSnapshot:
    """임의 매핑 → 불변 스냅샷 (None 값 제거)."""
    return MappingProxyType({k: v for k, v in values.items() if v is not None})


def load_env_snapshot(env_file: str | Path | None = None, *, environ: Mapping[str, str] | None = None) -> EnvSnapshot:
    """env 파일 + 프로세스 환경을 합친 스냅샷 생성.

    Args:
        env_file: dotenv 형식 파일 경로 (없어도 오류 아님)
        environ: 프로세스 환경 대신 사용할 매핑 (테스트용)
    """
    merged: dict[str, str | None] = {}
    if env_file is not None:
        path = Path(env_file)
        if path.is_file():
            merged.update(dotenv_values(path))
        else:
            logger.debug("Env file %s not found, using defaults", path)

    merged.update(os.environ if environ is None else environ)
    return snapshot_from(merged)


_SECRET_MARKERS = ("PASSWORD", "SECRET", "TOKEN", "KEY")


def sanitized_view(env: EnvSnapshot, prefixes: list[str] | tuple[str, ...]) -> dict[str, str]:
    """접두사로 필터링하고 비밀 값은 마스킹한 정렬된 환경 변수."""
    result = {}
    for key in sorted(env):
        if not key.startswith(tuple(prefixes)):
            continue
        value = env[key]
        if any(marker in key.upper() for marker in _SECRET_MARKERS) and value:
            value = "****"
        result[key] = value
    return result
