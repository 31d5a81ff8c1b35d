"""Smoke Verifier — 준비된 서비스에 멱등 쓰기 요청 1회.

WRITE: POST canary datatype → 201(생성) 또는 409(이미 존재) 모두 통과.
       이전에 스모크를 돌린 환경에서 재실행해도 실패로 보지 않음.
READ_ONLY: 상태 조회(GET)만 수행 (regulator 등 쓰기 불가 노드).
"""

import logging

import httpx

from trust_fabric.domain.config import SmokeConfig
from trust_fabric.domain.enums import SmokeMode
from trust_fabric.domain.errors import SmokeCheckFailed, SmokeNotSupported
from trust_fabric.domain.health import DatatypeValidator, SmokeDatatype, SmokeResult
from trust_fabric.domain.services import ResolvedEndpoint, ServiceDescriptor

logger = logging.getLogger(__name__)

WRITE_ACCEPTED_CODES = frozenset({201, 409})
READ_ACCEPTED_CODES = frozenset({200})


def build_payload(config: SmokeConfig | None = None) -> SmokeDatatype:
    """설정 기반 canary datatype."""
    config = config or SmokeConfig()
    return SmokeDatatype(
        name=config.datatype_name,
        version=config.datatype_version,
        validator=DatatypeValidator(name=config.validator_name),
    )


async def verify(
    descriptor: ServiceDescriptor,
    payload: SmokeDatatype,
    endpoint: ResolvedEndpoint,
    *,
    client: httpx.AsyncClient,
) -> SmokeResult:
    """스모크 요청 1회 수행.

    Raises:
        SmokeCheckFailed: 허용되지 않은 상태 코드 또는 응답 없음
        SmokeNotSupported: 스모크 대상이 아닌 서비스
    """
    if descriptor.smoke_mode == SmokeMode.READ_ONLY:
        return await _verify_read_only(descriptor, endpoint, client)
    if descriptor.smoke_mode != SmokeMode.WRITE or not descriptor.smoke_path:
        raise SmokeNotSupported(descriptor.identifier)

    url = endpoint.url(descriptor.smoke_path)
    logger.info("Running smoke against %s at %s", descriptor.identifier, endpoint.base_url)
    try:
        resp = await client.post(url, json=payload.model_dump())
    except httpx.RequestError as e:
        raise SmokeCheckFailed(descriptor.identifier, None, str(e) or type(e).__name__) from e

    if resp.status_code not in WRITE_ACCEPTED_CODES:
        raise SmokeCheckFailed(descriptor.identifier, resp.status_code, _excerpt(resp))

    logger.info("Smoke test passed for %s (HTTP %d)", descriptor.identifier, resp.status_code)
    return SmokeResult(
        service=descriptor.identifier,
        accepted=True,
        status_code=resp.status_code,
        mode=SmokeMode.WRITE,
        detail=_json_or_none(resp),
    )


async def _verify_read_only(
    descriptor: ServiceDescriptor, endpoint: ResolvedEndpoint, client: httpx.AsyncClient
) -> SmokeResult:
    logger.info("Read-only smoke for %s", descriptor.identifier)
    try:
        resp = await client.get(endpoint.url(descriptor.probe_path))
    except httpx.RequestError as e:
        raise SmokeCheckFailed(descriptor.identifier, None, str(e) or type(e).__name__) from e

    if resp.status_code not in READ_ACCEPTED_CODES:
        raise SmokeCheckFailed(descriptor.identifier, resp.status_code, _excerpt(resp))

    return SmokeResult(
        service=descriptor.identifier,
        accepted=True,
        status_code=resp.status_code,
        mode=SmokeMode.READ_ONLY,
        detail=_json_or_none(resp),
    )


def _json_or_none(resp: httpx.Response) -> dict | None:
    try:
        data = resp.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else {"data": data}


def _excerpt(resp: httpx.Response, limit: int = 200) -> str:
    return resp.text[:limit].strip()
