"""Address Resolver — 서비스 식별자 → 접속 주소.

우선순위: URL 오버라이드(FF_ORG1_URL 등) > 포트 오버라이드(FF_ORG1 등) > 카탈로그 기본 포트.
스냅샷과 식별자에 대한 순수 함수 (결과 캐싱 없음).
"""

from collections.abc import Mapping

import httpx

from trust_fabric.domain.errors import InvalidEndpointOverride, UnknownService
from trust_fabric.domain.services import DEFAULT_HOST, SERVICE_CATALOG, ResolvedEndpoint, ServiceDescriptor
from trust_fabric.infra.env import EnvSnapshot


def resolve_port(env: EnvSnapshot, variable: str, default: int) -> int:
    """환경 변수 포트 오버라이드 해석. 비어 있으면 기본값."""
    raw = (env.get(variable) or "").strip()
    if not raw:
        return default
    try:
        port = int(raw)
    except ValueError:
        raise InvalidEndpointOverride(variable, raw) from None
    if not 1 <= port <= 65535:
        raise InvalidEndpointOverride(variable, raw)
    return port


def resolve_base_url(env: EnvSnapshot, variable: str) -> str | None:
    """전체 base URL 오버라이드 해석. 비어 있으면 None.

    http(s) 스킴과 호스트 필수, 끝 슬래시 제거 (http://fabric.internal:5000/ → http://fabric.internal:5000).
    """
    raw = (env.get(variable) or "").strip()
    if not raw:
        return None
    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL:
        raise InvalidEndpointOverride(variable, raw, "is not a valid URL") from None
    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidEndpointOverride(variable, raw, "must be an http(s) URL with a host")
    if url.query or url.fragment:
        raise InvalidEndpointOverride(variable, raw, "must not carry a query or fragment")
    return raw.rstrip("/")


def resolve_descriptor(descriptor: ServiceDescriptor, env: EnvSnapshot) -> ResolvedEndpoint:
    base_url = resolve_base_url(env, descriptor.url_env) if descriptor.url_env else None
    if base_url is None:
        port = resolve_port(env, descriptor.port_env, descriptor.default_port)
        base_url = f"{descriptor.protocol}://{DEFAULT_HOST}:{port}"
    return ResolvedEndpoint(
        service=descriptor.identifier,
        base_url=base_url,
        verify_tls=descriptor.verify_tls,
    )


class AddressResolver:
    """카탈로그 + 환경 스냅샷 바인딩.

    Usage:
        resolver = AddressResolver(load_env_snapshot(".env"))
        endpoint = resolver.resolve("org1")   # http://localhost:5000
    """

    def __init__(self, env: EnvSnapshot, catalog: Mapping[str, ServiceDescriptor] | None = None):
        self._env = env
        self._catalog = SERVICE_CATALOG if catalog is None else catalog

    def descriptor(self, identifier: str) -> ServiceDescriptor:
        try:
            return self._catalog[identifier]
        except KeyError:
            raise UnknownService(identifier, sorted(self._catalog)) from None

    def resolve(self, identifier: str) -> ResolvedEndpoint:
        return resolve_descriptor(self.descriptor(identifier), self._env)


def resolve(identifier: str, env: EnvSnapshot) -> ResolvedEndpoint:
    """기본 카탈로그 기준 주소 해석."""
    return AddressResolver(env).resolve(identifier)
