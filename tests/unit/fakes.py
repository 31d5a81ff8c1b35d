"""단위 테스트용 가짜 서비스.

포트별로 스크립트된 응답을 돌려주는 httpx.MockTransport.
네트워크 없이 Poller/Coordinator/Smoke 구동.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import httpx


@dataclass
class FakeService:
    """포트 하나에 대한 스크립트 응답.

    ready_after: N번째 요청부터 200 (None이면 계속 실패)
    failure: 준비 전 응답 — "refused"(ConnectError) 또는 HTTP 상태 코드
    """

    ready_after: int | None = 1
    failure: str | int = "refused"
    calls: int = 0


def make_transport(
    services: dict[int, FakeService],
    on_request: Callable[[httpx.Request, FakeService], None] | None = None,
) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        svc = services.get(request.url.port)
        if svc is None:
            raise httpx.ConnectError("Connection refused", request=request)
        svc.calls += 1
        if on_request is not None:
            on_request(request, svc)
        if svc.ready_after is not None and svc.calls >= svc.ready_after:
            return httpx.Response(200, json={"node": {"port": request.url.port}})
        if svc.failure == "refused":
            raise httpx.ConnectError("Connection refused", request=request)
        return httpx.Response(int(svc.failure), json={"error": "starting"})

    return httpx.MockTransport(handler)


def client_factory_for(transport: httpx.MockTransport, seen: list[bool] | None = None):
    """ReadinessCoordinator용 client_factory (verify 플래그 기록)."""

    def factory(verify_tls: bool) -> httpx.AsyncClient:
        if seen is not None:
            seen.append(verify_tls)
        return httpx.AsyncClient(transport=transport)

    return factory
