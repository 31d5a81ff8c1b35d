"""E2E 테스트 공용 Fixtures.

Mock trust-fabric 스택(FastAPI) + MagicMock supervisor + VirtualClock으로
StackOrchestrator 전체 플로우를 docker/네트워크 없이 구동.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from trust_fabric.domain.config import get_config
from trust_fabric.infra.clock import VirtualClock
from trust_fabric.infra.compose.supervisor import ProcessSupervisor
from trust_fabric.infra.env import snapshot_from
from trust_fabric.orchestrator.workflow import StackOrchestrator

from .mock_fabric import FabricState, create_mock_transport, default_stack

# ---------------------------------------------------------------------------
# Config patching
# ---------------------------------------------------------------------------

_TEST_ENV = {
    "APP_ENV": "ci",
    "POLL_TIMEOUT_SEC": "20",
    "POLL_INTERVAL_SEC": "2",
    "DOCTOR_TCP_TIMEOUT_SEC": "0.2",
}


@pytest.fixture(autouse=True)
def _patch_config():
    """모든 E2E 테스트에서 config 캐시를 클리어하고 테스트 환경 변수 주입."""
    get_config.cache_clear()
    with patch.dict(os.environ, _TEST_ENV, clear=False):
        yield
    get_config.cache_clear()


# ---------------------------------------------------------------------------
# Mock stack
# ---------------------------------------------------------------------------


@pytest.fixture
def fabric_state() -> FabricState:
    """Mutable 스택 상태 — 테스트에서 직접 변경."""
    return default_stack()


@pytest.fixture
def supervisor() -> MagicMock:
    """docker compose 대신 호출만 기록."""
    return MagicMock(spec=ProcessSupervisor)


@pytest.fixture
def make_orchestrator(fabric_state: FabricState, supervisor: MagicMock):
    """StackOrchestrator 팩토리 — env 오버라이드 지정 가능."""

    def _factory(
        env: dict[str, str] | None = None, state: FabricState | None = None, root: Path | None = None
    ) -> StackOrchestrator:
        transport = create_mock_transport(state or fabric_state)

        def client_factory(verify_tls: bool) -> httpx.AsyncClient:
            return httpx.AsyncClient(transport=transport)

        return StackOrchestrator(
            supervisor,
            get_config(),
            snapshot_from(env or {}),
            clock=VirtualClock(),
            client_factory=client_factory,
            root=root,
        )

    return _factory
