"""E2E 스모크 테스트.

Mock 스택 → StackOrchestrator.smoke() → readiness 확인 → datatype POST.

시나리오:
1. org1 스모크 2회 → 201 후 409, 둘 다 통과 (멱등)
2. regulator → 쓰기 없이 상태 조회만
3. org1 미기동 → ReadinessFailed, POST 없음
4. 버전 변경 → 새 datatype 201
"""

import pytest

from trust_fabric.domain.config import get_config
from trust_fabric.domain.enums import SmokeMode
from trust_fabric.domain.errors import ReadinessFailed

from .mock_fabric import default_stack

pytestmark = pytest.mark.e2e


@pytest.mark.asyncio
async def test_smoke_idempotent(make_orchestrator, fabric_state):
    orchestrator = make_orchestrator()

    first = await orchestrator.smoke("org1")
    second = await orchestrator.smoke("org1")

    assert (first.status_code, second.status_code) == (201, 409)
    assert first.accepted and second.accepted
    assert fabric_state.datatypes == {("smoke", "1.0.0")}
    assert fabric_state.datatype_posts == 2


@pytest.mark.asyncio
async def test_smoke_regulator_read_only(make_orchestrator, fabric_state):
    orchestrator = make_orchestrator()

    result = await orchestrator.smoke("reg")

    assert result.mode == SmokeMode.READ_ONLY
    assert result.detail["node"]["name"] == "reg"
    assert fabric_state.datatype_posts == 0


@pytest.mark.asyncio
async def test_smoke_waits_for_readiness(make_orchestrator):
    state = default_stack(org1=None)
    orchestrator = make_orchestrator(state=state)

    with pytest.raises(ReadinessFailed):
        await orchestrator.smoke("org1", timeout=4)

    assert state.nodes[5000].status_calls == 3
    assert state.datatype_posts == 0


@pytest.mark.asyncio
async def test_smoke_new_version(make_orchestrator, fabric_state, monkeypatch):
    await make_orchestrator().smoke("org1")

    monkeypatch.setenv("SMOKE_DATATYPE_VERSION", "1.1.0")
    get_config.cache_clear()
    result = await make_orchestrator().smoke("org1")

    assert result.status_code == 201
    assert fabric_state.datatypes == {("smoke", "1.0.0"), ("smoke", "1.1.0")}
