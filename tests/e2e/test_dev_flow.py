"""E2E dev 플로우 테스트.

Mock 스택 → StackOrchestrator.dev() → up / wait-dx / wait-all / status 전체 검증.

시나리오:
1. 전체 기동 → ALL_READY → 상태 JSON 3건
2. regulator 미기동 → DEGRADED_READY (성공), 상태에 오류 표시
3. Data Exchange 미기동 → ReadinessFailed, FireFly 노드는 폴링하지 않음
4. 포트 오버라이드 → 오버라이드 포트로만 접속
5. 늦게 뜨는 org1 → 폴링 횟수만큼 대기 후 성공
"""

import pytest

from trust_fabric.domain.enums import PollStatus, ReadinessStatus
from trust_fabric.domain.errors import ReadinessFailed

from .mock_fabric import NodeState, default_stack

pytestmark = pytest.mark.e2e


@pytest.mark.asyncio
async def test_dev_all_ready(make_orchestrator, supervisor):
    """전체 기동 → 두 단계 모두 ALL_READY."""
    orchestrator = make_orchestrator()

    result = await orchestrator.dev()

    supervisor.start_all.assert_called_once()
    assert [list(r.outcomes) for r in result.reports] == [["dx"], ["org1", "reg"]]
    assert all(r.overall == ReadinessStatus.ALL_READY for r in result.reports)
    assert [(e.service, e.status_code) for e in result.status] == [("dx", 200), ("org1", 200), ("reg", 200)]
    assert result.status[1].body["node"]["name"] == "org1"


@pytest.mark.asyncio
async def test_dev_regulator_down_is_degraded(make_orchestrator):
    """regulator 미기동 → 경고만, dev 성공."""
    orchestrator = make_orchestrator(state=default_stack(reg=None))

    result = await orchestrator.dev()

    firefly = result.reports[-1]
    assert firefly.overall == ReadinessStatus.DEGRADED_READY
    assert firefly.get("org1").is_ready
    assert firefly.get("reg").status == PollStatus.TIMED_OUT
    assert firefly.get("reg").last_status_code == 503
    reg_status = result.status[-1]
    assert reg_status.status_code == 503
    assert reg_status.ok is False


@pytest.mark.asyncio
async def test_dev_dx_down_aborts_before_firefly(make_orchestrator):
    """Data Exchange 미기동 → required 실패, 다음 단계 진행 안 함."""
    state = default_stack(dx=None)
    orchestrator = make_orchestrator(state=state)

    with pytest.raises(ReadinessFailed) as exc_info:
        await orchestrator.dev()

    assert exc_info.value.service == "dx"
    assert state.nodes[5000].status_calls == 0
    assert state.nodes[5100].status_calls == 0
    # 20s / 2s → 11회 시도
    assert state.nodes[3001].status_calls == 11


@pytest.mark.asyncio
async def test_dev_port_override(make_orchestrator):
    """FF_ORG1=6000 → 6000 포트만 접속, 기본 5000은 무시."""
    state = default_stack()
    state.nodes[6000] = NodeState(name="org1-alt")
    orchestrator = make_orchestrator(env={"FF_ORG1": "6000"}, state=state)

    result = await orchestrator.dev(start=False)

    assert result.status[1].base_url == "http://localhost:6000"
    assert result.status[1].body["node"]["name"] == "org1-alt"
    assert state.nodes[5000].status_calls == 0


@pytest.mark.asyncio
async def test_dev_slow_org1(make_orchestrator):
    """org1이 4번째 조회부터 응답 → 6초 후 준비."""
    orchestrator = make_orchestrator(state=default_stack(org1=4))

    result = await orchestrator.dev()

    org1 = result.reports[-1].get("org1")
    assert org1.attempts == 4
    assert org1.elapsed_seconds == 6
