"""단위 테스트 공용 Fixtures."""

import pytest

from trust_fabric.domain.config import get_config
from trust_fabric.infra.clock import VirtualClock


@pytest.fixture(autouse=True)
def _clear_config_cache():
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def clock() -> VirtualClock:
    """실제 대기 없는 가상 시계."""
    return VirtualClock()
