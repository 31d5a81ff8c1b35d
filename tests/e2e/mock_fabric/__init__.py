"""Mock trust-fabric 스택 — E2E 테스트용 FastAPI 앱."""

from .app import create_mock_transport
from .state import FabricState, NodeState, default_stack

__all__ = ["FabricState", "NodeState", "create_mock_transport", "default_stack"]
