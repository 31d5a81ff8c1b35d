"""Readiness/스모크 오케스트레이터."""

from .coordinator import ReadinessCoordinator, await_readiness
from .poller import HealthPoller, poll
from .resolver import AddressResolver, resolve
from .smoke import build_payload, verify
from .workflow import StackOrchestrator

__all__ = [
    "AddressResolver",
    "resolve",
    "HealthPoller",
    "poll",
    "ReadinessCoordinator",
    "await_readiness",
    "build_payload",
    "verify",
    "StackOrchestrator",
]
