"""Process group control — docker compose supervisor."""

from .supervisor import ComposeSupervisor, ProcessSupervisor

__all__ = ["ComposeSupervisor", "ProcessSupervisor"]
