"""Runtime managers and the outward resolution/execution API."""

from dockside.runtimes.manager import ContainerRuntimeManager, RuntimeManager
from dockside.runtimes.orchestrator import OrchestratorRuntimeManager
from dockside.runtimes.provider import (
    RUNTIME_PAIRS,
    Capability,
    RuntimePair,
    RuntimeProvider,
    choose_container_runtime,
)

__all__ = [
    "RUNTIME_PAIRS",
    "Capability",
    "ContainerRuntimeManager",
    "OrchestratorRuntimeManager",
    "RuntimeManager",
    "RuntimePair",
    "RuntimeProvider",
    "choose_container_runtime",
]
