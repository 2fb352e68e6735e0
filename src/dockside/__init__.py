"""dockside — container runtime selection and process dispatch.

Resolves the active Docker or Podman client (engine and compose), configures
it lazily from live settings, and runs its commands as external processes.

Quick start::

    from dockside import Capability, RuntimeProvider, SettingsConfiguration

    provider = RuntimeProvider.create(SettingsConfiguration())
    compose = await provider.resolve_client(Capability.ORCHESTRATOR)
    result = await provider.runner.run(compose.ps())
"""

from dockside.core.config import InMemoryConfiguration, SettingsConfiguration
from dockside.core.errors import (
    ConfigurationError,
    DocksideError,
    NoClientRegisteredError,
    ProcessError,
    ProcessTimeoutError,
)
from dockside.execution.process import ExecResult, ProcessOptions, execute
from dockside.runtimes.provider import Capability, RuntimeProvider, choose_container_runtime

__version__ = "0.1.0"

__all__ = [
    "Capability",
    "ConfigurationError",
    "DocksideError",
    "ExecResult",
    "InMemoryConfiguration",
    "NoClientRegisteredError",
    "ProcessError",
    "ProcessOptions",
    "ProcessTimeoutError",
    "RuntimeProvider",
    "SettingsConfiguration",
    "choose_container_runtime",
    "execute",
]
