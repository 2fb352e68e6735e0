"""Client identity, compose configuration and capability protocols.

The runtime managers never compare a client against a known id to decide
what it can do. Instead every optional behaviour is a small protocol and is
detected with a capability query:

.. code-block:: text

    RuntimeClient          id, display_name, description, command_name
      ├── ContainerClient      engine commands (run, build, inspect, ...)
      └── OrchestratorClient   compose commands (up, down, ps, ...)

    Reconfigurable         reconfigure()              cheap, synchronous
    SlowConfigurable       await slow_configure()     expensive, cached
    ComposeV2Capable       compose_v2                 integrated subcommand?

Adding an engine means adding clients; the managers stay unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class ClientDescriptor:
    """Static identity of one client implementation.

    Attributes:
        id: Unique id, matched against the configuration value
        display_name: Human-readable name (e.g. ``Docker``)
        description: One-line description for pickers
    """

    id: str
    display_name: str
    description: str = ""


@dataclass(frozen=True)
class ComposeConfig:
    """Resolved compose command.

    ``compose_v2`` means ``<command_name> compose ...``; otherwise
    ``command_name`` is the standalone legacy binary.
    """

    command_name: str
    compose_v2: bool


@runtime_checkable
class RuntimeClient(Protocol):
    @property
    def id(self) -> str: ...

    @property
    def display_name(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def command_name(self) -> str: ...


@runtime_checkable
class ContainerClient(RuntimeClient, Protocol):
    """Engine client: single-container commands."""

    def check_install(self) -> Any: ...

    def version(self) -> Any: ...


@runtime_checkable
class OrchestratorClient(RuntimeClient, Protocol):
    """Orchestrator client: compose-file driven commands."""

    def check_orchestrator_install(self, compose_v2: bool | None = None) -> Any: ...

    def up(self, **kwargs: Any) -> Any: ...

    def down(self, **kwargs: Any) -> Any: ...


@runtime_checkable
class Reconfigurable(Protocol):
    def reconfigure(self) -> None: ...


@runtime_checkable
class SlowConfigurable(Protocol):
    async def slow_configure(self) -> None: ...


@runtime_checkable
class ComposeV2Capable(Protocol):
    @property
    def compose_v2(self) -> bool: ...


def is_reconfigurable(client: object) -> bool:
    return callable(getattr(client, "reconfigure", None))


def is_slow_configurable(client: object) -> bool:
    return callable(getattr(client, "slow_configure", None))


def is_compose_v2_capable(client: object) -> bool:
    return isinstance(getattr(client, "compose_v2", None), bool)


__all__ = [
    "ClientDescriptor",
    "ComposeConfig",
    "ComposeV2Capable",
    "ContainerClient",
    "OrchestratorClient",
    "Reconfigurable",
    "RuntimeClient",
    "SlowConfigurable",
    "is_compose_v2_capable",
    "is_reconfigurable",
    "is_slow_configurable",
]
