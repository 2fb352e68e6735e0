"""Outward API of the core: client resolution and command execution.

``RuntimeProvider`` is the object the surrounding application creates once
at startup. It builds the client pools (Docker first, then Podman), wires
both runtime managers to the same configuration and event bus, and exposes:

- ``resolve_client(capability)``   the active, configured client
- ``run(capability, build)``       resolve, build an invocation, run it
- ``execute(command, args, ...)``  the raw process executor

``choose_container_runtime`` switches engine and orchestrator together,
the way a runtime picker in an editor would.

Example::

    provider = RuntimeProvider.create(SettingsConfiguration())
    compose = await provider.resolve_client(Capability.ORCHESTRATOR)
    await provider.runner.run(compose.up(files=["compose.yml"]))
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from dockside.clients._types import ClientDescriptor, RuntimeClient
from dockside.clients.auto import (
    AutoConfigurableDockerClient,
    AutoConfigurableDockerComposeClient,
    AutoConfigurablePodmanClient,
    AutoConfigurablePodmanComposeClient,
)
from dockside.clients.compose import DockerComposeClient, PodmanComposeClient
from dockside.clients.engine import DockerClient, PodmanClient
from dockside.core.config import (
    CONTAINER_CLIENT_KEY,
    ORCHESTRATOR_CLIENT_KEY,
    Configuration,
)
from dockside.core.events import EventBus, InMemoryEventBus
from dockside.core.logging import get_logger, log_context
from dockside.execution.process import ExecResult, OutputCallback, ProcessOptions
from dockside.execution.runner import CommandRunner, ProcessInvocation
from dockside.runtimes.manager import ContainerRuntimeManager, RuntimeManager
from dockside.runtimes.orchestrator import OrchestratorRuntimeManager

logger = get_logger(__name__)


class Capability(str, Enum):
    CONTAINER = "container"
    ORCHESTRATOR = "orchestrator"


@dataclass(frozen=True)
class RuntimePair:
    """An engine client and the orchestrator that goes with it."""

    container: ClientDescriptor
    orchestrator: ClientDescriptor


RUNTIME_PAIRS: dict[str, RuntimePair] = {
    "docker": RuntimePair(DockerClient.DESCRIPTOR, DockerComposeClient.DESCRIPTOR),
    "podman": RuntimePair(PodmanClient.DESCRIPTOR, PodmanComposeClient.DESCRIPTOR),
}


def choose_container_runtime(configuration: Configuration, runtime: str) -> bool:
    """Point both client keys at the pair named ``runtime``.

    Returns:
        False if the configuration already selected that pair, else True.

    Raises:
        KeyError: ``runtime`` is not one of ``RUNTIME_PAIRS``.
    """
    try:
        pair = RUNTIME_PAIRS[runtime.lower()]
    except KeyError:
        raise KeyError(f"Unknown container runtime '{runtime}'. Choose from: {', '.join(RUNTIME_PAIRS)}") from None

    if (
        configuration.get(CONTAINER_CLIENT_KEY) == pair.container.id
        and configuration.get(ORCHESTRATOR_CLIENT_KEY) == pair.orchestrator.id
    ):
        return False

    configuration.update(CONTAINER_CLIENT_KEY, pair.container.id)
    configuration.update(ORCHESTRATOR_CLIENT_KEY, pair.orchestrator.id)
    logger.info("container_runtime_changed", runtime=runtime, container_client=pair.container.id)
    return True


class RuntimeProvider:
    """Owns the client pools and runtime managers for one application."""

    def __init__(
        self,
        configuration: Configuration,
        container_manager: ContainerRuntimeManager,
        orchestrator_manager: OrchestratorRuntimeManager,
        runner: CommandRunner,
        event_bus: EventBus,
    ) -> None:
        self.configuration = configuration
        self.container_manager = container_manager
        self.orchestrator_manager = orchestrator_manager
        self.runner = runner
        self.event_bus = event_bus

    @classmethod
    def create(
        cls,
        configuration: Configuration,
        *,
        runner: CommandRunner | None = None,
        event_bus: EventBus | None = None,
    ) -> RuntimeProvider:
        """Build the default Docker/Podman pools."""
        runner = runner or CommandRunner()
        event_bus = event_bus or InMemoryEventBus()

        container_manager = ContainerRuntimeManager(
            configuration,
            [
                AutoConfigurableDockerClient(configuration, runner),
                AutoConfigurablePodmanClient(configuration, runner),
            ],
            event_bus=event_bus,
        )
        orchestrator_manager = OrchestratorRuntimeManager(
            configuration,
            [
                AutoConfigurableDockerComposeClient(configuration, runner),
                AutoConfigurablePodmanComposeClient(configuration, runner),
            ],
            event_bus=event_bus,
        )
        return cls(configuration, container_manager, orchestrator_manager, runner, event_bus)

    def manager_for(self, capability: Capability) -> RuntimeManager[Any]:
        if capability is Capability.CONTAINER:
            return self.container_manager
        return self.orchestrator_manager

    async def resolve_client(self, capability: Capability) -> RuntimeClient:
        capability = Capability(capability)
        with log_context(capability=capability.value):
            return await self.manager_for(capability).get_client()

    async def run(
        self,
        capability: Capability,
        build: Callable[[Any], ProcessInvocation],
        *,
        on_output: OutputCallback | None = None,
    ) -> Any:
        """Resolve the active client, build an invocation from it, and run it."""
        client = await self.resolve_client(capability)
        return await self.runner.run_with_defaults(lambda: build(client), on_output=on_output)

    async def execute(
        self,
        command: str,
        args: Sequence[str] = (),
        options: ProcessOptions | None = None,
        on_output: OutputCallback | None = None,
    ) -> ExecResult:
        return await self.runner.run(
            ProcessInvocation(command=command, args=tuple(args)),
            options=options,
            on_output=on_output,
        )

    def configuration_changed(self, keys: Sequence[str]) -> None:
        """Forward an external configuration-change notification to both managers.

        Only needed for configuration sources that do not notify listeners
        themselves.
        """
        self.container_manager.on_configuration_changed(keys)
        self.orchestrator_manager.on_configuration_changed(keys)
