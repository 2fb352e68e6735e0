"""Engine and orchestrator clients for Docker and Podman."""

from dockside.clients._types import (
    ClientDescriptor,
    ComposeConfig,
    ContainerClient,
    OrchestratorClient,
    Reconfigurable,
    RuntimeClient,
    SlowConfigurable,
    is_compose_v2_capable,
    is_reconfigurable,
    is_slow_configurable,
)
from dockside.clients.auto import (
    AutoConfigurableDockerClient,
    AutoConfigurableDockerComposeClient,
    AutoConfigurablePodmanClient,
    AutoConfigurablePodmanComposeClient,
    normalize_compose_command,
)
from dockside.clients.compose import ComposeClient, DockerComposeClient, PodmanComposeClient
from dockside.clients.engine import ContainerEngineClient, DockerClient, EngineVersion, PodmanClient

__all__ = [
    "AutoConfigurableDockerClient",
    "AutoConfigurableDockerComposeClient",
    "AutoConfigurablePodmanClient",
    "AutoConfigurablePodmanComposeClient",
    "ClientDescriptor",
    "ComposeClient",
    "ComposeConfig",
    "ContainerClient",
    "ContainerEngineClient",
    "DockerClient",
    "DockerComposeClient",
    "EngineVersion",
    "OrchestratorClient",
    "PodmanClient",
    "PodmanComposeClient",
    "Reconfigurable",
    "RuntimeClient",
    "SlowConfigurable",
    "is_compose_v2_capable",
    "is_reconfigurable",
    "is_slow_configurable",
    "normalize_compose_command",
]
