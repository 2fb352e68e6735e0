"""Orchestrator runtime manager.

Resolution is split in two phases: the cheap selection inherited from
``RuntimeManager`` (safe to call in a hot path), then ``slow_configure()``
on clients that have it. The expensive compose probe behind
``slow_configure()`` is cached by the client, so it is paid at most once
per reconfiguration cycle no matter how often the client is resolved.
"""

from __future__ import annotations

from collections.abc import Iterable

from dockside.clients._types import OrchestratorClient, is_slow_configurable
from dockside.clients.compose import DockerComposeClient
from dockside.core.config import ORCHESTRATOR_CLIENT_KEY, Configuration
from dockside.core.events import EventBus
from dockside.core.logging import get_logger
from dockside.runtimes.manager import RuntimeManager

logger = get_logger(__name__)


class OrchestratorRuntimeManager(RuntimeManager[OrchestratorClient]):
    """Compose client manager; defaults to Docker Compose."""

    DEFAULT_CLIENT_ID = DockerComposeClient.DESCRIPTOR.id

    def __init__(
        self,
        configuration: Configuration,
        clients: Iterable[OrchestratorClient],
        *,
        event_bus: EventBus | None = None,
    ) -> None:
        super().__init__(ORCHESTRATOR_CLIENT_KEY, configuration, clients, event_bus=event_bus)

    async def get_client(self) -> OrchestratorClient:
        client = await super().get_client()

        if is_slow_configurable(client):
            await client.slow_configure()
            logger.debug(
                "orchestrator_configured",
                client_id=client.id,
                command_name=client.command_name,
                compose_v2=getattr(client, "compose_v2", None),
            )

        return client
