"""Auto-configurable clients — engine and compose clients driven by live configuration.

Two configuration phases, deliberately split:

.. code-block:: text

    reconfigure()            synchronous, cheap, called on every resolution
      ├── engine clients:   re-read ``container_command`` → command name
      └── compose clients:  clear the ComposeConfig cache (no probing)

    await slow_configure()   compose clients only, at most one probe per clear
      └── AsyncLazy(_detect_compose_config)
            ├── ``compose_command`` set?  normalize_compose_command()  (no process)
            └── otherwise probe ``<engine> compose version``
                  ├── success  → ComposeConfig(<engine>, v2)
                  └── failure  → ComposeConfig(<engine>-compose, legacy)

A failed probe is not an error for anyone: it is logged as a
``ProbeFailure`` and the client falls back to the legacy binary.

Concurrency:
    Concurrent ``slow_configure()`` callers share one probe through the lazy
    cache. ``reconfigure()`` during an in-flight probe starts a new
    generation: callers still waiting on the old probe discard its result
    and wait for the current one, so a stale probe never overwrites a newer
    configuration. The resolved value is applied as a single
    ``ComposeConfig`` swap.

Example:
    >>> client = AutoConfigurableDockerComposeClient(config)
    >>> await client.slow_configure()
    >>> client.compose_config
    ComposeConfig(command_name='docker', compose_v2=True)

Tags:
    dockside, clients, compose, configuration, lazy, probe

Doc-Types:
    api-reference
"""

from __future__ import annotations

import re

from dockside.clients._types import ComposeConfig
from dockside.clients.compose import ComposeClient, DockerComposeClient, PodmanComposeClient
from dockside.clients.engine import ContainerEngineClient, DockerClient, PodmanClient
from dockside.core.config import COMPOSE_COMMAND_KEY, CONTAINER_COMMAND_KEY, Configuration
from dockside.core.errors import ErrorContext, ProbeFailure, ProcessError
from dockside.core.lazy import AsyncLazy
from dockside.core.logging import get_logger
from dockside.execution.runner import CommandRunner

logger = get_logger(__name__)


def normalize_compose_command(engine_name: str, override: str) -> ComposeConfig:
    """Interpret an explicit compose command override.

    ``<engine>`` and ``<engine> compose`` (any case, any spacing) mean the
    integrated v2 subcommand; anything else is taken literally as a legacy
    command. Feeding the result's ``command_name`` back in gives the same
    result.
    """
    command = override.strip()
    if re.match(rf"^{re.escape(engine_name)}(\s+compose\s*)?$", command, re.IGNORECASE):
        return ComposeConfig(command_name=engine_name, compose_v2=True)
    return ComposeConfig(command_name=command, compose_v2=False)


# ---------------------------------------------------------------------------
# Engine clients
# ---------------------------------------------------------------------------

class AutoConfigurableEngineClient(ContainerEngineClient):
    """Engine client whose command name follows ``container_command``."""

    def __init__(self, configuration: Configuration, runner: CommandRunner | None = None) -> None:
        super().__init__(runner)
        self._configuration = configuration
        self.reconfigure()

    def reconfigure(self) -> None:
        self._command_name = self._configuration.get(CONTAINER_COMMAND_KEY) or self.DEFAULT_COMMAND
        logger.debug("container_command", client_id=self.id, command_name=self._command_name)


class AutoConfigurableDockerClient(AutoConfigurableEngineClient, DockerClient):
    pass


class AutoConfigurablePodmanClient(AutoConfigurableEngineClient, PodmanClient):
    pass


# ---------------------------------------------------------------------------
# Compose clients
# ---------------------------------------------------------------------------

class AutoConfigurableComposeClient(ComposeClient):
    """Compose client that detects v2 support lazily.

    Until the first ``slow_configure()`` the client carries its class
    default configuration; callers that go through the orchestrator runtime
    manager always see a configured client.
    """

    PROBE_TIMEOUT_SECONDS: float = 30.0

    def __init__(self, configuration: Configuration, runner: CommandRunner | None = None) -> None:
        super().__init__(runner)
        self._configuration = configuration
        self._compose_config_lazy: AsyncLazy[ComposeConfig] = AsyncLazy(
            self._detect_compose_config,
            name=f"{self.id}.compose_config",
        )
        self.reconfigure()

    def reconfigure(self) -> None:
        self._compose_config_lazy.clear()

    async def slow_configure(self) -> None:
        lazy = self._compose_config_lazy
        while True:
            generation = lazy.generation
            config = await lazy.get_value()
            if lazy.generation == generation:
                break
            # cleared while waiting; this result predates the latest reconfigure()
            logger.debug("compose_config_superseded", client_id=self.id)
        self.apply_config(config)

    async def _detect_compose_config(self) -> ComposeConfig:
        override = self._configuration.get(COMPOSE_COMMAND_KEY)

        if override:
            config = normalize_compose_command(self.ENGINE_NAME, override)
            logger.debug(
                "compose_command_override",
                client_id=self.id,
                command_name=config.command_name,
                compose_v2=config.compose_v2,
            )
            return config

        logger.info("compose_autodetect_started", client_id=self.id, engine=self.ENGINE_NAME)
        try:
            await self.runner.run_with_defaults(
                lambda: self.check_orchestrator_install(compose_v2=True),
                timeout=self.PROBE_TIMEOUT_SECONDS,
            )
        except (ProcessError, OSError) as exc:
            failure = ProbeFailure(
                f"{self.ENGINE_NAME} compose v2 not available",
                cause=exc,
                context=ErrorContext(client_id=self.id),
            )
            logger.info("compose_probe_failed", **failure.to_dict())
            return ComposeConfig(command_name=self.LEGACY_COMMAND, compose_v2=False)

        return ComposeConfig(command_name=self.ENGINE_NAME, compose_v2=True)


class AutoConfigurableDockerComposeClient(AutoConfigurableComposeClient, DockerComposeClient):
    pass


class AutoConfigurablePodmanComposeClient(AutoConfigurableComposeClient, PodmanComposeClient):
    pass


__all__ = [
    "AutoConfigurableComposeClient",
    "AutoConfigurableDockerClient",
    "AutoConfigurableDockerComposeClient",
    "AutoConfigurableEngineClient",
    "AutoConfigurablePodmanClient",
    "AutoConfigurablePodmanComposeClient",
    "normalize_compose_command",
]
