"""Tests for OrchestratorRuntimeManager's two-phase configuration."""

from __future__ import annotations

import asyncio

import pytest

from dockside.clients._types import ComposeConfig
from dockside.clients.auto import (
    AutoConfigurableDockerComposeClient,
    AutoConfigurablePodmanComposeClient,
)
from dockside.core.config import COMPOSE_COMMAND_KEY, ORCHESTRATOR_CLIENT_KEY
from dockside.execution.runner import CommandRunner
from dockside.runtimes.orchestrator import OrchestratorRuntimeManager
from tests._support.fakes import FakeExecutor, failed


def _manager(configuration, runner) -> OrchestratorRuntimeManager:
    return OrchestratorRuntimeManager(
        configuration,
        [
            AutoConfigurableDockerComposeClient(configuration, runner),
            AutoConfigurablePodmanComposeClient(configuration, runner),
        ],
    )


class TestOrchestratorRuntimeManager:
    @pytest.mark.asyncio
    async def test_defaults_to_docker_compose(self, configuration, runner):
        client = await _manager(configuration, runner).get_client()
        assert client.id == "docker-compose"

    @pytest.mark.asyncio
    async def test_returned_client_is_configured(self, configuration, executor, runner):
        executor.responses["docker compose version"] = failed()
        client = await _manager(configuration, runner).get_client()
        assert client.compose_config == ComposeConfig("docker-compose", False)

    @pytest.mark.asyncio
    async def test_repeated_resolution_probes_once(self, configuration, executor, runner):
        manager = _manager(configuration, runner)
        await manager.get_client()
        await manager.get_client()
        assert executor.calls == ["docker compose version"]

    @pytest.mark.asyncio
    async def test_settings_change_reprobes(self, configuration, executor, runner):
        manager = _manager(configuration, runner)
        await manager.get_client()

        executor.responses["docker compose version"] = failed()
        configuration.update("container_command", "docker")
        client = await manager.get_client()

        assert executor.calls == ["docker compose version", "docker compose version"]
        assert client.compose_config == ComposeConfig("docker-compose", False)

    @pytest.mark.asyncio
    async def test_concurrent_resolutions_share_probe(self, configuration):
        executor = FakeExecutor(delay=0.05)
        manager = _manager(configuration, CommandRunner(executor))

        clients = await asyncio.gather(*[manager.get_client() for _ in range(3)])

        assert {c.id for c in clients} == {"docker-compose"}
        assert executor.calls == ["docker compose version"]

    @pytest.mark.asyncio
    async def test_configured_podman_with_override(self, configuration, executor, runner):
        configuration.update(ORCHESTRATOR_CLIENT_KEY, "podman-compose")
        configuration.update(COMPOSE_COMMAND_KEY, "podman compose")

        client = await _manager(configuration, runner).get_client()

        assert client.id == "podman-compose"
        assert client.compose_config == ComposeConfig("podman", True)
        assert executor.calls == []
