"""Tests for RuntimeManager client selection."""

from __future__ import annotations

import pytest

from dockside.core.config import (
    CONTAINER_CLIENT_KEY,
    CONTAINER_COMMAND_KEY,
    InMemoryConfiguration,
)
from dockside.core.errors import NoClientRegisteredError
from dockside.core.events import CLIENT_CHANGED, Event, InMemoryEventBus
from dockside.runtimes.manager import ContainerRuntimeManager, RuntimeManager


# ── Helpers ──────────────────────────────────────────────────


class _Client:
    def __init__(self, client_id: str, command_name: str | None = None):
        self.id = client_id
        self.display_name = client_id.title()
        self.description = ""
        self.command_name = command_name or client_id
        self.reconfigure_calls = 0

    def reconfigure(self) -> None:
        self.reconfigure_calls += 1


class _PlainClient:
    """No reconfigure capability."""

    def __init__(self, client_id: str):
        self.id = client_id
        self.display_name = client_id
        self.description = ""
        self.command_name = client_id


def _manager(configuration, *clients, event_bus=None) -> ContainerRuntimeManager:
    return ContainerRuntimeManager(configuration, list(clients), event_bus=event_bus)


# ── Tests ────────────────────────────────────────────────────


class TestResolution:
    @pytest.mark.asyncio
    async def test_configured_client(self, configuration):
        docker, podman = _Client("docker"), _Client("podman")
        configuration.update(CONTAINER_CLIENT_KEY, "podman")
        assert await _manager(configuration, docker, podman).get_client() is podman

    @pytest.mark.asyncio
    async def test_unset_uses_default(self, configuration):
        docker, podman = _Client("docker"), _Client("podman")
        assert await _manager(configuration, podman, docker).get_client() is docker

    @pytest.mark.asyncio
    async def test_unknown_id_falls_back_to_default(self, configuration):
        docker = _Client("docker")
        configuration.update(CONTAINER_CLIENT_KEY, "rancher")
        assert await _manager(configuration, docker, _Client("podman")).get_client() is docker

    @pytest.mark.asyncio
    async def test_reads_configuration_on_every_call(self, configuration):
        docker, podman = _Client("docker"), _Client("podman")
        manager = _manager(configuration, docker, podman)
        assert await manager.get_client() is docker
        configuration.update(CONTAINER_CLIENT_KEY, "podman")
        assert await manager.get_client() is podman

    @pytest.mark.asyncio
    async def test_empty_pool_raises(self, configuration):
        with pytest.raises(NoClientRegisteredError) as exc_info:
            await _manager(configuration).get_client()
        assert exc_info.value.config_key == CONTAINER_CLIENT_KEY

    @pytest.mark.asyncio
    async def test_no_default_raises(self, configuration):
        manager = _manager(configuration, _Client("podman"))
        with pytest.raises(NoClientRegisteredError):
            await manager.get_client()

    @pytest.mark.asyncio
    async def test_reconfigures_on_first_resolution_only(self, configuration):
        docker = _Client("docker")
        manager = _manager(configuration, docker)
        await manager.get_client()
        await manager.get_client()
        assert docker.reconfigure_calls == 1

    @pytest.mark.asyncio
    async def test_reconfigures_when_settings_change_silently(self):
        values: dict[str, str] = {}

        class _SilentConfiguration:
            def get(self, key):
                return values.get(key)

            def update(self, key, value):
                values[key] = value

            def add_listener(self, listener):
                pass

        docker = _Client("docker")
        manager = _manager(_SilentConfiguration(), docker)
        await manager.get_client()
        values[CONTAINER_COMMAND_KEY] = "nerdctl"
        await manager.get_client()

        assert docker.reconfigure_calls == 2

    @pytest.mark.asyncio
    async def test_client_without_reconfigure(self, configuration):
        plain = _PlainClient("docker")
        assert await _manager(configuration, plain).get_client() is plain

    def test_duplicate_ids_rejected(self, configuration):
        with pytest.raises(ValueError):
            _manager(configuration, _Client("docker"), _Client("docker"))

    def test_pool_introspection(self, configuration):
        manager = _manager(configuration, _Client("docker"), _Client("podman"))
        assert manager.client_ids == ["docker", "podman"]
        assert len(manager) == 2
        assert "podman" in manager
        assert "rancher" not in manager

    def test_custom_default_client(self, configuration):
        class FirstClientManager(RuntimeManager):
            def _get_default_client(self):
                return self.clients[0] if self.clients else None

        podman = _Client("podman")
        manager = FirstClientManager("custom_client", configuration, [podman])
        assert manager.resolve() is podman


class TestClientChangedEvents:
    @pytest.mark.asyncio
    async def test_no_event_on_first_resolution(self, configuration):
        bus = InMemoryEventBus()
        received: list[Event] = []

        async def handler(event: Event) -> None:
            received.append(event)

        manager = _manager(configuration, _Client("docker"), event_bus=bus)
        await manager.subscribe_client_changed(handler)
        await manager.get_client()
        await manager.get_client()

        assert received == []

    @pytest.mark.asyncio
    async def test_event_on_change(self, configuration):
        bus = InMemoryEventBus()
        received: list[Event] = []

        async def handler(event: Event) -> None:
            received.append(event)

        manager = _manager(configuration, _Client("docker"), _Client("podman"), event_bus=bus)
        await manager.subscribe_client_changed(handler)

        await manager.get_client()
        configuration.update(CONTAINER_CLIENT_KEY, "podman")
        await manager.get_client()

        assert len(received) == 1
        assert received[0].event_type == CLIENT_CHANGED
        assert received[0].payload == {
            "config_key": CONTAINER_CLIENT_KEY,
            "previous_client_id": "docker",
            "client_id": "podman",
        }

    @pytest.mark.asyncio
    async def test_subscription_filters_other_managers(self, configuration):
        bus = InMemoryEventBus()
        received: list[Event] = []

        async def handler(event: Event) -> None:
            received.append(event)

        manager = _manager(configuration, _Client("docker"), event_bus=bus)
        await manager.subscribe_client_changed(handler)
        await bus.publish(Event(event_type=CLIENT_CHANGED, source="runtime_manager.other"))

        assert received == []


class TestConfigurationListener:
    def test_client_key_change_reconfigures_pool(self):
        configuration = InMemoryConfiguration()
        docker, podman = _Client("docker"), _Client("podman")
        _manager(configuration, docker, podman)

        configuration.update(CONTAINER_COMMAND_KEY, "nerdctl")

        assert docker.reconfigure_calls == 1
        assert podman.reconfigure_calls == 1

    def test_unrelated_key_ignored(self):
        configuration = InMemoryConfiguration()
        docker = _Client("docker")
        _manager(configuration, docker)

        configuration.update("log_level", "DEBUG")

        assert docker.reconfigure_calls == 0
