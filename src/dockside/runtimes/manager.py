"""Runtime manager — selects the active client for one capability.

A ``RuntimeManager`` owns a fixed pool of interchangeable clients (say, the
Docker and Podman engine clients) and a configuration key naming the active
one. Every ``get_client()`` reads the key afresh, so a changed setting takes
effect on the very next resolution.

Architecture:

    .. code-block:: text

        RuntimeManager[ClientT] — pool + configuration key
        ┌──────────────────────────────────────────────────────────────┐
        │                                                              │
        │  get_client()                                                │
        │    ├── pool empty?               → NoClientRegisteredError   │
        │    ├── configuration[key]                                    │
        │    │     ├── matches a client id → that client               │
        │    │     └── unset / unknown     → _get_default_client()     │
        │    ├── no default?               → NoClientRegisteredError   │
        │    ├── client.reconfigure()      (on settings change)        │
        │    └── identity changed?         → publish client_changed    │
        │                                                              │
        │  on_configuration_changed(keys)  → reconfigure whole pool    │
        │                                                              │
        └──────────────────────────────────────────────────────────────┘

    .. mermaid::

        flowchart TD
            CALL[get_client] --> CFG{configuration key}
            CFG -->|'podman'| P[PodmanClient]
            CFG -->|unset| DEF[default client]
            CFG -->|'unknown'| DEF
            P --> RC[reconfigure]
            DEF --> RC
            RC --> EV{changed since last call?}
            EV -->|yes| PUB[runtime.client_changed]

A client is reconfigured whenever the values of the client-related keys
differ from the ones it was last reconfigured with. Any client key counts,
not only the ones the client reads, so a relevant change is never missed;
unchanged settings leave cached detection (the compose probe) intact.

Example:
    >>> manager = ContainerRuntimeManager(config, [docker_client, podman_client])
    >>> client = await manager.get_client()
    >>> client.id
    'docker'

Tags:
    dockside, runtimes, manager, client-selection, configuration

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from typing import ClassVar, Generic, TypeVar

from dockside.clients._types import ContainerClient, RuntimeClient, is_reconfigurable
from dockside.clients.engine import DockerClient
from dockside.core.config import CLIENT_KEYS, CONTAINER_CLIENT_KEY, Configuration
from dockside.core.errors import NoClientRegisteredError
from dockside.core.events import CLIENT_CHANGED, Event, EventBus, InMemoryEventBus
from dockside.core.logging import get_logger

logger = get_logger(__name__)

ClientT = TypeVar("ClientT", bound=RuntimeClient)

ClientChangedHandler = Callable[[Event], Awaitable[None]]


class RuntimeManager(Generic[ClientT]):
    """Resolves the configured client from a pool.

    Subclasses set ``DEFAULT_CLIENT_ID`` or override ``_get_default_client``.

    Args:
        config_key: Configuration key holding the active client id.
        configuration: Configuration snapshot source, read on every resolution.
        clients: The pool, in default-search order. Ids must be unique.
        event_bus: Bus for ``runtime.client_changed``; a private one if omitted.
    """

    DEFAULT_CLIENT_ID: ClassVar[str | None] = None

    def __init__(
        self,
        config_key: str,
        configuration: Configuration,
        clients: Iterable[ClientT],
        *,
        event_bus: EventBus | None = None,
    ) -> None:
        self._config_key = config_key
        self._configuration = configuration
        self._clients: tuple[ClientT, ...] = tuple(clients)
        self._event_bus: EventBus = event_bus or InMemoryEventBus()
        self._last_client_id: str | None = None
        self._applied: dict[str, tuple[str | None, ...]] = {}

        seen: set[str] = set()
        for client in self._clients:
            if client.id in seen:
                raise ValueError(f"Duplicate client id '{client.id}' for '{config_key}'")
            seen.add(client.id)

        configuration.add_listener(self.on_configuration_changed)

    # ------------------------------------------------------------------
    # Pool
    # ------------------------------------------------------------------

    @property
    def config_key(self) -> str:
        return self._config_key

    @property
    def clients(self) -> tuple[ClientT, ...]:
        return self._clients

    @property
    def client_ids(self) -> list[str]:
        return [c.id for c in self._clients]

    @property
    def event_source(self) -> str:
        return f"runtime_manager.{self._config_key}"

    def get_by_id(self, client_id: str | None) -> ClientT | None:
        if not client_id:
            return None
        return next((c for c in self._clients if c.id == client_id), None)

    def _get_default_client(self) -> ClientT | None:
        return self.get_by_id(self.DEFAULT_CLIENT_ID)

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, client_id: str) -> bool:
        return self.get_by_id(client_id) is not None

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _client_settings(self) -> tuple[str | None, ...]:
        return tuple(self._configuration.get(key) for key in CLIENT_KEYS)

    def _reconfigure(self, client: ClientT, snapshot: tuple[str | None, ...]) -> None:
        self._applied[client.id] = snapshot
        if is_reconfigurable(client):
            client.reconfigure()

    def resolve(self) -> ClientT:
        """Select the active client, reconfiguring it when the client settings changed.

        Publishes no events.

        Raises:
            NoClientRegisteredError: Empty pool or no default client.
        """
        if not self._clients:
            raise NoClientRegisteredError(self._config_key, f"No clients registered for '{self._config_key}'")

        configured_id = self._configuration.get(self._config_key)
        client = self.get_by_id(configured_id)

        if client is None:
            if configured_id:
                logger.warning(
                    "unknown_client_id",
                    config_key=self._config_key,
                    client_id=configured_id,
                    available=self.client_ids,
                )
            client = self._get_default_client()

        if client is None:
            raise NoClientRegisteredError(self._config_key)

        snapshot = self._client_settings()
        if self._applied.get(client.id) != snapshot:
            self._reconfigure(client, snapshot)

        logger.debug("client_resolved", config_key=self._config_key, client_id=client.id)
        return client

    async def get_client(self) -> ClientT:
        """Return the active client, reconfigured if its settings changed.

        Publishes ``runtime.client_changed`` when the resolved client differs
        from the one returned by the previous call.
        """
        client = self.resolve()
        await self._publish_if_changed(client)
        return client

    async def _publish_if_changed(self, client: ClientT) -> None:
        previous = self._last_client_id
        self._last_client_id = client.id
        if previous is None or previous == client.id:
            return

        logger.info(
            "client_changed",
            config_key=self._config_key,
            previous_client_id=previous,
            client_id=client.id,
        )
        await self._event_bus.publish(
            Event(
                event_type=CLIENT_CHANGED,
                source=self.event_source,
                payload={
                    "config_key": self._config_key,
                    "previous_client_id": previous,
                    "client_id": client.id,
                },
            )
        )

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def on_configuration_changed(self, keys: Iterable[str]) -> None:
        """Reconfigure every client when a client-related key changed."""
        changed = set(keys)
        if not changed.intersection(CLIENT_KEYS):
            return
        logger.debug("configuration_changed", config_key=self._config_key, keys=sorted(changed))
        snapshot = self._client_settings()
        for client in self._clients:
            self._reconfigure(client, snapshot)

    async def subscribe_client_changed(self, handler: ClientChangedHandler) -> str:
        """Subscribe to this manager's ``runtime.client_changed`` events."""
        source = self.event_source

        async def _filtered(event: Event) -> None:
            if event.source == source:
                await handler(event)

        return await self._event_bus.subscribe(CLIENT_CHANGED, _filtered)


class ContainerRuntimeManager(RuntimeManager[ContainerClient]):
    """Engine client manager; defaults to Docker."""

    DEFAULT_CLIENT_ID = DockerClient.DESCRIPTOR.id

    def __init__(
        self,
        configuration: Configuration,
        clients: Iterable[ContainerClient],
        *,
        event_bus: EventBus | None = None,
    ) -> None:
        super().__init__(CONTAINER_CLIENT_KEY, configuration, clients, event_bus=event_bus)
