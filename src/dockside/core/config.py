"""
Configuration for dockside.

Manifesto:
    The core never owns configuration. The surrounding application hands it a
    ``Configuration`` (a key -> string mapping that is read fresh on every
    client resolution) and tells the runtime managers when keys change.

Two implementations ship with the package:

- :class:`SettingsConfiguration` reads :class:`DocksideSettings` from the
  environment (``DOCKSIDE_*`` variables and ``.env``) on every ``get`` so
  that a changed environment is picked up by the next resolution.
- :class:`InMemoryConfiguration` is a plain dict, used by tests and by
  applications that already hold their own settings store.

Both support ``update(key, value)`` and change listeners, which is how the
runtime managers learn that they must reconfigure their clients.

Keys:
    ``container_client``      active engine client id (``docker`` / ``podman``)
    ``orchestrator_client``   active orchestrator client id
    ``container_command``     engine command-name override
    ``compose_command``       compose command override

Tags:
    dockside, configuration, settings, pydantic, environment

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Protocol, runtime_checkable

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dockside.core.logging import get_logger

logger = get_logger(__name__)

CONTAINER_CLIENT_KEY = "container_client"
ORCHESTRATOR_CLIENT_KEY = "orchestrator_client"
CONTAINER_COMMAND_KEY = "container_command"
COMPOSE_COMMAND_KEY = "compose_command"

CLIENT_KEYS = (
    CONTAINER_CLIENT_KEY,
    ORCHESTRATOR_CLIENT_KEY,
    CONTAINER_COMMAND_KEY,
    COMPOSE_COMMAND_KEY,
)

ConfigurationListener = Callable[[frozenset[str]], None]


class DocksideSettings(BaseSettings):
    """Dockside settings, read from ``DOCKSIDE_*`` environment variables.

    Empty strings are treated the same as unset for the client keys.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCKSIDE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Client selection ─────────────────────────────────────────
    container_client: str | None = Field(default=None, description="Active engine client id")
    orchestrator_client: str | None = Field(default=None, description="Active orchestrator client id")

    # ── Command overrides ────────────────────────────────────────
    container_command: str | None = Field(default=None, description="Engine command override")
    compose_command: str | None = Field(default=None, description="Compose command override")

    # ── Execution ────────────────────────────────────────────────
    default_timeout_seconds: float | None = Field(
        default=None,
        description="Timeout applied to client commands run with defaults",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="WARNING")
    log_format: str = Field(default="console")


@runtime_checkable
class Configuration(Protocol):
    """Key -> string configuration snapshot consumed by the core."""

    def get(self, key: str) -> str | None:
        """Return the current value for ``key`` or ``None`` if unset."""
        ...

    def update(self, key: str, value: str | None) -> None:
        """Set ``key`` (``None`` removes it) and notify listeners."""
        ...

    def add_listener(self, listener: ConfigurationListener) -> None:
        """Register a callback receiving the set of changed keys."""
        ...


class _ListenerMixin:
    def __init__(self) -> None:
        self._listeners: list[ConfigurationListener] = []

    def add_listener(self, listener: ConfigurationListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ConfigurationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, keys: Iterable[str]) -> None:
        changed = frozenset(keys)
        if not changed:
            return
        for listener in list(self._listeners):
            listener(changed)


class InMemoryConfiguration(_ListenerMixin):
    """Dict-backed configuration.

    Example::

        config = InMemoryConfiguration({"container_client": "podman"})
        config.get("container_client")   # 'podman'
        config.update("compose_command", "podman compose")
    """

    def __init__(self, values: Mapping[str, str | None] | None = None) -> None:
        super().__init__()
        self._values: dict[str, str] = {k: v for k, v in (values or {}).items() if v is not None}

    def get(self, key: str) -> str | None:
        return self._values.get(key) or None

    def update(self, key: str, value: str | None) -> None:
        old = self._values.get(key)
        if value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = value
        if old != value:
            logger.debug("configuration_updated", key=key, value=value)
            self._notify([key])

    def snapshot(self) -> dict[str, str]:
        """Copy of the current values."""
        return dict(self._values)


class SettingsConfiguration(_ListenerMixin):
    """Configuration backed by :class:`DocksideSettings`.

    Settings are re-read from the environment on every ``get``. Values set
    through ``update`` take precedence over the environment for the life of
    this object.
    """

    def __init__(self, settings_factory: Callable[[], DocksideSettings] = DocksideSettings) -> None:
        super().__init__()
        self._settings_factory = settings_factory
        self._overrides: dict[str, str | None] = {}

    @property
    def settings(self) -> DocksideSettings:
        return self._settings_factory()

    def get(self, key: str) -> str | None:
        if key in self._overrides:
            return self._overrides[key] or None
        value = getattr(self.settings, key, None)
        if value is None or value == "":
            return None
        return str(value)

    def update(self, key: str, value: str | None) -> None:
        old = self.get(key)
        self._overrides[key] = value
        if old != (value or None):
            logger.debug("configuration_updated", key=key, value=value)
            self._notify([key])


__all__ = [
    "CONTAINER_CLIENT_KEY",
    "ORCHESTRATOR_CLIENT_KEY",
    "CONTAINER_COMMAND_KEY",
    "COMPOSE_COMMAND_KEY",
    "CLIENT_KEYS",
    "Configuration",
    "ConfigurationListener",
    "DocksideSettings",
    "InMemoryConfiguration",
    "SettingsConfiguration",
]
