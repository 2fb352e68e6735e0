"""Orchestrator clients — compose-file driven commands.

A compose client runs either the integrated subcommand (``docker compose
...``, ``compose_v2=True``) or a standalone legacy binary
(``docker-compose ...``). Which one is decided by the client's current
``ComposeConfig``, held as a single immutable value and replaced as a
whole, so a reader never sees a command name from one configuration paired
with the v2 flag of another.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import ClassVar, TypeVar

from dockside.clients._types import ClientDescriptor, ComposeConfig
from dockside.clients.base import BaseClient, parse_lines, parse_stdout
from dockside.execution.args import (
    ArgBuilder,
    compose_args,
    with_arg,
    with_flag_arg,
    with_named_arg,
    with_quoted_arg,
)
from dockside.execution.process import ExecResult
from dockside.execution.runner import CommandRunner, ProcessInvocation

T = TypeVar("T")


class ComposeClient(BaseClient):
    """Compose client for one engine.

    Class attributes:
        ENGINE_NAME: Engine command providing the v2 subcommand
        LEGACY_COMMAND: Standalone compose binary
    """

    ENGINE_NAME: ClassVar[str]
    LEGACY_COMMAND: ClassVar[str]

    def __init__(self, runner: CommandRunner | None = None, config: ComposeConfig | None = None) -> None:
        super().__init__(runner)
        self._config = config or ComposeConfig(command_name=self.ENGINE_NAME, compose_v2=True)

    @property
    def compose_config(self) -> ComposeConfig:
        return self._config

    @property
    def command_name(self) -> str:
        return self._config.command_name

    @property
    def compose_v2(self) -> bool:
        return self._config.compose_v2

    def apply_config(self, config: ComposeConfig) -> None:
        self._config = config

    # ------------------------------------------------------------------
    # Invocation helpers
    # ------------------------------------------------------------------

    def _compose_invocation(
        self,
        *builders: ArgBuilder,
        files: Sequence[str] | None = None,
        project_name: str | None = None,
        parse: Callable[[ExecResult], T] | None = None,
    ) -> ProcessInvocation[T]:
        config = self._config
        args = compose_args(
            with_arg("compose" if config.compose_v2 else None),
            with_named_arg("--file", list(files or [])),
            with_named_arg("--project-name", project_name),
            *builders,
        )()
        return self._invocation(args, parse, command=config.command_name)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def passthrough(self, args: Sequence[str]) -> ProcessInvocation[ExecResult]:
        """Arbitrary compose arguments, behind ``compose`` for v2."""
        return self._compose_invocation(with_quoted_arg(*args))

    def check_orchestrator_install(self, compose_v2: bool | None = None) -> ProcessInvocation[str]:
        """``version`` for the requested flavour (default: the current one)."""
        use_v2 = self._config.compose_v2 if compose_v2 is None else compose_v2
        if use_v2:
            return self._invocation(["compose", "version"], parse_stdout, command=self.ENGINE_NAME)
        legacy = self._config.command_name if not self._config.compose_v2 else self.LEGACY_COMMAND
        return self._invocation(["version"], parse_stdout, command=legacy)

    def up(
        self,
        *,
        files: Sequence[str] | None = None,
        project_name: str | None = None,
        services: Sequence[str] = (),
        detached: bool = True,
        build: bool = False,
        remove_orphans: bool = False,
    ) -> ProcessInvocation[ExecResult]:
        return self._compose_invocation(
            with_arg("up"),
            with_flag_arg("--detach", detached),
            with_flag_arg("--build", build),
            with_flag_arg("--remove-orphans", remove_orphans),
            with_quoted_arg(*services),
            files=files,
            project_name=project_name,
        )

    def down(
        self,
        *,
        files: Sequence[str] | None = None,
        project_name: str | None = None,
        remove_volumes: bool = False,
        remove_orphans: bool = False,
    ) -> ProcessInvocation[ExecResult]:
        return self._compose_invocation(
            with_arg("down"),
            with_flag_arg("--volumes", remove_volumes),
            with_flag_arg("--remove-orphans", remove_orphans),
            files=files,
            project_name=project_name,
        )

    def ps(
        self,
        *,
        files: Sequence[str] | None = None,
        project_name: str | None = None,
        all: bool = False,
    ) -> ProcessInvocation[ExecResult]:
        return self._compose_invocation(
            with_arg("ps"),
            with_flag_arg("--all", all),
            files=files,
            project_name=project_name,
        )

    def logs(
        self,
        *,
        files: Sequence[str] | None = None,
        project_name: str | None = None,
        services: Sequence[str] = (),
        follow: bool = False,
        tail: int | None = None,
    ) -> ProcessInvocation[ExecResult]:
        return self._compose_invocation(
            with_arg("logs"),
            with_flag_arg("--follow", follow),
            with_named_arg("--tail", str(tail) if tail is not None else None, should_quote=False),
            with_quoted_arg(*services),
            files=files,
            project_name=project_name,
        )

    def config_services(
        self,
        *,
        files: Sequence[str] | None = None,
        project_name: str | None = None,
    ) -> ProcessInvocation[list[str]]:
        """Service names declared by the compose files."""
        return self._compose_invocation(
            with_arg("config", "--services"),
            files=files,
            project_name=project_name,
            parse=parse_lines,
        )


class DockerComposeClient(ComposeClient):
    DESCRIPTOR = ClientDescriptor(
        id="docker-compose",
        display_name="Docker Compose",
        description="Runs orchestrator commands using the Docker Compose CLI",
    )
    ENGINE_NAME = "docker"
    LEGACY_COMMAND = "docker-compose"


class PodmanComposeClient(ComposeClient):
    DESCRIPTOR = ClientDescriptor(
        id="podman-compose",
        display_name="Podman Compose",
        description="Runs orchestrator commands using the Podman Compose CLI",
    )
    ENGINE_NAME = "podman"
    LEGACY_COMMAND = "podman-compose"
