"""Engine clients — single-container commands for Docker and Podman.

Both engines share the Docker CLI grammar for everything the core needs,
so ``ContainerEngineClient`` builds the invocations and the concrete
classes only contribute their identity and default command name.

.. code-block:: text

    ContainerEngineClient
    ├── check_install()        <cmd> --version
    ├── version()              <cmd> version --format '{{json .}}'
    ├── info()                 <cmd> info --format '{{json .}}'
    ├── list_containers()      <cmd> container ls --no-trunc --format ...
    ├── inspect_containers()   <cmd> container inspect --format ... <refs>
    ├── run_container()        <cmd> container run ... <image> [command]
    ├── remove_containers()    <cmd> container rm [--force] <refs>
    └── build_image()          <cmd> image build ... <context>
          │
    ┌─────┴─────┐
    DockerClient  PodmanClient

Every method returns a ``ProcessInvocation``; nothing runs until the
caller hands it to a ``CommandRunner``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

from dockside.clients._types import ClientDescriptor
from dockside.clients.base import (
    BaseClient,
    parse_json_object,
    parse_json_records,
    parse_lines,
    parse_stdout,
)
from dockside.execution.args import (
    compose_args,
    with_arg,
    with_flag_arg,
    with_named_arg,
    with_quoted_arg,
)
from dockside.execution.process import ExecResult
from dockside.execution.runner import CommandRunner, ProcessInvocation

_JSON_FORMAT = "{{json .}}"


@dataclass(frozen=True)
class EngineVersion:
    """Client and server versions reported by ``<engine> version``."""

    client: str | None
    server: str | None


def _parse_version(result: ExecResult) -> EngineVersion:
    data = parse_json_object(result)
    client = data.get("Client") or {}
    server = data.get("Server") or {}
    return EngineVersion(client=client.get("Version"), server=(server or {}).get("Version"))


def _last_line(result: ExecResult) -> str:
    lines = parse_lines(result)
    return lines[-1] if lines else ""


class ContainerEngineClient(BaseClient):
    """Engine client with a fixed or overridden command name."""

    DEFAULT_COMMAND: ClassVar[str]

    def __init__(self, runner: CommandRunner | None = None, command_name: str | None = None) -> None:
        super().__init__(runner)
        self._command_name = command_name or self.DEFAULT_COMMAND

    @property
    def command_name(self) -> str:
        return self._command_name

    # ------------------------------------------------------------------
    # Install / system
    # ------------------------------------------------------------------

    def check_install(self) -> ProcessInvocation[str]:
        return self._invocation(["--version"], parse_stdout)

    def version(self) -> ProcessInvocation[EngineVersion]:
        args = compose_args(with_arg("version"), with_named_arg("--format", _JSON_FORMAT))()
        return self._invocation(args, _parse_version)

    def info(self) -> ProcessInvocation[dict[str, Any]]:
        args = compose_args(with_arg("info"), with_named_arg("--format", _JSON_FORMAT))()
        return self._invocation(args, parse_json_object)

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    def list_containers(self, *, all: bool = False) -> ProcessInvocation[list[dict[str, Any]]]:
        args = compose_args(
            with_arg("container", "ls"),
            with_flag_arg("--all", all),
            with_arg("--no-trunc"),
            with_named_arg("--format", _JSON_FORMAT),
        )()
        return self._invocation(args, parse_json_records)

    def inspect_containers(self, refs: Sequence[str]) -> ProcessInvocation[list[dict[str, Any]]]:
        if not refs:
            raise ValueError("at least one container reference is required")
        args = compose_args(
            with_arg("container", "inspect"),
            with_named_arg("--format", _JSON_FORMAT),
            with_quoted_arg(*refs),
        )()
        return self._invocation(args, parse_json_records)

    def run_container(
        self,
        image: str,
        *,
        name: str | None = None,
        detached: bool = True,
        remove: bool = False,
        ports: Mapping[int, int] | None = None,
        env: Mapping[str, str] | None = None,
        labels: Mapping[str, str] | None = None,
        command: Sequence[str] = (),
    ) -> ProcessInvocation[str]:
        """``container run``; the parsed result is the last stdout line (the id when detached)."""
        args = compose_args(
            with_arg("container", "run"),
            with_flag_arg("--detach", detached),
            with_flag_arg("--rm", remove),
            with_named_arg("--name", name),
            with_named_arg("--publish", [f"{host}:{ctr}" for host, ctr in (ports or {}).items()]),
            with_named_arg("--env", [f"{k}={v}" for k, v in (env or {}).items()]),
            with_named_arg("--label", [f"{k}={v}" for k, v in (labels or {}).items()]),
            with_quoted_arg(image),
            with_quoted_arg(*command),
        )()
        return self._invocation(args, _last_line)

    def remove_containers(self, refs: Sequence[str], *, force: bool = False) -> ProcessInvocation[list[str]]:
        if not refs:
            raise ValueError("at least one container reference is required")
        args = compose_args(
            with_arg("container", "rm"),
            with_flag_arg("--force", force),
            with_quoted_arg(*refs),
        )()
        return self._invocation(args, parse_lines)

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def build_image(
        self,
        context_path: str,
        *,
        tag: str | None = None,
        dockerfile: str | None = None,
        build_args: Mapping[str, str] | None = None,
        pull: bool = False,
    ) -> ProcessInvocation[ExecResult]:
        args = compose_args(
            with_arg("image", "build"),
            with_named_arg("--tag", tag),
            with_named_arg("--file", dockerfile),
            with_named_arg("--build-arg", [f"{k}={v}" for k, v in (build_args or {}).items()]),
            with_flag_arg("--pull", pull),
            with_quoted_arg(context_path),
        )()
        return self._invocation(args)


class DockerClient(ContainerEngineClient):
    DESCRIPTOR = ClientDescriptor(
        id="docker",
        display_name="Docker",
        description="Runs container commands using the Docker CLI",
    )
    DEFAULT_COMMAND = "docker"


class PodmanClient(ContainerEngineClient):
    DESCRIPTOR = ClientDescriptor(
        id="podman",
        display_name="Podman",
        description="Runs container commands using the Podman CLI",
    )
    DEFAULT_COMMAND = "podman"
