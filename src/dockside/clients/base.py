"""Shared client plumbing: identity, command name and invocation building."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from typing import Any, ClassVar, TypeVar

from dockside.clients._types import ClientDescriptor
from dockside.execution.args import with_quoted_arg
from dockside.execution.process import ExecResult
from dockside.execution.runner import CommandRunner, ProcessInvocation

T = TypeVar("T")


class BaseClient:
    """Base for engine and orchestrator clients.

    Subclasses set ``DESCRIPTOR``. The ``runner`` is only needed by clients
    that run commands on their own behalf (the compose version probe);
    everything else just returns ``ProcessInvocation`` objects for the
    caller to run.
    """

    DESCRIPTOR: ClassVar[ClientDescriptor]

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self._runner = runner or CommandRunner()

    @property
    def id(self) -> str:
        return self.DESCRIPTOR.id

    @property
    def display_name(self) -> str:
        return self.DESCRIPTOR.display_name

    @property
    def description(self) -> str:
        return self.DESCRIPTOR.description

    @property
    def runner(self) -> CommandRunner:
        return self._runner

    @property
    def command_name(self) -> str:
        raise NotImplementedError

    def _invocation(
        self,
        args: list[str],
        parse: Callable[[ExecResult], T] | None = None,
        *,
        command: str | None = None,
    ) -> ProcessInvocation[T]:
        return ProcessInvocation(command=command or self.command_name, args=tuple(args), parse=parse)

    def passthrough(self, args: Sequence[str]) -> ProcessInvocation[ExecResult]:
        """Run the client's command with arbitrary (unquoted) arguments."""
        return self._invocation(with_quoted_arg(*args)())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, command_name={self.command_name!r})"


# ---------------------------------------------------------------------------
# Output parsers
# ---------------------------------------------------------------------------

def parse_stdout(result: ExecResult) -> str:
    return result.stdout.strip()


def parse_json_object(result: ExecResult) -> dict[str, Any]:
    text = result.stdout.strip()
    return json.loads(text) if text else {}


def parse_json_records(result: ExecResult) -> list[dict[str, Any]]:
    """Parse either a JSON array or one JSON object per line.

    Docker prints ``{{json .}}`` output one object per line; Podman's
    ``--format json`` prints a single array.
    """
    text = result.stdout.strip()
    if not text:
        return []
    if text.startswith("["):
        return list(json.loads(text))
    return [json.loads(line) for line in text.splitlines() if line.strip()]


def parse_lines(result: ExecResult) -> list[str]:
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]
