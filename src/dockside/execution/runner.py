"""Running client invocations.

Clients never spawn processes themselves. Each client operation returns a
``ProcessInvocation`` (the command, its arguments and an optional parser for
the output) and a ``CommandRunner`` turns it into an ``execute`` call with
the application's defaults applied.

The runner is owned by the application and passed to the clients that need
it; there is no module-level default runner.

Example::

    runner = CommandRunner(default_timeout=30)
    version = await runner.run_with_defaults(lambda: client.version())
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, Generic, Protocol, TypeVar

from dockside.core.logging import get_logger
from dockside.execution.process import ExecResult, OutputCallback, ProcessOptions, execute

logger = get_logger(__name__)

T = TypeVar("T")


class Executor(Protocol):
    """Anything with the signature of :func:`dockside.execution.process.execute`."""

    def __call__(
        self,
        command: str,
        args: Sequence[str] = (),
        options: ProcessOptions | None = None,
        on_output: OutputCallback | None = None,
    ) -> Awaitable[ExecResult]: ...


@dataclass(frozen=True)
class ProcessInvocation(Generic[T]):
    """One command a client wants run.

    Attributes:
        command: Executable name (e.g. ``docker``, ``podman-compose``)
        args: Already-quoted argument tokens
        parse: Turns the buffered result into the operation's return value;
            ``None`` returns the ``ExecResult`` itself
    """

    command: str
    args: tuple[str, ...] = ()
    parse: Callable[[ExecResult], T] | None = field(default=None, compare=False)

    @property
    def command_line(self) -> str:
        return " ".join([self.command, *self.args])


class CommandRunner:
    """Executes invocations with shared defaults.

    Args:
        executor: Process executor (defaults to :func:`execute`)
        default_timeout: Timeout applied when the caller passes none
        default_options: Base options; per-call options win field by field
    """

    def __init__(
        self,
        executor: Executor | None = None,
        *,
        default_timeout: float | None = None,
        default_options: ProcessOptions | None = None,
    ) -> None:
        self._executor: Executor = executor or execute
        self.default_timeout = default_timeout
        self.default_options = default_options or ProcessOptions()

    def _effective_options(self, options: ProcessOptions | None) -> ProcessOptions:
        opts = options or self.default_options
        if opts.timeout is None and self.default_timeout is not None:
            opts = replace(opts, timeout=self.default_timeout)
        return opts

    async def run(
        self,
        invocation: ProcessInvocation[T],
        *,
        options: ProcessOptions | None = None,
        on_output: OutputCallback | None = None,
    ) -> Any:
        """Run ``invocation`` and return its parsed result."""
        result = await self._executor(
            invocation.command,
            list(invocation.args),
            self._effective_options(options),
            on_output,
        )
        if invocation.parse is None:
            return result
        return invocation.parse(result)

    async def run_with_defaults(
        self,
        factory: Callable[[], ProcessInvocation[T]],
        *,
        on_output: OutputCallback | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Build the invocation with ``factory`` and run it with default options.

        ``timeout`` replaces the default timeout for this call only.
        """
        invocation = factory()
        options = None
        if timeout is not None:
            options = replace(self.default_options, timeout=timeout)
        logger.debug("run_with_defaults", command_line=invocation.command_line, timeout=timeout)
        return await self.run(invocation, options=options, on_output=on_output)


async def run_invocation(
    invocation: ProcessInvocation[T],
    *,
    options: ProcessOptions | None = None,
    on_output: OutputCallback | None = None,
) -> Any:
    """Run ``invocation`` with the real executor and no defaults."""
    return await CommandRunner().run(invocation, options=options, on_output=on_output)


__all__ = [
    "CommandRunner",
    "Executor",
    "ProcessInvocation",
    "run_invocation",
]
