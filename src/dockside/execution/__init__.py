"""Process execution: shells, argument builders, the executor and the invocation runner."""

from dockside.execution.process import ExecResult, ProcessOptions, buffer_to_string, execute
from dockside.execution.runner import CommandRunner, ProcessInvocation, run_invocation

__all__ = [
    "CommandRunner",
    "ExecResult",
    "ProcessInvocation",
    "ProcessOptions",
    "buffer_to_string",
    "execute",
    "run_invocation",
]
