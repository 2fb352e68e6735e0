"""Process executor — runs one external command and collects its output.

Architecture:

    .. code-block:: text

        execute(command, args, options, on_output)
          │
          ├── compose command line (shell.compose_command_line)
          ├── options.on_command(command_line)          fired once
          ├── asyncio.create_subprocess_shell(...)      platform shell
          │
          ├── stdout pipe ──chunk──▶ on_output(text, False) ──▶ stdout buffer
          ├── stderr pipe ──chunk──▶ on_output(text, True)  ──▶ stderr buffer
          │        (tap first, then accumulate; tap errors are swallowed)
          │
          ├── wait (bounded by options.timeout) ──▶ kill on timeout
          │
          └── exit 0   → ExecResult(stdout, stderr)
              exit ≠ 0 → ProcessError(exit_code, signal, stderr_handled)
              timeout  → ProcessTimeoutError

Progress delivery is best-effort by policy: whatever ``on_output`` does,
including raising, the buffered ``ExecResult`` still holds the complete
streams. The executor never retries; retrying is the caller's decision.

Example:
    >>> result = await execute("echo", ["hi"])
    >>> result.stdout
    'hi'

Tags:
    dockside, execution, subprocess, asyncio, streaming, timeout

Doc-Types:
    api-reference
"""

from __future__ import annotations

import asyncio
import codecs
import os
import re
import signal as signal_module
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

from dockside.core.errors import ErrorContext, ProcessError, ProcessTimeoutError
from dockside.core.logging import get_logger
from dockside.execution.shell import PosixShell, Shell

logger = get_logger(__name__)

OutputCallback = Callable[[str, bool], None]

_READ_CHUNK_SIZE = 64 * 1024
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")
_TRAILING_NEWLINE = re.compile(r"\r?\n\Z")


@dataclass(frozen=True)
class ExecResult:
    """Fully buffered output of a finished process."""

    stdout: str
    stderr: str


@dataclass(frozen=True)
class ProcessOptions:
    """Options for a single ``execute`` call.

    Attributes:
        timeout: Seconds before the process is killed; ``None`` waits forever
        cwd: Working directory for the process
        env: Variables overlaid on the current environment
        on_command: Called once with the composed command line before spawning
        shell: Shell to spawn through; ``None`` uses the platform default
    """

    timeout: float | None = None
    cwd: str | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    on_command: Callable[[str], None] | None = None
    shell: Shell | None = None


def _clean_text(text: str) -> str:
    text = _CONTROL_CHARS.sub("", text)
    return _TRAILING_NEWLINE.sub("", text, count=1)


def buffer_to_string(buffer: bytes) -> str:
    """Decode a chunk, drop non-printing control characters and one trailing newline.

    Tabs, newlines and carriage returns are kept.
    """
    return _clean_text(buffer.decode("utf-8", errors="replace"))


def _final_string(buffer: bytes | bytearray) -> str:
    return _TRAILING_NEWLINE.sub("", bytes(buffer).decode("utf-8", errors="replace"), count=1)


async def _pump(
    stream: asyncio.StreamReader | None,
    sink: bytearray,
    is_stderr: bool,
    on_output: OutputCallback | None,
) -> None:
    if stream is None:
        return
    # one decoder per stream, so a character split across two reads is tapped whole
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        chunk = await stream.read(_READ_CHUNK_SIZE)
        if on_output is not None:
            text = decoder.decode(chunk, final=not chunk)
            if text:
                try:
                    on_output(_clean_text(text), is_stderr)
                except Exception as exc:
                    logger.debug("output_callback_error", error=str(exc), stderr=is_stderr)
        if not chunk:
            return
        sink.extend(chunk)


def _kill(process: asyncio.subprocess.Process, shell: Shell) -> None:
    if process.returncode is not None:
        return
    try:
        if isinstance(shell, PosixShell):
            os.killpg(process.pid, signal_module.SIGKILL)
        else:
            process.kill()
    except ProcessLookupError:
        pass


async def execute(
    command: str,
    args: Sequence[str] = (),
    options: ProcessOptions | None = None,
    on_output: OutputCallback | None = None,
) -> ExecResult:
    """Run ``command`` with ``args`` through the platform shell.

    Args:
        command: Executable name, resolved by the shell.
        args: Already-quoted argument tokens; joined verbatim.
        options: Timeout, cwd, env overlay, ``on_command`` hook, shell.
        on_output: Optional progress tap receiving ``(text, is_stderr)`` per chunk.

    Returns:
        ExecResult with complete stdout/stderr (one trailing newline removed).

    Raises:
        ProcessError: Non-zero exit or killed by a signal.
        ProcessTimeoutError: ``options.timeout`` elapsed; the process was killed.
    """
    if not command:
        raise ValueError("command must be a non-empty string")

    options = options or ProcessOptions()
    shell = Shell.get_shell_or_default(options.shell)
    command_line = shell.compose_command_line(command, args)

    if options.on_command is not None:
        options.on_command(command_line)

    env = {**os.environ, **options.env} if options.env else None

    logger.debug("process_spawn", command_line=command_line, shell=shell.name, timeout=options.timeout)

    process = await asyncio.create_subprocess_shell(
        command_line,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=options.cwd,
        env=env,
        **shell.spawn_kwargs(),
    )

    stdout_buf = bytearray()
    stderr_buf = bytearray()

    async def _communicate() -> int:
        await asyncio.gather(
            _pump(process.stdout, stdout_buf, False, on_output),
            _pump(process.stderr, stderr_buf, True, on_output),
        )
        return await process.wait()

    try:
        returncode = await asyncio.wait_for(_communicate(), timeout=options.timeout)
    except TimeoutError:
        _kill(process, shell)
        await process.wait()
        logger.warning("process_timeout", command_line=command_line, timeout=options.timeout)
        raise ProcessTimeoutError(
            f"Process exceeded timeout of {options.timeout}s: {command_line}",
            timeout=options.timeout or 0.0,
            exit_code=process.returncode if process.returncode and process.returncode > 0 else None,
            signal=int(signal_module.SIGKILL),
            stderr_handled=on_output is not None,
            stdout=_final_string(stdout_buf),
            stderr=_final_string(stderr_buf),
            context=ErrorContext(command_line=command_line),
        ) from None
    except asyncio.CancelledError:
        _kill(process, shell)
        raise

    result = ExecResult(stdout=_final_string(stdout_buf), stderr=_final_string(stderr_buf))

    if returncode != 0:
        exit_code: int | None = returncode
        signal_number: int | None = None
        if returncode < 0:
            exit_code, signal_number = None, -returncode
        logger.debug(
            "process_failed",
            command_line=command_line,
            exit_code=exit_code,
            signal=signal_number,
        )
        detail = f"signal {signal_number}" if signal_number is not None else f"exit code {exit_code}"
        raise ProcessError(
            f"Process '{command_line}' failed with {detail}",
            exit_code=exit_code,
            signal=signal_number,
            stderr_handled=on_output is not None,
            stdout=result.stdout,
            stderr=result.stderr,
            context=ErrorContext(command_line=command_line),
        )

    logger.debug("process_exited", command_line=command_line, exit_code=returncode)
    return result


__all__ = [
    "ExecResult",
    "OutputCallback",
    "ProcessOptions",
    "buffer_to_string",
    "execute",
]
