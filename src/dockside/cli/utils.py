"""
CLI utility helpers — provider construction, error rendering, .env persistence.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine, Mapping
from pathlib import Path
from typing import Any, TypeVar

import typer
from rich.console import Console

from dockside.core.config import SettingsConfiguration
from dockside.core.errors import ConfigurationError, ProcessError
from dockside.execution.runner import CommandRunner
from dockside.runtimes.provider import RuntimeProvider

T = TypeVar("T")

console = Console()
err_console = Console(stderr=True)


def make_provider(timeout: float | None = None) -> RuntimeProvider:
    """Provider over environment/.env settings."""
    configuration = SettingsConfiguration()
    default_timeout = timeout if timeout is not None else configuration.settings.default_timeout_seconds
    return RuntimeProvider.create(configuration, runner=CommandRunner(default_timeout=default_timeout))


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` and turn core errors into exit codes."""
    try:
        return asyncio.run(coro)
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration Error:[/red] {e.message}")
        raise typer.Exit(code=2) from e
    except ProcessError as e:
        if e.stderr and not e.stderr_handled:
            err_console.print(e.stderr, markup=False, highlight=False)
        err_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(code=e.exit_code or 1) from e


def print_output(text: str, is_stderr: bool) -> None:
    """Progress callback writing process output through to the terminal."""
    target = err_console if is_stderr else console
    target.print(text, markup=False, highlight=False)


def write_env_file(path: Path, updates: Mapping[str, str]) -> None:
    """Set ``KEY=value`` lines in a .env file, keeping unrelated lines."""
    lines = path.read_text(encoding="utf-8").splitlines() if path.exists() else []
    remaining = dict(updates)
    result: list[str] = []
    for line in lines:
        key = line.split("=", 1)[0].strip()
        if key in remaining:
            result.append(f"{key}={remaining.pop(key)}")
        else:
            result.append(line)
    result.extend(f"{key}={value}" for key, value in remaining.items())
    path.write_text("\n".join(result) + "\n", encoding="utf-8")
