"""
CLI: ``dockside runtime`` — inspect and switch the active container runtime.
"""

from __future__ import annotations

from pathlib import Path

import typer

from dockside.cli.utils import console, make_provider, run_async, write_env_file
from dockside.core.config import (
    CLIENT_KEYS,
    CONTAINER_CLIENT_KEY,
    ORCHESTRATOR_CLIENT_KEY,
    InMemoryConfiguration,
    SettingsConfiguration,
)
from dockside.runtimes.provider import RUNTIME_PAIRS, Capability, choose_container_runtime

app = typer.Typer(no_args_is_help=True)


@app.command("show")
def show_runtime(
    probe: bool = typer.Option(True, "--probe/--no-probe", help="Detect compose v2 support"),
) -> None:
    """Show the active engine and orchestrator clients."""
    from rich.table import Table

    provider = make_provider()

    async def _resolve():
        engine = await provider.resolve_client(Capability.CONTAINER)
        if probe:
            orchestrator = await provider.resolve_client(Capability.ORCHESTRATOR)
        else:
            orchestrator = provider.orchestrator_manager.resolve()
        return engine, orchestrator

    engine, orchestrator = run_async(_resolve())

    table = Table()
    table.add_column("Capability")
    table.add_column("Client")
    table.add_column("Command")
    table.add_column("Compose v2")
    table.add_row("container", engine.display_name, engine.command_name, "-")
    table.add_row(
        "orchestrator",
        orchestrator.display_name,
        orchestrator.command_name,
        str(getattr(orchestrator, "compose_v2", "-")) if probe else "?",
    )
    console.print(table)


@app.command("list")
def list_runtimes() -> None:
    """List the runtimes that can be selected with ``runtime use``."""
    for name, pair in RUNTIME_PAIRS.items():
        console.print(f"[bold]{name}[/bold]: {pair.container.display_name} + {pair.orchestrator.display_name}")


@app.command("use")
def use_runtime(
    runtime: str = typer.Argument(..., help="Runtime name: docker or podman"),
    env_file: Path = typer.Option(Path(".env"), "--env-file", help=".env file to persist the choice to"),
) -> None:
    """Switch engine and orchestrator clients together."""
    settings = SettingsConfiguration()
    configuration = InMemoryConfiguration({key: settings.get(key) for key in CLIENT_KEYS})

    try:
        changed = choose_container_runtime(configuration, runtime)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        raise typer.Exit(code=2) from e

    if not changed:
        console.print(f"Container runtime is already {runtime}")
        return

    write_env_file(
        env_file,
        {
            f"DOCKSIDE_{CONTAINER_CLIENT_KEY.upper()}": configuration.get(CONTAINER_CLIENT_KEY) or "",
            f"DOCKSIDE_{ORCHESTRATOR_CLIENT_KEY.upper()}": configuration.get(ORCHESTRATOR_CLIENT_KEY) or "",
        },
    )
    console.print(f"[green]Container runtime changed to {runtime}[/green] ({env_file})")
