"""
Root Typer application for the dockside CLI.

``exec`` and ``compose`` pass their arguments through to the active engine
or orchestrator, streaming output as it arrives.
"""

from __future__ import annotations

import typer
from typer import Typer

from dockside.cli.runtime import app as runtime_app
from dockside.cli.utils import make_provider, print_output, run_async
from dockside.core.config import DocksideSettings
from dockside.core.logging import configure_logging
from dockside.runtimes.provider import Capability

app = Typer(
    name="dockside",
    help="dockside — run Docker or Podman tooling through one configurable front door.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

_PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}


def _version_callback(value: bool) -> None:
    if value:
        from dockside import __version__

        typer.echo(f"dockside {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: str | None = typer.Option(None, "--log-level", help="Override DOCKSIDE_LOG_LEVEL."),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """dockside CLI — resolve the active container runtime and run its commands."""
    settings = DocksideSettings()
    configure_logging(
        level=log_level or settings.log_level,
        json_format=settings.log_format == "json",
        service="dockside-cli",
    )


@app.command("exec", context_settings=_PASSTHROUGH)
def exec_engine(
    args: list[str] = typer.Argument(..., help="Arguments for the active engine"),
    timeout: float | None = typer.Option(None, "--timeout", help="Kill the command after N seconds"),
) -> None:
    """Run the active container engine with ARGS."""
    provider = make_provider(timeout)
    run_async(provider.run(Capability.CONTAINER, lambda client: client.passthrough(args), on_output=print_output))


@app.command("compose", context_settings=_PASSTHROUGH)
def exec_compose(
    args: list[str] = typer.Argument(..., help="Arguments for the active compose tool"),
    timeout: float | None = typer.Option(None, "--timeout", help="Kill the command after N seconds"),
) -> None:
    """Run the active orchestrator with ARGS (``compose`` is prefixed for v2)."""
    provider = make_provider(timeout)
    run_async(provider.run(Capability.ORCHESTRATOR, lambda client: client.passthrough(args), on_output=print_output))


app.add_typer(runtime_app, name="runtime", help="Inspect and switch the container runtime.")
