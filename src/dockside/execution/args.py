"""Command-line argument builders.

Clients assemble their command lines from small builders instead of string
formatting, so that optional arguments disappear cleanly and values that
need quoting are quoted once, for the shell that will run them::

    args = compose_args(
        with_arg("compose"),
        with_named_arg("--file", "docker-compose.yml"),
        with_flag_arg("--detach", detached),
        with_arg("up"),
    )()
    # ['compose', '--file', 'docker-compose.yml', '--detach', 'up']

A builder is any callable taking the argument list built so far and
returning the extended list.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from dockside.execution.shell import Shell

CommandLineArgs = list[str]
ArgBuilder = Callable[[CommandLineArgs | None], CommandLineArgs]


def with_arg(*args: str | None) -> ArgBuilder:
    """Append each non-empty token verbatim."""

    def builder(cmd_args: CommandLineArgs | None = None) -> CommandLineArgs:
        result = list(cmd_args or [])
        result.extend(a for a in args if a)
        return result

    return builder


def with_quoted_arg(*args: str | None, shell: Shell | None = None) -> ArgBuilder:
    """Append each non-empty token quoted for ``shell`` (default: platform shell)."""
    sh = Shell.get_shell_or_default(shell)

    def builder(cmd_args: CommandLineArgs | None = None) -> CommandLineArgs:
        result = list(cmd_args or [])
        result.extend(sh.quote(a) for a in args if a is not None)
        return result

    return builder


def with_named_arg(
    name: str,
    values: str | Iterable[str] | None,
    *,
    should_quote: bool = True,
    assign_value: bool = False,
    shell: Shell | None = None,
) -> ArgBuilder:
    """Append ``name value`` (or ``name=value``) for every value.

    ``values`` may be a single string or an iterable; ``None`` appends
    nothing.
    """
    sh = Shell.get_shell_or_default(shell)
    if values is None:
        items: list[str] = []
    elif isinstance(values, str):
        items = [values]
    else:
        items = list(values)

    def builder(cmd_args: CommandLineArgs | None = None) -> CommandLineArgs:
        result = list(cmd_args or [])
        for value in items:
            rendered = sh.quote(value) if should_quote else value
            if assign_value:
                result.append(f"{name}={rendered}")
            else:
                result.extend([name, rendered])
        return result

    return builder


def with_flag_arg(name: str, value: bool | None) -> ArgBuilder:
    """Append ``name`` when ``value`` is true."""

    def builder(cmd_args: CommandLineArgs | None = None) -> CommandLineArgs:
        result = list(cmd_args or [])
        if value:
            result.append(name)
        return result

    return builder


def compose_args(*builders: ArgBuilder) -> ArgBuilder:
    """Chain builders left to right."""

    def builder(cmd_args: CommandLineArgs | None = None) -> CommandLineArgs:
        result = list(cmd_args or [])
        for b in builders:
            result = b(result)
        return result

    return builder
