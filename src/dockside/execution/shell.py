"""Platform shells used to spawn external commands.

Every process the core runs goes through the platform's default shell so
that command names resolve the same way they would for the user typing
them. A ``Shell`` knows how to quote a single token for itself and how to
join an already-quoted command line; it never escapes tokens that callers
have already prepared.
"""

from __future__ import annotations

import os
import re
from collections.abc import Sequence
from typing import Any

_POSIX_SAFE = re.compile(r"^[\w@%+=:,./-]+$")


class Shell:
    """Base shell.

    Attributes:
        name: Short shell name for logs
        executable: Explicit shell binary, ``None`` for the platform default
    """

    name = "shell"

    def __init__(self, executable: str | None = None) -> None:
        self.executable = executable

    def quote(self, arg: str) -> str:
        raise NotImplementedError

    def compose_command_line(self, command: str, args: Sequence[str]) -> str:
        """Join ``command`` and pre-quoted ``args`` with single spaces."""
        return " ".join([command, *(a for a in args if a != "")])

    def spawn_kwargs(self) -> dict[str, Any]:
        """Extra keyword arguments for ``asyncio.create_subprocess_shell``."""
        return {}

    @staticmethod
    def get_default() -> Shell:
        if os.name == "nt":
            return WindowsCmdShell()
        return PosixShell()

    @classmethod
    def get_shell_or_default(cls, shell: Shell | None = None) -> Shell:
        return shell if shell is not None else cls.get_default()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(executable={self.executable!r})"


class PosixShell(Shell):
    """``/bin/sh`` (or ``executable``) with single-quote quoting."""

    name = "sh"

    def quote(self, arg: str) -> str:
        if arg == "":
            return "''"
        if _POSIX_SAFE.match(arg):
            return arg
        return "'" + arg.replace("'", "'\"'\"'") + "'"

    def spawn_kwargs(self) -> dict[str, Any]:
        # own process group so a timeout kill reaches the shell's children
        kwargs: dict[str, Any] = {"start_new_session": True}
        if self.executable:
            kwargs["executable"] = self.executable
        return kwargs


class WindowsCmdShell(Shell):
    """``cmd.exe`` (via ``COMSPEC``) with double-quote quoting."""

    name = "cmd"

    def quote(self, arg: str) -> str:
        if arg == "":
            return '""'
        if not re.search(r'[\s"&|<>^()%!]', arg):
            return arg
        # backslashes before a quote must be doubled for the C runtime parser
        escaped = re.sub(r'(\\*)"', r'\1\1\\"', arg)
        escaped = re.sub(r"(\\+)$", r"\1\1", escaped)
        return f'"{escaped}"'
