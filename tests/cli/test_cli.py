"""Tests for the dockside Typer CLI."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from dockside import __version__
from dockside.cli import app as app_module
from dockside.cli.app import app
from dockside.cli.utils import write_env_file
from dockside.core.config import InMemoryConfiguration
from dockside.execution.runner import CommandRunner
from dockside.runtimes.provider import RuntimeProvider
from tests._support.fakes import FakeExecutor, failed

cli = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    for name in (
        "CONTAINER_CLIENT",
        "ORCHESTRATOR_CLIENT",
        "CONTAINER_COMMAND",
        "COMPOSE_COMMAND",
        "DEFAULT_TIMEOUT_SECONDS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(f"DOCKSIDE_{name}", raising=False)
    monkeypatch.chdir(tmp_path)


def _fake_provider(monkeypatch, executor: FakeExecutor, values=None) -> None:
    configuration = InMemoryConfiguration(values)

    def make_provider(timeout=None):
        return RuntimeProvider.create(configuration, runner=CommandRunner(executor, default_timeout=timeout))

    monkeypatch.setattr(app_module, "make_provider", make_provider)


class TestRootCommands:
    def test_version(self):
        result = cli.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_exec_passes_arguments_through(self, monkeypatch):
        executor = FakeExecutor({"podman ps --all": "CONTAINER ID"})
        _fake_provider(monkeypatch, executor, {"container_client": "podman"})

        result = cli.invoke(app, ["exec", "ps", "--all"])

        assert result.exit_code == 0
        assert executor.calls == ["podman ps --all"]
        assert "CONTAINER ID" in result.output

    def test_exec_timeout_option(self, monkeypatch):
        executor = FakeExecutor()
        _fake_provider(monkeypatch, executor)

        result = cli.invoke(app, ["exec", "--timeout", "3", "info"])

        assert result.exit_code == 0
        assert executor.options[0].timeout == 3

    def test_exec_failure_exit_code(self, monkeypatch):
        executor = FakeExecutor({"docker nope": failed(4, "unknown command")})
        _fake_provider(monkeypatch, executor)

        result = cli.invoke(app, ["exec", "nope"])

        assert result.exit_code == 4

    def test_compose_uses_override(self, monkeypatch):
        executor = FakeExecutor()
        _fake_provider(monkeypatch, executor, {"compose_command": "docker compose"})

        result = cli.invoke(app, ["compose", "ls"])

        assert result.exit_code == 0
        assert executor.calls == ["docker compose ls"]


class TestRuntimeCommands:
    def test_list(self):
        result = cli.invoke(app, ["runtime", "list"])
        assert result.exit_code == 0
        assert "docker" in result.output
        assert "podman" in result.output

    def test_use_writes_env_file(self, tmp_path):
        env_file = tmp_path / "settings.env"
        env_file.write_text("OTHER=1\nDOCKSIDE_CONTAINER_CLIENT=docker\n", encoding="utf-8")

        result = cli.invoke(app, ["runtime", "use", "podman", "--env-file", str(env_file)])

        assert result.exit_code == 0
        lines = env_file.read_text(encoding="utf-8").splitlines()
        assert lines == [
            "OTHER=1",
            "DOCKSIDE_CONTAINER_CLIENT=podman",
            "DOCKSIDE_ORCHESTRATOR_CLIENT=podman-compose",
        ]

    def test_use_unchanged(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DOCKSIDE_CONTAINER_CLIENT", "podman")
        monkeypatch.setenv("DOCKSIDE_ORCHESTRATOR_CLIENT", "podman-compose")
        env_file = tmp_path / "unused.env"

        result = cli.invoke(app, ["runtime", "use", "podman", "--env-file", str(env_file)])

        assert result.exit_code == 0
        assert "already" in result.output
        assert not env_file.exists()

    def test_use_unknown_runtime(self):
        result = cli.invoke(app, ["runtime", "use", "rancher"])
        assert result.exit_code == 2

    def test_show_without_probe(self, monkeypatch):
        monkeypatch.setenv("DOCKSIDE_CONTAINER_CLIENT", "podman")

        result = cli.invoke(app, ["runtime", "show", "--no-probe"])

        assert result.exit_code == 0
        assert "Podman" in result.output
        assert "Docker Compose" in result.output


class TestWriteEnvFile:
    def test_creates_file(self, tmp_path):
        path = tmp_path / ".env"
        write_env_file(path, {"A": "1"})
        assert path.read_text(encoding="utf-8") == "A=1\n"
