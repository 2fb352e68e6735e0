"""Tests for CommandRunner and ProcessInvocation."""

from __future__ import annotations

import pytest

from dockside.execution.process import ExecResult, ProcessOptions
from dockside.execution.runner import CommandRunner, ProcessInvocation


class TestProcessInvocation:
    def test_command_line(self):
        assert ProcessInvocation("docker", ("ps", "-a")).command_line == "docker ps -a"

    def test_equality_ignores_parser(self):
        assert ProcessInvocation("docker", ("ps",), str) == ProcessInvocation("docker", ("ps",))


class TestCommandRunner:
    @pytest.mark.asyncio
    async def test_run_returns_raw_result_without_parser(self, executor, runner):
        executor.responses["docker ps"] = "abc"
        result = await runner.run(ProcessInvocation("docker", ("ps",)))
        assert result == ExecResult(stdout="abc", stderr="")
        assert executor.calls == ["docker ps"]

    @pytest.mark.asyncio
    async def test_run_applies_parser(self, executor, runner):
        executor.responses["docker ps"] = "a\nb"
        result = await runner.run(
            ProcessInvocation("docker", ("ps",), lambda r: r.stdout.splitlines()),
        )
        assert result == ["a", "b"]

    @pytest.mark.asyncio
    async def test_default_timeout_applied(self, executor):
        runner = CommandRunner(executor, default_timeout=30)
        await runner.run(ProcessInvocation("docker"))
        assert executor.options[0].timeout == 30

    @pytest.mark.asyncio
    async def test_explicit_options_timeout_wins(self, executor):
        runner = CommandRunner(executor, default_timeout=30)
        await runner.run(ProcessInvocation("docker"), options=ProcessOptions(timeout=5))
        assert executor.options[0].timeout == 5

    @pytest.mark.asyncio
    async def test_run_with_defaults_timeout_override(self, executor):
        runner = CommandRunner(executor, default_timeout=300, default_options=ProcessOptions(cwd="/tmp"))
        await runner.run_with_defaults(lambda: ProcessInvocation("docker"), timeout=2)
        assert executor.options[0].timeout == 2
        assert executor.options[0].cwd == "/tmp"

    @pytest.mark.asyncio
    async def test_on_output_is_forwarded(self, executor, runner):
        executor.responses["docker logs"] = "line"
        seen: list[tuple[str, bool]] = []
        await runner.run_with_defaults(
            lambda: ProcessInvocation("docker", ("logs",)),
            on_output=lambda text, is_stderr: seen.append((text, is_stderr)),
        )
        assert seen == [("line", False)]

    @pytest.mark.asyncio
    async def test_errors_propagate(self, executor, runner):
        executor.responses["docker ps"] = RuntimeError("spawn failed")
        with pytest.raises(RuntimeError):
            await runner.run(ProcessInvocation("docker", ("ps",)))
