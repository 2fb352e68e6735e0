"""
Shared pytest fixtures and configuration for dockside tests.

This module provides:
- An in-memory configuration per test
- A fake executor and a runner wired to it, so client tests never spawn
  processes
- Auto-marking of tests that spawn real processes as integration tests
"""

import sys
from pathlib import Path

import pytest

# Ensure dockside package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dockside.core.config import InMemoryConfiguration
from dockside.execution.runner import CommandRunner
from tests._support.fakes import FakeExecutor


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        if "test_process" in Path(item.fspath).name:
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def configuration() -> InMemoryConfiguration:
    """Empty configuration; tests set the keys they need."""
    return InMemoryConfiguration()


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def runner(executor: FakeExecutor) -> CommandRunner:
    return CommandRunner(executor)
