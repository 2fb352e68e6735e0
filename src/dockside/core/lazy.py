"""Single-flight async memoization.

``AsyncLazy`` wraps an async producer and caches its result. Concurrent
``get_value()`` calls while the producer is running share that one
computation; a failed computation is not cached, so the next call retries.

.. code-block:: text

    EMPTY ──get_value()──▶ PENDING ──success──▶ RESOLVED
      ▲                       │                     │
      └──────failure──────────┘                     │
      └──────────────────clear()────────────────────┘

``clear()`` only forgets the task. Callers already awaiting an in-flight
computation still receive its result; the *next* ``get_value()`` starts a
fresh one. Awaiters that get cancelled do not cancel the shared computation.

Example::

    lazy = AsyncLazy(detect_compose_config)
    config = await lazy.get_value()   # runs detect_compose_config once
    config = await lazy.get_value()   # cached
    lazy.clear()
    config = await lazy.get_value()   # runs again
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Generic, TypeVar

from dockside.core.errors import CacheComputationError
from dockside.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class LazyState(str, Enum):
    EMPTY = "empty"
    PENDING = "pending"
    RESOLVED = "resolved"


class AsyncLazy(Generic[T]):
    """Memoizing wrapper around an async producer.

    Args:
        producer: Zero-argument coroutine function computing the value.
        name: Label used in log records.
    """

    def __init__(self, producer: Callable[[], Awaitable[T]], *, name: str | None = None) -> None:
        self._producer = producer
        self._name = name or getattr(producer, "__qualname__", "lazy")
        self._task: asyncio.Future[T] | None = None
        self._computations = 0
        self._generation = 0

    @property
    def state(self) -> LazyState:
        task = self._task
        if task is None:
            return LazyState.EMPTY
        if not task.done():
            return LazyState.PENDING
        return LazyState.RESOLVED

    @property
    def has_value(self) -> bool:
        return self.state is LazyState.RESOLVED

    @property
    def is_pending(self) -> bool:
        return self.state is LazyState.PENDING

    @property
    def generation(self) -> int:
        """Incremented by every ``clear()``; a value read under an older generation is stale."""
        return self._generation

    @property
    def computations(self) -> int:
        """Number of producer invocations started so far."""
        return self._computations

    async def get_value(self) -> T:
        """Return the cached value, joining or starting a computation.

        Raises:
            CacheComputationError: The producer raised. The cache is back to
                empty, so calling again retries.
        """
        task = self._task
        if task is None:
            task = asyncio.ensure_future(self._producer())
            task.add_done_callback(self._forget_failure)
            self._task = task
            self._computations += 1
            logger.debug("lazy_computation_started", lazy=self._name, computation=self._computations)

        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                # only this awaiter was cancelled; the shared computation goes on
                raise
            self._forget(task)
            raise
        except Exception as exc:
            self._forget(task)
            raise CacheComputationError(
                f"Lazy value '{self._name}' could not be computed: {exc}",
                cause=exc,
            ) from exc

    def clear(self) -> None:
        """Drop the cached value or in-flight task (the task keeps running)."""
        self._task = None
        self._generation += 1

    def _forget(self, task: asyncio.Future[T]) -> None:
        if self._task is task:
            self._task = None

    def _forget_failure(self, task: asyncio.Future[T]) -> None:
        if task.cancelled() or task.exception() is not None:
            if self._task is task:
                logger.debug("lazy_computation_failed", lazy=self._name)
            self._forget(task)
