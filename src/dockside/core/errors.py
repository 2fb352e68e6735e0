"""
Structured error types for dockside.

Every failure the core can produce is a ``DocksideError`` carrying a category,
a retry hint, structured context and an optional chained cause. The
presentation layer (CLI, editor integration) turns these into user-facing
messages or exit codes; nothing in the core writes to a user surface.

Manifesto:
    - **Typed Error Hierarchy:** Configuration, process and probe failures
      are distinct types, not message strings
    - **Explicit Retry Semantics:** Configuration errors are never retryable;
      process failures are the caller's call
    - **Rich Context:** Exit code, signal and command line travel with the error

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                       DocksideError                           │
        │        (category, retryable, context, cause)                  │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  ConfigurationError        ProcessError         ProbeFailure  │
        │  (CONFIG)                  (PROCESS)            (PROBE)       │
        │       │                         │                             │
        │  NoClientRegisteredError   ProcessTimeoutError                │
        │                                                               │
        │  CacheComputationError (CACHE)                                │
        └──────────────────────────────────────────────────────────────┘

Propagation:
    - ConfigurationError / ProcessError propagate to the immediate caller.
    - ProbeFailure is absorbed inside the compose clients and only logged.
    - CacheComputationError describes a failed lazy producer; the cache
      resets itself so the next access retries.

Examples:
    >>> err = ProcessError("docker exited with code 1", exit_code=1)
    >>> err.exit_code
    1
    >>> err.retryable
    False
    >>> err.to_dict()["category"]
    'PROCESS'

Tags:
    error-handling, exception-hierarchy, process, configuration, dockside

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for classification and reporting.

    Attributes:
        CONFIG: No matching or default client, invalid settings
        PROCESS: External command failed, was killed or timed out
        PROBE: Capability detection failed (always absorbed)
        CACHE: Lazy producer raised
        INTERNAL: Bugs, unexpected state
    """

    CONFIG = "CONFIG"
    PROCESS = "PROCESS"
    PROBE = "PROBE"
    CACHE = "CACHE"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Structured metadata attached to an error.

    Only fields that are set show up in ``to_dict()``; anything that does
    not fit a typed field goes into ``metadata``.

    Attributes:
        client_id: Id of the engine/orchestrator client involved
        config_key: Configuration key that was being resolved
        command_line: Fully composed command line of a failed process
        metadata: Additional key-value pairs
    """

    client_id: str | None = None
    config_key: str | None = None
    command_line: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["client_id", "config_key", "command_line"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DocksideError(Exception):
    """
    Base exception for all dockside errors.

    Subclasses set ``default_category`` and ``default_retryable``; callers
    may override both per instance.

    Examples:
        >>> error = DocksideError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(client_id="docker").context.client_id
        'docker'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DocksideError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConfigurationError("No client").with_context(
                config_key="orchestrator_client",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        ctx = self.context.to_dict()
        if ctx:
            result["context"] = ctx
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


# =============================================================================
# CONFIGURATION ERRORS (never retryable)
# =============================================================================


class ConfigurationError(DocksideError):
    """Requested capability has no matching or default client."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class NoClientRegisteredError(ConfigurationError):
    """The client pool is empty or no default client could be determined."""

    def __init__(self, config_key: str, message: str | None = None, **kwargs: Any):
        super().__init__(
            message or f"No client registered for '{config_key}' and no default available",
            **kwargs,
        )
        self.config_key = config_key
        self.context.config_key = config_key


# =============================================================================
# PROCESS ERRORS
# =============================================================================


class ProcessError(DocksideError):
    """
    An external command exited non-zero, was killed, or timed out.

    Attributes:
        exit_code: Process return code, ``None`` when killed by a signal
        signal: Signal number that terminated the process, if any
        stderr_handled: True when stderr was already surfaced through a
            progress callback, so callers should not report it twice
        stdout: Buffered stdout up to the failure
        stderr: Buffered stderr up to the failure
    """

    default_category = ErrorCategory.PROCESS
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        signal: int | None = None,
        stderr_handled: bool = False,
        stdout: str = "",
        stderr: str = "",
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.exit_code = exit_code
        self.signal = signal
        self.stderr_handled = stderr_handled
        self.stdout = stdout
        self.stderr = stderr

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["exit_code"] = self.exit_code
        result["signal"] = self.signal
        result["stderr_handled"] = self.stderr_handled
        return result


class ProcessTimeoutError(ProcessError):
    """The process exceeded its timeout and was killed."""

    def __init__(self, message: str, *, timeout: float, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.timeout = timeout


# =============================================================================
# PROBE / CACHE ERRORS
# =============================================================================


class ProbeFailure(DocksideError):
    """The compose-version probe failed.

    Never raised to callers of the core: the compose clients catch the
    underlying failure, log this error's ``to_dict()`` and fall back to the
    legacy configuration.
    """

    default_category = ErrorCategory.PROBE
    default_retryable = False


class CacheComputationError(DocksideError):
    """The producer of an ``AsyncLazy`` raised."""

    default_category = ErrorCategory.CACHE
    default_retryable = True


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DocksideError",
    "ConfigurationError",
    "NoClientRegisteredError",
    "ProcessError",
    "ProcessTimeoutError",
    "ProbeFailure",
    "CacheComputationError",
]
