"""Error taxonomy for the design system query server.

Every failure surfaced to a caller is a DesignSystemError tagged with an
ErrorKind. Callers match on ``err.kind`` rather than on subclasses:

    try:
        token = await service.get_token("primary-blue")
    except DesignSystemError as err:
        if err.kind is ErrorKind.NOT_FOUND:
            ...

Retryable kinds (SERVICE_UNAVAILABLE, TIMEOUT) are flagged so a caller can
decide whether to back off and try again.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Literal, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Severity = Literal["low", "medium", "high", "critical"]


class ErrorKind(Enum):
    """Machine-readable error kinds."""

    DATA = "INVALID_DATA"
    INVALID_QUERY = "INVALID_QUERY"
    NOT_FOUND = "RESOURCE_NOT_FOUND"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    TIMEOUT = "SERVICE_TIMEOUT"
    CONFIGURATION = "CONFIGURATION_ERROR"
    INTERNAL = "INTERNAL_ERROR"


@dataclass(frozen=True)
class _KindDefaults:
    retryable: bool
    status_code: int
    severity: Severity


_DEFAULTS: dict[ErrorKind, _KindDefaults] = {
    ErrorKind.DATA: _KindDefaults(False, 400, "medium"),
    ErrorKind.INVALID_QUERY: _KindDefaults(False, 400, "low"),
    ErrorKind.NOT_FOUND: _KindDefaults(False, 404, "low"),
    ErrorKind.SERVICE_UNAVAILABLE: _KindDefaults(True, 503, "high"),
    ErrorKind.TIMEOUT: _KindDefaults(True, 408, "high"),
    ErrorKind.CONFIGURATION: _KindDefaults(False, 500, "critical"),
    ErrorKind.INTERNAL: _KindDefaults(False, 500, "critical"),
}


class DesignSystemError(Exception):
    """Single error type carrying a kind, message and actionable suggestions.

    Attributes:
        kind: The ErrorKind used for matching.
        message: Human-readable description.
        suggestions: Short list of actions the caller could take.
        retryable: Whether retrying the same call may succeed.
        status_code: HTTP-style status code for adapters.
        cause: Underlying exception, if any.
        context: Free-form diagnostic fields (service, method, ...).
        timestamp: When the error was created (UTC).
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        suggestions: list[str] | tuple[str, ...] | None = None,
        retryable: bool | None = None,
        status_code: int | None = None,
        cause: BaseException | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        defaults = _DEFAULTS[kind]
        self.kind = kind
        self.message = message
        self.suggestions: tuple[str, ...] = tuple(suggestions or ())
        self.retryable = defaults.retryable if retryable is None else retryable
        self.status_code = defaults.status_code if status_code is None else status_code
        self.cause = cause
        self.context: dict[str, Any] = dict(context or {})
        self.timestamp = datetime.now(timezone.utc)
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def code(self) -> str:
        """Return the wire code for this error's kind."""
        return self.kind.value

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestions": list(self.suggestions),
                "retryable": self.retryable,
                "timestamp": self.timestamp.isoformat(),
            }
        }

    def user_message(self) -> str:
        """Return the message followed by bulleted suggestions."""
        if not self.suggestions:
            return self.message
        bullets = "\n".join(f"• {s}" for s in self.suggestions)
        return f"{self.message}\n\nSuggestions:\n{bullets}"

    def __repr__(self) -> str:
        return f"DesignSystemError(kind={self.kind.name}, message={self.message!r})"


def data_error(
    message: str,
    suggestions: list[str] | None = None,
    context: dict[str, Any] | None = None,
    cause: BaseException | None = None,
) -> DesignSystemError:
    """Malformed or missing data."""
    return DesignSystemError(
        ErrorKind.DATA, message, suggestions=suggestions, context=context, cause=cause
    )


def invalid_query(
    message: str,
    suggestions: list[str] | None = None,
    context: dict[str, Any] | None = None,
) -> DesignSystemError:
    """Caller passed an empty or malformed argument."""
    return DesignSystemError(
        ErrorKind.INVALID_QUERY, message, suggestions=suggestions, context=context
    )


def not_found(
    resource: str,
    identifier: str,
    suggestions: list[str] | None = None,
    context: dict[str, Any] | None = None,
) -> DesignSystemError:
    """Requested record does not exist."""
    ctx = {**(context or {}), "resource": resource, "identifier": identifier}
    return DesignSystemError(
        ErrorKind.NOT_FOUND,
        f'{resource} "{identifier}" not found',
        suggestions=suggestions,
        context=ctx,
    )


def service_unavailable(
    service: str,
    reason: str | None = None,
    context: dict[str, Any] | None = None,
    cause: BaseException | None = None,
) -> DesignSystemError:
    """Protected dependency is rejecting calls."""
    message = f"Service {service} is unavailable"
    if reason:
        message = f"{message}: {reason}"
    return DesignSystemError(
        ErrorKind.SERVICE_UNAVAILABLE,
        message,
        suggestions=[
            "Try again in a few moments",
            "Check service configuration",
            "Verify data sources are accessible",
        ],
        context={**(context or {}), "service": service},
        cause=cause,
    )


def timeout_error(
    operation: str,
    timeout: float,
    context: dict[str, Any] | None = None,
    cause: BaseException | None = None,
) -> DesignSystemError:
    """Operation exceeded its timeout (seconds)."""
    return DesignSystemError(
        ErrorKind.TIMEOUT,
        f'Operation "{operation}" timed out after {timeout * 1000:.0f}ms',
        suggestions=[
            "Try again with a simpler query",
            "Contact support if the issue persists",
        ],
        context={**(context or {}), "operation": operation, "timeout": timeout},
        cause=cause,
    )


def configuration_error(
    setting: str,
    reason: str,
    context: dict[str, Any] | None = None,
    cause: BaseException | None = None,
) -> DesignSystemError:
    """Missing or invalid setting at startup."""
    return DesignSystemError(
        ErrorKind.CONFIGURATION,
        f'Configuration error for "{setting}": {reason}',
        suggestions=[
            "Check environment variables",
            "Verify configuration file syntax",
            "Ensure all required settings are provided",
        ],
        context={**(context or {}), "setting": setting},
        cause=cause,
    )


def internal_error(
    message: str,
    cause: BaseException | None = None,
    context: dict[str, Any] | None = None,
) -> DesignSystemError:
    """Fallback for unanticipated failures."""
    return DesignSystemError(ErrorKind.INTERNAL, message, cause=cause, context=context)


def normalize_error(
    exc: BaseException, context: dict[str, Any] | None = None
) -> DesignSystemError:
    """Map any exception onto the taxonomy.

    DesignSystemErrors pass through untouched (context is merged in for
    keys it does not already carry). Everything else becomes INTERNAL.
    """
    if isinstance(exc, DesignSystemError):
        for key, value in (context or {}).items():
            exc.context.setdefault(key, value)
        return exc
    message = str(exc) or type(exc).__name__
    return internal_error(message, cause=exc, context=context)


def is_retryable(exc: BaseException) -> bool:
    """Return True if exc is a DesignSystemError flagged retryable."""
    return isinstance(exc, DesignSystemError) and exc.retryable


def severity(err: DesignSystemError) -> Severity:
    """Return the severity bucket for an error's kind."""
    return _DEFAULTS[err.kind].severity


def log_error(err: DesignSystemError, context: dict[str, Any] | None = None) -> None:
    """Log an error at a level chosen by its severity."""
    level = severity(err)
    fields = {**err.context, **(context or {})}
    if level == "low":
        logger.info("%s [%s] %s", err.code, level, err.message, extra={"context": fields})
    elif level == "medium":
        logger.warning("%s [%s] %s", err.code, level, err.message, extra={"context": fields})
    else:
        logger.error(
            "%s [%s] %s",
            err.code,
            level,
            err.message,
            exc_info=err.cause,
            extra={"context": fields},
        )


async def run_guarded(
    service: str,
    method: str,
    operation: Callable[[], Awaitable[T]],
) -> T:
    """Run operation with entry/exit logging and error normalization.

    Args:
        service: Name of the calling service (for log context).
        method: Name of the calling method.
        operation: Zero-argument coroutine factory to run.

    Returns:
        Whatever operation returns.

    Raises:
        DesignSystemError: Any failure, normalized.
    """
    start = time.perf_counter()
    logger.debug("-> %s.%s", service, method)
    try:
        result = await operation()
    except Exception as exc:
        duration_ms = (time.perf_counter() - start) * 1000
        err = normalize_error(exc, {"service": service, "method": method})
        err.context.setdefault("duration_ms", round(duration_ms, 2))
        log_error(err)
        if err is exc:
            raise
        raise err from exc

    duration_ms = (time.perf_counter() - start) * 1000
    logger.debug("<- %s.%s (%.2fms)", service, method, duration_ms)
    return result
