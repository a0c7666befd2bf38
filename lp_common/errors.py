"""Shared error taxonomy for load-probe."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class LPError(Exception):
    """Base error type for typed failure handling."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.error_type, "message": str(self), "context": self.context}


class ConfigurationError(LPError):
    """Failure due to invalid probe settings or CLI input."""


class TransportError(LPError):
    """Failure reaching the target server or coordinator over HTTP."""


class ConfigRetrievalTimeoutError(LPError, TimeoutError):
    """Raised when no run configuration arrived before the deadline."""

    def __init__(self, attempts: int, waited_seconds: float, max_seconds: float) -> None:
        self.attempts = attempts
        self.waited_seconds = waited_seconds
        self.max_seconds = max_seconds
        super().__init__(
            f"No run configuration after {waited_seconds:.1f}s (max: {max_seconds}s)",
            context={
                "attempts": attempts,
                "waited_seconds": round(waited_seconds, 3),
                "max_seconds": max_seconds,
            },
        )


class EngineError(LPError):
    """Failure raised by the load-generation engine during a run."""


class ResultPersistenceError(LPError):
    """Failure writing the local result artifact."""


class SinkError(LPError):
    """A single result sink failed; reported, never escalated."""

    def __init__(self, sink: str, cause: BaseException, stage: str = "") -> None:
        self.sink = sink
        self.stage = stage
        self.cause = cause
        super().__init__(
            f"Result sink {sink!r} failed during {stage or 'persist'}: {cause}",
            context={"sink": sink, "stage": stage, "cause": repr(cause)},
            cause=cause,
        )


T = TypeVar("T", bound=LPError)


def wrap_error(
    error_cls: type[T],
    message: str,
    *,
    context: Mapping[str, Any] | None = None,
    cause: BaseException | None = None,
) -> T:
    """Create a typed LPError with optional context and cause."""
    return error_cls(message, context=context, cause=cause)


def error_to_payload(error: LPError) -> dict[str, Any]:
    """Convert an LPError to a log/result payload."""
    return {
        "error_type": error.error_type,
        "error": str(error),
        "error_context": error.context,
    }
