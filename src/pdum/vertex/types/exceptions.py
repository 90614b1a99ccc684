"""Custom exceptions for pdum.vertex."""

from __future__ import annotations

from typing import Optional


class VertexError(Exception):
    """Base class for every error raised by pdum.vertex."""


class ConfigurationError(VertexError):
    """Raised when required addressing context (project, region) cannot be resolved.

    Always raised before any network call is attempted.
    """


class ImmutableFieldError(ConfigurationError):
    """Raised when an update would have to change a field fixed at creation."""

    def __init__(self, fields: list[str], resource: str = "") -> None:
        self.fields = list(fields)
        self.resource = resource
        target = f" on {resource}" if resource else ""
        super().__init__(
            f"Fields {', '.join(self.fields)} cannot be changed after creation{target}; "
            "recreate the endpoint instead."
        )


class APIError(VertexError):
    """A non-2xx response (or no response at all) from the remote API.

    Attributes
    ----------
    status : int or None
        HTTP status code, or ``None`` when the request never got a response.
    message : str
        Remote-supplied error message, unmodified.
    reason : str
        Remote-supplied canonical status (e.g. ``"NOT_FOUND"``), if any.
    """

    def __init__(self, status: Optional[int], message: str, reason: str = "") -> None:
        self.status = status
        self.message = message
        self.reason = reason
        prefix = f"HTTP {status}" if status is not None else "Transport failure"
        detail = f" ({reason})" if reason else ""
        super().__init__(f"{prefix}{detail}: {message}")

    @property
    def transient(self) -> bool:
        """Whether retrying the same read-only request may succeed."""

        return self.status is None or self.status == 429 or self.status >= 500


class TransportError(APIError):
    """The request failed before a response was received (DNS, TLS, reset, timeout)."""

    def __init__(self, message: str) -> None:
        super().__init__(None, message)


class NotFoundError(APIError):
    """The addressed resource does not exist (HTTP 404)."""

    def __init__(self, message: str, reason: str = "NOT_FOUND") -> None:
        super().__init__(404, message, reason)


class MalformedResponseError(APIError):
    """A successful response whose body is not what the API contract promises.

    Examples are a 2xx body that is not JSON, or a pending operation without
    a name to poll. Retrying the same request is not expected to help.
    """

    def __init__(self, status: Optional[int], message: str) -> None:
        self.status = status
        self.message = message
        self.reason = "MALFORMED_RESPONSE"
        where = f" (HTTP {status})" if status is not None else ""
        VertexError.__init__(self, f"Malformed API response{where}: {message}")

    @property
    def transient(self) -> bool:
        return False


class OperationError(VertexError):
    """A long-running operation completed and reported failure."""

    def __init__(self, activity: str, operation_name: str, code: Optional[int], message: str) -> None:
        self.activity = activity
        self.operation_name = operation_name
        self.code = code
        self.message = message
        super().__init__(f"{activity} failed (operation: {operation_name}): error code {code}, message: {message}")


class DeadlineExceededError(VertexError, TimeoutError):
    """Stopped waiting for a long-running operation before it reached ``done``.

    This does not mean the remote action failed or was rolled back: the
    operation may still complete (or fail) after the caller gives up.
    """

    def __init__(self, activity: str, operation_name: str, timeout: float) -> None:
        self.activity = activity
        self.operation_name = operation_name
        self.timeout = timeout
        super().__init__(f"{activity} timed out after {timeout}s (operation: {operation_name})")


class FieldTypeError(TypeError):
    """A local or wire value has the wrong shape for its field.

    This is a programming-contract violation, not a runtime condition to recover from.
    """

    def __init__(self, field: str, expected: str, value: object) -> None:
        self.field = field
        super().__init__(f"Field {field!r} expected {expected}, got {type(value).__name__}: {value!r}")


__all__ = [
    "APIError",
    "ConfigurationError",
    "DeadlineExceededError",
    "FieldTypeError",
    "ImmutableFieldError",
    "MalformedResponseError",
    "NotFoundError",
    "OperationError",
    "TransportError",
    "VertexError",
]
