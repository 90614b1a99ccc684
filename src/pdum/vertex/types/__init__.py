"""Public exports for pdum.vertex types."""

from __future__ import annotations

from .endpoint import EncryptionSpec, Endpoint
from .exceptions import (
    APIError,
    ConfigurationError,
    DeadlineExceededError,
    FieldTypeError,
    ImmutableFieldError,
    MalformedResponseError,
    NotFoundError,
    OperationError,
    TransportError,
    VertexError,
)
from .operation import Operation
from .payloads import CreateEndpointRequest, UpdateEndpointRequest

__all__ = [
    "APIError",
    "ConfigurationError",
    "CreateEndpointRequest",
    "DeadlineExceededError",
    "EncryptionSpec",
    "Endpoint",
    "FieldTypeError",
    "ImmutableFieldError",
    "MalformedResponseError",
    "NotFoundError",
    "Operation",
    "OperationError",
    "TransportError",
    "UpdateEndpointRequest",
    "VertexError",
]
