"""Declarative reconciler for Vertex AI endpoints"""

from pdum.vertex.config import Config, Timeouts
from pdum.vertex.poller import OperationPoller
from pdum.vertex.reconciler import EndpointReconciler
from pdum.vertex.transport import HttpTransport, Transport
from pdum.vertex.types import (
    APIError,
    ConfigurationError,
    DeadlineExceededError,
    EncryptionSpec,
    Endpoint,
    FieldTypeError,
    ImmutableFieldError,
    MalformedResponseError,
    NotFoundError,
    Operation,
    OperationError,
    TransportError,
    VertexError,
)

__version__ = "0.1.0-alpha"


__all__ = [
    "__version__",
    "Config",
    "Timeouts",
    "EndpointReconciler",
    "OperationPoller",
    "HttpTransport",
    "Transport",
    "Endpoint",
    "EncryptionSpec",
    "Operation",
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
