"""Long-running operation handle."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Operation:
    """In-flight asynchronous action returned by a mutating call.

    An operation transitions exactly once from pending to done. Refreshing it
    yields a new ``Operation``; instances are never updated in place.

    Attributes
    ----------
    name : str
        Operation resource name (``projects/.../operations/{id}``).
    done : bool
        Whether the operation reached a terminal state.
    error : dict, optional
        ``{"code": int, "message": str, "details": [...]}`` when the operation failed.
    response : dict, optional
        Embedded final resource on success, if the API returned one.
    metadata : dict
        Operation metadata as reported by the API.
    """

    name: str
    done: bool = False
    error: Optional[dict] = None
    response: Optional[dict] = None
    metadata: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_wire(cls, payload: Optional[dict[str, Any]]) -> "Operation":
        payload = payload or {}
        response = payload.get("response")
        if isinstance(response, dict):
            # google.protobuf.Any wrapper; the resource fields sit next to "@type"
            response = {k: v for k, v in response.items() if k != "@type"}
        else:
            response = None
        return cls(
            name=payload.get("name", ""),
            done=bool(payload.get("done", False)),
            error=payload.get("error") or None,
            response=response,
            metadata=payload.get("metadata") or {},
        )

    @property
    def failed(self) -> bool:
        return self.done and self.error is not None


__all__ = ["Operation"]
