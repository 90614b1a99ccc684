"""Typed outbound request records for Endpoint mutations."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Optional


def _wire(name: str):
    return field(default=None, metadata={"wire": name})


@dataclass
class _WireRecord:
    """Optional-field record that serializes to a camelCase JSON object.

    Attributes left at ``None`` are omitted; anything else (including ``""``
    and ``{}``) is sent as-is. Keys are emitted in declaration order.
    """

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                body[f.metadata["wire"]] = value
        return body

    def set_wire(self, wire_name: str, value: Any) -> None:
        for f in fields(self):
            if f.metadata.get("wire") == wire_name:
                setattr(self, f.name, value)
                return
        raise KeyError(f"{type(self).__name__} has no wire field {wire_name!r}")


@dataclass
class CreateEndpointRequest(_WireRecord):
    """Body of ``POST projects/{project}/locations/{region}/endpoints``."""

    display_name: Optional[str] = _wire("displayName")
    labels: Optional[dict[str, str]] = _wire("labels")
    encryption_spec: Optional[dict[str, str]] = _wire("encryptionSpec")
    metadata_schema_uri: Optional[str] = _wire("metadataSchemaUri")


@dataclass
class UpdateEndpointRequest(_WireRecord):
    """Body and field mask of ``PATCH {name}?updateMask=...``.

    ``update_mask`` lists the wire names the API is allowed to overwrite; a
    field in the mask with an empty value clears it remotely.
    """

    display_name: Optional[str] = _wire("displayName")
    labels: Optional[dict[str, str]] = _wire("labels")
    update_mask: list[str] = field(default_factory=list, metadata={"wire": None})

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        for f in fields(self):
            wire_name = f.metadata["wire"]
            value = getattr(self, f.name)
            if wire_name is not None and value is not None:
                body[wire_name] = value
        return body

    def query_params(self) -> dict[str, str]:
        return {"updateMask": ",".join(self.update_mask)}

    def __bool__(self) -> bool:
        return bool(self.update_mask)


__all__ = ["CreateEndpointRequest", "UpdateEndpointRequest"]
