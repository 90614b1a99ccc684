"""Field codec translating between local Endpoint state and the Vertex AI wire format.

Each :class:`Field` knows how to ``encode`` a local value for an outbound
request, ``decode`` a value found in an API response, and tell whether a
value is empty (the zero value of its kind). Emptiness matters because the
mutation planner never sends empty values on create, so that server-side
defaults are not overwritten.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pdum.vertex.types import Endpoint, EncryptionSpec, FieldTypeError


class FieldKind(Enum):
    """How a field participates in mutations."""

    REQUIRED_IMMUTABLE = "required-immutable"
    OPTIONAL_IMMUTABLE = "optional-immutable"
    MUTABLE = "mutable"
    COMPUTED = "computed"

    @property
    def outbound(self) -> bool:
        return self is not FieldKind.COMPUTED

    @property
    def mutable(self) -> bool:
        return self is FieldKind.MUTABLE

    @property
    def immutable(self) -> bool:
        return self in (FieldKind.REQUIRED_IMMUTABLE, FieldKind.OPTIONAL_IMMUTABLE)


class Field:
    """Scalar string field: identity transform in both directions."""

    def __init__(self, attr: str, wire_name: str, kind: FieldKind) -> None:
        self.attr = attr
        self.wire_name = wire_name
        self.kind = kind

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.attr!r}, {self.wire_name!r}, {self.kind.value})"

    def encode(self, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        raise FieldTypeError(self.attr, "str", value)

    def decode(self, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        raise FieldTypeError(self.wire_name, "str", value)

    def is_empty(self, value: Any) -> bool:
        return value is None or value == ""

    def get(self, endpoint: Endpoint) -> Any:
        return getattr(endpoint, self.attr)


class LabelsField(Field):
    """String-to-string mapping; absence always decodes to ``{}`` so comparisons stay stable."""

    def _check(self, name: str, value: Any) -> dict[str, str]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise FieldTypeError(name, "dict[str, str]", value)
        for key, val in value.items():
            if not isinstance(key, str) or not isinstance(val, str):
                raise FieldTypeError(name, "dict[str, str]", value)
        return dict(value)

    def encode(self, value: Any) -> dict[str, str]:
        return self._check(self.attr, value)

    def decode(self, value: Any) -> dict[str, str]:
        return self._check(self.wire_name, value)

    def is_empty(self, value: Any) -> bool:
        return not value


class EncryptionSpecField(Field):
    """``[EncryptionSpec(kms_key_name)]`` locally, bare ``{"kmsKeyName": ...}`` on the wire."""

    def encode(self, value: Any) -> Optional[dict[str, str]]:
        if value is None:
            return None
        if not isinstance(value, list):
            raise FieldTypeError(self.attr, "list[EncryptionSpec]", value)
        if not value or value[0] is None:
            return None
        if len(value) > 1:
            raise FieldTypeError(self.attr, "at most one EncryptionSpec", value)
        spec = value[0]
        if not isinstance(spec, EncryptionSpec):
            raise FieldTypeError(self.attr, "list[EncryptionSpec]", value)
        if not isinstance(spec.kms_key_name, str):
            raise FieldTypeError(f"{self.attr}.kms_key_name", "str", spec.kms_key_name)

        transformed: dict[str, str] = {}
        if spec.kms_key_name:
            transformed["kmsKeyName"] = spec.kms_key_name
        return transformed

    def decode(self, value: Any) -> Optional[list[EncryptionSpec]]:
        if value is None:
            return None
        if not isinstance(value, dict):
            raise FieldTypeError(self.wire_name, "object", value)
        if not value:
            return None
        kms_key_name = value.get("kmsKeyName")
        if kms_key_name is not None and not isinstance(kms_key_name, str):
            raise FieldTypeError(f"{self.wire_name}.kmsKeyName", "str", kms_key_name)
        return [EncryptionSpec(kms_key_name=kms_key_name or "")]

    def is_empty(self, value: Any) -> bool:
        # None (absent), [] locally, or {} on the wire
        return not value


NAME = Field("name", "name", FieldKind.COMPUTED)
DISPLAY_NAME = Field("display_name", "displayName", FieldKind.MUTABLE)
CREATE_TIME = Field("create_time", "createTime", FieldKind.COMPUTED)
UPDATE_TIME = Field("update_time", "updateTime", FieldKind.COMPUTED)
LABELS = LabelsField("labels", "labels", FieldKind.MUTABLE)
ENCRYPTION_SPEC = EncryptionSpecField("encryption_spec", "encryptionSpec", FieldKind.OPTIONAL_IMMUTABLE)
METADATA_SCHEMA_URI = Field("metadata_schema_uri", "metadataSchemaUri", FieldKind.REQUIRED_IMMUTABLE)

# Order is the outbound serialization order.
ENDPOINT_FIELDS: tuple[Field, ...] = (
    NAME,
    DISPLAY_NAME,
    CREATE_TIME,
    UPDATE_TIME,
    LABELS,
    ENCRYPTION_SPEC,
    METADATA_SCHEMA_URI,
)

FIELDS_BY_ATTR: dict[str, Field] = {f.attr: f for f in ENDPOINT_FIELDS}


def decode_endpoint(
    payload: dict[str, Any],
    *,
    project: Optional[str] = None,
    region: Optional[str] = None,
) -> Endpoint:
    """Build local state from a remote Endpoint representation.

    Missing fields decode to their empty value. ``region`` is recomputed from
    the resource name when the name carries one.
    """
    if not isinstance(payload, dict):
        raise FieldTypeError("endpoint", "object", payload)
    values = {f.attr: f.decode(payload.get(f.wire_name)) for f in ENDPOINT_FIELDS}
    endpoint = Endpoint(**values, project=project, region=region)
    endpoint.region = endpoint.location() or region
    return endpoint


__all__ = [
    "DISPLAY_NAME",
    "ENCRYPTION_SPEC",
    "ENDPOINT_FIELDS",
    "FIELDS_BY_ATTR",
    "LABELS",
    "METADATA_SCHEMA_URI",
    "NAME",
    "EncryptionSpecField",
    "Field",
    "FieldKind",
    "LabelsField",
    "decode_endpoint",
]
