"""Endpoint resource implementation."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional

_ENDPOINT_PREFIX = "projects/"


@dataclass
class EncryptionSpec:
    """Customer-managed encryption key spec for an Endpoint.

    Attributes
    ----------
    kms_key_name : str
        Cloud KMS key used to protect the endpoint, of the form
        ``projects/{p}/locations/{r}/keyRings/{kr}/cryptoKeys/{key}``.
    """

    kms_key_name: str = ""


@dataclass
class Endpoint:
    """Local state of a Vertex AI Endpoint.

    Desired-state fields are supplied by the caller; computed fields
    (``name``, ``create_time``, ``update_time``) are only ever populated from
    reads. ``project`` and ``region`` are addressing context: when unset they
    fall back to the process-wide :class:`~pdum.vertex.config.Config`.

    Attributes
    ----------
    display_name : str
        User-defined name, up to 128 UTF-8 characters. Mutable.
    metadata_schema_uri : str
        ``gs://`` URI of the OpenAPI schema describing endpoint metadata. Fixed at creation.
    labels : dict[str, str]
        Key/value labels. Mutable.
    encryption_spec : list[EncryptionSpec] or None
        At most one encryption spec; ``None`` when no CMEK is configured. Fixed at creation.
    name : str
        Server-assigned resource name; empty until the endpoint has been created.
    create_time, update_time : str
        RFC 3339 timestamps with nanosecond precision.
    project, region : str, optional
        Addressing context.
    """

    display_name: str = ""
    metadata_schema_uri: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    encryption_spec: Optional[list[EncryptionSpec]] = None
    name: str = ""
    create_time: str = ""
    update_time: str = ""
    project: Optional[str] = None
    region: Optional[str] = None

    @property
    def id(self) -> str:
        """Resource identity; empty until the first successful create."""

        return self.name

    def full_resource_name(self) -> str:
        return self.name

    def location(self) -> Optional[str]:
        """Region parsed from ``name`` (``projects/{p}/locations/{region}/endpoints/{id}``)."""

        if not self.name.startswith(_ENDPOINT_PREFIX):
            return None
        parts = self.name.split("/")
        if len(parts) >= 4 and parts[2] == "locations":
            return parts[3]
        return None

    @classmethod
    def from_manifest(cls, manifest: Mapping[str, Any]) -> "Endpoint":
        """Build desired state from a plain mapping (e.g. a parsed YAML manifest).

        Raises
        ------
        ValueError
            If the manifest contains keys that are not Endpoint fields.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(manifest) - known)
        if unknown:
            raise ValueError(f"Unknown endpoint field(s) in manifest: {', '.join(unknown)}")

        values = dict(manifest)
        spec = values.get("encryption_spec")
        if isinstance(spec, Mapping):
            spec = [spec]
        if spec is not None:
            values["encryption_spec"] = [
                item if isinstance(item, EncryptionSpec) else EncryptionSpec(**item) for item in spec
            ]
        if values.get("labels") is None:
            values["labels"] = {}
        return cls(**values)


__all__ = ["EncryptionSpec", "Endpoint"]
