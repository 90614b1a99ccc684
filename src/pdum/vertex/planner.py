"""Build minimal mutation payloads from desired and observed Endpoint state."""

from __future__ import annotations

from typing import Iterable, Optional

from pdum.vertex.codec import ENDPOINT_FIELDS, FIELDS_BY_ATTR
from pdum.vertex.types import CreateEndpointRequest, Endpoint, UpdateEndpointRequest


def build_create_payload(
    desired: Endpoint,
    *,
    explicitly_set: Optional[Iterable[str]] = None,
    observed: Optional[Endpoint] = None,
) -> CreateEndpointRequest:
    """Build the body of a create request.

    A field is included only when its encoded value is non-empty and either
    the caller explicitly set it or it differs from the observed value.

    Args:
        desired: Desired local state.
        explicitly_set: Attribute names the caller set explicitly. ``None``
            treats every non-empty desired value as explicitly set.
        observed: Previously observed state, if any. ``None`` means nothing
            has been observed, so every value counts as different.

    Returns:
        A CreateEndpointRequest with only the meaningfully set fields filled in.
    """
    explicit = None if explicitly_set is None else set(explicitly_set)
    request = CreateEndpointRequest()

    for f in ENDPOINT_FIELDS:
        if not f.kind.outbound:
            continue
        encoded = f.encode(f.get(desired))
        if f.is_empty(encoded):
            continue
        is_set = explicit is None or f.attr in explicit
        differs = observed is None or f.encode(f.get(observed)) != encoded
        if is_set or differs:
            request.set_wire(f.wire_name, encoded)

    return request


def build_update_payload(desired: Endpoint, changed_fields: Iterable[str]) -> UpdateEndpointRequest:
    """Build the body and update mask of a patch request.

    Only mutable fields named in ``changed_fields`` take part. Each one is
    added to the mask even when its new value is empty, which clears it
    remotely. Immutable and computed fields never appear.
    """
    changed = set(changed_fields)
    request = UpdateEndpointRequest()

    for f in ENDPOINT_FIELDS:
        if not f.kind.mutable or f.attr not in changed:
            continue
        request.set_wire(f.wire_name, f.encode(f.get(desired)))
        request.update_mask.append(f.wire_name)

    return request


def changed_fields(observed: Endpoint, desired: Endpoint) -> list[str]:
    """Return the outbound fields whose encoded desired value differs from observed."""
    return [
        f.attr
        for f in ENDPOINT_FIELDS
        if f.kind.outbound and _normalized(f, f.get(observed)) != _normalized(f, f.get(desired))
    ]


def immutable_drift(observed: Endpoint, desired: Endpoint) -> list[str]:
    """Return the immutable fields the desired state would change."""
    return [attr for attr in changed_fields(observed, desired) if FIELDS_BY_ATTR[attr].kind.immutable]


def _normalized(f, value):
    encoded = f.encode(value)
    # None, "", {} and an empty encryption spec all mean "unset"
    return None if f.is_empty(encoded) else encoded


__all__ = [
    "build_create_payload",
    "build_update_payload",
    "changed_fields",
    "immutable_drift",
]
