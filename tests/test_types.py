"""Unit tests for Endpoint, Operation and the request records."""

import pytest

from pdum.vertex.types import (
    APIError,
    CreateEndpointRequest,
    DeadlineExceededError,
    EncryptionSpec,
    Endpoint,
    MalformedResponseError,
    Operation,
    OperationError,
    UpdateEndpointRequest,
    VertexError,
)


def test_endpoint_identity_empty_until_created():
    assert Endpoint(display_name="svc-a").id == ""
    assert Endpoint(display_name="svc-a").location() is None


def test_endpoint_location_from_name():
    endpoint = Endpoint(name="projects/123/locations/europe-west4/endpoints/9")
    assert endpoint.location() == "europe-west4"


def test_from_manifest_normalizes_encryption_spec():
    endpoint = Endpoint.from_manifest(
        {
            "display_name": "svc-a",
            "metadata_schema_uri": "gs://x/schema.yaml",
            "labels": None,
            "encryption_spec": {"kms_key_name": "k"},
        }
    )
    assert endpoint.labels == {}
    assert endpoint.encryption_spec == [EncryptionSpec("k")]


def test_from_manifest_accepts_list_form():
    endpoint = Endpoint.from_manifest({"encryption_spec": [{"kms_key_name": "k"}]})
    assert endpoint.encryption_spec == [EncryptionSpec("k")]


def test_from_manifest_rejects_unknown_keys():
    with pytest.raises(ValueError, match="displayName"):
        Endpoint.from_manifest({"displayName": "svc-a"})


def test_operation_from_wire_strips_type_url():
    op = Operation.from_wire(
        {
            "name": "projects/1/locations/r/endpoints/2/operations/3",
            "done": True,
            "response": {"@type": "type.googleapis.com/google.cloud.aiplatform.v1.Endpoint", "name": "e"},
        }
    )
    assert op.done
    assert not op.failed
    assert op.response == {"name": "e"}


def test_operation_from_wire_defaults():
    op = Operation.from_wire(None)
    assert op.name == ""
    assert not op.done
    assert op.error is None
    assert op.response is None


def test_operation_failed():
    op = Operation.from_wire({"name": "o", "done": True, "error": {"code": 13, "message": "boom"}})
    assert op.failed


def test_create_request_skips_unset_attributes():
    request = CreateEndpointRequest(display_name="svc-a")
    assert request.to_wire() == {"displayName": "svc-a"}


def test_update_request_keeps_empty_values():
    request = UpdateEndpointRequest(labels={}, update_mask=["labels"])
    assert request.to_wire() == {"labels": {}}
    assert request


def test_set_wire_rejects_unknown_field():
    with pytest.raises(KeyError):
        UpdateEndpointRequest().set_wire("metadataSchemaUri", "gs://x")


def test_error_taxonomy_is_distinct():
    deadline = DeadlineExceededError("Creating Endpoint", "op", 10)
    failure = OperationError("Creating Endpoint", "op", 9, "boom")
    assert isinstance(deadline, VertexError)
    assert isinstance(failure, VertexError)
    assert not isinstance(deadline, OperationError)
    assert not isinstance(failure, DeadlineExceededError)
    assert "timed out after 10s" in str(deadline)


def test_malformed_response_is_a_permanent_api_error():
    error = MalformedResponseError(None, "Creating Endpoint: API returned an unfinished operation without a name")
    assert isinstance(error, APIError)
    assert not error.transient
    assert error.reason == "MALFORMED_RESPONSE"
    assert str(error).startswith("Malformed API response: ")
    assert "HTTP 200" in str(MalformedResponseError(200, "<html>"))
