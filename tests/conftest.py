"""Shared fixtures: a scripted transport and a fake clock."""

import pytest

from pdum.vertex import Config, EndpointReconciler, OperationPoller
from pdum.vertex.types import NotFoundError

BASE = "https://us-central1-aiplatform.googleapis.com/v1/"
ENDPOINT_NAME = "projects/123/locations/us-central1/endpoints/456"


class FakeTransport:
    """Transport that replays queued responses and records every request.

    Each queued item is a ``dict`` (returned) or an exception (raised).
    Sending with an empty queue fails the test. With a ``clock``, every
    request advances it by ``latency`` seconds.
    """

    def __init__(self, *responses, clock=None, latency=0.0):
        self.responses = list(responses)
        self.calls = []
        self.clock = clock
        self.latency = latency

    def queue(self, *responses):
        self.responses.extend(responses)

    def send(self, method, url, body=None, *, project=None, timeout=None):
        self.calls.append({"method": method, "url": url, "body": body, "project": project, "timeout": timeout})
        if self.clock is not None:
            self.clock.now += self.latency
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    @property
    def methods(self):
        return [c["method"] for c in self.calls]


class FakeClock:
    """Monotonic clock advanced only by ``sleep``."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def endpoint_payload(**overrides):
    payload = {
        "name": ENDPOINT_NAME,
        "displayName": "svc-a",
        "metadataSchemaUri": "gs://x/schema.yaml",
        "createTime": "2024-05-01T12:00:00.123456789Z",
        "updateTime": "2024-05-01T12:00:00.123456789Z",
    }
    payload.update(overrides)
    return payload


def not_found():
    return NotFoundError("Endpoint `projects/123/locations/us-central1/endpoints/456` not found.")


@pytest.fixture
def config():
    return Config(project="my-project", region="us-central1", user_agent="pdum-vertex/test")


@pytest.fixture
def transport(clock):
    return FakeTransport(clock=clock)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def poller(transport, config, clock):
    return OperationPoller(transport, config, initial_delay=1.0, max_delay=8.0, clock=clock, sleep=clock.sleep)


@pytest.fixture
def reconciler(config, transport, poller):
    return EndpointReconciler(config, transport=transport, poller=poller)
