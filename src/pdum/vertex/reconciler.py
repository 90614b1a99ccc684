"""Create, read, update and delete Vertex AI endpoints.

Every entry point runs to completion (including waiting on the long-running
operation it triggered) before returning. Entry points never mutate the
``Endpoint`` passed in; they return fresh instances, so a failed call leaves
the caller's state exactly as it was.

Each entry point has one deadline. The mutating request, the operation poll
and the final read-back all spend from the same ``timeout``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable, Iterable, Optional

from pdum.vertex import planner
from pdum.vertex.codec import NAME, decode_endpoint
from pdum.vertex.config import Config
from pdum.vertex.poller import OperationPoller
from pdum.vertex.transport import HttpTransport, Transport, add_query_params
from pdum.vertex.types import (
    ConfigurationError,
    DeadlineExceededError,
    Endpoint,
    ImmutableFieldError,
    MalformedResponseError,
    NotFoundError,
    Operation,
)

logger = logging.getLogger(__name__)

COLLECTION_TEMPLATE = "projects/{project}/locations/{region}/endpoints"


class EndpointReconciler:
    """Converge remote Vertex AI endpoints to a desired local state.

    Args:
        config: Shared addressing context and defaults. Never mutated.
        transport: Object with a ``send`` method. Defaults to an
            ``HttpTransport`` authorized with ``config``'s credentials, built
            on first use so that no credentials are looked up before the
            addressing context has been validated.
        poller: Operation poller. Defaults to one built on ``transport``.
        clock: Monotonic clock used for deadlines. Defaults to the poller's.
    """

    def __init__(
        self,
        config: Config,
        transport: Optional[Transport] = None,
        poller: Optional[OperationPoller] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._poller = poller
        if clock is None:
            clock = poller.clock if poller is not None else time.monotonic
        self._clock = clock

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            self._transport = HttpTransport(self.config.get_credentials(), user_agent=self.config.user_agent)
        return self._transport

    @property
    def poller(self) -> OperationPoller:
        if self._poller is None:
            self._poller = OperationPoller(self.transport, self.config, clock=self._clock)
        return self._poller

    # -- entry points ---------------------------------------------------------

    def create(
        self,
        desired: Endpoint,
        *,
        project: Optional[str] = None,
        timeout: Optional[float] = None,
        explicitly_set: Optional[Iterable[str]] = None,
    ) -> Endpoint:
        """Create the endpoint and return its freshly read state.

        Raises:
            ConfigurationError: If the project or region cannot be resolved.
            APIError: If the create request is rejected.
            MalformedResponseError: If the finished operation names no endpoint.
            OperationError: If the create operation fails. No identity is adopted.
            DeadlineExceededError: If the call does not finish in time.
                The endpoint may still appear remotely later.
        """
        project = self.config.resolve_project(project or desired.project)
        region = self.config.resolve_region(desired.region)
        timeout = self.config.timeouts.create if timeout is None else timeout
        deadline = self._clock() + timeout

        body = planner.build_create_payload(desired, explicitly_set=explicitly_set).to_wire()
        url = self.config.base_url(region) + COLLECTION_TEMPLATE.format(project=project, region=region)

        logger.debug("Creating new Endpoint: %r", body)
        res = self.transport.send("POST", url, body, project=self._billing(project), timeout=timeout)

        # The endpoint name is server-assigned, so identity only exists once the operation reports it.
        operation = Operation.from_wire(res)
        op_res = self.poller.wait(
            operation,
            region=region,
            timeout=timeout,
            deadline=deadline,
            activity="Creating Endpoint",
            project=self._billing(project),
            fallback=lambda: _resource_from_operation_name(operation.name),
        )
        name = NAME.decode((op_res or {}).get("name"))
        if not name:
            raise MalformedResponseError(
                None, f"Creating Endpoint: operation {operation.name} carries no resource name"
            )

        created = replace(desired, name=name, project=project, region=region)
        logger.debug("Finished creating Endpoint %r", created.id)

        remaining = self._remaining(deadline, "Creating Endpoint", operation.name, timeout)
        endpoint = self.read(created, project=project, timeout=remaining)
        if endpoint is None:
            raise NotFoundError(f"Endpoint {created.id!r} disappeared right after creation")
        return endpoint

    def read(
        self,
        endpoint: Endpoint,
        *,
        project: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Optional[Endpoint]:
        """Fetch the endpoint's remote state.

        Returns:
            The decoded endpoint, or ``None`` if it no longer exists remotely
            (the caller should drop its local state).
        """
        project = self.config.resolve_project(project or endpoint.project)
        region = self._region_of(endpoint)
        url = self.config.base_url(region) + self._name_of(endpoint)
        timeout = self.config.timeouts.read if timeout is None else timeout

        try:
            res = self.transport.send("GET", url, project=self._billing(project), timeout=timeout)
        except NotFoundError:
            logger.warning("Removing VertexAIEndpoint %r because it's gone", endpoint.id)
            return None

        return decode_endpoint(res, project=project, region=region)

    def update(
        self,
        observed: Endpoint,
        desired: Endpoint,
        changed_fields: Optional[Iterable[str]] = None,
        *,
        project: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Endpoint:
        """Apply the mutable changes in ``desired`` and return the refreshed state.

        Args:
            observed: Last known state; provides the resource identity.
            desired: Target state.
            changed_fields: Attribute names that changed. Computed from
                ``observed`` and ``desired`` when omitted.
            project: Explicit project override.
            timeout: Seconds for the whole call (request, operation and read-back).

        Raises:
            ImmutableFieldError: If ``desired`` changes a field fixed at creation.
        """
        project = self.config.resolve_project(project or observed.project)
        if changed_fields is None:
            drift = planner.immutable_drift(observed, desired)
            if drift:
                raise ImmutableFieldError(drift, observed.id)
            changed_fields = planner.changed_fields(observed, desired)

        request = planner.build_update_payload(desired, changed_fields)
        if not request.update_mask:
            logger.debug("Endpoint %r is up to date", observed.id)
            return observed

        region = self._region_of(observed)
        timeout = self.config.timeouts.update if timeout is None else timeout
        deadline = self._clock() + timeout
        url = add_query_params(self.config.base_url(region) + self._name_of(observed), request.query_params())
        body = request.to_wire()

        logger.debug("Updating Endpoint %r: %r", observed.id, body)
        res = self.transport.send("PATCH", url, body, project=self._billing(project), timeout=timeout)
        logger.debug("Finished updating Endpoint %r: %r", observed.id, res)

        operation = Operation.from_wire(res)
        self.poller.wait(
            operation,
            region=region,
            timeout=timeout,
            deadline=deadline,
            activity="Updating Endpoint",
            project=self._billing(project),
        )

        remaining = self._remaining(deadline, "Updating Endpoint", operation.name, timeout)
        endpoint = self.read(observed, project=project, timeout=remaining)
        if endpoint is None:
            raise NotFoundError(f"Endpoint {observed.id!r} disappeared during update")
        return endpoint

    def delete(self, endpoint: Endpoint, *, project: Optional[str] = None, timeout: Optional[float] = None) -> None:
        """Delete the endpoint. Deleting an endpoint that is already gone succeeds."""
        project = self.config.resolve_project(project or endpoint.project)
        region = self._region_of(endpoint)
        timeout = self.config.timeouts.delete if timeout is None else timeout
        deadline = self._clock() + timeout
        url = self.config.base_url(region) + self._name_of(endpoint)

        logger.debug("Deleting Endpoint %r", endpoint.id)
        try:
            res = self.transport.send("DELETE", url, project=self._billing(project), timeout=timeout)
        except NotFoundError:
            logger.warning("Endpoint %r is already gone", endpoint.id)
            return

        self.poller.wait(
            Operation.from_wire(res),
            region=region,
            timeout=timeout,
            deadline=deadline,
            activity="Deleting Endpoint",
            project=self._billing(project),
        )
        logger.debug("Finished deleting Endpoint %r", endpoint.id)

    # -- helpers --------------------------------------------------------------

    def _remaining(self, deadline: float, activity: str, operation_name: str, timeout: float) -> float:
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise DeadlineExceededError(activity, operation_name, timeout)
        return remaining

    def _billing(self, project: str) -> Optional[str]:
        return self.config.billing_project_for(project)

    def _name_of(self, endpoint: Endpoint) -> str:
        if not endpoint.id:
            raise ConfigurationError("Endpoint has no resource name; it has not been created yet")
        return endpoint.full_resource_name()

    def _region_of(self, endpoint: Endpoint) -> str:
        return self.config.resolve_region(endpoint.location() or endpoint.region)


def _resource_from_operation_name(operation_name: str) -> Optional[dict]:
    """Recover ``{"name": ...}`` from ``projects/.../endpoints/{id}/operations/{op}``."""
    resource, sep, _ = operation_name.partition("/operations/")
    if not sep or "/endpoints/" not in resource:
        return None
    return {"name": resource}


__all__ = ["COLLECTION_TEMPLATE", "EndpointReconciler"]
