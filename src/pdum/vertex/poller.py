"""Wait for Vertex AI long-running operations to finish."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterator, Optional

import backoff

from pdum.vertex.config import Config
from pdum.vertex.transport import Transport
from pdum.vertex.types import APIError, DeadlineExceededError, MalformedResponseError, Operation, OperationError

logger = logging.getLogger(__name__)


class OperationPoller:
    """Poll an operation until it is done, with bounded exponential backoff.

    The delay between status checks grows from ``initial_delay`` by a factor
    of two up to ``max_delay``, and is always clipped so that no check is
    issued after the deadline. ``clock`` and ``sleep`` can be replaced, which
    is how the tests drive the loop without real waiting.
    """

    def __init__(
        self,
        transport: Transport,
        config: Config,
        *,
        initial_delay: float = 1.0,
        max_delay: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._transport = transport
        self._config = config
        self._initial_delay = initial_delay
        self._max_delay = max_delay
        self.clock = clock
        self._sleep = sleep

    def _delays(self) -> Iterator[float]:
        delays = backoff.expo(factor=self._initial_delay, max_value=self._max_delay)
        next(delays)  # wait generators yield once before the first delay
        return delays

    def refresh(self, operation: Operation, *, region: str, project: Optional[str], timeout: float) -> Operation:
        """Fetch the current status of ``operation``."""
        url = f"{self._config.base_url(region)}{operation.name}"
        return Operation.from_wire(self._transport.send("GET", url, project=project, timeout=timeout))

    def wait(
        self,
        operation: Operation,
        *,
        region: str,
        timeout: float,
        activity: str,
        project: Optional[str] = None,
        fallback: Optional[Callable[[], Optional[dict[str, Any]]]] = None,
        deadline: Optional[float] = None,
    ) -> Optional[dict[str, Any]]:
        """Block until ``operation`` is done and return its embedded resource.

        Parameters
        ----------
        operation : Operation
            Operation returned by a mutating call.
        region : str
            Region whose regional API endpoint serves the operation.
        timeout : float
            Seconds to wait before giving up.
        activity : str
            Human-readable description used in errors and logs (e.g. ``"Creating Endpoint"``).
        project : str, optional
            Billing project sent with status checks.
        fallback : callable, optional
            Called for the final resource when the finished operation embeds none.
        deadline : float, optional
            Absolute ``clock()`` time to give up at, when the wait is one step of
            a call that already started spending ``timeout``. Defaults to now
            plus ``timeout``.

        Returns
        -------
        dict or None
            The embedded resource, the fallback's result, or ``None``.

        Raises
        ------
        OperationError
            If the operation finished with an error.
        MalformedResponseError
            If an unfinished operation carries no name to poll.
        DeadlineExceededError
            If the operation is still running at the deadline. The remote
            action may still complete afterwards.
        APIError
            If a status check fails with a non-transient error.
        """
        if deadline is None:
            deadline = self.clock() + timeout
        delays = self._delays()

        if not operation.done and not operation.name:
            raise MalformedResponseError(None, f"{activity}: API returned an unfinished operation without a name")

        while not operation.done:
            remaining = deadline - self.clock()
            if remaining <= 0:
                raise DeadlineExceededError(activity, operation.name, timeout)
            self._sleep(min(next(delays), remaining))

            remaining = deadline - self.clock()
            if remaining <= 0:
                raise DeadlineExceededError(activity, operation.name, timeout)
            try:
                operation = self.refresh(operation, region=region, project=project, timeout=remaining)
            except APIError as e:
                if not e.transient:
                    raise
                logger.debug("%s: transient error polling %s, retrying: %s", activity, operation.name, e)
                continue
            logger.debug("%s: operation %s done=%s", activity, operation.name, operation.done)

        if operation.failed:
            error = operation.error or {}
            raise OperationError(activity, operation.name, error.get("code"), error.get("message", "Unknown error"))

        if operation.response is None and fallback is not None:
            return fallback()
        return operation.response


__all__ = ["OperationPoller"]
