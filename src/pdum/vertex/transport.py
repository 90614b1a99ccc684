"""HTTP transport for the Vertex AI REST API.

The reconciler only depends on the :class:`Transport` protocol, so tests and
callers with their own HTTP stack can substitute any object with a matching
``send`` method. :class:`HttpTransport` is the default, built on
``google.auth.transport.requests.AuthorizedSession``. It does not retry:
requests are issued exactly once.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol
from urllib.parse import urlencode, urlsplit, urlunsplit

import requests
from google.auth.credentials import Credentials
from google.auth.transport.requests import AuthorizedSession

from pdum.vertex.types import APIError, MalformedResponseError, NotFoundError, TransportError

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def send(
        self,
        method: str,
        url: str,
        body: Optional[dict[str, Any]] = None,
        *,
        project: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """Issue one request and return the decoded JSON body.

        Raises ``NotFoundError`` for 404, ``APIError`` for other non-2xx
        statuses, and ``TransportError`` when no response was received.
        """
        ...


def authorized_session(credentials: Credentials) -> AuthorizedSession:
    """Requests session that attaches (and refreshes) OAuth tokens."""
    return AuthorizedSession(credentials)


class HttpTransport:
    """Transport backed by an authorized ``requests`` session.

    Args:
        credentials: Credentials used to authorize every request.
        user_agent: Value of the ``User-Agent`` header.
        session: Pre-built session, mostly for tests. Overrides ``credentials``.
    """

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        *,
        user_agent: str = "",
        session: Optional[requests.Session] = None,
    ) -> None:
        if session is None:
            if credentials is None:
                raise ValueError("HttpTransport needs either credentials or a session")
            session = authorized_session(credentials)
        self._session = session
        self._user_agent = user_agent

    def send(
        self,
        method: str,
        url: str,
        body: Optional[dict[str, Any]] = None,
        *,
        project: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if self._user_agent:
            headers["User-Agent"] = self._user_agent
        if project:
            headers["X-Goog-User-Project"] = project

        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(method, url, json=body, headers=headers, timeout=timeout)
        except requests.RequestException as e:
            raise TransportError(f"{method} {url}: {e}") from e

        if response.status_code >= 400:
            raise error_from_response(response)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(response.status_code, response.text) from e


def error_from_response(response: requests.Response) -> APIError:
    """Translate a non-2xx response into ``APIError`` / ``NotFoundError``.

    Google APIs report errors as ``{"error": {"code", "message", "status"}}``;
    anything else is carried through as raw text.
    """
    message = response.text
    reason = ""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        err = payload["error"]
        message = err.get("message", message)
        reason = err.get("status", "")

    if response.status_code == 404:
        return NotFoundError(message, reason or "NOT_FOUND")
    return APIError(response.status_code, message, reason)


def add_query_params(url: str, params: dict[str, str]) -> str:
    """Append ``params`` to the query string of ``url``."""
    scheme, netloc, path, query, fragment = urlsplit(url)
    extra = urlencode(params)
    query = f"{query}&{extra}" if query else extra
    return urlunsplit((scheme, netloc, path, query, fragment))


__all__ = ["HttpTransport", "Transport", "add_query_params", "authorized_session", "error_from_response"]
