"""Process-wide configuration for reconciling Vertex AI endpoints."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

import google.auth
import google.auth.exceptions
from google.auth.credentials import Credentials

from pdum.vertex.types import ConfigurationError

DEFAULT_BASE_PATH = "https://{region}-aiplatform.googleapis.com/v1/"

_PROJECT_ENV_VARS = ("GOOGLE_CLOUD_PROJECT", "GOOGLE_PROJECT", "CLOUDSDK_CORE_PROJECT")
_REGION_ENV_VARS = ("GOOGLE_CLOUD_REGION", "GOOGLE_REGION", "CLOUDSDK_COMPUTE_REGION")


@dataclass(frozen=True)
class Timeouts:
    """Per-operation deadlines in seconds."""

    create: float = 6 * 60.0
    update: float = 6 * 60.0
    delete: float = 10 * 60.0
    read: float = 60.0


def _default_user_agent() -> str:
    from pdum.vertex import __version__

    return f"pdum-vertex/{__version__}"


@dataclass(frozen=True)
class Config:
    """Addressing context and client options shared by every reconcile call.

    The reconciler reads this object but never mutates it; per-call values
    (an explicit project, a timeout) are passed as arguments instead.

    Attributes
    ----------
    project : str, optional
        Default project used when neither the call nor the endpoint names one.
    region : str, optional
        Default region used when the endpoint does not name one.
    credentials : Credentials, optional
        Explicit credentials. When omitted, Application Default Credentials are used.
    billing_project : str, optional
        Project billed for requests when ``user_project_override`` is set.
    user_project_override : bool
        Send the ``X-Goog-User-Project`` header (billing project, else the resolved project).
    base_path : str
        API base URL; ``{region}`` is substituted per request.
    user_agent : str
        Value of the ``User-Agent`` header.
    timeouts : Timeouts
        Default create/update/delete/read deadlines.
    """

    project: Optional[str] = None
    region: Optional[str] = None
    credentials: Optional[Credentials] = field(default=None, repr=False, compare=False)
    billing_project: Optional[str] = None
    user_project_override: bool = False
    base_path: str = DEFAULT_BASE_PATH
    user_agent: str = field(default_factory=_default_user_agent)
    timeouts: Timeouts = field(default_factory=Timeouts)

    @classmethod
    def from_environment(cls, **overrides) -> "Config":
        """Build a config from environment variables, falling back to ADC for the project.

        The project is determined from (first match wins):
        1. ``project`` in ``overrides``
        2. ``GOOGLE_CLOUD_PROJECT``, ``GOOGLE_PROJECT`` or ``CLOUDSDK_CORE_PROJECT``
        3. Application Default Credentials (``google.auth.default()``)

        The region comes from ``overrides`` or ``GOOGLE_CLOUD_REGION``,
        ``GOOGLE_REGION`` or ``CLOUDSDK_COMPUTE_REGION``.

        A missing project is not an error here; it surfaces as
        ``ConfigurationError`` when a reconcile call needs it.
        """
        values = {k: v for k, v in overrides.items() if v is not None}

        if "project" not in values:
            project = _first_env(_PROJECT_ENV_VARS)
            if project is None:
                try:
                    credentials, project = google.auth.default()
                except google.auth.exceptions.DefaultCredentialsError:
                    credentials, project = None, None
                if credentials is not None and "credentials" not in values:
                    values["credentials"] = credentials
            if project:
                values["project"] = project

        if "region" not in values:
            region = _first_env(_REGION_ENV_VARS)
            if region:
                values["region"] = region

        return cls(**values)

    def resolve_project(self, override: Optional[str] = None) -> str:
        """Return the project to address (explicit override > config default).

        Raises:
            ConfigurationError: If neither is set.
        """
        project = override or self.project
        if not project:
            raise ConfigurationError(
                "No project could be determined. Pass a project explicitly, set it on the endpoint, "
                "set GOOGLE_CLOUD_PROJECT, or configure Application Default Credentials with a default project."
            )
        return project

    def resolve_region(self, override: Optional[str] = None) -> str:
        region = override or self.region
        if not region:
            raise ConfigurationError(
                "No region could be determined. Set it on the endpoint or set GOOGLE_CLOUD_REGION."
            )
        return region

    def billing_project_for(self, project: str) -> Optional[str]:
        """Project to send as ``X-Goog-User-Project``, or ``None`` when not overriding."""
        if not self.user_project_override:
            return None
        return self.billing_project or project

    def base_url(self, region: str) -> str:
        return self.base_path.format(region=region)

    def get_credentials(self) -> Credentials:
        """Get credentials for API calls (explicit > ADC)."""
        if self.credentials is not None:
            return self.credentials
        creds, _ = google.auth.default(scopes=["https://www.googleapis.com/auth/cloud-platform"])
        return creds


def _first_env(names: tuple[str, ...]) -> Optional[str]:
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return None


__all__ = ["Config", "DEFAULT_BASE_PATH", "Timeouts"]
