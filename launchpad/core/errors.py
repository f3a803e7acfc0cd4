"""Dashboard error taxonomy.

Every error the services raise is a DashboardError carrying the message to
show the user and the HTTP status class the API should answer with.
"""

from typing import Optional


class DashboardError(Exception):
    """Base class for all errors surfaced to the dashboard."""

    status_code = 500
    retryable = False

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(DashboardError):
    """A required credential is missing."""

    status_code = 500


class ValidationError(DashboardError):
    """Caller input violates a known constraint."""

    status_code = 400


class NotFound(DashboardError):
    status_code = 404


class Conflict(DashboardError):
    """Name collision, stale content hash, or invalid state transition."""

    status_code = 409


class UpstreamError(DashboardError):
    """Upstream unreachable, malformed, or failed without a domain meaning."""

    status_code = 502
    retryable = True

    def __init__(self, message: str = "", *, upstream_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
