"""Typed exception hierarchy for hosting provider errors.

All exceptions inherit from HostingError, itself a SitePublishError, and
carry the context needed to report a failure without re-reading logs.
"""

from typing import Optional

from src.page_model.errors import SitePublishError


class HostingError(SitePublishError):
    """Base exception for all hosting provider errors."""
    pass


class NetworkError(HostingError):
    """Raised for transient failures: connection problems, timeouts, 5xx and 429.

    Transient failures are retried; this exception reaches callers once the
    retry budget of the deployment attempt is spent.
    """

    def __init__(self, message: str, endpoint: Optional[str] = None,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


class HostApiError(HostingError):
    """Raised for non-retryable client errors (4xx other than 429).

    The provider's message is kept verbatim in host_message.
    """

    def __init__(self, status_code: int, host_message: str, endpoint: Optional[str] = None):
        super().__init__(f"Hosting API error {status_code}: {host_message}")
        self.status_code = status_code
        self.host_message = host_message
        self.endpoint = endpoint


class InvalidCredentialsError(HostApiError):
    """Raised when the API token is missing or rejected."""

    def __init__(self, endpoint: str, host_message: str = "API token is missing or invalid"):
        super().__init__(401, host_message, endpoint)


class SiteNotFoundError(HostApiError):
    """Raised when a site id does not exist on the provider."""

    def __init__(self, site_id: str, host_message: str = "Not Found"):
        super().__init__(404, host_message, f"/sites/{site_id}")
        self.site_id = site_id
