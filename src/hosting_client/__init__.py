"""Hosting provider client module.

Provides credential loading, a requests-based REST client for the hosting
API, retry logic with a shared per-attempt budget, and typed errors.
"""

from .auth import Authenticator, Credentials
from .errors import (
    HostingError,
    NetworkError,
    HostApiError,
    InvalidCredentialsError,
    SiteNotFoundError,
)
from .hosting_api import HostingAPI, sanitize_credentials
from .retry_logic import RetryBudget, retry_on_transient

__all__ = [
    "Authenticator",
    "Credentials",
    "HostingError",
    "NetworkError",
    "HostApiError",
    "InvalidCredentialsError",
    "SiteNotFoundError",
    "HostingAPI",
    "sanitize_credentials",
    "RetryBudget",
    "retry_on_transient",
]
