"""Credential loading for the hosting API.

Credentials come from environment variables, optionally via a .env file
loaded with python-dotenv. They are never cached or logged.
"""

import os
from typing import NamedTuple

from dotenv import load_dotenv

from .errors import InvalidCredentialsError

DEFAULT_API_URL = "https://api.netlify.com/api/v1"
DEFAULT_SITE_SUFFIX = "netlify.app"


class Credentials(NamedTuple):
    """Hosting API credentials."""
    url: str
    api_token: str


class Authenticator:
    """Loads and validates hosting credentials from environment variables.

    Environment variables:
        HOSTING_API_TOKEN: Personal access token (required)
        HOSTING_API_URL: API base URL (defaults to the Netlify v1 API)

    Example:
        >>> creds = Authenticator().get_credentials()
        >>> creds.url
        'https://api.netlify.com/api/v1'
    """

    def __init__(self):
        load_dotenv()

    def get_credentials(self) -> Credentials:
        """Get hosting credentials from environment variables.

        Raises:
            InvalidCredentialsError: If HOSTING_API_TOKEN is not set
        """
        url = os.getenv("HOSTING_API_URL") or DEFAULT_API_URL
        api_token = os.getenv("HOSTING_API_TOKEN")
        if not api_token or not api_token.strip():
            raise InvalidCredentialsError(
                endpoint=url,
                host_message="HOSTING_API_TOKEN is not set"
            )
        return Credentials(url=url.rstrip("/"), api_token=api_token.strip())
