"""Root pytest configuration for all tests.

Shared fixtures: credentials, a HostingAPI wired to the in-memory fake
provider, and a patch that turns retry backoff into a no-op.
"""

import logging
from unittest.mock import Mock, patch

import pytest

from src.hosting_client.auth import Authenticator, Credentials
from src.hosting_client.hosting_api import HostingAPI
from tests.fixtures.fake_hosting import FakeHostingProvider

# Keep third-party HTTP logging quiet in test output
logging.getLogger("urllib3").setLevel(logging.WARNING)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(url="https://api.netlify.com/api/v1", api_token="test-token-123")


@pytest.fixture
def mock_authenticator(credentials):
    """Authenticator returning fixed credentials without touching the environment."""
    auth = Mock(spec=Authenticator)
    auth.get_credentials.return_value = credentials
    return auth


@pytest.fixture
def fake_provider() -> FakeHostingProvider:
    return FakeHostingProvider()


@pytest.fixture
def hosting_api(mock_authenticator, fake_provider) -> HostingAPI:
    return HostingAPI(mock_authenticator, session=fake_provider)


@pytest.fixture
def no_backoff():
    """Patch the retry sleep; yields the mock to inspect the waits."""
    with patch('src.hosting_client.retry_logic.time.sleep') as mock_sleep:
        yield mock_sleep
