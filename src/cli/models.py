"""Data models for CLI operations.

This module defines the exit codes and the project configuration used by
the site-publish command.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

from src.deployment.models import DEFAULT_STRATEGY_ORDER, StrategyKind
from src.deployment.poller import POLL_INTERVAL, POLL_TIMEOUT
from src.deployment.strategies import MAX_WORKERS
from src.hosting_client.auth import DEFAULT_SITE_SUFFIX


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    These exit codes provide meaningful feedback about the operation result:
    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): General error (config issues, store failures)
    - VALIDATION_ERROR (2): Page model is malformed, nothing was sent
    - AUTH_ERROR (3): Hosting API token missing or rejected
    - NETWORK_ERROR (4): Network connectivity or API availability issues
    - DEPLOY_PENDING (5): Build still running or archive left for manual upload

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    VALIDATION_ERROR = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4
    DEPLOY_PENDING = 5


@dataclass
class PublishConfig:
    """Project configuration loaded from .site-publish/config.yaml.

    Attributes:
        store_path: YAML page store file
        output_dir: Directory for exported sites and manual-upload archives
        strategies: Deployment strategy fallback chain, in order
        poll_interval: Seconds between build status polls
        poll_timeout: Seconds before a running build is reported as pending
        max_upload_workers: Thread pool size for direct file uploads
        checkout_fields_url: Endpoint the page runtime loads checkout fields from
        site_url_suffix: Domain suffix of provider-hosted site URLs

    Example:
        >>> config = PublishConfig(store_path="pages.yaml")
        >>> config.strategies[0]
        <StrategyKind.ARCHIVE_BUILD: 'archive_build'>
    """
    store_path: str = "pages.yaml"
    output_dir: str = "dist"
    strategies: List[StrategyKind] = field(default_factory=lambda: list(DEFAULT_STRATEGY_ORDER))
    poll_interval: float = POLL_INTERVAL
    poll_timeout: float = POLL_TIMEOUT
    max_upload_workers: int = MAX_WORKERS
    checkout_fields_url: Optional[str] = None
    site_url_suffix: str = DEFAULT_SITE_SUFFIX
