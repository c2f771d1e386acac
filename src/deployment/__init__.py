"""Deployment orchestration module.

Publishes assembled pages to the hosting provider through an ordered chain
of strategies (server-side archive build, content-addressed direct upload,
manual-upload archive) with shared retry budgets, build polling, failure
isolation and store write-back.
"""

from .errors import BuildFailedError, BuildTimeoutError, DeploymentError, InvalidTransitionError
from .models import (
    DEFAULT_STRATEGY_ORDER,
    DeploymentRecord,
    DeploymentState,
    DeploymentStatus,
    ErrorKind,
    PublishOutcome,
    PublishResult,
    StrategyKind,
)
from .orchestrator import DeploymentOrchestrator
from .poller import BuildPoller, map_provider_state
from .site_naming import fallback_site_name, normalize_site_name, site_name_for
from .strategies import ArchiveBuildStrategy, DirectUploadStrategy, ManualArchiveStrategy

__all__ = [
    "BuildFailedError",
    "BuildTimeoutError",
    "DeploymentError",
    "InvalidTransitionError",
    "DEFAULT_STRATEGY_ORDER",
    "DeploymentRecord",
    "DeploymentState",
    "DeploymentStatus",
    "ErrorKind",
    "PublishOutcome",
    "PublishResult",
    "StrategyKind",
    "DeploymentOrchestrator",
    "BuildPoller",
    "map_provider_state",
    "fallback_site_name",
    "normalize_site_name",
    "site_name_for",
    "ArchiveBuildStrategy",
    "DirectUploadStrategy",
    "ManualArchiveStrategy",
]
