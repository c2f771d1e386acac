"""Data models for deployment attempts and publish results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .errors import InvalidTransitionError


class DeploymentState(Enum):
    """State of one deployment attempt."""

    QUEUED = "queued"
    BUILDING = "building"
    READY = "ready"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (DeploymentState.READY, DeploymentState.ERROR)


ALLOWED_TRANSITIONS = {
    DeploymentState.QUEUED: {DeploymentState.BUILDING, DeploymentState.READY, DeploymentState.ERROR},
    DeploymentState.BUILDING: {DeploymentState.READY, DeploymentState.ERROR},
    DeploymentState.READY: set(),
    DeploymentState.ERROR: set(),
}


class StrategyKind(Enum):
    """Deployment strategies, in the order of the default fallback chain."""

    ARCHIVE_BUILD = "archive_build"
    DIRECT_UPLOAD = "direct_upload"
    MANUAL_ARCHIVE = "manual_archive"

    @property
    def is_remote(self) -> bool:
        return self is not StrategyKind.MANUAL_ARCHIVE


DEFAULT_STRATEGY_ORDER = (
    StrategyKind.ARCHIVE_BUILD,
    StrategyKind.DIRECT_UPLOAD,
    StrategyKind.MANUAL_ARCHIVE,
)


class ErrorKind(Enum):
    """Classification of a failed attempt."""

    NETWORK = "network"
    HOST_API = "host_api"
    BUILD_FAILED = "build_failed"
    BUILD_TIMEOUT = "build_timeout"
    LOCAL = "local"


class PublishOutcome(Enum):
    """Overall result of a publish."""

    PUBLISHED = "published"
    PENDING = "pending"
    MANUAL = "manual"
    FAILED = "failed"


@dataclass
class DeploymentRecord:
    """One deployment attempt with one strategy.

    States only move forward (queued -> building -> ready|error, or
    queued -> ready|error). A retry is a new record.
    """
    attempt_id: str
    page_id: str
    strategy: StrategyKind
    created_at: datetime
    site_id: Optional[str] = None
    state: DeploymentState = DeploymentState.QUEUED
    updated_at: Optional[datetime] = None
    deploy_id: Optional[str] = None
    url: Optional[str] = None
    archive_path: Optional[Path] = None
    uploaded_files: int = 0
    uploaded_bytes: int = 0
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None

    def transition(self, state: DeploymentState, at: Optional[datetime] = None) -> None:
        """Move to a new state.

        Raises:
            InvalidTransitionError: If the move is not forward
        """
        if state is self.state:
            return
        if state not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransitionError(self.state.value, state.value)
        self.state = state
        self.updated_at = at or self.updated_at

    def advance(self, state: DeploymentState, at: Optional[datetime] = None) -> None:
        """Like transition, but ignore stale reports that would move backwards."""
        if state in ALLOWED_TRANSITIONS[self.state]:
            self.transition(state, at)

    def fail(self, kind: ErrorKind, message: str, at: Optional[datetime] = None) -> None:
        self.error_kind = kind
        self.error_message = message
        if not self.state.is_terminal:
            self.transition(DeploymentState.ERROR, at)


@dataclass
class PublishResult:
    """Result of deploy(page_id).

    Attributes:
        page_id: Published page
        outcome: published, pending (build still running), manual (archive
            produced for manual upload) or failed
        site_id: Remote site the page was deployed to, when one was reached
        url: Public URL on success
        deployed_at: Time of the successful publish
        deploy_id: Provider deploy id of the last remote attempt
        archive_path: Manual-upload archive, when produced
        records: Every attempt made, in order
        diagnostics: Recovered problems worth reporting
    """
    page_id: str
    outcome: PublishOutcome
    site_id: Optional[str] = None
    url: Optional[str] = None
    deployed_at: Optional[datetime] = None
    deploy_id: Optional[str] = None
    archive_path: Optional[Path] = None
    records: List[DeploymentRecord] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.outcome is PublishOutcome.PUBLISHED

    @property
    def strategy(self) -> Optional[StrategyKind]:
        return self.records[-1].strategy if self.records else None

    @property
    def error_message(self) -> Optional[str]:
        for record in reversed(self.records):
            if record.error_message:
                return record.error_message
        return None


@dataclass
class DeploymentStatus:
    """Deployment status of a page as recorded in the store."""
    page_id: str
    status: str
    is_deployed: bool
    site_id: Optional[str] = None
    url: Optional[str] = None
    last_deployed_at: Optional[str] = None
