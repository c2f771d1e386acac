"""Unit tests for deployment.models module."""

from datetime import datetime, timezone

import pytest

from src.deployment.errors import InvalidTransitionError
from src.deployment.models import (
    DeploymentRecord,
    DeploymentState,
    ErrorKind,
    PublishOutcome,
    PublishResult,
    StrategyKind,
)

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _record(**kwargs) -> DeploymentRecord:
    return DeploymentRecord(
        attempt_id="a1",
        page_id="landing-1",
        strategy=kwargs.pop("strategy", StrategyKind.DIRECT_UPLOAD),
        created_at=NOW,
        **kwargs,
    )


class TestDeploymentRecord:
    """Test cases for DeploymentRecord state transitions."""

    def test_starts_queued(self):
        assert _record().state is DeploymentState.QUEUED

    def test_forward_transitions(self):
        record = _record()

        record.transition(DeploymentState.BUILDING)
        record.transition(DeploymentState.READY, NOW)

        assert record.state is DeploymentState.READY
        assert record.updated_at == NOW

    def test_queued_may_jump_to_terminal(self):
        record = _record()
        record.transition(DeploymentState.ERROR)
        assert record.state is DeploymentState.ERROR

    def test_backward_transition_raises(self):
        record = _record()
        record.transition(DeploymentState.BUILDING)

        with pytest.raises(InvalidTransitionError) as exc_info:
            record.transition(DeploymentState.QUEUED)

        assert exc_info.value.current == "building"
        assert exc_info.value.requested == "queued"

    def test_terminal_states_are_final(self):
        record = _record()
        record.transition(DeploymentState.READY)
        with pytest.raises(InvalidTransitionError):
            record.transition(DeploymentState.ERROR)

    def test_same_state_is_a_no_op(self):
        record = _record()
        record.transition(DeploymentState.QUEUED)
        assert record.state is DeploymentState.QUEUED

    def test_advance_ignores_stale_states(self):
        record = _record()
        record.advance(DeploymentState.BUILDING)

        record.advance(DeploymentState.QUEUED)

        assert record.state is DeploymentState.BUILDING

    def test_fail_records_error(self):
        record = _record()

        record.fail(ErrorKind.NETWORK, "HTTP 503", NOW)

        assert record.state is DeploymentState.ERROR
        assert record.error_kind is ErrorKind.NETWORK
        assert record.error_message == "HTTP 503"

    def test_fail_after_ready_keeps_state(self):
        record = _record()
        record.transition(DeploymentState.READY)

        record.fail(ErrorKind.LOCAL, "late problem")

        assert record.state is DeploymentState.READY
        assert record.error_kind is ErrorKind.LOCAL


class TestStrategyKind:
    """Test cases for StrategyKind."""

    def test_only_manual_archive_is_local(self):
        assert StrategyKind.ARCHIVE_BUILD.is_remote is True
        assert StrategyKind.DIRECT_UPLOAD.is_remote is True
        assert StrategyKind.MANUAL_ARCHIVE.is_remote is False


class TestPublishResult:
    """Test cases for PublishResult."""

    def test_empty_result(self):
        result = PublishResult(page_id="landing-1", outcome=PublishOutcome.FAILED)

        assert result.success is False
        assert result.strategy is None
        assert result.error_message is None

    def test_strategy_and_error_come_from_records(self):
        failed = _record(strategy=StrategyKind.ARCHIVE_BUILD)
        failed.fail(ErrorKind.HOST_API, "Archive builds are disabled")
        succeeded = _record(strategy=StrategyKind.DIRECT_UPLOAD)
        result = PublishResult(page_id="landing-1", outcome=PublishOutcome.PUBLISHED,
                               records=[failed, succeeded])

        assert result.success is True
        assert result.strategy is StrategyKind.DIRECT_UPLOAD
        assert result.error_message == "Archive builds are disabled"
