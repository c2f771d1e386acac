"""Unit tests for deployment.poller module."""

import itertools
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from src.deployment.errors import BuildFailedError, BuildTimeoutError
from src.deployment.models import DeploymentRecord, DeploymentState, StrategyKind
from src.deployment.poller import BuildPoller, map_provider_state


def _record() -> DeploymentRecord:
    return DeploymentRecord(attempt_id="a1", page_id="landing-1",
                            strategy=StrategyKind.ARCHIVE_BUILD,
                            created_at=datetime(2024, 6, 1, tzinfo=timezone.utc))


def _poller(api, timeout=10, interval=5):
    sleeps = []
    poller = BuildPoller(api, interval=interval, timeout=timeout,
                         clock=itertools.count(0, interval).__next__, sleep=sleeps.append)
    return poller, sleeps


class TestMapProviderState:
    """Test cases for map_provider_state."""

    @pytest.mark.parametrize("provider_state,expected", [
        ("new", DeploymentState.QUEUED),
        ("enqueued", DeploymentState.QUEUED),
        ("uploading", DeploymentState.BUILDING),
        ("building", DeploymentState.BUILDING),
        ("READY", DeploymentState.READY),
        ("error", DeploymentState.ERROR),
        ("rejected", DeploymentState.ERROR),
        ("something-new", DeploymentState.BUILDING),
        (None, DeploymentState.BUILDING),
    ])
    def test_mapping(self, provider_state, expected):
        assert map_provider_state(provider_state) is expected


class TestBuildPoller:
    """Test cases for BuildPoller.wait."""

    def test_initial_ready_deploy_needs_no_fetch(self):
        api = Mock()
        poller, sleeps = _poller(api)
        record = _record()

        deploy = poller.wait("d1", record, initial={"id": "d1", "state": "ready"})

        assert deploy["state"] == "ready"
        assert record.state is DeploymentState.READY
        api.get_deploy.assert_not_called()
        assert sleeps == []

    def test_polls_until_ready(self):
        api = Mock()
        api.get_deploy.side_effect = [
            {"id": "d1", "state": "enqueued"},
            {"id": "d1", "state": "building"},
            {"id": "d1", "state": "ready", "ssl_url": "https://x.netlify.app"},
        ]
        poller, sleeps = _poller(api, timeout=60)
        record = _record()

        deploy = poller.wait("d1", record)

        assert deploy["ssl_url"] == "https://x.netlify.app"
        assert api.get_deploy.call_count == 3
        assert sleeps == [5, 5]
        assert record.state is DeploymentState.READY

    def test_error_state_raises_build_failed(self):
        api = Mock()
        api.get_deploy.return_value = {"id": "d1", "state": "error", "error_message": "Build script returned 2"}
        poller, _ = _poller(api)
        record = _record()

        with pytest.raises(BuildFailedError, match="Build script returned 2") as exc_info:
            poller.wait("d1", record)

        assert exc_info.value.deploy_id == "d1"
        assert record.state is DeploymentState.ERROR

    def test_timeout_raises_build_timeout(self):
        """A build still running at the poll bound is reported, not failed."""
        api = Mock()
        api.get_deploy.return_value = {"id": "d1", "state": "building"}
        poller, sleeps = _poller(api, timeout=10)
        record = _record()

        with pytest.raises(BuildTimeoutError) as exc_info:
            poller.wait("d1", record)

        assert exc_info.value.last_state == "building"
        assert exc_info.value.timeout == 10
        assert "check again later" in str(exc_info.value)
        assert record.state is DeploymentState.BUILDING
        assert sleeps == [5]

    def test_sleep_never_overshoots_timeout(self):
        api = Mock()
        api.get_deploy.return_value = {"id": "d1", "state": "building"}
        sleeps = []
        clock = iter([0, 8, 10]).__next__
        poller = BuildPoller(api, interval=5, timeout=10, clock=clock, sleep=sleeps.append)

        with pytest.raises(BuildTimeoutError):
            poller.wait("d1", _record())

        assert sleeps == [2]
