"""Build polling.

Provider deploy states are mapped onto the four deployment states and the
deploy is polled at a fixed interval until it is terminal or the timeout is
reached. Clock and sleep are injectable.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from src.hosting_client.hosting_api import HostingAPI

from .errors import BuildFailedError, BuildTimeoutError
from .models import DeploymentRecord, DeploymentState

logger = logging.getLogger(__name__)

POLL_INTERVAL = 5
POLL_TIMEOUT = 300

PROVIDER_STATES = {
    "new": DeploymentState.QUEUED,
    "pending_review": DeploymentState.QUEUED,
    "accepted": DeploymentState.QUEUED,
    "enqueued": DeploymentState.QUEUED,
    "uploading": DeploymentState.BUILDING,
    "uploaded": DeploymentState.BUILDING,
    "preparing": DeploymentState.BUILDING,
    "prepared": DeploymentState.BUILDING,
    "processing": DeploymentState.BUILDING,
    "processed": DeploymentState.BUILDING,
    "building": DeploymentState.BUILDING,
    "ready": DeploymentState.READY,
    "error": DeploymentState.ERROR,
    "failed": DeploymentState.ERROR,
    "rejected": DeploymentState.ERROR,
    "cancelled": DeploymentState.ERROR,
}


def map_provider_state(provider_state: Optional[str]) -> DeploymentState:
    """Map a provider deploy state; unknown states count as building."""
    return PROVIDER_STATES.get((provider_state or "").lower(), DeploymentState.BUILDING)


class BuildPoller:
    """Polls a deploy until it is ready.

    Example:
        >>> poller = BuildPoller(api, interval=5, timeout=300)
        >>> deploy = poller.wait("deploy-1", record)
    """

    def __init__(
        self,
        api: HostingAPI,
        interval: float = POLL_INTERVAL,
        timeout: float = POLL_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api = api
        self.interval = interval
        self.timeout = timeout
        self._clock = clock
        self._sleep = sleep

    def wait(self, deploy_id: str, record: DeploymentRecord,
             initial: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Poll until the deploy is ready.

        Args:
            deploy_id: Provider deploy id
            record: Attempt record, advanced as states are observed
            initial: Deploy payload already in hand (skips the first fetch)

        Returns:
            Final deploy payload

        Raises:
            BuildFailedError: If the provider reports an error state
            BuildTimeoutError: If no terminal state is reached in time
        """
        started = self._clock()
        deploy = initial
        provider_state = None

        while True:
            if deploy is None:
                deploy = self.api.get_deploy(deploy_id)
            provider_state = deploy.get("state")
            state = map_provider_state(provider_state)
            record.advance(state, datetime.now(timezone.utc))
            logger.debug(f"Deploy {deploy_id}: {provider_state} -> {state.value}")

            if state is DeploymentState.READY:
                return deploy
            if state is DeploymentState.ERROR:
                raise BuildFailedError(deploy_id, deploy.get("error_message"))

            elapsed = self._clock() - started
            if elapsed >= self.timeout:
                raise BuildTimeoutError(deploy_id, self.timeout, provider_state)

            self._sleep(min(self.interval, max(self.timeout - elapsed, 0)))
            deploy = None
