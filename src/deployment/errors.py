"""Exceptions raised by the deployment orchestrator."""

from typing import Optional

from src.page_model.errors import SitePublishError


class DeploymentError(SitePublishError):
    """Base exception for deployment problems."""
    pass


class BuildTimeoutError(DeploymentError):
    """Raised when a build does not reach a terminal state within the poll bound.

    This is not a failure of the build: it is still running and the caller
    should check again later.
    """

    def __init__(self, deploy_id: str, timeout: float, last_state: Optional[str] = None):
        super().__init__(
            f"Build {deploy_id} still running after {timeout:g}s "
            f"(last state: {last_state or 'unknown'}); check again later"
        )
        self.deploy_id = deploy_id
        self.timeout = timeout
        self.last_state = last_state


class BuildFailedError(DeploymentError):
    """Raised when the provider reports a build as failed."""

    def __init__(self, deploy_id: str, message: Optional[str] = None):
        super().__init__(f"Build {deploy_id} failed: {message or 'no error message from provider'}")
        self.deploy_id = deploy_id
        self.provider_message = message


class InvalidTransitionError(DeploymentError):
    """Raised when a deployment record is moved backwards."""

    def __init__(self, current: str, requested: str):
        super().__init__(f"Invalid deployment state transition: {current} -> {requested}")
        self.current = current
        self.requested = requested
