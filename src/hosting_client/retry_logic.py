"""Retry logic with exponential backoff for transient hosting API failures.

Transient failures (NetworkError: connection errors, timeouts, 5xx and 429)
are retried with 1s, 2s, 4s waits. Every other error fails fast.

A RetryBudget can be shared by all calls of one deployment attempt, so the
attempt as a whole never waits more than three times. The budget is
thread-safe because file uploads run on a thread pool.
"""

import logging
import threading
import time
from typing import Callable, List, Optional, TypeVar

from .errors import NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 3
BASE_DELAY = 1


class RetryBudget:
    """Retry allowance shared across the calls of one deployment attempt.

    Attributes:
        max_retries: Retries allowed in total
        base_delay: First wait in seconds; each retry doubles it
        waits: Waits handed out so far, in order
    """

    def __init__(self, max_retries: int = MAX_RETRIES, base_delay: float = BASE_DELAY,
                 sleep: Optional[Callable[[float], None]] = None):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.waits: List[float] = []
        self._sleep = sleep
        self._lock = threading.Lock()

    @property
    def retries_used(self) -> int:
        return len(self.waits)

    @property
    def exhausted(self) -> bool:
        return self.retries_used >= self.max_retries

    def next_wait(self) -> Optional[float]:
        """Claim the next retry; None when the budget is spent."""
        with self._lock:
            if self.retries_used >= self.max_retries:
                return None
            wait = self.base_delay * (2 ** self.retries_used)
            self.waits.append(wait)
            return wait

    def sleep(self, seconds: float) -> None:
        if self._sleep is not None:
            self._sleep(seconds)
        else:
            time.sleep(seconds)


def retry_on_transient(func: Callable[..., T], *args,
                       budget: Optional[RetryBudget] = None, **kwargs) -> T:
    """Call func, retrying NetworkError with exponential backoff.

    Args:
        func: The function to execute
        *args: Positional arguments for func
        budget: Shared retry budget; a fresh one is used when omitted
        **kwargs: Keyword arguments for func

    Returns:
        The return value of func

    Raises:
        NetworkError: If the failure persists once the budget is spent
        Other exceptions: Passed through immediately without retry

    Example:
        >>> site = retry_on_transient(api_call, "site-123", budget=RetryBudget())
    """
    budget = budget or RetryBudget()

    while True:
        try:
            return func(*args, **kwargs)
        except NetworkError as e:
            wait_time = budget.next_wait()
            if wait_time is None:
                logger.error(f"Transient failure persisted after {budget.max_retries} retries, giving up: {e}")
                raise NetworkError(
                    f"{e} (after {budget.max_retries} retries)",
                    endpoint=e.endpoint,
                    status_code=e.status_code,
                ) from e

            logger.info(
                f"Transient failure ({e}), retrying in {wait_time}s "
                f"(retry {budget.retries_used}/{budget.max_retries})"
            )
            budget.sleep(wait_time)

