"""Unit tests for hosting_client.retry_logic module."""

from unittest.mock import MagicMock, patch

import pytest

from src.hosting_client.errors import HostApiError, NetworkError
from src.hosting_client.retry_logic import RetryBudget, retry_on_transient


class TestRetryBudget:
    """Test cases for RetryBudget."""

    def test_waits_double(self):
        budget = RetryBudget()

        waits = [budget.next_wait() for _ in range(4)]

        assert waits == [1, 2, 4, None]
        assert budget.waits == [1, 2, 4]
        assert budget.exhausted is True

    def test_injected_sleep_is_used(self):
        sleeps = []
        budget = RetryBudget(sleep=sleeps.append)

        budget.sleep(2)

        assert sleeps == [2]

    @patch('time.sleep')
    def test_default_sleep_uses_time_sleep(self, mock_sleep):
        RetryBudget().sleep(4)
        mock_sleep.assert_called_once_with(4)


class TestRetryOnTransient:
    """Test cases for retry_on_transient function."""

    def test_success_on_first_attempt(self):
        """retry_on_transient should return result on first successful attempt."""
        mock_func = MagicMock(return_value="success")

        result = retry_on_transient(mock_func, "arg1", kwarg1="value1")

        assert result == "success"
        mock_func.assert_called_once_with("arg1", kwarg1="value1")

    @patch('time.sleep')
    def test_exponential_backoff_timing(self, mock_sleep):
        """retry_on_transient should wait 1s, 2s, 4s between attempts."""
        error = NetworkError("HTTP 503", status_code=503)
        mock_func = MagicMock(side_effect=[error, error, error, "success"])

        result = retry_on_transient(mock_func)

        assert result == "success"
        assert mock_func.call_count == 4
        assert [call.args[0] for call in mock_sleep.call_args_list] == [1, 2, 4]

    @patch('time.sleep')
    def test_gives_up_after_three_retries(self, mock_sleep):
        error = NetworkError("HTTP 503", endpoint="get_deploy(d1)", status_code=503)
        mock_func = MagicMock(side_effect=error)

        with pytest.raises(NetworkError, match="after 3 retries") as exc_info:
            retry_on_transient(mock_func)

        assert mock_func.call_count == 4
        assert exc_info.value.status_code == 503
        assert exc_info.value.endpoint == "get_deploy(d1)"

    @patch('time.sleep')
    def test_client_errors_are_not_retried(self, mock_sleep):
        mock_func = MagicMock(side_effect=HostApiError(422, "Unprocessable"))

        with pytest.raises(HostApiError):
            retry_on_transient(mock_func)

        mock_func.assert_called_once()
        mock_sleep.assert_not_called()

    def test_shared_budget_caps_waits_across_calls(self):
        """Calls sharing one budget never wait more than three times in total."""
        sleeps = []
        budget = RetryBudget(sleep=sleeps.append)
        error = NetworkError("timeout")

        assert retry_on_transient(MagicMock(side_effect=[error, error, "ok"]), budget=budget) == "ok"
        with pytest.raises(NetworkError):
            retry_on_transient(MagicMock(side_effect=[error, error, "ok"]), budget=budget)

        assert sleeps == [1, 2, 4]
