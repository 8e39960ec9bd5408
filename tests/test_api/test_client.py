"""Tests for the retrying HTTP client."""

from unittest.mock import MagicMock, call, patch

import pytest
import requests

from cmsaudit.api.client import (
    CmsApiError,
    CmsAuthError,
    CmsHttpError,
    RetryingFetcher,
    redact_url,
)

URL = "https://api.example-cms.com/v2/posts/?auth_token=secret&page=1"


def _mock_response(data=None, status=200, reason="OK"):
    """Create a mock requests.Response."""
    response = MagicMock()
    response.status_code = status
    response.reason = reason
    response.json.return_value = data
    return response


class TestRedactUrl:
    """Tests for redact_url."""

    def test_hides_token(self):
        assert redact_url(URL) == "https://api.example-cms.com/v2/posts/?auth_token=***&page=1"

    def test_no_token(self):
        assert redact_url("https://example.com/?page=2") == "https://example.com/?page=2"


class TestRetryingFetcher:
    """Tests for RetryingFetcher.fetch."""

    @patch("cmsaudit.api.client.time.sleep")
    @patch("requests.Session.get")
    def test_success_first_attempt(self, mock_get, mock_sleep):
        mock_get.return_value = _mock_response({"data": []})

        fetcher = RetryingFetcher()
        assert fetcher.fetch(URL) == {"data": []}

        assert mock_get.call_count == 1
        mock_get.assert_called_with(URL, timeout=fetcher.timeout)
        mock_sleep.assert_not_called()

    @patch("cmsaudit.api.client.time.sleep")
    @patch("requests.Session.get")
    def test_linear_backoff_then_raise(self, mock_get, mock_sleep):
        mock_get.return_value = _mock_response(status=500, reason="Server Error")

        fetcher = RetryingFetcher(max_retries=3)
        with pytest.raises(CmsHttpError) as exc_info:
            fetcher.fetch(URL)

        assert mock_get.call_count == 3
        assert mock_sleep.call_args_list == [call(1.0), call(2.0)]
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "HTTP 500: Server Error"

    @patch("cmsaudit.api.client.time.sleep")
    @patch("requests.Session.get")
    def test_raises_last_error(self, mock_get, mock_sleep):
        mock_get.side_effect = [
            _mock_response(status=500, reason="Server Error"),
            _mock_response(status=503, reason="Unavailable"),
            _mock_response(status=502, reason="Bad Gateway"),
        ]

        with pytest.raises(CmsHttpError, match="HTTP 502: Bad Gateway"):
            RetryingFetcher(max_retries=3).fetch(URL)

    @patch("cmsaudit.api.client.time.sleep")
    @patch("requests.Session.get")
    def test_recovers_after_failure(self, mock_get, mock_sleep):
        mock_get.side_effect = [
            _mock_response(status=503, reason="Unavailable"),
            _mock_response({"data": [1]}),
        ]

        assert RetryingFetcher().fetch(URL) == {"data": [1]}
        assert mock_get.call_count == 2
        mock_sleep.assert_called_once_with(1.0)

    @patch("cmsaudit.api.client.time.sleep")
    @patch("requests.Session.get")
    def test_single_attempt_never_sleeps(self, mock_get, mock_sleep):
        mock_get.return_value = _mock_response(status=404, reason="Not Found")

        with pytest.raises(CmsHttpError):
            RetryingFetcher(max_retries=1).fetch(URL)

        assert mock_get.call_count == 1
        mock_sleep.assert_not_called()

    @patch("cmsaudit.api.client.time.sleep")
    @patch("requests.Session.get")
    def test_unauthorized(self, mock_get, mock_sleep):
        mock_get.return_value = _mock_response(status=401, reason="Unauthorized")

        with pytest.raises(CmsAuthError) as exc_info:
            RetryingFetcher().fetch(URL)

        assert exc_info.value.status_code == 401
        assert "invalid" in exc_info.value.message
        assert isinstance(exc_info.value, CmsHttpError)

    @patch("cmsaudit.api.client.time.sleep")
    @patch("requests.Session.get")
    def test_network_error(self, mock_get, mock_sleep):
        mock_get.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(CmsApiError, match="Request failed"):
            RetryingFetcher(max_retries=2).fetch(URL)

        assert mock_get.call_count == 2
        mock_sleep.assert_called_once_with(1.0)

    @patch("cmsaudit.api.client.time.sleep")
    @patch("requests.Session.get")
    def test_invalid_json(self, mock_get, mock_sleep):
        response = _mock_response()
        response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = response

        with pytest.raises(CmsApiError, match="Invalid JSON"):
            RetryingFetcher(max_retries=1).fetch(URL)

    @patch("cmsaudit.api.client.time.sleep")
    @patch("requests.Session.get")
    def test_failures_are_logged_without_token(self, mock_get, mock_sleep, caplog):
        mock_get.return_value = _mock_response(status=500, reason="Server Error")

        with pytest.raises(CmsHttpError):
            RetryingFetcher(max_retries=2).fetch(URL)

        assert "Attempt 1/2" in caplog.text
        assert "secret" not in caplog.text

    def test_max_retries_at_least_one(self):
        assert RetryingFetcher(max_retries=0).max_retries == 1

    def test_accept_header(self):
        fetcher = RetryingFetcher()
        assert fetcher._session.headers["Accept"] == "application/json"
