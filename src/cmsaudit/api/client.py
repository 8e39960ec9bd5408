"""
HTTP client for the CMS read API.

The only module that touches the network. Every request is a read-only GET
retried with linear backoff: attempt 1 fails -> wait 1s, attempt 2 fails ->
wait 2s, and so on until ``max_retries`` attempts have been made.

Usage:
    fetcher = RetryingFetcher(max_retries=3)
    data = fetcher.fetch("https://api.example-cms.com/v2/posts/?auth_token=...")
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any

import requests

from cmsaudit.core.config import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

_TOKEN_PARAM = re.compile(r"(auth_token=)[^&]*")


class CmsApiError(Exception):
    """Base exception for CMS API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class CmsHttpError(CmsApiError):
    """The API answered with a non-2xx status."""
    pass


class CmsAuthError(CmsHttpError):
    """The API rejected the token."""
    pass


def redact_url(url: str) -> str:
    """Hide the auth token in a URL before it is logged."""
    return _TOKEN_PARAM.sub(r"\1***", url)


class RetryingFetcher:
    """Performs GET requests with bounded retry and linear backoff."""

    BACKOFF_SECONDS = 1.0

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        """Initialize fetcher.

        Args:
            max_retries: Total number of attempts per URL (at least 1)
            timeout: Per-request timeout in seconds
            session: Session to reuse (a new one is created if omitted)
        """
        self.max_retries = max(1, max_retries)
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def fetch(self, url: str) -> Any:
        """Fetch a URL and return its decoded JSON body.

        Args:
            url: Fully-formed URL, auth token included

        Returns:
            Parsed JSON value

        Raises:
            CmsApiError: After the final failed attempt (the last error)
        """
        last_error: CmsApiError | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                return self._attempt(url)
            except CmsApiError as e:
                last_error = e
                logger.warning(
                    "Attempt %d/%d for %s failed: %s",
                    attempt,
                    self.max_retries,
                    redact_url(url),
                    e,
                )
                if attempt < self.max_retries:
                    time.sleep(self.BACKOFF_SECONDS * attempt)

        assert last_error is not None
        raise last_error

    def _attempt(self, url: str) -> Any:
        """Make a single GET request."""
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise CmsApiError(f"Request failed: {e}") from e

        if response.status_code == 401:
            raise CmsAuthError(
                f"API token is invalid (HTTP 401: {response.reason})",
                status_code=401,
            )

        if not 200 <= response.status_code < 300:
            raise CmsHttpError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise CmsApiError(
                f"Invalid JSON in response: {e}",
                status_code=response.status_code,
            ) from e

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()
