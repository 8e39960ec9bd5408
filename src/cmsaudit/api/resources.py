"""
Paginated resource fetching.

A resource is one scope the user selected: a page type, the blog, or a
collection. Each is drained page by page (100 items per page) into a flat
list of raw JSON records.
"""

from __future__ import annotations

import logging
import urllib.parse
from dataclasses import dataclass
from enum import Enum
from typing import Any

from cmsaudit.api.client import CmsApiError, RetryingFetcher
from cmsaudit.core.config import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
LEVELS = 5


class ResourceKind(Enum):
    """Kind of fetchable scope."""

    PAGE_TYPE = "page-type"
    BLOG = "blog"
    COLLECTION = "collection"


@dataclass(frozen=True)
class ResourceHandle:
    """Identifies one scope to fetch."""

    kind: ResourceKind
    name: str | None = None

    def __post_init__(self) -> None:
        if self.kind is ResourceKind.BLOG:
            if self.name is not None:
                raise ValueError("Blog scope does not take a name")
        elif not self.name:
            raise ValueError(f"{self.kind.value} scope requires a name")

    @classmethod
    def page_type(cls, name: str) -> ResourceHandle:
        return cls(ResourceKind.PAGE_TYPE, name)

    @classmethod
    def blog(cls) -> ResourceHandle:
        return cls(ResourceKind.BLOG)

    @classmethod
    def collection(cls, key: str) -> ResourceHandle:
        return cls(ResourceKind.COLLECTION, key)

    @property
    def label(self) -> str:
        """Human-readable identifier used in failure reports."""
        if self.kind is ResourceKind.PAGE_TYPE:
            return f"Page Type: {self.name}"
        if self.kind is ResourceKind.COLLECTION:
            return f"Collection: {self.name}"
        return "Blog"

    @property
    def source_type(self) -> str:
        """Source type attached to every result from this scope."""
        return self.name if self.name is not None else "Blog"

    @property
    def path(self) -> str:
        """API path relative to the base URL."""
        if self.kind is ResourceKind.PAGE_TYPE:
            return f"pages/{urllib.parse.quote(self.name or '', safe='')}/"
        if self.kind is ResourceKind.COLLECTION:
            return f"content/{urllib.parse.quote(self.name or '', safe='')}/"
        return "posts/"


class ResourceFetchError(CmsApiError):
    """A whole scope could not be fetched."""

    def __init__(self, handle: ResourceHandle, cause: CmsApiError):
        self.handle = handle
        self.cause = cause
        if handle.name is None:
            message = f"Failed to fetch {handle.kind.value}: {cause.message}"
        else:
            message = f"Failed to fetch {handle.kind.value} {handle.name}: {cause.message}"
        super().__init__(message, status_code=cause.status_code)


def build_resource_url(
    handle: ResourceHandle,
    token: str,
    page: int,
    preview: bool = False,
    base_url: str = DEFAULT_BASE_URL,
) -> str:
    """Build the URL for one page of a resource.

    Args:
        handle: Scope to fetch
        token: Read API token
        page: 1-based page number
        preview: Request draft content as well
        base_url: API root, with trailing slash

    Returns:
        Fully-formed URL with every query parameter
    """
    params: dict[str, Any] = {
        "auth_token": token,
        "page": page,
        "page_size": PAGE_SIZE,
        "levels": LEVELS,
        "alt_media_text": 1,
    }
    if preview:
        params["preview"] = 1
    return f"{base_url}{handle.path}?{urllib.parse.urlencode(params)}"


def extract_items(handle: ResourceHandle, body: Any) -> list[Any]:
    """Pull the list of records out of a response body.

    Collections nest their payload one level under the collection key.
    Anything that is not a list is treated as no items.
    """
    if not isinstance(body, dict):
        return []
    data = body.get("data")
    if handle.kind is ResourceKind.COLLECTION:
        data = data.get(handle.name) if isinstance(data, dict) else None
    if not isinstance(data, list):
        return []
    return data


def has_next_page(body: Any) -> bool:
    """Check the pagination metadata for another page.

    A response without ``meta`` is treated as the last page.
    """
    meta = body.get("meta") if isinstance(body, dict) else None
    if not isinstance(meta, dict):
        return False
    return meta.get("next_page") is not None


class PaginatedResourceFetcher:
    """Drains every page of a resource into one list of records."""

    def __init__(
        self,
        token: str,
        preview: bool = False,
        base_url: str = DEFAULT_BASE_URL,
        fetcher: RetryingFetcher | None = None,
    ):
        """Initialize fetcher.

        Args:
            token: Read API token
            preview: Include draft content
            base_url: API root
            fetcher: RetryingFetcher to use (default settings if omitted)
        """
        self.token = token
        self.preview = preview
        self.base_url = base_url
        self.fetcher = fetcher or RetryingFetcher()

    def fetch_all(self, handle: ResourceHandle) -> list[Any]:
        """Fetch every record of a resource.

        Args:
            handle: Scope to fetch

        Returns:
            Records in page order

        Raises:
            ResourceFetchError: If any page fails after retries
        """
        items: list[Any] = []
        page = 1

        while True:
            url = build_resource_url(
                handle,
                self.token,
                page,
                preview=self.preview,
                base_url=self.base_url,
            )
            try:
                body = self.fetcher.fetch(url)
            except CmsApiError as e:
                raise ResourceFetchError(handle, e) from e

            page_items = extract_items(handle, body)
            if not page_items:
                break

            items.extend(page_items)
            logger.debug("%s: page %d, %d items so far", handle.label, page, len(items))

            if not has_next_page(body):
                break
            page += 1

        return items

    def close(self) -> None:
        """Release the HTTP session."""
        self.fetcher.close()
