"""Read-only access to the CMS REST API."""

from cmsaudit.api.client import CmsApiError, CmsAuthError, CmsHttpError, RetryingFetcher
from cmsaudit.api.resources import (
    PaginatedResourceFetcher,
    ResourceFetchError,
    ResourceHandle,
    ResourceKind,
)

__all__ = [
    "RetryingFetcher",
    "CmsApiError",
    "CmsHttpError",
    "CmsAuthError",
    "PaginatedResourceFetcher",
    "ResourceFetchError",
    "ResourceHandle",
    "ResourceKind",
]
