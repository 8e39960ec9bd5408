"""
Multi-scope search and audit orchestration.

Fetches every selected scope (page types, the blog, collections) as an
independent task, then runs the matcher or auditor over the records of the
scopes that succeeded. A scope that fails is reported in ``failed_scopes``
and never cancels its siblings.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from cmsaudit.api.client import CmsApiError, RetryingFetcher
from cmsaudit.api.resources import PaginatedResourceFetcher, ResourceHandle
from cmsaudit.content.auditor import AuditResult, BloatAuditor
from cmsaudit.content.matcher import ContentMatcher, SearchResult
from cmsaudit.content.normalize import normalize
from cmsaudit.core.config import Settings

logger = logging.getLogger(__name__)

MISSING_TOKEN_ERROR = "Please enter your API token"
MISSING_TERM_ERROR = "Please enter a search term"
MISSING_SCOPE_ERROR = "Please select at least one audit scope (Blog, Page Type, or Collection Key)"

ScanResult = SearchResult | AuditResult


class ScanMode(Enum):
    """What to do with each fetched record."""

    SEARCH = "search"
    AUDIT = "audit"


class ResourceSource(Protocol):
    """Anything that can drain a scope into records."""

    def fetch_all(self, handle: ResourceHandle) -> list[Any]: ...


@dataclass(frozen=True)
class ScopeRequest:
    """Input for one aggregator run."""

    token: str
    scopes: tuple[ResourceHandle, ...] = ()
    mode: ScanMode = ScanMode.SEARCH
    term: str = ""
    negate: bool = False
    preview: bool = False

    @classmethod
    def build(
        cls,
        token: str,
        page_types: Iterable[str] = (),
        collections: Iterable[str] = (),
        blog: bool = False,
        mode: ScanMode = ScanMode.SEARCH,
        term: str = "",
        negate: bool = False,
        preview: bool = False,
    ) -> ScopeRequest:
        """Assemble a request from the user's scope selection.

        Scopes are ordered page types, blog, collections. Blank names are
        dropped and duplicates collapsed.
        """
        scopes: list[ResourceHandle] = []
        for name in page_types:
            if name.strip():
                scopes.append(ResourceHandle.page_type(name.strip()))
        if blog:
            scopes.append(ResourceHandle.blog())
        for key in collections:
            if key.strip():
                scopes.append(ResourceHandle.collection(key.strip()))

        return cls(
            token=token,
            scopes=tuple(dict.fromkeys(scopes)),
            mode=mode,
            term=term,
            negate=negate,
            preview=preview,
        )


@dataclass
class AggregatedOutcome:
    """Result of an aggregator run."""

    success: bool
    mode: ScanMode = ScanMode.SEARCH
    results: list[ScanResult] = field(default_factory=list)
    total_items_scanned: int = 0
    failed_scopes: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def partial_failure(self) -> bool:
        """Some scopes failed but others produced data."""
        return self.success and bool(self.failed_scopes)

    @property
    def total_issues(self) -> int:
        """Sum of issue counts across audit results."""
        return sum(r.issue_count for r in self.results if isinstance(r, AuditResult))

    @property
    def patterns_found(self) -> list[str]:
        """Distinct patterns found across audit results."""
        found = {
            issue.pattern
            for r in self.results
            if isinstance(r, AuditResult)
            for issue in r.issues
        }
        return sorted(found)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        data: dict[str, Any] = {
            "success": self.success,
            "mode": self.mode.value,
            "results": [r.to_dict() for r in self.results],
            "total_items_scanned": self.total_items_scanned,
            "failed_scopes": list(self.failed_scopes),
        }
        if self.mode is ScanMode.AUDIT:
            data["total_issues"] = self.total_issues
            data["patterns_found"] = self.patterns_found
        if self.error:
            data["error"] = self.error
        return data

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def validate_request(request: ScopeRequest) -> str | None:
    """Return a user-facing error for invalid input, or None."""
    if not request.token.strip():
        return MISSING_TOKEN_ERROR
    if request.mode is ScanMode.SEARCH:
        # Entity-only terms like "&nbsp;" are empty once normalized
        if not normalize(request.term).strip():
            return MISSING_TERM_ERROR
    elif not request.scopes:
        return MISSING_SCOPE_ERROR
    return None


class ScopeAggregator:
    """Runs a search or audit across every selected scope."""

    def __init__(
        self,
        settings: Settings | None = None,
        source_factory: Callable[[ScopeRequest], ResourceSource] | None = None,
    ):
        """Initialize aggregator.

        Args:
            settings: Retry, timeout, base URL and worker settings
            source_factory: Builds a record source per scope task (defaults to
                a PaginatedResourceFetcher with its own HTTP session)
        """
        self.settings = settings or Settings(token="")
        self._source_factory = source_factory or self._default_source

    def _default_source(self, request: ScopeRequest) -> PaginatedResourceFetcher:
        return PaginatedResourceFetcher(
            token=request.token.strip(),
            preview=request.preview,
            base_url=self.settings.base_url,
            fetcher=RetryingFetcher(
                max_retries=self.settings.max_retries,
                timeout=self.settings.timeout,
            ),
        )

    def _fetch_scope(self, request: ScopeRequest, handle: ResourceHandle) -> list[Any]:
        """Fetch one scope with its own record source."""
        source = self._source_factory(request)
        try:
            records = source.fetch_all(handle)
        finally:
            close = getattr(source, "close", None)
            if callable(close):
                close()
        logger.debug("%s: fetched %d records", handle.label, len(records))
        return records

    def _fetch_scopes(
        self, request: ScopeRequest
    ) -> list[list[Any] | CmsApiError]:
        """Fetch every scope concurrently.

        Returns:
            One entry per scope, in request order: the records, or the error
            that ended the fetch
        """
        outcomes: list[list[Any] | CmsApiError] = [[] for _ in request.scopes]
        workers = min(self.settings.max_workers, len(request.scopes))

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self._fetch_scope, request, handle): index
                for index, handle in enumerate(request.scopes)
            }
            for future in as_completed(futures):
                index = futures[future]
                try:
                    outcomes[index] = future.result()
                except CmsApiError as e:
                    logger.warning("Scope %s failed: %s", request.scopes[index].label, e)
                    outcomes[index] = e

        return outcomes

    def run(self, request: ScopeRequest) -> AggregatedOutcome:
        """Run a search or audit.

        Args:
            request: Token, scopes, mode and (for search) the term

        Returns:
            AggregatedOutcome; ``success`` is False only for invalid input or
            when every scope failed
        """
        error = validate_request(request)
        if error:
            return AggregatedOutcome(success=False, mode=request.mode, error=error)

        evaluator: ContentMatcher | BloatAuditor
        if request.mode is ScanMode.SEARCH:
            evaluator = ContentMatcher(request.term, negate=request.negate)
        else:
            evaluator = BloatAuditor()

        if not request.scopes:
            return AggregatedOutcome(success=True, mode=request.mode)

        outcome = AggregatedOutcome(success=False, mode=request.mode)
        any_succeeded = False

        for handle, fetched in zip(request.scopes, self._fetch_scopes(request)):
            if isinstance(fetched, CmsApiError):
                outcome.failed_scopes.append(handle.label)
                outcome.error = fetched.message
                continue

            any_succeeded = True
            outcome.total_items_scanned += len(fetched)
            for record in fetched:
                result = evaluator.evaluate(record, handle.source_type)
                if result is not None:
                    outcome.results.append(result)

        if not any_succeeded:
            return outcome

        outcome.success = True
        outcome.error = None
        outcome.results.sort(key=lambda r: r.slug)
        return outcome
