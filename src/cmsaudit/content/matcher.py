"""
Search term matching over JSON records.

Matches are presence-based: every leaf containing the term is reported with
its occurrence count and a snippet around the first occurrence. There is no
relevance scoring.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from cmsaudit.content.normalize import context_snippet, normalize
from cmsaudit.content.walker import describe_record, leaf_text, walk_leaves


@dataclass
class Match:
    """A leaf containing the search term."""

    path: str  # Dotted/bracketed JSON path
    value: str  # Context snippet around the first occurrence
    count: int  # Non-overlapping occurrences in the leaf

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {"path": self.path, "value": self.value, "count": self.count}


@dataclass
class SearchResult:
    """A record that satisfied the search."""

    title: str
    slug: str
    source_type: str
    matches: list[Match] = field(default_factory=list)

    @property
    def total_occurrences(self) -> int:
        return sum(m.count for m in self.matches)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "title": self.title,
            "slug": self.slug,
            "source_type": self.source_type,
            "matches": [m.to_dict() for m in self.matches],
        }


class ContentMatcher:
    """Finds a search term in arbitrary JSON records."""

    SNIPPET_CONTEXT = 100

    def __init__(self, term: str, negate: bool = False):
        """Initialize matcher.

        Args:
            term: Search term; normalized the same way as the content
            negate: Select records that do NOT contain the term

        Raises:
            ValueError: If the term is empty after normalization
        """
        normalized = normalize(term).strip()
        if not normalized:
            raise ValueError("Search term must not be empty")

        self.term = term
        self.normalized_term = normalized
        self.negate = negate
        self._pattern = re.compile(re.escape(normalized), re.IGNORECASE)

    def _scan(self, record: Any) -> Iterator[Match]:
        """Yield a Match for each leaf containing the term."""
        for path, value in walk_leaves(record):
            text = leaf_text(value)
            if text is None:
                continue

            normalized = normalize(text)
            occurrences = list(self._pattern.finditer(normalized))
            if not occurrences:
                continue

            first = occurrences[0]
            yield Match(
                path=path,
                value=context_snippet(
                    normalized,
                    first.start(),
                    first.end() - first.start(),
                    self.SNIPPET_CONTEXT,
                ),
                count=len(occurrences),
            )

    def contains(self, record: Any) -> bool:
        """Check whether any leaf of the record contains the term."""
        return next(self._scan(record), None) is not None

    def match(self, record: Any) -> list[Match]:
        """Find every matching leaf of a record.

        Negated matching works on whole records, so there are no per-leaf
        matches to report and the result is always empty in that mode.
        """
        if self.negate:
            return []
        return list(self._scan(record))

    def evaluate(self, record: Any, source_type: str) -> SearchResult | None:
        """Decide whether a record belongs in the results.

        Args:
            record: Raw JSON record
            source_type: Scope the record came from

        Returns:
            SearchResult, or None if the record is not selected
        """
        if self.negate:
            if self.contains(record):
                return None
            matches: list[Match] = []
        else:
            matches = self.match(record)
            if not matches:
                return None

        title, slug = describe_record(record)
        return SearchResult(
            title=title,
            slug=slug,
            source_type=source_type,
            matches=matches,
        )


def find_matches(record: Any, term: str) -> list[Match]:
    """Find every leaf of ``record`` containing ``term``."""
    return ContentMatcher(term).match(record)
