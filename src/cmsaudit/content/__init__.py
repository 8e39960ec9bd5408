"""
Content search and audit engine.

Provides tools for:
- Normalizing text so look-alike characters compare equal
- Walking arbitrary JSON records leaf by leaf
- Matching a search term across records
- Auditing records for pasted markup bloat
- Aggregating results across page types, collections and the blog
"""

from cmsaudit.content.aggregator import (
    AggregatedOutcome,
    ScanMode,
    ScopeAggregator,
    ScopeRequest,
)
from cmsaudit.content.auditor import BLOAT_PATTERNS, AuditIssue, AuditResult, BloatAuditor, BloatPattern
from cmsaudit.content.matcher import ContentMatcher, Match, SearchResult, find_matches
from cmsaudit.content.normalize import context_snippet, highlight_matches, normalize

__all__ = [
    "ScopeAggregator",
    "ScopeRequest",
    "ScanMode",
    "AggregatedOutcome",
    "ContentMatcher",
    "Match",
    "SearchResult",
    "find_matches",
    "BloatAuditor",
    "BloatPattern",
    "BLOAT_PATTERNS",
    "AuditIssue",
    "AuditResult",
    "normalize",
    "context_snippet",
    "highlight_matches",
]
