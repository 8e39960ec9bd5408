"""
Markup bloat auditor.

Flags HTML pasted from office suites, design tools and rich text editors
without cleanup. Such markup carries vendor attributes (``mso-``,
``data-figma``, ``data-pm-slice``) and inline handlers that inflate pages and
can break rendering.

Each finding needs review before removal: sometimes only the attribute
should go (``data-contrast="auto"``), sometimes the attribute and its value
(``onclick="..."``), and sometimes the whole element.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from cmsaudit.content.walker import describe_record, walk_leaves


@dataclass(frozen=True)
class BloatPattern:
    """A fixed signature of pasted markup."""

    signature: str | re.Pattern[str]
    label: str

    @property
    def name(self) -> str:
        """Signature text as reported on issues."""
        if isinstance(self.signature, re.Pattern):
            return self.signature.pattern
        return self.signature

    @property
    def is_literal(self) -> bool:
        return isinstance(self.signature, str)

    def positions(self, text: str) -> list[int]:
        """Start offsets of non-overlapping, case-insensitive occurrences."""
        if isinstance(self.signature, re.Pattern):
            regex = re.compile(self.signature.pattern, self.signature.flags | re.IGNORECASE)
        else:
            regex = re.compile(re.escape(self.signature), re.IGNORECASE)
        return [m.start() for m in regex.finditer(text)]


_OFFICE = "Microsoft Office"
_FIGMA = "Figma"
_GOOGLE = "Google Docs"
_PROSEMIRROR = "ProseMirror editor"
_HANDLER = "Inline event handler"

BLOAT_PATTERNS: tuple[BloatPattern, ...] = (
    BloatPattern("mso-", _OFFICE),
    BloatPattern("paraid=", _OFFICE),
    BloatPattern("paraeid=", _OFFICE),
    BloatPattern("o:gfxdata=", _OFFICE),
    BloatPattern("o:p", _OFFICE),
    BloatPattern("w:st=", _OFFICE),
    BloatPattern("w:wrap=", _OFFICE),
    BloatPattern("w:wrap>", _OFFICE),
    BloatPattern("v:shapes=", _OFFICE),
    BloatPattern("v:imagedata", _OFFICE),
    BloatPattern("xml:namespace", _OFFICE),
    BloatPattern("xml:lang", _OFFICE),
    BloatPattern("data-ccp", _OFFICE),
    BloatPattern("data-contrast", _OFFICE),
    BloatPattern("data-font", _OFFICE),
    BloatPattern("data-listid", _OFFICE),
    BloatPattern("data-leveltext", _OFFICE),
    BloatPattern("data-defn-prop", _OFFICE),
    BloatPattern("figma=", _FIGMA),
    BloatPattern("figmeta=", _FIGMA),
    BloatPattern("data-figma", _FIGMA),
    BloatPattern("google-", _GOOGLE),
    BloatPattern("docs-", _GOOGLE),
    BloatPattern("data-pm", _PROSEMIRROR),
    BloatPattern("onclick=", _HANDLER),
    BloatPattern("onload=", _HANDLER),
    BloatPattern("onerror=", _HANDLER),
    BloatPattern("onmouseover=", _HANDLER),
    BloatPattern("onmouseout=", _HANDLER),
    BloatPattern("data-", "Generic data attribute"),
)


def split_generic(
    patterns: tuple[BloatPattern, ...],
) -> tuple[list[BloatPattern], list[BloatPattern]]:
    """Split a table into (specific, generic) patterns.

    A literal pattern is generic when another literal in the table starts
    with it, e.g. ``data-`` versus ``data-contrast``. Generic patterns come
    back longest first.
    """
    literals = [p.name.lower() for p in patterns if p.is_literal]
    specific: list[BloatPattern] = []
    generic: list[BloatPattern] = []

    for pattern in patterns:
        prefix = pattern.name.lower()
        if pattern.is_literal and any(
            other != prefix and other.startswith(prefix) for other in literals
        ):
            generic.append(pattern)
        else:
            specific.append(pattern)

    generic.sort(key=lambda p: len(p.name), reverse=True)
    return specific, generic


@dataclass
class AuditIssue:
    """One pattern found in one leaf."""

    pattern: str
    source: str  # Tool the pattern comes from
    path: str
    value: str  # Full original string
    count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "pattern": self.pattern,
            "source": self.source,
            "path": self.path,
            "value": self.value,
            "count": self.count,
        }


@dataclass
class AuditResult:
    """A record with at least one issue."""

    title: str
    slug: str
    source_type: str
    issues: list[AuditIssue] = field(default_factory=list)

    @property
    def issue_count(self) -> int:
        return sum(i.count for i in self.issues)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "title": self.title,
            "slug": self.slug,
            "source_type": self.source_type,
            "issues": [i.to_dict() for i in self.issues],
        }


class BloatAuditor:
    """Audits JSON records for markup bloat signatures."""

    def __init__(self, patterns: tuple[BloatPattern, ...] = BLOAT_PATTERNS):
        """Initialize auditor.

        Args:
            patterns: Signature table (defaults to BLOAT_PATTERNS)
        """
        self.patterns = patterns
        self._specific, self._generic = split_generic(patterns)

    def _audit_leaf(self, path: str, text: str) -> list[AuditIssue]:
        """Run every pattern over one string.

        Positions claimed by a more specific pattern are not counted again
        for a generic one.
        """
        issues: list[AuditIssue] = []
        claimed: set[int] = set()

        for pattern in self._specific + self._generic:
            positions = [p for p in pattern.positions(text) if p not in claimed]
            if not positions:
                continue
            claimed.update(positions)
            issues.append(
                AuditIssue(
                    pattern=pattern.name,
                    source=pattern.label,
                    path=path,
                    value=text,
                    count=len(positions),
                )
            )

        return issues

    def audit(self, record: Any) -> list[AuditIssue]:
        """Find every pattern occurrence in a record's string leaves.

        Returns:
            Issues sorted by pattern, then path
        """
        issues: list[AuditIssue] = []
        for path, value in walk_leaves(record):
            if isinstance(value, str):
                issues.extend(self._audit_leaf(path, value))

        issues.sort(key=lambda i: (i.pattern, i.path))
        return issues

    def evaluate(self, record: Any, source_type: str) -> AuditResult | None:
        """Audit a record, returning a result only if it has issues."""
        issues = self.audit(record)
        if not issues:
            return None

        title, slug = describe_record(record)
        return AuditResult(title=title, slug=slug, source_type=source_type, issues=issues)
