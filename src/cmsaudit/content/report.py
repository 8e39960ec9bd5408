"""Standalone HTML report for search results."""

from __future__ import annotations

import html
from datetime import datetime

from cmsaudit.content.aggregator import AggregatedOutcome
from cmsaudit.content.matcher import SearchResult
from cmsaudit.content.normalize import highlight_matches

_STYLE = """
body { font-family: system-ui, sans-serif; margin: 2rem; color: #222; }
h1 { font-size: 1.4rem; }
.result { border-top: 1px solid #ddd; padding: 0.75rem 0; }
.meta { color: #666; font-size: 0.85rem; }
.path { font-family: monospace; font-size: 0.85rem; color: #555; }
.snippet { margin: 0.25rem 0 0.75rem 1rem; }
.warning { color: #8a5300; }
mark { background: #ffe066; }
"""


def _render_result(result: SearchResult, term: str) -> str:
    parts = [
        '<div class="result">',
        f"<h2>{html.escape(result.title)}</h2>",
        f'<div class="meta">{html.escape(result.slug)} &middot; {html.escape(result.source_type)}</div>',
    ]
    for match in result.matches:
        occurrences = "occurrence" if match.count == 1 else "occurrences"
        parts.append(
            f'<div class="path">{html.escape(match.path)} ({match.count} {occurrences})</div>'
        )
        parts.append(f'<div class="snippet">{highlight_matches(match.value, term)}</div>')
    parts.append("</div>")
    return "\n".join(parts)


def render_search_html(outcome: AggregatedOutcome, term: str, negate: bool = False) -> str:
    """Render a search outcome as a self-contained HTML page.

    Args:
        outcome: Search outcome from the aggregator
        term: The search term, used for highlighting
        negate: Whether the search selected records without the term

    Returns:
        HTML document as a string
    """
    verb = "not containing" if negate else "containing"
    heading = f"{len(outcome.results)} of {outcome.total_items_scanned} items {verb} “{term}”"

    body = [f"<h1>{html.escape(heading)}</h1>"]
    if outcome.failed_scopes:
        failed = ", ".join(outcome.failed_scopes)
        body.append(f'<p class="warning">Failed to load: {html.escape(failed)}</p>')
    for result in outcome.results:
        if isinstance(result, SearchResult):
            body.append(_render_result(result, term))

    generated = datetime.now().strftime("%Y-%m-%d %H:%M")
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        f"<title>Search: {html.escape(term)}</title>\n"
        f"<style>{_STYLE}</style>\n</head>\n<body>\n"
        + "\n".join(body)
        + f'\n<p class="meta">Generated {generated}</p>\n</body>\n</html>\n'
    )
