"""
Text normalization for search matching.

Content pasted into a CMS mixes HTML entities, typographic punctuation and
non-breaking spaces. ``normalize`` folds all of these into one plain form so
that ``&pound;5``, ``£5`` and ``£ 5`` compare equal to a search term.
"""

from __future__ import annotations

import html
import re

# Entity spellings (lowercase) and their plain replacements
ENTITIES: dict[str, str] = {
    "&nbsp;": " ",
    "&quot;": '"',
    "&apos;": "'",
    "&#39;": "'",
    "&ndash;": "-",
    "&mdash;": "-",
    "&pound;": "£",
    "&euro;": "€",
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
}

# Unicode look-alikes and their plain replacements
LOOKALIKES: dict[str, str] = {
    "\u00a0": " ",  # no-break space
    "\u201c": '"',
    "\u201d": '"',
    "\u2018": "'",
    "\u2019": "'",
    "\u2013": "-",  # en dash
    "\u2014": "-",  # em dash
}

_ENTITY_RE = re.compile("|".join(re.escape(e) for e in ENTITIES), re.IGNORECASE)
_LOOKALIKE_TABLE = str.maketrans(LOOKALIKES)
_WHITESPACE_RE = re.compile(r"\s+")


def _build_variants() -> dict[str, list[str]]:
    """Map each plain character to every spelling that normalizes to it."""
    variants: dict[str, list[str]] = {}
    for spelling, plain in list(ENTITIES.items()) + list(LOOKALIKES.items()):
        variants.setdefault(plain, [plain]).append(spelling)
    # Longest first so the regex prefers whole entities
    return {plain: sorted(set(v), key=len, reverse=True) for plain, v in variants.items()}


VARIANTS = _build_variants()


def normalize(text: str) -> str:
    """Fold entities, look-alike punctuation and whitespace runs.

    Entity decoding repeats until the text is stable, so double-encoded input
    (``&amp;quot;``) ends up in the same form as its plain equivalent and
    ``normalize(normalize(x)) == normalize(x)``.
    """
    previous = None
    while text != previous:
        previous = text
        text = _ENTITY_RE.sub(lambda m: ENTITIES[m.group(0).lower()], text)
    text = text.translate(_LOOKALIKE_TABLE)
    return _WHITESPACE_RE.sub(" ", text)


def context_snippet(
    text: str,
    index: int,
    length: int,
    context: int = 100,
) -> str:
    """Cut a window of ``context`` characters either side of a match.

    Ellipses mark the sides where the window stops short of the text.
    """
    start = max(0, index - context)
    end = min(len(text), index + length + context)

    snippet = text[start:end]
    if start > 0:
        snippet = "..." + snippet
    if end < len(text):
        snippet = snippet + "..."
    return snippet


def variant_pattern(term: str) -> re.Pattern[str] | None:
    """Compile a case-insensitive regex matching ``term`` in any spelling.

    Returns None for a term that is empty after normalization.
    """
    normalized = normalize(term).strip()
    if not normalized:
        return None

    parts: list[str] = []
    for char in normalized:
        if char == " ":
            parts.append(r"(?:\s|&nbsp;)+")
        elif char in VARIANTS:
            alternatives = "|".join(re.escape(v) for v in VARIANTS[char])
            parts.append(f"(?:{alternatives})")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.IGNORECASE)


def highlight_matches(text: str, term: str, marker: str = "mark") -> str:
    """Escape ``text`` for HTML and wrap every occurrence of ``term``.

    Examples:
        >>> highlight_matches("Price: &pound;5", "£5")
        'Price: <mark>&amp;pound;5</mark>'
    """
    pattern = variant_pattern(term)
    if pattern is None:
        return html.escape(text)

    pieces: list[str] = []
    last = 0
    for m in pattern.finditer(text):
        pieces.append(html.escape(text[last:m.start()]))
        pieces.append(f"<{marker}>{html.escape(m.group(0))}</{marker}>")
        last = m.end()
    pieces.append(html.escape(text[last:]))
    return "".join(pieces)
