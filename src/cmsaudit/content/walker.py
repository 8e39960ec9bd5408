"""
Depth-limited traversal of JSON records.

Records have no fixed schema, so search and audit both walk every leaf. The
walk uses an explicit stack so the depth cap applies uniformly and deep input
cannot exhaust the interpreter stack.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

MAX_DEPTH = 10

# Boilerplate fields never worth surfacing
EXCLUDED_KEYS = frozenset({"meta", "url", "href"})

ROOT_PATH = "root"


def walk_leaves(record: Any, max_depth: int = MAX_DEPTH) -> Iterator[tuple[str, Any]]:
    """Yield ``(path, value)`` for every scalar leaf in document order.

    Paths use dotted keys and ``[i]`` indices (``fields.body``,
    ``sections[2].text``); a scalar record yields the path ``root``.
    Nodes deeper than ``max_depth`` (the record itself is depth 0) and
    excluded keys are skipped. ``None`` values are skipped. A container
    already visited is not walked again.
    """
    stack: list[tuple[Any, str, int]] = [(record, "", 0)]
    seen: set[int] = set()

    while stack:
        node, path, depth = stack.pop()
        if depth > max_depth or node is None:
            continue

        if isinstance(node, dict):
            if id(node) in seen:
                continue
            seen.add(id(node))
            children = [
                (value, f"{path}.{key}" if path else str(key), depth + 1)
                for key, value in node.items()
                if key not in EXCLUDED_KEYS
            ]
            stack.extend(reversed(children))
        elif isinstance(node, (list, tuple)):
            if id(node) in seen:
                continue
            seen.add(id(node))
            children = [
                (item, f"{path}[{index}]", depth + 1)
                for index, item in enumerate(node)
            ]
            stack.extend(reversed(children))
        else:
            yield path or ROOT_PATH, node


def leaf_text(value: Any) -> str | None:
    """Stringify a scalar leaf for comparison, or None if it has no text."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, float) and value.is_integer():
        # 1.0 reads as "1", the way the API's JSON numbers are written
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return None


def describe_record(record: Any) -> tuple[str, str]:
    """Pick a display title and slug for a record.

    Title falls back through ``name``, ``title`` and ``slug`` to
    "Untitled"; a missing slug is reported as "N/A".
    """
    if not isinstance(record, dict):
        return "Untitled", "N/A"

    title = "Untitled"
    for key in ("name", "title", "slug"):
        value = record.get(key)
        if isinstance(value, str) and value:
            title = value
            break

    slug = record.get("slug")
    if not isinstance(slug, str) or not slug:
        slug = "N/A"
    return title, slug
