"""Tests for text normalization and highlighting."""

import pytest

from cmsaudit.content.normalize import (
    context_snippet,
    highlight_matches,
    normalize,
    variant_pattern,
)


# ---------------------------------------------------------------------------
# normalize
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("&pound;5", "£5"),
        ("&euro;10", "€10"),
        ("Tom &amp; Jerry", "Tom & Jerry"),
        ("&lt;b&gt;", "<b>"),
        ("it&apos;s it&#39;s", "it's it's"),
        ("&quot;hi&quot;", '"hi"'),
        ("a &ndash; b &mdash; c", "a - b - c"),
        ("a&nbsp;b", "a b"),
        ("“quoted”", '"quoted"'),
        ("‘single’", "'single'"),
        ("en–dash em—dash", "en-dash em-dash"),
        ("no\u00a0break", "no break"),
    ],
)
def test_normalize_replacements(raw, expected):
    assert normalize(raw) == expected


def test_entities_case_insensitive():
    assert normalize("&NBSP;&Pound;&AMP;") == " £&"


def test_whitespace_collapsed():
    assert normalize("a \n\t b&nbsp;&nbsp;c") == "a b c"


def test_double_encoded_matches_plain():
    assert normalize("&amp;quot;") == normalize('"')
    assert normalize("&amp;amp;pound;") == "£"


def test_unknown_entities_untouched():
    assert normalize("&copy; 2024") == "&copy; 2024"


@pytest.mark.parametrize(
    "raw",
    [
        "&amp;quot;x&amp;quot;",
        "&amp;amp;amp;",
        "“&nbsp;”",
        "plain text",
        "  spaced   out  ",
        "&amp;nbsp;&amp;nbsp;",
    ],
)
def test_normalize_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


# ---------------------------------------------------------------------------
# context_snippet
# ---------------------------------------------------------------------------

def test_snippet_whole_text_no_ellipsis():
    assert context_snippet("short foo text", 6, 3) == "short foo text"


def test_snippet_both_sides_cut():
    text = "a" * 150 + "foo" + "b" * 150
    snippet = context_snippet(text, 150, 3)
    assert snippet == "..." + "a" * 100 + "foo" + "b" * 100 + "..."


def test_snippet_start_of_text():
    text = "foo" + "b" * 150
    snippet = context_snippet(text, 0, 3)
    assert not snippet.startswith("...")
    assert snippet.endswith("...")
    assert len(snippet) == 3 + 100 + 3


def test_snippet_custom_context():
    assert context_snippet("0123456789", 5, 1, context=2) == "...34567..."


# ---------------------------------------------------------------------------
# variant_pattern / highlight_matches
# ---------------------------------------------------------------------------

def test_variant_pattern_empty():
    assert variant_pattern("   ") is None
    assert variant_pattern("&nbsp;") is None


@pytest.mark.parametrize("spelling", ["£5", "&pound;5", "&POUND;5"])
def test_variant_pattern_spellings(spelling):
    assert variant_pattern("£5").search(f"Only {spelling} today")


def test_variant_pattern_space_matches_nbsp():
    assert variant_pattern("free shipping").search("Free&nbsp;shipping")


def test_highlight_entity_spelling():
    assert highlight_matches("Price: &pound;5", "£5") == "Price: <mark>&amp;pound;5</mark>"


def test_highlight_escapes_html():
    result = highlight_matches("<b>Tom & Jerry</b>", "tom &amp; jerry")
    assert result == "&lt;b&gt;<mark>Tom &amp; Jerry</mark>&lt;/b&gt;"


def test_highlight_every_occurrence():
    result = highlight_matches("foo bar FOO", "foo")
    assert result == "<mark>foo</mark> bar <mark>FOO</mark>"


def test_highlight_custom_marker():
    assert highlight_matches("a foo", "foo", marker="em") == "a <em>foo</em>"


def test_highlight_empty_term_only_escapes():
    assert highlight_matches("<p>", "") == "&lt;p&gt;"


def test_highlight_curly_quotes():
    result = highlight_matches("“hello”", '"hello"')
    assert result == "<mark>“hello”</mark>"
