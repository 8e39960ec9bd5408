"""Tests for the markup bloat auditor."""

import re

import pytest

from cmsaudit.content.auditor import (
    BLOAT_PATTERNS,
    AuditIssue,
    AuditResult,
    BloatAuditor,
    BloatPattern,
    split_generic,
)


@pytest.fixture
def auditor():
    return BloatAuditor()


# ---------------------------------------------------------------------------
# BloatPattern / pattern table
# ---------------------------------------------------------------------------

class TestBloatPattern:
    """Tests for BloatPattern."""

    def test_literal_positions_case_insensitive(self):
        pattern = BloatPattern("mso-", "Microsoft Office")
        assert pattern.positions("mso-a MSO-b") == [0, 6]
        assert pattern.is_literal
        assert pattern.name == "mso-"

    def test_regex_signature(self):
        pattern = BloatPattern(re.compile(r"class=\"Mso\w+\""), "Office class")
        assert pattern.name == r"class=\"Mso\w+\""
        assert not pattern.is_literal
        assert pattern.positions('<p class="msonormal">') == [3]

    def test_table_contents(self):
        names = [p.name for p in BLOAT_PATTERNS]
        assert len(names) == len(set(names))
        for expected in ("mso-", "data-contrast", "data-figma", "docs-", "data-pm", "onclick=", "data-"):
            assert expected in names

    def test_split_generic(self):
        specific, generic = split_generic(BLOAT_PATTERNS)
        assert [p.name for p in generic] == ["data-"]
        assert "data-contrast" in [p.name for p in specific]

    def test_split_generic_longest_first(self):
        patterns = (
            BloatPattern("on", "x"),
            BloatPattern("onclick", "x"),
            BloatPattern("onc", "x"),
        )
        specific, generic = split_generic(patterns)
        assert [p.name for p in specific] == ["onclick"]
        assert [p.name for p in generic] == ["onc", "on"]


# ---------------------------------------------------------------------------
# BloatAuditor.audit
# ---------------------------------------------------------------------------

class TestAudit:
    """Tests for BloatAuditor.audit()."""

    def test_office_style(self, auditor):
        record = {"body": '<p style="mso-line-height:1">x</p>'}

        issues = auditor.audit(record)

        assert issues == [
            AuditIssue(
                pattern="mso-",
                source="Microsoft Office",
                path="body",
                value='<p style="mso-line-height:1">x</p>',
                count=1,
            )
        ]

    def test_single_pattern_table(self):
        auditor = BloatAuditor(patterns=(BloatPattern("mso-", "Microsoft Office"),))
        issues = auditor.audit({"slug": "a", "body": '<p style="mso-line-height:1">x</p>'})
        assert [(i.pattern, i.path, i.count) for i in issues] == [("mso-", "body", 1)]

    def test_full_value_kept(self, auditor):
        body = "<span data-ccp-props='{}'>" + "x" * 500 + "</span>"
        issues = auditor.audit({"body": body})
        assert issues[0].value == body

    def test_specific_claims_generic_position(self, auditor):
        issues = auditor.audit({"body": '<span data-contrast="auto">Hi</span>'})
        assert [(i.pattern, i.count) for i in issues] == [("data-contrast", 1)]

    def test_generic_counts_unclaimed_positions(self, auditor):
        issues = auditor.audit({"body": '<span data-contrast="auto" data-foo="1">Hi</span>'})
        assert sorted((i.pattern, i.count) for i in issues) == [("data-", 1), ("data-contrast", 1)]

    def test_several_patterns_in_one_leaf(self, auditor):
        body = '<p style="mso-x" onclick="go()" class="docs-internal">'
        issues = auditor.audit({"body": body})
        assert [i.pattern for i in issues] == ["docs-", "mso-", "onclick="]

    def test_counts_every_occurrence(self, auditor):
        issues = auditor.audit({"body": "mso-a mso-b MSO-c"})
        assert issues[0].count == 3

    def test_sorted_by_pattern_then_path(self, auditor):
        record = {
            "b": "mso-x",
            "a": "mso-y onload=z",
        }
        issues = auditor.audit(record)
        assert [(i.pattern, i.path) for i in issues] == [
            ("mso-", "a"),
            ("mso-", "b"),
            ("onload=", "a"),
        ]

    def test_issue_source_from_pattern_label(self, auditor):
        issues = auditor.audit({"body": '<p data-pm-slice="1" onclick="x" data-foo="y">'})
        assert {i.pattern: i.source for i in issues} == {
            "data-": "Generic data attribute",
            "data-pm": "ProseMirror editor",
            "onclick=": "Inline event handler",
        }

    def test_only_string_leaves(self, auditor):
        assert auditor.audit({"count": 5, "flag": True}) == []

    def test_excluded_keys(self, auditor):
        assert auditor.audit({"url": "mso-", "meta": {"x": "data-pm"}}) == []

    def test_clean_record(self, auditor):
        assert auditor.audit({"body": "<p>Hello</p>"}) == []


# ---------------------------------------------------------------------------
# BloatAuditor.evaluate
# ---------------------------------------------------------------------------

class TestEvaluate:
    """Tests for BloatAuditor.evaluate()."""

    def test_result_for_dirty_record(self, auditor):
        result = auditor.evaluate({"title": "About", "slug": "about", "body": "mso-a mso-b"}, "faq")

        assert isinstance(result, AuditResult)
        assert (result.title, result.slug, result.source_type) == ("About", "about", "faq")
        assert result.issue_count == 2

    def test_none_for_clean_record(self, auditor):
        assert auditor.evaluate({"body": "clean"}, "Blog") is None

    def test_to_dict(self, auditor):
        result = auditor.evaluate({"slug": "s", "body": "figma=1"}, "Blog")
        assert result.to_dict() == {
            "title": "s",
            "slug": "s",
            "source_type": "Blog",
            "issues": [
                {"pattern": "figma=", "source": "Figma", "path": "body", "value": "figma=1", "count": 1}
            ],
        }
