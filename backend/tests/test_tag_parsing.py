"""
Toolhub Backend — Raw Tag Normalization Tests
===============================================

What we test:
    ✅ The three stored shapes (list, array literal, comma-joined) give the same names
    ✅ Quoted array-literal entries are unquoted
    ✅ Empty entries and duplicates (any case/whitespace) are dropped, order kept
    ✅ None and blank strings mean "no tags"
    ✅ Unsupported types are rejected
"""

import pytest

from toolhub.exceptions import ValidationError
from toolhub.services.tag_parsing import (
    RawTagsForm,
    classify_raw_tags,
    normalize_tag_name,
    parse_raw_tags,
)


class TestNormalizeTagName:

    def test_trims_collapses_and_lowercases(self):
        assert normalize_tag_name("  Machine   Learning ") == "machine learning"

    def test_blank_becomes_empty(self):
        assert normalize_tag_name("   ") == ""


class TestClassifyRawTags:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, RawTagsForm.EMPTY),
            ("", RawTagsForm.EMPTY),
            ("   ", RawTagsForm.EMPTY),
            (["a"], RawTagsForm.LIST),
            (("a", "b"), RawTagsForm.LIST),
            ("{a,b}", RawTagsForm.ARRAY_LITERAL),
            (" {a} ", RawTagsForm.ARRAY_LITERAL),
            ("a, b", RawTagsForm.DELIMITED),
            ("single", RawTagsForm.DELIMITED),
        ],
    )
    def test_detects_form(self, raw, expected):
        assert classify_raw_tags(raw) is expected

    def test_rejects_other_types(self):
        with pytest.raises(ValidationError) as exc_info:
            classify_raw_tags({"tags": ["a"]})
        assert exc_info.value.context["field"] == "tags"


class TestParseRawTags:

    def test_array_literal_string(self):
        assert parse_raw_tags("{tag1,tag2}") == ["tag1", "tag2"]

    def test_comma_joined_string(self):
        assert parse_raw_tags("tag1, tag2") == ["tag1", "tag2"]

    def test_list(self):
        assert parse_raw_tags(["AI", "Writing"]) == ["ai", "writing"]

    def test_quoted_array_literal_entries(self):
        assert parse_raw_tags('{"Writing Tools",AI}') == ["writing tools", "ai"]

    def test_drops_empty_entries(self):
        assert parse_raw_tags("a,, ,b,") == ["a", "b"]
        assert parse_raw_tags("{}") == []
        assert parse_raw_tags(["", "  ", "a"]) == ["a"]

    def test_case_and_whitespace_variants_collapse(self):
        assert parse_raw_tags(["ai", "AI", " ai "]) == ["ai"]

    def test_keeps_first_seen_order(self):
        assert parse_raw_tags("zeta, Alpha, zeta, beta") == ["zeta", "alpha", "beta"]

    def test_none_and_blank_mean_no_tags(self):
        assert parse_raw_tags(None) == []
        assert parse_raw_tags("  ") == []
        assert parse_raw_tags([]) == []

    def test_none_entries_in_list_are_skipped(self):
        assert parse_raw_tags(["a", None, "b"]) == ["a", "b"]

    def test_rejects_numbers(self):
        with pytest.raises(ValidationError):
            parse_raw_tags(42)
