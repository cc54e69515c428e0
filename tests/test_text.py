# tests/test_text.py
"""Tests for text normalization."""

from __future__ import annotations

from vacancy_rag.ingestion.text import clean_text, format_field, is_valid_text, row_to_text


class TestCleanText:
    def test_collapses_whitespace(self):
        assert clean_text("  Unit   D2\n\tVacant  ") == "Unit D2 Vacant"

    def test_removes_control_characters(self):
        assert clean_text("Unit\x00D2\x7f") == "UnitD2"

    def test_non_string_is_empty(self):
        assert clean_text(None) == ""
        assert clean_text(12) == ""


class TestRowToText:
    def test_joins_fields(self):
        text = row_to_text({"Property Name": "S0002", "Unit": "D2"})
        assert text == "Property Name: S0002 | Unit: D2"

    def test_excludes_keys_case_insensitively(self):
        text = row_to_text({"ID": "7", "Embedding": "[1,2]", "Unit": "D2"})
        assert text == "Unit: D2"

    def test_custom_exclude_keys(self):
        text = row_to_text({"UID": "S0002_D2", "Unit": "D2"}, exclude_keys=("uid",))
        assert text == "Unit: D2"

    def test_skips_none_values(self):
        assert row_to_text({"Unit": "D2", "Notes": None}) == "Unit: D2"

    def test_nested_values_are_json(self):
        assert format_field("tags", ["a", "b"]) == '["a", "b"]'
        assert format_field("Unit", "D2") == "Unit: D2"


class TestIsValidText:
    def test_accepts_ordinary_text(self):
        assert is_valid_text("Unit: D2 | Status: Vacant")

    def test_rejects_short_text(self):
        assert not is_valid_text("Unit: D2")

    def test_rejects_mostly_punctuation(self):
        assert not is_valid_text("-- | -- | -- | a")

    def test_rejects_non_string(self):
        assert not is_valid_text(None)
        assert not is_valid_text(["Unit: D2 | Status: Vacant"])
