# tests/test_csv_reader.py
"""Tests for CSV reading and row validation."""

from __future__ import annotations

import pytest

from vacancy_rag.ingestion.csv_reader import read_csv, read_csv_bytes, validate_rows


class TestReadCsv:
    def test_reads_rows_keyed_by_header(self, units_csv):
        rows = read_csv(units_csv)

        assert len(rows) == 3
        assert rows[0] == {
            "Property Name": "S0002 - 101 Maple",
            "Unit": "D2",
            "Status": "Vacant",
            "Rent": "1200",
        }

    def test_values_are_trimmed(self, units_csv):
        rows = read_csv(units_csv)
        assert rows[2]["Unit"] == "1 S"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_csv(tmp_path / "nope.csv")

    def test_strips_bom(self):
        rows = read_csv_bytes(b"\xef\xbb\xbfProperty Name,Unit\nS0002,D2\n")
        assert list(rows[0]) == ["Property Name", "Unit"]

    def test_skips_blank_lines(self):
        rows = read_csv_bytes(b"Property Name,Unit\n\nS0002,D2\n , \nS0003,A1\n")
        assert [r["Unit"] for r in rows] == ["D2", "A1"]

    def test_pads_short_and_truncates_long_rows(self):
        rows = read_csv_bytes(b"A,B,C\n1\n1,2,3,4\n")
        assert rows[0] == {"A": "1", "B": "", "C": ""}
        assert rows[1] == {"A": "1", "B": "2", "C": "3"}

    def test_quoted_values(self):
        rows = read_csv_bytes(b'Property Name,Notes\n"S0002 - Maple","Corner unit, top floor"\n')
        assert rows[0]["Notes"] == "Corner unit, top floor"

    def test_empty_content(self):
        assert read_csv_bytes(b"") == []

    def test_header_only(self):
        assert read_csv_bytes(b"Property Name,Unit\n") == []


class TestValidateRows:
    def test_reports_missing_values(self, caplog):
        rows = [
            {"Property Name": "S0002", "Unit": "D2"},
            {"Property Name": "", "Unit": "D3"},
            {"Unit": " "},
        ]
        with caplog.at_level("WARNING"):
            issues = validate_rows(rows)

        assert [i.row_number for i in issues] == [2, 3]
        assert issues[0].missing == ["Property Name"]
        assert issues[1].missing == ["Property Name", "Unit"]
        assert "Row 2: missing Property Name" in str(issues[0])
        assert "missing required values" in caplog.text

    def test_clean_rows_have_no_issues(self, sample_rows):
        assert validate_rows(sample_rows) == []
