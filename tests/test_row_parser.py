"""
Unit tests for the row parser.
"""

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import pytest

from market_data.config import VALUE_COLUMN
from market_data.file_loader import detect_delimiter, read_source_text
from market_data.row_parser import Row, parse_rows, read_table
from market_data.validator import SchemaError
from sample_data import HEADER, SAMPLE_CSV, SAMPLE_ROWS, make_csv


class TestParseRows:
    """Tests for text -> Row coercion."""

    def test_parses_every_data_line(self):
        parsed = parse_rows(SAMPLE_CSV)
        assert len(parsed.rows) == len(SAMPLE_ROWS)
        assert parsed.warnings == []

        first = parsed.rows[0]
        assert first == Row(
            index=0,
            region="Global",
            segment_type="Type",
            segment_name="Mesotherapy",
            year=2024,
            value=800000.0,
            raw_year="2024",
            raw_value="800000",
        )

    def test_rows_are_indexed_from_zero(self):
        parsed = parse_rows(SAMPLE_CSV)
        assert [row.index for row in parsed.rows] == list(range(len(SAMPLE_ROWS)))

    def test_trims_headers_and_fields(self):
        text = (
            " Region , Segment Type ,Segment Name, Year ,Value (USD Thousand) \n"
            "  Global , Type ,  Mesotherapy , 2024 , 800000 \n"
        )
        parsed = parse_rows(text)
        row = parsed.rows[0]
        assert row.region == "Global"
        assert row.segment_type == "Type"
        assert row.segment_name == "Mesotherapy"
        assert row.year == 2024
        assert row.value == 800000.0

    def test_thousands_separators_and_currency(self):
        text = HEADER + '\nGlobal,Type,Mesotherapy,2024,"$1,234.50"\n'
        assert parse_rows(text).rows[0].value == 1234.5

    def test_unparseable_value_defaults_to_zero_with_warning(self):
        text = make_csv([("Global", "Type", "Mesotherapy", 2024, "abc")])
        parsed = parse_rows(text)

        assert parsed.rows[0].value == 0.0
        assert len(parsed.warnings) == 1
        warning = parsed.warnings[0]
        assert warning["row"] == 0
        assert warning["column"] == VALUE_COLUMN
        assert warning["value"] == "abc"

    def test_bad_year_does_not_fail_parse(self):
        text = make_csv([
            ("Global", "Type", "Mesotherapy", "20x4", 100),
            ("Global", "Type", "Mesotherapy", "2024.0", 100),
        ])
        parsed = parse_rows(text)
        assert parsed.rows[0].year is None
        assert parsed.rows[0].raw_year == "20x4"
        assert parsed.rows[1].year == 2024

    def test_blank_lines_are_skipped(self):
        text = HEADER + "\n\nGlobal,Type,Mesotherapy,2024,800000\n\n"
        assert len(parse_rows(text).rows) == 1

    def test_line_with_extra_fields_is_skipped(self):
        text = HEADER + "\nGlobal,Type,Mesotherapy,2032,2000000\nGlobal,Type,Mesotherapy,2024,800000,extra\n"
        parsed = parse_rows(text)
        assert len(parsed.rows) == 1
        assert parsed.rows[0].year == 2032
        assert any("malformed" in w["message"] for w in parsed.warnings)

    def test_extra_fields_on_first_data_line_do_not_shift_columns(self):
        text = HEADER + "\nGlobal,Type,Mesotherapy,2024,800,000\nGlobal,Type,Mesotherapy,2032,2000000\n"
        parsed = parse_rows(text)

        assert len(parsed.rows) == 1
        row = parsed.rows[0]
        assert row.region == "Global"
        assert row.segment_type == "Type"
        assert row.segment_name == "Mesotherapy"
        assert row.year == 2032
        assert row.value == 2000000.0
        assert len(parsed.warnings) == 1
        skipped = parsed.warnings[0]
        assert skipped["row"] is None
        assert skipped["value"] == "Global,Type,Mesotherapy,2024,800,000"
        assert "6 fields" in skipped["message"]

    def test_leading_blank_lines_before_header(self):
        text = "\n\n" + HEADER + "\nGlobal,Type,Mesotherapy,2024,800000\n"
        parsed = parse_rows(text)
        assert len(parsed.rows) == 1
        assert parsed.rows[0].region == "Global"

    def test_column_order_is_immaterial(self):
        text = "Year,Value (USD Thousand),Segment Name,Segment Type,Region\n2024,800000,Mesotherapy,Type,Global\n"
        row = parse_rows(text).rows[0]
        assert row.region == "Global"
        assert row.value == 800000.0

    def test_semicolon_delimited_text(self):
        parsed = parse_rows(make_csv(SAMPLE_ROWS[:3], delimiter=";"))
        assert len(parsed.rows) == 3
        assert parsed.rows[2].value == 2000000.0

    def test_header_only_yields_no_rows(self):
        parsed = parse_rows(HEADER + "\n")
        assert parsed.rows == []
        assert parsed.columns == HEADER.split(",")


class TestSchemaErrors:
    """Missing columns abort before any row is processed."""

    def test_missing_year_column_raises(self):
        text = "Region,Segment Type,Segment Name,Value (USD Thousand)\nGlobal,Type,Mesotherapy,800000\n"
        with pytest.raises(SchemaError) as exc_info:
            parse_rows(text)
        assert exc_info.value.missing_columns == ["Year"]
        assert "Year" in str(exc_info.value)

    def test_empty_text_raises(self):
        with pytest.raises(SchemaError):
            parse_rows("")

    def test_schema_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_rows("Foo,Bar\n1,2\n")


class TestReadingHelpers:
    """Delimiter detection and file reading."""

    def test_detect_delimiter(self):
        assert detect_delimiter("a,b,c\n1,2,3") == ","
        assert detect_delimiter("a;b;c\n1;2;3") == ";"
        assert detect_delimiter("a\tb\tc\n1\t2\t3") == "\t"
        assert detect_delimiter("single") == ","

    def test_read_table_blank_text(self):
        df, skipped = read_table("   \n")
        assert df.empty
        assert skipped == []

    def test_read_source_text_latin1_fallback(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_bytes((HEADER + "\nEurope,Country,Österreich,2024,100\n").encode("latin-1"))
        text = read_source_text(path)
        assert "Österreich" in text

    def test_read_source_text_strips_bom(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text(SAMPLE_CSV, encoding="utf-8-sig")
        assert read_source_text(path).startswith("Region")

    def test_read_source_text_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_source_text(tmp_path / "missing.csv")

    def test_read_source_text_rejects_unknown_suffix(self, tmp_path):
        path = tmp_path / "data.xlsx"
        path.write_bytes(b"binary")
        with pytest.raises(ValueError):
            read_source_text(path)
