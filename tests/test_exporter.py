"""
Tests for CSV and Excel export of snapshots.
"""

import sys
from io import StringIO
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import pandas as pd
import pytest

from market_data.exporter import (
    SnapshotWorkbookWriter,
    count_time_series_records,
    create_snapshot_workbook,
    time_series_to_csv,
)
from market_data.pipeline import build_market_snapshot
from sample_data import SAMPLE_CSV, SAMPLE_ROWS, make_csv


@pytest.fixture
def snapshot():
    return build_market_snapshot(SAMPLE_CSV)


class TestCsvExport:

    def test_header_and_units(self, snapshot):
        text = time_series_to_csv(snapshot)
        lines = text.splitlines()
        assert lines[0] == "Region,Segment Type,Segment Name,Year,Value (USD Million)"
        assert lines[1] == "Global,Type,Mesotherapy,2024,800.0"

    def test_accepts_store(self, snapshot):
        assert time_series_to_csv(snapshot.time_series) == time_series_to_csv(snapshot)

    def test_record_count(self, snapshot):
        assert count_time_series_records(snapshot) == len(SAMPLE_ROWS)
        df = pd.read_csv(StringIO(time_series_to_csv(snapshot)))
        assert len(df) == len(SAMPLE_ROWS)
        assert set(df["Region"]) == {"Global", "North America", "Europe", "Asia Pacific"}

    def test_quarantined_rows_not_exported(self):
        rows = list(SAMPLE_ROWS)
        rows[0] = ("Global", "Type", "Mesotherapy", 1999, 800000)
        snapshot = build_market_snapshot(make_csv(rows))
        assert count_time_series_records(snapshot) == len(SAMPLE_ROWS) - 1


class TestWorkbookExport:

    def test_creates_all_sheets(self, snapshot, tmp_path):
        path = create_snapshot_workbook(snapshot, tmp_path, "snapshot.xlsx")
        assert path == tmp_path / "snapshot.xlsx"
        assert path.exists()

        sheets = pd.read_excel(path, sheet_name=None, engine="openpyxl")
        assert list(sheets) == [
            "Overview",
            "Regions",
            "Product Types",
            "Ingredients",
            "Gender",
            "End Users",
            "Countries",
            "Time Series",
            "Data Quality",
        ]

    def test_sheet_contents(self, snapshot, tmp_path):
        path = create_snapshot_workbook(snapshot, tmp_path, "snapshot.xlsx")

        regions = pd.read_excel(path, sheet_name="Regions", engine="openpyxl")
        assert regions["name"].tolist() == ["North America", "Europe", "Asia Pacific"]
        assert regions.loc[0, "key_markets"] == "United States; Canada"

        time_series = pd.read_excel(path, sheet_name="Time Series", engine="openpyxl")
        assert len(time_series) == len(SAMPLE_ROWS)

        countries = pd.read_excel(path, sheet_name="Countries", engine="openpyxl")
        assert set(countries["name"]) == {"United States", "Canada", "Germany", "United Kingdom"}

    def test_quality_sheet_lists_issues(self, tmp_path):
        rows = list(SAMPLE_ROWS)
        rows[0] = ("Global", "Type", "Mesotherapy", 1999, 800000)
        rows.append(("Global", "Gender", "Male", 2032, 750000))
        snapshot = build_market_snapshot(make_csv(rows))

        path = create_snapshot_workbook(snapshot, tmp_path, "quality.xlsx")
        quality = pd.read_excel(path, sheet_name="Data Quality", engine="openpyxl")

        severities = quality["Severity"].tolist()
        assert severities.count("SCORE") == 3
        assert severities.count("ERROR") == 1
        assert severities.count("WARNING") == 2

    def test_generated_filename(self, snapshot, tmp_path):
        writer = SnapshotWorkbookWriter(tmp_path)
        path = writer.create_snapshot_workbook(snapshot)
        assert path.name.startswith("MarketSnapshot_Global_Skin_Boosters_Market_")
        assert path.suffix == ".xlsx"
        assert writer.workbook is None

    def test_empty_snapshot_exports(self, tmp_path):
        snapshot = build_market_snapshot("Region,Segment Type,Segment Name,Year,Value (USD Thousand)\n")
        path = create_snapshot_workbook(snapshot, tmp_path, "empty.xlsx")
        assert path.exists()
