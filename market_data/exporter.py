"""
Exporter Module - Snapshot Output Generator

Writes a market data snapshot out as:
- Long-format delimited text (the grouped time series, display units)
- A formatted Excel workbook with Overview, one sheet per dimension view,
  Countries, Time Series and a Data Quality sheet
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pandas as pd
import xlsxwriter
from xlsxwriter.workbook import Workbook
from xlsxwriter.worksheet import Worksheet

from market_data.config import (
    EXPORT_VALUE_COLUMN,
    OUTPUT_PATH,
    OUTPUT_SETTINGS,
    QUALITY_COLORS,
    REGION_COLUMN,
    SEGMENT_NAME_COLUMN,
    SEGMENT_TYPE_COLUMN,
    YEAR_COLUMN,
)
from market_data.grouping import GroupedStore, iter_series
from market_data.logger import debug_watcher, get_logger

if TYPE_CHECKING:
    from market_data.pipeline import MarketDataSnapshot

logger = get_logger(__name__)

TIME_SERIES_COLUMNS = [
    REGION_COLUMN,
    SEGMENT_TYPE_COLUMN,
    SEGMENT_NAME_COLUMN,
    YEAR_COLUMN,
    EXPORT_VALUE_COLUMN,
]

DIMENSION_SHEETS = (
    ("regions", "Regions"),
    ("product_types", "Product Types"),
    ("ingredients", "Ingredients"),
    ("gender", "Gender"),
    ("end_users", "End Users"),
)


def _resolve_store(source: MarketDataSnapshot | GroupedStore) -> GroupedStore:
    return getattr(source, "time_series", source)


def time_series_frame(source: MarketDataSnapshot | GroupedStore) -> pd.DataFrame:
    """Flatten the grouped store into a long-format DataFrame."""
    records = [
        (region, segment_type, name, point.year, point.value)
        for region, segment_type, name, series in iter_series(_resolve_store(source))
        for point in series
    ]
    return pd.DataFrame.from_records(records, columns=TIME_SERIES_COLUMNS)


def time_series_to_csv(source: MarketDataSnapshot | GroupedStore) -> str:
    """
    Serialize the grouped time series as comma-separated text.

    Args:
        source: A snapshot or its GroupedStore.

    Returns:
        Text with header "Region,Segment Type,Segment Name,Year,Value (USD Million)".
    """
    return time_series_frame(source).to_csv(index=False, lineterminator="\n")


def count_time_series_records(source: MarketDataSnapshot | GroupedStore) -> int:
    return sum(len(series) for _, _, _, series in iter_series(_resolve_store(source)))


def _cell(value: Any) -> Any:
    if isinstance(value, (tuple, list)):
        return "; ".join(str(item) for item in value)
    # numpy scalars to native Python
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        return value.item()
    return value


class SnapshotWorkbookWriter:
    """Creates formatted Excel workbooks from a market data snapshot."""

    def __init__(self, output_path: Path | str | None = None):
        """
        Initialize the writer.

        Args:
            output_path: Directory for output files. Defaults to OUTPUT_PATH.
        """
        self.output_path = Path(output_path) if output_path else OUTPUT_PATH
        self.output_path.mkdir(parents=True, exist_ok=True)

        self.workbook: Workbook | None = None
        self.formats: dict[str, Any] = {}

    def _generate_filename(self, market_name: str) -> str:
        timestamp = datetime.now().strftime(OUTPUT_SETTINGS["timestamp_format"])
        slug = re.sub(r"[^A-Za-z0-9]+", "_", market_name).strip("_") or "Market"
        return OUTPUT_SETTINGS["workbook_name_pattern"].format(market=slug, timestamp=timestamp)

    def _setup_formats(self) -> None:
        if self.workbook is None:
            return

        self.formats["header"] = self.workbook.add_format({
            "bold": True,
            "bg_color": "#4472C4",
            "font_color": "#FFFFFF",
            "border": 1,
            "align": "center",
            "valign": "vcenter",
            "text_wrap": True,
        })
        self.formats["currency"] = self.workbook.add_format({
            "num_format": OUTPUT_SETTINGS["currency_format"],
            "border": 1,
        })
        self.formats["percentage"] = self.workbook.add_format({
            "num_format": OUTPUT_SETTINGS["percentage_format"],
            "border": 1,
        })
        self.formats["integer"] = self.workbook.add_format({
            "num_format": OUTPUT_SETTINGS["integer_format"],
            "border": 1,
        })
        self.formats["default"] = self.workbook.add_format({"border": 1})
        self.formats["label"] = self.workbook.add_format({"bold": True, "border": 1})

        # Data Quality rows
        self.formats["quality_error"] = self.workbook.add_format({
            "bg_color": QUALITY_COLORS["ERROR"],
            "border": 1,
        })
        self.formats["quality_warning"] = self.workbook.add_format({
            "bg_color": QUALITY_COLORS["WARNING"],
            "border": 1,
        })
        self.formats["quality_ok"] = self.workbook.add_format({
            "bg_color": QUALITY_COLORS["OK"],
            "border": 1,
        })

    def _get_column_format(self, column_name: str) -> Any:
        name_lower = column_name.lower()

        if any(kw in name_lower for kw in ["share", "cagr", "rate", "%", "completeness", "accuracy", "consistency"]):
            return self.formats["percentage"]
        elif any(kw in name_lower for kw in ["size", "value", "spending", "population", "usd"]):
            return self.formats["currency"]
        elif any(kw in name_lower for kw in ["year", "row", "records"]):
            return self.formats["integer"]
        else:
            return self.formats["default"]

    def write_frame(self, df: pd.DataFrame, sheet_name: str) -> Worksheet:
        """
        Write a DataFrame as a formatted sheet with a frozen header row.

        Args:
            df: Data to write.
            sheet_name: Name of the worksheet.

        Returns:
            The created worksheet.
        """
        if self.workbook is None:
            raise RuntimeError("Workbook not initialized")

        ws = self.workbook.add_worksheet(sheet_name)

        for col_idx, col_name in enumerate(df.columns):
            ws.write(0, col_idx, col_name, self.formats["header"])

        for row_idx, record in enumerate(df.itertuples(index=False), start=1):
            for col_idx, col_name in enumerate(df.columns):
                value = _cell(record[col_idx])
                cell_format = self._get_column_format(str(col_name))
                if value is None or (isinstance(value, float) and pd.isna(value)):
                    ws.write_blank(row_idx, col_idx, None, cell_format)
                else:
                    ws.write(row_idx, col_idx, value, cell_format)

        for col_idx, col_name in enumerate(df.columns):
            max_width = len(str(col_name))
            for value in df[col_name].head(10):
                max_width = max(max_width, len(str(_cell(value))))
            ws.set_column(col_idx, col_idx, min(max_width + 2, 50))

        ws.freeze_panes(1, 0)
        return ws

    def create_overview_sheet(self, snapshot: MarketDataSnapshot, sheet_name: str = "Overview") -> Worksheet:
        if self.workbook is None:
            raise RuntimeError("Workbook not initialized")

        ws = self.workbook.add_worksheet(sheet_name)
        overview = snapshot.overview
        coverage = snapshot.metadata.get("coverage", {})
        year_range = coverage.get("year_range")

        rows = [
            ("Market", overview.market_name, "default"),
            ("Base Year", overview.base_year, "integer"),
            ("Forecast Year", overview.forecast_year, "integer"),
            (f"Market Size {overview.base_year} (USD Million)", overview.market_size_base, "currency"),
            (f"Market Size {overview.forecast_year} (USD Million)", overview.market_size_forecast, "currency"),
            ("CAGR (%)", overview.cagr, "percentage"),
            ("Regions", coverage.get("regions", 0), "integer"),
            ("Countries", coverage.get("countries", 0), "integer"),
            (
                "Year Range",
                f"{year_range['start']}-{year_range['end']}" if year_range else "n/a",
                "default",
            ),
            ("Key Drivers", _cell(overview.key_drivers), "default"),
            ("Key Restraints", _cell(overview.key_restraints), "default"),
        ]

        for row_idx, (label, value, fmt) in enumerate(rows):
            ws.write(row_idx, 0, label, self.formats["label"])
            ws.write(row_idx, 1, value, self.formats[fmt])

        ws.set_column(0, 0, 32)
        ws.set_column(1, 1, 60)
        return ws

    def create_quality_sheet(self, snapshot: MarketDataSnapshot, sheet_name: str = "Data Quality") -> Worksheet:
        """
        Create the Data Quality sheet.

        Lists quality scores followed by every validation error (red) and
        warning (yellow).
        """
        if self.workbook is None:
            raise RuntimeError("Workbook not initialized")

        ws = self.workbook.add_worksheet(sheet_name)
        report = snapshot.quality_report

        columns = ["Severity", "Row", "Column", "Value", "Message"]
        for col_idx, col_name in enumerate(columns):
            ws.write(0, col_idx, col_name, self.formats["header"])

        row_idx = 1
        for metric, score in report.quality.items():
            ws.write(row_idx, 0, "SCORE", self.formats["quality_ok"])
            ws.write_blank(row_idx, 1, None, self.formats["quality_ok"])
            ws.write(row_idx, 2, metric, self.formats["quality_ok"])
            ws.write(row_idx, 3, round(score, 2), self.formats["quality_ok"])
            ws.write_blank(row_idx, 4, None, self.formats["quality_ok"])
            row_idx += 1

        for severity, issues, fmt in (
            ("ERROR", report.errors, self.formats["quality_error"]),
            ("WARNING", report.warnings, self.formats["quality_warning"]),
        ):
            for issue in issues:
                ws.write(row_idx, 0, severity, fmt)
                for col_idx, key in enumerate(("row", "column", "value", "message"), start=1):
                    value = issue.get(key)
                    if value is None:
                        ws.write_blank(row_idx, col_idx, None, fmt)
                    else:
                        ws.write(row_idx, col_idx, value, fmt)
                row_idx += 1

        for col_idx, width in enumerate([12, 8, 22, 40, 70]):
            ws.set_column(col_idx, col_idx, width)
        ws.freeze_panes(1, 0)
        return ws

    def create_snapshot_workbook(
        self,
        snapshot: MarketDataSnapshot,
        output_filename: str | None = None,
    ) -> Path:
        """
        Create a complete workbook with all sheets.

        Args:
            snapshot: Snapshot to export.
            output_filename: Custom output filename. If None, auto-generated.

        Returns:
            Path to the created workbook.
        """
        if output_filename is None:
            output_filename = self._generate_filename(snapshot.overview.market_name)

        output_path = self.output_path / output_filename

        self.workbook = xlsxwriter.Workbook(str(output_path))
        self._setup_formats()

        try:
            self.create_overview_sheet(snapshot)

            for attr, sheet_name in DIMENSION_SHEETS:
                entries = getattr(snapshot, attr)
                self.write_frame(pd.DataFrame([entry.to_dict() for entry in entries]), sheet_name)

            countries = pd.DataFrame([country.to_dict() for country in snapshot.countries.values()])
            self.write_frame(countries, "Countries")

            self.write_frame(time_series_frame(snapshot), "Time Series")
            self.create_quality_sheet(snapshot)
        finally:
            self.workbook.close()
            self.workbook = None

        logger.info(f"Workbook written: {output_path}")
        return output_path


@debug_watcher
def create_snapshot_workbook(
    snapshot: MarketDataSnapshot,
    output_path: Path | str | None = None,
    output_filename: str | None = None,
) -> Path:
    """
    Convenience function to create a snapshot workbook.

    Args:
        snapshot: Snapshot to export.
        output_path: Output directory.
        output_filename: Custom output filename.

    Returns:
        Path to the created workbook.
    """
    writer = SnapshotWorkbookWriter(output_path)
    return writer.create_snapshot_workbook(snapshot, output_filename)
