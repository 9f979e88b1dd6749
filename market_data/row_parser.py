"""
Row Parser Module - Delimited Text to Typed Rows

Turns raw delimited text (header row + one observation per line) into typed
Row records:
- Header names and every field are trimmed
- Year is coerced to int (a bad year fails the row later, not the parse)
- Value is coerced to float; currency symbols and thousands separators are
  ignored, and an uncoercible value becomes 0.0 with a parse warning
- Lines with too many fields are skipped with a parse warning
"""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from io import StringIO
from typing import Any

import pandas as pd

from market_data.config import (
    REGION_COLUMN,
    SEGMENT_NAME_COLUMN,
    SEGMENT_TYPE_COLUMN,
    VALUE_COLUMN,
    YEAR_COLUMN,
)
from market_data.file_loader import detect_delimiter
from market_data.logger import debug_watcher, get_logger
from market_data.validator import validate_structure
from market_data.value_parser import parse_numeric_value, parse_year

logger = get_logger(__name__)


@dataclass(frozen=True)
class Row:
    """One observation: region x segment type x segment name x year."""

    index: int
    region: str
    segment_type: str
    segment_name: str
    year: int | None
    value: float | None
    raw_year: str = ""
    raw_value: str = ""


@dataclass
class ParsedRows:
    """Result of parsing: typed rows, per-row parse warnings and source columns."""

    rows: list[Row] = field(default_factory=list)
    warnings: list[dict[str, Any]] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)


def _drop_long_records(text: str, sep: str) -> tuple[str, list[dict[str, Any]]]:
    """
    Remove records with more fields than the header.

    pandas reads a first data line that is one field longer than the header
    as an implicit index column and shifts every column of the file, so long
    records are dropped before the frame is built.
    """
    skipped: list[dict[str, Any]] = []
    reader = csv.reader(StringIO(text), delimiter=sep)
    header = next((fields for fields in reader if fields), [])
    width = len(header)

    buffer = StringIO()
    writer = csv.writer(buffer, delimiter=sep, lineterminator="\n")
    writer.writerow(header)
    for fields in reader:
        if not fields:
            continue
        if len(fields) > width:
            skipped.append({
                "row": None,
                "column": None,
                "value": sep.join(fields),
                "message": f"Skipped malformed line with {len(fields)} fields",
            })
            continue
        writer.writerow(fields)

    if skipped:
        logger.warning(f"Skipped {len(skipped)} malformed lines")
    return buffer.getvalue(), skipped


def read_table(text: str, *, delimiter: str | None = None) -> tuple[pd.DataFrame, list[dict[str, Any]]]:
    """
    Read delimited text into a string-typed DataFrame.

    Args:
        text: Raw delimited text with a header row.
        delimiter: Field delimiter. Detected from the header when None.

    Returns:
        Tuple of (DataFrame with trimmed headers, list of skipped-line warnings).
    """
    text = text.lstrip("\ufeff") if text else ""
    if not text.strip():
        return pd.DataFrame(), []

    sep = delimiter or detect_delimiter(text)
    clean, skipped = _drop_long_records(text, sep)

    df = pd.read_csv(
        StringIO(clean),
        sep=sep,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        index_col=False,
        engine="python",
    )
    df.columns = [str(col).strip() for col in df.columns]
    df = df.fillna("")
    return df, skipped


def _coerce_row(index: int, record: dict[str, Any], warnings: list[dict[str, Any]]) -> Row:
    raw_year = str(record.get(YEAR_COLUMN, "")).strip()
    raw_value = str(record.get(VALUE_COLUMN, "")).strip()

    value = parse_numeric_value(raw_value)
    if value is None:
        warnings.append({
            "row": index,
            "column": VALUE_COLUMN,
            "value": raw_value,
            "message": f"Could not parse value {raw_value!r}; defaulted to 0",
        })
        value = 0.0

    return Row(
        index=index,
        region=str(record.get(REGION_COLUMN, "")).strip(),
        segment_type=str(record.get(SEGMENT_TYPE_COLUMN, "")).strip(),
        segment_name=str(record.get(SEGMENT_NAME_COLUMN, "")).strip(),
        year=parse_year(raw_year),
        value=value,
        raw_year=raw_year,
        raw_value=raw_value,
    )


def rows_from_frame(df: pd.DataFrame) -> ParsedRows:
    """Coerce a string-typed DataFrame (required columns present) into rows."""
    result = ParsedRows(columns=list(df.columns))
    for index, record in enumerate(df.to_dict(orient="records")):
        result.rows.append(_coerce_row(index, record, result.warnings))
    return result


@debug_watcher
def parse_rows(text: str, *, delimiter: str | None = None) -> ParsedRows:
    """
    Parse delimited text into typed rows.

    Args:
        text: Raw delimited text with a header row.
        delimiter: Optional field delimiter; detected when omitted.

    Returns:
        ParsedRows with rows, parse warnings and the trimmed source columns.

    Raises:
        SchemaError: If any required column is missing from the header.
    """
    df, skipped = read_table(text, delimiter=delimiter)

    # Schema problems abort before any row is coerced
    validate_structure(df.columns)

    result = rows_from_frame(df)
    result.warnings = skipped + result.warnings

    logger.info(
        f"Parsed {len(result.rows)} rows ({len(result.warnings)} parse warnings) "
        f"from {len(result.columns)} columns"
    )
    return result
