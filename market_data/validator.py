"""
Validator Module - Schema, Row and Quality Checks

Applies structural and data-quality rules to parsed rows:
- Required-column presence (fatal: raises SchemaError)
- Per-row shape, type and range checks (row-local: recorded as errors)
- Duplicate (region, segment type, segment name, year) tuples (advisory: warnings)
- Completeness / consistency / accuracy scoring
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pandas as pd

from market_data.config import (
    REGION_COLUMN,
    REQUIRED_COLUMNS,
    SEGMENT_NAME_COLUMN,
    SEGMENT_TYPE_COLUMN,
    VALUE_COLUMN,
    YEAR_COLUMN,
)
from market_data.logger import get_logger
from market_data.normalization import (
    normalize_region,
    normalize_segment_name,
    normalize_segment_type,
)

if TYPE_CHECKING:
    from market_data.row_parser import Row

logger = get_logger(__name__)


class SchemaError(ValueError):
    """Raised when the source is missing required columns."""

    def __init__(self, missing_columns: Sequence[str]):
        self.missing_columns = list(missing_columns)
        super().__init__(f"Missing required columns: {', '.join(self.missing_columns)}")


@dataclass
class QualityReport:
    """Outcome of row validation. Scores are descriptive, never gates."""

    total_rows: int = 0
    valid_rows: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)
    warnings: list[dict[str, Any]] = field(default_factory=list)
    quality: dict[str, float] = field(default_factory=dict)
    valid_indices: tuple[int, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_rows": self.total_rows,
            "valid_rows": self.valid_rows,
            "errors": [dict(e) for e in self.errors],
            "warnings": [dict(w) for w in self.warnings],
            "quality": dict(self.quality),
        }


def validate_structure(columns: Iterable[str]) -> None:
    """
    Check that every required column is present (order is immaterial).

    Raises:
        SchemaError: Naming all missing columns.
    """
    present = {str(col).strip() for col in columns}
    missing = [col for col in REQUIRED_COLUMNS if col not in present]
    if missing:
        logger.error(f"Schema check failed, missing columns: {missing}")
        raise SchemaError(missing)


def _error(row: Row, column: str, value: Any, message: str) -> dict[str, Any]:
    return {"row": row.index, "column": column, "value": value, "message": message}


def _check_row(
    row: Row,
    year_bounds: tuple[int, int],
    value_bounds: tuple[float, float],
) -> list[dict[str, Any]]:
    errors = []

    for column, text in (
        (REGION_COLUMN, row.region),
        (SEGMENT_TYPE_COLUMN, row.segment_type),
        (SEGMENT_NAME_COLUMN, row.segment_name),
    ):
        if not text:
            errors.append(_error(row, column, text, f"{column} is empty"))

    min_year, max_year = year_bounds
    if row.year is None:
        errors.append(_error(row, YEAR_COLUMN, row.raw_year, f"Year {row.raw_year!r} is not a valid integer"))
    elif row.year < min_year or row.year > max_year:
        errors.append(_error(
            row, YEAR_COLUMN, row.year,
            f"Value {row.year} is outside expected range [{min_year}, {max_year}]",
        ))

    min_value, max_value = value_bounds
    if row.value is None or not math.isfinite(row.value):
        errors.append(_error(row, VALUE_COLUMN, row.raw_value, "Value is missing or not numeric"))
    elif row.value < min_value or row.value > max_value:
        errors.append(_error(
            row, VALUE_COLUMN, row.value,
            f"Value {row.value} is outside expected range [{min_value}, {max_value}]",
        ))

    return errors


def _duplicate_warnings(rows: Sequence[Row]) -> list[dict[str, Any]]:
    """One warning per row whose normalized key tuple appears more than once."""
    keyed = [row for row in rows if row.year is not None]
    if not keyed:
        return []

    keys = pd.DataFrame(
        {
            "row": [row.index for row in keyed],
            "region": [normalize_region(row.region) for row in keyed],
            "segment_type": [normalize_segment_type(row.segment_type) for row in keyed],
            "segment_name": [normalize_segment_name(row.segment_name) for row in keyed],
            "year": [row.year for row in keyed],
        }
    )
    dupes = keys[keys.duplicated(subset=["region", "segment_type", "segment_name", "year"], keep=False)]

    return [
        {
            "row": int(rec["row"]),
            "column": None,
            "value": f"{rec['region']} | {rec['segment_type']} | {rec['segment_name']} | {rec['year']}",
            "message": (
                f"Potential duplicate entry for {rec['region']} - "
                f"{rec['segment_name']} ({rec['year']})"
            ),
        }
        for rec in dupes.to_dict(orient="records")
    ]


def _score(total: int, valid: int, n_warnings: int, n_errors: int) -> dict[str, float]:
    if total == 0:
        return {"completeness": 100.0, "consistency": 100.0, "accuracy": 100.0}
    return {
        "completeness": valid / total * 100,
        "consistency": max(0.0, 100 - n_warnings / total * 100),
        "accuracy": max(0.0, 100 - n_errors / total * 100),
    }


def validate_rows(
    rows: Sequence[Row],
    *,
    year_bounds: tuple[int, int] = (2020, 2035),
    value_bounds: tuple[float, float] = (0.0, 10_000_000.0),
    parse_warnings: Sequence[dict[str, Any]] | None = None,
) -> QualityReport:
    """
    Validate parsed rows and score data quality.

    Invalid rows are excluded from valid_rows/valid_indices. Duplicate
    warnings only consider rows that passed validation, so a rejected row
    is reported once, as an error.

    Args:
        rows: Parsed rows.
        year_bounds: Inclusive (min, max) year.
        value_bounds: Inclusive (min, max) value in source units.
        parse_warnings: Warnings from the row parser, merged into the report.

    Returns:
        QualityReport.
    """
    report = QualityReport(total_rows=len(rows))
    report.warnings.extend(dict(w) for w in (parse_warnings or []))

    valid_indices = []
    valid = []
    for row in rows:
        row_errors = _check_row(row, year_bounds, value_bounds)
        if row_errors:
            report.errors.extend(row_errors)
            logger.debug(f"Row {row.index} rejected: {[e['message'] for e in row_errors]}")
        else:
            valid_indices.append(row.index)
            valid.append(row)

    report.warnings.extend(_duplicate_warnings(valid))

    report.valid_indices = tuple(valid_indices)
    report.valid_rows = len(valid_indices)
    report.quality = _score(report.total_rows, report.valid_rows, len(report.warnings), len(report.errors))

    logger.info(
        f"Validated {report.total_rows} rows: {report.valid_rows} valid, "
        f"{len(report.errors)} errors, {len(report.warnings)} warnings"
    )
    return report
