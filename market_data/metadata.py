"""Run metadata: record counts, quality scores, coverage and provenance."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from market_data.config import PIPELINE_VERSION
from market_data.normalization import SEGMENT_TYPE_COUNTRY
from market_data.validator import QualityReport


def generate_metadata(
    rows: Sequence[Any],
    report: QualityReport,
    *,
    timestamp: str | None = None,
    data_source: str = "csv",
) -> dict[str, Any]:
    """
    Summarize a pipeline run.

    Args:
        rows: Valid, normalized rows the snapshot was built from.
        report: Validation report for the full input.
        timestamp: ISO-8601 processing time. Defaults to now (UTC).
        data_source: Free-form provenance label.

    Returns:
        Metadata dict. year_range is None when no row carries a year.
    """
    regions = {row.region for row in rows}
    segment_types = {row.segment_type for row in rows}
    years = sorted({row.year for row in rows if row.year is not None})
    countries = {row.segment_name for row in rows if row.segment_type == SEGMENT_TYPE_COUNTRY}

    return {
        "total_records": report.total_rows,
        "valid_records": report.valid_rows,
        "data_quality": dict(report.quality),
        "coverage": {
            "regions": len(regions),
            "segment_types": len(segment_types),
            "year_range": {"start": years[0], "end": years[-1]} if years else None,
            "countries": len(countries),
        },
        "processing": {
            "timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
            "version": PIPELINE_VERSION,
            "data_source": data_source,
        },
    }
