"""
Growth and share metrics.

All functions are total: degenerate input (zero, negative or non-finite
numbers, missing points) yields 0 instead of raising.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

import numpy as np


def _finite(*values: Any) -> bool:
    try:
        return all(math.isfinite(float(v)) for v in values)
    except (TypeError, ValueError):
        return False


def cagr(start_value: float, end_value: float, years: float) -> float:
    """
    Compound annual growth rate in percent.

    Returns 0 when start_value <= 0, end_value <= 0, years <= 0 or any
    argument is not a finite number.
    """
    if not _finite(start_value, end_value, years):
        return 0.0
    if start_value <= 0 or end_value <= 0 or years <= 0:
        return 0.0
    return ((end_value / start_value) ** (1 / years) - 1) * 100


def market_share(segment_value: float, total_value: float) -> float:
    """Segment value as a percentage of total_value; 0 when the total is not positive."""
    if not _finite(segment_value, total_value) or total_value <= 0:
        return 0.0
    return segment_value / total_value * 100


def value_at(series: Sequence[Any], year: int) -> float:
    """Value of the point for year, or 0 when the series has no such point."""
    for point in series:
        if point.year == year:
            return point.value
    return 0.0


def project_series(
    base_value: float,
    cagr_pct: float,
    start_year: int,
    end_year: int,
) -> list[dict[str, float]]:
    """
    Compound a base value forward at a constant growth rate.

    Args:
        base_value: Value at start_year.
        cagr_pct: Annual growth rate in percent.
        start_year: First year (inclusive).
        end_year: Last year (inclusive).

    Returns:
        List of {"year", "value"} points, values rounded to 2 decimals.
        Empty when end_year < start_year or the inputs are not finite.
    """
    if end_year < start_year or not _finite(base_value, cagr_pct):
        return []

    years = np.arange(start_year, end_year + 1)
    values = base_value * np.power(1 + cagr_pct / 100, years - start_year)
    return [
        {"year": int(year), "value": round(float(value), 2)}
        for year, value in zip(years, values)
    ]
