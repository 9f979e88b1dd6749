"""
Hierarchical grouping of rows into the read-only time-series store.

Shape: region -> segment type -> segment name -> (TimeSeriesPoint, ...)
Keys keep first-appearance order; every leaf is sorted ascending by year
with one point per year.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from market_data.config import DUPLICATE_POLICIES
from market_data.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TimeSeriesPoint:
    year: int
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"year": self.year, "value": self.value}


Series = tuple[TimeSeriesPoint, ...]
GroupedStore = Mapping[str, Mapping[str, Mapping[str, Series]]]

EMPTY_STORE: GroupedStore = MappingProxyType({})


def group_rows(
    rows: Iterable[Any],
    *,
    unit_scale: float = 1000.0,
    duplicate_policy: str = "last",
) -> GroupedStore:
    """
    Fold normalized, valid rows into a GroupedStore.

    Args:
        rows: Rows exposing region, segment_type, segment_name, year, value.
        unit_scale: Divisor converting source units to display units.
        duplicate_policy: "last" keeps the last row seen for a repeated
            (region, segment type, segment name, year); "first" keeps the first.

    Returns:
        Read-only nested mapping with year-sorted tuple leaves.
    """
    if duplicate_policy not in DUPLICATE_POLICIES:
        raise ValueError(f"Unknown duplicate policy: {duplicate_policy!r}")
    if unit_scale <= 0:
        raise ValueError(f"unit_scale must be positive, got {unit_scale}")

    buckets: dict[str, dict[str, dict[str, dict[int, float]]]] = {}
    collapsed = 0
    n_rows = 0

    for row in rows:
        n_rows += 1
        years = (
            buckets.setdefault(row.region, {})
            .setdefault(row.segment_type, {})
            .setdefault(row.segment_name, {})
        )
        if row.year in years:
            collapsed += 1
            if duplicate_policy == "first":
                continue
        years[row.year] = row.value / unit_scale

    store = MappingProxyType({
        region: MappingProxyType({
            segment_type: MappingProxyType({
                name: tuple(TimeSeriesPoint(year, years[year]) for year in sorted(years))
                for name, years in names.items()
            })
            for segment_type, names in segment_types.items()
        })
        for region, segment_types in buckets.items()
    })

    if collapsed:
        logger.debug(f"Collapsed {collapsed} duplicate points (policy={duplicate_policy})")
    logger.info(f"Grouped {n_rows} rows into {len(store)} regions")
    return store


def get_bucket(store: GroupedStore, region: str, segment_type: str) -> Mapping[str, Series]:
    """Segment-name mapping for a region and segment type, empty when absent."""
    return store.get(region, EMPTY_STORE).get(segment_type, EMPTY_STORE)


def iter_series(store: GroupedStore) -> Iterable[tuple[str, str, str, Series]]:
    for region, segment_types in store.items():
        for segment_type, names in segment_types.items():
            for name, series in names.items():
                yield region, segment_type, name, series


def store_to_dict(store: GroupedStore) -> dict[str, Any]:
    """Plain nested dict/list copy of the store (JSON compatible)."""
    return {
        region: {
            segment_type: {
                name: [point.to_dict() for point in series]
                for name, series in names.items()
            }
            for segment_type, names in segment_types.items()
        }
        for region, segment_types in store.items()
    }
