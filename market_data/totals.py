"""
Market totals: global and per-region base/forecast sizes with CAGR.

Totals are summed from the product-type ("Type") bucket, which partitions
each scope exhaustively.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from market_data.grouping import GroupedStore, get_bucket
from market_data.logger import get_logger
from market_data.metrics import cagr, value_at
from market_data.normalization import GLOBAL_REGION, SEGMENT_TYPE_PRODUCT

logger = get_logger(__name__)


@dataclass(frozen=True)
class SegmentTotals:
    base: float = 0.0
    forecast: float = 0.0
    cagr: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"base": self.base, "forecast": self.forecast, "cagr": self.cagr}


@dataclass(frozen=True)
class MarketTotals:
    global_totals: SegmentTotals
    regional: Mapping[str, SegmentTotals]

    def to_dict(self) -> dict[str, Any]:
        return {
            "global": self.global_totals.to_dict(),
            "regional": {name: totals.to_dict() for name, totals in self.regional.items()},
        }


def _scope_totals(store: GroupedStore, region: str, base_year: int, forecast_year: int) -> SegmentTotals:
    base = 0.0
    forecast = 0.0
    for series in get_bucket(store, region, SEGMENT_TYPE_PRODUCT).values():
        base += value_at(series, base_year)
        forecast += value_at(series, forecast_year)
    return SegmentTotals(base, forecast, cagr(base, forecast, forecast_year - base_year))


def calculate_market_totals(
    store: GroupedStore,
    *,
    base_year: int = 2024,
    forecast_year: int = 2032,
) -> MarketTotals:
    """
    Sum product-type values at the base and forecast years.

    Global totals come from Global -> Type. Every other region gets its own
    totals from its Type bucket (zero when it has none).
    """
    global_totals = _scope_totals(store, GLOBAL_REGION, base_year, forecast_year)
    regional = MappingProxyType({
        region: _scope_totals(store, region, base_year, forecast_year)
        for region in store
        if region != GLOBAL_REGION
    })

    logger.info(
        f"Global market {global_totals.base:,.2f} -> {global_totals.forecast:,.2f} "
        f"({global_totals.cagr:.2f}% CAGR), {len(regional)} regions"
    )
    return MarketTotals(global_totals=global_totals, regional=regional)
