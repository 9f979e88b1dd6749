"""
Pipeline Module - Text to Market Data Snapshot

Orchestrates one synchronous pass:
    parse -> validate -> normalize -> group -> totals -> projections -> metadata

The result is an immutable MarketDataSnapshot. Re-ingesting source text
means building a new snapshot; an existing one is never patched.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from market_data import reference_data
from market_data.config import PipelineSettings, load_settings
from market_data.grouping import GroupedStore, group_rows, store_to_dict
from market_data.logger import debug_watcher, get_logger
from market_data.metadata import generate_metadata
from market_data.normalization import normalize_rows
from market_data.projections import (
    CountryProjection,
    MarketOverview,
    SegmentProjection,
    build_overview,
    project_countries,
    project_end_users,
    project_gender,
    project_ingredients,
    project_product_types,
    project_regions,
)
from market_data.row_parser import parse_rows
from market_data.totals import MarketTotals, calculate_market_totals
from market_data.validator import QualityReport, validate_rows

logger = get_logger(__name__)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class MarketDataSnapshot:
    """Read-only market data model shared by every dashboard view."""

    overview: MarketOverview
    regions: tuple[SegmentProjection, ...]
    product_types: tuple[SegmentProjection, ...]
    ingredients: tuple[SegmentProjection, ...]
    gender: tuple[SegmentProjection, ...]
    end_users: tuple[SegmentProjection, ...]
    countries: Mapping[str, CountryProjection]
    time_series: GroupedStore
    market_players: tuple[Mapping[str, Any], ...]
    trends: tuple[Mapping[str, Any], ...]
    metadata: Mapping[str, Any]
    totals: MarketTotals
    quality_report: QualityReport

    def to_dict(self, include_timestamp: bool = True) -> dict[str, Any]:
        """
        Plain, JSON-compatible copy of the snapshot.

        Args:
            include_timestamp: When False the processing timestamp is dropped,
                which makes outputs of identical inputs compare equal.
        """
        metadata = _thaw(self.metadata)
        if not include_timestamp:
            metadata.get("processing", {}).pop("timestamp", None)

        return {
            "overview": self.overview.to_dict(),
            "regions": [entry.to_dict() for entry in self.regions],
            "product_types": [entry.to_dict() for entry in self.product_types],
            "ingredients": [entry.to_dict() for entry in self.ingredients],
            "gender": [entry.to_dict() for entry in self.gender],
            "end_users": [entry.to_dict() for entry in self.end_users],
            "countries": {name: country.to_dict() for name, country in self.countries.items()},
            "time_series": store_to_dict(self.time_series),
            "market_players": _thaw(self.market_players),
            "trends": _thaw(self.trends),
            "metadata": metadata,
            "totals": self.totals.to_dict(),
            "quality_report": self.quality_report.to_dict(),
        }


@debug_watcher
def build_market_snapshot(
    text: str,
    settings: PipelineSettings | None = None,
    *,
    delimiter: str | None = None,
    data_source: str = "csv",
    timestamp: str | None = None,
) -> MarketDataSnapshot:
    """
    Run the full pipeline over delimited source text.

    Args:
        text: Delimited text with the required header.
        settings: Pipeline settings. Defaults to load_settings().
        delimiter: Optional field delimiter; detected when omitted.
        data_source: Provenance label stored in the metadata.
        timestamp: Fixed processing timestamp (defaults to now).

    Returns:
        MarketDataSnapshot.

    Raises:
        SchemaError: If required columns are missing. Nothing is processed.
    """
    settings = settings or load_settings()

    parsed = parse_rows(text, delimiter=delimiter)
    report = validate_rows(
        parsed.rows,
        year_bounds=settings.year_bounds,
        value_bounds=settings.value_bounds,
        parse_warnings=parsed.warnings,
    )

    valid = set(report.valid_indices)
    rows = normalize_rows([row for row in parsed.rows if row.index in valid])

    store = group_rows(rows, unit_scale=settings.unit_scale, duplicate_policy=settings.duplicate_policy)
    totals = calculate_market_totals(
        store, base_year=settings.base_year, forecast_year=settings.forecast_year
    )
    years = {"base_year": settings.base_year, "forecast_year": settings.forecast_year}

    snapshot = MarketDataSnapshot(
        overview=build_overview(totals, market_name=settings.market_name, **years),
        regions=project_regions(store, totals),
        product_types=project_product_types(store, totals, **years),
        ingredients=project_ingredients(store, totals, **years),
        gender=project_gender(store, totals, **years),
        end_users=project_end_users(store, totals, **years),
        countries=project_countries(store, totals, **years),
        time_series=store,
        market_players=reference_data.MARKET_PLAYERS,
        trends=reference_data.MARKET_TRENDS,
        metadata=_freeze(generate_metadata(rows, report, timestamp=timestamp, data_source=data_source)),
        totals=totals,
        quality_report=report,
    )

    logger.info(
        f"Snapshot ready: {len(snapshot.regions)} regions, {len(snapshot.product_types)} product types, "
        f"{len(snapshot.ingredients)} ingredients, {len(snapshot.countries)} countries"
    )
    return snapshot
