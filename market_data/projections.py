"""
View Projector Module - Consumer-Facing Dimension Views

Builds one projection per dashboard dimension from the grouped store and
market totals:
- Regions (regional totals against global totals)
- Product types and ingredients (Global bucket, sorted by forecast share)
- Gender (Global bucket, input order)
- End users (one global entry per channel)
- Countries (keyed by name, share of the owning region)
- Overview (headline numbers plus static drivers/restraints)

Every entry carries shares and CAGR from the metric functions and static
descriptive details from reference_data. Nothing here raises on degenerate
numbers.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from market_data import reference_data
from market_data.grouping import GroupedStore, Series, get_bucket
from market_data.logger import get_logger
from market_data.metrics import cagr, market_share, value_at
from market_data.normalization import (
    GLOBAL_REGION,
    SEGMENT_TYPE_COUNTRY,
    SEGMENT_TYPE_END_USER,
    SEGMENT_TYPE_GENDER,
    SEGMENT_TYPE_INGREDIENT,
    SEGMENT_TYPE_PRODUCT,
)
from market_data.totals import MarketTotals, SegmentTotals

logger = get_logger(__name__)


def _plain(value: Any) -> Any:
    """Recursively convert tuples and read-only mappings to lists and dicts."""
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (tuple, list)):
        return [_plain(item) for item in value]
    return value


@dataclass(frozen=True)
class SegmentProjection:
    name: str
    market_size_base: float
    market_size_forecast: float
    market_share_base: float
    market_share_forecast: float
    cagr: float
    details: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def to_dict(self) -> dict[str, Any]:
        result = {
            "name": self.name,
            "market_size_base": self.market_size_base,
            "market_size_forecast": self.market_size_forecast,
            "market_share_base": self.market_share_base,
            "market_share_forecast": self.market_share_forecast,
            "cagr": self.cagr,
        }
        result.update(_plain(self.details))
        return result


@dataclass(frozen=True)
class CountryProjection:
    name: str
    region: str
    market_size_base: float
    market_size_forecast: float
    cagr: float
    regional_share_base: float
    regional_share_forecast: float
    population: float
    penetration_rate: float
    average_spending: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "region": self.region,
            "market_size_base": self.market_size_base,
            "market_size_forecast": self.market_size_forecast,
            "cagr": self.cagr,
            "regional_share_base": self.regional_share_base,
            "regional_share_forecast": self.regional_share_forecast,
            "population": self.population,
            "penetration_rate": self.penetration_rate,
            "average_spending": self.average_spending,
        }


@dataclass(frozen=True)
class MarketOverview:
    market_name: str
    base_year: int
    forecast_year: int
    cagr: float
    market_size_base: float
    market_size_forecast: float
    key_drivers: tuple[str, ...] = ()
    key_restraints: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "market_name": self.market_name,
            "base_year": self.base_year,
            "forecast_year": self.forecast_year,
            "cagr": self.cagr,
            "market_size_base": self.market_size_base,
            "market_size_forecast": self.market_size_forecast,
            "key_drivers": list(self.key_drivers),
            "key_restraints": list(self.key_restraints),
        }


def _entry(
    name: str,
    base: float,
    forecast: float,
    scope: SegmentTotals,
    years: int,
    details: Mapping[str, Any],
) -> SegmentProjection:
    return SegmentProjection(
        name=name,
        market_size_base=base,
        market_size_forecast=forecast,
        market_share_base=market_share(base, scope.base),
        market_share_forecast=market_share(forecast, scope.forecast),
        cagr=cagr(base, forecast, years),
        details=MappingProxyType(dict(details)),
    )


def _by_forecast_share(entries: Sequence[SegmentProjection]) -> tuple[SegmentProjection, ...]:
    # Stable: ties keep input order
    return tuple(sorted(entries, key=lambda entry: entry.market_share_forecast, reverse=True))


def _project_bucket(
    bucket: Mapping[str, Series],
    totals: MarketTotals,
    base_year: int,
    forecast_year: int,
    details_for,
) -> list[SegmentProjection]:
    return [
        _entry(
            name,
            value_at(series, base_year),
            value_at(series, forecast_year),
            totals.global_totals,
            forecast_year - base_year,
            details_for(name),
        )
        for name, series in bucket.items()
    ]


def project_regions(store: GroupedStore, totals: MarketTotals) -> tuple[SegmentProjection, ...]:
    """
    One entry per non-Global region, sorted by forecast share descending.

    Regions whose totals are zero are still listed (with zero share).
    """
    entries = []
    for region, regional in totals.regional.items():
        entries.append(SegmentProjection(
            name=region,
            market_size_base=regional.base,
            market_size_forecast=regional.forecast,
            market_share_base=market_share(regional.base, totals.global_totals.base),
            market_share_forecast=market_share(regional.forecast, totals.global_totals.forecast),
            cagr=regional.cagr,
            details=MappingProxyType({
                "key_markets": tuple(get_bucket(store, region, SEGMENT_TYPE_COUNTRY)),
                "market_drivers": reference_data.regional_drivers(region),
            }),
        ))
    return _by_forecast_share(entries)


def project_product_types(
    store: GroupedStore,
    totals: MarketTotals,
    *,
    base_year: int = 2024,
    forecast_year: int = 2032,
) -> tuple[SegmentProjection, ...]:
    entries = _project_bucket(
        get_bucket(store, GLOBAL_REGION, SEGMENT_TYPE_PRODUCT),
        totals,
        base_year,
        forecast_year,
        lambda name: {
            "description": reference_data.product_description(name),
            "applications": reference_data.product_applications(name),
        },
    )
    return _by_forecast_share(entries)


def project_ingredients(
    store: GroupedStore,
    totals: MarketTotals,
    *,
    base_year: int = 2024,
    forecast_year: int = 2032,
) -> tuple[SegmentProjection, ...]:
    entries = _project_bucket(
        get_bucket(store, GLOBAL_REGION, SEGMENT_TYPE_INGREDIENT),
        totals,
        base_year,
        forecast_year,
        lambda name: {"benefits": reference_data.ingredient_benefits(name)},
    )
    return _by_forecast_share(entries)


def project_gender(
    store: GroupedStore,
    totals: MarketTotals,
    *,
    base_year: int = 2024,
    forecast_year: int = 2032,
) -> tuple[SegmentProjection, ...]:
    """Global gender cohorts in input order."""
    return tuple(_project_bucket(
        get_bucket(store, GLOBAL_REGION, SEGMENT_TYPE_GENDER),
        totals,
        base_year,
        forecast_year,
        lambda name: {"age_groups": reference_data.age_groups(name)},
    ))


def project_end_users(
    store: GroupedStore,
    totals: MarketTotals,
    *,
    base_year: int = 2024,
    forecast_year: int = 2032,
) -> tuple[SegmentProjection, ...]:
    """
    One global entry per end-user channel, in first-appearance order.

    When the Global region carries an End User bucket it is authoritative.
    Otherwise each channel's base and forecast values are summed across
    all regions, so no region's figures are dropped.
    """
    def details_for(name: str) -> dict[str, Any]:
        return {"characteristics": reference_data.end_user_characteristics(name)}

    global_bucket = get_bucket(store, GLOBAL_REGION, SEGMENT_TYPE_END_USER)
    if global_bucket:
        return tuple(_project_bucket(global_bucket, totals, base_year, forecast_year, details_for))

    sums: dict[str, list[float]] = {}
    for region in store:
        for name, series in get_bucket(store, region, SEGMENT_TYPE_END_USER).items():
            acc = sums.setdefault(name, [0.0, 0.0])
            acc[0] += value_at(series, base_year)
            acc[1] += value_at(series, forecast_year)

    return tuple(
        _entry(name, base, forecast, totals.global_totals, forecast_year - base_year, details_for(name))
        for name, (base, forecast) in sums.items()
    )


def project_countries(
    store: GroupedStore,
    totals: MarketTotals,
    *,
    base_year: int = 2024,
    forecast_year: int = 2032,
) -> Mapping[str, CountryProjection]:
    """
    Country views keyed by name.

    Shares are against the owning region's totals (global totals for
    countries listed under Global). A country listed under several regions
    keeps the last region's figures.
    """
    countries: dict[str, CountryProjection] = {}
    for region in store:
        if region == GLOBAL_REGION:
            scope = totals.global_totals
        else:
            scope = totals.regional.get(region, SegmentTotals())

        for name, series in get_bucket(store, region, SEGMENT_TYPE_COUNTRY).items():
            if name in countries:
                logger.debug(f"Country {name!r} listed under {countries[name].region} and {region}")
            base = value_at(series, base_year)
            forecast = value_at(series, forecast_year)
            population, penetration, spending = reference_data.country_profile(name)
            countries[name] = CountryProjection(
                name=name,
                region=region,
                market_size_base=base,
                market_size_forecast=forecast,
                cagr=cagr(base, forecast, forecast_year - base_year),
                regional_share_base=market_share(base, scope.base),
                regional_share_forecast=market_share(forecast, scope.forecast),
                population=population,
                penetration_rate=penetration,
                average_spending=spending,
            )
    return MappingProxyType(countries)


def build_overview(
    totals: MarketTotals,
    *,
    market_name: str = "Global Skin Boosters Market",
    base_year: int = 2024,
    forecast_year: int = 2032,
) -> MarketOverview:
    return MarketOverview(
        market_name=market_name,
        base_year=base_year,
        forecast_year=forecast_year,
        cagr=totals.global_totals.cagr,
        market_size_base=totals.global_totals.base,
        market_size_forecast=totals.global_totals.forecast,
        key_drivers=reference_data.KEY_DRIVERS,
        key_restraints=reference_data.KEY_RESTRAINTS,
    )
