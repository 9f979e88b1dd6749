"""
Label normalization module.

Canonicalizes region, segment-type and segment-name labels so that rows
sourced with inconsistent spellings ("APAC" vs "Asia Pacific", "US" vs
"United States") land in the same bucket. Lookups are exact first, then
case-insensitive; unmapped labels pass through unchanged (trimmed).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from types import MappingProxyType
from typing import TYPE_CHECKING

from market_data.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from market_data.row_parser import Row

logger = get_logger(__name__)

# Canonical region and segment type labels
GLOBAL_REGION = "Global"

SEGMENT_TYPE_PRODUCT = "Type"
SEGMENT_TYPE_INGREDIENT = "Ingredient"
SEGMENT_TYPE_GENDER = "Gender"
SEGMENT_TYPE_END_USER = "End User"
SEGMENT_TYPE_COUNTRY = "Country"

SEGMENT_TYPES = (
    SEGMENT_TYPE_PRODUCT,
    SEGMENT_TYPE_INGREDIENT,
    SEGMENT_TYPE_GENDER,
    SEGMENT_TYPE_END_USER,
    SEGMENT_TYPE_COUNTRY,
)

REGION_MAP: Mapping[str, str] = MappingProxyType({
    "North America": "North America",
    "NA": "North America",
    "NAM": "North America",
    "Europe": "Europe",
    "EU": "Europe",
    "EMEA Europe": "Europe",
    "Asia Pacific": "Asia Pacific",
    "APAC": "Asia Pacific",
    "Asia-Pacific": "Asia Pacific",
    "Asia/Pacific": "Asia Pacific",
    "Latin America": "Latin America",
    "LATAM": "Latin America",
    "LAC": "Latin America",
    "South America": "Latin America",
    "Middle East & Africa": "Middle East & Africa",
    "Middle East and Africa": "Middle East & Africa",
    "MEA": "Middle East & Africa",
    "MENA": "Middle East & Africa",
    "Global": GLOBAL_REGION,
    "Worldwide": GLOBAL_REGION,
    "World": GLOBAL_REGION,
})

SEGMENT_TYPE_MAP: Mapping[str, str] = MappingProxyType({
    "Type": SEGMENT_TYPE_PRODUCT,
    "Product Type": SEGMENT_TYPE_PRODUCT,
    "Product": SEGMENT_TYPE_PRODUCT,
    "Ingredient": SEGMENT_TYPE_INGREDIENT,
    "Active Ingredient": SEGMENT_TYPE_INGREDIENT,
    "Ingredients": SEGMENT_TYPE_INGREDIENT,
    "Gender": SEGMENT_TYPE_GENDER,
    "Demographics": SEGMENT_TYPE_GENDER,
    "End User": SEGMENT_TYPE_END_USER,
    "EndUser": SEGMENT_TYPE_END_USER,
    "End-User": SEGMENT_TYPE_END_USER,
    "End Users": SEGMENT_TYPE_END_USER,
    "Channel": SEGMENT_TYPE_END_USER,
    "Country": SEGMENT_TYPE_COUNTRY,
    "Countries": SEGMENT_TYPE_COUNTRY,
})

SEGMENT_NAME_MAP: Mapping[str, str] = MappingProxyType({
    # Ingredients
    "HA": "Hyaluronic Acid (HA)",
    "Hyaluronic Acid": "Hyaluronic Acid (HA)",
    "Hyaluronic Acid (HA)": "Hyaluronic Acid (HA)",
    "PDRN": "Polydeoxyribonucleotides (PDRN)",
    "Polydeoxyribonucleotides": "Polydeoxyribonucleotides (PDRN)",
    "PCL": "Polycaprolactone (PCL)",
    "Polycaprolactone": "Polycaprolactone (PCL)",
    "PLLA": "Poly-L-Lactic Acid (PLLA)",
    "Poly-L-Lactic Acid": "Poly-L-Lactic Acid (PLLA)",
    "Poly-L-Lactic Acid (PLLA)/ Poly-D, L-Lactic Acid (PDLLA)": "Poly-L-Lactic Acid (PLLA)",
    "Exosome": "Exosomes",
    # Product types
    "Micro-needling": "Micro-needle",
    "Microneedling": "Micro-needle",
    "Microneedle": "Micro-needle",
    "Meso therapy": "Mesotherapy",
    # End users
    "Medspa": "Medspas",
    "Med Spas": "Medspas",
    "Medical Spas": "Medspas",
    "Dermatology Clinic": "Dermatology Clinics",
    # Countries
    "US": "United States",
    "USA": "United States",
    "U.S.": "United States",
    "U.S.A.": "United States",
    "United States of America": "United States",
    "UK": "United Kingdom",
    "U.K.": "United Kingdom",
    "Great Britain": "United Kingdom",
    "UAE": "United Arab Emirates",
    "Korea": "South Korea",
    "Republic of Korea": "South Korea",
})


def _casefold_index(mapping: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType({key.casefold(): value for key, value in mapping.items()})


_REGION_FOLDED = _casefold_index(REGION_MAP)
_SEGMENT_TYPE_FOLDED = _casefold_index(SEGMENT_TYPE_MAP)
_SEGMENT_NAME_FOLDED = _casefold_index(SEGMENT_NAME_MAP)


def _lookup(label: str, exact: Mapping[str, str], folded: Mapping[str, str]) -> str:
    text = label.strip() if isinstance(label, str) else ("" if label is None else str(label).strip())
    if text in exact:
        return exact[text]
    return folded.get(text.casefold(), text)


def normalize_region(region: str) -> str:
    """Map a region label to its canonical form."""
    return _lookup(region, REGION_MAP, _REGION_FOLDED)


def normalize_segment_type(segment_type: str) -> str:
    """Map a segment-type label to its canonical form."""
    return _lookup(segment_type, SEGMENT_TYPE_MAP, _SEGMENT_TYPE_FOLDED)


def normalize_segment_name(segment_name: str) -> str:
    """Map a segment name (ingredient, product, country...) to its canonical spelling."""
    return _lookup(segment_name, SEGMENT_NAME_MAP, _SEGMENT_NAME_FOLDED)


def normalize_row(row: Row) -> Row:
    """Return a copy of the row with canonical labels."""
    return replace(
        row,
        region=normalize_region(row.region),
        segment_type=normalize_segment_type(row.segment_type),
        segment_name=normalize_segment_name(row.segment_name),
    )


def normalize_rows(rows: Iterable[Row]) -> list[Row]:
    """
    Normalize labels for every row.

    Args:
        rows: Parsed rows.

    Returns:
        New list of rows with canonical region, segment type and segment name.
    """
    rows = list(rows)
    normalized = [normalize_row(row) for row in rows]
    changed = sum(1 for before, after in zip(rows, normalized) if before != after)
    logger.info(f"Normalized {len(normalized)} rows ({changed} relabelled)")
    return normalized
