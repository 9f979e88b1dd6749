"""
Configuration Module - Centralized Configuration Hub

Contains all configurable parameters for the market data pipeline:
- Directory paths
- Source schema (required columns)
- Validation bounds for years and values
- Reference years and unit scaling
- Output format settings for workbook export
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any


# ============================================================================
# DIRECTORY PATHS
# ============================================================================

# Project root directory (parent of market_data/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Output directory for exported workbooks
OUTPUT_PATH = PROJECT_ROOT / "output"

# Configuration file directory
CONFIG_DIR = PROJECT_ROOT / "config"


# ============================================================================
# SOURCE SCHEMA
# ============================================================================

REGION_COLUMN = "Region"
SEGMENT_TYPE_COLUMN = "Segment Type"
SEGMENT_NAME_COLUMN = "Segment Name"
YEAR_COLUMN = "Year"
VALUE_COLUMN = "Value (USD Thousand)"

REQUIRED_COLUMNS = (
    REGION_COLUMN,
    SEGMENT_TYPE_COLUMN,
    SEGMENT_NAME_COLUMN,
    YEAR_COLUMN,
    VALUE_COLUMN,
)

# Header used when the grouped time series is exported back to text
EXPORT_VALUE_COLUMN = "Value (USD Million)"


# ============================================================================
# PIPELINE DEFAULTS
# ============================================================================
# Values may be overridden by CONFIG_DIR/pipeline.json (see bottom of file).
#
# unit_scale: source values are in USD thousand; dividing by 1000 yields USD million.
# duplicate_policy: "last" keeps the last row seen for a duplicate
#   (region, segment type, segment name, year) tuple, "first" keeps the first.

_PIPELINE_DEFAULTS: dict[str, Any] = {
    "market_name": "Global Skin Boosters Market",
    "base_year": 2024,
    "forecast_year": 2032,
    "min_year": 2020,
    "max_year": 2035,
    "min_value": 0.0,
    "max_value": 10_000_000.0,
    "unit_scale": 1000.0,
    "duplicate_policy": "last",
    "share_tolerance": 5.0,
    "reconciliation_tolerance": 0.08,
}

DUPLICATE_POLICIES = ("last", "first")

PIPELINE_VERSION = "1.0.0"


# ============================================================================
# OUTPUT FORMAT SETTINGS
# ============================================================================

OUTPUT_SETTINGS = {
    "workbook_name_pattern": "MarketSnapshot_{market}_{timestamp}.xlsx",
    "timestamp_format": "%Y%m%d_%H%M%S",
    "currency_format": "#,##0.00",
    "percentage_format": "0.00",
    "integer_format": "0",
    "decimal_format": "#,##0.00",
}


# ============================================================================
# QUALITY COLORS (for Excel formatting)
# ============================================================================

QUALITY_COLORS = {
    "ERROR": "#FF6B6B",
    "WARNING": "#FFE66D",
    "OK": "#4ECDC4",
    "WHITE": "#FFFFFF",
}


# ============================================================================
# CONFIG LOADING AND VALIDATION
# ============================================================================

def _load_pipeline_settings_from_json(defaults: dict[str, Any]) -> dict[str, Any]:
    """Load pipeline settings from JSON file, merge with defaults."""
    settings_file = CONFIG_DIR / "pipeline.json"
    if settings_file.exists():
        try:
            with open(settings_file, "r", encoding="utf-8") as f:
                data = json.load(f)
                if "pipeline" in data and isinstance(data["pipeline"], dict):
                    # JSON takes precedence; unknown keys are ignored
                    merged = defaults.copy()
                    merged.update({k: v for k, v in data["pipeline"].items() if k in defaults})
                    return merged
        except (OSError, ValueError) as e:
            import warnings
            warnings.warn(f"Failed to load pipeline settings from JSON: {e}. Using defaults.")
    return defaults


# Load configuration from JSON file if available, otherwise use hardcoded defaults
PIPELINE_SETTINGS = _load_pipeline_settings_from_json(_PIPELINE_DEFAULTS)


@dataclass(frozen=True)
class PipelineSettings:
    """Immutable settings for one pipeline run."""

    market_name: str = _PIPELINE_DEFAULTS["market_name"]
    base_year: int = _PIPELINE_DEFAULTS["base_year"]
    forecast_year: int = _PIPELINE_DEFAULTS["forecast_year"]
    min_year: int = _PIPELINE_DEFAULTS["min_year"]
    max_year: int = _PIPELINE_DEFAULTS["max_year"]
    min_value: float = _PIPELINE_DEFAULTS["min_value"]
    max_value: float = _PIPELINE_DEFAULTS["max_value"]
    unit_scale: float = _PIPELINE_DEFAULTS["unit_scale"]
    duplicate_policy: str = _PIPELINE_DEFAULTS["duplicate_policy"]
    share_tolerance: float = _PIPELINE_DEFAULTS["share_tolerance"]
    reconciliation_tolerance: float = _PIPELINE_DEFAULTS["reconciliation_tolerance"]

    @property
    def year_bounds(self) -> tuple[int, int]:
        return (self.min_year, self.max_year)

    @property
    def value_bounds(self) -> tuple[float, float]:
        return (self.min_value, self.max_value)

    @property
    def year_span(self) -> int:
        """Elapsed years between base and forecast year."""
        return self.forecast_year - self.base_year


def load_settings(**overrides: Any) -> PipelineSettings:
    """
    Build PipelineSettings from the loaded configuration.

    Args:
        **overrides: Field values that take precedence over the configuration.

    Returns:
        PipelineSettings instance.

    Raises:
        TypeError: If an override names an unknown setting.
    """
    known = {f.name for f in fields(PipelineSettings)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise TypeError(f"Unknown pipeline settings: {unknown}")

    base = PipelineSettings(**{k: v for k, v in PIPELINE_SETTINGS.items() if k in known})
    return replace(base, **overrides) if overrides else base


def load_config() -> dict[str, Any]:
    """
    Load and return all configuration as a dictionary.

    Returns:
        Dictionary with all configuration values.
    """
    return {
        "project_root": PROJECT_ROOT,
        "output_path": OUTPUT_PATH,
        "config_dir": CONFIG_DIR,
        "required_columns": list(REQUIRED_COLUMNS),
        "pipeline": dict(PIPELINE_SETTINGS),
        "output_settings": OUTPUT_SETTINGS,
        "quality_colors": QUALITY_COLORS,
        "version": PIPELINE_VERSION,
    }


def validate_config(settings: PipelineSettings | None = None) -> tuple[bool, list[str]]:
    """
    Validate configuration settings.

    Args:
        settings: Settings to check. Defaults to load_settings().

    Returns:
        Tuple of (is_valid, list_of_errors).
    """
    if settings is None:
        settings = load_settings()

    errors = []

    if settings.min_year > settings.max_year:
        errors.append(f"Invalid year bounds: min_year {settings.min_year} > max_year {settings.max_year}")

    if not settings.min_year <= settings.base_year <= settings.max_year:
        errors.append(f"Base year {settings.base_year} outside year bounds {settings.year_bounds}")

    if not settings.min_year <= settings.forecast_year <= settings.max_year:
        errors.append(f"Forecast year {settings.forecast_year} outside year bounds {settings.year_bounds}")

    if settings.forecast_year <= settings.base_year:
        errors.append(
            f"Forecast year {settings.forecast_year} must be after base year {settings.base_year}"
        )

    if settings.min_value > settings.max_value:
        errors.append(f"Invalid value bounds: min_value {settings.min_value} > max_value {settings.max_value}")

    if settings.min_value < 0:
        errors.append(f"Negative min_value not allowed: {settings.min_value}")

    if not isinstance(settings.unit_scale, (int, float)) or settings.unit_scale <= 0:
        errors.append(f"Invalid unit scale: {settings.unit_scale}")

    if settings.duplicate_policy not in DUPLICATE_POLICIES:
        errors.append(
            f"Invalid duplicate policy: {settings.duplicate_policy!r} (expected one of {DUPLICATE_POLICIES})"
        )

    return len(errors) == 0, errors


def ensure_directories() -> None:
    """Create required directories if they don't exist."""
    OUTPUT_PATH.mkdir(parents=True, exist_ok=True)
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def save_config_to_json(filepath: Path | str | None = None) -> Path:
    """
    Save pipeline configuration to a JSON file.

    Args:
        filepath: Output path. If None, saves to CONFIG_DIR/pipeline.json.

    Returns:
        Path of the written file.
    """
    if filepath is None:
        ensure_directories()
        filepath = CONFIG_DIR / "pipeline.json"

    filepath = Path(filepath)

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump({"pipeline": PIPELINE_SETTINGS}, f, indent=2)

    return filepath
