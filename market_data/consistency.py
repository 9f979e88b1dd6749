"""
Post-build consistency checks for a market data snapshot.

These are advisory and never modify the snapshot:
- check_snapshot_consistency: completeness of the headline views and the
  regional share sum
- reconcile_dimension_totals: per-dimension segment sums against the
  global market size
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from market_data.logger import get_logger

if TYPE_CHECKING:
    from market_data.pipeline import MarketDataSnapshot

logger = get_logger(__name__)

RECONCILED_DIMENSIONS = ("regions", "product_types", "ingredients", "gender", "end_users")


def check_snapshot_consistency(
    snapshot: MarketDataSnapshot,
    *,
    share_tolerance: float = 5.0,
) -> dict[str, Any]:
    """
    Check a snapshot for missing views and inconsistent regional shares.

    Args:
        snapshot: Snapshot to check.
        share_tolerance: Allowed deviation (percentage points) of the summed
            forecast-year regional shares from 100.

    Returns:
        Dict with status ("passed" or "failed"), errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    overview = snapshot.overview
    if overview is None:
        errors.append("Missing overview data")
    elif overview.market_size_base <= 0 and overview.market_size_forecast <= 0:
        errors.append("Missing overview data: global market size is zero")

    if not snapshot.regions:
        warnings.append("No regional data available")

    if not snapshot.product_types:
        warnings.append("No product type data available")

    if overview is not None and snapshot.regions:
        total_share = sum(region.market_share_forecast for region in snapshot.regions)
        if abs(total_share - 100) > share_tolerance:
            warnings.append(f"Regional market shares sum to {total_share:.1f}%, expected ~100%")

    status = "failed" if errors else "passed"
    if errors or warnings:
        logger.warning(f"Consistency check {status}: {len(errors)} errors, {len(warnings)} warnings")
    return {"status": status, "errors": errors, "warnings": warnings}


def reconcile_dimension_totals(
    snapshot: MarketDataSnapshot,
    tolerance: float = 0.08,
) -> list[dict[str, Any]]:
    """
    Compare each dimension's summed segment sizes to the global market size.

    Args:
        snapshot: Snapshot to reconcile.
        tolerance: Allowed relative deviation (0.08 = 8%).

    Returns:
        One record per (dimension, period) outside tolerance, with
        expected, actual and relative deviation. Empty dimensions are skipped.
    """
    global_totals = snapshot.totals.global_totals
    issues = []

    for dimension in RECONCILED_DIMENSIONS:
        entries = getattr(snapshot, dimension)
        if not entries:
            continue

        for period, expected, attr in (
            ("base", global_totals.base, "market_size_base"),
            ("forecast", global_totals.forecast, "market_size_forecast"),
        ):
            actual = sum(getattr(entry, attr) for entry in entries)
            if expected <= 0:
                if actual > 0:
                    issues.append({
                        "dimension": dimension,
                        "period": period,
                        "expected": expected,
                        "actual": actual,
                        "deviation": None,
                    })
                continue

            deviation = abs(actual - expected) / expected
            if deviation > tolerance:
                issues.append({
                    "dimension": dimension,
                    "period": period,
                    "expected": expected,
                    "actual": actual,
                    "deviation": deviation,
                })

    for issue in issues:
        logger.debug(f"Dimension {issue['dimension']} ({issue['period']}) off global total: {issue}")
    return issues
