"""
Integration tests for the market data pipeline.

Tests the complete text -> snapshot run.
"""

import dataclasses
import json
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import pytest

from market_data.config import (
    PipelineSettings,
    load_config,
    load_settings,
    save_config_to_json,
    validate_config,
)
from market_data.logger import get_logger
from market_data.pipeline import MarketDataSnapshot, build_market_snapshot
from market_data.validator import SchemaError
from sample_data import HEADER, SAMPLE_CSV, SAMPLE_ROWS, make_csv


class TestConfiguration:
    """Tests for configuration module."""

    def test_config_validation(self):
        is_valid, errors = validate_config()
        assert is_valid, f"Configuration errors: {errors}"

    def test_load_config_contents(self):
        config = load_config()
        assert config["required_columns"] == [
            "Region", "Segment Type", "Segment Name", "Year", "Value (USD Thousand)",
        ]
        assert config["pipeline"]["unit_scale"] > 0

    def test_settings_overrides(self):
        settings = load_settings(forecast_year=2030, duplicate_policy="first")
        assert settings.forecast_year == 2030
        assert settings.duplicate_policy == "first"
        assert settings.year_span == 2030 - settings.base_year

    def test_unknown_setting_rejected(self):
        with pytest.raises(TypeError):
            load_settings(colour="blue")

    def test_invalid_settings_reported(self):
        settings = PipelineSettings(base_year=2032, forecast_year=2024, duplicate_policy="sum")
        is_valid, errors = validate_config(settings)
        assert not is_valid
        assert any("must be after base year" in e for e in errors)
        assert any("duplicate policy" in e for e in errors)

    def test_save_config_to_json(self, tmp_path):
        path = save_config_to_json(tmp_path / "pipeline.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["pipeline"]["base_year"] == load_settings().base_year
        assert data["pipeline"]["duplicate_policy"] in ("last", "first")

    def test_settings_are_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            load_settings().base_year = 1999


class TestLogger:

    def test_child_logger_names(self):
        assert get_logger("pipeline").name == "market_data.pipeline"
        assert get_logger("market_data.grouping").name == "market_data.grouping"
        assert get_logger().name == "market_data"


class TestBuildSnapshot:
    """End-to-end pipeline runs."""

    @pytest.fixture
    def snapshot(self):
        return build_market_snapshot(SAMPLE_CSV, PipelineSettings(), timestamp="2026-01-01T00:00:00+00:00")

    def test_returns_snapshot(self, snapshot):
        assert isinstance(snapshot, MarketDataSnapshot)
        assert snapshot.overview.market_size_base == pytest.approx(1000.0)
        assert snapshot.overview.market_size_forecast == pytest.approx(2500.0)
        assert len(snapshot.regions) == 3
        assert len(snapshot.product_types) == 2
        assert len(snapshot.ingredients) == 2
        assert len(snapshot.gender) == 2
        assert len(snapshot.end_users) == 2
        assert len(snapshot.countries) == 4
        assert len(snapshot.market_players) == 5
        assert len(snapshot.trends) == 4

    def test_mesotherapy_scenario(self):
        text = make_csv([
            ("Global", "Type", "Mesotherapy", 2024, 800000),
            ("Global", "Type", "Mesotherapy", 2032, 2000000),
        ])
        snapshot = build_market_snapshot(text)
        assert snapshot.overview.market_size_base == pytest.approx(800.0)
        assert snapshot.overview.market_size_forecast == pytest.approx(2000.0)
        (meso,) = snapshot.product_types
        assert meso.cagr == pytest.approx(12.1, abs=0.05)
        assert meso.market_share_forecast == pytest.approx(100.0)

    def test_idempotent_modulo_timestamp(self):
        first = build_market_snapshot(SAMPLE_CSV)
        second = build_market_snapshot(SAMPLE_CSV)
        assert first.to_dict(include_timestamp=False) == second.to_dict(include_timestamp=False)
        assert "timestamp" in first.to_dict()["metadata"]["processing"]

    def test_to_dict_is_json_compatible(self, snapshot):
        data = snapshot.to_dict()
        restored = json.loads(json.dumps(data))
        assert restored["time_series"]["Global"]["Type"]["Mesotherapy"][0] == {"year": 2024, "value": 800.0}
        assert restored["metadata"]["processing"]["timestamp"] == "2026-01-01T00:00:00+00:00"

    def test_snapshot_is_immutable(self, snapshot):
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.regions = ()
        with pytest.raises(TypeError):
            snapshot.metadata["total_records"] = 0
        with pytest.raises(TypeError):
            snapshot.time_series["Global"] = {}

    def test_to_dict_returns_independent_copy(self, snapshot):
        data = snapshot.to_dict()
        data["regions"].clear()
        data["metadata"]["coverage"]["regions"] = 99
        assert len(snapshot.regions) == 3
        assert snapshot.metadata["coverage"]["regions"] == 4

    def test_metadata(self, snapshot):
        metadata = snapshot.metadata
        assert metadata["total_records"] == len(SAMPLE_ROWS)
        assert metadata["valid_records"] == len(SAMPLE_ROWS)
        assert metadata["data_quality"]["completeness"] == 100.0
        assert metadata["coverage"]["regions"] == 4
        assert metadata["coverage"]["segment_types"] == 5
        assert dict(metadata["coverage"]["year_range"]) == {"start": 2024, "end": 2032}
        assert metadata["coverage"]["countries"] == 4
        assert metadata["processing"]["version"] == "1.0.0"
        assert metadata["processing"]["data_source"] == "csv"

    def test_validation_quarantine(self):
        rows = list(SAMPLE_ROWS)
        rows[1] = ("Global", "Type", "Mesotherapy", 1999, 1300000)
        snapshot = build_market_snapshot(make_csv(rows))

        report = snapshot.quality_report
        assert report.valid_rows == report.total_rows - 1
        assert any(e["row"] == 1 for e in report.errors)
        # Remaining rows still project
        assert snapshot.overview.market_size_base == pytest.approx(1000.0)
        assert [p.year for p in snapshot.time_series["Global"]["Type"]["Mesotherapy"]] == [2024, 2032]

    def test_missing_column_raises_schema_error(self):
        text = "Region,Segment Type,Segment Name,Value (USD Thousand)\nGlobal,Type,Mesotherapy,800000\n"
        with pytest.raises(SchemaError):
            build_market_snapshot(text)

    def test_header_only_builds_empty_snapshot(self):
        snapshot = build_market_snapshot(HEADER + "\n")
        assert snapshot.regions == ()
        assert snapshot.product_types == ()
        assert dict(snapshot.countries) == {}
        assert snapshot.overview.cagr == 0
        assert snapshot.metadata["coverage"]["year_range"] is None
        assert snapshot.metadata["data_quality"]["accuracy"] == 100.0

    def test_duplicate_policy_from_settings(self):
        rows = [
            ("Global", "Type", "Mesotherapy", 2024, 800000),
            ("Global", "Type", "Mesotherapy", 2024, 900000),
        ]
        last = build_market_snapshot(make_csv(rows), load_settings(duplicate_policy="last"))
        first = build_market_snapshot(make_csv(rows), load_settings(duplicate_policy="first"))
        assert last.overview.market_size_base == pytest.approx(900.0)
        assert first.overview.market_size_base == pytest.approx(800.0)
        assert len(last.quality_report.warnings) == 2

    def test_custom_forecast_year(self):
        snapshot = build_market_snapshot(SAMPLE_CSV, load_settings(forecast_year=2028))
        assert snapshot.overview.forecast_year == 2028
        assert snapshot.overview.market_size_forecast == pytest.approx(1300.0)
