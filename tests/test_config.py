"""
Tests for configuration and environment overrides.
"""
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from harvest_analyzer.config import AnalyticsConfig, DEFAULT_INTERNAL_CLIENTS


class TestAnalyticsConfig:
    """Tests for defaults and env overrides."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("INTERNAL_CLIENTS", raising=False)
        monkeypatch.delenv("LOW_HOURS_THRESHOLD", raising=False)

        cfg = AnalyticsConfig()

        assert cfg.internal_clients == DEFAULT_INTERNAL_CLIENTS
        assert cfg.low_hours_threshold == 30.0
        assert cfg.high_hours_threshold == 45.0
        assert cfg.shoutout_min_ratio == 0.90

    def test_internal_clients_from_env(self, monkeypatch):
        monkeypatch.setenv("INTERNAL_CLIENTS", "Acme Internal, Bench ,")

        cfg = AnalyticsConfig()

        assert cfg.internal_clients == frozenset({"Acme Internal", "Bench"})
        assert cfg.is_internal_client("Bench")
        assert not cfg.is_internal_client("Onica")

    def test_threshold_from_env(self, monkeypatch):
        monkeypatch.setenv("HIGH_HOURS_THRESHOLD", "50")

        assert AnalyticsConfig().high_hours_threshold == 50.0

    def test_bad_threshold_raises(self, monkeypatch):
        monkeypatch.setenv("LOW_HOURS_THRESHOLD", "thirty")

        with pytest.raises(ValueError):
            AnalyticsConfig()

    def test_log_json_flag(self, monkeypatch):
        monkeypatch.setenv("LOG_JSON", "true")

        assert AnalyticsConfig().log_json is True

    def test_immutable(self):
        cfg = AnalyticsConfig()

        with pytest.raises(Exception):
            cfg.low_hours_threshold = 10
