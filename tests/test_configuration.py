#!/usr/bin/env python3
"""
Tests for configuration defaults and environment overrides.
"""

import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import settings
from utils.config import ValuationConfig

ENV_VARS = [
    "VALUATION_RISK_FREE_RATE", "VALUATION_DEFAULT_MU", "VALUATION_DEFAULT_SIGMA",
    "VALUATION_SNAPSHOT_PERIOD", "VALUATION_FEED_TICK", "VALUATION_POSITIONS_PATH",
    "VALUATION_ACCOUNT_ID", "VALUATION_ACCOUNT_NAME", "VALUATION_INITIAL_CASH",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Point at an empty .env so a developer's local file cannot leak in
    env_file = tmp_path / ".env"
    env_file.write_text("", encoding="utf-8")
    return env_file


class TestSettings:
    """Test the defaults in settings.py."""

    def test_pricing_defaults(self):
        assert settings.RISK_FREE_RATE == 0.02
        assert settings.DEFAULT_MU == Decimal("0.05")
        assert settings.DEFAULT_SIGMA == Decimal("0.30")
        assert settings.OPTION_CONTRACT_MULTIPLIER == Decimal("100")

    def test_monitoring_defaults(self):
        assert settings.SNAPSHOT_PERIOD_SECONDS == 3
        assert settings.STOP_TIMEOUT_SECONDS == 1

    def test_feed_defaults(self):
        assert settings.DEFAULT_INITIAL_PRICE == Decimal("100.00")
        assert settings.INITIAL_PRICES["AAPL"] == Decimal("180.00")
        assert settings.MIN_PRICE > 0

    def test_month_codes(self):
        assert len(settings.MONTH_CODES) == 12
        assert settings.MONTH_CODES[0] == "JAN"
        assert settings.MONTH_CODES[-1] == "DEC"


class TestValuationConfig:
    """Test environment-driven configuration."""

    def test_defaults_without_environment(self, clean_env):
        config = ValuationConfig.from_env(clean_env)
        assert config.risk_free_rate == settings.RISK_FREE_RATE
        assert config.default_sigma == settings.DEFAULT_SIGMA
        assert config.snapshot_period_seconds == settings.SNAPSHOT_PERIOD_SECONDS
        assert config.positions_path == settings.DEFAULT_POSITIONS_PATH
        assert config.is_valid()

    def test_environment_overrides(self, clean_env, monkeypatch):
        monkeypatch.setenv("VALUATION_RISK_FREE_RATE", "0.035")
        monkeypatch.setenv("VALUATION_DEFAULT_SIGMA", "0.25")
        monkeypatch.setenv("VALUATION_SNAPSHOT_PERIOD", "1.5")
        monkeypatch.setenv("VALUATION_ACCOUNT_NAME", "Paper")
        monkeypatch.setenv("VALUATION_INITIAL_CASH", "2500.50")

        config = ValuationConfig.from_env(clean_env)
        assert config.risk_free_rate == 0.035
        assert config.default_sigma == Decimal("0.25")
        assert config.snapshot_period_seconds == 1.5
        assert config.account_name == "Paper"
        assert config.initial_cash == Decimal("2500.50")

    def test_dotenv_file_is_loaded(self, clean_env):
        clean_env.write_text("VALUATION_ACCOUNT_ID=FROM_DOTENV\n", encoding="utf-8")
        config = ValuationConfig.from_env(clean_env)
        assert config.account_id == "FROM_DOTENV"

    def test_bad_number_is_reported(self, clean_env, monkeypatch):
        monkeypatch.setenv("VALUATION_SNAPSHOT_PERIOD", "soon")
        with pytest.raises(ValueError):
            ValuationConfig.from_env(clean_env)

    @pytest.mark.parametrize("field,value", [
        ("default_sigma", Decimal("0")),
        ("snapshot_period_seconds", 0),
        ("feed_tick_seconds", -1),
        ("initial_cash", Decimal("-1")),
        ("account_id", ""),
    ])
    def test_invalid_values(self, field, value):
        config = ValuationConfig()
        setattr(config, field, value)
        assert not config.is_valid()
