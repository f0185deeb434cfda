"""Runtime configuration for the valuation monitor.

Values come from environment variables or a project-root .env file and fall
back to the defaults in config/settings.py.
"""
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import load_dotenv

from config.settings import (
    DEFAULT_ACCOUNT_ID,
    DEFAULT_ACCOUNT_NAME,
    DEFAULT_INITIAL_CASH,
    DEFAULT_MU,
    DEFAULT_POSITIONS_PATH,
    DEFAULT_SIGMA,
    FEED_TICK_SECONDS,
    RISK_FREE_RATE,
    SNAPSHOT_PERIOD_SECONDS,
)

ENV_PATH = Path(__file__).parent.parent / '.env'


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_decimal(name: str, default: Decimal) -> Decimal:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return Decimal(raw.strip())
    except InvalidOperation:
        raise ValueError(f"{name} must be a decimal number, got {raw!r}")


@dataclass
class ValuationConfig:
    """Configuration for the valuation pipeline."""
    risk_free_rate: float = RISK_FREE_RATE
    default_mu: Decimal = DEFAULT_MU
    default_sigma: Decimal = DEFAULT_SIGMA
    snapshot_period_seconds: float = SNAPSHOT_PERIOD_SECONDS
    feed_tick_seconds: float = FEED_TICK_SECONDS
    positions_path: str = DEFAULT_POSITIONS_PATH
    account_id: str = DEFAULT_ACCOUNT_ID
    account_name: str = DEFAULT_ACCOUNT_NAME
    initial_cash: Decimal = DEFAULT_INITIAL_CASH

    @classmethod
    def from_env(cls, env_path: Path = ENV_PATH) -> "ValuationConfig":
        """Load configuration from environment variables or .env file.

        Recognised variables:
        - VALUATION_RISK_FREE_RATE, VALUATION_DEFAULT_MU, VALUATION_DEFAULT_SIGMA
        - VALUATION_SNAPSHOT_PERIOD, VALUATION_FEED_TICK (seconds)
        - VALUATION_POSITIONS_PATH
        - VALUATION_ACCOUNT_ID, VALUATION_ACCOUNT_NAME, VALUATION_INITIAL_CASH
        """
        load_dotenv(env_path)
        return cls(
            risk_free_rate=_env_float("VALUATION_RISK_FREE_RATE", RISK_FREE_RATE),
            default_mu=_env_decimal("VALUATION_DEFAULT_MU", DEFAULT_MU),
            default_sigma=_env_decimal("VALUATION_DEFAULT_SIGMA", DEFAULT_SIGMA),
            snapshot_period_seconds=_env_float("VALUATION_SNAPSHOT_PERIOD", SNAPSHOT_PERIOD_SECONDS),
            feed_tick_seconds=_env_float("VALUATION_FEED_TICK", FEED_TICK_SECONDS),
            positions_path=os.getenv("VALUATION_POSITIONS_PATH", DEFAULT_POSITIONS_PATH),
            account_id=os.getenv("VALUATION_ACCOUNT_ID", DEFAULT_ACCOUNT_ID),
            account_name=os.getenv("VALUATION_ACCOUNT_NAME", DEFAULT_ACCOUNT_NAME),
            initial_cash=_env_decimal("VALUATION_INITIAL_CASH", DEFAULT_INITIAL_CASH),
        )

    def is_valid(self) -> bool:
        """Check that numeric settings are in range."""
        return (
            self.default_sigma > 0
            and self.snapshot_period_seconds > 0
            and self.feed_tick_seconds > 0
            and self.initial_cash >= 0
            and bool(self.account_id)
        )
