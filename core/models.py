"""Data models for securities, positions, portfolios and accounts."""
import threading
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, List, Optional, Tuple

from config.settings import (
    DEFAULT_MU,
    DEFAULT_SIGMA,
    OPTION_CONTRACT_MULTIPLIER,
    PRICE_SCALE,
    VALUE_SCALE,
)
from core.errors import InsufficientFundsError, InvalidInstrumentError


class SecurityType(Enum):
    STOCK = "STOCK"
    CALL = "CALL"
    PUT = "PUT"

    @property
    def is_option(self) -> bool:
        return self is not SecurityType.STOCK


class AccountStatus(Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    CLOSED = "CLOSED"


def to_decimal(value) -> Decimal:
    """Convert ints, strings and floats to Decimal without binary float drift."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def scale_price(value) -> Decimal:
    return to_decimal(value).quantize(PRICE_SCALE, rounding=ROUND_HALF_UP)


def scale_value(value) -> Decimal:
    return to_decimal(value).quantize(VALUE_SCALE, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Security:
    """Immutable identity of a tradable instrument.

    Equality and hashing use (ticker, security_type, strike, time_to_maturity)
    only; mu, sigma and the expiration display fields are ignored.
    """
    ticker: str
    security_type: SecurityType = SecurityType.STOCK
    strike: Optional[Decimal] = None
    time_to_maturity: Optional[Decimal] = None  # years
    mu: Optional[Decimal] = field(default=None, compare=False)
    sigma: Optional[Decimal] = field(default=None, compare=False)
    expiration_month: Optional[int] = field(default=None, compare=False)
    expiration_year: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        if not self.ticker or not self.ticker.strip():
            raise InvalidInstrumentError("Security requires a ticker")
        object.__setattr__(self, "ticker", self.ticker.strip())

        if self.security_type is SecurityType.STOCK:
            option_fields = (self.strike, self.time_to_maturity, self.mu, self.sigma,
                             self.expiration_month, self.expiration_year)
            if any(value is not None for value in option_fields):
                raise InvalidInstrumentError(f"Stock {self.ticker} cannot carry option fields")
            return

        if self.strike is None or self.time_to_maturity is None:
            raise InvalidInstrumentError(f"Option on {self.ticker} requires strike and time to maturity")

        strike = scale_price(self.strike)
        time_to_maturity = scale_price(self.time_to_maturity)
        mu = scale_price(self.mu if self.mu is not None else DEFAULT_MU)
        sigma = scale_price(self.sigma if self.sigma is not None else DEFAULT_SIGMA)

        if strike <= 0:
            raise InvalidInstrumentError(f"Option strike must be positive, got {strike}")
        if time_to_maturity < 0:
            raise InvalidInstrumentError(f"Time to maturity must be non-negative, got {time_to_maturity}")
        if sigma <= 0:
            raise InvalidInstrumentError(f"Volatility must be positive, got {sigma}")
        if self.expiration_month is not None and not 1 <= self.expiration_month <= 12:
            raise InvalidInstrumentError(f"Invalid expiration month: {self.expiration_month}")

        object.__setattr__(self, "strike", strike)
        object.__setattr__(self, "time_to_maturity", time_to_maturity)
        object.__setattr__(self, "mu", mu)
        object.__setattr__(self, "sigma", sigma)

    @classmethod
    def stock(cls, ticker: str) -> "Security":
        return cls(ticker=ticker, security_type=SecurityType.STOCK)

    @classmethod
    def option(cls, ticker: str, option_type: SecurityType, strike, time_to_maturity,
               mu=None, sigma=None, expiration_month: Optional[int] = None,
               expiration_year: Optional[int] = None) -> "Security":
        """Create an option security. Use Security.stock() for stocks."""
        if not isinstance(option_type, SecurityType) or not option_type.is_option:
            raise InvalidInstrumentError(f"Use Security.stock() for {option_type}; options must be CALL or PUT")
        return cls(
            ticker=ticker,
            security_type=option_type,
            strike=strike,
            time_to_maturity=time_to_maturity,
            mu=mu,
            sigma=sigma,
            expiration_month=expiration_month,
            expiration_year=expiration_year,
        )

    @property
    def is_option(self) -> bool:
        return self.security_type.is_option

    def __str__(self) -> str:
        if not self.is_option:
            return self.ticker
        return f"{self.ticker}-{self.security_type.value}-{self.strike}-{self.time_to_maturity}"


def market_value_of(security: Security, quantity: Decimal, mark_price: Decimal) -> Decimal:
    value = quantity * mark_price
    if security.is_option:
        value = value * OPTION_CONTRACT_MULTIPLIER
    return scale_value(value)


@dataclass(frozen=True)
class PositionSnapshot:
    security: Security
    quantity: Decimal
    mark_price: Decimal

    @property
    def market_value(self) -> Decimal:
        return market_value_of(self.security, self.quantity, self.mark_price)


@dataclass(eq=False)
class Position:
    """Mutable holding of a security.

    mark_price is the last per-unit mark: the spot for stocks and the
    theoretical price for options. Writers go through update_price() and
    add_quantity() so snapshot() always sees a consistent pair.
    """
    security: Security
    quantity: Decimal
    mark_price: Decimal = Decimal("0")
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self):
        self.quantity = to_decimal(self.quantity)
        self.mark_price = to_decimal(self.mark_price)

    def update_price(self, mark_price) -> None:
        mark_price = to_decimal(mark_price)
        with self._lock:
            self.mark_price = mark_price

    def add_quantity(self, quantity) -> None:
        quantity = to_decimal(quantity)
        with self._lock:
            self.quantity = self.quantity + quantity

    def snapshot(self) -> PositionSnapshot:
        with self._lock:
            return PositionSnapshot(self.security, self.quantity, self.mark_price)

    @property
    def market_value(self) -> Decimal:
        return self.snapshot().market_value


@dataclass(frozen=True)
class PortfolioSnapshot:
    generated_at: datetime
    positions: Tuple[PositionSnapshot, ...]

    @property
    def total_value(self) -> Decimal:
        return scale_value(sum((p.market_value for p in self.positions), Decimal("0")))


class Portfolio:
    """Ordered positions with an index by security identity.

    Membership must be settled before a ValuationSubscriber is started on the
    portfolio: listeners are bound once at start(), so a position added
    afterwards is never subscribed and keeps its last mark.
    """

    def __init__(self, positions: Optional[List[Position]] = None):
        self._positions: List[Position] = []
        self._by_security: Dict[Security, Position] = {}
        self._lock = threading.Lock()
        for position in positions or []:
            self.add_position(position)

    def add_position(self, position: Position) -> Position:
        """Add a position, merging quantity into an existing one for the same security.

        Returns the position held by the portfolio.
        """
        with self._lock:
            existing = self._by_security.get(position.security)
            if existing is not None:
                existing.add_quantity(position.quantity)
                return existing
            self._positions.append(position)
            self._by_security[position.security] = position
            return position

    def update_price(self, ticker: str, price) -> int:
        """Set the mark on every position whose ticker matches. Returns the count updated."""
        matches = self.get_positions_by_ticker(ticker)
        for position in matches:
            position.update_price(price)
        return len(matches)

    def get_positions(self) -> Tuple[Position, ...]:
        with self._lock:
            return tuple(self._positions)

    def get_position(self, security: Security) -> Optional[Position]:
        with self._lock:
            return self._by_security.get(security)

    def get_positions_by_ticker(self, ticker: str) -> List[Position]:
        return [p for p in self.get_positions() if p.security.ticker == ticker]

    def snapshot(self) -> PortfolioSnapshot:
        return PortfolioSnapshot(
            generated_at=datetime.now(),
            positions=tuple(p.snapshot() for p in self.get_positions()),
        )

    @property
    def total_value(self) -> Decimal:
        return scale_value(sum((p.market_value for p in self.get_positions()), Decimal("0")))

    def __len__(self) -> int:
        return len(self.get_positions())


@dataclass(eq=False)
class Account:
    account_id: str
    name: str
    portfolio: Portfolio = field(default_factory=Portfolio)
    cash_balance: Decimal = Decimal("0")
    created_at: datetime = field(default_factory=datetime.now)
    status: AccountStatus = AccountStatus.ACTIVE
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self):
        self.cash_balance = to_decimal(self.cash_balance)

    @property
    def total_value(self) -> Decimal:
        return scale_value(self.portfolio.total_value + self.cash_balance)

    def has_sufficient_cash(self, amount) -> bool:
        return self.cash_balance >= to_decimal(amount)

    def add_cash(self, amount) -> None:
        amount = to_decimal(amount)
        with self._lock:
            self.cash_balance = self.cash_balance + amount

    def deduct_cash(self, amount) -> None:
        amount = to_decimal(amount)
        with self._lock:
            if amount > self.cash_balance:
                raise InsufficientFundsError(
                    f"Insufficient cash balance: requested {amount}, available {self.cash_balance}"
                )
            self.cash_balance = self.cash_balance - amount
