"""Console rendering of portfolio snapshots."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from config.settings import MONTH_CODES, VALUE_SCALE
from core.models import Account, PortfolioSnapshot, Security, SecurityType

ROW_FORMAT = "{:<20} {:<12} {:>12} {:>12} {:>14}"
SEPARATOR = "-" * 74

_TYPE_CODES = {SecurityType.CALL: "C", SecurityType.PUT: "P"}


def _fmt(value: Decimal) -> str:
    return f"{value.quantize(VALUE_SCALE, rounding=ROUND_HALF_UP)}"


def month_code(month: Optional[int]) -> str:
    if month is None or not 1 <= month <= 12:
        return "UNK"
    return MONTH_CODES[month - 1]


def format_symbol(security: Security) -> str:
    """Rebuild the CSV symbol for a security, e.g. AAPL-JAN-2026-200-C."""
    if not security.is_option:
        return security.ticker
    if security.expiration_year is None:
        return str(security)
    strike = security.strike.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return (f"{security.ticker}-{month_code(security.expiration_month)}-"
            f"{security.expiration_year}-{strike}-{_TYPE_CODES[security.security_type]}")


def format_type(security: Security) -> str:
    return security.security_type.value


def render_portfolio(snapshot: PortfolioSnapshot, account: Optional[Account] = None) -> str:
    """Render a snapshot as a fixed-width table ending in the portfolio value line."""
    lines = ["", "Portfolio Value Update:"]
    if account is not None:
        lines.append(f"Account: {account.name} ({account.account_id})")
    lines.append(ROW_FORMAT.format("Symbol", "Type", "Quantity", "Price", "Market Value"))
    lines.append(SEPARATOR)
    for position in snapshot.positions:
        lines.append(ROW_FORMAT.format(
            format_symbol(position.security),
            format_type(position.security),
            _fmt(position.quantity),
            _fmt(position.mark_price),
            _fmt(position.market_value),
        ))
    lines.append(SEPARATOR)
    lines.append(f"Portfolio Value: {_fmt(snapshot.total_value)}")
    return "\n".join(lines)
