"""Load positions from CSV files.

Rows have the form ``symbol,quantity`` after a header row. Stocks use a plain
ticker; options use ``TICKER-MON-YEAR-STRIKE-C|P`` and expire on the first
day of the given month.
"""
import csv
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from config.settings import DAYS_PER_YEAR, DEFAULT_MU, DEFAULT_SIGMA, MONTH_CODES, PRICE_SCALE
from core.errors import InvalidInstrumentError, InvalidSymbolError
from core.models import Position, Security, SecurityType
from utils.logging import get_logger

OPTION_TYPES = {"C": SecurityType.CALL, "P": SecurityType.PUT}


def time_to_maturity(expiration: date, today: Optional[date] = None) -> Decimal:
    """Years from today to expiration at scale 4, floored at zero."""
    today = today or date.today()
    days = (expiration - today).days
    years = (Decimal(days) / DAYS_PER_YEAR).quantize(PRICE_SCALE, rounding=ROUND_HALF_UP)
    return max(years, Decimal("0").quantize(PRICE_SCALE))


def _parse_decimal(text: str, what: str, symbol: str, line_number: Optional[int]) -> Decimal:
    try:
        value = Decimal(text.strip())
    except InvalidOperation:
        raise InvalidSymbolError(f"non-numeric {what} {text!r}", symbol=symbol, line_number=line_number)
    if not value.is_finite():
        raise InvalidSymbolError(f"non-numeric {what} {text!r}", symbol=symbol, line_number=line_number)
    return value


def parse_symbol(symbol: str, today: Optional[date] = None, mu: Decimal = DEFAULT_MU,
                 sigma: Decimal = DEFAULT_SIGMA, line_number: Optional[int] = None) -> Security:
    """Parse a stock ticker or an option symbol into a Security."""
    symbol = symbol.strip()
    if not symbol:
        raise InvalidSymbolError("empty symbol", symbol=symbol, line_number=line_number)

    if "-" not in symbol:
        return Security.stock(symbol)

    parts = symbol.split("-")
    if len(parts) != 5:
        raise InvalidSymbolError(
            f"option symbol {symbol!r} must look like TICKER-MON-YEAR-STRIKE-C|P",
            symbol=symbol, line_number=line_number,
        )
    ticker, month_text, year_text, strike_text, type_text = (p.strip() for p in parts)

    month_text = month_text.upper()
    if month_text not in MONTH_CODES:
        raise InvalidSymbolError(f"unknown month {month_text!r}", symbol=symbol, line_number=line_number)
    month = MONTH_CODES.index(month_text) + 1

    if not year_text.isdigit():
        raise InvalidSymbolError(f"invalid year {year_text!r}", symbol=symbol, line_number=line_number)
    year = int(year_text)

    strike = _parse_decimal(strike_text, "strike", symbol, line_number)

    option_type = OPTION_TYPES.get(type_text.upper())
    if option_type is None:
        raise InvalidSymbolError(f"option type must be C or P, got {type_text!r}",
                                 symbol=symbol, line_number=line_number)

    try:
        expiration = date(year, month, 1)
        return Security.option(
            ticker,
            option_type,
            strike=strike,
            time_to_maturity=time_to_maturity(expiration, today),
            mu=mu,
            sigma=sigma,
            expiration_month=month,
            expiration_year=year,
        )
    except (InvalidInstrumentError, ValueError) as e:
        raise InvalidSymbolError(str(e), symbol=symbol, line_number=line_number) from e


def parse_position_row(row: Sequence[str], today: Optional[date] = None, mu: Decimal = DEFAULT_MU,
                       sigma: Decimal = DEFAULT_SIGMA, line_number: Optional[int] = None) -> Position:
    if len(row) != 2:
        raise InvalidSymbolError(f"expected 'symbol,quantity', got {len(row)} fields",
                                 symbol=",".join(row), line_number=line_number)
    symbol, quantity_text = row
    quantity = _parse_decimal(quantity_text, "quantity", symbol, line_number)
    security = parse_symbol(symbol, today=today, mu=mu, sigma=sigma, line_number=line_number)
    return Position(security, quantity)


def parse_positions(rows: Iterable[Sequence[str]], today: Optional[date] = None,
                    mu: Decimal = DEFAULT_MU, sigma: Decimal = DEFAULT_SIGMA) -> List[Position]:
    """Parse CSV rows into positions. The first row is the header and is skipped."""
    positions = []
    for line_number, row in enumerate(rows, start=1):
        if line_number == 1:
            continue
        if not row or all(not cell.strip() for cell in row):
            continue
        positions.append(parse_position_row(row, today=today, mu=mu, sigma=sigma, line_number=line_number))
    return positions


def read_positions(path, today: Optional[date] = None, mu: Decimal = DEFAULT_MU,
                   sigma: Decimal = DEFAULT_SIGMA) -> List[Position]:
    """Read positions from a CSV file on disk."""
    logger = get_logger()
    path = Path(path)
    with open(path, "r", newline="", encoding="utf-8") as f:
        positions = parse_positions(csv.reader(f), today=today, mu=mu, sigma=sigma)
    logger.info(f"Loaded {len(positions)} positions from {path}")
    return positions
