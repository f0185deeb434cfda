"""Error types raised by the valuation pipeline."""
from typing import Optional


class ValuationError(Exception):
    pass


class InvalidSymbolError(ValuationError, ValueError):
    """A positions row could not be parsed into a security and quantity."""

    def __init__(self, message: str, symbol: Optional[str] = None, line_number: Optional[int] = None):
        self.symbol = symbol
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class InvalidInstrumentError(ValuationError, ValueError):
    pass


class InvalidArgumentError(ValuationError, ValueError):
    pass


class InsufficientFundsError(ValuationError):
    pass


class LifecycleError(ValuationError, RuntimeError):
    pass
