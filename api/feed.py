"""Market data feed contract.

A feed maps tickers to price streams. Listeners are plain callables taking
(ticker, price). They may be invoked from any feed-owned thread, so they must
return quickly and must not block.
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Callable

PriceListener = Callable[[str, Decimal], None]


class MarketDataFeed(ABC):

    @abstractmethod
    def start(self) -> None:
        """Begin producing ticks. Calling start() on a running feed is a no-op."""

    @abstractmethod
    def stop(self) -> None:
        """Stop producing ticks. Calling stop() on a stopped feed is a no-op."""

    @abstractmethod
    def subscribe(self, ticker: str, listener: PriceListener) -> None:
        """Register a listener and immediately deliver the current (or initial) price to it."""

    @abstractmethod
    def unsubscribe(self, ticker: str, listener: PriceListener) -> None:
        """Remove a previously subscribed listener, matched by identity."""
