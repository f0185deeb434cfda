"""Simulated market data feed for development and tests."""
import math
import random
import threading
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from api.feed import MarketDataFeed, PriceListener
from config.settings import (
    DEFAULT_INITIAL_PRICE,
    FEED_DT_YEARS,
    FEED_MU,
    FEED_SIGMA,
    FEED_TICK_SECONDS,
    INITIAL_PRICES,
    MIN_PRICE,
    STOP_TIMEOUT_SECONDS,
    VALUE_SCALE,
)
from core.models import to_decimal
from utils.logging import get_logger


class MockMarketDataFeed(MarketDataFeed):
    """Random-walk price feed.

    Every tick advances each subscribed ticker by one geometric Brownian motion
    step and notifies its listeners from a single background thread, so ticks
    for a ticker reach each listener in the order they were produced.
    """

    def __init__(self, tick_interval: float = FEED_TICK_SECONDS, seed: Optional[int] = None,
                 initial_prices: Optional[Dict[str, Decimal]] = None,
                 mu: float = FEED_MU, sigma: float = FEED_SIGMA, dt: float = FEED_DT_YEARS):
        self.tick_interval = tick_interval
        self.mu = mu
        self.sigma = sigma
        self.dt = dt
        self.initial_prices = dict(INITIAL_PRICES if initial_prices is None else initial_prices)
        self.logger = get_logger()

        self._rng = random.Random(seed)
        self._listeners: Dict[str, List[PriceListener]] = {}
        self._prices: Dict[str, Decimal] = {}
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run, args=(self._stop_event,), name="mock-feed", daemon=True
            )
            self._thread.start()
        self.logger.info(f"Mock feed started (tick every {self.tick_interval}s)")

    def stop(self) -> None:
        with self._lock:
            thread = self._thread
            self._thread = None
            self._stop_event.set()
        if thread is None:
            return
        if thread is not threading.current_thread():
            thread.join(timeout=STOP_TIMEOUT_SECONDS)
            if thread.is_alive():
                self.logger.warning("Mock feed thread did not finish within timeout")
        self.logger.info("Mock feed stopped")

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            try:
                self.update_prices()
            except Exception:
                self.logger.exception("Mock feed tick failed")
            if stop_event.wait(self.tick_interval):
                break

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, ticker: str, listener: PriceListener) -> None:
        with self._lock:
            listeners = self._listeners.setdefault(ticker, [])
            if not any(existing is listener for existing in listeners):
                listeners.append(listener)
            price = self._prices.get(ticker)
            if price is None:
                price = self.initial_prices.get(ticker, DEFAULT_INITIAL_PRICE)
                self._prices[ticker] = price
        self._notify(listener, ticker, price)

    def unsubscribe(self, ticker: str, listener: PriceListener) -> None:
        with self._lock:
            listeners = self._listeners.get(ticker)
            if listeners is None:
                return
            listeners[:] = [existing for existing in listeners if existing is not listener]
            if not listeners:
                del self._listeners[ticker]
                self._prices.pop(ticker, None)

    def listener_count(self, ticker: str) -> int:
        with self._lock:
            return len(self._listeners.get(ticker, []))

    def current_price(self, ticker: str) -> Optional[Decimal]:
        with self._lock:
            return self._prices.get(ticker)

    # ------------------------------------------------------------------
    # Price generation and dispatch
    # ------------------------------------------------------------------

    def publish(self, ticker: str, price) -> None:
        """Set a ticker's price explicitly and notify its listeners."""
        price = to_decimal(price).quantize(VALUE_SCALE, rounding=ROUND_HALF_UP)
        with self._lock:
            self._prices[ticker] = price
            listeners = list(self._listeners.get(ticker, []))
        for listener in listeners:
            self._notify(listener, ticker, price)

    def update_prices(self) -> None:
        with self._lock:
            updates = []
            for ticker, price in self._prices.items():
                new_price = self.next_price(price)
                self._prices[ticker] = new_price
                updates.append((ticker, new_price, list(self._listeners.get(ticker, []))))
        for ticker, price, listeners in updates:
            for listener in listeners:
                self._notify(listener, ticker, price)

    def next_price(self, price: Decimal) -> Decimal:
        epsilon = self._rng.gauss(0.0, 1.0)
        drift = self.mu * self.dt + self.sigma * math.sqrt(self.dt) * epsilon
        new_price = price + price * to_decimal(drift)
        return max(new_price, MIN_PRICE).quantize(VALUE_SCALE, rounding=ROUND_HALF_UP)

    def _notify(self, listener: PriceListener, ticker: str, price: Decimal) -> None:
        try:
            listener(ticker, price)
        except Exception:
            self.logger.exception(f"Listener for {ticker} raised on price {price}")
