"""Drive portfolio marks from a market data feed and emit periodic snapshots."""
import threading
from decimal import Decimal
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

from analysis.pricing import calculate_option_price
from api.feed import MarketDataFeed
from config.settings import RISK_FREE_RATE, SNAPSHOT_PERIOD_SECONDS, STOP_TIMEOUT_SECONDS
from core.errors import LifecycleError
from core.models import Account, Portfolio, PortfolioSnapshot, Position
from core.renderer import render_portfolio
from utils.logging import get_logger

Renderer = Callable[[PortfolioSnapshot, Optional[Account]], str]
Sink = Callable[[str], None]


class SubscriberState(Enum):
    CREATED = "CREATED"
    STARTED = "STARTED"
    STOPPED = "STOPPED"


class PositionListener:
    """Feed listener bound to a single position.

    Stocks are marked at the spot; options at their Black-Scholes value for
    that spot. Errors are logged and the previous mark is kept.
    """

    def __init__(self, position: Position, rate: float = RISK_FREE_RATE):
        self.position = position
        self.rate = rate
        self.logger = get_logger()

    def mark_for(self, spot: Decimal) -> Decimal:
        security = self.position.security
        if not security.is_option:
            return spot
        return calculate_option_price(
            spot,
            security.strike,
            security.time_to_maturity,
            security.sigma,
            security.security_type,
            rate=self.rate,
        )

    def __call__(self, ticker: str, price: Decimal) -> None:
        try:
            mark = self.mark_for(price)
            self.position.update_price(mark)
            self.logger.debug(f"{self.position.security} marked at {mark} (spot {ticker}={price})")
        except Exception:
            self.logger.exception(f"Failed to mark {self.position.security} on {ticker}={price}")

    def __repr__(self) -> str:
        return f"PositionListener({self.position.security})"


class ValuationSubscriber:
    """Bind a portfolio's positions to a feed and render snapshots on a timer.

    Lifecycle is CREATED -> STARTED -> STOPPED. start() may be called once;
    stop() is idempotent and a no-op before start().
    """

    def __init__(self, target: Union[Account, Portfolio], feed: MarketDataFeed,
                 snapshot_period: float = SNAPSHOT_PERIOD_SECONDS, rate: float = RISK_FREE_RATE,
                 renderer: Renderer = render_portfolio, sink: Sink = print):
        if isinstance(target, Account):
            self.account: Optional[Account] = target
            self.portfolio = target.portfolio
        else:
            self.account = None
            self.portfolio = target
        self.feed = feed
        self.snapshot_period = snapshot_period
        self.rate = rate
        self.renderer = renderer
        self.sink = sink
        self.logger = get_logger()

        self.state = SubscriberState.CREATED
        self.last_snapshot: Optional[PortfolioSnapshot] = None
        self._listeners: List[Tuple[str, PositionListener]] = []
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._timer: Optional[threading.Thread] = None

    @property
    def listeners(self) -> List[Tuple[str, PositionListener]]:
        return list(self._listeners)

    def start(self) -> None:
        with self._lock:
            if self.state is not SubscriberState.CREATED:
                raise LifecycleError(f"Cannot start subscriber in state {self.state.value}")

            try:
                for position in self.portfolio.get_positions():
                    ticker = position.security.ticker
                    listener = PositionListener(position, rate=self.rate)
                    self._listeners.append((ticker, listener))
                    self.feed.subscribe(ticker, listener)

                self.feed.start()
            except Exception:
                self.logger.exception("Subscriber start failed; releasing feed subscriptions")
                self._unsubscribe_all()
                raise

            self._timer = threading.Thread(target=self._run_snapshots, name="valuation-snapshots", daemon=True)
            self._timer.start()
            self.state = SubscriberState.STARTED

        self.logger.info(
            f"Valuation subscriber started: {len(self._listeners)} positions, "
            f"snapshot every {self.snapshot_period}s"
        )

    def stop(self) -> None:
        with self._lock:
            if self.state is not SubscriberState.STARTED:
                self.logger.debug(f"stop() ignored in state {self.state.value}")
                return
            self.state = SubscriberState.STOPPED

            self._unsubscribe_all()
            self.feed.stop()

            self._stop_event.set()
            timer = self._timer
            self._timer = None

        if timer is not None and timer is not threading.current_thread():
            timer.join(timeout=STOP_TIMEOUT_SECONDS)
            if timer.is_alive():
                self.logger.warning("Snapshot timer still running after stop timeout; abandoning it")
        self.logger.info("Valuation subscriber stopped")

    def _unsubscribe_all(self) -> None:
        for ticker, listener in self._listeners:
            try:
                self.feed.unsubscribe(ticker, listener)
            except Exception:
                self.logger.exception(f"Failed to unsubscribe {listener} from {ticker}")
        self._listeners.clear()

    def _run_snapshots(self) -> None:
        while not self._stop_event.is_set():
            self.emit_snapshot()
            if self._stop_event.wait(self.snapshot_period):
                break

    def emit_snapshot(self) -> Optional[PortfolioSnapshot]:
        """Render the current portfolio state to the sink. Errors are logged, not raised."""
        try:
            snapshot = self.portfolio.snapshot()
            self.last_snapshot = snapshot
            self.sink(self.renderer(snapshot, self.account))
            return snapshot
        except Exception:
            self.logger.exception("Failed to emit portfolio snapshot")
            return None
