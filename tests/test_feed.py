"""Tests for the simulated market data feed."""
import sys
import threading
import time
from decimal import Decimal
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from api import MarketDataFeed, MockMarketDataFeed


class Recorder:
    """Listener that records every (ticker, price) it receives."""

    def __init__(self):
        self.calls = []
        self.event = threading.Event()

    def __call__(self, ticker, price):
        self.calls.append((ticker, price))
        self.event.set()


@pytest.fixture
def feed():
    feed = MockMarketDataFeed(tick_interval=0.02, seed=42)
    yield feed
    feed.stop()


class TestSubscriptions:

    def test_is_a_market_data_feed(self, feed):
        assert isinstance(feed, MarketDataFeed)

    def test_subscribe_delivers_seeded_price_immediately(self, feed):
        listener = Recorder()
        feed.subscribe("AAPL", listener)
        assert listener.calls == [("AAPL", Decimal("180.00"))]

    def test_unknown_ticker_starts_at_default(self, feed):
        listener = Recorder()
        feed.subscribe("ZZZZ", listener)
        assert listener.calls == [("ZZZZ", Decimal("100.00"))]

    def test_second_subscriber_gets_current_price(self, feed):
        feed.subscribe("AAPL", Recorder())
        feed.publish("AAPL", Decimal("181.50"))
        late = Recorder()
        feed.subscribe("AAPL", late)
        assert late.calls == [("AAPL", Decimal("181.50"))]

    def test_unsubscribe_removes_only_that_listener(self, feed):
        a, b = Recorder(), Recorder()
        feed.subscribe("AAPL", a)
        feed.subscribe("AAPL", b)
        feed.unsubscribe("AAPL", a)
        assert feed.listener_count("AAPL") == 1

        feed.publish("AAPL", Decimal("190"))
        assert a.calls[-1][1] == Decimal("180.00")
        assert b.calls[-1][1] == Decimal("190.00")

    def test_last_unsubscribe_evicts_ticker(self, feed):
        listener = Recorder()
        feed.subscribe("AAPL", listener)
        feed.publish("AAPL", Decimal("200"))
        feed.unsubscribe("AAPL", listener)
        assert feed.listener_count("AAPL") == 0
        assert feed.current_price("AAPL") is None

        again = Recorder()
        feed.subscribe("AAPL", again)
        assert again.calls == [("AAPL", Decimal("180.00"))]

    def test_unsubscribe_unknown_is_noop(self, feed):
        feed.unsubscribe("NOPE", Recorder())
        assert feed.listener_count("NOPE") == 0

    def test_duplicate_subscribe_registers_once(self, feed):
        listener = Recorder()
        feed.subscribe("AAPL", listener)
        feed.subscribe("AAPL", listener)
        assert feed.listener_count("AAPL") == 1

    def test_failing_listener_does_not_block_others(self, feed):
        def broken(ticker, price):
            raise ArithmeticError("boom")

        good = Recorder()
        feed.subscribe("AAPL", broken)
        feed.subscribe("AAPL", good)
        feed.publish("AAPL", Decimal("175"))
        assert good.calls[-1] == ("AAPL", Decimal("175.00"))


class TestPriceGeneration:

    def test_next_price_is_positive_and_two_places(self, feed):
        price = Decimal("0.01")
        for _ in range(100):
            price = feed.next_price(price)
            assert price >= Decimal("0.01")
            assert price.as_tuple().exponent == -2

    def test_seed_makes_walk_reproducible(self):
        a = MockMarketDataFeed(seed=7)
        b = MockMarketDataFeed(seed=7)
        prices_a = [a.next_price(Decimal("100.00")) for _ in range(5)]
        prices_b = [b.next_price(Decimal("100.00")) for _ in range(5)]
        assert prices_a == prices_b

    def test_update_prices_notifies_in_order(self, feed):
        listener = Recorder()
        feed.subscribe("AAPL", listener)
        feed.update_prices()
        feed.update_prices()
        assert len(listener.calls) == 3
        assert listener.calls[-1][1] == feed.current_price("AAPL")


class TestLifecycle:

    def test_start_produces_ticks(self, feed):
        listener = Recorder()
        feed.subscribe("MSFT", listener)
        listener.event.clear()
        feed.start()
        assert listener.event.wait(2.0)
        assert feed.running

    def test_start_and_stop_are_idempotent(self, feed):
        feed.start()
        feed.start()
        assert feed.running
        feed.stop()
        feed.stop()
        assert not feed.running

    def test_no_ticks_after_stop(self, feed):
        listener = Recorder()
        feed.subscribe("AAPL", listener)
        feed.start()
        listener.event.wait(1.0)
        feed.stop()
        count = len(listener.calls)
        time.sleep(0.1)
        assert len(listener.calls) == count
