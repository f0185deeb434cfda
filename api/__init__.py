"""Market data feeds."""

from .feed import MarketDataFeed, PriceListener

# Import simulation feed for demos and tests
from .sim_feed import MockMarketDataFeed

__all__ = ['MarketDataFeed', 'PriceListener', 'MockMarketDataFeed']
