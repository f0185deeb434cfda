"""Portfolio valuation configuration defaults."""
from decimal import Decimal

# ========================================
# PRICING SETTINGS
# ========================================

# Annualized risk-free rate used by the Black-Scholes pricer
RISK_FREE_RATE = 0.02

# Defaults applied to option positions loaded from CSV
DEFAULT_MU = Decimal("0.05")      # Expected annual return (informational)
DEFAULT_SIGMA = Decimal("0.30")   # Annualized volatility

# Shares of underlying per option contract
OPTION_CONTRACT_MULTIPLIER = Decimal("100")

# ========================================
# DECIMAL SETTINGS
# ========================================

PRICE_SCALE = Decimal("0.0001")   # Security fields and option prices (scale 4)
VALUE_SCALE = Decimal("0.01")     # Market values and display (scale 2)
DAYS_PER_YEAR = Decimal("365")

# ========================================
# MARKET DATA SETTINGS
# ========================================

# Seed prices for the mock feed; anything else starts at DEFAULT_INITIAL_PRICE
INITIAL_PRICES = {
    "AAPL": Decimal("180.00"),
    "GOOGL": Decimal("140.00"),
    "MSFT": Decimal("350.00"),
}
DEFAULT_INITIAL_PRICE = Decimal("100.00")
MIN_PRICE = Decimal("0.01")

# Random walk parameters for the mock feed
FEED_MU = 0.05
FEED_SIGMA = 0.30
FEED_TICK_SECONDS = 1.0
FEED_DT_YEARS = 1.0 / 252 / 6.5 / 60  # One trading minute

# ========================================
# MONITORING SETTINGS
# ========================================

SNAPSHOT_PERIOD_SECONDS = 3.0

# How long stop() waits for an in-flight snapshot before giving up on it
STOP_TIMEOUT_SECONDS = 1.0

# ========================================
# ACCOUNT / INPUT SETTINGS
# ========================================

DEFAULT_POSITIONS_PATH = "data/positions.csv"
DEFAULT_ACCOUNT_ID = "ACC001"
DEFAULT_ACCOUNT_NAME = "Demo Account"
DEFAULT_INITIAL_CASH = Decimal("0.00")
DEFAULT_OUTPUT_DIR = "data/account"

# Three-letter month codes used in option symbols (index + 1 = month number)
MONTH_CODES = ("JAN", "FEB", "MAR", "APR", "MAY", "JUN",
               "JUL", "AUG", "SEP", "OCT", "NOV", "DEC")
