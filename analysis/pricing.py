"""Black-Scholes option pricing for non-dividend paying underlyings.

Prices are computed in double precision and converted back to Decimal at
scale 4 (half-up) on the way out. Time to maturity at or below zero returns
intrinsic value.
"""
import math
from decimal import Decimal, ROUND_HALF_UP

from config.settings import PRICE_SCALE, RISK_FREE_RATE
from core.errors import InvalidArgumentError
from core.models import SecurityType, to_decimal


def norm_cdf(x: float) -> float:
    """Standard normal cumulative distribution function."""
    return 0.5 * math.erfc(-x / math.sqrt(2.0))


def _check_option_type(option_type: SecurityType) -> None:
    if option_type not in (SecurityType.CALL, SecurityType.PUT):
        raise ValueError(f"Invalid option type: {option_type}")


def _to_price(value) -> Decimal:
    return to_decimal(value).quantize(PRICE_SCALE, rounding=ROUND_HALF_UP)


def intrinsic_value(spot, strike, option_type: SecurityType) -> Decimal:
    """Value of the option if exercised now, floored at zero."""
    _check_option_type(option_type)
    spot = to_decimal(spot)
    strike = to_decimal(strike)
    if option_type is SecurityType.CALL:
        value = max(spot - strike, Decimal("0"))
    else:
        value = max(strike - spot, Decimal("0"))
    return _to_price(value)


def calculate_d1_d2(spot: float, strike: float, time_to_maturity: float, sigma: float,
                    rate: float = RISK_FREE_RATE):
    vol_sqrt_t = sigma * math.sqrt(time_to_maturity)
    d1 = (math.log(spot / strike) + (rate + sigma * sigma / 2.0) * time_to_maturity) / vol_sqrt_t
    return d1, d1 - vol_sqrt_t


def calculate_option_price(spot, strike, time_to_maturity, sigma, option_type: SecurityType,
                           rate: float = RISK_FREE_RATE) -> Decimal:
    """Theoretical fair value of a European option.

    Args:
        spot: Current underlying price (> 0)
        strike: Exercise price (> 0)
        time_to_maturity: Years to expiration; <= 0 prices at intrinsic value
        sigma: Annualized volatility (> 0)
        option_type: SecurityType.CALL or SecurityType.PUT
        rate: Annualized risk-free rate

    Returns:
        Price per unit of underlying as a Decimal with 4 decimal places
    """
    _check_option_type(option_type)

    spot_d = to_decimal(spot)
    strike_d = to_decimal(strike)
    sigma_d = to_decimal(sigma)
    tau_d = to_decimal(time_to_maturity)

    if strike_d <= 0:
        raise InvalidArgumentError(f"Strike must be positive, got {strike_d}")
    if sigma_d <= 0:
        raise InvalidArgumentError(f"Volatility must be positive, got {sigma_d}")
    if spot_d <= 0:
        raise InvalidArgumentError(f"Spot must be positive, got {spot_d}")

    if tau_d <= 0:
        return intrinsic_value(spot_d, strike_d, option_type)

    s = float(spot_d)
    k = float(strike_d)
    t = float(tau_d)
    d1, d2 = calculate_d1_d2(s, k, t, float(sigma_d), rate)
    discounted_strike = k * math.exp(-rate * t)

    if option_type is SecurityType.CALL:
        price = s * norm_cdf(d1) - discounted_strike * norm_cdf(d2)
    else:
        price = discounted_strike * norm_cdf(-d2) - s * norm_cdf(-d1)

    # Deep out-of-the-money results can come out as -1e-15 from cancellation
    return _to_price(max(price, 0.0))
