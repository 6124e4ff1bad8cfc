import math

from .shared import Q64, UINT_128_MAX


def price_to_x64(price: float) -> int:
    """
    Encodes a float price as a Q64.64 fixed point number.  Truncates toward zero, negative or NaN prices
    encode as zero and prices beyond a u128 saturate.

    :param price:
    :return:
    """
    if math.isnan(price) or price <= 0:
        return 0
    scaled = price * float(Q64)
    if math.isinf(scaled) or scaled >= UINT_128_MAX:
        return UINT_128_MAX
    return int(scaled)


def from_x64_price(price_x64: int) -> float:
    """Decodes a Q64.64 fixed point number into a float"""
    return float(price_x64) / float(Q64)


def price_to_sqrt_price_x64(price: float, decimals_0: int, decimals_1: int) -> int:
    """
    Converts a human readable price of token_0 in units of token_1 into a Q64.64 square root price of the
    raw token amounts

    :param price: decimal adjusted price
    :param decimals_0: decimals of token_0
    :param decimals_1: decimals of token_1
    :return: Q64.64 square root price
    """
    price_with_decimals = price * float(10**decimals_1) / float(10**decimals_0)
    if math.isnan(price_with_decimals) or price_with_decimals <= 0:
        return 0
    return price_to_x64(math.sqrt(price_with_decimals))


def sqrt_price_x64_to_price(sqrt_price_x64: int, decimals_0: int, decimals_1: int) -> float:
    """
    Converts a Q64.64 square root price of raw token amounts into a decimal adjusted price of token_0 in units
    of token_1
    """
    return from_x64_price(sqrt_price_x64) ** 2 * float(10**decimals_0) / float(10**decimals_1)


def tick_with_spacing(tick: int, tick_spacing: int) -> int:
    """
    Rounds a tick down to the nearest multiple of tick_spacing, toward negative infinity

    >>> tick_with_spacing(-7, 10)
    -10

    :param tick:
    :param tick_spacing:
    :return:
    """
    return (tick // tick_spacing) * tick_spacing
