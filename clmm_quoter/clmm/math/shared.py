from dataclasses import dataclass
from typing import Type

from clmm_quoter.exceptions import ClmmArithmeticError, TickMathRevert

MAX_TICK = 443636
MIN_TICK = -MAX_TICK
MAX_SQRT_PRICE_X64 = 79226673521066979257578248091
MIN_SQRT_PRICE_X64 = 4295048016

RESOLUTION = 64
Q64 = 2**64

TICK_ARRAY_SIZE = 60
TICK_ARRAY_BITMAP_SIZE = 512
EXTENSION_TICKARRAY_BITMAP_SIZE = 14

FEE_RATE_DENOMINATOR_VALUE = 1_000_000

UINT_64_MAX = 2**64 - 1
UINT_128_MAX = 2**128 - 1
UINT_256_MAX = 2**256 - 1
INT_128_MAX = 2**127 - 1
INT_128_MIN = -(2**127)


@dataclass(slots=True)
class SwapComputation:
    """Model to store the results of a single constant-liquidity swap step"""

    sqrt_price_next_x64: int
    amount_in: int
    amount_out: int
    fee_amount: int


def check_tick(tick: int):
    """
    Checks that a tick is within MIN_TICK and MAX_TICK.  Raises TickMathRevert if invalid

    :param tick:
    :return:
    """
    if tick < MIN_TICK or tick > MAX_TICK:
        raise TickMathRevert(f"Tick Index out of Bounds: {tick}", tick=tick)


def overflow_check(number: int, max_value: int, exception_class: Type[Exception] = ClmmArithmeticError) -> int:
    """
    Checks that a number is not greater than a max value, and not negative.  Raises ``exception_class`` when
    the number cannot be represented.

    :param number:
    :param max_value:
    :param exception_class: error raised on overflow.  Defaults to ClmmArithmeticError
    :return: number
    """
    if number > max_value:
        raise exception_class(f"{number} Overflowed Max Value of: {max_value}")
    if number < 0:
        raise exception_class(f"{number} Underflowed Zero")

    return number


def checked_add(left: int, right: int, max_value: int = UINT_64_MAX) -> int:
    """Adds two unsigned values, raising ClmmArithmeticError instead of wrapping"""
    return overflow_check(left + right, max_value)


def checked_sub(left: int, right: int) -> int:
    """Subtracts two unsigned values, raising ClmmArithmeticError on underflow"""
    return overflow_check(left - right, UINT_256_MAX)
