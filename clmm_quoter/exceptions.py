class ClmmError(Exception):
    """
    Base class for every error raised while quoting a swap against a concentrated liquidity pool.

    Extra keyword arguments are kept on the ``context`` attribute so callers can inspect the offending tick,
    tick array index, or amount without parsing the message.
    """

    def __init__(self, message: str = "", **context):
        super().__init__(message)
        self.context = context


# -------------------------------------------------------
#    Validation Errors
# -------------------------------------------------------
class SwapValidationError(ClmmError):
    """
    Raised when the swap request itself is invalid.  The following conditions will result in this error:

        * Swapping an amount of zero
        * sqrt_price_limit on the wrong side of the current pool price
        * sqrt_price_limit outside of MIN_SQRT_PRICE_X64 and MAX_SQRT_PRICE_X64

    """


class InputTokenNotInPool(SwapValidationError):
    """Raised when the input mint matches neither mint of the pool"""


# -------------------------------------------------------
#    State Consistency Errors
# -------------------------------------------------------
class StateConsistencyError(ClmmError):
    """
    Raised when the supplied pool snapshot, bitmap extension and tick arrays disagree with each other.  Quotes
    computed from an inconsistent snapshot are never returned.
    """


class TickArrayMismatch(StateConsistencyError):
    """Raised when the next tick array in the queue does not start at the index predicted by the bitmap"""


class TickArrayQueueExhausted(StateConsistencyError):
    """Raised when the swap requires a tick array that was not pre-fetched"""


class InsufficientLiquidityError(StateConsistencyError):
    """
    Raised when no initialized tick array remains in the swap direction, or the swap leaves the valid tick range
    before the requested amount is filled
    """


class MissingBitmapExtension(StateConsistencyError):
    """Raised when the search for the next tick array needs the bitmap extension account and none was supplied"""


class InvalidTickArrayBoundary(StateConsistencyError):
    """Raised when a tick array start index is not valid for the bitmap it is looked up in"""


class InvalidTickIndex(StateConsistencyError):
    """Raised when a tick does not belong to the tick array it is read from"""


# -------------------------------------------------------
#    Arithmetic Errors
# -------------------------------------------------------
class ClmmArithmeticError(ClmmError):
    """
    Raised when an operation would overflow or underflow the integer width used by the on-chain program.
    Values are never wrapped or saturated.
    """


class FullMathRevert(ClmmArithmeticError):
    """
    Raised when the result of (a * b) / c overflows the maximum value of a uint256, or when dividing by zero.
    """


class TickMathRevert(ClmmArithmeticError):
    """
    Raised when a tick value is out of bounds, or a sqrt_price exceeds the maximum sqrt_price
    """


class SqrtPriceMathRevert(ClmmArithmeticError):
    """
    Raised when a sqrt_price value is out of bounds, or the inputs to a price calculation are
    invalid, ie computing a price with zero liquidity or a sqrt_price of zero
    """


class LiquidityMathRevert(ClmmArithmeticError):
    """Raised when adding a liquidity delta overflows a u128 or underflows zero"""


class MaxTokenOverflow(ClmmArithmeticError):
    """Raised when a token amount computed from a price range does not fit in a u64"""


class TransferFeeError(ClmmArithmeticError):
    """Raised when token-2022 transfer fee calculations overflow"""


class SwapLoopLimitError(ClmmArithmeticError):
    """Raised when a swap needs more steps than the configured iteration cap"""
