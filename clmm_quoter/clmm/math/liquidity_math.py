from clmm_quoter.exceptions import LiquidityMathRevert, MaxTokenOverflow, SqrtPriceMathRevert

from .full_math import FullMathModule
from .shared import Q64, RESOLUTION, UINT_64_MAX, UINT_128_MAX


class LiquidityMathModule:
    """Token amounts contained in a price range, and signed liquidity updates"""

    @classmethod
    def add_delta(cls, liquidity: int, delta: int) -> int:
        """
        Adds a signed liquidity delta to an unsigned u128 liquidity value

        :param liquidity: current liquidity
        :param delta: signed liquidity_net of a crossed tick
        :return: updated liquidity
        """
        result = liquidity + delta
        if delta < 0 and result < 0:
            raise LiquidityMathRevert(f"Liquidity Underflow: {liquidity} {delta}", liquidity=liquidity, delta=delta)
        if result > UINT_128_MAX:
            raise LiquidityMathRevert(f"Liquidity Overflow: {liquidity} + {delta}", liquidity=liquidity, delta=delta)
        return result

    @classmethod
    def get_delta_amount_0_unsigned(
        cls, sqrt_ratio_a_x64: int, sqrt_ratio_b_x64: int, liquidity: int, round_up: bool
    ) -> int:
        """
        Gets the amount of token_0 between two prices

        ``liquidity / sqrt(lower) - liquidity / sqrt(upper)``

        :param sqrt_ratio_a_x64: first Q64.64 square root price
        :param sqrt_ratio_b_x64: second Q64.64 square root price
        :param liquidity: liquidity of the range
        :param round_up: whether to round the amount up or down
        :return: token_0 amount, as u64
        """
        if sqrt_ratio_a_x64 > sqrt_ratio_b_x64:
            sqrt_ratio_a_x64, sqrt_ratio_b_x64 = sqrt_ratio_b_x64, sqrt_ratio_a_x64

        if sqrt_ratio_a_x64 <= 0:
            raise SqrtPriceMathRevert("sqrt_price must be greater than zero")

        numerator_1 = liquidity << RESOLUTION
        numerator_2 = sqrt_ratio_b_x64 - sqrt_ratio_a_x64

        if round_up:
            result = FullMathModule.div_rounding_up(
                FullMathModule.mul_div_ceil(numerator_1, numerator_2, sqrt_ratio_b_x64),
                sqrt_ratio_a_x64,
            )
        else:
            result = FullMathModule.mul_div_floor(numerator_1, numerator_2, sqrt_ratio_b_x64) // sqrt_ratio_a_x64

        if result > UINT_64_MAX:
            raise MaxTokenOverflow(f"Token 0 amount {result} exceeds u64", amount=result)
        return result

    @classmethod
    def get_delta_amount_1_unsigned(
        cls, sqrt_ratio_a_x64: int, sqrt_ratio_b_x64: int, liquidity: int, round_up: bool
    ) -> int:
        """
        Gets the amount of token_1 between two prices

        ``liquidity * (sqrt(upper) - sqrt(lower))``
        """
        if sqrt_ratio_a_x64 > sqrt_ratio_b_x64:
            sqrt_ratio_a_x64, sqrt_ratio_b_x64 = sqrt_ratio_b_x64, sqrt_ratio_a_x64

        if round_up:
            result = FullMathModule.mul_div_ceil(liquidity, sqrt_ratio_b_x64 - sqrt_ratio_a_x64, Q64)
        else:
            result = FullMathModule.mul_div_floor(liquidity, sqrt_ratio_b_x64 - sqrt_ratio_a_x64, Q64)

        if result > UINT_64_MAX:
            raise MaxTokenOverflow(f"Token 1 amount {result} exceeds u64", amount=result)
        return result
