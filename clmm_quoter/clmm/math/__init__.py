import logging

from clmm_quoter.exceptions import MaxTokenOverflow

from .full_math import FullMathModule
from .liquidity_math import LiquidityMathModule
from .price_math import (
    from_x64_price,
    price_to_sqrt_price_x64,
    price_to_x64,
    sqrt_price_x64_to_price,
    tick_with_spacing,
)
from .shared import (
    FEE_RATE_DENOMINATOR_VALUE,
    MAX_SQRT_PRICE_X64,
    MAX_TICK,
    MIN_SQRT_PRICE_X64,
    MIN_TICK,
    Q64,
    UINT_64_MAX,
    UINT_128_MAX,
    SwapComputation,
    check_tick,
)
from .sqrt_price_math import SqrtPriceMathModule
from .tick_math import TickMathModule

package_logger = logging.getLogger("clmm_quoter")
clmm_logger = package_logger.getChild("clmm")
logger = clmm_logger.getChild("math")


class ClmmMath:
    """
    Integer math of the concentrated liquidity program.  Every method mirrors the on-chain rounding, and raises
    instead of wrapping when a value does not fit in the integer width used on-chain.
    """

    MAX_SQRT_PRICE_X64 = MAX_SQRT_PRICE_X64
    MIN_SQRT_PRICE_X64 = MIN_SQRT_PRICE_X64

    MAX_TICK = MAX_TICK
    MIN_TICK = MIN_TICK

    UINT_128_MAX = UINT_128_MAX
    Q64 = Q64

    # Math Modules

    full_math = FullMathModule
    sqrt_price_math = SqrtPriceMathModule
    tick_math = TickMathModule
    liquidity_math = LiquidityMathModule

    # Safety Methods
    check_tick = staticmethod(check_tick)

    # Price Conversions
    price_to_x64 = staticmethod(price_to_x64)
    from_x64_price = staticmethod(from_x64_price)
    price_to_sqrt_price_x64 = staticmethod(price_to_sqrt_price_x64)
    sqrt_price_x64_to_price = staticmethod(sqrt_price_x64_to_price)
    tick_with_spacing = staticmethod(tick_with_spacing)

    @classmethod
    def calculate_amount_in_range(
        cls,
        sqrt_price_current_x64: int,
        sqrt_price_target_x64: int,
        liquidity: int,
        zero_for_one: bool,
        is_base_input: bool,
    ) -> int | None:
        """
        Amount of the specified token needed to move the price all the way to the target.  Returns None when the
        amount does not fit in a u64, in which case the target cannot be reached within a single step.
        """
        try:
            if is_base_input:
                if zero_for_one:
                    return cls.liquidity_math.get_delta_amount_0_unsigned(
                        sqrt_price_target_x64, sqrt_price_current_x64, liquidity, True
                    )
                return cls.liquidity_math.get_delta_amount_1_unsigned(
                    sqrt_price_current_x64, sqrt_price_target_x64, liquidity, True
                )

            if zero_for_one:
                return cls.liquidity_math.get_delta_amount_1_unsigned(
                    sqrt_price_target_x64, sqrt_price_current_x64, liquidity, False
                )
            return cls.liquidity_math.get_delta_amount_0_unsigned(
                sqrt_price_current_x64, sqrt_price_target_x64, liquidity, False
            )
        except MaxTokenOverflow:
            logger.debug("Amount to reach target overflows u64, computing price from the remaining amount")
            return None

    @classmethod
    def compute_swap_step(  # pylint: disable=too-many-branches
        cls,
        sqrt_price_current_x64: int,
        sqrt_price_target_x64: int,
        liquidity: int,
        amount_remaining: int,
        fee_rate: int,
        is_base_input: bool,
        zero_for_one: bool,
    ) -> SwapComputation:
        """
        Computes the result of swapping some amount in, or amount out, given the parameters of the swap.
        The fee, plus the amount in, will never exceed the amount remaining if the swap's amount is exact input

        :param sqrt_price_current_x64: current Q64.64 square root price of the pool
        :param sqrt_price_target_x64: price that cannot be exceeded, from which the direction of the swap is inferred
        :param liquidity: usable liquidity
        :param amount_remaining: how much input or output amount is remaining to be swapped in/out
        :param fee_rate: fee taken from the input amount, expressed in hundredths of a bip
        :param is_base_input: whether amount_remaining is an exact input or an exact output
        :param zero_for_one: whether the swap sells token_0 for token_1
        :return: SwapComputation
        """
        fee_complement = FEE_RATE_DENOMINATOR_VALUE - fee_rate

        if is_base_input:
            amount_remaining_less_fee = cls.full_math.mul_div_floor(
                amount_remaining, fee_complement, FEE_RATE_DENOMINATOR_VALUE, UINT_64_MAX
            )
            amount_in = cls.calculate_amount_in_range(
                sqrt_price_current_x64, sqrt_price_target_x64, liquidity, zero_for_one, is_base_input
            )
            amount_out = 0
            if amount_in is not None and amount_remaining_less_fee >= amount_in:
                sqrt_price_next_x64 = sqrt_price_target_x64
            else:
                sqrt_price_next_x64 = cls.sqrt_price_math.get_next_sqrt_price_from_input(
                    sqrt_price_current_x64, liquidity, amount_remaining_less_fee, zero_for_one
                )
        else:
            amount_out = cls.calculate_amount_in_range(
                sqrt_price_current_x64, sqrt_price_target_x64, liquidity, zero_for_one, is_base_input
            )
            amount_in = 0
            if amount_out is not None and amount_remaining >= amount_out:
                sqrt_price_next_x64 = sqrt_price_target_x64
            else:
                sqrt_price_next_x64 = cls.sqrt_price_math.get_next_sqrt_price_from_output(
                    sqrt_price_current_x64, liquidity, amount_remaining, zero_for_one
                )

        # an amount that overflowed u64 is recomputed below, or left at zero when the target was reached
        amount_in = amount_in if amount_in is not None else 0
        amount_out = amount_out if amount_out is not None else 0

        reached_target = sqrt_price_target_x64 == sqrt_price_next_x64

        if zero_for_one:
            if not (reached_target and is_base_input):
                amount_in = cls.liquidity_math.get_delta_amount_0_unsigned(
                    sqrt_price_next_x64, sqrt_price_current_x64, liquidity, True
                )
            if not (reached_target and not is_base_input):
                amount_out = cls.liquidity_math.get_delta_amount_1_unsigned(
                    sqrt_price_next_x64, sqrt_price_current_x64, liquidity, False
                )
        else:
            if not (reached_target and is_base_input):
                amount_in = cls.liquidity_math.get_delta_amount_1_unsigned(
                    sqrt_price_current_x64, sqrt_price_next_x64, liquidity, True
                )
            if not (reached_target and not is_base_input):
                amount_out = cls.liquidity_math.get_delta_amount_0_unsigned(
                    sqrt_price_current_x64, sqrt_price_next_x64, liquidity, False
                )

        # cap the output amount to not exceed the remaining output amount
        if not is_base_input and amount_out > amount_remaining:
            amount_out = amount_remaining

        if is_base_input and sqrt_price_next_x64 != sqrt_price_target_x64:
            # target not reached, the remainder of the input is taken as fee
            fee_amount = amount_remaining - amount_in
        else:
            fee_amount = cls.full_math.mul_div_ceil(amount_in, fee_rate, fee_complement, UINT_64_MAX)

        return SwapComputation(
            sqrt_price_next_x64=sqrt_price_next_x64,
            amount_in=amount_in,
            amount_out=amount_out,
            fee_amount=fee_amount,
        )
