from clmm_quoter.exceptions import FullMathRevert, SqrtPriceMathRevert

from .full_math import FullMathModule
from .shared import RESOLUTION, UINT_128_MAX


class SqrtPriceMathModule:
    """Computes the square root price reached after adding or removing an amount of token 0 or token 1"""

    @classmethod
    def get_next_sqrt_price_from_amount_0_rounding_up(
        cls, sqrt_price_x64: int, liquidity: int, amount: int, add: bool
    ) -> int:
        """
        Gets the next sqrt price given a delta of token_0, always rounding up so the price never moves
        past the point the exact amount would reach.

        ``liquidity * sqrt_price / (liquidity +- amount * sqrt_price)``

        :param sqrt_price_x64: starting Q64.64 square root price
        :param liquidity: usable liquidity
        :param amount: amount of token_0 to add or remove
        :param add: whether to add or remove the amount of token_0
        :return: next Q64.64 square root price
        """
        if amount == 0:
            return sqrt_price_x64

        numerator_1 = liquidity << RESOLUTION
        product = amount * sqrt_price_x64

        try:
            if add:
                denominator = numerator_1 + product
                next_price = FullMathModule.mul_div_ceil(numerator_1, sqrt_price_x64, denominator)
            else:
                denominator = numerator_1 - product
                if denominator <= 0:
                    raise SqrtPriceMathRevert(
                        "Removing token_0 exceeds the reserves of the price range",
                        amount=amount,
                        liquidity=liquidity,
                    )
                next_price = FullMathModule.mul_div_ceil(numerator_1, sqrt_price_x64, denominator)
        except FullMathRevert as exc:
            raise SqrtPriceMathRevert(str(exc)) from exc

        if next_price > UINT_128_MAX:
            raise SqrtPriceMathRevert(f"Sqrt price {next_price} does not fit in a u128")
        return next_price

    @classmethod
    def get_next_sqrt_price_from_amount_1_rounding_down(
        cls, sqrt_price_x64: int, liquidity: int, amount: int, add: bool
    ) -> int:
        """
        Gets the next sqrt price given a delta of token_1, always rounding down.

        ``sqrt_price +- amount / liquidity``
        """
        if add:
            quotient = (amount << RESOLUTION) // liquidity
            next_price = sqrt_price_x64 + quotient
            if next_price > UINT_128_MAX:
                raise SqrtPriceMathRevert(f"Sqrt price {next_price} does not fit in a u128")
            return next_price

        quotient = FullMathModule.div_rounding_up(amount << RESOLUTION, liquidity)
        if sqrt_price_x64 < quotient:
            raise SqrtPriceMathRevert(
                "Removing token_1 exceeds the reserves of the price range",
                amount=amount,
                liquidity=liquidity,
            )
        return sqrt_price_x64 - quotient

    @classmethod
    def get_next_sqrt_price_from_input(
        cls, sqrt_price_x64: int, liquidity: int, amount_in: int, zero_for_one: bool
    ) -> int:
        """
        Gets the next sqrt price given an input amount of token_0 or token_1.

        :param sqrt_price_x64: starting Q64.64 square root price
        :param liquidity: usable liquidity
        :param amount_in: amount of token being swapped in
        :param zero_for_one: whether the amount in is token_0 or token_1
        :return:
        """
        if sqrt_price_x64 <= 0:
            raise SqrtPriceMathRevert("sqrt_price must be greater than zero")
        if liquidity <= 0:
            raise SqrtPriceMathRevert("liquidity must be greater than zero")

        if zero_for_one:
            return cls.get_next_sqrt_price_from_amount_0_rounding_up(sqrt_price_x64, liquidity, amount_in, True)
        return cls.get_next_sqrt_price_from_amount_1_rounding_down(sqrt_price_x64, liquidity, amount_in, True)

    @classmethod
    def get_next_sqrt_price_from_output(
        cls, sqrt_price_x64: int, liquidity: int, amount_out: int, zero_for_one: bool
    ) -> int:
        """
        Gets the next sqrt price given an output amount of token_0 or token_1.

        :param sqrt_price_x64: starting Q64.64 square root price
        :param liquidity: usable liquidity
        :param amount_out: amount of token being swapped out
        :param zero_for_one: whether the amount out is token_1 or token_0
        :return:
        """
        if sqrt_price_x64 <= 0:
            raise SqrtPriceMathRevert("sqrt_price must be greater than zero")
        if liquidity <= 0:
            raise SqrtPriceMathRevert("liquidity must be greater than zero")

        if zero_for_one:
            return cls.get_next_sqrt_price_from_amount_1_rounding_down(sqrt_price_x64, liquidity, amount_out, False)
        return cls.get_next_sqrt_price_from_amount_0_rounding_up(sqrt_price_x64, liquidity, amount_out, False)
