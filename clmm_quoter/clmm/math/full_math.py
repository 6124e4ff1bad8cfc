from clmm_quoter.exceptions import FullMathRevert

from .shared import UINT_256_MAX


class FullMathModule:
    """Math Module for computing (a * b / denominator) with U256 behavior"""

    @classmethod
    def mul_div_floor(cls, numerator_1: int, numerator_2: int, denominator: int, max_value: int = UINT_256_MAX) -> int:
        """
        Computes the result of (numerator_1 * numerator_2) / denominator, rounded down.

        :param numerator_1:
        :param numerator_2:
        :param denominator:
        :param max_value: width the result must fit in.  u64 call sites pass UINT_64_MAX
        :return:
        """
        if denominator == 0:
            raise FullMathRevert("Division By Zero")

        return_val = (numerator_1 * numerator_2) // denominator
        if return_val > max_value:
            raise FullMathRevert(f"Result {return_val} Overflowed Max Value of: {max_value}")

        return return_val

    @classmethod
    def mul_div_ceil(cls, numerator_1: int, numerator_2: int, denominator: int, max_value: int = UINT_256_MAX) -> int:
        """
        Computes the result of (numerator_1 * numerator_2) / denominator, rounded up.
        """
        if denominator == 0:
            raise FullMathRevert("Division By Zero")

        return_val = (numerator_1 * numerator_2 + denominator - 1) // denominator
        if return_val > max_value:
            raise FullMathRevert(f"Result {return_val} Overflowed Max Value of: {max_value}")

        return return_val

    @classmethod
    def div_rounding_up(cls, numerator: int, denominator: int) -> int:
        """Unsigned division, rounding up when there is a remainder"""
        if denominator == 0:
            raise FullMathRevert("Division By Zero")

        quotient, remainder = divmod(numerator, denominator)
        return quotient + (1 if remainder > 0 else 0)
