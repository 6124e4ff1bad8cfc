import pytest

from clmm_quoter.clmm.math import ClmmMath
from clmm_quoter.exceptions import LiquidityMathRevert, MaxTokenOverflow, SqrtPriceMathRevert

from ..utils import Q64


class TestAddDelta:
    def test_add_delta(self):
        assert ClmmMath.liquidity_math.add_delta(1, 0) == 1
        assert ClmmMath.liquidity_math.add_delta(1, -1) == 0
        assert ClmmMath.liquidity_math.add_delta(1, 1) == 2

    def test_underflow_raises(self):
        with pytest.raises(LiquidityMathRevert):
            ClmmMath.liquidity_math.add_delta(0, -1)

        with pytest.raises(LiquidityMathRevert):
            ClmmMath.liquidity_math.add_delta(3, -4)

    def test_overflow_raises(self):
        with pytest.raises(LiquidityMathRevert):
            ClmmMath.liquidity_math.add_delta(ClmmMath.UINT_128_MAX, 1)


class TestGetDeltaAmount0:
    def test_returns_0_if_prices_are_equal(self):
        assert ClmmMath.liquidity_math.get_delta_amount_0_unsigned(Q64, Q64, 10**18, True) == 0

    def test_returns_0_if_liquidity_is_0(self):
        assert ClmmMath.liquidity_math.get_delta_amount_0_unsigned(Q64, 2 * Q64, 0, True) == 0

    def test_amount_between_price_one_and_four(self):
        # sqrt prices 1 and 2: L * (1 - 1 / 2)
        assert ClmmMath.liquidity_math.get_delta_amount_0_unsigned(Q64, 2 * Q64, 1_000_000, True) == 500_000
        assert ClmmMath.liquidity_math.get_delta_amount_0_unsigned(Q64, 2 * Q64, 1_000_000, False) == 500_000

    def test_price_order_does_not_matter(self):
        forward = ClmmMath.liquidity_math.get_delta_amount_0_unsigned(Q64, Q64 + Q64 // 7, 10**12, True)
        backward = ClmmMath.liquidity_math.get_delta_amount_0_unsigned(Q64 + Q64 // 7, Q64, 10**12, True)
        assert forward == backward

    def test_round_up_differs_by_at_most_one(self):
        round_up = ClmmMath.liquidity_math.get_delta_amount_0_unsigned(Q64, Q64 + Q64 // 7, 10**12, True)
        round_down = ClmmMath.liquidity_math.get_delta_amount_0_unsigned(Q64, Q64 + Q64 // 7, 10**12, False)
        assert round_up - round_down == 1

    def test_zero_price_raises(self):
        with pytest.raises(SqrtPriceMathRevert):
            ClmmMath.liquidity_math.get_delta_amount_0_unsigned(0, Q64, 1, True)

    def test_overflow_raises(self):
        with pytest.raises(MaxTokenOverflow):
            ClmmMath.liquidity_math.get_delta_amount_0_unsigned(
                ClmmMath.MIN_SQRT_PRICE_X64, ClmmMath.MAX_SQRT_PRICE_X64, Q64, False
            )


class TestGetDeltaAmount1:
    def test_returns_0_if_prices_are_equal(self):
        assert ClmmMath.liquidity_math.get_delta_amount_1_unsigned(Q64, Q64, 10**18, True) == 0

    def test_rounding(self):
        assert ClmmMath.liquidity_math.get_delta_amount_1_unsigned(Q64, 2 * Q64 + 1, 1_000_000, False) == 1_000_000
        assert ClmmMath.liquidity_math.get_delta_amount_1_unsigned(Q64, 2 * Q64 + 1, 1_000_000, True) == 1_000_001

    def test_overflow_raises(self):
        with pytest.raises(MaxTokenOverflow):
            ClmmMath.liquidity_math.get_delta_amount_1_unsigned(Q64, 4 * Q64, Q64, False)
