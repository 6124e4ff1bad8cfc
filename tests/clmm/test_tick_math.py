import random

import pytest

from clmm_quoter.clmm.math import ClmmMath
from clmm_quoter.exceptions import TickMathRevert

from ..utils import Q64

MIN_TICK = ClmmMath.MIN_TICK
MAX_TICK = ClmmMath.MAX_TICK


def test_check_tick():
    ClmmMath.check_tick(MIN_TICK)
    ClmmMath.check_tick(0)
    ClmmMath.check_tick(MAX_TICK)

    for tick in [MIN_TICK - 1, MAX_TICK + 1]:
        with pytest.raises(TickMathRevert):
            ClmmMath.check_tick(tick)


class TestGetSqrtPriceAtTick:
    def test_throws_for_too_low(self):
        with pytest.raises(TickMathRevert):
            ClmmMath.tick_math.get_sqrt_price_at_tick(MIN_TICK - 1)

    def test_throws_for_too_high(self):
        with pytest.raises(TickMathRevert):
            ClmmMath.tick_math.get_sqrt_price_at_tick(MAX_TICK + 1)

    def test_min_tick(self):
        assert ClmmMath.tick_math.get_sqrt_price_at_tick(MIN_TICK) == ClmmMath.MIN_SQRT_PRICE_X64

    def test_max_tick(self):
        assert ClmmMath.tick_math.get_sqrt_price_at_tick(MAX_TICK) == ClmmMath.MAX_SQRT_PRICE_X64

    def test_tick_zero_is_price_one(self):
        assert ClmmMath.tick_math.get_sqrt_price_at_tick(0) == Q64

    @pytest.mark.parametrize("tick", [-100_000, -500, -1, 1, 500, 100_000])
    def test_matches_float_approximation(self, tick):
        sqrt_price = ClmmMath.tick_math.get_sqrt_price_at_tick(tick)
        assert sqrt_price / Q64 == pytest.approx(1.0001 ** (tick / 2), rel=1e-9)

    def test_strictly_increasing(self):
        ticks = [MIN_TICK, MIN_TICK + 1, -50_000, -1, 0, 1, 50_000, MAX_TICK - 1, MAX_TICK]
        prices = [ClmmMath.tick_math.get_sqrt_price_at_tick(tick) for tick in ticks]
        assert prices == sorted(prices)
        assert len(set(prices)) == len(prices)


class TestGetTickAtSqrtPrice:
    def test_throws_for_too_low(self):
        with pytest.raises(TickMathRevert):
            ClmmMath.tick_math.get_tick_at_sqrt_price(ClmmMath.MIN_SQRT_PRICE_X64 - 1)

    def test_throws_for_max_sqrt_price(self):
        with pytest.raises(TickMathRevert):
            ClmmMath.tick_math.get_tick_at_sqrt_price(ClmmMath.MAX_SQRT_PRICE_X64)

    def test_min_sqrt_price(self):
        assert ClmmMath.tick_math.get_tick_at_sqrt_price(ClmmMath.MIN_SQRT_PRICE_X64) == MIN_TICK

    def test_max_sqrt_price_minus_one(self):
        assert ClmmMath.tick_math.get_tick_at_sqrt_price(ClmmMath.MAX_SQRT_PRICE_X64 - 1) == MAX_TICK - 1

    def test_price_one(self):
        assert ClmmMath.tick_math.get_tick_at_sqrt_price(Q64) == 0
        assert ClmmMath.tick_math.get_tick_at_sqrt_price(Q64 - 1) == -1

    def test_round_trip_extremes(self):
        for tick in [MIN_TICK, MIN_TICK + 1, -1, 0, 1, MAX_TICK - 1]:
            sqrt_price = ClmmMath.tick_math.get_sqrt_price_at_tick(tick)
            assert ClmmMath.tick_math.get_tick_at_sqrt_price(sqrt_price) == tick

    def test_round_trip_random_ticks(self):
        rng = random.Random(1234)
        for tick in [rng.randint(MIN_TICK, MAX_TICK - 1) for _ in range(500)]:
            sqrt_price = ClmmMath.tick_math.get_sqrt_price_at_tick(tick)
            assert ClmmMath.tick_math.get_tick_at_sqrt_price(sqrt_price) == tick

    def test_price_between_ticks_rounds_down(self):
        rng = random.Random(4321)
        for tick in [rng.randint(MIN_TICK, MAX_TICK - 2) for _ in range(200)]:
            next_sqrt_price = ClmmMath.tick_math.get_sqrt_price_at_tick(tick + 1)
            assert ClmmMath.tick_math.get_tick_at_sqrt_price(next_sqrt_price - 1) == tick
