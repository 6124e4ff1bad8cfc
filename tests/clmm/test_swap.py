import pytest

from clmm_quoter.clmm.math import ClmmMath
from clmm_quoter.clmm.swap import (
    MAX_SWAP_STEPS,
    get_output_amount_and_remaining_accounts,
    simulate_swap,
    swap_compute,
)
from clmm_quoter.exceptions import (
    InsufficientLiquidityError,
    SwapLoopLimitError,
    SwapValidationError,
    TickArrayMismatch,
    TickArrayQueueExhausted,
)

from ..utils import Q64, zero_for_one_output


def _amount_to_reach_tick(tick: int, liquidity: int = 1_000_000) -> int:
    return ClmmMath.liquidity_math.get_delta_amount_0_unsigned(
        ClmmMath.tick_math.get_sqrt_price_at_tick(tick), Q64, liquidity, True
    )


class TestSwapWithinRange:
    def test_exact_input_without_crossing(self, single_array_pool, debug_logger):
        _, pool, extension, tick_array = single_array_pool()

        result = simulate_swap(1000, None, True, True, 0, pool, extension, [tick_array])

        assert result.amount_calculated == zero_for_one_output(1_000_000, 1000)
        assert result.amount_calculated == 999
        assert result.tick_array_start_indexes == [-600]
        assert result.state.liquidity == 1_000_000
        assert result.state.amount_specified_remaining == 0
        assert -600 < result.state.tick < 0
        assert result.step_count == 1

    def test_exact_output_without_crossing(self, single_array_pool):
        _, pool, extension, tick_array = single_array_pool()

        result = simulate_swap(500, None, True, False, 0, pool, extension, [tick_array])

        assert result.amount_calculated == 501
        assert result.state.amount_specified_remaining == 0
        assert result.tick_array_start_indexes == [-600]

    def test_swap_fee_reduces_output(self, single_array_pool):
        _, pool, extension, tick_array = single_array_pool()

        result = simulate_swap(1000, None, True, True, 2500, pool, extension, [tick_array])

        assert result.amount_calculated == 996

    def test_swap_starting_in_current_tick_array(self, initialize_pool, build_tick_array, random_address):
        pool_id = random_address()
        pool = initialize_pool(tick_current=-300, initialized_tick_arrays=[-600])
        tick_array = build_tick_array(pool_id, -600, 10, {-500: -100_000, -200: 50_000})

        result = simulate_swap(100, None, True, True, 0, pool, None, [tick_array])

        expected = zero_for_one_output(1_000_000, 100, ClmmMath.tick_math.get_sqrt_price_at_tick(-300))
        assert result.amount_calculated == expected
        assert result.tick_array_start_indexes == [-600]
        assert result.state.liquidity == 1_000_000

    def test_input_tick_arrays_are_not_modified(self, single_array_pool):
        _, pool, extension, tick_array = single_array_pool()
        before = tick_array.model_copy(deep=True)

        simulate_swap(_amount_to_reach_tick(-600), None, True, True, 0, pool, extension, [tick_array])

        assert tick_array == before
        assert pool.liquidity == 1_000_000


class TestSwapPriceDirection:
    @pytest.mark.parametrize("zero_for_one", [True, False])
    @pytest.mark.parametrize("is_base_input", [True, False])
    @pytest.mark.parametrize("amount", [1, 100, 999, 2000])
    def test_price_moves_with_swap_direction(
        self, initialize_pool, build_tick_array, random_address, zero_for_one, is_base_input, amount
    ):
        pool_id = random_address()
        pool = initialize_pool(tick_current=-300, initialized_tick_arrays=[-600])
        tick_array = build_tick_array(pool_id, -600, 10, {-500: -100_000, -200: 50_000})

        result = simulate_swap(amount, None, zero_for_one, is_base_input, 0, pool, None, [tick_array])

        if zero_for_one:
            assert result.state.sqrt_price_x64 <= pool.sqrt_price_x64
            assert result.state.tick <= pool.tick_current
        else:
            assert result.state.sqrt_price_x64 >= pool.sqrt_price_x64
            assert result.state.tick >= pool.tick_current

        assert result.state.sqrt_price_x64 != pool.sqrt_price_x64
        assert result.state.amount_specified_remaining == 0


class TestSwapCrossingTicks:
    def test_exact_input_reaching_initialized_tick(self, single_array_pool, debug_logger):
        _, pool, extension, tick_array = single_array_pool()
        amount = _amount_to_reach_tick(-600)

        result = simulate_swap(amount, None, True, True, 0, pool, extension, [tick_array])

        assert result.state.liquidity == 1_200_000
        assert result.state.tick == -601
        assert result.state.sqrt_price_x64 == ClmmMath.tick_math.get_sqrt_price_at_tick(-600)
        assert result.tick_array_start_indexes == [-600]
        assert result.amount_calculated == ClmmMath.liquidity_math.get_delta_amount_1_unsigned(
            ClmmMath.tick_math.get_sqrt_price_at_tick(-600), Q64, 1_000_000, False
        )

    def test_swap_moves_into_next_tick_array(self, single_array_pool, build_tick_array):
        pool_id, pool, extension, tick_array = single_array_pool()
        pool.flip_tick_array_bit(extension, -1200)
        next_tick_array = build_tick_array(pool_id, -1200, 10, {-1200: 300_000})

        result = simulate_swap(
            _amount_to_reach_tick(-600) + 1000, None, True, True, 0, pool, extension, [tick_array, next_tick_array]
        )

        assert result.tick_array_start_indexes == [-600, -1200]
        assert result.state.liquidity == 1_200_000
        assert -1200 < result.state.tick < -600
        assert result.step_count == 2

    def test_crossing_upward_adds_liquidity_net(self, initialize_pool, build_tick_array, random_address):
        pool_id = random_address()
        pool = initialize_pool(tick_current=-300, initialized_tick_arrays=[-600])
        tick_array = build_tick_array(pool_id, -600, 10, {-200: 50_000})
        amount = ClmmMath.liquidity_math.get_delta_amount_1_unsigned(
            ClmmMath.tick_math.get_sqrt_price_at_tick(-300),
            ClmmMath.tick_math.get_sqrt_price_at_tick(-200),
            1_000_000,
            True,
        )

        result = simulate_swap(amount, None, False, True, 0, pool, None, [tick_array])

        assert result.state.liquidity == 1_050_000
        assert result.state.tick == -200

    def test_step_cap(self, single_array_pool):
        liquidity_nets = {tick: 0 for tick in range(-590, 0, 10)}
        _, pool, extension, tick_array = single_array_pool(liquidity_nets=liquidity_nets)

        with pytest.raises(SwapLoopLimitError):
            simulate_swap(10**12, None, True, True, 0, pool, extension, [tick_array])

    def test_step_cap_reached_exactly(self, single_array_pool):
        liquidity_nets = {tick: 0 for tick in range(-590, 0, 10)}
        _, pool, extension, tick_array = single_array_pool(liquidity_nets=liquidity_nets)
        sqrt_price_limit_x64 = ClmmMath.tick_math.get_sqrt_price_at_tick(-100)

        result = simulate_swap(10**12, sqrt_price_limit_x64, True, True, 0, pool, extension, [tick_array])

        assert result.step_count == MAX_SWAP_STEPS
        assert result.state.sqrt_price_x64 == sqrt_price_limit_x64
        assert result.state.amount_specified_remaining > 0

    def test_step_cap_is_configurable(self, single_array_pool):
        liquidity_nets = {tick: 0 for tick in range(-590, 0, 10)}
        _, pool, extension, tick_array = single_array_pool(liquidity_nets=liquidity_nets)

        with pytest.raises(SwapLoopLimitError):
            simulate_swap(10**12, None, True, True, 0, pool, extension, [tick_array], max_swap_steps=3)


class TestSwapFailures:
    def test_zero_amount(self, single_array_pool):
        _, pool, extension, tick_array = single_array_pool()

        with pytest.raises(SwapValidationError):
            simulate_swap(0, None, True, True, 0, pool, extension, [tick_array])

    def test_price_limit_on_wrong_side(self, single_array_pool):
        _, pool, extension, tick_array = single_array_pool()

        with pytest.raises(SwapValidationError):
            simulate_swap(1000, Q64 + 1, True, True, 0, pool, extension, [tick_array])

        with pytest.raises(SwapValidationError):
            simulate_swap(1000, ClmmMath.MIN_SQRT_PRICE_X64 - 1, True, True, 0, pool, extension, [tick_array])

    def test_tick_array_mismatch(self, single_array_pool, build_tick_array):
        pool_id, pool, extension, _ = single_array_pool()
        wrong_tick_array = build_tick_array(pool_id, -1200, 10, {-1200: 1})

        with pytest.raises(TickArrayMismatch):
            simulate_swap(1000, None, True, True, 0, pool, extension, [wrong_tick_array])

    def test_missing_tick_array(self, single_array_pool):
        _, pool, extension, tick_array = single_array_pool()
        pool.flip_tick_array_bit(extension, -1200)

        with pytest.raises(TickArrayQueueExhausted):
            simulate_swap(_amount_to_reach_tick(-600) + 1000, None, True, True, 0, pool, extension, [tick_array])

        with pytest.raises(TickArrayQueueExhausted):
            simulate_swap(1000, None, True, True, 0, pool, extension, [])

    def test_insufficient_liquidity(self, single_array_pool):
        _, pool, extension, tick_array = single_array_pool()

        with pytest.raises(InsufficientLiquidityError):
            simulate_swap(_amount_to_reach_tick(-600) + 1000, None, True, True, 0, pool, extension, [tick_array])


class TestSwapCompute:
    def test_explicit_start_array(self, single_array_pool):
        _, pool, extension, tick_array = single_array_pool()

        result = swap_compute(
            zero_for_one=True,
            is_base_input=True,
            is_pool_current_tick_array=False,
            trade_fee_rate=0,
            amount_specified=1000,
            current_valid_tick_array_start_index=-600,
            sqrt_price_limit_x64=None,
            pool=pool,
            extension=extension,
            tick_arrays=[tick_array],
        )

        assert result.amount_calculated == 999

    def test_output_amount_and_remaining_accounts(self, single_array_pool):
        _, pool, extension, tick_array = single_array_pool()

        amount, start_indexes = get_output_amount_and_remaining_accounts(
            1000, None, True, True, 0, pool, extension, [tick_array]
        )

        assert amount == 999
        assert start_indexes == [-600]
