import logging
from collections import deque
from dataclasses import asdict
from typing import Sequence

from clmm_quoter.exceptions import (
    InsufficientLiquidityError,
    SwapLoopLimitError,
    SwapValidationError,
    TickArrayMismatch,
    TickArrayQueueExhausted,
)
from clmm_quoter.types.clmm import StepComputation, SwapComputeResult, SwapState

from .bitmap_extension import TickArrayBitmapExtension
from .math import ClmmMath
from .math.shared import checked_add, checked_sub
from .pool import NEXT_TICK_ARRAY_COUNT, PoolSnapshot
from .tick_array import TickArrayState

root_logger = logging.getLogger("clmm_quoter")
logger = root_logger.getChild("clmm").getChild("swap")

MAX_SWAP_STEPS = 2 * NEXT_TICK_ARRAY_COUNT


def _check_sqrt_price_limit(zero_for_one: bool, sqrt_price_limit_x64: int, sqrt_price_x64: int):
    if zero_for_one:
        if sqrt_price_limit_x64 < ClmmMath.MIN_SQRT_PRICE_X64:
            raise SwapValidationError("sqrt_price_limit too low", sqrt_price_limit_x64=sqrt_price_limit_x64)
        if sqrt_price_limit_x64 >= sqrt_price_x64:
            raise SwapValidationError(
                "sqrt_price_limit above current price, cannot swap 0 for 1",
                sqrt_price_limit_x64=sqrt_price_limit_x64,
                sqrt_price_x64=sqrt_price_x64,
            )
    else:
        if sqrt_price_limit_x64 > ClmmMath.MAX_SQRT_PRICE_X64:
            raise SwapValidationError("sqrt_price_limit too high", sqrt_price_limit_x64=sqrt_price_limit_x64)
        if sqrt_price_limit_x64 <= sqrt_price_x64:
            raise SwapValidationError(
                "sqrt_price_limit below current price, cannot swap 1 for 0",
                sqrt_price_limit_x64=sqrt_price_limit_x64,
                sqrt_price_x64=sqrt_price_x64,
            )


def _pop_tick_array(tick_array_queue: deque[TickArrayState], expected_start_index: int) -> TickArrayState:
    if not tick_array_queue:
        raise TickArrayQueueExhausted(
            f"Swap requires tick array {expected_start_index}, which was not provided",
            start_tick_index=expected_start_index,
        )

    tick_array = tick_array_queue.popleft()
    if tick_array.start_tick_index != expected_start_index:
        raise TickArrayMismatch(
            f"Tick array start {tick_array.start_tick_index} does not match expected start {expected_start_index}",
            expected=expected_start_index,
            actual=tick_array.start_tick_index,
        )
    return tick_array


def swap_compute(  # pylint: disable=too-many-locals,too-many-branches,too-many-statements
    zero_for_one: bool,
    is_base_input: bool,
    is_pool_current_tick_array: bool,
    trade_fee_rate: int,
    amount_specified: int,
    current_valid_tick_array_start_index: int,
    sqrt_price_limit_x64: int | None,
    pool: PoolSnapshot,
    extension: TickArrayBitmapExtension | None,
    tick_arrays: Sequence[TickArrayState],
    max_swap_steps: int | None = None,
) -> SwapComputeResult:
    """
    Simulates a swap against a pool snapshot, walking tick by tick until the amount is filled or the price limit
    is reached.

    :param zero_for_one:
        Which direction to swap tokens.  If True, sell Token 0 and buy Token 1.  If False, sell Token 1
        and buy Token 0.
    :param is_base_input:
        If True, ``amount_specified`` is the exact input amount.  If False, it is the exact output amount.
    :param is_pool_current_tick_array:
        Whether the first tick array contains the pool's current tick.  When it does not, the swap starts at the
        first initialized tick of that array.
    :param trade_fee_rate: fee rate of the pool's amm config, in hundredths of a bip
    :param amount_specified: raw token amount to swap
    :param current_valid_tick_array_start_index: start index the first tick array must have
    :param sqrt_price_limit_x64:
        The minimum/maximum price to allow for the swap.  None or 0 defaults to just inside the extreme price in
        the swap direction.
    :param pool: pool snapshot
    :param extension: bitmap extension snapshot of the pool
    :param tick_arrays: tick arrays in the order the swap visits them.  Not modified
    :param max_swap_steps: maximum number of swap steps.  Defaults to MAX_SWAP_STEPS
    :return: SwapComputeResult
    """
    if amount_specified == 0:
        raise SwapValidationError("Cannot swap 0 tokens")

    if not sqrt_price_limit_x64:
        sqrt_price_limit_x64 = ClmmMath.MIN_SQRT_PRICE_X64 + 1 if zero_for_one else ClmmMath.MAX_SQRT_PRICE_X64 - 1
    _check_sqrt_price_limit(zero_for_one, sqrt_price_limit_x64, pool.sqrt_price_x64)

    if max_swap_steps is None:
        max_swap_steps = MAX_SWAP_STEPS

    logger.debug(f"------ Swapping Token {0 if zero_for_one else 1} for Token {1 if zero_for_one else 0} -------")
    logger.debug(f"Swap Amount: {amount_specified}\t Exact Input: {is_base_input}")
    logger.debug(f"Price Limit: {sqrt_price_limit_x64}\t Current Price: {pool.sqrt_price_x64}")

    state = SwapState(
        amount_specified_remaining=amount_specified,
        amount_calculated=0,
        sqrt_price_x64=pool.sqrt_price_x64,
        tick=pool.tick_current,
        liquidity=pool.liquidity,
    )

    tick_array_queue = deque(tick_arrays)
    tick_array_current = _pop_tick_array(tick_array_queue, current_valid_tick_array_start_index)
    tick_array_start_indexes = [tick_array_current.start_tick_index]
    tick_match_current_tick_array = is_pool_current_tick_array
    step_count = 0

    while (
        state.amount_specified_remaining != 0
        and state.sqrt_price_x64 != sqrt_price_limit_x64
        and ClmmMath.MIN_TICK < state.tick < ClmmMath.MAX_TICK
    ):
        if step_count >= max_swap_steps:
            raise SwapLoopLimitError(
                f"Swap exceeded {max_swap_steps} steps with {state.amount_specified_remaining} remaining",
                max_swap_steps=max_swap_steps,
                amount_remaining=state.amount_specified_remaining,
            )

        logger.debug("----- Starting Swap Step -----")
        logger.debug(f"Active Liquidity: {state.liquidity}")
        logger.debug(f"Current Tick: {state.tick}")

        step = StepComputation(sqrt_price_start_x64=state.sqrt_price_x64)

        next_initialized_tick = tick_array_current.next_initialized_tick(state.tick, pool.tick_spacing, zero_for_one)
        if next_initialized_tick is None and not tick_match_current_tick_array:
            tick_match_current_tick_array = True
            next_initialized_tick = tick_array_current.first_initialized_tick(zero_for_one)

        if next_initialized_tick is None:
            next_start_index = pool.next_initialized_tick_array_start_index(
                extension, tick_array_current.start_tick_index, zero_for_one
            )
            if next_start_index is None:
                raise InsufficientLiquidityError(
                    f"No initialized tick arrays remain past {tick_array_current.start_tick_index}",
                    start_tick_index=tick_array_current.start_tick_index,
                    amount_remaining=state.amount_specified_remaining,
                )
            logger.debug(f"--- Moving to Tick Array {next_start_index} ---")
            tick_array_current = _pop_tick_array(tick_array_queue, next_start_index)
            tick_array_start_indexes.append(next_start_index)
            next_initialized_tick = tick_array_current.first_initialized_tick(zero_for_one)

        step.tick_next = max(next_initialized_tick.tick, ClmmMath.MIN_TICK)
        step.tick_next = min(step.tick_next, ClmmMath.MAX_TICK)
        step.initialized = next_initialized_tick.is_initialized
        step.sqrt_price_next_x64 = ClmmMath.tick_math.get_sqrt_price_at_tick(step.tick_next)

        if zero_for_one:
            use_limit = step.sqrt_price_next_x64 < sqrt_price_limit_x64
        else:
            use_limit = step.sqrt_price_next_x64 > sqrt_price_limit_x64
        sqrt_price_target_x64 = sqrt_price_limit_x64 if use_limit else step.sqrt_price_next_x64

        computed_swap_step = ClmmMath.compute_swap_step(
            state.sqrt_price_x64,
            sqrt_price_target_x64,
            state.liquidity,
            state.amount_specified_remaining,
            trade_fee_rate,
            is_base_input,
            zero_for_one,
        )
        logger.debug("--- Computed Swap Step --- ")
        logger.debug(f"sqrt_price_current: {state.sqrt_price_x64}")
        logger.debug(f"sqrt_price_target: {sqrt_price_target_x64}")
        for name, val in asdict(computed_swap_step).items():
            logger.debug(f"{name}: {val}")

        state.sqrt_price_x64 = computed_swap_step.sqrt_price_next_x64
        step.amount_in = computed_swap_step.amount_in
        step.amount_out = computed_swap_step.amount_out
        step.fee_amount = computed_swap_step.fee_amount

        if is_base_input:
            state.amount_specified_remaining = checked_sub(
                state.amount_specified_remaining, checked_add(step.amount_in, step.fee_amount)
            )
            state.amount_calculated = checked_add(state.amount_calculated, step.amount_out)
        else:
            state.amount_specified_remaining = checked_sub(state.amount_specified_remaining, step.amount_out)
            state.amount_calculated = checked_add(
                state.amount_calculated, checked_add(step.amount_in, step.fee_amount)
            )
        logger.debug(
            f"Amount Specified Remaining: {state.amount_specified_remaining}"
            f"\t Amount Calculated: {state.amount_calculated}"
        )

        if state.sqrt_price_x64 == step.sqrt_price_next_x64:
            logger.debug(f"--- Price reached tick {step.tick_next}, crossing ---")
            if step.initialized:
                liquidity_net = next_initialized_tick.liquidity_net
                if zero_for_one:
                    liquidity_net = -liquidity_net
                state.liquidity = ClmmMath.liquidity_math.add_delta(state.liquidity, liquidity_net)

            state.tick = step.tick_next - 1 if zero_for_one else step.tick_next

        elif state.sqrt_price_x64 != step.sqrt_price_start_x64:
            state.tick = ClmmMath.tick_math.get_tick_at_sqrt_price(state.sqrt_price_x64)

        step_count += 1

    if state.amount_specified_remaining != 0 and state.sqrt_price_x64 != sqrt_price_limit_x64:
        raise InsufficientLiquidityError(
            f"Swap left the tick range at tick {state.tick} with {state.amount_specified_remaining} remaining",
            tick=state.tick,
            amount_remaining=state.amount_specified_remaining,
        )

    logger.debug("--- Swap Complete ---")
    logger.debug(f"Amount Calculated: {state.amount_calculated}\t Tick Arrays: {tick_array_start_indexes}")

    return SwapComputeResult(
        amount_calculated=state.amount_calculated,
        tick_array_start_indexes=tick_array_start_indexes,
        state=state,
        step_count=step_count,
    )


def simulate_swap(
    amount_specified: int,
    sqrt_price_limit_x64: int | None,
    zero_for_one: bool,
    is_base_input: bool,
    trade_fee_rate: int,
    pool: PoolSnapshot,
    extension: TickArrayBitmapExtension | None,
    tick_arrays: Sequence[TickArrayState],
    max_swap_steps: int | None = None,
) -> SwapComputeResult:
    """Locates the first initialized tick array of the pool, and runs ``swap_compute`` from it"""
    is_pool_current_tick_array, current_valid_tick_array_start_index = pool.get_first_initialized_tick_array(
        extension, zero_for_one
    )

    return swap_compute(
        zero_for_one=zero_for_one,
        is_base_input=is_base_input,
        is_pool_current_tick_array=is_pool_current_tick_array,
        trade_fee_rate=trade_fee_rate,
        amount_specified=amount_specified,
        current_valid_tick_array_start_index=current_valid_tick_array_start_index,
        sqrt_price_limit_x64=sqrt_price_limit_x64,
        pool=pool,
        extension=extension,
        tick_arrays=tick_arrays,
        max_swap_steps=max_swap_steps,
    )


def get_output_amount_and_remaining_accounts(
    input_amount: int,
    sqrt_price_limit_x64: int | None,
    zero_for_one: bool,
    is_base_input: bool,
    trade_fee_rate: int,
    pool: PoolSnapshot,
    extension: TickArrayBitmapExtension | None,
    tick_arrays: Sequence[TickArrayState],
    max_swap_steps: int | None = None,
) -> tuple[int, list[int]]:
    """
    Computes the other side of a swap, and the start indexes of every tick array the swap touches.

    :return: (amount_calculated, tick array start indexes in visit order)
    """
    result = simulate_swap(
        input_amount,
        sqrt_price_limit_x64,
        zero_for_one,
        is_base_input,
        trade_fee_rate,
        pool,
        extension,
        tick_arrays,
        max_swap_steps,
    )
    return result.amount_calculated, result.tick_array_start_indexes
