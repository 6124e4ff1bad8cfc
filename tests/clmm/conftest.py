import pytest

from clmm_quoter.clmm.bitmap_extension import TickArrayBitmapExtension
from clmm_quoter.clmm.math import ClmmMath
from clmm_quoter.clmm.pool import AmmConfig, PoolSnapshot
from clmm_quoter.clmm.quote import QuoteSnapshot
from clmm_quoter.clmm.tick_array import TickArrayState
from clmm_quoter.tokens.transfer_fee import MintInfo


@pytest.fixture(name="initialize_pool")
def fixture_initialize_pool(random_address):
    def _initialize_pool(
        tick_current: int = 0,
        liquidity: int = 1_000_000,
        tick_spacing: int = 10,
        initialized_tick_arrays: list[int] | None = None,
        extension: TickArrayBitmapExtension | None = None,
        **kwargs,
    ) -> PoolSnapshot:
        pool = PoolSnapshot(
            amm_config=random_address(),
            token_mint_0=kwargs.pop("token_mint_0", random_address()),
            token_mint_1=kwargs.pop("token_mint_1", random_address()),
            token_vault_0=random_address(),
            token_vault_1=random_address(),
            observation_key=random_address(),
            mint_decimals_0=kwargs.pop("mint_decimals_0", 6),
            mint_decimals_1=kwargs.pop("mint_decimals_1", 6),
            tick_spacing=tick_spacing,
            liquidity=liquidity,
            sqrt_price_x64=ClmmMath.tick_math.get_sqrt_price_at_tick(tick_current),
            tick_current=tick_current,
            **kwargs,
        )
        for start_index in initialized_tick_arrays or []:
            pool.flip_tick_array_bit(extension, start_index)
        return pool

    return _initialize_pool


@pytest.fixture(name="build_tick_array")
def fixture_build_tick_array():
    def _build_tick_array(
        pool_id: str, start_tick_index: int, tick_spacing: int, liquidity_nets: dict[int, int]
    ) -> TickArrayState:
        tick_array = TickArrayState.empty(pool_id, start_tick_index, tick_spacing)
        for tick, liquidity_net in liquidity_nets.items():
            tick_state = tick_array.get_tick_state(tick, tick_spacing)
            tick_state.liquidity_net = liquidity_net
            tick_state.liquidity_gross = abs(liquidity_net) or 1
        tick_array.initialized_tick_count = len(liquidity_nets)
        return tick_array

    return _build_tick_array


@pytest.fixture(name="single_array_pool")
def fixture_single_array_pool(random_address, initialize_pool, build_tick_array):
    """
    Pool at price 1.0 (tick 0) with 1_000_000 liquidity, tick spacing 10 and no swap fee.  The only initialized
    tick array is [-600, 0), holding the tick ``tick`` with a liquidity_net of -200_000
    """

    def _single_array_pool(tick: int = -600, liquidity_nets: dict[int, int] | None = None):
        pool_id = random_address()
        extension = TickArrayBitmapExtension.empty(pool_id)
        pool = initialize_pool(initialized_tick_arrays=[-600], extension=extension)
        tick_array = build_tick_array(pool_id, -600, 10, liquidity_nets or {tick: -200_000})
        return pool_id, pool, extension, tick_array

    return _single_array_pool


@pytest.fixture(name="quote_snapshot")
def fixture_quote_snapshot(single_array_pool):
    def _quote_snapshot(
        mint_0_transfer_fee=None,
        trade_fee_rate: int = 0,
    ) -> QuoteSnapshot:
        pool_id, pool, extension, tick_array = single_array_pool()
        return QuoteSnapshot(
            pool_id=pool_id,
            pool=pool,
            amm_config=AmmConfig(index=0, trade_fee_rate=trade_fee_rate, tick_spacing=10),
            bitmap_extension=extension,
            tick_arrays=[tick_array],
            mint_0=MintInfo(address=pool.token_mint_0, decimals=6, transfer_fee_config=mint_0_transfer_fee),
            mint_1=MintInfo(address=pool.token_mint_1, decimals=6),
            epoch=0,
        )

    return _quote_snapshot
