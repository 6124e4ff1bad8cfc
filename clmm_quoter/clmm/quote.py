import logging
from pathlib import Path
from typing import Sequence

from pydantic import BaseModel, field_validator

from clmm_quoter.exceptions import SwapValidationError
from clmm_quoter.tokens.transfer_fee import MintInfo, get_transfer_fee
from clmm_quoter.types.clmm import SwapQuoteResult
from clmm_quoter.utils import normalize_address

from .accounts import get_remaining_tick_array_keys, resolve_swap_legs
from .bitmap_extension import TickArrayBitmapExtension
from .math import ClmmMath
from .math.shared import checked_sub
from .pool import AmmConfig, PoolSnapshot, get_tick_array_start_indexes
from .swap import simulate_swap
from .threshold import get_other_amount_threshold
from .tick_array import TickArrayState

root_logger = logging.getLogger("clmm_quoter")
logger = root_logger.getChild("clmm").getChild("quote")


class QuoteSnapshot(BaseModel):
    """Every account a quote is computed from, captured at the same point in time"""

    pool_id: str
    pool: PoolSnapshot
    amm_config: AmmConfig
    bitmap_extension: TickArrayBitmapExtension | None = None
    tick_arrays: list[TickArrayState] = []
    """
        Pre-fetched tick arrays, in any order.  Arrays for both swap directions may be included.
    """
    mint_0: MintInfo
    mint_1: MintInfo
    epoch: int = 0

    @field_validator("pool_id")
    @classmethod
    def check_pool_id(cls, pool_id: str) -> str:
        return normalize_address(pool_id)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "QuoteSnapshot":
        """Loads a snapshot from a JSON file"""
        return cls.model_validate_json(Path(path).read_text())

    def ordered_tick_arrays(self, zero_for_one: bool) -> list[TickArrayState]:
        """
        Tick arrays in the order a swap in the given direction visits them.  Stops at the first array missing from
        the snapshot
        """
        arrays_by_start = {tick_array.start_tick_index: tick_array for tick_array in self.tick_arrays}
        ordered = []
        for start_index in get_tick_array_start_indexes(self.pool, self.bitmap_extension, zero_for_one):
            if start_index not in arrays_by_start:
                logger.info(f"Tick array {start_index} missing from snapshot, using {len(ordered)} arrays")
                break
            ordered.append(arrays_by_start[start_index])
        return ordered


def calculate_swap_change(  # pylint: disable=too-many-locals
    program_id: str,
    pool_id: str,
    pool: PoolSnapshot,
    amm_config: AmmConfig,
    extension: TickArrayBitmapExtension | None,
    tick_arrays: Sequence[TickArrayState],
    input_mint: str,
    mint_0: MintInfo,
    mint_1: MintInfo,
    amount: int,
    limit_price: float | None,
    base_in: bool,
    slippage_bps: int,
    epoch: int,
    max_swap_steps: int | None = None,
) -> SwapQuoteResult:
    """
    Quotes a swap against a pool snapshot.

    :param program_id: concentrated liquidity program
    :param pool_id: pool address
    :param pool: pool snapshot
    :param amm_config: amm config of the pool
    :param extension: bitmap extension of the pool
    :param tick_arrays: tick arrays in the order the swap visits them
    :param input_mint: mint the user is selling
    :param mint_0: mint info of the pool's token_0
    :param mint_1: mint info of the pool's token_1
    :param amount: exact input amount if ``base_in``, otherwise exact output amount
    :param limit_price: optional decimal adjusted price at which the swap stops
    :param base_in: whether ``amount`` is the input amount
    :param slippage_bps: tolerance applied to the threshold, in basis points
    :param epoch: current epoch, used for token-2022 transfer fees
    :param max_swap_steps: maximum number of swap steps
    :return: SwapQuoteResult
    """
    legs = resolve_swap_legs(pool, input_mint, mint_0, mint_1)
    input_mint_info = mint_0 if legs.zero_for_one else mint_1

    transfer_fee = get_transfer_fee(input_mint_info, epoch, amount) if base_in else 0
    amount_specified = checked_sub(amount, transfer_fee)

    sqrt_price_limit_x64 = None
    if limit_price is not None:
        sqrt_price_limit_x64 = ClmmMath.price_to_sqrt_price_x64(limit_price, pool.mint_decimals_0, pool.mint_decimals_1)
        if sqrt_price_limit_x64 == 0:
            raise SwapValidationError(f"Invalid limit price: {limit_price}", limit_price=limit_price)

    logger.info(
        f"Quoting {'exact input' if base_in else 'exact output'} swap of {amount} {legs.input_vault_mint} "
        f"on pool {pool_id}"
    )
    result = simulate_swap(
        amount_specified,
        sqrt_price_limit_x64,
        legs.zero_for_one,
        base_in,
        amm_config.trade_fee_rate,
        pool,
        extension,
        tick_arrays,
        max_swap_steps,
    )

    other_amount_threshold = get_other_amount_threshold(
        result.amount_calculated, slippage_bps, base_in, input_mint_info, epoch
    )

    return SwapQuoteResult(
        pool_id=normalize_address(pool_id),
        pool_amm_config=pool.amm_config,
        pool_observation=pool.observation_key,
        zero_for_one=legs.zero_for_one,
        is_base_input=base_in,
        amount=amount,
        amount_specified=amount_specified,
        amount_calculated=result.amount_calculated,
        other_amount_threshold=other_amount_threshold,
        sqrt_price_limit_x64=sqrt_price_limit_x64,
        input_vault=legs.input_vault,
        output_vault=legs.output_vault,
        input_vault_mint=legs.input_vault_mint,
        output_vault_mint=legs.output_vault_mint,
        input_token_program=legs.input_token_program,
        output_token_program=legs.output_token_program,
        tick_array_start_indexes=result.tick_array_start_indexes,
        remaining_tick_array_keys=get_remaining_tick_array_keys(
            program_id, pool_id, result.tick_array_start_indexes
        ),
    )


def calculate_swap_change_from_snapshot(
    program_id: str,
    snapshot: QuoteSnapshot,
    input_mint: str,
    amount: int,
    base_in: bool = True,
    slippage_bps: int = 0,
    limit_price: float | None = None,
    epoch: int | None = None,
    max_swap_steps: int | None = None,
) -> SwapQuoteResult:
    """Quotes a swap from a QuoteSnapshot, ordering its tick arrays for the swap direction"""
    zero_for_one = resolve_swap_legs(snapshot.pool, input_mint, snapshot.mint_0, snapshot.mint_1).zero_for_one

    return calculate_swap_change(
        program_id=program_id,
        pool_id=snapshot.pool_id,
        pool=snapshot.pool,
        amm_config=snapshot.amm_config,
        extension=snapshot.bitmap_extension,
        tick_arrays=snapshot.ordered_tick_arrays(zero_for_one),
        input_mint=input_mint,
        mint_0=snapshot.mint_0,
        mint_1=snapshot.mint_1,
        amount=amount,
        limit_price=limit_price,
        base_in=base_in,
        slippage_bps=slippage_bps,
        epoch=snapshot.epoch if epoch is None else epoch,
        max_swap_steps=max_swap_steps,
    )
