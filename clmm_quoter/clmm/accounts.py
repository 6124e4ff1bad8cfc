"""
Program derived addresses of the concentrated liquidity program, and the account layout of a swap.
Every address is derived from explicit seeds and an explicit program id.
"""
from typing import Sequence

from solders.pubkey import Pubkey

from clmm_quoter.exceptions import InputTokenNotInPool
from clmm_quoter.tokens.transfer_fee import MintInfo
from clmm_quoter.types.clmm import SwapLegs
from clmm_quoter.utils import normalize_address, to_pubkey

from .pool import PoolSnapshot

RAYDIUM_CLMM_PROGRAM_ID = "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK"

AMM_CONFIG_SEED = b"amm_config"
POOL_SEED = b"pool"
OBSERVATION_SEED = b"observation"
TICK_ARRAY_SEED = b"tick_array"
POOL_TICK_ARRAY_BITMAP_SEED = b"pool_tick_array_bitmap_extension"


def _find_program_address(seeds: list[bytes], program_id: str | Pubkey) -> str:
    pda, _bump = Pubkey.find_program_address(seeds, to_pubkey(program_id))
    return str(pda)


def get_tick_array_address(program_id: str | Pubkey, pool_id: str | Pubkey, start_tick_index: int) -> str:
    """
    Address of the tick array account starting at ``start_tick_index``.  The index is encoded as a big-endian i32

    :param program_id: concentrated liquidity program
    :param pool_id: pool address
    :param start_tick_index: tick array start index
    :return: base58 address
    """
    seeds = [TICK_ARRAY_SEED, bytes(to_pubkey(pool_id)), start_tick_index.to_bytes(4, "big", signed=True)]
    return _find_program_address(seeds, program_id)


def get_remaining_tick_array_keys(
    program_id: str | Pubkey, pool_id: str | Pubkey, tick_array_start_indexes: Sequence[int]
) -> list[str]:
    """Tick array addresses in the order the swap visits them"""
    return [get_tick_array_address(program_id, pool_id, start_index) for start_index in tick_array_start_indexes]


def get_tick_array_bitmap_extension_address(program_id: str | Pubkey, pool_id: str | Pubkey) -> str:
    return _find_program_address([POOL_TICK_ARRAY_BITMAP_SEED, bytes(to_pubkey(pool_id))], program_id)


def get_pool_address(
    program_id: str | Pubkey, amm_config: str | Pubkey, mint_0: str | Pubkey, mint_1: str | Pubkey
) -> str:
    seeds = [POOL_SEED, bytes(to_pubkey(amm_config)), bytes(to_pubkey(mint_0)), bytes(to_pubkey(mint_1))]
    return _find_program_address(seeds, program_id)


def get_amm_config_address(program_id: str | Pubkey, index: int) -> str:
    return _find_program_address([AMM_CONFIG_SEED, index.to_bytes(2, "big")], program_id)


def get_observation_address(program_id: str | Pubkey, pool_id: str | Pubkey) -> str:
    return _find_program_address([OBSERVATION_SEED, bytes(to_pubkey(pool_id))], program_id)


def resolve_swap_legs(pool: PoolSnapshot, input_mint: str, mint_0: MintInfo, mint_1: MintInfo) -> SwapLegs:
    """
    Orders the pool's vaults, mints and token programs by swap direction

    :param pool: pool snapshot
    :param input_mint: mint the user is selling
    :param mint_0: mint info of the pool's token_0
    :param mint_1: mint info of the pool's token_1
    :return: SwapLegs
    """
    input_mint = normalize_address(input_mint)

    if input_mint == pool.token_mint_0:
        return SwapLegs(
            zero_for_one=True,
            input_vault=pool.token_vault_0,
            output_vault=pool.token_vault_1,
            input_vault_mint=pool.token_mint_0,
            output_vault_mint=pool.token_mint_1,
            input_token_program=mint_0.token_program,
            output_token_program=mint_1.token_program,
        )
    if input_mint == pool.token_mint_1:
        return SwapLegs(
            zero_for_one=False,
            input_vault=pool.token_vault_1,
            output_vault=pool.token_vault_0,
            input_vault_mint=pool.token_mint_1,
            output_vault_mint=pool.token_mint_0,
            input_token_program=mint_1.token_program,
            output_token_program=mint_0.token_program,
        )

    raise InputTokenNotInPool(
        f"Input mint {input_mint} does not match pool mints {pool.token_mint_0} and {pool.token_mint_1}",
        input_mint=input_mint,
    )
