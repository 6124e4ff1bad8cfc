from clmm_quoter.exceptions import ClmmArithmeticError
from clmm_quoter.tokens.transfer_fee import MintInfo, get_transfer_inverse_fee

from .math.shared import UINT_64_MAX, checked_add

TEN_THOUSAND = 10_000


def amount_with_slippage(amount: int, slippage_bps: int, up_towards: bool) -> int:
    """
    Applies a slippage tolerance to an amount.  Rounds down in both directions

    :param amount: quoted amount
    :param slippage_bps: tolerance in basis points
    :param up_towards: If True, scale the amount up (maximum input).  If False, scale it down (minimum output)
    :return: amount with slippage, as a u64
    """
    if up_towards:
        scaled = amount * (slippage_bps + TEN_THOUSAND) // TEN_THOUSAND
    else:
        if slippage_bps > TEN_THOUSAND:
            raise ClmmArithmeticError(
                f"Slippage of {slippage_bps} bps exceeds 100%", slippage_bps=slippage_bps, amount=amount
            )
        scaled = amount * (TEN_THOUSAND - slippage_bps) // TEN_THOUSAND

    if scaled > UINT_64_MAX:
        raise ClmmArithmeticError(f"Amount with slippage {scaled} does not fit in a u64", amount=amount)
    return scaled


def get_other_amount_threshold(
    amount_calculated: int, slippage_bps: int, is_base_input: bool, input_mint: MintInfo, epoch: int
) -> int:
    """
    Limit enforced on the side of the swap that was not specified.  Exact input swaps receive a minimum output,
    exact output swaps a maximum input that includes the input mint's transfer fee.

    :param amount_calculated: output amount of an exact input swap, or input amount of an exact output swap
    :param slippage_bps: tolerance in basis points
    :param is_base_input: whether the swap is exact input
    :param input_mint: mint sent into the pool
    :param epoch: current epoch
    :return: other_amount_threshold
    """
    if is_base_input:
        return amount_with_slippage(amount_calculated, slippage_bps, False)

    other_amount_threshold = amount_with_slippage(amount_calculated, slippage_bps, True)
    transfer_fee = get_transfer_inverse_fee(input_mint, epoch, other_amount_threshold)
    return checked_add(other_amount_threshold, transfer_fee)
