"""
Token-2022 transfer fee math.

Mints with the transfer fee extension withhold part of every transfer.  The fee is charged on the amount sent, so
a swap's input amount is reduced before it reaches the pool, and an exact output swap must send enough extra to
cover the fee on its maximum input.
"""
import logging

from pydantic import BaseModel, field_validator

from clmm_quoter.clmm.math.full_math import FullMathModule
from clmm_quoter.clmm.math.shared import UINT_64_MAX
from clmm_quoter.exceptions import TransferFeeError
from clmm_quoter.utils import normalize_address

root_logger = logging.getLogger("clmm_quoter")
logger = root_logger.getChild("tokens").getChild("transfer_fee")

MAX_FEE_BASIS_POINTS = 10_000
ONE_IN_BASIS_POINTS = MAX_FEE_BASIS_POINTS

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"


class TransferFee(BaseModel):
    """Transfer fee parameters active from ``epoch`` onwards"""

    epoch: int = 0
    maximum_fee: int = 0
    """
        Cap on the fee withheld from a single transfer, in raw token units.
    """
    transfer_fee_basis_points: int = 0

    def calculate_fee(self, pre_fee_amount: int) -> int:
        """
        Fee withheld when sending ``pre_fee_amount``.  Rounds up, and never exceeds ``maximum_fee``

        :param pre_fee_amount: amount sent
        :return: fee amount
        """
        if self.transfer_fee_basis_points == 0 or pre_fee_amount == 0:
            return 0

        raw_fee = FullMathModule.div_rounding_up(pre_fee_amount * self.transfer_fee_basis_points, ONE_IN_BASIS_POINTS)
        fee = min(raw_fee, self.maximum_fee)
        if fee > UINT_64_MAX:
            raise TransferFeeError(f"Transfer fee {fee} does not fit in a u64", amount=pre_fee_amount)
        return fee

    def calculate_pre_fee_amount(self, post_fee_amount: int) -> int:
        """
        Amount that must be sent so that ``post_fee_amount`` arrives after the fee is withheld

        :param post_fee_amount: amount that should arrive
        :return: amount to send
        """
        if self.transfer_fee_basis_points == 0:
            return post_fee_amount
        if post_fee_amount == 0:
            return 0
        if self.transfer_fee_basis_points == MAX_FEE_BASIS_POINTS:
            return self._checked_u64(self.maximum_fee + post_fee_amount)

        raw_pre_fee_amount = FullMathModule.div_rounding_up(
            post_fee_amount * ONE_IN_BASIS_POINTS, ONE_IN_BASIS_POINTS - self.transfer_fee_basis_points
        )
        if raw_pre_fee_amount - post_fee_amount >= self.maximum_fee:
            return self._checked_u64(post_fee_amount + self.maximum_fee)
        return self._checked_u64(raw_pre_fee_amount)

    def calculate_inverse_fee(self, post_fee_amount: int) -> int:
        """Fee withheld from the amount that must be sent for ``post_fee_amount`` to arrive"""
        return self.calculate_fee(self.calculate_pre_fee_amount(post_fee_amount))

    @staticmethod
    def _checked_u64(amount: int) -> int:
        if amount > UINT_64_MAX:
            raise TransferFeeError(f"Pre-fee amount {amount} does not fit in a u64", amount=amount)
        return amount


class TransferFeeConfig(BaseModel):
    """Transfer fee extension of a mint.  The newer fee takes over once its epoch is reached"""

    older_transfer_fee: TransferFee
    newer_transfer_fee: TransferFee

    def get_epoch_fee(self, epoch: int) -> TransferFee:
        if epoch >= self.newer_transfer_fee.epoch:
            return self.newer_transfer_fee
        return self.older_transfer_fee


class MintInfo(BaseModel):
    """Decoded mint account fields relevant to swaps"""

    address: str
    decimals: int
    token_program: str = TOKEN_PROGRAM_ID
    transfer_fee_config: TransferFeeConfig | None = None

    @field_validator("address", "token_program")
    @classmethod
    def check_address(cls, address: str) -> str:
        return normalize_address(address)


def get_transfer_fee(mint: MintInfo, epoch: int, pre_fee_amount: int) -> int:
    """
    Fee withheld when sending ``pre_fee_amount`` of ``mint`` during ``epoch``.  Mints without the transfer fee
    extension charge nothing, and mints charging 100% always withhold ``maximum_fee``

    :param mint:
    :param epoch: current epoch
    :param pre_fee_amount: amount sent
    :return: fee amount
    """
    if mint.transfer_fee_config is None:
        return 0

    epoch_fee = mint.transfer_fee_config.get_epoch_fee(epoch)
    if epoch_fee.transfer_fee_basis_points == MAX_FEE_BASIS_POINTS:
        return epoch_fee.maximum_fee
    return epoch_fee.calculate_fee(pre_fee_amount)


def get_transfer_inverse_fee(mint: MintInfo, epoch: int, post_fee_amount: int) -> int:
    """
    Fee withheld from the amount that must be sent so that ``post_fee_amount`` of ``mint`` arrives

    :param mint:
    :param epoch: current epoch
    :param post_fee_amount: amount that should arrive
    :return: fee amount
    """
    if mint.transfer_fee_config is None:
        return 0

    epoch_fee = mint.transfer_fee_config.get_epoch_fee(epoch)
    if epoch_fee.transfer_fee_basis_points == MAX_FEE_BASIS_POINTS:
        return epoch_fee.maximum_fee

    fee = epoch_fee.calculate_inverse_fee(post_fee_amount)
    logger.debug(f"Inverse transfer fee for {mint.address}: {fee} on {post_fee_amount}")
    return fee
