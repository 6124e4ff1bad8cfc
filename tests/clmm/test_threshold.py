import pytest

from clmm_quoter.clmm.math.shared import UINT_64_MAX
from clmm_quoter.clmm.threshold import amount_with_slippage, get_other_amount_threshold
from clmm_quoter.exceptions import ClmmArithmeticError
from clmm_quoter.tokens.transfer_fee import MintInfo, TransferFee, TransferFeeConfig


class TestAmountWithSlippage:
    def test_slippage_in_both_directions(self):
        assert amount_with_slippage(1000, 50, up_towards=False) == 995
        assert amount_with_slippage(1000, 50, up_towards=True) == 1005

    def test_rounds_down(self):
        assert amount_with_slippage(999, 1, up_towards=False) == 998
        assert amount_with_slippage(999, 1, up_towards=True) == 999

    def test_zero_slippage(self):
        assert amount_with_slippage(12345, 0, up_towards=False) == 12345
        assert amount_with_slippage(12345, 0, up_towards=True) == 12345

    def test_full_slippage(self):
        assert amount_with_slippage(1000, 10_000, up_towards=False) == 0
        assert amount_with_slippage(1000, 10_000, up_towards=True) == 2000

    def test_monotonic_in_slippage(self):
        minimums = [amount_with_slippage(123_456_789, bps, up_towards=False) for bps in range(0, 10_001, 250)]
        maximums = [amount_with_slippage(123_456_789, bps, up_towards=True) for bps in range(0, 10_001, 250)]

        assert minimums == sorted(minimums, reverse=True)
        assert maximums == sorted(maximums)
        assert all(minimum <= 123_456_789 <= maximum for minimum, maximum in zip(minimums, maximums))

    def test_slippage_above_one_hundred_percent_raises(self):
        with pytest.raises(ClmmArithmeticError):
            amount_with_slippage(1000, 10_001, up_towards=False)

    def test_overflow_raises(self):
        with pytest.raises(ClmmArithmeticError):
            amount_with_slippage(UINT_64_MAX, 1, up_towards=True)


class TestOtherAmountThreshold:
    @pytest.fixture
    def input_mint(self, random_address):
        fee = TransferFee(epoch=0, maximum_fee=10**9, transfer_fee_basis_points=100)
        return MintInfo(
            address=random_address(),
            decimals=6,
            transfer_fee_config=TransferFeeConfig(older_transfer_fee=fee, newer_transfer_fee=fee),
        )

    def test_exact_input_ignores_transfer_fee(self, input_mint):
        assert get_other_amount_threshold(1000, 50, True, input_mint, 0) == 995

    def test_exact_output_adds_inverse_transfer_fee(self, input_mint):
        # 1005 must arrive, so 1016 is sent and 11 is withheld
        assert get_other_amount_threshold(1000, 50, False, input_mint, 0) == 1016

    def test_exact_output_without_transfer_fee(self, random_address):
        mint = MintInfo(address=random_address(), decimals=6)

        assert get_other_amount_threshold(1000, 50, False, mint, 0) == 1005
