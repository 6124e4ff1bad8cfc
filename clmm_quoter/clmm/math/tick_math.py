from clmm_quoter.exceptions import TickMathRevert

from .shared import MAX_SQRT_PRICE_X64, MAX_TICK, MIN_SQRT_PRICE_X64, MIN_TICK, UINT_128_MAX, check_tick

BIT_PRECISION = 16

# sqrt(1.0001 ** -(2 ** i)) as Q64.64, for i in 1..18.  Bit 0 seeds the ratio
_TICK_RATIO_CONSTANTS = (
    (0x2, 0xFFF97272373D4000),
    (0x4, 0xFFF2E50F5F657000),
    (0x8, 0xFFE5CACA7E10F000),
    (0x10, 0xFFCB9843D60F7000),
    (0x20, 0xFF973B41FA98E800),
    (0x40, 0xFF2EA16466C9B000),
    (0x80, 0xFE5DEE046A9A3800),
    (0x100, 0xFCBE86C7900BB000),
    (0x200, 0xF987A7253AC65800),
    (0x400, 0xF3392B0822BB6000),
    (0x800, 0xE7159475A2CAF000),
    (0x1000, 0xD097F3BDFD2F2000),
    (0x2000, 0xA9F746462D9F8000),
    (0x4000, 0x70D869A156F31C00),
    (0x8000, 0x31BE135F97ED3200),
    (0x10000, 0x9AA508B5B85A500),
    (0x20000, 0x5D6AF8DEDC582C),
    (0x40000, 0x2216E584F5FA),
)

LOG_B_2_X32 = 59543866431248
TICK_LOW_ERROR_X64 = 184467440737095516
TICK_HIGH_ERROR_X64 = 15793534762490258745


class TickMathModule:
    """
    Conversions between ticks and Q64.64 square root prices, matching the integer results of the on-chain
    program.  Each tick is a 0.01% price increment: ``price = 1.0001 ** tick``
    """

    MAX_TICK = MAX_TICK
    MIN_TICK = MIN_TICK
    MAX_SQRT_PRICE_X64 = MAX_SQRT_PRICE_X64
    MIN_SQRT_PRICE_X64 = MIN_SQRT_PRICE_X64

    @classmethod
    def get_sqrt_price_at_tick(cls, tick: int) -> int:
        """
        Calculates ``sqrt(1.0001 ** tick) * 2 ** 64``

        :param tick: tick index between MIN_TICK and MAX_TICK
        :return: Q64.64 square root price
        """
        check_tick(tick)
        abs_tick = abs(tick)

        ratio = 0xFFFCB933BD6FB800 if abs_tick & 0x1 else 1 << 64
        for mask, multiplier in _TICK_RATIO_CONSTANTS:
            if abs_tick & mask:
                ratio = (ratio * multiplier) >> 64

        # Constants encode negative ticks, positive ticks take the reciprocal
        if tick > 0:
            ratio = UINT_128_MAX // ratio

        return ratio

    @classmethod
    def get_tick_at_sqrt_price(cls, sqrt_price_x64: int) -> int:
        """
        Calculates the greatest tick whose square root price is less than or equal to ``sqrt_price_x64``.

        The log2 of the price is computed with 16 bits of fractional precision, converted into a log base
        sqrt(1.0001), and the two candidate ticks bracketing the error bound are disambiguated by recomputing
        their prices.

        :param sqrt_price_x64: Q64.64 square root price in [MIN_SQRT_PRICE_X64, MAX_SQRT_PRICE_X64)
        :return: tick index
        """
        if not cls.MIN_SQRT_PRICE_X64 <= sqrt_price_x64 < cls.MAX_SQRT_PRICE_X64:
            raise TickMathRevert(
                f"Sqrt price outside of min/max bounds.  Sqrt price: {sqrt_price_x64}",
                sqrt_price_x64=sqrt_price_x64,
            )

        msb = sqrt_price_x64.bit_length() - 1
        log2p_integer_x32 = (msb - 64) << 32

        if msb >= 64:
            r = sqrt_price_x64 >> (msb - 63)
        else:
            r = sqrt_price_x64 << (63 - msb)

        bit = 0x8000000000000000
        precision = 0
        log2p_fraction_x64 = 0
        while bit > 0 and precision < BIT_PRECISION:
            r *= r
            is_r_more_than_two = r >> 127
            r >>= 63 + is_r_more_than_two
            log2p_fraction_x64 += bit * is_r_more_than_two
            bit >>= 1
            precision += 1

        log2p_x32 = log2p_integer_x32 + (log2p_fraction_x64 >> 32)
        log_sqrt_10001_x64 = log2p_x32 * LOG_B_2_X32

        tick_low = (log_sqrt_10001_x64 - TICK_LOW_ERROR_X64) >> 64
        tick_high = (log_sqrt_10001_x64 + TICK_HIGH_ERROR_X64) >> 64

        if tick_low == tick_high:
            return tick_low
        if cls.get_sqrt_price_at_tick(tick_high) <= sqrt_price_x64:
            return tick_high
        return tick_low
