import logging

from pydantic import BaseModel, field_validator

from clmm_quoter.exceptions import InsufficientLiquidityError, MissingBitmapExtension
from clmm_quoter.utils import int_to_words, normalize_address, words_to_int

from . import tick_array_bitmap
from .bitmap_extension import TickArrayBitmapExtension
from .math.shared import MAX_TICK, MIN_TICK, TICK_ARRAY_BITMAP_SIZE
from .tick_array import TickArrayState
from .tick_array_bitmap import TICK_ARRAY_BITMAP_WORDS, max_tick_in_tickarray_bitmap

root_logger = logging.getLogger("clmm_quoter")
logger = root_logger.getChild("clmm").getChild("pool")

NEXT_TICK_ARRAY_COUNT = 5


class AmmConfig(BaseModel):
    """Fee configuration shared by every pool created with the same config account"""

    index: int
    """
        Index used to derive the config account address.
    """
    trade_fee_rate: int
    """
        Swap fee charged on the input amount, denominated in hundredths of a bip (1_000_000 = 100%).
    """
    protocol_fee_rate: int = 0
    fund_fee_rate: int = 0
    tick_spacing: int


class PoolSnapshot(BaseModel):
    """Decoded pool account at a point in time.  ``sqrt_price_x64`` and ``tick_current`` are always consistent"""

    amm_config: str
    token_mint_0: str
    token_mint_1: str
    token_vault_0: str
    token_vault_1: str
    observation_key: str
    mint_decimals_0: int
    mint_decimals_1: int
    tick_spacing: int
    liquidity: int
    """
        Active liquidity at the current price.  Only changes while crossing initialized ticks.
    """
    sqrt_price_x64: int
    """
        Square root of the token_1 / token_0 exchange rate of raw token amounts, as a Q64.64 fixed point number.
    """
    tick_current: int
    tick_array_bitmap: list[int] = [0] * TICK_ARRAY_BITMAP_WORDS
    """
        Initialized flags of the 1024 tick arrays closest to tick 0, as sixteen little-endian u64 words.
    """

    @field_validator("amm_config", "token_mint_0", "token_mint_1", "token_vault_0", "token_vault_1", "observation_key")
    @classmethod
    def check_address(cls, address: str) -> str:
        return normalize_address(address)

    @field_validator("tick_array_bitmap")
    @classmethod
    def check_bitmap_words(cls, words: list[int]) -> list[int]:
        if len(words) != TICK_ARRAY_BITMAP_WORDS:
            raise ValueError(f"Pool bitmap requires {TICK_ARRAY_BITMAP_WORDS} words, received {len(words)}")
        return words

    @property
    def bitmap(self) -> int:
        """The pool bitmap packed into a single 1024 bit integer"""
        return words_to_int(self.tick_array_bitmap)

    def tick_array_start_index_range(self) -> tuple[int, int]:
        """
        Range of tick array start indexes tracked by the pool bitmap.  Clamped to the arrays holding MIN_TICK
        and MAX_TICK for tick spacings where the bitmap covers the full tick range
        """
        max_tick_boundary = max_tick_in_tickarray_bitmap(self.tick_spacing)
        min_tick_boundary = -max_tick_boundary

        if max_tick_boundary > MAX_TICK:
            max_tick_boundary = TickArrayState.get_array_start_index(MAX_TICK, self.tick_spacing)
            max_tick_boundary += TickArrayState.tick_count(self.tick_spacing)
        if min_tick_boundary < MIN_TICK:
            min_tick_boundary = TickArrayState.get_array_start_index(MIN_TICK, self.tick_spacing)

        return min_tick_boundary, max_tick_boundary

    def is_overflow_default_tickarray_bitmap(self, tick_indexes: list[int]) -> bool:
        """Whether any of the ticks belongs to a tick array tracked by the bitmap extension"""
        min_tick_array_start_index_boundary, max_tick_array_start_index_boundary = self.tick_array_start_index_range()
        for tick_index in tick_indexes:
            tick_array_start_index = TickArrayState.get_array_start_index(tick_index, self.tick_spacing)
            if (
                tick_array_start_index >= max_tick_array_start_index_boundary
                or tick_array_start_index < min_tick_array_start_index_boundary
            ):
                return True
        return False

    def flip_tick_array_bit(self, extension: TickArrayBitmapExtension | None, tick_array_start_index: int):
        """
        Toggles the initialized flag of a tick array in the pool bitmap, or in the extension for start indexes
        beyond the pool bitmap
        """
        if self.is_overflow_default_tickarray_bitmap([tick_array_start_index]):
            if extension is None:
                raise MissingBitmapExtension(
                    f"Tick array {tick_array_start_index} is tracked by the bitmap extension",
                    start_tick_index=tick_array_start_index,
                )
            extension.flip_tick_array_bit(tick_array_start_index, self.tick_spacing)
            return

        compressed = tick_array_start_index // TickArrayState.tick_count(self.tick_spacing) + TICK_ARRAY_BITMAP_SIZE
        bitmap = self.bitmap ^ (1 << abs(compressed))
        self.tick_array_bitmap = int_to_words(bitmap, TICK_ARRAY_BITMAP_WORDS)

    def get_first_initialized_tick_array(
        self, extension: TickArrayBitmapExtension | None, zero_for_one: bool
    ) -> tuple[bool, int]:
        """
        Finds the tick array the swap starts in.

        :param extension: bitmap extension of the pool
        :param zero_for_one: direction of the swap
        :return: (whether the array contains the pool's current tick, start index of the array)
        """
        current_start_index = TickArrayState.get_array_start_index(self.tick_current, self.tick_spacing)

        if self.is_overflow_default_tickarray_bitmap([self.tick_current]):
            if extension is None:
                raise MissingBitmapExtension(
                    f"Current tick {self.tick_current} is tracked by the bitmap extension", tick=self.tick_current
                )
            is_initialized, start_index = extension.check_tick_array_is_initialized(
                current_start_index, self.tick_spacing
            )
        else:
            is_initialized, start_index = tick_array_bitmap.check_current_tick_array_is_initialized(
                self.bitmap, self.tick_current, self.tick_spacing
            )

        if is_initialized:
            return True, start_index

        next_start_index = self.next_initialized_tick_array_start_index(extension, current_start_index, zero_for_one)
        if next_start_index is None:
            raise InsufficientLiquidityError(
                f"No initialized tick arrays {'below' if zero_for_one else 'above'} tick {self.tick_current}",
                tick=self.tick_current,
                zero_for_one=zero_for_one,
            )
        return False, next_start_index

    def next_initialized_tick_array_start_index(
        self, extension: TickArrayBitmapExtension | None, last_tick_array_start_index: int, zero_for_one: bool
    ) -> int | None:
        """
        Searches the pool bitmap, then the extension, for the next initialized tick array.

        :param extension: bitmap extension of the pool
        :param last_tick_array_start_index: start index of the last tick array visited
        :param zero_for_one: direction of the swap
        :return: start index of the next initialized tick array, or None if the search leaves the tick range
        """
        last_tick_array_start_index = TickArrayState.get_array_start_index(
            last_tick_array_start_index, self.tick_spacing
        )

        while True:
            is_found, start_index = tick_array_bitmap.next_initialized_tick_array_start_index(
                self.bitmap, last_tick_array_start_index, self.tick_spacing, zero_for_one
            )
            if is_found:
                return start_index
            last_tick_array_start_index = start_index

            if extension is None:
                if max_tick_in_tickarray_bitmap(self.tick_spacing) >= MAX_TICK:
                    # pool bitmap already spans the full tick range
                    return None
                raise MissingBitmapExtension(
                    f"Searching past tick array {last_tick_array_start_index} requires the bitmap extension",
                    start_tick_index=last_tick_array_start_index,
                )

            is_found, start_index = extension.next_initialized_tick_array_from_one_bitmap(
                last_tick_array_start_index, self.tick_spacing, zero_for_one
            )
            if is_found:
                return start_index
            last_tick_array_start_index = start_index

            if last_tick_array_start_index < MIN_TICK or last_tick_array_start_index > MAX_TICK:
                return None


def get_tick_array_start_indexes(
    pool: PoolSnapshot,
    extension: TickArrayBitmapExtension | None,
    zero_for_one: bool,
    next_count: int = NEXT_TICK_ARRAY_COUNT,
) -> list[int]:
    """
    Start indexes of the tick arrays a swap in the given direction may touch: the first initialized array,
    followed by up to ``next_count`` initialized arrays after it.  These are the accounts to pre-fetch before
    computing a quote.

    :param pool:
    :param extension:
    :param zero_for_one:
    :param next_count: number of arrays to look ahead.  Defaults to 5
    :return: ordered list of tick array start indexes
    """
    _, start_index = pool.get_first_initialized_tick_array(extension, zero_for_one)
    start_indexes = [start_index]

    for _ in range(next_count):
        next_start_index = pool.next_initialized_tick_array_start_index(extension, start_index, zero_for_one)
        if next_start_index is None:
            break
        start_indexes.append(next_start_index)
        start_index = next_start_index

    logger.debug(f"Tick arrays to fetch for {'zero_for_one' if zero_for_one else 'one_for_zero'}: {start_indexes}")
    return start_indexes
