from pydantic import BaseModel, field_validator

from clmm_quoter.exceptions import InvalidTickArrayBoundary
from clmm_quoter.utils import int_to_words, normalize_address, words_to_int

from .math.shared import EXTENSION_TICKARRAY_BITMAP_SIZE, MAX_TICK, MIN_TICK, TICK_ARRAY_BITMAP_SIZE
from .tick_array import TickArrayState
from .tick_array_bitmap import (
    get_bitmap_tick_boundary,
    least_significant_bit,
    max_tick_in_tickarray_bitmap,
    most_significant_bit,
)

BANK_WORDS = 8
BANK_BITS = TICK_ARRAY_BITMAP_SIZE


class TickArrayBitmapExtension(BaseModel):
    """
    Initialized tick array flags for start indexes beyond the range of the pool's own bitmap.

    Each side holds 14 banks of 512 bits.  Positive bank ``n`` covers start indexes
    ``[(n + 1) * T, (n + 2) * T)`` and negative bank ``n`` covers ``[-(n + 2) * T, -(n + 1) * T)``, where
    ``T = tick_spacing * 60 * 512``.  Within a bank, higher bits always map to higher ticks.
    """

    pool_id: str
    positive_tick_array_bitmap: list[list[int]]
    negative_tick_array_bitmap: list[list[int]]

    @field_validator("pool_id")
    @classmethod
    def check_pool_id(cls, pool_id: str) -> str:
        return normalize_address(pool_id)

    @field_validator("positive_tick_array_bitmap", "negative_tick_array_bitmap")
    @classmethod
    def check_bitmap_shape(cls, banks: list[list[int]]) -> list[list[int]]:
        if len(banks) != EXTENSION_TICKARRAY_BITMAP_SIZE or any(len(bank) != BANK_WORDS for bank in banks):
            raise ValueError(f"Bitmap extension requires {EXTENSION_TICKARRAY_BITMAP_SIZE} banks of {BANK_WORDS} words")
        return banks

    @classmethod
    def empty(cls, pool_id: str) -> "TickArrayBitmapExtension":
        """Returns an extension with no initialized tick arrays"""
        return TickArrayBitmapExtension(
            pool_id=pool_id,
            positive_tick_array_bitmap=[[0] * BANK_WORDS for _ in range(EXTENSION_TICKARRAY_BITMAP_SIZE)],
            negative_tick_array_bitmap=[[0] * BANK_WORDS for _ in range(EXTENSION_TICKARRAY_BITMAP_SIZE)],
        )

    # -----------------------------------------------------------------------
    #   Bank & bit offsets
    # -----------------------------------------------------------------------
    @staticmethod
    def check_extension_boundary(tick_index: int, tick_spacing: int):
        """Raises InvalidTickArrayBoundary for start indexes that belong to the pool's own bitmap"""
        positive_tick_boundary = max_tick_in_tickarray_bitmap(tick_spacing)
        negative_tick_boundary = -positive_tick_boundary

        if positive_tick_boundary >= MAX_TICK or negative_tick_boundary <= MIN_TICK:
            raise InvalidTickArrayBoundary(
                f"Tick spacing {tick_spacing} does not use a bitmap extension", tick_spacing=tick_spacing
            )
        if negative_tick_boundary <= tick_index < positive_tick_boundary:
            raise InvalidTickArrayBoundary(
                f"Tick array start {tick_index} is tracked by the pool bitmap", start_tick_index=tick_index
            )

    @staticmethod
    def get_bitmap_offset(tick_index: int, tick_spacing: int) -> int:
        """
        Index of the bank holding the flag for the tick array starting at ``tick_index``

        :param tick_index: tick array start index
        :param tick_spacing:
        :return: bank index
        """
        if not TickArrayState.check_is_valid_start_index(tick_index, tick_spacing):
            raise InvalidTickArrayBoundary(f"Invalid tick array start index: {tick_index}", start_tick_index=tick_index)
        TickArrayBitmapExtension.check_extension_boundary(tick_index, tick_spacing)

        ticks_in_one_bitmap = max_tick_in_tickarray_bitmap(tick_spacing)
        offset = abs(tick_index) // ticks_in_one_bitmap - 1
        if tick_index < 0 and abs(tick_index) % ticks_in_one_bitmap == 0:
            offset -= 1
        return offset

    @staticmethod
    def tick_array_offset_in_bitmap(tick_array_start_index: int, tick_spacing: int) -> int:
        """Bit position of a tick array within its bank"""
        m = abs(tick_array_start_index) % max_tick_in_tickarray_bitmap(tick_spacing)
        tick_array_offset = m // TickArrayState.tick_count(tick_spacing)
        if tick_array_start_index < 0 and m != 0:
            tick_array_offset = TICK_ARRAY_BITMAP_SIZE - tick_array_offset
        return tick_array_offset

    def get_bitmap(self, tick_index: int, tick_spacing: int) -> tuple[int, int]:
        """
        :return: (bank index, 512 bit bank as an integer)
        """
        offset = self.get_bitmap_offset(tick_index, tick_spacing)
        if tick_index < 0:
            return offset, words_to_int(self.negative_tick_array_bitmap[offset])
        return offset, words_to_int(self.positive_tick_array_bitmap[offset])

    def check_tick_array_is_initialized(self, tick_array_start_index: int, tick_spacing: int) -> tuple[bool, int]:
        """
        :return: (is_initialized, tick_array_start_index)
        """
        _, tick_array_bitmap = self.get_bitmap(tick_array_start_index, tick_spacing)
        bit = self.tick_array_offset_in_bitmap(tick_array_start_index, tick_spacing)
        return (tick_array_bitmap >> bit) & 1 == 1, tick_array_start_index

    def flip_tick_array_bit(self, tick_array_start_index: int, tick_spacing: int):
        """Toggles the initialized flag of a tick array tracked by the extension"""
        offset, tick_array_bitmap = self.get_bitmap(tick_array_start_index, tick_spacing)
        bit = self.tick_array_offset_in_bitmap(tick_array_start_index, tick_spacing)
        words = int_to_words(tick_array_bitmap ^ (1 << bit), BANK_WORDS)

        if tick_array_start_index < 0:
            self.negative_tick_array_bitmap[offset] = words
        else:
            self.positive_tick_array_bitmap[offset] = words

    # -----------------------------------------------------------------------
    #   Searches
    # -----------------------------------------------------------------------
    def next_initialized_tick_array_from_one_bitmap(
        self, last_tick_array_start_index: int, tick_spacing: int, zero_for_one: bool
    ) -> tuple[bool, int]:
        """
        Searches the bank holding the tick array adjacent to ``last_tick_array_start_index``.

        :return: (is_found, start index).  When not found, the start index is where the search should continue
        """
        multiplier = TickArrayState.tick_count(tick_spacing)
        if zero_for_one:
            next_tick_array_start_index = last_tick_array_start_index - multiplier
        else:
            next_tick_array_start_index = last_tick_array_start_index + multiplier

        min_tick_array_start_index = TickArrayState.get_array_start_index(MIN_TICK, tick_spacing)
        max_tick_array_start_index = TickArrayState.get_array_start_index(MAX_TICK, tick_spacing)

        if not min_tick_array_start_index <= next_tick_array_start_index <= max_tick_array_start_index:
            return False, next_tick_array_start_index

        _, tick_array_bitmap = self.get_bitmap(next_tick_array_start_index, tick_spacing)
        return self.next_initialized_tick_array_in_bitmap(
            tick_array_bitmap, next_tick_array_start_index, tick_spacing, zero_for_one
        )

    @staticmethod
    def next_initialized_tick_array_in_bitmap(
        tick_array_bitmap: int, next_tick_array_start_index: int, tick_spacing: int, zero_for_one: bool
    ) -> tuple[bool, int]:
        """
        Scans a single 512 bit bank, starting at (and including) ``next_tick_array_start_index``

        :param tick_array_bitmap: bank as an integer
        :param next_tick_array_start_index: first start index to check
        :param tick_spacing:
        :param zero_for_one: direction of the swap
        :return: (is_found, start index).  When not found, the bank's outer boundary in the swap direction
        """
        bitmap_min_tick_boundary, bitmap_max_tick_boundary = get_bitmap_tick_boundary(
            next_tick_array_start_index, tick_spacing
        )
        tick_array_offset = TickArrayBitmapExtension.tick_array_offset_in_bitmap(
            next_tick_array_start_index, tick_spacing
        )
        multiplier = TickArrayState.tick_count(tick_spacing)

        if zero_for_one:
            offset_bit_map = (tick_array_bitmap << (BANK_BITS - 1 - tick_array_offset)) & (2**BANK_BITS - 1)
            next_bit = most_significant_bit(offset_bit_map, BANK_BITS)
            if next_bit is not None:
                return True, next_tick_array_start_index - next_bit * multiplier
            return False, bitmap_min_tick_boundary

        offset_bit_map = tick_array_bitmap >> tick_array_offset
        next_bit = least_significant_bit(offset_bit_map, BANK_BITS)
        if next_bit is not None:
            return True, next_tick_array_start_index + next_bit * multiplier
        return False, bitmap_max_tick_boundary - multiplier
