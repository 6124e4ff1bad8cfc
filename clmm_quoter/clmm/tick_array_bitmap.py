"""
Pool-level bitmap of initialized tick arrays.

The pool account stores 1024 bits as sixteen little-endian u64 words.  Bit 512 maps to the tick array starting at
tick 0; each bit above or below moves one tick array (``60 * tick_spacing`` ticks) up or down.  Tick arrays beyond
``+- tick_spacing * 60 * 512`` are tracked by the bitmap extension account.
"""
from clmm_quoter.exceptions import InvalidTickArrayBoundary, InvalidTickIndex
from clmm_quoter.utils import leading_zeros, trailing_zeros

from .math.shared import TICK_ARRAY_BITMAP_SIZE, TICK_ARRAY_SIZE
from .tick_array import TickArrayState, TickState

TICK_ARRAY_BITMAP_BITS = 1024
TICK_ARRAY_BITMAP_WORDS = 16


def max_tick_in_tickarray_bitmap(tick_spacing: int) -> int:
    """Number of ticks covered by each half of the 1024 bit bitmap, or by one 512 bit extension bank"""
    return tick_spacing * TICK_ARRAY_SIZE * TICK_ARRAY_BITMAP_SIZE


def get_bitmap_tick_boundary(tick_array_start_index: int, tick_spacing: int) -> tuple[int, int]:
    """
    Returns the ``[min, max)`` tick range of the 512 bit bank that contains ``tick_array_start_index``

    :param tick_array_start_index:
    :param tick_spacing:
    :return: (min_tick_boundary, max_tick_boundary)
    """
    ticks_in_one_bitmap = max_tick_in_tickarray_bitmap(tick_spacing)
    multiplier, remainder = divmod(abs(tick_array_start_index), ticks_in_one_bitmap)
    if tick_array_start_index < 0 and remainder != 0:
        multiplier += 1

    min_value = ticks_in_one_bitmap * multiplier
    if tick_array_start_index < 0:
        return -min_value, -min_value + ticks_in_one_bitmap
    return min_value, min_value + ticks_in_one_bitmap


def most_significant_bit(value: int, bits: int) -> int | None:
    """Leading zero count of a non-zero ``bits`` wide integer, or None if no bit is set"""
    if value == 0:
        return None
    return leading_zeros(value, bits)


def least_significant_bit(value: int, bits: int) -> int | None:
    """Trailing zero count of a non-zero integer, or None if no bit is set"""
    if value == 0:
        return None
    return trailing_zeros(value, bits)


def _compressed_position(tick_index: int, tick_spacing: int) -> int:
    # floor division keeps negative ticks in the array below zero
    return tick_index // TickArrayState.tick_count(tick_spacing) + TICK_ARRAY_BITMAP_SIZE


def check_current_tick_array_is_initialized(bitmap: int, tick_current: int, tick_spacing: int) -> tuple[bool, int]:
    """
    Checks whether the tick array containing ``tick_current`` is marked as initialized in the pool's bitmap

    :param bitmap: 1024 bit pool bitmap as an integer
    :param tick_current: current tick of the pool
    :param tick_spacing: tick spacing of the pool
    :return: (is_initialized, start index of the tick array containing tick_current)
    """
    if TickState.check_is_out_of_boundary(tick_current):
        raise InvalidTickIndex(f"Tick {tick_current} is outside of the valid tick range", tick=tick_current)

    multiplier = TickArrayState.tick_count(tick_spacing)
    compressed = _compressed_position(tick_current, tick_spacing)
    bit_pos = abs(compressed)

    is_initialized = (bitmap >> bit_pos) & 1 == 1
    return is_initialized, (compressed - TICK_ARRAY_BITMAP_SIZE) * multiplier


def next_initialized_tick_array_start_index(
    bitmap: int, last_tick_array_start_index: int, tick_spacing: int, zero_for_one: bool
) -> tuple[bool, int]:
    """
    Searches the pool bitmap for the next initialized tick array after ``last_tick_array_start_index``.

    When nothing is found, the second element of the result is the boundary where the search should continue
    in the bitmap extension.

    :param bitmap: 1024 bit pool bitmap as an integer
    :param last_tick_array_start_index: start index of the last tick array visited
    :param tick_spacing: tick spacing of the pool
    :param zero_for_one: direction of the swap
    :return: (is_found, start index)
    """
    if not TickArrayState.check_is_valid_start_index(last_tick_array_start_index, tick_spacing):
        raise InvalidTickArrayBoundary(
            f"Invalid tick array start index: {last_tick_array_start_index}",
            start_tick_index=last_tick_array_start_index,
        )

    tick_boundary = max_tick_in_tickarray_bitmap(tick_spacing)
    multiplier = TickArrayState.tick_count(tick_spacing)

    if zero_for_one:
        next_tick_array_start_index = last_tick_array_start_index - multiplier
    else:
        next_tick_array_start_index = last_tick_array_start_index + multiplier

    if next_tick_array_start_index < -tick_boundary or next_tick_array_start_index >= tick_boundary:
        return False, last_tick_array_start_index

    bit_pos = abs(_compressed_position(next_tick_array_start_index, tick_spacing))

    if zero_for_one:
        # shift the current position to the top bit, search toward lower bits
        offset_bit_map = (bitmap << (TICK_ARRAY_BITMAP_BITS - 1 - bit_pos)) & (2**TICK_ARRAY_BITMAP_BITS - 1)
        next_bit = most_significant_bit(offset_bit_map, TICK_ARRAY_BITMAP_BITS)
        if next_bit is not None:
            return True, (bit_pos - next_bit - TICK_ARRAY_BITMAP_SIZE) * multiplier
        return False, -tick_boundary

    offset_bit_map = bitmap >> bit_pos
    next_bit = least_significant_bit(offset_bit_map, TICK_ARRAY_BITMAP_BITS)
    if next_bit is not None:
        return True, (bit_pos + next_bit - TICK_ARRAY_BITMAP_SIZE) * multiplier
    return False, tick_boundary - multiplier
