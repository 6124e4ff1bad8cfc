from pydantic import BaseModel, field_validator

from clmm_quoter.exceptions import InvalidTickIndex, StateConsistencyError

from .math.shared import MAX_TICK, MIN_TICK, TICK_ARRAY_SIZE

REWARD_NUM = 3


class TickState(BaseModel):
    """Liquidity and fee checkpoints stored for a single tick"""

    tick: int
    """
        Index of the tick.  Always a multiple of the pool's tick spacing.
    """
    liquidity_net: int = 0
    """
        Signed amount of liquidity added when the price crosses this tick moving up, and removed when the price
        crosses it moving down.
    """
    liquidity_gross: int = 0
    """
        Total liquidity referencing this tick.  A tick is initialized only while this value is non-zero.
    """
    fee_growth_outside_0_x64: int = 0
    fee_growth_outside_1_x64: int = 0
    reward_growths_outside_x64: list[int] = [0] * REWARD_NUM

    @classmethod
    def uninitialized(cls, tick: int = 0) -> "TickState":
        """Returns an empty tick slot"""
        return TickState(tick=tick)

    @property
    def is_initialized(self) -> bool:
        return self.liquidity_gross != 0

    @staticmethod
    def check_is_out_of_boundary(tick: int) -> bool:
        return tick < MIN_TICK or tick > MAX_TICK


class TickArrayState(BaseModel):
    """
    Fixed window of 60 consecutive ticks.  A tick array covers ticks ``[start_tick_index,
    start_tick_index + 60 * tick_spacing)``, and its start index is always a multiple of ``60 * tick_spacing``
    rounded toward negative infinity.
    """

    pool_id: str
    start_tick_index: int
    ticks: list[TickState]
    initialized_tick_count: int = 0

    @field_validator("ticks")
    @classmethod
    def check_tick_count(cls, ticks: list[TickState]) -> list[TickState]:
        if len(ticks) != TICK_ARRAY_SIZE:
            raise ValueError(f"Tick array must hold {TICK_ARRAY_SIZE} ticks, received {len(ticks)}")
        return ticks

    @classmethod
    def empty(cls, pool_id: str, start_tick_index: int, tick_spacing: int) -> "TickArrayState":
        """
        Returns a tick array with every slot uninitialized

        :param pool_id: address of the pool that owns the array
        :param start_tick_index: first tick of the array
        :param tick_spacing: tick spacing of the pool
        :return:
        """
        return TickArrayState(
            pool_id=pool_id,
            start_tick_index=start_tick_index,
            ticks=[TickState.uninitialized(start_tick_index + i * tick_spacing) for i in range(TICK_ARRAY_SIZE)],
        )

    # -----------------------------------------------------------------------
    #   Start index math
    # -----------------------------------------------------------------------
    @staticmethod
    def tick_count(tick_spacing: int) -> int:
        """Number of ticks spanned by a single tick array"""
        return TICK_ARRAY_SIZE * tick_spacing

    @staticmethod
    def get_array_start_index(tick: int, tick_spacing: int) -> int:
        """
        Start index of the tick array containing ``tick``.  Rounds toward negative infinity, so tick -1 belongs
        to the array starting at ``-60 * tick_spacing``
        """
        ticks_in_array = TickArrayState.tick_count(tick_spacing)
        return (tick // ticks_in_array) * ticks_in_array

    @staticmethod
    def check_is_valid_start_index(tick_index: int, tick_spacing: int) -> bool:
        """
        Checks that ``tick_index`` is the start index of a tick array.  The array holding MIN_TICK starts below
        MIN_TICK, and is the only out of boundary start index that is valid.
        """
        if TickState.check_is_out_of_boundary(tick_index):
            if tick_index > MAX_TICK:
                return False
            return tick_index == TickArrayState.get_array_start_index(MIN_TICK, tick_spacing)
        return tick_index % TickArrayState.tick_count(tick_spacing) == 0

    def next_tick_array_start_index(self, tick_spacing: int, zero_for_one: bool) -> int:
        """Start index of the adjacent tick array in the direction of the swap"""
        ticks_in_array = self.tick_count(tick_spacing)
        if zero_for_one:
            return self.start_tick_index - ticks_in_array
        return self.start_tick_index + ticks_in_array

    # -----------------------------------------------------------------------
    #   Tick lookups
    # -----------------------------------------------------------------------
    def get_tick_offset_in_array(self, tick_index: int, tick_spacing: int) -> int:
        start_index = self.get_array_start_index(tick_index, tick_spacing)
        if start_index != self.start_tick_index:
            raise InvalidTickIndex(
                f"Tick {tick_index} is not in the tick array starting at {self.start_tick_index}",
                tick=tick_index,
                start_tick_index=self.start_tick_index,
            )
        return (tick_index - self.start_tick_index) // tick_spacing

    def get_tick_state(self, tick_index: int, tick_spacing: int) -> TickState:
        return self.ticks[self.get_tick_offset_in_array(tick_index, tick_spacing)]

    def first_initialized_tick(self, zero_for_one: bool) -> TickState:
        """
        Returns the first initialized tick of the array in the swap direction.  Scans from the top slot when the
        price is moving down, and from the bottom slot when moving up

        :param zero_for_one: direction of the swap
        :return: TickState
        """
        slots = reversed(self.ticks) if zero_for_one else iter(self.ticks)
        for tick_state in slots:
            if tick_state.is_initialized:
                return tick_state

        raise StateConsistencyError(
            f"Tick array starting at {self.start_tick_index} has no initialized ticks",
            start_tick_index=self.start_tick_index,
        )

    def next_initialized_tick(self, current_tick_index: int, tick_spacing: int, zero_for_one: bool) -> TickState | None:
        """
        Searches this array for the next initialized tick in the swap direction.  Moving down includes the
        current tick's own slot, moving up starts at the slot above it.

        :param current_tick_index: current tick of the swap
        :param tick_spacing: tick spacing of the pool
        :param zero_for_one: direction of the swap
        :return: next initialized TickState, or None if the current tick is outside this array or none remain
        """
        current_tick_array_start_index = self.get_array_start_index(current_tick_index, tick_spacing)
        if current_tick_array_start_index != self.start_tick_index:
            return None

        offset_in_array = (current_tick_index - self.start_tick_index) // tick_spacing

        if zero_for_one:
            search_range = range(offset_in_array, -1, -1)
        else:
            search_range = range(offset_in_array + 1, TICK_ARRAY_SIZE)

        for offset in search_range:
            if self.ticks[offset].is_initialized:
                return self.ticks[offset]

        return None
