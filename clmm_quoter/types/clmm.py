from dataclasses import dataclass, field


@dataclass(slots=True)
class SwapState:
    """Running totals of a swap, updated after every step"""

    amount_specified_remaining: int
    amount_calculated: int
    sqrt_price_x64: int
    tick: int
    liquidity: int


@dataclass(slots=True)
class StepComputation:
    """Parameters and results of a single swap step between the current price and the next tick boundary"""

    sqrt_price_start_x64: int = 0
    tick_next: int = 0
    initialized: bool = False
    sqrt_price_next_x64: int = 0
    amount_in: int = 0
    amount_out: int = 0
    fee_amount: int = 0


@dataclass(slots=True)
class SwapComputeResult:
    """
    Result of simulating a swap.  ``amount_calculated`` is the output amount for exact input swaps, and the
    input amount (including swap fees) for exact output swaps
    """

    amount_calculated: int
    tick_array_start_indexes: list[int]
    state: SwapState
    step_count: int


@dataclass(slots=True)
class SwapLegs:
    """Accounts of the input and output side of a swap, ordered by swap direction"""

    zero_for_one: bool
    input_vault: str
    output_vault: str
    input_vault_mint: str
    output_vault_mint: str
    input_token_program: str
    output_token_program: str


@dataclass(slots=True)
class SwapQuoteResult:
    """
    Quote for a swap, with everything needed to build the swap instruction.

    ``other_amount_threshold`` is the minimum output for exact input swaps, and the maximum input for exact output
    swaps, after slippage and token transfer fees.
    """

    pool_id: str
    pool_amm_config: str
    pool_observation: str
    zero_for_one: bool
    is_base_input: bool
    amount: int
    amount_specified: int
    amount_calculated: int
    other_amount_threshold: int
    sqrt_price_limit_x64: int | None
    input_vault: str
    output_vault: str
    input_vault_mint: str
    output_vault_mint: str
    input_token_program: str
    output_token_program: str
    tick_array_start_indexes: list[int] = field(default_factory=list)
    remaining_tick_array_keys: list[str] = field(default_factory=list)
