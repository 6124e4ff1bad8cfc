import logging

import click
from pydantic import ValidationError
from rich.table import Table

from clmm_quoter.clmm.quote import QuoteSnapshot, calculate_swap_change_from_snapshot
from clmm_quoter.exceptions import ClmmError

from .utils import (
    amount_option,
    base_out_option,
    cli_logger_config,
    epoch_option,
    format_price,
    group_options,
    input_mint_option,
    limit_price_option,
    program_id_option,
    slippage_option,
    snapshot_option,
    verbose_option,
)

root_logger = logging.getLogger("clmm_quoter")


@click.group()
def clmm_cli():
    """Command Line Interface for quoting concentrated liquidity swaps"""


@clmm_cli.command(name="quote")
@group_options(
    snapshot_option,
    input_mint_option,
    amount_option,
    slippage_option,
    base_out_option,
    limit_price_option,
    epoch_option,
    program_id_option,
    verbose_option,
)
def cli_quote(
    snapshot_file,
    input_mint,
    amount,
    slippage_bps,
    base_out,
    limit_price,
    epoch,
    program_id,
    verbose,
):
    """
    Quote a swap against a pool snapshot
    """
    console = cli_logger_config(root_logger, verbose)

    try:
        snapshot = QuoteSnapshot.from_json_file(snapshot_file)
    except ValidationError as exc:
        raise click.BadParameter(f"Invalid snapshot: {exc}", param_hint="--snapshot") from exc

    try:
        quote = calculate_swap_change_from_snapshot(
            program_id=program_id,
            snapshot=snapshot,
            input_mint=input_mint,
            amount=amount,
            base_in=not base_out,
            slippage_bps=slippage_bps,
            limit_price=limit_price,
            epoch=epoch,
        )
    except ClmmError as exc:
        raise click.ClickException(f"{exc.__class__.__name__}: {exc}") from exc

    pool = snapshot.pool
    table = Table(title=f"Swap Quote for Pool {quote.pool_id}")
    table.add_column("Field")
    table.add_column("Value", justify="right")

    table.add_row("Current Price", format_price(pool.sqrt_price_x64, pool.mint_decimals_0, pool.mint_decimals_1))
    table.add_row("Direction", "token_0 -> token_1" if quote.zero_for_one else "token_1 -> token_0")
    table.add_row("Exact Input" if quote.is_base_input else "Exact Output", str(quote.amount))
    table.add_row("Amount After Transfer Fee", str(quote.amount_specified))
    table.add_row("Amount Out" if quote.is_base_input else "Amount In", str(quote.amount_calculated))
    table.add_row(
        "Minimum Amount Out" if quote.is_base_input else "Maximum Amount In", str(quote.other_amount_threshold)
    )
    table.add_row("Input Vault", quote.input_vault)
    table.add_row("Output Vault", quote.output_vault)
    table.add_row("Tick Arrays", ", ".join(str(index) for index in quote.tick_array_start_indexes))
    for tick_array_key in quote.remaining_tick_array_keys:
        table.add_row("Tick Array Account", tick_array_key)

    console.print(table)
