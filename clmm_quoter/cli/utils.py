import logging
import os
from logging import Logger

import click
import numpy as np
from rich.console import Console
from rich.logging import RichHandler

from clmm_quoter.clmm.accounts import RAYDIUM_CLMM_PROGRAM_ID
from clmm_quoter.clmm.math import ClmmMath

root_logger = logging.getLogger("clmm_quoter")
logger = root_logger.getChild("cli")


def cli_logger_config(instrument_logger: Logger, verbose: bool = False) -> Console:
    rich_console = Console()
    instrument_logger.handlers.clear()

    instrument_logger.addHandler(RichHandler(show_path=False, console=rich_console))
    instrument_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return rich_console


def group_options(*options):
    """Decorator to group multiple click options together"""

    def wrapper(function):
        for option in reversed(options):
            function = option(function)
        return function

    return wrapper


def format_price(sqrt_price_x64: int, decimals_0: int, decimals_1: int) -> str:
    """
    Formats the decimal adjusted price of token_0 in units of token_1 to 6 significant figures

    :param sqrt_price_x64: Q64.64 square root price
    :param decimals_0: decimals of token_0
    :param decimals_1: decimals of token_1
    :return: positional price string
    """
    adjusted_price = ClmmMath.sqrt_price_x64_to_price(sqrt_price_x64, decimals_0, decimals_1)
    return np.format_float_positional(float(f"{adjusted_price:.6g}"), trim="-")


# -------------------------------------------------------
#    CLI Connections and Configurations
# -------------------------------------------------------
program_id_option = click.option(
    "--program-id",
    "program_id",
    default=os.environ.get("CLMM_PROGRAM_ID", RAYDIUM_CLMM_PROGRAM_ID),
    help="Concentrated liquidity program id.  If not provided, will use the CLMM_PROGRAM_ID environment variable, "
    "falling back to the Raydium CLMM program",
)
verbose_option = click.option(
    "--verbose",
    "-v",
    "verbose",
    is_flag=True,
    default=False,
    help="Log every swap step",
)

# -------------------------------------------------------
#    Swap Options
# -------------------------------------------------------
snapshot_option = click.option(
    "--snapshot",
    "-s",
    "snapshot_file",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="JSON file containing the pool, amm config, bitmap extension, tick arrays and mints",
)
input_mint_option = click.option(
    "--input-mint",
    "input_mint",
    required=True,
    help="Mint of the token being sold",
)
amount_option = click.option(
    "--amount",
    "amount",
    type=click.IntRange(min=1),
    required=True,
    help="Raw token amount.  Exact input amount by default, exact output amount with --base-out",
)
slippage_option = click.option(
    "--slippage-bps",
    "slippage_bps",
    type=click.IntRange(min=0, max=10_000),
    default=int(os.environ.get("CLMM_SLIPPAGE_BPS", "50")),
    help="Slippage tolerance in basis points.  Defaults to the CLMM_SLIPPAGE_BPS environment variable, or 50",
)
base_out_option = click.option(
    "--base-out",
    "base_out",
    is_flag=True,
    default=False,
    help="Treat --amount as the exact output amount",
)
limit_price_option = click.option(
    "--limit-price",
    "limit_price",
    type=float,
    default=None,
    help="Decimal adjusted price of token_0 in token_1 at which the swap stops",
)
epoch_option = click.option(
    "--epoch",
    "epoch",
    type=int,
    default=None,
    help="Epoch used for token-2022 transfer fees.  Defaults to the epoch stored in the snapshot",
)
