Q64 = 2**64


def uint_max(bits: int) -> int:
    return 2**bits - 1


def ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def zero_for_one_output(liquidity: int, amount_in: int, sqrt_price_x64: int = Q64) -> int:
    """Token 1 received for an exact token 0 input that stays within a single tick range, with no swap fee"""
    next_price = ceil_div(liquidity * Q64 * sqrt_price_x64, liquidity * Q64 + amount_in * sqrt_price_x64)
    return liquidity * (sqrt_price_x64 - next_price) // Q64
