from solders.pubkey import Pubkey

U64_BITS = 64


def random_address() -> str:
    """
    Generate a unique base58 encoded Pubkey.  Intended for fixtures and placeholder accounts.
    :return: base58 address
    """
    return str(Pubkey.new_unique())


def to_pubkey(address: str | Pubkey) -> Pubkey:
    """
    Parses a base58 address into a solders Pubkey.  Raises ValueError on malformed addresses
    :param address: base58 string or Pubkey
    :return: Pubkey
    """
    if isinstance(address, Pubkey):
        return address
    return Pubkey.from_string(address)


def normalize_address(address: str | Pubkey) -> str:
    """Validates an address and returns its canonical base58 form"""
    return str(to_pubkey(address))


def words_to_int(words: list[int]) -> int:
    """
    Packs little-endian u64 words into a single integer.  Word 0 holds the least significant bits
    :param words: list of u64 words
    :return: packed integer
    """
    value = 0
    for index, word in enumerate(words):
        value |= word << (U64_BITS * index)
    return value


def int_to_words(value: int, word_count: int) -> list[int]:
    """
    Splits an integer into little-endian u64 words
    :param value: integer to split
    :param word_count: number of words in the output
    :return: list of u64 words
    """
    mask = 2**U64_BITS - 1
    return [(value >> (U64_BITS * index)) & mask for index in range(word_count)]


def leading_zeros(value: int, bits: int) -> int:
    """Number of zero bits above the most significant set bit of a ``bits`` wide unsigned integer"""
    return bits - value.bit_length()


def trailing_zeros(value: int, bits: int) -> int:
    """Number of zero bits below the least significant set bit.  Returns ``bits`` for zero"""
    if value == 0:
        return bits
    return (value & -value).bit_length() - 1
