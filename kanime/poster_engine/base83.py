"""Base83 digits as used by blurhash."""

ALPHABET = (
    "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz#$%*+,-.:;=?@[]^_{|}~"
)
_INDEX = {ch: i for i, ch in enumerate(ALPHABET)}


def encode(value: int, length: int) -> str:
    """Encode a non-negative integer into exactly `length` base83 digits."""
    if value < 0 or value >= 83 ** length:
        raise ValueError(f"{value} does not fit in {length} base83 digits")
    digits = []
    for i in range(1, length + 1):
        digit = (value // 83 ** (length - i)) % 83
        digits.append(ALPHABET[digit])
    return "".join(digits)


def decode(text: str) -> int:
    value = 0
    for ch in text:
        try:
            value = value * 83 + _INDEX[ch]
        except KeyError:
            raise ValueError(f"Invalid base83 character: {ch!r}") from None
    return value
