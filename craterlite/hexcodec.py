"""Decoding of hexadecimal strings."""

_DIGITS = {c: int(c, 16) for c in "0123456789abcdefABCDEF"}


class HexError(ValueError):
    """Raised when a string is not valid hexadecimal."""


class InvalidCharError(HexError):
    """A character outside of ``[0-9a-fA-F]`` was found."""

    def __init__(self, char: str) -> None:
        super().__init__(f"invalid char in hex: {char}")
        self.char = char


class InvalidLengthError(HexError):
    """The input has an odd number of digits."""

    def __init__(self) -> None:
        super().__init__("invalid hex length")


def from_hex(text: str) -> bytes:
    """Decode a hexadecimal string into bytes.

    The first invalid character is reported before the length is checked.
    """
    bad = next((c for c in text if c not in _DIGITS), None)
    if bad is not None:
        raise InvalidCharError(bad)
    if len(text) % 2:
        raise InvalidLengthError()
    return bytes.fromhex(text)