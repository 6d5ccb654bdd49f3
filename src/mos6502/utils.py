"""Utilities too unspecific for other modules."""

from typing import Never


def assert_never(arg: Never) -> Never:  # noqa: ARG001
    """Help the type checker perform exhaustiveness checks."""
    raise AssertionError


def dec_to_bcd(dec: int) -> int:
    """Convert a decimal number to binary-coded decimal (BCD)."""
    if dec < 0 or dec > 99:  # noqa: PLR2004
        msg = "Decimal number must be between 0 and 99 inclusive."
        raise ValueError(msg)

    tens = dec // 10
    ones = dec % 10
    return (tens << 4) | ones


def bcd_to_dec(bcd: int) -> int:
    """Convert a binary-coded decimal (BCD) byte to a decimal number.

    Nibbles above 9 are not rejected, they simply weigh in with their binary value, which is what
    the decimal adder sees when a program feeds it a non-BCD byte.
    """
    return ((bcd >> 4) & 0xf) * 10 + (bcd & 0xf)
