"""Conversion of packed BCD readings into numbers."""

from __future__ import annotations


def bcd_bytes_to_float(data: bytes, digit: int, allow_negative: bool) -> float:
    """Decode little-endian packed BCD into a float.

    ``digit`` is the number of decimal places. With ``allow_negative`` the top
    bit of the last byte is taken as a sign bit.
    """
    result = 0.0
    negative = False
    last = len(data) - 1
    for position, value in enumerate(data):
        if allow_negative and position == last and value & 0x80:
            value &= 0x7F
            negative = True
        result += (float(value >> 4) * 10 + float(value & 0x0F)) * 10.0 ** (position * 2)

    result /= 10.0 ** digit
    return -result if negative else result