"""Byte and BCD helpers used when building and reading DL/T 645 frames."""

from __future__ import annotations

_HEX_VALUES = {ord(ch): int(ch, 16) for ch in "0123456789abcdefABCDEF"}


def _nibble(code: int) -> int:
    """Return the value of one hexadecimal digit, or 0 for any other byte."""
    return _HEX_VALUES.get(code, 0)


def string_to_bcd_bytes(text: str) -> bytes:
    """Pack a string of hex digits into bytes, two digits per byte.

    An odd-length string is padded with a leading zero; characters that are
    not hex digits count as zero.
    """
    raw = text.encode()
    if len(raw) % 2:
        raw = b"0" + raw
    return bytes(
        (_nibble(high) << 4) | _nibble(low) for high, low in zip(raw[::2], raw[1::2])
    )


def bcd_bytes_to_string(data: bytes) -> str:
    """Render bytes as lower-case hex digits, two per byte."""
    return bytes(data).hex()


def bytes_sub(data: bytes, sub: int) -> bytes:
    """Subtract ``sub`` from every byte, wrapping modulo 256."""
    return bytes((b - sub) & 0xFF for b in data)


def bytes_add(data: bytes, add: int) -> bytes:
    """Add ``add`` to every byte, wrapping modulo 256."""
    return bytes((b + add) & 0xFF for b in data)


def bytes_reverse(data: bytes) -> bytes:
    """Return the bytes in reverse order."""
    return bytes(reversed(bytes(data)))