"""Reading from byte streams with a deadline."""

from __future__ import annotations

import time
from typing import Protocol


class ReadTimeoutError(TimeoutError):
    """Not enough bytes arrived before the deadline."""


class _Reader(Protocol):
    def read(self, size: int) -> bytes: ...


def read_at_least(
    reader: _Reader, minimum: int, timeout: float, max_size: int = 1024
) -> bytes:
    """Read until at least ``minimum`` bytes arrive, returning at most ``max_size``.

    ``timeout`` is in seconds. An empty read means end of stream and raises
    EOFError.
    """
    if max_size < minimum:
        raise ValueError("short buffer")
    deadline = time.monotonic() + timeout
    received = bytearray()
    while len(received) < minimum:
        if time.monotonic() >= deadline:
            raise ReadTimeoutError("read timeout")
        chunk = reader.read(max_size - len(received))
        if not chunk:
            if received:
                raise EOFError("unexpected EOF")
            raise EOFError("EOF")
        received += chunk
    return bytes(received)


def read_full(reader: _Reader, size: int, timeout: float) -> bytes:
    """Read exactly ``size`` bytes within ``timeout`` seconds."""
    return read_at_least(reader, size, timeout, size)