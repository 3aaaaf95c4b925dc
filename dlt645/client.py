"""High-level client for reading and writing DL/T 645-2007 meters."""

from __future__ import annotations

from typing import Protocol

from .binary import bytes_reverse, string_to_bcd_bytes
from .frame import Protocol2007DataUnit, common_data_unit

READ_DATA = 0x11
WRITE_DATA = 0x14


class _Handler(Protocol):
    def encode(self, pdu: Protocol2007DataUnit) -> bytes: ...

    def decode(self, adu: bytes) -> Protocol2007DataUnit: ...

    def send(self, adu_request: bytes) -> bytes: ...

    def open(self) -> None: ...

    def close(self) -> None: ...


class Dlt645Client:
    """Sends requests through a handler that frames and transports them."""

    def __init__(self, handler: _Handler) -> None:
        self._handler = handler

    def read_data(self, addr: str, identifier: str) -> bytes:
        """Read the data item ``identifier`` from the meter at ``addr``."""
        pdu = common_data_unit(
            string_to_bcd_bytes(addr),
            READ_DATA,
            bytes_reverse(string_to_bcd_bytes(identifier)),
        )
        return self._exchange(pdu)

    def set_param(self, addr: str, identifier: str, data: bytes) -> bytes:
        """Write ``data`` (without the 0x33 offset) to the item ``identifier``."""
        pdu = common_data_unit(
            string_to_bcd_bytes(addr),
            WRITE_DATA,
            bytes_reverse(string_to_bcd_bytes(identifier)) + bytes(data),
        )
        return self._exchange(pdu)

    def send(self, pdu: Protocol2007DataUnit) -> bytes:
        """Send a prepared data unit and return the response data."""
        if not isinstance(pdu, Protocol2007DataUnit):
            raise TypeError("invalid Protocol2007DataUnit")
        return self._exchange(pdu)

    def open(self) -> None:
        self._handler.open()

    def close(self) -> None:
        self._handler.close()

    def __enter__(self) -> "Dlt645Client":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _exchange(self, request: Protocol2007DataUnit) -> bytes:
        adu_request = self._handler.encode(request)
        adu_response = self._handler.send(adu_request)
        response = self._handler.decode(adu_response)
        return response.result(request.control)