"""DL/T 645-2007 frames: building, parsing and checksums."""

from __future__ import annotations

from dataclasses import dataclass, field

from .binary import bcd_bytes_to_string, bytes_add, bytes_reverse, bytes_sub

FRAME_START = 0x68
FRAME_END = 0x16
WAKE_UP = 0xFE
DATA_OFFSET = 0x33
ERROR_OFFSET = 0xC0


class Dlt645Error(Exception):
    """Base class for protocol errors."""


class FrameError(Dlt645Error):
    """A response frame is malformed."""


class ChecksumError(Dlt645Error):
    """A response frame carries a wrong checksum."""


class ResponseError(Dlt645Error):
    """The meter answered with an error control code."""

    def __init__(self, data: bytes) -> None:
        super().__init__(f"response error, code: {bytes(data).hex()}")
        self.data = bytes(data)


@dataclass
class Protocol2007DataUnit:
    """One frame; ``data`` holds the data field without the 0x33 offset."""

    front: bytes = b""
    start: int = FRAME_START
    address: bytes = b""
    control: int = 0
    length: int = 0
    data: bytes = b""
    cs: int = 0
    end: int = FRAME_END

    def value(self) -> bytes:
        """Serialise the frame, updating its length and checksum."""
        self.length = len(self.data) & 0xFF
        self.cs = self.compute_cs()
        body = (
            bytes([FRAME_START])
            + bytes(self.address)
            + bytes([FRAME_START, self.control, self.length])
            + bytes_add(self.data, DATA_OFFSET)
        )
        return bytes(self.front) + body + bytes([self.cs, self.end])

    def compute_cs(self) -> int:
        """Sum of every frame byte from the first start byte, modulo 256."""
        total = self.start * 2 + self.control + self.length
        total += sum(self.address)
        total += sum(bytes_add(self.data, DATA_OFFSET))
        return total & 0xFF

    def identify(self) -> str:
        """Return the data identifier, or an empty string if there is none."""
        if self.length >= 4:
            return bcd_bytes_to_string(bytes_reverse(self.data[:4]))
        return ""

    def result(self, cmd_c: int) -> bytes:
        """Return the data, raising ResponseError if this answers ``cmd_c`` with an error."""
        if self.control == (cmd_c + ERROR_OFFSET) & 0xFF:
            raise ResponseError(self.data)
        return self.data

    def verify(self) -> bool:
        """Check the stored checksum against the frame contents."""
        return self.compute_cs() == self.cs


def common_data_unit(addr: bytes, control: int, data: bytes) -> Protocol2007DataUnit:
    """Build a request frame from a big-endian address and prepared data."""
    data = bytes(data)
    return Protocol2007DataUnit(
        front=bytes([WAKE_UP] * 4),
        start=FRAME_START,
        end=FRAME_END,
        address=bytes_reverse(addr),
        control=control,
        length=len(data) & 0xFF,
        data=data,
    )


def parse_data_unit(frame: bytes) -> Protocol2007DataUnit:
    """Parse a received frame, checking its start byte and checksum."""
    frame = bytes(frame)
    body = frame.lstrip(bytes([WAKE_UP]))
    front = frame[: len(frame) - len(body)]
    if not body or body[0] != FRAME_START:
        raise FrameError("response invalid frame start")
    # start(1) + address(6) + start(1) + control(1) + length(1)
    if len(body) < 10:
        raise FrameError("response truncated frame")
    control = body[8]
    length = body[9]
    payload = body[10 : 10 + length]
    trailer = body[10 + length : 12 + length]
    if len(payload) < length or len(trailer) < 2:
        raise FrameError("response truncated frame")

    pdu = Protocol2007DataUnit(
        front=front,
        start=FRAME_START,
        address=bytes_reverse(body[1:7]),
        control=control,
        length=length,
        data=bytes_sub(payload, DATA_OFFSET),
        cs=trailer[0],
        end=trailer[1],
    )
    if not pdu.verify():
        raise ChecksumError("response invalid checksum")
    return pdu


@dataclass
class Dlt6452007Packager:
    """Turns data units into wire bytes and back."""

    _unused: None = field(default=None, repr=False)

    def encode(self, pdu: Protocol2007DataUnit) -> bytes:
        return pdu.value()

    def decode(self, adu: bytes) -> Protocol2007DataUnit:
        return parse_data_unit(adu)