"""Serial line transport that exchanges DL/T 645 frames with a meter."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

import serial

from .frame import WAKE_UP, Dlt6452007Packager, FrameError, Protocol2007DataUnit
from .readers import read_at_least, read_full

RESPONSE_TIMEOUT = 0.5
HANDLER_READ_TIMEOUT = 0.5
HEADER_SIZE = 14
BUFFER_SIZE = 1024
# start(1) + address(6) + start(1) + control(1) + length(1) + cs(1) + end(1)
_FRAME_OVERHEAD = 12


class _Port(Protocol):
    def write(self, data: bytes) -> Optional[int]: ...

    def read(self, size: int) -> bytes: ...

    def close(self) -> None: ...


@dataclass
class SerialConfig:
    """Settings of the serial line; ``read_timeout`` is in seconds, None blocks."""

    name: str = ""
    baud: int = 2400
    size: int = serial.EIGHTBITS
    parity: str = serial.PARITY_NONE
    stop_bits: float = serial.STOPBITS_ONE
    read_timeout: Optional[float] = None


def _open_serial(config: SerialConfig) -> _Port:
    return serial.Serial(
        port=config.name,
        baudrate=config.baud,
        bytesize=config.size,
        parity=config.parity,
        stopbits=config.stop_bits,
        timeout=config.read_timeout,
    )


class SerialPort:
    """A lazily opened serial port guarded by a lock."""

    def __init__(
        self,
        config: Optional[SerialConfig] = None,
        logger: Optional[logging.Logger] = None,
        port_factory: Optional[Callable[[SerialConfig], _Port]] = None,
    ) -> None:
        self.config = config if config is not None else SerialConfig()
        self.logger = logger
        self._port_factory = port_factory or _open_serial
        self._lock = threading.Lock()
        self._port: Optional[_Port] = None

    @property
    def is_open(self) -> bool:
        return self._port is not None

    def connect(self) -> None:
        """Open the port unless it is already open."""
        with self._lock:
            self._connect()

    def _connect(self) -> _Port:
        if self._port is None:
            self._port = self._port_factory(self.config)
        return self._port

    def close(self) -> None:
        """Close the port if it is open."""
        with self._lock:
            self._close()

    def _close(self) -> None:
        port, self._port = self._port, None
        if port is not None:
            port.close()

    def _log(self, message: str, *args: object) -> None:
        if self.logger is not None:
            self.logger.info(message, *args)

    def __enter__(self) -> "SerialPort":
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class SerialTransporter(SerialPort):
    """Sends a request frame and reads back one complete response frame."""

    def send(self, adu_request: bytes) -> bytes:
        """Write ``adu_request`` and return the raw response bytes."""
        adu_request = bytes(adu_request)
        port = self._connect()

        self._log("dlt645: sending %s", adu_request.hex(" "))
        port.write(adu_request)

        received = read_at_least(port, HEADER_SIZE, RESPONSE_TIMEOUT, BUFFER_SIZE)
        front_len = len(received) - len(received.lstrip(bytes([WAKE_UP])))
        length_index = front_len + 9
        if length_index >= len(received):
            raise FrameError("response truncated frame")
        total = front_len + _FRAME_OVERHEAD + received[length_index]
        if len(received) < total:
            received += read_full(port, total - len(received), RESPONSE_TIMEOUT)

        self._log("dlt645: received %s", received.hex(" "))
        return received

    def open(self) -> None:
        """Open the serial port."""
        self.connect()

    def close(self) -> None:
        """Close the serial port."""
        super().close()


class Serial2007Handler(SerialTransporter):
    """DL/T 645-2007 framing over a serial line."""

    def __init__(
        self,
        config: Optional[SerialConfig] = None,
        logger: Optional[logging.Logger] = None,
        port_factory: Optional[Callable[[SerialConfig], _Port]] = None,
    ) -> None:
        super().__init__(config, logger, port_factory)
        self._packager = Dlt6452007Packager()

    def encode(self, pdu: Protocol2007DataUnit) -> bytes:
        return self._packager.encode(pdu)

    def decode(self, adu: bytes) -> Protocol2007DataUnit:
        return self._packager.decode(adu)


def new_serial_2007_handler(address: str) -> Serial2007Handler:
    """Create a handler for the serial device at ``address``."""
    return Serial2007Handler(
        SerialConfig(name=address, read_timeout=HANDLER_READ_TIMEOUT)
    )