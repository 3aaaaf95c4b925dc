import logging

import pytest

from dlt645.frame import FrameError, common_data_unit
from dlt645.transport import (
    SerialConfig,
    SerialPort,
    Serial2007Handler,
    SerialTransporter,
    new_serial_2007_handler,
)

ADDRESS = bytes.fromhex("000000000010")


class FakePort:
    def __init__(self, response=b"", chunk=None):
        self.inbound = bytearray(response)
        self.chunk = chunk
        self.written = bytearray()
        self.closed = False

    def write(self, data):
        self.written += data
        return len(data)

    def read(self, size):
        count = size if self.chunk is None else min(size, self.chunk)
        out = bytes(self.inbound[:count])
        del self.inbound[:count]
        return out

    def close(self):
        self.closed = True


class Factory:
    def __init__(self, *ports):
        self.ports = list(ports)
        self.configs = []
        self.opened = []

    def __call__(self, config):
        self.configs.append(config)
        port = self.ports.pop(0)
        self.opened.append(port)
        return port


def reply_frame(data=b"\x00\x01\x02\x02\x20\x02"):
    return common_data_unit(ADDRESS, 0x91, data).value()


def request_frame():
    return common_data_unit(ADDRESS, 0x11, b"\x00\x01\x02\x02").value()


def test_send_writes_request_and_reads_whole_frame_in_chunks():
    reply = reply_frame()
    port = FakePort(reply, chunk=5)
    transporter = SerialTransporter(SerialConfig(name="COM13"), port_factory=Factory(port))
    request = request_frame()
    assert transporter.send(request) == reply
    assert bytes(port.written) == request
    assert not port.inbound


def test_send_without_wake_up_bytes():
    reply = reply_frame().lstrip(b"\xfe")
    port = FakePort(reply, chunk=3)
    transporter = SerialTransporter(port_factory=Factory(port))
    assert transporter.send(request_frame()) == reply


def test_send_keeps_bytes_read_beyond_frame_in_first_read():
    reply = reply_frame() + b"\x00\x00"
    port = FakePort(reply)
    handler = Serial2007Handler(port_factory=Factory(port))
    raw = handler.send(request_frame())
    assert raw == reply
    pdu = handler.decode(raw)
    assert pdu.identify() == "02020100"


def test_send_opens_port_once():
    factory = Factory(FakePort(reply_frame() * 2))
    transporter = SerialTransporter(port_factory=factory)
    transporter.send(request_frame())
    transporter.send(request_frame())
    assert len(factory.configs) == 1


def test_truncated_header_raises_frame_error():
    port = FakePort(b"\xfe" * 14)
    transporter = SerialTransporter(port_factory=Factory(port))
    with pytest.raises(FrameError):
        transporter.send(request_frame())


def test_stream_ending_mid_frame_raises_eof():
    port = FakePort(reply_frame()[:16])
    transporter = SerialTransporter(port_factory=Factory(port))
    with pytest.raises(EOFError):
        transporter.send(request_frame())


def test_open_close_cycle():
    first, second = FakePort(), FakePort()
    factory = Factory(first, second)
    transporter = SerialTransporter(port_factory=factory)
    transporter.open()
    transporter.open()
    assert transporter.is_open
    assert len(factory.opened) == 1
    transporter.close()
    transporter.close()
    assert first.closed
    assert not transporter.is_open
    transporter.open()
    assert factory.opened == [first, second]


def test_context_manager_closes_port():
    port = FakePort()
    with SerialPort(port_factory=Factory(port)) as opened:
        assert opened.is_open
    assert port.closed
    assert not opened.is_open


def test_factory_receives_config():
    config = SerialConfig(name="COM13", baud=2400, parity="E")
    factory = Factory(FakePort())
    SerialPort(config, port_factory=factory).connect()
    assert factory.configs == [config]


def test_logger_records_traffic(caplog):
    logger = logging.getLogger("tests.dlt645.transport")
    caplog.set_level(logging.INFO, logger=logger.name)
    reply = reply_frame()
    transporter = SerialTransporter(logger=logger, port_factory=Factory(FakePort(reply)))
    transporter.send(request_frame())
    assert "dlt645: sending " + request_frame().hex(" ") in caplog.text
    assert "dlt645: received " + reply.hex(" ") in caplog.text


def test_new_serial_2007_handler_defaults():
    handler = new_serial_2007_handler("COM13")
    assert handler.config.name == "COM13"
    assert handler.config.read_timeout == 0.5
    assert not handler.is_open


def test_handler_encode_decode_round_trip():
    handler = Serial2007Handler()
    pdu = common_data_unit(ADDRESS, 0x11, b"\x00\x01\x02\x02")
    decoded = handler.decode(handler.encode(pdu))
    assert decoded.address == pdu.address
    assert decoded.control == 0x11
    assert decoded.data == b"\x00\x01\x02\x02"