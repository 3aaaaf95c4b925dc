# dlt645

A small client for electricity meters that speak the DL/T 645-2007 protocol
over a serial line, which is typically RS-485.

The package does the following:

- It builds and parses protocol frames.
- It applies and removes the 0x33 data offset.
- It computes and checks the frame checksum.
- It converts between digit strings and BCD bytes.
- It decodes BCD readings into floating point values.
- It exchanges frames with a meter through a serial port, using `pyserial`.

## Installation

```
pip install .
```

## Modules

| Module | Contents |
| --- | --- |
| `dlt645.binary` | `string_to_bcd_bytes`, `bcd_bytes_to_string`, `bytes_add`, `bytes_sub`, `bytes_reverse` |
| `dlt645.format` | `bcd_bytes_to_float` |
| `dlt645.frame` | `Protocol2007DataUnit`, `common_data_unit`, `parse_data_unit`, `Dlt6452007Packager`, and the errors `Dlt645Error`, `FrameError`, `ChecksumError`, `ResponseError` |
| `dlt645.readers` | `read_at_least`, `read_full`, `ReadTimeoutError` |
| `dlt645.transport` | `SerialConfig`, `SerialPort`, `SerialTransporter`, `Serial2007Handler`, `new_serial_2007_handler` |
| `dlt645.client` | `Dlt645Client` |

## Reading a value from a meter

```python
from dlt645.client import Dlt645Client
from dlt645.transport import new_serial_2007_handler

handler = new_serial_2007_handler("/dev/ttyUSB0")
handler.config.baud = 2400
handler.config.parity = "E"

with Dlt645Client(handler) as client:
    # meter address and data identifier, both as BCD digit strings
    raw = client.read_data("000000000010", "02020100")
```

`new_serial_2007_handler` returns a handler that reads from the serial line
with a 0.5 second timeout. Its `config` is a `SerialConfig`, which has these
fields:

- `name`
- `baud`
- `size`
- `parity`
- `stop_bits`
- `read_timeout`

The port opens when you call `open()` or when the first request is sent.

`read_data` returns the data field of the response, with the 0x33 offset
already removed. The data identifier comes first, in its first four bytes in
reverse order, and the reading follows it.

## Writing a parameter

```python
client.set_param("000000000010", "04000104", bytes(8) + b"\x01")
```

Pass the data without the 0x33 offset. The client adds the offset when it
encodes the frame.

## Custom frames

```python
from dlt645.frame import common_data_unit

# broadcast "read address" request
pdu = common_data_unit(bytes.fromhex("999999999999"), 0x13, b"")
address_reply = client.send(pdu)
```

`Dlt645Client.send` accepts only a `Protocol2007DataUnit`. Any other type
raises `TypeError`.

`Protocol2007DataUnit.value()` returns the encoded frame, which begins with the
`FE FE FE FE` wake-up preamble. It also updates the frame's `length` and `cs`
fields.

`parse_data_unit()` turns received bytes back into a data unit.
`Protocol2007DataUnit.identify()` returns the data identifier as a hex string.

## Errors

The client methods raise errors from `dlt645.frame`, all of which derive from
`Dlt645Error`:

- `FrameError` is raised when the response does not start with the frame start
  byte, or when the response is truncated.
- `ChecksumError` is raised when the checksum does not match.
- `ResponseError` is raised when the meter answered with an error control code.
  This is the request's control code plus 0xC0. The error data is kept in
  `ResponseError.data`.

Reading from the serial line can raise these errors:

- `dlt645.readers.ReadTimeoutError` is raised when the response does not arrive
  within 0.5 seconds. It is a subclass of `TimeoutError`.
- `EOFError` is raised when the stream ends.
- Errors from `pyserial` itself are passed on unchanged.

## Testing without a serial device

`SerialPort` and its subclasses accept a `port_factory`. This is a callable
that takes the `SerialConfig` and returns any object with these methods:

- `write(data)`
- `read(size)`
- `close()`

A scripted fake object of this kind can stand in for a real meter.

## Helpers

```python
from dlt645.binary import string_to_bcd_bytes, bcd_bytes_to_string, bytes_reverse
from dlt645.format import bcd_bytes_to_float

string_to_bcd_bytes("1234")               # b"\x12\x34"
string_to_bcd_bytes("1")                  # b"\x01"
bcd_bytes_to_string(b"\x98\x76\x54")       # "987654"
bytes_reverse(b"\x01\x02\x03")             # b"\x03\x02\x01"

# little-endian BCD with two decimal places; the top bit of the last byte
# marks a negative value when allow_negative is true
bcd_bytes_to_float(b"\x12\x94", 2, False)  # 94.12
bcd_bytes_to_float(b"\x12\x94", 2, True)   # -14.12
```

## What it does not do

This is a library only.

- It has no command-line tool.
- It speaks only the 2007 edition of the protocol.
- It talks to meters only over a serial port. There is no TCP or other network
  transport.

## Running the tests

```
pip install .[test]
pytest
```