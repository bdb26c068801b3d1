"""SMC key names and the decoding of raw SMC values into readable numbers."""

from __future__ import annotations

from dataclasses import dataclass

VERSION = "1.01"

DATATYPE_FPE2 = "fpe2"
DATATYPE_UINT8 = "ui8 "
DATATYPE_UINT16 = "ui16"
DATATYPE_UINT32 = "ui32"
DATATYPE_SINT8 = "si8 "
DATATYPE_SINT16 = "si16"
DATATYPE_SINT32 = "si32"
DATATYPE_SP78 = "sp78"

UINT_TYPES = frozenset({DATATYPE_UINT8, DATATYPE_UINT16, DATATYPE_UINT32})
SINT_TYPES = frozenset({DATATYPE_SINT8, DATATYPE_SINT16, DATATYPE_SINT32})

KEY_SIZE = 4
MAX_VALUE_SIZE = 32


def _name_bytes(text: str) -> bytes:
    return text.encode("latin-1")


def key_to_int(key: str) -> int:
    """Pack a four-character SMC key into its 32-bit big-endian identifier."""
    raw = _name_bytes(key)
    if len(raw) != KEY_SIZE:
        raise ValueError(f"SMC key must be {KEY_SIZE} characters long, got {key!r}")
    return int.from_bytes(raw, "big")


def int_to_key(value: int) -> str:
    """Unpack a 32-bit identifier into its key name, stopping at the first NUL."""
    raw = (value & 0xFFFFFFFF).to_bytes(KEY_SIZE, "big")
    return raw.split(b"\0", 1)[0].decode("latin-1")


def fpe2_to_float(data: bytes) -> float:
    """Decode an unsigned 14.2 fixed point value; anything not two bytes long is 0."""
    if len(data) != 2:
        return 0.0
    return int.from_bytes(data, "big") / 4.0


def decode_uint(data: bytes) -> int:
    """Decode a big-endian unsigned integer, keeping the low 64 bits."""
    return int.from_bytes(data[-8:], "big")


def decode_sint(data: bytes) -> int:
    """Decode a big-endian two's complement integer, keeping the low 64 bits."""
    if not data:
        return 0
    return int.from_bytes(data[-8:], "big", signed=True)


def sp_integral(data_type: str) -> int:
    """Number of integral bits of a signed fixed point type such as ``sp78``.

    The characters between the ``sp`` prefix and the last character are
    packed big-endian and the result is divided by 16.
    """
    raw = _name_bytes(data_type)
    if len(raw) < 3:
        return 0
    return int.from_bytes(raw[2:-1], "big") // 16


def decode_sp(data_type: str, data: bytes) -> float | None:
    """Decode a signed fixed point value, or None when the type has no integral bits."""
    integral = sp_integral(data_type)
    if integral == 0:
        return None
    if integral > 15:
        raise ValueError(f"unsupported fixed point type {data_type!r}")
    if len(data) < 2:
        raise ValueError("signed fixed point values need two bytes")
    value = (data[0] << 8) | data[1]
    result = (value & 0x7FFF) / float(1 << (15 - integral))
    return -result if value & 0x8000 else result


def parse_hex_value(text: str) -> bytes:
    """Parse a hex string into value bytes; an odd leading digit forms its own byte."""
    if len(text) % 2:
        text = "0" + text
    try:
        data = bytes.fromhex(text)
    except ValueError as exc:
        raise ValueError(f"invalid hex value {text!r}") from exc
    if any(ch.isspace() for ch in text):
        raise ValueError(f"invalid hex value {text!r}")
    if len(data) > MAX_VALUE_SIZE:
        raise ValueError(f"value is longer than {MAX_VALUE_SIZE} bytes")
    return data


@dataclass(frozen=True)
class SmcValue:
    """A key together with its type name and raw bytes."""

    key: str
    data_type: str
    data: bytes = b""

    @property
    def data_size(self) -> int:
        return len(self.data)

    def decoded(self) -> int | float | None:
        """The value as a number, or None when the type is not a numeric one."""
        if not self.data:
            return None
        if self.data_type in UINT_TYPES:
            return decode_uint(self.data)
        if self.data_type in SINT_TYPES:
            return decode_sint(self.data)
        if self.data_type == DATATYPE_FPE2:
            return fpe2_to_float(self.data)
        if self.data_type.startswith("sp"):
            return decode_sp(self.data_type, self.data)
        return None


def format_value(value: SmcValue) -> str:
    """Render a value as one listing line: key, type, decoded number and raw bytes."""
    head = f"  {value.key}  [{value.data_type:<4}]  "
    if not value.data:
        return head + "no data"

    decoded = value.decoded()
    if decoded is None:
        number = ""
    elif value.data_type in UINT_TYPES or value.data_type in SINT_TYPES:
        number = f"{decoded} "
    elif value.data_type == DATATYPE_FPE2:
        number = f"{decoded:.0f} "
    else:
        number = f"{decoded:f} "

    hex_bytes = "".join(f" {byte:02x}" for byte in value.data)
    return f"{head}{number}(bytes{hex_bytes})"