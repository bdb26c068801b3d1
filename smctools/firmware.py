"""SMC firmware image key tables and the firmware info trailer."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

from smctools.updatefile import FIRMWARE_INFO_SIZE

_DESCRIPTOR = struct.Struct("<4sBBH4sI")
_HEADER = struct.Struct("<II")
_FIRMWARE_INFO = struct.Struct("<6s8s8sH4sI")

DESCRIPTOR_SIZE = _DESCRIPTOR.size
HEADER_SIZE = _HEADER.size

_KEY_MARKER = b"#KEY"
_ERASED = 0xFF

_VALID_CHARS = frozenset(
    b" !#$*+"
    + bytes(range(0x30, 0x3A))
    + bytes(range(0x41, 0x60))
    + bytes(range(0x61, 0x7C))
)


class KeyTableError(ValueError):
    """Raised when no usable key table is found in an image."""


class KeyAttribute(enum.IntFlag):
    """Attribute bits of an SMC key."""

    PRIVATE_WRITE = 0x1
    PRIVATE_READ = 0x2
    ATOMIC = 0x4
    CONST = 0x8
    FUNCTION = 0x10
    UNK20 = 0x20
    WRITE = 0x40
    READ = 0x80


def attribute_names(attr: int) -> str:
    """Names of the attribute bits that are set, joined with '|'."""
    return "|".join(
        f"ATTR_{flag.name}" for flag in KeyAttribute if attr & flag.value
    )


def _c_string(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("latin-1")


@dataclass(frozen=True)
class KeyDescriptor:
    """One sixteen-byte entry of the firmware key table."""

    key: bytes
    attr: int
    length: int
    zero: int
    data_type: bytes
    handler: int

    @classmethod
    def from_bytes(cls, data: bytes) -> KeyDescriptor:
        if len(data) < DESCRIPTOR_SIZE:
            raise ValueError(
                f"key descriptor needs {DESCRIPTOR_SIZE} bytes, got {len(data)}"
            )
        return cls(*_DESCRIPTOR.unpack_from(data))

    def to_bytes(self) -> bytes:
        return _DESCRIPTOR.pack(
            self.key, self.attr, self.length, self.zero, self.data_type, self.handler
        )

    @property
    def name(self) -> str:
        return _c_string(self.key)

    def format(self) -> str:
        """One listing line for the descriptor."""
        shown = self.data_type[:3] + (self.data_type[3:4] if self.data_type[3] else b"?")
        type_hex = "".join(f"{byte:02X}" for byte in self.data_type)
        return (
            f"[{self.name}] type [{shown.decode('latin-1')}] {type_hex} "
            f"len [{self.length:2d}] attr [{self.attr:02X}] handler [{self.handler:08X}]"
            f" -> {attribute_names(self.attr)}"
        )


def is_valid_descriptor(descriptor: KeyDescriptor) -> bool:
    """Whether a descriptor looks like a real key table entry."""
    return (
        all(byte in _VALID_CHARS for byte in descriptor.key)
        and all(byte in _VALID_CHARS for byte in descriptor.data_type[:3])
        and (descriptor.data_type[3] in _VALID_CHARS or descriptor.data_type[3] == 0)
        and descriptor.zero == 0
    )


def _valid_at(image: bytes, position: int) -> bool:
    if image[position] not in _VALID_CHARS:
        return False
    return is_valid_descriptor(KeyDescriptor.from_bytes(image[position:position + DESCRIPTOR_SIZE]))


@dataclass(frozen=True)
class KeyTable:
    """Public and hidden key descriptors found in an image."""

    offset: int
    public: tuple[KeyDescriptor, ...]
    hidden: tuple[KeyDescriptor, ...] = ()
    flasher: bool = False

    def keys(self) -> tuple[str, ...]:
        """Names of all keys, public ones first."""
        return tuple(descriptor.name for descriptor in self.public + self.hidden)


def _find_marker(image: bytes) -> int | None:
    position = image.find(_KEY_MARKER, HEADER_SIZE + 1)
    if position < 0 or position + DESCRIPTOR_SIZE >= len(image):
        return None
    return position - HEADER_SIZE


def _find_flasher_table(image: bytes) -> int | None:
    for position in range(HEADER_SIZE + 1, len(image) - 3 * DESCRIPTOR_SIZE):
        if _valid_at(image, position):
            return position - HEADER_SIZE
    return None


def _count_descriptors(image: bytes, start: int) -> int:
    count = 0
    position = start
    while position + DESCRIPTOR_SIZE < len(image) and _valid_at(image, position):
        count += 1
        position += DESCRIPTOR_SIZE
    return count


def _bswap32(value: int) -> int:
    return int.from_bytes(value.to_bytes(4, "little"), "big")


def find_key_table(image: bytes) -> KeyTable:
    """Locate the key table, by its #KEY entry or, for flashers, by shape."""
    image = bytes(image)
    offset = _find_marker(image)
    flasher = offset is None
    if flasher:
        offset = _find_flasher_table(image)
        if offset is None:
            raise KeyTableError("Unable to locate smc key table")
        public = _count_descriptors(image, offset + HEADER_SIZE)
        private = 0
    else:
        public, private = _HEADER.unpack_from(image, offset)
        # Older firmware stores the counts big-endian.
        if private and not private & 0xFFFF:
            public, private = _bswap32(public), _bswap32(private)

    start = offset + HEADER_SIZE
    total = (public + private) * DESCRIPTOR_SIZE
    if len(image) - start < total:
        raise KeyTableError("Unable to parse smc key table")

    descriptors = [
        KeyDescriptor.from_bytes(image[position:position + DESCRIPTOR_SIZE])
        for position in range(start, start + total, DESCRIPTOR_SIZE)
    ]
    return KeyTable(offset, tuple(descriptors[:public]), tuple(descriptors[public:]), flasher)


@dataclass(frozen=True)
class FirmwareRevision:
    """Revision bytes at the start of the firmware info trailer."""

    major: int
    minor: int
    module: int
    unk: int
    patch1: int
    patch2: int

    @classmethod
    def from_bytes(cls, data: bytes) -> FirmwareRevision:
        if len(data) < 6:
            raise ValueError("firmware revision needs 6 bytes")
        return cls(*data[:6])

    @property
    def patch(self) -> int:
        return self.patch1 if self.patch1 > 0 else self.patch2

    @property
    def hex_text(self) -> str:
        return f"{self.major:02X}{self.minor:02X}{self.module:02X}{self.unk:02X}{self.patch:04X}"

    @property
    def version_text(self) -> str:
        return f"{self.major:x}.{self.minor:x}{self.module:x}{self.patch:x}"


@dataclass(frozen=True)
class FirmwareInfo:
    """The 32-byte trailer at the end of a firmware image."""

    revision: FirmwareRevision
    branch: bytes
    platform: bytes
    unk1: int
    adler32: bytes
    unk2: int

    @classmethod
    def from_image(cls, image: bytes) -> FirmwareInfo:
        if len(image) < FIRMWARE_INFO_SIZE:
            raise ValueError(f"image is shorter than {FIRMWARE_INFO_SIZE} bytes")
        rev, branch, platform, unk1, adler32, unk2 = _FIRMWARE_INFO.unpack_from(
            image, len(image) - FIRMWARE_INFO_SIZE
        )
        return cls(FirmwareRevision.from_bytes(rev), branch, platform, unk1, adler32, unk2)


def _hex(raw: bytes) -> str:
    return "".join(f"{byte:02X}" for byte in raw)


def describe_key_values(table: KeyTable, image: bytes, revision_note: str = "") -> list[str]:
    """Values of well-known keys reconstructed from the firmware info trailer."""
    if len(image) <= FIRMWARE_INFO_SIZE:
        return []
    info = FirmwareInfo.from_image(image)
    present = {descriptor.key for descriptor in table.public}
    revision = info.revision
    lines = []

    if b"#KEY" in present:
        count = len(table.public)
        lines.append(f"[#KEY] is {_bswap32(count):08X} -> {count}")
    for key, label in ((b"RVBF", "RVBF"), (b"RVUF", "RVUF"), (b"REV ", "REV ")):
        if key in present:
            lines.append(
                f"[{label}] is {revision.hex_text} -> {revision.version_text}{revision_note}"
            )
    if b"LDKN" in present:
        lines.append(f"[LDKN] is {revision.major:02X} -> {revision.major:x}")
    if b"RBr " in present and info.branch[0] != _ERASED:
        lines.append(f"[RBr ] is {_hex(info.branch)} -> {_c_string(info.branch)}")
    if b"RPlt" in present and info.platform[0] != _ERASED:
        lines.append(f"[RPlt] is {_hex(info.platform)} -> {_c_string(info.platform)}")
    if info.adler32 != b"\xff\xff\xff\xff":
        lines.append(f"[CRC?] is {_hex(info.adler32)}")
    return lines