"""NVRAM records used to hand the hibernation key to firmware."""

from __future__ import annotations

import struct
import uuid
from dataclasses import dataclass
from typing import ClassVar

APPLE_VENDOR_GUID = uuid.UUID("4D1EDE05-38C7-4A6A-9CC6-4BCCA8B38C14")

ROM_KEY = "ROM"
MLB_KEY = "MLB"
STATUS_KEY = "vsmc-status"
ENCRYPTION_KEY = "vsmc-key"

RTC_KEY_OFFSET = 0xD0
RTC_KEY_SIZE = 16

MAGIC_SIZE = 4


@dataclass(frozen=True)
class StatusInfo:
    """Firmware backend status published in the read-only NVRAM variable."""

    MAGIC: ClassVar[bytes] = b"VSMC"
    REVISION: ClassVar[int] = 1
    MAX_DIFF: ClassVar[int] = 15 * 60
    _LAYOUT: ClassVar[struct.Struct] = struct.Struct("<4sI")

    magic: bytes = MAGIC
    revision: int = REVISION

    def __post_init__(self) -> None:
        if len(self.magic) != MAGIC_SIZE:
            raise ValueError(f"status magic must be {MAGIC_SIZE} bytes long")
        if not 0 <= self.revision <= 0xFFFFFFFF:
            raise ValueError("status revision must fit in 32 bits")

    @classmethod
    def size(cls) -> int:
        return cls._LAYOUT.size

    @classmethod
    def from_bytes(cls, data: bytes) -> StatusInfo:
        """Read a status record; trailing bytes beyond the record are ignored."""
        if len(data) < cls._LAYOUT.size:
            raise ValueError(
                f"status record needs {cls._LAYOUT.size} bytes, got {len(data)}"
            )
        magic, revision = cls._LAYOUT.unpack_from(data)
        return cls(magic, revision)

    def is_valid(self) -> bool:
        """Whether the magic and the revision are the supported ones."""
        return self.magic == self.MAGIC and self.revision == self.REVISION

    def to_bytes(self) -> bytes:
        return self._LAYOUT.pack(self.magic, self.revision)


@dataclass(frozen=True)
class EncryptionInfo:
    """Hibernation key record stored in the write-only NVRAM variable."""

    MAGIC_PLAIN: ClassVar[bytes] = b"VSPT"
    MAGIC_ENCRYPTED: ClassVar[bytes] = b"VSEN"

    data: bytes
    encrypted: bool = False

    @property
    def magic(self) -> bytes:
        return self.MAGIC_ENCRYPTED if self.encrypted else self.MAGIC_PLAIN

    @classmethod
    def from_bytes(cls, data: bytes) -> EncryptionInfo:
        """Read a key record, telling plain and encrypted payloads apart by magic."""
        magic = bytes(data[:MAGIC_SIZE])
        if magic == cls.MAGIC_ENCRYPTED:
            encrypted = True
        elif magic == cls.MAGIC_PLAIN:
            encrypted = False
        else:
            raise ValueError(f"unknown encryption info magic {magic!r}")
        return cls(bytes(data[MAGIC_SIZE:]), encrypted)

    def to_bytes(self) -> bytes:
        return self.magic + bytes(self.data)