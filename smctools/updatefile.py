"""Conversion of textual SMC update files into flat firmware images."""

from __future__ import annotations

import re
from dataclasses import dataclass

FIRMWARE_INFO_SIZE = 32
_MIN_GROWTH = 0x1000
_FILL = 0xFF

_WHITESPACE = rb"[ \t\n\v\f\r]*"
_HEX_NUMBER = re.compile(_WHITESPACE + rb"(?:0[xX](?=[0-9A-Fa-f]))?([0-9A-Fa-f]*)")
_DEC_NUMBER = re.compile(_WHITESPACE + rb"\+?([0-9]*)")
_HEX_PAIR = re.compile(rb"[0-9A-Fa-f]{2}")
_VERSION = re.compile(
    rb"#\s*Version:\s*([0-9A-Fa-f]+)"
    rb"(?:\.\s*([0-9A-Fa-f]{1,2})(?:\s*([0-9A-Fa-f])(?:\s*([0-9A-Fa-f]+))?)?)?"
)


class UpdateParseError(ValueError):
    """Raised when an update file cannot be turned into an image."""


@dataclass(frozen=True)
class ConvertedUpdate:
    """Flat firmware image and a note on the recovered or original revision."""

    image: bytes
    revision_note: str = ""


def is_update_file(data: bytes) -> bool:
    """Whether the data looks like a textual update rather than a binary image."""
    return data[:4] == b"# Ve"


def _lines(data: bytes):
    """Complete lines only; a NUL byte or a missing final newline ends the text."""
    text = data.split(b"\0", 1)[0]
    *complete, _ = text.split(b"\n")
    return complete


def _record(line: bytes, address: int):
    """Return the new address and the hex payload (or None) of one line."""
    if line.startswith(b"D:"):
        match = _HEX_NUMBER.match(line, 2)
        digits = match.group(1)
        if digits:
            address = int(digits, 16)
            position = match.end()
        else:
            position = 2
    elif line.startswith(b"+"):
        position = 1
    else:
        return address, None

    colon = line.find(b":", position)
    if colon < 0:
        return address, None
    match = _DEC_NUMBER.match(line, colon + 1)
    if not match.group(1) or int(match.group(1)) == 0:
        return address, None
    count = int(match.group(1))
    start = match.end() + 1
    if start >= len(line):
        return address, None
    return address, (count, start)


def _decode(line: bytes, start: int, count: int) -> bytes:
    hex_text = line[start:start + 2 * count]
    pairs = _HEX_PAIR.findall(hex_text)
    if len(hex_text) != 2 * count or len(pairs) != count:
        raise UpdateParseError(
            "Failed to parse hex string for smc conversion:\n"
            + line.decode("latin-1")
        )
    return bytes(int(pair, 16) for pair in pairs)


def _recover_revision(first_line: bytes, image: bytearray) -> str:
    match = _VERSION.match(first_line)
    if not match:
        return ""
    major, minor, flag, patch = (
        int(group, 16) & 0xFFFFFFFF if group else 0 for group in match.groups()
    )
    version = f"{major:x}.{minor:x}{flag:x}{patch:x}"
    base = len(image) - FIRMWARE_INFO_SIZE
    if image[base] != _FILL:
        return f" (org {version})"
    image[base] = major & 0xFF
    image[base + 1] = minor & 0xFF
    image[base + 2] = flag & 0xFF
    image[base + 4] = patch & 0xFF
    image[base + 5] = 0
    return f" (recovered {version})"


def convert_update(data: bytes) -> ConvertedUpdate:
    """Turn an update file of address and hex records into a flat image.

    Gaps are filled with 0xFF. When the image is large enough to hold a
    firmware info trailer and the header names a version, an erased
    revision field is filled in from it.
    """
    lines = _lines(data)
    image = bytearray()
    address = 0
    written = 0

    for line in lines:
        address, payload = _record(line, address)
        if payload is None:
            continue
        count, start = payload
        end = address + count
        if len(image) < end:
            extra = max(count, _MIN_GROWTH)
            if len(image) < address:
                image.extend(bytes([_FILL]) * (address - len(image)))
            del image[address:]
            image.extend(bytes([_FILL]) * extra)
        written = max(written, end)
        image[address:end] = _decode(line, start, count)
        address = end

    if written == 0:
        raise UpdateParseError("update file holds no data records")

    image = image[:written]
    note = ""
    if written > FIRMWARE_INFO_SIZE and lines:
        note = _recover_revision(lines[0], image)
    return ConvertedUpdate(bytes(image), note)