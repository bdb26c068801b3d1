"""Listing of the key table held in an SMC firmware image or update file."""

from __future__ import annotations

import os
import sys

from smctools.firmware import KeyTableError, describe_key_values, find_key_table
from smctools.updatefile import (
    FIRMWARE_INFO_SIZE,
    UpdateParseError,
    convert_update,
    is_update_file,
)

USAGE = (
    "smcread 1.0\n\n"
    "Usage:\n"
    "smcread smc.bin\n"
    "smcread update.smc [smc.bin]\n\n"
    "Note:\n"
    "This utility tries to reconstruct certain key values.\n"
    "Be aware that some keys belong to different files:\n"
    " - RVUF is from flasher_update.smc\n"
    " - RVBF is from from flasher_base.smc\n"
    " - REV  is from Mac-XXX.smc"
)

FAILURE = -1


def render_image(image: bytes, revision_note: str = "") -> str:
    """Public keys, hidden keys and reconstructed key values of an image."""
    table = find_key_table(image)
    lines = [f"Public keys ({len(table.public)}):"]
    lines.extend(descriptor.format() for descriptor in table.public)
    lines.extend(["", f"Hidden keys ({len(table.hidden)}):"])
    lines.extend(descriptor.format() for descriptor in table.hidden)
    if len(image) > FIRMWARE_INFO_SIZE:
        lines.extend(["", "Key values:"])
        lines.extend(describe_key_values(table, image, revision_note))
    return "\n".join(lines)


def _save_image(path: str, image: bytes) -> None:
    removed = True
    try:
        os.remove(path)
    except OSError:
        removed = False
    try:
        with open(path, "wb") as handle:
            handle.write(image)
    except OSError:
        print(f"Unable to open {path} for writing", file=sys.stderr)
        if not removed:
            print(f"Make sure {path} does not exist already", file=sys.stderr)


def main(argv=None) -> int:
    """List the keys of a firmware image, converting update files first."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print(USAGE, file=sys.stderr)
        return FAILURE

    source = args[0]
    if source in ("-s", "-l"):
        print("Reading keys from a running system is not supported", file=sys.stderr)
        return FAILURE

    try:
        with open(source, "rb") as handle:
            image = handle.read()
    except OSError:
        print(f"Unable to open {source} for reading", file=sys.stderr)
        return FAILURE
    if not image:
        print(f"Unable to read {source}", file=sys.stderr)
        return FAILURE

    revision_note = ""
    if is_update_file(image):
        try:
            converted = convert_update(image)
        except UpdateParseError as exc:
            print(str(exc), file=sys.stderr)
            print(f"Unable to parse smc update {source}", file=sys.stderr)
            return FAILURE
        image = converted.image
        revision_note = converted.revision_note
        if len(args) > 1:
            _save_image(args[1], image)

    try:
        report = render_image(image, revision_note)
    except KeyTableError as exc:
        print(f"{exc} in {source}", file=sys.stderr)
        return FAILURE

    print(report)
    return 0