# smctools

Offline tools for data that comes from the System Management Controller
(SMC) and the Apple real-time clock memory:

- decoding raw SMC key values of the types `fpe2`, `ui8 `, `ui16`, `ui32`,
  `si8 `, `si16`, `si32` and the `sp..` signed fixed-point types;
- computing and checking the checksum that protects 256 bytes of Apple RTC
  memory, and dumping that memory as hex;
- reading and writing the status (`VSMC`) and hibernation key (`VSPT` /
  `VSEN`) records kept in NVRAM;
- converting textual SMC update files into flat binary images;
- locating and listing the key table inside an SMC firmware image.

Only the Python standard library is needed; Python 3.10 or later.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Commands

### smcread

```
smcread smc.bin
smcread update.smc [smc.bin]
```

Reads a firmware image and prints its public and hidden keys, one line per
key with its type, length, attribute byte, handler address and attribute
names. When the image is longer than 32 bytes it then prints the values of
well-known keys (`#KEY`, `RVBF`, `RVUF`, `REV `, `LDKN`, `RBr `, `RPlt`)
reconstructed from the firmware info trailer at the end of the image, and
the trailer's checksum field when it is not erased.

A file starting with `# Ve` is treated as a textual update file and
converted first; if a second path is given, the converted image is written
there (replacing any existing file). When the update header names a version
and the revision field of the image is erased, it is filled in and the
listing says "recovered"; otherwise it says "org".

Images without a `#KEY` entry (flasher images) are searched for a run of
entries that look like key descriptors. Without arguments the command prints
its usage. It exits with status 0 on success and -1 (255) on failure.

### rtcread

```
rtcread rtc.bin
rtcread < rtc.bin
```

Reads 256 bytes of RTC memory from a file, or from standard input when no
path or `-` is given, prints a hex dump of 16 bytes per line and then a line
comparing the computed checksum with the one stored at offsets `0x58` and
`0x59`. Exits with 0 when they agree and 1 when they do not or the input is
short or unreadable.

## Library

`smctools.smcvalue`:

```python
from smctools.smcvalue import (
    SmcValue, decode_sint, decode_sp, decode_uint, format_value,
    fpe2_to_float, int_to_key, key_to_int, parse_hex_value,
)

fpe2_to_float(bytes([0x1F, 0x40]))      # 2000.0
decode_uint(bytes([0x00, 0x10]))        # 16
decode_sint(bytes([0xFF, 0xFE]))        # -2
int_to_key(key_to_int("FNum"))          # "FNum"
parse_hex_value("abc")                  # b"\x0a\xbc"
print(format_value(SmcValue("FNum", "ui8 ", b"\x02")))
```

`SmcValue.decoded()` returns the number for numeric types and `None`
otherwise. `decode_sp(data_type, data)` decodes the `sp..` types, taking the
number of integral bits from the type name via `sp_integral`.

`smctools.rtc`: `compute_checksum`, `stored_checksum`, `is_valid`,
`format_dump` and `format_report`, each taking at least 256 bytes of memory
and raising `ValueError` for less.

`smctools.efistatus`: `StatusInfo.from_bytes(...)`, `.is_valid()` and
`.to_bytes()`; `EncryptionInfo.from_bytes(...)` and `.to_bytes()`, with the
`encrypted` flag chosen by the record's magic.

```python
from smctools.efistatus import StatusInfo

StatusInfo.from_bytes(b"VSMC\x01\x00\x00\x00").is_valid()   # True
```

`smctools.updatefile`: `is_update_file(data)` and `convert_update(data)`,
which returns a `ConvertedUpdate` with `image` and `revision_note`, or raises
`UpdateParseError`.

`smctools.firmware`: `find_key_table(image)` returns a `KeyTable` (`public`,
`hidden`, `offset`, `flasher`, `keys()`) or raises `KeyTableError`;
`KeyDescriptor`, `KeyAttribute`, `attribute_names`, `is_valid_descriptor`,
`FirmwareInfo.from_image` and `describe_key_values`.

`smctools.smcread.render_image(image, revision_note)` returns the full
listing that the `smcread` command prints.

## What it does not do

The package works on bytes and files only. It does not talk to a running
machine: it cannot read or write live SMC keys, scan or fuzz SMC keys, read
or write RTC memory, or access NVRAM variables. `smcread -s` and
`smcread -l` are rejected with an error. Likewise, it does not generate or
encrypt hibernation keys; `EncryptionInfo` only packs and unpacks records.