"""Apple RTC memory layout, checksum verification and dump formatting."""

from __future__ import annotations

import argparse
import sys

RTC_ADDRESS_SECONDS = 0x00
RTC_ADDRESS_SECONDS_ALARM = 0x01
RTC_ADDRESS_MINUTES = 0x02
RTC_ADDRESS_MINUTES_ALARM = 0x03
RTC_ADDRESS_HOURS = 0x04
RTC_ADDRESS_HOURS_ALARM = 0x05
RTC_ADDRESS_DAY_OF_THE_WEEK = 0x06
RTC_ADDRESS_DAY_OF_THE_MONTH = 0x07
RTC_ADDRESS_MONTH = 0x08
RTC_ADDRESS_YEAR = 0x09
RTC_ADDRESS_REGISTER_A = 0x0A
RTC_ADDRESS_REGISTER_B = 0x0B
RTC_ADDRESS_REGISTER_C = 0x0C
RTC_ADDRESS_REGISTER_D = 0x0D

BG_COLOUR_ADDR1 = 0x30
BG_COLOUR_ADDR2 = 0x31
HASHED_ADDR = 0x0E
TOTAL_SIZE = 0x100
CHECKSUM_ADDR1 = 0x58
CHECKSUM_ADDR2 = 0x59
BOOT_STATUS_ADDR = 0x5C
HIBERNATION_KEY_ADDR = 0x80
HIBERNATION_KEY_LEN = 0x2C
BLESS_BOOT_TARGET = 0xAC
RECOVERYCHECK_STATUS = 0xAF
POWER_BYTES_ADDR = 0xB0
POWER_BYTE_PM_ADDR = 0xB4
POWER_BYTES_LEN = 0x08
HDD_UNWRAP_KEY_ADDR = 0xD0
HDD_UNWRAP_KEY_LEN = 0x20
HDD_UNWRAP_STAT_ADDR = 0xF0

_LINE_WIDTH = 16


def _checked(memory: bytes) -> bytes:
    if len(memory) < TOTAL_SIZE:
        raise ValueError(f"RTC memory must hold {TOTAL_SIZE} bytes, got {len(memory)}")
    return bytes(memory[:TOTAL_SIZE])


def compute_checksum(memory: bytes) -> int:
    """Checksum over the hashed region, skipping the two checksum bytes."""
    memory = _checked(memory)
    checksum = 0
    for address in range(HASHED_ADDR, TOTAL_SIZE):
        if address not in (CHECKSUM_ADDR1, CHECKSUM_ADDR2):
            checksum ^= memory[address]
        for _ in range(7):
            odd = checksum & 1
            checksum = (checksum & 0xFFFE) >> 1
            if odd:
                checksum ^= 0x2001
    return checksum


def stored_checksum(memory: bytes) -> int:
    """The checksum recorded in RTC memory."""
    memory = _checked(memory)
    return (memory[CHECKSUM_ADDR1] << 8) | memory[CHECKSUM_ADDR2]


def is_valid(memory: bytes) -> bool:
    """Whether the recorded checksum matches the computed one."""
    return compute_checksum(memory) == stored_checksum(memory)


def format_dump(memory: bytes) -> str:
    """Hex dump of RTC memory, sixteen bytes per line."""
    memory = _checked(memory)
    lines = []
    for offset in range(0, TOTAL_SIZE, _LINE_WIDTH):
        row = " ".join(f"{byte:02X}" for byte in memory[offset:offset + _LINE_WIDTH])
        lines.append(f"{offset:02X}: {row}")
    return "\n".join(lines)


def format_report(memory: bytes) -> str:
    """Hex dump followed by the checksum comparison line."""
    memory = _checked(memory)
    checksum = compute_checksum(memory)
    valid = checksum == stored_checksum(memory)
    summary = (
        f"Checksum is {checksum >> 8:02X} {checksum & 0xFF:02X} vs "
        f"{memory[CHECKSUM_ADDR1]:02X} {memory[CHECKSUM_ADDR2]:02X} from rtc ({int(valid)})"
    )
    return f"{format_dump(memory)}\n{summary}"


def _read_memory(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as handle:
        return handle.read()


def main(argv=None) -> int:
    """Print an RTC memory dump and report whether its checksum holds."""
    parser = argparse.ArgumentParser(
        prog="rtcread", description="Dump RTC memory and verify its checksum."
    )
    parser.add_argument(
        "dump", nargs="?", default="-",
        help="file holding 256 bytes of RTC memory, '-' for standard input",
    )
    args = parser.parse_args(argv)

    try:
        memory = _read_memory(args.dump)
    except OSError as exc:
        print(f"RTC memory read failure: {exc}", file=sys.stderr)
        return 1

    if len(memory) < TOTAL_SIZE:
        print(
            f"RTC memory read failure: expected {TOTAL_SIZE} bytes, got {len(memory)}",
            file=sys.stderr,
        )
        return 1

    print(format_report(memory))
    return 0 if is_valid(memory) else 1