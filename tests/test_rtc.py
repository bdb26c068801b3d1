import pytest

from smctools.rtc import (
    CHECKSUM_ADDR1,
    CHECKSUM_ADDR2,
    HASHED_ADDR,
    TOTAL_SIZE,
    compute_checksum,
    format_dump,
    format_report,
    is_valid,
    main,
    stored_checksum,
)


def _memory(seed=7):
    return bytearray((i * seed + 3) & 0xFF for i in range(TOTAL_SIZE))


def _sealed(memory):
    memory = bytearray(memory)
    checksum = compute_checksum(memory)
    memory[CHECKSUM_ADDR1] = checksum >> 8
    memory[CHECKSUM_ADDR2] = checksum & 0xFF
    return bytes(memory)


def test_zero_memory_has_zero_checksum():
    assert compute_checksum(bytes(TOTAL_SIZE)) == 0
    assert is_valid(bytes(TOTAL_SIZE))


def test_sealed_memory_is_valid():
    memory = _sealed(_memory())
    assert is_valid(memory)
    assert stored_checksum(memory) == compute_checksum(memory)


def test_checksum_ignores_bytes_before_hashed_region():
    memory = _memory()
    changed = bytearray(memory)
    for address in range(HASHED_ADDR):
        changed[address] ^= 0xFF
    assert compute_checksum(changed) == compute_checksum(memory)


def test_checksum_ignores_checksum_bytes():
    memory = _memory()
    changed = bytearray(memory)
    changed[CHECKSUM_ADDR1] ^= 0x5A
    changed[CHECKSUM_ADDR2] ^= 0xA5
    assert compute_checksum(changed) == compute_checksum(memory)


def test_checksum_fits_sixteen_bits():
    for seed in range(1, 20):
        assert 0 <= compute_checksum(_memory(seed)) <= 0xFFFF


def test_wrong_stored_checksum_is_invalid():
    memory = bytearray(_sealed(_memory()))
    memory[CHECKSUM_ADDR2] ^= 0x01
    assert not is_valid(memory)


def test_short_memory_rejected():
    with pytest.raises(ValueError):
        compute_checksum(bytes(10))
    with pytest.raises(ValueError):
        format_dump(bytes(TOTAL_SIZE - 1))


def test_format_dump_layout():
    memory = bytes(range(TOTAL_SIZE))
    lines = format_dump(memory).splitlines()
    assert len(lines) == TOTAL_SIZE // 16
    assert lines[0] == "00: " + " ".join(f"{b:02X}" for b in range(16))
    assert lines[-1].startswith("F0: ")
    assert all(len(line.split(": ")[1].split()) == 16 for line in lines)


def test_format_report_flags_validity():
    valid = _sealed(_memory())
    assert format_report(valid).splitlines()[-1].endswith("(1)")
    invalid = bytearray(valid)
    invalid[CHECKSUM_ADDR1] ^= 0xFF
    assert format_report(invalid).splitlines()[-1].endswith("(0)")


def test_main_valid_dump(tmp_path, capsys):
    path = tmp_path / "rtc.bin"
    path.write_bytes(_sealed(_memory()))
    assert main([str(path)]) == 0
    out = capsys.readouterr().out
    assert "Checksum is" in out
    assert out.startswith("00: ")


def test_main_invalid_dump(tmp_path):
    memory = bytearray(_sealed(_memory()))
    memory[CHECKSUM_ADDR2] ^= 0x10
    path = tmp_path / "rtc.bin"
    path.write_bytes(bytes(memory))
    assert main([str(path)]) == 1


def test_main_short_dump(tmp_path, capsys):
    path = tmp_path / "rtc.bin"
    path.write_bytes(bytes(16))
    assert main([str(path)]) == 1
    assert "RTC memory read failure" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "absent.bin")]) == 1
    assert "RTC memory read failure" in capsys.readouterr().err