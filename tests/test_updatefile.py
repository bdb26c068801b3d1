import pytest

from smctools.updatefile import (
    ConvertedUpdate,
    UpdateParseError,
    convert_update,
    is_update_file,
)

HEADER = b"# Version: 2.15f7\n"


def test_is_update_file():
    assert is_update_file(HEADER) is True
    assert is_update_file(b"\x00\x01\x02\x03") is False


def test_single_record():
    result = convert_update(HEADER + b"D:0000:4:DEADBEEF\n")
    assert result == ConvertedUpdate(bytes.fromhex("DEADBEEF"), "")


def test_continuation_record_appends():
    text = HEADER + b"D:0000:2:0102\n+:2:0304\n"
    assert convert_update(text).image == bytes([1, 2, 3, 4])


def test_gap_filled_with_ff():
    text = HEADER + b"D:0000:2:0102\nD:0010:2:0304\n"
    image = convert_update(text).image
    assert len(image) == 0x12
    assert image[:2] == bytes([1, 2])
    assert image[2:0x10] == b"\xff" * 14
    assert image[0x10:] == bytes([3, 4])


def test_line_without_newline_ignored():
    text = HEADER + b"D:0000:2:0102\n+:2:0304"
    assert convert_update(text).image == bytes([1, 2])


def test_bad_hex_raises():
    with pytest.raises(UpdateParseError):
        convert_update(HEADER + b"D:0000:2:01ZZ\n")


def test_short_hex_raises():
    with pytest.raises(UpdateParseError):
        convert_update(HEADER + b"D:0000:4:0102\n")


def test_no_records_raises():
    with pytest.raises(UpdateParseError):
        convert_update(HEADER + b"just text\n")


def test_revision_recovered_when_erased():
    text = HEADER + b"D:0000:40:" + b"FF" * 40 + b"\n"
    result = convert_update(text)
    assert result.revision_note == " (recovered 2.15f7)"
    assert len(result.image) == 40
    assert result.image[8:14] == bytes([0x02, 0x15, 0x0F, 0xFF, 0x07, 0x00])
    assert result.image[:8] == b"\xff" * 8


def test_revision_kept_when_present():
    payload = b"00" * 40
    result = convert_update(HEADER + b"D:0000:40:" + payload + b"\n")
    assert result.revision_note == " (org 2.15f7)"
    assert result.image == bytes(40)


def test_small_image_gets_no_note():
    result = convert_update(HEADER + b"D:0000:32:" + b"FF" * 32 + b"\n")
    assert result.revision_note == ""
    assert result.image == b"\xff" * 32