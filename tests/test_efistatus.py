import pytest

from smctools.efistatus import (
    RTC_KEY_SIZE,
    EncryptionInfo,
    StatusInfo,
)


def test_status_default_wire_bytes():
    assert StatusInfo().to_bytes() == b"VSMC\x01\x00\x00\x00"


def test_status_default_is_valid():
    assert StatusInfo().is_valid() is True


def test_status_round_trip():
    info = StatusInfo(b"ABCD", 7)
    assert StatusInfo.from_bytes(info.to_bytes()) == info


def test_status_accepts_trailing_bytes():
    info = StatusInfo.from_bytes(b"VSMC\x01\x00\x00\x00extra")
    assert info.is_valid() is True
    assert info.revision == 1


def test_status_too_short_raises():
    with pytest.raises(ValueError):
        StatusInfo.from_bytes(b"VSMC\x01")


def test_status_wrong_magic_invalid():
    assert StatusInfo.from_bytes(b"XSMC\x01\x00\x00\x00").is_valid() is False


def test_status_wrong_revision_invalid():
    assert StatusInfo.from_bytes(b"VSMC\x02\x00\x00\x00").is_valid() is False


def test_status_bad_magic_length_raises():
    with pytest.raises(ValueError):
        StatusInfo(b"VSM", 1)


def test_encryption_plain_bytes():
    info = EncryptionInfo(b"\x01\x02", encrypted=False)
    assert info.to_bytes() == b"VSPT\x01\x02"


def test_encryption_encrypted_bytes():
    info = EncryptionInfo(b"\x01\x02", encrypted=True)
    assert info.to_bytes() == b"VSEN\x01\x02"


@pytest.mark.parametrize("encrypted", [True, False])
def test_encryption_round_trip(encrypted):
    info = EncryptionInfo(bytes(range(32)), encrypted)
    restored = EncryptionInfo.from_bytes(info.to_bytes())
    assert restored == info
    assert len(info.to_bytes()) == 4 + 32


def test_encryption_unknown_magic_raises():
    with pytest.raises(ValueError):
        EncryptionInfo.from_bytes(b"NOPE\x00")


def test_rtc_key_sized_payload_round_trip():
    payload = bytes(range(RTC_KEY_SIZE))
    info = EncryptionInfo(payload, encrypted=True)
    wire = info.to_bytes()
    assert len(wire) == 4 + 16
    assert wire[:4] == b"VSEN"
    assert EncryptionInfo.from_bytes(wire) == info