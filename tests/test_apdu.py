import pytest
from idemix_card.library.transport.apdu import CommandAPDU, ResponseAPDU
from idemix_card.library.types.errors import InvalidArgumentError, TransmissionError


def test_header_only_command() -> None:
    """Test a case 1 command, as used to fetch proof values."""
    assert CommandAPDU(0x80, 0x17, 0x01, 0x00).to_bytes() == bytes.fromhex("80170100")


def test_short_command_with_data_and_le() -> None:
    """Test the SELECT frame of the Idemix applet."""
    command = CommandAPDU(0x00, 0xA4, 0x04, 0x00, b"idemix", 256)
    assert command.to_bytes() == bytes.fromhex("00A4040006") + b"idemix" + b"\x00"


def test_short_command_with_le_only() -> None:
    """Test a case 2 command."""
    assert CommandAPDU(0x80, 0x18, ne=16).to_bytes() == bytes.fromhex("8018000010")


def test_extended_command_for_long_data() -> None:
    """Test that data over 255 bytes switches to extended length."""
    data = bytes(341)
    raw = CommandAPDU(0x80, 0x19, 0x02, 0x00, data).to_bytes()
    assert raw[:7] == bytes.fromhex("80190200000155")
    assert len(raw) == 7 + 341


def test_extended_command_with_data_and_le() -> None:
    """Test that an extended frame carries a two byte Le."""
    raw = CommandAPDU(0x80, 0x11, data=bytes(256), ne=512).to_bytes()
    assert raw[4:7] == bytes.fromhex("000100")
    assert raw[-2:] == bytes.fromhex("0200")


def test_command_rejects_wide_header_bytes() -> None:
    """Test that P1 must fit in a byte."""
    with pytest.raises(InvalidArgumentError):
        CommandAPDU(0x80, 0x14, 256, 0x00)


def test_response_split() -> None:
    """Test that the last two bytes are the status word."""
    response = ResponseAPDU.from_bytes(bytes.fromhex("0102039000"))
    assert response.data == b"\x01\x02\x03"
    assert response.sw == 0x9000
    assert response.to_bytes() == bytes.fromhex("0102039000")


def test_response_without_status_word() -> None:
    """Test that a truncated response is a transmission failure."""
    with pytest.raises(TransmissionError):
        ResponseAPDU.from_bytes(b"\x90")
