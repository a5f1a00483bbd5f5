from idemix_card.library.types.errors import (
    EncodingOverflowError,
    InvalidArgumentError,
)

###
# Unsigned, Big-Endian Encoding Of Protocol Integers
#
# Every integer sent to the card occupies a field whose width is fixed by one of
# the system parameters (in bits). Values are never truncated to fit.
###


def byte_length(bit_length: int) -> int:
    """Number of bytes needed to hold `bit_length` bits.

    Raises:
        InvalidArgumentError: If bit_length is not positive
    """
    if bit_length <= 0:
        raise InvalidArgumentError(f"Bit length must be positive, got {bit_length}")
    return (bit_length + 7) // 8


def to_unsigned_bytes(value: int) -> bytes:
    """Minimal unsigned big-endian representation of a non-negative integer.

    Zero is encoded as a single zero byte, no other value has a leading zero byte.

    Args:
        value (int): The integer to encode

    Returns:
        bytes: The encoded integer

    Raises:
        InvalidArgumentError: If value is negative
    """
    if value < 0:
        raise InvalidArgumentError("Cannot encode a negative integer as unsigned")
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


def fixed_width(value: int, bit_length: int) -> bytes:
    """Encode `value` in exactly ceil(bit_length / 8) bytes, left-padded with zeros.

    Args:
        value (int): The integer to encode
        bit_length (int): Width of the protocol field in bits

    Returns:
        bytes: The zero-padded encoding

    Raises:
        InvalidArgumentError: If value is negative or bit_length is not positive
        EncodingOverflowError: If the minimal encoding is wider than the field
    """
    width = byte_length(bit_length)
    encoded = to_unsigned_bytes(value)
    if len(encoded) > width:
        raise EncodingOverflowError(
            f"Value of {len(encoded)} bytes does not fit a {bit_length}-bit field"
        )
    return encoded.rjust(width, b"\x00")


def from_unsigned_bytes(data: bytes) -> int:
    """Interpret `data` as an unsigned big-endian integer."""
    return int.from_bytes(data, "big", signed=False)
