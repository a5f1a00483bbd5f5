from result import Result, Ok, Err
from typing import Annotated, Union
from pydantic import BeforeValidator, PlainSerializer

###
# Exceptions
###


class HexStringError(ValueError):
    """Base exception class for hex string related errors."""

    pass


class HexStringFormatError(HexStringError):
    """Raised when hex string contains invalid characters."""

    pass


class HexIntegerError(HexStringError):
    """Raised when a value cannot be read as a non-negative integer."""

    pass


###
# Validation
###


def validate_hex_integer(v: Union[int, str]) -> int:
    """Validate Hex Integer.

    Protocol integers are far wider than 64 bits, so JSON documents carry them
    as 0x-prefixed hex strings. Plain integers are accepted as well.

    Args:
        v (Union[int, str]): The hex string or integer to validate

    Returns:
        int: The non-negative integer

    Raises:
        HexIntegerError: If the value is negative, a bool or not a hex string
    """

    if isinstance(v, bool):
        raise HexIntegerError("Expected an integer or hex string, got a boolean")

    if isinstance(v, int):
        value = v
    elif isinstance(v, str):
        if not v.startswith("0x"):
            raise HexIntegerError("Hex integer must start with 0x prefix")
        try:
            value = int(v[2:], 16)
        except ValueError:
            raise HexIntegerError("Invalid hexadecimal characters in integer")
    else:
        raise HexIntegerError(f"Expected an integer or hex string, got {type(v)}")

    if value < 0:
        raise HexIntegerError("Protocol integers must be non-negative")
    return value


# Custom Type For Big Integers, Serialized As Hex Strings In JSON
HexInt = Annotated[
    int,
    BeforeValidator(validate_hex_integer),
    PlainSerializer(lambda v: hex(v), return_type=str, when_used="json"),
]


###
# Util
###


class HexStringUtil:
    @staticmethod
    def bytes_to_str(value: bytes) -> str:
        """Convert bytes to an upper case hex string without prefix, as in APDU traces.

        Args:
            value (bytes): Bytes to convert

        Returns:
            str: Hex string
        """
        return value.hex().upper()

    @staticmethod
    def str_to_bytes(value: str) -> Result[bytes, HexStringFormatError]:
        """Parse hex string with optional 0x prefix and spaces to bytes.

        Args:
            value (str): Hex string to parse

        Returns:
            Result[bytes, HexStringFormatError]: Success with bytes value or error
        """
        hex_str = value[2:] if value.startswith("0x") else value
        try:
            return Ok(bytes.fromhex(hex_str))
        except ValueError:
            return Err(HexStringFormatError(f"Invalid hex string format: {value}"))
