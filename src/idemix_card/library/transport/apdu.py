from idemix_card.library.types.errors import InvalidArgumentError, TransmissionError
from dataclasses import dataclass
from typing import Optional

###
# ISO 7816-4 Command And Response Frames
#
# Short frames carry up to 255 data bytes and expect up to 256 response bytes.
# Anything larger (v'' alone is 341 bytes when l_v is 2724) switches
# the whole frame to extended length encoding.
###

SHORT_MAX_NC = 255
SHORT_MAX_NE = 256
EXTENDED_MAX_NC = 65535
EXTENDED_MAX_NE = 65536


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise InvalidArgumentError(f"{name} must fit in one byte, got {value}")


@dataclass(frozen=True)
class CommandAPDU:
    cla: int
    ins: int
    p1: int = 0
    p2: int = 0
    data: bytes = b""
    ne: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("cla", "ins", "p1", "p2"):
            _check_byte(name.upper(), getattr(self, name))
        if len(self.data) > EXTENDED_MAX_NC:
            raise InvalidArgumentError(f"Command data too long: {len(self.data)}")
        if self.ne is not None and not 0 < self.ne <= EXTENDED_MAX_NE:
            raise InvalidArgumentError(f"Invalid expected response length: {self.ne}")

    def is_extended(self) -> bool:
        return len(self.data) > SHORT_MAX_NC or (
            self.ne is not None and self.ne > SHORT_MAX_NE
        )

    def to_bytes(self) -> bytes:
        """Serialize the command, choosing short or extended length encoding.

        Returns:
            bytes: CLA INS P1 P2 [Lc data] [Le]
        """
        frame = bytearray([self.cla, self.ins, self.p1, self.p2])
        nc = len(self.data)

        if not self.is_extended():
            if nc > 0:
                frame.append(nc)
                frame += self.data
            if self.ne is not None:
                frame.append(self.ne % 256)
            return bytes(frame)

        frame.append(0x00)
        if nc > 0:
            frame += nc.to_bytes(2, "big")
            frame += self.data
        if self.ne is not None:
            frame += (self.ne % 65536).to_bytes(2, "big")
        return bytes(frame)


@dataclass(frozen=True)
class ResponseAPDU:
    data: bytes
    sw1: int
    sw2: int

    @property
    def sw(self) -> int:
        return (self.sw1 << 8) | self.sw2

    def to_bytes(self) -> bytes:
        return self.data + bytes([self.sw1, self.sw2])

    @classmethod
    def from_bytes(cls, raw: bytes) -> "ResponseAPDU":
        """Split a raw response into its data and trailing status word.

        Raises:
            TransmissionError: If the response is shorter than a status word
        """
        if len(raw) < 2:
            raise TransmissionError(
                f"Response of {len(raw)} bytes does not contain a status word"
            )
        return cls(bytes(raw[:-2]), raw[-2], raw[-1])
