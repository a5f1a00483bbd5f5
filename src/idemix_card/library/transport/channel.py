from typing import Protocol


class CardChannel(Protocol):
    """Protocol defining the half-duplex link to a smart card.

    Implementations exchange raw frames only, they never interpret status words.
    """

    def open(self) -> None: ...

    def close(self) -> None: ...

    def is_open(self) -> bool: ...

    def transmit(self, command: bytes) -> bytes:
        """Send one command frame and block until its response frame is received.

        Args:
            command (bytes): Serialized command APDU

        Returns:
            bytes: Response data followed by SW1 SW2
        """
        ...
