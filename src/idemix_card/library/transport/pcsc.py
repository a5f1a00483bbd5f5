from idemix_card.library.types.errors import TransmissionError
from smartcard.System import readers
from smartcard.CardConnection import CardConnection
from smartcard.Exceptions import CardConnectionException
from typing import Optional


class PcscChannel:
    """CardChannel over a PC/SC reader."""

    def __init__(self, reader_name: str = "") -> None:
        """
        Args:
            reader_name: Substring of the reader name, empty selects the first reader
        """
        self.reader_name = reader_name
        self.connection: Optional[CardConnection] = None

    def _find_reader(self):
        available = readers()
        for reader in available:
            if self.reader_name in str(reader):
                return reader
        raise TransmissionError(
            f"Reader not found: '{self.reader_name}' (available: {[str(r) for r in available]})"
        )

    def open(self) -> None:
        connection = self._find_reader().createConnection()
        try:
            connection.connect()
        except CardConnectionException as e:
            raise TransmissionError(f"Failed to connect to card: {e}")
        self.connection = connection

    def is_open(self) -> bool:
        return self.connection is not None

    def transmit(self, command: bytes) -> bytes:
        if self.connection is None:
            raise TransmissionError("PC/SC connection is not open")
        try:
            data, sw1, sw2 = self.connection.transmit(list(command))
        except CardConnectionException as e:
            raise TransmissionError(f"PC/SC transmit failed: {e}")
        return bytes(data) + bytes([sw1, sw2])

    def close(self) -> None:
        if self.connection is not None:
            self.connection.disconnect()
            self.connection = None
