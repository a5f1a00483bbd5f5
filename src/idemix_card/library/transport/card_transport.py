from idemix_card.library.transport.apdu import CommandAPDU, ResponseAPDU
from idemix_card.library.transport.channel import CardChannel
from idemix_card.library.types.errors import (
    CardServiceError,
    SelectionFailedError,
    TransmissionError,
)
from idemix_card.library.types.instructions import (
    APPLET_AID,
    CLA_ISO7816,
    INS_SELECT,
    P1_SELECT_BY_NAME,
    SELECT_RESPONSE_LENGTH,
)
from idemix_card.util.bytes.hex_string import HexStringUtil
from idemix_card.util.types.status import StatusWord
from idemix_card.util.logging import logger
from idemix_card.config import VERBOSE
from typing import Optional
import time


class CardTransport:
    """
    Command transport to the Idemix applet on top of a CardChannel.

    Builds command frames, exchanges them one at a time and hands back the raw
    response. Status words are left to the caller.
    """

    def __init__(self, channel: CardChannel, verbose: Optional[bool] = None) -> None:
        self.channel = channel
        self.verbose = VERBOSE if verbose is None else verbose

    def __enter__(self) -> "CardTransport":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def is_open(self) -> bool:
        return self.channel.is_open()

    def open(self) -> None:
        """
        Open the channel if needed and select the Idemix applet.

        Raises:
            TransmissionError: If the channel cannot be opened
            SelectionFailedError: If the applet does not answer SELECT with 0x9000
        """
        if not self.is_open():
            try:
                self.channel.open()
            except CardServiceError:
                raise
            except Exception as e:
                raise TransmissionError(f"Failed to open card channel: {e}")
        self.select_applet()

    def select_applet(self) -> None:
        response = self.transmit(
            CommandAPDU(
                CLA_ISO7816,
                INS_SELECT,
                P1_SELECT_BY_NAME,
                0x00,
                APPLET_AID,
                SELECT_RESPONSE_LENGTH,
            )
        )
        if response.sw != StatusWord.SUCCESS:
            raise SelectionFailedError(
                "Could not select the Idemix applet",
                step="select applet",
                status=response.sw,
            )

    def exchange(
        self,
        cla: int,
        ins: int,
        p1: int = 0,
        p2: int = 0,
        data: bytes = b"",
        ne: Optional[int] = None,
    ) -> ResponseAPDU:
        return self.transmit(CommandAPDU(cla, ins, p1, p2, data, ne))

    def transmit(self, command: CommandAPDU) -> ResponseAPDU:
        """
        Send one command and wait for its response.

        Args:
            command: The command frame to send

        Returns:
            The response frame, whatever its status word

        Raises:
            TransmissionError: If the channel is closed or fails
        """
        if not self.is_open():
            raise TransmissionError("Card channel is not open")

        raw_command = command.to_bytes()
        if self.verbose:
            logger.debug(f"C: {HexStringUtil.bytes_to_str(raw_command)}")

        start = time.perf_counter()
        try:
            raw_response = self.channel.transmit(raw_command)
        except CardServiceError:
            raise
        except Exception as e:
            raise TransmissionError(f"Failed to transmit command: {e}")
        duration = (time.perf_counter() - start) * 1000

        response = ResponseAPDU.from_bytes(raw_response)
        if self.verbose:
            logger.debug(f" duration: {duration:.0f} ms")
            logger.debug(f"R: {HexStringUtil.bytes_to_str(response.to_bytes())}")
        return response

    def close(self) -> None:
        if self.is_open():
            self.channel.close()
