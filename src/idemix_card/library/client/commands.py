from idemix_card.library.transport.card_transport import CardTransport
from idemix_card.library.types.instructions import CLA_IDEMIX
from idemix_card.util.bytes.big_integer import fixed_width, from_unsigned_bytes
from idemix_card.util.types.status import StatusKind, classify, status_error
from idemix_card.util.logging import logger
from typing import Collection, Optional

# Statuses every step treats as fatal unless told otherwise
NOTHING_TOLERATED: Collection[StatusKind] = ()


class CommandRunner:
    """
    Sends one Idemix command and turns its status word into an outcome.

    Every protocol step is one of three shapes: send a fixed-width integer,
    fetch an integer, or send raw bytes. Statuses listed in `tolerate` are
    logged and skipped, everything else but 0x9000 raises the matching
    CardServiceError.
    """

    def __init__(self, transport: CardTransport) -> None:
        self.transport = transport

    def command(
        self,
        step: str,
        instruction: int,
        p1: int = 0,
        p2: int = 0,
        data: bytes = b"",
        tolerate: Collection[StatusKind] = NOTHING_TOLERATED,
        cla: int = CLA_IDEMIX,
    ) -> Optional[bytes]:
        response = self.transport.exchange(cla, instruction, p1, p2, data)
        status = classify(response.sw)
        if status.is_success():
            return response.data
        if status.kind in tolerate:
            _report_tolerated(step, status.kind)
            return None
        raise status_error(status, step)

    def send_value(
        self,
        step: str,
        instruction: int,
        value: int,
        bit_length: int,
        p1: int = 0,
        p2: int = 0,
        tolerate: Collection[StatusKind] = NOTHING_TOLERATED,
    ) -> Optional[bytes]:
        return self.command(
            step, instruction, p1, p2, fixed_width(value, bit_length), tolerate
        )

    def fetch_value(self, step: str, instruction: int, p1: int = 0) -> int:
        data = self.command(step, instruction, p1)
        return from_unsigned_bytes(data or b"")


def _report_tolerated(step: str, kind: StatusKind) -> None:
    if kind is StatusKind.INSTRUCTION_NOT_SUPPORTED:
        logger.warning(
            f"Could not {step}: this command is NOT supported by the smart card."
        )
    else:
        logger.warning(f"Could not {step}: {kind.value}.")
