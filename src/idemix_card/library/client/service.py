from idemix_card.library.client.commands import CommandRunner
from idemix_card.library.client.prover import ProofOrchestrator
from idemix_card.library.client.recipient import IssuanceOrchestrator
from idemix_card.library.client.roles import ProverProtocol, RecipientProtocol
from idemix_card.library.transport.card_transport import CardTransport
from idemix_card.library.transport.channel import CardChannel
from idemix_card.library.types.context import IssuanceSession
from idemix_card.library.types.errors import CardServiceError
from idemix_card.library.types.instructions import (
    CLA_ISO7816,
    INS_VERIFY,
    Instruction,
)
from idemix_card.library.types.message import Message, Proof
from idemix_card.library.types.structure import (
    AttributeValues,
    IssuanceSpec,
    ProofSpec,
)
from idemix_card.util.types.status import StatusKind
from idemix_card.util.logging import logger
from result import Result, Ok, Err
from typing import Literal, Optional


class IdemixService(RecipientProtocol, ProverProtocol):
    """
    Idemix smart card interface.

    Plays the recipient during issuance and the prover during show-proofs,
    the card holding the master secret and credentials throughout.
    """

    def __init__(self, channel: CardChannel, verbose: Optional[bool] = None) -> None:
        """
        Args:
            channel: Link to the card, opened by open() if needed
            verbose: Dump every command and response, defaults to the VERBOSE setting
        """
        self.transport = CardTransport(channel, verbose)
        self.runner = CommandRunner(self.transport)
        self.recipient = IssuanceOrchestrator(self.transport)
        self.prover = ProofOrchestrator(self.transport)

    ###
    # Card Setup
    ###

    def open(self) -> None:
        """Open the channel and select the Idemix applet.

        Raises:
            TransmissionError: If the channel cannot be opened
            SelectionFailedError: If the applet cannot be selected
        """
        self.transport.open()

    def is_open(self) -> bool:
        return self.transport.is_open()

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "IdemixService":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def generate_master_secret(self) -> Result[Literal[True], CardServiceError]:
        try:
            data = self.runner.command(
                "generate master secret",
                Instruction.GENERATE_SECRET,
                tolerate=(StatusKind.CONDITION_NOT_SATISFIED,),
            )
            if data is None:
                logger.info("Master secret already set")
            return Ok(True)
        except CardServiceError as e:
            logger.error(f"Failed to generate master secret: {e}")
            return Err(e)

    def verify_pin(self, pin: bytes) -> Result[Literal[True], CardServiceError]:
        try:
            self.runner.command(
                "authorize using PIN", INS_VERIFY, data=pin, cla=CLA_ISO7816
            )
            return Ok(True)
        except CardServiceError as e:
            logger.error(f"Failed to verify PIN: {e}")
            return Err(e)

    ###
    # Recipient
    ###

    def set_issuance_specification(
        self, spec: IssuanceSpec
    ) -> Result[IssuanceSession, CardServiceError]:
        return self.recipient.set_issuance_specification(spec)

    def set_attributes(
        self, session: IssuanceSession, values: AttributeValues
    ) -> Result[Literal[True], CardServiceError]:
        return self.recipient.set_attributes(session, values)

    def round1(
        self, session: IssuanceSession, message: Message
    ) -> Result[Message, CardServiceError]:
        return self.recipient.round1(session, message)

    def round3(
        self, session: IssuanceSession, message: Message
    ) -> Result[Literal[True], CardServiceError]:
        return self.recipient.round3(session, message)

    ###
    # Prover
    ###

    def build_proof(self, nonce: int, spec: ProofSpec) -> Result[Proof, CardServiceError]:
        return self.prover.build_proof(nonce, spec)
