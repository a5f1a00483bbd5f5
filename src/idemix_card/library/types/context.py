from idemix_card.library.types.errors import ProtocolStateError
from idemix_card.library.types.parameters import SystemParameters
from idemix_card.library.types.structure import CredentialStructure
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class ProtocolContext:
    """
    Everything needed to size and route the commands of one protocol run.

    Attributes:
        session_id: Identifier of the applet context, sent in P1/P2
        context: Context value binding the issuance or proof transaction
        system_parameters: Bit lengths of every field sent during the run
    """

    session_id: int
    context: int
    system_parameters: SystemParameters

    def session_p1_p2(self) -> tuple[int, int]:
        return self.session_id >> 8, self.session_id & 0xFF


class IssuanceState(Enum):
    IDLE = "Idle"
    CONTEXT_SET = "ContextSet"
    PUBLIC_KEY_SET = "PublicKeySet"
    ATTRIBUTES_SET = "AttributesSet"
    ROUND1_SENT = "Round1Sent"
    SIGNATURE_RECEIVED = "SignatureReceived"
    COMPLETED = "Completed"
    FAILED = "Failed"


@dataclass
class IssuanceSession:
    """One issuance transaction, from context setup to the verified signature."""

    context: ProtocolContext
    credential_structure: CredentialStructure
    state: IssuanceState = field(default=IssuanceState.IDLE)

    @property
    def system_parameters(self) -> SystemParameters:
        return self.context.system_parameters

    def require(self, expected: IssuanceState, operation: str) -> None:
        if self.state is not expected:
            raise ProtocolStateError(
                f"Cannot {operation} in state {self.state.value}, expected {expected.value}",
                step=operation,
            )

    def advance(self, state: IssuanceState) -> None:
        self.state = state

    def fail(self) -> None:
        self.state = IssuanceState.FAILED
