from idemix_card.library.types.context import IssuanceSession
from idemix_card.library.types.errors import CardServiceError
from idemix_card.library.types.message import Message, Proof
from idemix_card.library.types.structure import (
    AttributeValues,
    IssuanceSpec,
    ProofSpec,
)
from result import Result
from typing import Literal, Protocol


class RecipientProtocol(Protocol):
    """Protocol defining the recipient side of the issuance protocol"""

    def set_issuance_specification(
        self, spec: IssuanceSpec
    ) -> Result[IssuanceSession, CardServiceError]: ...

    def generate_master_secret(self) -> Result[Literal[True], CardServiceError]: ...

    def set_attributes(
        self, session: IssuanceSession, values: AttributeValues
    ) -> Result[Literal[True], CardServiceError]: ...

    def round1(
        self, session: IssuanceSession, message: Message
    ) -> Result[Message, CardServiceError]: ...

    def round3(
        self, session: IssuanceSession, message: Message
    ) -> Result[Literal[True], CardServiceError]: ...


class ProverProtocol(Protocol):
    """Protocol defining the prover side of the show-proof protocol"""

    def build_proof(
        self, nonce: int, spec: ProofSpec
    ) -> Result[Proof, CardServiceError]: ...
