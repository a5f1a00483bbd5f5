from idemix_card.library.types.errors import DuplicateIdentifierError
from idemix_card.util.bytes.hex_string import HexInt
from pydantic import BaseModel, ConfigDict
from typing import Dict, Optional, Union
from enum import Enum

###
# This file implements the protocol values exchanged with the issuer and verifier:
#
# - Message: one flow of the issuance protocol, named integers plus a proof.
# - Proof: challenge, s-values (responses for hidden values) and common values.
# - ProofValues: collects proof values during a run, refusing name collisions.
###

# Name of the master secret m_0 in s-value maps
MASTER_SECRET_NAME = "master_secret"
# Additional value of the issuance proof of U
V_HAT_PRIME_NAME = "vHatPrime"
# s-value of the issuer's proof of correct signature
S_E_NAME = "s_e"


class IssuanceProtocolValues(str, Enum):
    CAP_U = "capU"
    NONCE_RECIPIENT = "nonce_recipient"
    CAP_A = "capA"
    E = "e"
    V_PRIME_PRIME = "vPrimePrime"


class SValuesProveCL(BaseModel):
    """Responses for the exponent and randomizer of a randomized CL signature."""

    model_config = ConfigDict(frozen=True)

    e_hat: HexInt
    v_hat: HexInt


SValue = Union[SValuesProveCL, HexInt]


class Proof(BaseModel):
    model_config = ConfigDict(frozen=True)

    challenge: HexInt
    s_values: Dict[str, SValue] = {}
    common_values: Dict[str, HexInt] = {}

    def get_s_value(self, name: str) -> SValue:
        return self.s_values[name]

    def get_common_value(self, name: str) -> int:
        return self.common_values[name]


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    issuance_elements: Dict[IssuanceProtocolValues, HexInt]
    proof: Optional[Proof] = None

    def get_issuance_element(self, key: IssuanceProtocolValues) -> Optional[int]:
        return self.issuance_elements.get(key)


class ProofValues:
    """Mutable collector for the values of a proof under construction."""

    def __init__(self) -> None:
        self.s_values: Dict[str, SValue] = {}
        self.common_values: Dict[str, int] = {}

    def add_s_value(self, name: str, value: SValue) -> None:
        if name in self.s_values:
            raise DuplicateIdentifierError(f"Duplicate s-value name '{name}'")
        self.s_values[name] = value

    def add_common_value(self, name: str, value: int) -> None:
        if name in self.common_values:
            raise DuplicateIdentifierError(f"Duplicate common value name '{name}'")
        self.common_values[name] = value

    def build(self, challenge: int) -> Proof:
        return Proof(
            challenge=challenge,
            s_values=dict(self.s_values),
            common_values=dict(self.common_values),
        )
