from idemix_card.library.client.service import IdemixService
from idemix_card.library.types.instructions import Instruction
from idemix_card.library.types.message import IssuanceProtocolValues, Message
from idemix_card.library.types.parameters import IssuerPublicKey, SystemParameters
from idemix_card.library.types.structure import (
    AttributeStructure,
    AttributeValues,
    CLPredicate,
    CredentialStructure,
    Identifier,
    IssuanceSpec,
    ProofSpec,
)
from typing import Dict, List, Tuple
import pytest


class FakeCard:
    """Scripted card channel.

    Answers 0x9000 with no data unless a response was registered for the
    (INS, P1) pair of the command. Every command frame is recorded.
    """

    def __init__(self) -> None:
        self.opened = False
        self.open_count = 0
        self.commands: List[bytes] = []
        self.responses: Dict[Tuple[int, int], bytes] = {}

    def open(self) -> None:
        self.opened = True
        self.open_count += 1

    def close(self) -> None:
        self.opened = False

    def is_open(self) -> bool:
        return self.opened

    def transmit(self, command: bytes) -> bytes:
        self.commands.append(command)
        return self.responses.get((command[1], command[2]), b"\x90\x00")

    def answer(self, ins: int, p1: int = 0, data: bytes = b"", sw: int = 0x9000) -> None:
        self.responses[(ins, p1)] = data + sw.to_bytes(2, "big")

    def answer_value(self, ins: int, p1: int, value: int, width: int = 8) -> None:
        self.answer(ins, p1, value.to_bytes(width, "big"))

    def sent(self, ins: int) -> List[bytes]:
        """Idemix commands (CLA 0x80) sent with the given instruction."""
        return [c for c in self.commands if c[0] == 0x80 and c[1] == ins]

    def idemix_commands(self) -> List[bytes]:
        return [c for c in self.commands if c[0] == 0x80]

    @staticmethod
    def data_of(command: bytes) -> bytes:
        if len(command) <= 5:
            return b""
        if command[4] != 0:
            return command[5 : 5 + command[4]]
        lc = int.from_bytes(command[5:7], "big")
        return command[7 : 7 + lc]


@pytest.fixture
def card() -> FakeCard:
    return FakeCard()


@pytest.fixture
def service(card: FakeCard) -> IdemixService:
    service = IdemixService(card, verbose=True)
    service.open()
    return service


@pytest.fixture
def system_parameters() -> SystemParameters:
    return SystemParameters(l_n=64, l_e=24, l_v=80, l_m=16, l_h=32, l_phi=16)


@pytest.fixture
def credential_structure() -> CredentialStructure:
    return CredentialStructure(
        attributes=[
            AttributeStructure(name="age", key_index=1),
            AttributeStructure(name="name", key_index=2),
        ]
    )


@pytest.fixture
def issuance_spec(
    system_parameters: SystemParameters, credential_structure: CredentialStructure
) -> IssuanceSpec:
    return IssuanceSpec(
        public_key=IssuerPublicKey(
            n=0xC0FFEE0000000001,
            cap_z=0x1234,
            cap_s=0x5678,
            cap_r=(0x10, 0x11, 0x12),
            system_parameters=system_parameters,
        ),
        credential_structure=credential_structure,
        context=0xCAFE,
    )


@pytest.fixture
def attribute_values() -> AttributeValues:
    return AttributeValues({"age": 42, "name": 0x4A6F})


@pytest.fixture
def issuer_nonce_message() -> Message:
    return Message(issuance_elements={IssuanceProtocolValues.NONCE_RECIPIENT: 0x0BAD})


@pytest.fixture
def proof_spec(
    system_parameters: SystemParameters, credential_structure: CredentialStructure
) -> ProofSpec:
    return ProofSpec(
        predicates=[
            CLPredicate(
                temp_cred_name="cred",
                credential_structure=credential_structure,
                identifiers={
                    "age": Identifier(name="id_age", revealed=True),
                    "name": Identifier(name="id_name", revealed=False),
                },
            )
        ],
        context=0xBEEF,
        system_parameters=system_parameters,
    )


@pytest.fixture
def proving_card(card: FakeCard) -> FakeCard:
    """Card answering every proof retrieval with a distinct value."""
    card.answer_value(Instruction.PROVE_NONCE, 0, 0xC1)
    card.answer_value(Instruction.PROVE_SIGNATURE, 0, 0xA1)
    card.answer_value(Instruction.PROVE_SIGNATURE, 1, 0xE1)
    card.answer_value(Instruction.PROVE_SIGNATURE, 2, 0xF1)
    card.answer_value(Instruction.PROVE_RESPONSE, 0, 0x50)
    card.answer_value(Instruction.PROVE_ATTRIBUTE, 1, 42)
    card.answer_value(Instruction.PROVE_RESPONSE, 2, 0x52)
    return card
