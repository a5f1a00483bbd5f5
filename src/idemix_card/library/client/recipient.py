from idemix_card.library.client.commands import CommandRunner
from idemix_card.library.transport.card_transport import CardTransport
from idemix_card.library.types.context import (
    IssuanceSession,
    IssuanceState,
    ProtocolContext,
)
from idemix_card.library.types.errors import (
    CardServiceError,
    ConditionNotSatisfiedError,
    InvalidArgumentError,
    ProtocolStateError,
)
from idemix_card.library.types.instructions import (
    Instruction,
    ProofAParameter,
    ProofUParameter,
    SignatureParameter,
)
from idemix_card.library.types.message import (
    MASTER_SECRET_NAME,
    S_E_NAME,
    V_HAT_PRIME_NAME,
    IssuanceProtocolValues,
    Message,
    Proof,
)
from idemix_card.library.types.parameters import IssuerPublicKey
from idemix_card.library.types.structure import AttributeValues, IssuanceSpec
from idemix_card.util.bytes.big_integer import from_unsigned_bytes
from idemix_card.util.types.status import StatusKind
from idemix_card.util.logging import logger
from idemix_card.config import SESSION_ID
from result import Result, Ok, Err
from typing import Literal

# Public key and attribute setup may be missing from restricted applets
SETUP_TOLERATED = (StatusKind.INSTRUCTION_NOT_SUPPORTED,)


class IssuanceOrchestrator:
    """
    Recipient side of the Idemix issuance protocol, executed by the card.

    A run follows IssuanceState strictly:

        set_issuance_specification -> set_attributes -> round1 -> round3

    The card keeps the master secret and the resulting credential, so round3
    only reports whether the card accepted the signature.
    """

    def __init__(self, transport: CardTransport) -> None:
        self.runner = CommandRunner(transport)

    ###
    # Context And Public Key
    ###

    def set_issuance_specification(
        self, spec: IssuanceSpec
    ) -> Result[IssuanceSession, CardServiceError]:
        """
        Set the issuance context and the issuer public key on the card.

        Args:
            spec: Issuance specification with public key, structure and context

        Returns:
            Ok(IssuanceSession) in state PUBLIC_KEY_SET, or Err on the first failure
        """
        session = IssuanceSession(
            context=ProtocolContext(
                session_id=SESSION_ID,
                context=spec.context,
                system_parameters=spec.get_system_parameters(),
            ),
            credential_structure=spec.credential_structure,
        )
        try:
            # R_0 belongs to the master secret
            elements = spec.credential_structure.get_attribute_count() + 1
            if len(spec.public_key.cap_r) < elements:
                raise InvalidArgumentError(
                    f"Public key has {len(spec.public_key.cap_r)} bases R_i, "
                    f"structure needs {elements}"
                )

            self._start_issuance(session)
            session.advance(IssuanceState.CONTEXT_SET)

            self._set_public_key(session, spec.public_key, elements)
            session.advance(IssuanceState.PUBLIC_KEY_SET)
            return Ok(session)
        except CardServiceError as e:
            logger.error(f"Failed to set issuance specification: {e}")
            session.fail()
            return Err(e)

    def _start_issuance(self, session: IssuanceSession) -> None:
        p1, p2 = session.context.session_p1_p2()
        try:
            self.runner.send_value(
                "start issuance",
                Instruction.ISSUE_CREDENTIAL,
                session.context.context,
                session.system_parameters.l_h,
                p1,
                p2,
            )
        except ConditionNotSatisfiedError as e:
            raise ConditionNotSatisfiedError(
                "Could not issue credential, already issued",
                step=e.step,
                status=e.status,
            )

    def _set_public_key(
        self, session: IssuanceSession, public_key: IssuerPublicKey, elements: int
    ) -> None:
        l_n = session.system_parameters.l_n
        for step, instruction, value in (
            ("set public key modulus (n)", Instruction.ISSUE_PUBLIC_KEY_N, public_key.n),
            ("set public key element (Z)", Instruction.ISSUE_PUBLIC_KEY_Z, public_key.cap_z),
            ("set public key element (S)", Instruction.ISSUE_PUBLIC_KEY_S, public_key.cap_s),
        ):
            self.runner.send_value(
                step, instruction, value, l_n, tolerate=SETUP_TOLERATED
            )

        for i in range(elements):
            self.runner.send_value(
                f"set public key element (R@index {i})",
                Instruction.ISSUE_PUBLIC_KEY_R,
                public_key.cap_r[i],
                l_n,
                p1=i,
                tolerate=SETUP_TOLERATED,
            )

    ###
    # Attributes
    ###

    def set_attributes(
        self, session: IssuanceSession, values: AttributeValues
    ) -> Result[Literal[True], CardServiceError]:
        """
        Send the attribute values m_1 ... m_l in credential structure order.

        Args:
            session: Session returned by set_issuance_specification
            values: Attribute name -> value, one for every attribute of the structure
        """
        try:
            session.require(IssuanceState.PUBLIC_KEY_SET, "set attributes")
            attributes = session.credential_structure.attributes
            missing = [a.name for a in attributes if a.name not in values]
            if missing:
                raise InvalidArgumentError(f"Missing attribute values: {missing}")

            for attribute in attributes:
                i = attribute.key_index
                self.runner.send_value(
                    f"set attribute (m@index {i})",
                    Instruction.ISSUE_ATTRIBUTES,
                    values[attribute.name],
                    session.system_parameters.l_m,
                    p1=i,
                    tolerate=SETUP_TOLERATED,
                )
            session.advance(IssuanceState.ATTRIBUTES_SET)
            return Ok(True)
        except ProtocolStateError as e:
            return Err(e)
        except CardServiceError as e:
            logger.error(f"Failed to set attributes: {e}")
            session.fail()
            return Err(e)

    ###
    # Blind Signature Protocol
    ###

    def round1(
        self, session: IssuanceSession, message: Message
    ) -> Result[Message, CardServiceError]:
        """
        Answer the issuer's first flow.

        Args:
            session: Session in state ATTRIBUTES_SET
            message: Issuer message carrying the nonce n_1

        Returns:
            Ok(Message) with U, the nonce n_2 and the proof of correct
            construction of U, or Err on the first failure
        """
        try:
            session.require(IssuanceState.ATTRIBUTES_SET, "run round 1")
            nonce_1 = message.get_issuance_element(
                IssuanceProtocolValues.NONCE_RECIPIENT
            )
            if nonce_1 is None:
                raise InvalidArgumentError("Issuer message carries no nonce")

            # Send the nonce and receive U
            data = self.runner.send_value(
                "issue nonce n1",
                Instruction.ISSUE_NONCE_1,
                nonce_1,
                session.system_parameters.l_phi,
            )
            cap_u = from_unsigned_bytes(data or b"")

            # Receive the proof
            challenge = self.runner.fetch_value(
                "issue proof c", Instruction.ISSUE_PROOF_U, ProofUParameter.C
            )
            v_prime_hat = self.runner.fetch_value(
                "issue proof v^'", Instruction.ISSUE_PROOF_U, ProofUParameter.V_PRIME_HAT
            )
            s_a = self.runner.fetch_value(
                "issue proof s_A", Instruction.ISSUE_PROOF_U, ProofUParameter.S_A
            )

            # Receive the nonce for the issuer's proof
            nonce_2 = self.runner.fetch_value(
                "issue nonce n2", Instruction.ISSUE_NONCE_2
            )

            session.advance(IssuanceState.ROUND1_SENT)
            return Ok(
                Message(
                    issuance_elements={
                        IssuanceProtocolValues.CAP_U: cap_u,
                        IssuanceProtocolValues.NONCE_RECIPIENT: nonce_2,
                    },
                    proof=Proof(
                        challenge=challenge,
                        s_values={MASTER_SECRET_NAME: s_a},
                        common_values={V_HAT_PRIME_NAME: v_prime_hat},
                    ),
                )
            )
        except ProtocolStateError as e:
            return Err(e)
        except CardServiceError as e:
            logger.error(f"Round 1 failed: {e}")
            session.fail()
            return Err(e)

    def round3(
        self, session: IssuanceSession, message: Message
    ) -> Result[Literal[True], CardServiceError]:
        """
        Hand the blind signature and the issuer's proof to the card for verification.

        Args:
            session: Session in state ROUND1_SENT
            message: Issuer message with A, e, v'' and the proof (c', s_e)

        Returns:
            Ok(True) once the card verified both, or Err on the first failure
        """
        try:
            session.require(IssuanceState.ROUND1_SENT, "run round 3")
            cap_a, e, v_prime_prime, challenge, s_e = _read_round3_message(message)
            pars = session.system_parameters

            # Send the signature
            self.runner.send_value(
                "issue signature A", Instruction.ISSUE_SIGNATURE, cap_a, pars.l_n,
                p1=SignatureParameter.A,
            )
            self.runner.send_value(
                "issue signature e", Instruction.ISSUE_SIGNATURE, e, pars.l_e,
                p1=SignatureParameter.E,
            )
            self.runner.send_value(
                "issue signature v''", Instruction.ISSUE_SIGNATURE, v_prime_prime, pars.l_v,
                p1=SignatureParameter.V,
            )
            self.runner.command(
                "verify issued signature", Instruction.ISSUE_SIGNATURE,
                p1=SignatureParameter.VERIFY,
            )
            session.advance(IssuanceState.SIGNATURE_RECEIVED)

            # Send the proof
            self.runner.send_value(
                "issue proof c'", Instruction.ISSUE_PROOF_A, challenge, pars.l_h,
                p1=ProofAParameter.C,
            )
            self.runner.send_value(
                "issue proof s_e", Instruction.ISSUE_PROOF_A, s_e, pars.l_n,
                p1=ProofAParameter.S_E,
            )
            self.runner.command(
                "verify proof", Instruction.ISSUE_PROOF_A, p1=ProofAParameter.VERIFY
            )
            session.advance(IssuanceState.COMPLETED)
            return Ok(True)
        except ProtocolStateError as e:
            return Err(e)
        except CardServiceError as e:
            logger.error(f"Round 3 failed: {e}")
            session.fail()
            return Err(e)


def _read_round3_message(message: Message) -> tuple[int, int, int, int, int]:
    elements = []
    for key in (
        IssuanceProtocolValues.CAP_A,
        IssuanceProtocolValues.E,
        IssuanceProtocolValues.V_PRIME_PRIME,
    ):
        value = message.get_issuance_element(key)
        if value is None:
            raise InvalidArgumentError(f"Issuer message carries no {key.value}")
        elements.append(value)

    if message.proof is None:
        raise InvalidArgumentError("Issuer message carries no proof")
    s_e = message.proof.s_values.get(S_E_NAME)
    if not isinstance(s_e, int):
        raise InvalidArgumentError(f"Issuer proof carries no integer {S_E_NAME}")

    cap_a, e, v_prime_prime = elements
    return cap_a, e, v_prime_prime, message.proof.challenge, s_e
