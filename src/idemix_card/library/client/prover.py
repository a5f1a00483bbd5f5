from idemix_card.library.client.commands import CommandRunner
from idemix_card.library.transport.card_transport import CardTransport
from idemix_card.library.types.context import ProtocolContext
from idemix_card.library.types.errors import (
    CardServiceError,
    DuplicateIdentifierError,
    NotFoundError,
    UnsupportedPredicateError,
)
from idemix_card.library.types.instructions import (
    MASTER_SECRET_INDEX,
    Instruction,
    SignatureParameter,
)
from idemix_card.library.types.message import (
    MASTER_SECRET_NAME,
    Proof,
    ProofValues,
    SValuesProveCL,
)
from idemix_card.library.types.structure import (
    CLPredicate,
    PredicateType,
    ProofSpec,
)
from idemix_card.util.bytes.big_integer import from_unsigned_bytes
from idemix_card.util.logging import logger
from idemix_card.config import SESSION_ID
from result import Result, Ok, Err
from typing import List

###
# Proof Preparation, Done Before Anything Is Sent To The Card
###


def get_cl_predicate(spec: ProofSpec) -> CLPredicate:
    """Return the single CL predicate of a proof specification.

    Raises:
        UnsupportedPredicateError: If the specification holds anything else
    """
    if len(spec.predicates) != 1:
        raise UnsupportedPredicateError(
            f"Exactly one predicate can be proven, got {len(spec.predicates)}"
        )
    predicate = spec.predicates[0]
    if predicate.predicate_type != PredicateType.CL:
        raise UnsupportedPredicateError(
            f"Unimplemented predicate: {PredicateType(predicate.predicate_type).value}"
        )
    if not isinstance(predicate, CLPredicate):
        raise UnsupportedPredicateError("Malformed CL predicate")
    return predicate


def disclosure_selection(predicate: CLPredicate) -> bytes:
    """Key indices of the revealed attributes, ascending, one byte each."""
    disclosed: List[int] = []
    for attribute in predicate.credential_structure.attributes:
        if predicate.get_identifier(attribute.name).revealed:
            disclosed.append(attribute.key_index)
    return bytes(sorted(disclosed))


def check_identifier_names(predicate: CLPredicate) -> None:
    """Proof values are keyed by name, so every name may be used only once.

    Raises:
        DuplicateIdentifierError: On the first name used twice
    """
    seen = {predicate.temp_cred_name, MASTER_SECRET_NAME}
    for attribute in predicate.credential_structure.attributes:
        name = predicate.get_identifier(attribute.name).name
        if name in seen:
            raise DuplicateIdentifierError(f"Identifier name '{name}' is not unique")
        seen.add(name)


###
# Proof Orchestrator
###


class ProofOrchestrator:
    """Prover side of the Idemix show-proof protocol, executed by the card."""

    def __init__(self, transport: CardTransport) -> None:
        self.runner = CommandRunner(transport)

    def build_proof(self, nonce: int, spec: ProofSpec) -> Result[Proof, CardServiceError]:
        """
        Build a show-proof for the verifier's nonce.

        Args:
            nonce: Nonce chosen by the verifier
            spec: Proof specification with a single CL predicate

        Returns:
            Ok(Proof) carrying the challenge, s-values and disclosed values,
            or Err on the first failure
        """
        try:
            predicate = get_cl_predicate(spec)
            selection = disclosure_selection(predicate)
            check_identifier_names(predicate)
            context = ProtocolContext(
                session_id=SESSION_ID,
                context=spec.context,
                system_parameters=spec.system_parameters,
            )
            return Ok(self._prove(context, predicate, selection, nonce))
        except CardServiceError as e:
            logger.error(f"Failed to build proof: {e}")
            return Err(e)

    def _start_proof(self, context: ProtocolContext) -> None:
        p1, p2 = context.session_p1_p2()
        try:
            self.runner.send_value(
                "start proving",
                Instruction.PROVE_CREDENTIAL,
                context.context,
                context.system_parameters.l_h,
                p1,
                p2,
            )
        except NotFoundError as e:
            raise NotFoundError("Credential not found", step=e.step, status=e.status)

    def _prove(
        self,
        context: ProtocolContext,
        predicate: CLPredicate,
        selection: bytes,
        nonce: int,
    ) -> Proof:
        values = ProofValues()
        self._start_proof(context)

        # Send the attribute disclosure selection
        self.runner.command(
            "set attribute disclosure selection",
            Instruction.PROVE_SELECTION,
            data=selection,
        )

        # Send the nonce and receive the challenge
        data = self.runner.send_value(
            "set the challenge n1",
            Instruction.PROVE_NONCE,
            nonce,
            context.system_parameters.l_phi,
        )
        challenge = from_unsigned_bytes(data or b"")

        # Receive the randomized signature
        cap_a_prime = self.runner.fetch_value(
            "get the random signature A'",
            Instruction.PROVE_SIGNATURE,
            SignatureParameter.A,
        )
        e_hat = self.runner.fetch_value(
            "get the random signature e^",
            Instruction.PROVE_SIGNATURE,
            SignatureParameter.E,
        )
        v_hat = self.runner.fetch_value(
            "get the random signature v^'",
            Instruction.PROVE_SIGNATURE,
            SignatureParameter.V,
        )
        values.add_common_value(predicate.temp_cred_name, cap_a_prime)
        values.add_s_value(
            predicate.temp_cred_name, SValuesProveCL(e_hat=e_hat, v_hat=v_hat)
        )

        # Receive the randomized master secret
        values.add_s_value(
            MASTER_SECRET_NAME,
            self.runner.fetch_value(
                f"get random value (@index {MASTER_SECRET_INDEX})",
                Instruction.PROVE_RESPONSE,
                MASTER_SECRET_INDEX,
            ),
        )

        for attribute in predicate.credential_structure.attributes:
            identifier = predicate.get_identifier(attribute.name)
            i = attribute.key_index
            if identifier.revealed:
                values.add_common_value(
                    identifier.name,
                    self.runner.fetch_value(
                        f"get disclosed attribute (@index {i})",
                        Instruction.PROVE_ATTRIBUTE,
                        i,
                    ),
                )
            else:
                values.add_s_value(
                    identifier.name,
                    self.runner.fetch_value(
                        f"get random value (@index {i})",
                        Instruction.PROVE_RESPONSE,
                        i,
                    ),
                )

        return values.build(challenge)
