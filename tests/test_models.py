import json
import pytest
from idemix_card.library.types.message import (
    IssuanceProtocolValues,
    Message,
    Proof,
    ProofValues,
    SValuesProveCL,
)
from idemix_card.library.types.errors import DuplicateIdentifierError
from idemix_card.library.types.parameters import SystemParameters
from idemix_card.library.types.structure import (
    AttributeValues,
    CLPredicate,
    CredentialStructure,
    IssuanceSpec,
    OtherPredicate,
    PredicateType,
    ProofSpec,
)
from idemix_card.util.bytes.hex_string import (
    HexIntegerError,
    HexStringFormatError,
    HexStringUtil,
    validate_hex_integer,
)
from pydantic import ValidationError

ISSUANCE_SPEC_JSON = """
{
    "public_key": {
        "n": "0xC0FFEE0000000001",
        "cap_z": "0x1234",
        "cap_s": "0x5678",
        "cap_r": ["0x10", "0x11", "0x12"],
        "system_parameters": {
            "l_n": 64, "l_e": 24, "l_v": 80, "l_m": 16, "l_h": 32, "l_phi": 16
        }
    },
    "credential_structure": {
        "attributes": [
            {"name": "age", "key_index": 1},
            {"name": "name", "key_index": 2}
        ]
    },
    "context": "0xCAFE"
}
"""


def test_hex_integer_validation() -> None:
    """Test that integers and 0x strings are accepted, anything negative or malformed refused."""
    assert validate_hex_integer("0xff") == 255
    assert validate_hex_integer(7) == 7
    for bad in ("ff", "0xZZ", -1, True, 1.5):
        with pytest.raises(HexIntegerError):
            validate_hex_integer(bad)


def test_hex_string_util() -> None:
    """Test the hex helpers used for frame dumps and hex PINs."""
    assert HexStringUtil.bytes_to_str(b"\x80\x10") == "8010"
    assert HexStringUtil.str_to_bytes("0x8010").unwrap() == b"\x80\x10"
    assert isinstance(HexStringUtil.str_to_bytes("0xZZ").unwrap_err(), HexStringFormatError)


def test_issuance_spec_from_json() -> None:
    """Test that hex encoded big integers and the system parameters are read."""
    spec = IssuanceSpec.model_validate_json(ISSUANCE_SPEC_JSON)
    assert spec.public_key.n == 0xC0FFEE0000000001
    assert spec.public_key.cap_r == (0x10, 0x11, 0x12)
    assert spec.context == 0xCAFE
    assert spec.credential_structure.get_attribute_count() == 2
    assert spec.get_system_parameters() == SystemParameters(
        l_n=64, l_e=24, l_v=80, l_m=16, l_h=32, l_phi=16
    )


def test_system_parameters_required() -> None:
    """Test that a public key without its system parameters is refused."""
    document = json.loads(ISSUANCE_SPEC_JSON)
    del document["public_key"]["system_parameters"]
    with pytest.raises(ValidationError):
        IssuanceSpec.model_validate(document)


def test_negative_integer_rejected() -> None:
    """Test that a negative protocol integer fails validation."""
    document = json.loads(ISSUANCE_SPEC_JSON)
    document["context"] = -1
    with pytest.raises(ValidationError):
        IssuanceSpec.model_validate(document)


def test_duplicate_attribute_structure() -> None:
    """Test that attribute names and key indices may each be used only once."""
    with pytest.raises(ValidationError):
        CredentialStructure.model_validate(
            {"attributes": [{"name": "a", "key_index": 1}, {"name": "a", "key_index": 2}]}
        )
    with pytest.raises(ValidationError):
        CredentialStructure.model_validate(
            {"attributes": [{"name": "a", "key_index": 1}, {"name": "b", "key_index": 1}]}
        )


def test_key_index_range() -> None:
    """Test that key index 0 is refused, R_0 being the base of the master secret."""
    with pytest.raises(ValidationError):
        CredentialStructure.model_validate({"attributes": [{"name": "a", "key_index": 0}]})


@pytest.mark.parametrize("indices", [[2, 1], [9, 200], [1, 3], [2, 3]])
def test_key_index_matches_position(indices) -> None:
    """Test that every key index must equal the attribute's 1-based position.

    Tests that structures whose indices are swapped, or point at bases R_i that
    issuance never sends, are refused.
    """
    with pytest.raises(ValidationError):
        CredentialStructure.model_validate(
            {
                "attributes": [
                    {"name": "age", "key_index": indices[0]},
                    {"name": "name", "key_index": indices[1]},
                ]
            }
        )


def test_cl_predicate_requires_every_identifier(credential_structure) -> None:
    """Test that a CL predicate needs an identifier for every attribute."""
    with pytest.raises(ValidationError):
        CLPredicate.model_validate(
            {
                "temp_cred_name": "cred",
                "credential_structure": credential_structure.model_dump(),
                "identifiers": {"age": {"name": "id_age", "revealed": True}},
            }
        )


def test_proof_spec_predicate_kinds(credential_structure, system_parameters) -> None:
    """Test that CL predicates are parsed as such and other kinds are kept aside."""
    spec = ProofSpec.model_validate(
        {
            "predicates": [
                {
                    "predicate_type": "CL",
                    "temp_cred_name": "cred",
                    "credential_structure": credential_structure.model_dump(),
                    "identifiers": {
                        "age": {"name": "id_age", "revealed": True},
                        "name": {"name": "id_name"},
                    },
                },
                {"predicate_type": "INEQUALITY", "bound": "0x12"},
            ],
            "context": "0xBEEF",
            "system_parameters": system_parameters.model_dump(),
        }
    )
    cl, other = spec.predicates
    assert isinstance(cl, CLPredicate)
    assert cl.get_identifier("name").revealed is False
    assert isinstance(other, OtherPredicate)
    assert other.predicate_type is PredicateType.INEQUALITY


def test_attribute_values() -> None:
    """Test that attribute values accept hex strings and plain integers."""
    values = AttributeValues.model_validate_json('{"age": "0x2A", "name": 19055}')
    assert values["age"] == 42
    assert "name" in values
    assert "email" not in values


def test_message_json_uses_hex() -> None:
    """Test that messages are written with hex strings and protocol value names."""
    message = Message(
        issuance_elements={IssuanceProtocolValues.CAP_U: 0xABC},
        proof=Proof(
            challenge=0x10,
            s_values={"cred": SValuesProveCL(e_hat=1, v_hat=2), "master_secret": 3},
        ),
    )
    document = json.loads(message.model_dump_json())
    assert document["issuance_elements"] == {"capU": "0xabc"}
    assert document["proof"]["challenge"] == "0x10"
    assert document["proof"]["s_values"]["cred"] == {"e_hat": "0x1", "v_hat": "0x2"}
    assert document["proof"]["s_values"]["master_secret"] == "0x3"
    assert Message.model_validate_json(message.model_dump_json()) == message


def test_proof_values_reject_duplicates() -> None:
    """Test that the proof value collector refuses a name it already holds."""
    values = ProofValues()
    values.add_s_value("x", 1)
    values.add_common_value("x", 2)
    with pytest.raises(DuplicateIdentifierError):
        values.add_s_value("x", 3)
    with pytest.raises(DuplicateIdentifierError):
        values.add_common_value("x", 4)
    proof = values.build(9)
    assert proof.s_values == {"x": 1}
    assert proof.common_values == {"x": 2}


def test_proof_spec_requires_system_parameters() -> None:
    """Test that a proof specification without system parameters is refused."""
    with pytest.raises(ValidationError):
        ProofSpec.model_validate({"predicates": [], "context": "0x1"})
