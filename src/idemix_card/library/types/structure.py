from idemix_card.library.types.parameters import (
    IssuerPublicKey,
    SystemParameters,
)
from idemix_card.util.bytes.hex_string import HexInt
from pydantic import BaseModel, ConfigDict, Field, RootModel, model_validator
from typing import Annotated, Dict, List, Literal, Union
from enum import Enum

###
# This file implements the specifications that drive an issuance or proof run:
#
# - CredentialStructure: ordered attribute names with their public key indices.
# - IssuanceSpec: issuer public key, credential structure and issuance context.
# - AttributeValues: the attribute values to be certified.
# - Predicates and ProofSpec: what a show-proof must demonstrate.
#
# They are parsed from JSON with Pydantic, big integers as 0x-prefixed hex strings.
###


###
# Credential Structure
###


class AttributeStructure(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    # Index of the attribute's base R_i in the issuer public key
    key_index: int = Field(ge=1, le=255)


class CredentialStructure(BaseModel):
    model_config = ConfigDict(frozen=True)

    attributes: List[AttributeStructure]

    @model_validator(mode="after")
    def check_attributes(self) -> "CredentialStructure":
        names = [attribute.name for attribute in self.attributes]
        if len(set(names)) != len(names):
            raise ValueError("Attribute names must be unique")
        # Attribute i is sent as m_i and proven against base R_i
        for position, attribute in enumerate(self.attributes, start=1):
            if attribute.key_index != position:
                raise ValueError(
                    f"Attribute '{attribute.name}' at position {position} "
                    f"has key index {attribute.key_index}"
                )
        return self

    def get_attribute_count(self) -> int:
        return len(self.attributes)


class AttributeValues(RootModel):
    root: Dict[str, HexInt]

    def __getitem__(self, name: str) -> int:
        return self.root[name]

    def __contains__(self, name: object) -> bool:
        return name in self.root


###
# Issuance
###


class IssuanceSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    public_key: IssuerPublicKey
    credential_structure: CredentialStructure
    context: HexInt

    def get_system_parameters(self) -> SystemParameters:
        return self.public_key.system_parameters


###
# Proofs
###


class PredicateType(str, Enum):
    CL = "CL"
    ENUM = "ENUM"
    INEQUALITY = "INEQUALITY"
    COMMITMENT = "COMMITMENT"
    REPRESENTATION = "REPRESENTATION"
    PSEUDONYM = "PSEUDONYM"
    DOMAIN_NYM = "DOMAIN_NYM"
    VERENC = "VERENC"
    MESSAGE = "MESSAGE"


class Identifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    revealed: bool = False


class CLPredicate(BaseModel):
    """Proof of possession of one CL-signed credential, disclosing some attributes."""

    model_config = ConfigDict(frozen=True)

    predicate_type: Literal["CL"] = "CL"
    # Name under which the randomized signature is reported
    temp_cred_name: str = Field(min_length=1)
    credential_structure: CredentialStructure
    # Attribute name -> identifier
    identifiers: Dict[str, Identifier]

    @model_validator(mode="after")
    def check_identifiers(self) -> "CLPredicate":
        for attribute in self.credential_structure.attributes:
            if attribute.name not in self.identifiers:
                raise ValueError(f"No identifier for attribute '{attribute.name}'")
        return self

    def get_identifier(self, attribute_name: str) -> Identifier:
        return self.identifiers[attribute_name]


class OtherPredicate(BaseModel):
    """Any predicate kind the card cannot prove, kept so it can be reported."""

    model_config = ConfigDict(frozen=True, extra="allow")

    predicate_type: PredicateType


Predicate = Annotated[
    Union[CLPredicate, OtherPredicate], Field(union_mode="left_to_right")
]


class ProofSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    predicates: List[Predicate]
    context: HexInt
    system_parameters: SystemParameters
