from idemix_card.util.bytes.hex_string import HexInt
from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, Tuple

###
# This file implements the cryptographic parameters consumed by the card protocol:
#
# - SystemParameters: bit lengths fixing the width of every integer on the wire.
# - IssuerPublicKey: the issuer's CL public key (n, Z, S, R_0 ... R_l).
#
# Both are produced by the issuer's cryptographic library and are read-only here.
###

BitLength = Annotated[int, Field(gt=0)]


class SystemParameters(BaseModel):
    """Bit lengths governing the fixed encoding width of each protocol field."""

    model_config = ConfigDict(frozen=True)

    # Size of the RSA modulus
    l_n: BitLength
    # Size of the certificate exponent e
    l_e: BitLength
    # Size of the signature randomizer v
    l_v: BitLength
    # Size of attribute values
    l_m: BitLength
    # Domain of the hash function, used for contexts and challenges
    l_h: BitLength
    # Statistical zero-knowledge security parameter, used for nonces
    l_phi: BitLength


class IssuerPublicKey(BaseModel):
    """Issuer public key: modulus n, bases Z and S, and one base R_i per message.

    R_0 is the base of the master secret, R_1 ... R_l those of the attributes.
    """

    model_config = ConfigDict(frozen=True)

    n: HexInt
    cap_z: HexInt
    cap_s: HexInt
    cap_r: Tuple[HexInt, ...]
    # Fixes the width of every field sent during a run
    system_parameters: SystemParameters
