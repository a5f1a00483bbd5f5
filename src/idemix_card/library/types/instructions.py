"""Idemix applet instruction catalogue"""

from enum import IntEnum

# ASCII encoding of "idemix"
APPLET_AID = b"idemix"

# Interindustry class byte, used for SELECT and VERIFY
CLA_ISO7816 = 0x00
# Proprietary class byte of every Idemix command
CLA_IDEMIX = 0x80

# Select an applet
INS_SELECT = 0xA4
# Select by DF name
P1_SELECT_BY_NAME = 0x04
# Verify the card holder PIN
INS_VERIFY = 0x20

# LE == 0 (256 bytes) is required by the applet on SELECT
SELECT_RESPONSE_LENGTH = 256


class Instruction(IntEnum):
    """INS bytes understood by the Idemix applet"""

    # Select a credential on the card, reserved by the applet
    SELECT_CREDENTIAL = 0x00
    # Generate the master secret m_0
    GENERATE_SECRET = 0x01

    # Start issuing a credential, sets the issuance context
    ISSUE_CREDENTIAL = 0x10
    # Issuer public key elements n, Z, S and R_i
    ISSUE_PUBLIC_KEY_N = 0x11
    ISSUE_PUBLIC_KEY_Z = 0x12
    ISSUE_PUBLIC_KEY_S = 0x13
    ISSUE_PUBLIC_KEY_R = 0x14
    # Attribute values m_1 ... m_l
    ISSUE_ATTRIBUTES = 0x15
    # Send n_1, receive the combined hidden attributes U
    ISSUE_NONCE_1 = 0x16
    # Receive the proof of correct construction of U (c, v^', s_A)
    ISSUE_PROOF_U = 0x17
    # Receive the nonce n_2
    ISSUE_NONCE_2 = 0x18
    # Send the blind signature (A, e, v'')
    ISSUE_SIGNATURE = 0x19
    # Send the proof of correct construction of the signature (c', s_e)
    ISSUE_PROOF_A = 0x1A

    # Start proving, sets the proof context
    PROVE_CREDENTIAL = 0x20
    # Send the attribute disclosure selection
    PROVE_SELECTION = 0x21
    # Send the nonce, receive the challenge
    PROVE_NONCE = 0x22
    # Receive the randomized signature A', e^, v^
    PROVE_SIGNATURE = 0x23
    # Receive a disclosed attribute
    PROVE_ATTRIBUTE = 0x24
    # Receive the response for an undisclosed attribute
    PROVE_RESPONSE = 0x25


class ProofUParameter(IntEnum):
    """P1 values of ISSUE_PROOF_U"""

    C = 0x00
    V_PRIME_HAT = 0x01
    S_A = 0x02


class SignatureParameter(IntEnum):
    """P1 values of ISSUE_SIGNATURE and PROVE_SIGNATURE"""

    A = 0x00
    E = 0x01
    V = 0x02
    VERIFY = 0x03


class ProofAParameter(IntEnum):
    """P1 values of ISSUE_PROOF_A"""

    C = 0x00
    S_E = 0x01
    VERIFY = 0x02


# P1 of PROVE_RESPONSE that addresses the master secret
MASTER_SECRET_INDEX = 0x00
