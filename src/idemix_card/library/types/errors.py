from typing import Optional

###
# This file defines every failure an Idemix card run can end with.
#
# - Channel level:
#   - TransmissionError: the reader or channel failed to deliver a frame.
#   - SelectionFailedError: the Idemix applet could not be selected.
#
# - Status word level (see util/types/status.py for the mapping):
#   - UnsupportedOperationError: 0x6D00, the applet lacks the instruction.
#   - ConditionNotSatisfiedError: 0x6986, e.g. credential already issued.
#   - NotFoundError: 0x6A88, e.g. no credential for the proof context.
#   - UnexpectedStatusError: any other non-success status word.
#
# - Caller level, raised before anything is sent:
#   - EncodingError and its subclasses, UnsupportedPredicateError,
#     DuplicateIdentifierError and ProtocolStateError.
###


class CardServiceError(Exception):
    """Base exception for Idemix card protocol errors.

    Attributes:
        step: Description of the protocol step that failed, if known
        status: Raw status word returned by the card, if any
    """

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        self.step = step
        self.status = status
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.status is not None:
            return f"{message} (SW: 0x{self.status:04X})"
        return message


###
# Channel Errors
###


class TransmissionError(CardServiceError):
    """Error exchanging a frame with the card"""

    pass


class SelectionFailedError(CardServiceError):
    """The Idemix applet could not be selected"""

    pass


###
# Status Word Errors
###


class UnsupportedOperationError(CardServiceError):
    """The card does not support the requested instruction"""

    pass


class ConditionNotSatisfiedError(CardServiceError):
    """A card-side precondition was violated"""

    pass


class NotFoundError(CardServiceError):
    """The referenced credential or context is absent on the card"""

    pass


class UnexpectedStatusError(CardServiceError):
    """The card answered with an unclassified status word"""

    pass


###
# Caller Errors
###


class EncodingError(CardServiceError):
    """Base exception for big integer encoding errors"""

    pass


class InvalidArgumentError(EncodingError):
    """A value or parameter is outside of its allowed domain"""

    pass


class EncodingOverflowError(EncodingError):
    """A value does not fit the fixed width of its protocol field"""

    pass


class UnsupportedPredicateError(CardServiceError):
    """The proof specification uses a predicate the card cannot prove"""

    pass


class DuplicateIdentifierError(CardServiceError):
    """Two proof values would be stored under the same name"""

    pass


class ProtocolStateError(CardServiceError):
    """An issuance operation was called out of order"""

    pass
