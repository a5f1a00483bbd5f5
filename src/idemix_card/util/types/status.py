from idemix_card.library.types.errors import (
    CardServiceError,
    ConditionNotSatisfiedError,
    NotFoundError,
    UnexpectedStatusError,
    UnsupportedOperationError,
)
from dataclasses import dataclass
from enum import Enum, IntEnum


class StatusWord(IntEnum):
    SUCCESS = 0x9000
    INS_NOT_SUPPORTED = 0x6D00
    CONDITIONS_NOT_SATISFIED = 0x6986
    REFERENCED_DATA_NOT_FOUND = 0x6A88


class StatusKind(Enum):
    SUCCESS = "Success"
    INSTRUCTION_NOT_SUPPORTED = "InstructionNotSupported"
    CONDITION_NOT_SATISFIED = "ConditionNotSatisfied"
    NOT_FOUND = "NotFound"
    UNEXPECTED = "UnexpectedStatus"


_KNOWN_STATUS_WORDS = {
    StatusWord.SUCCESS: StatusKind.SUCCESS,
    StatusWord.INS_NOT_SUPPORTED: StatusKind.INSTRUCTION_NOT_SUPPORTED,
    StatusWord.CONDITIONS_NOT_SATISFIED: StatusKind.CONDITION_NOT_SATISFIED,
    StatusWord.REFERENCED_DATA_NOT_FOUND: StatusKind.NOT_FOUND,
}

_STATUS_ERRORS = {
    StatusKind.INSTRUCTION_NOT_SUPPORTED: UnsupportedOperationError,
    StatusKind.CONDITION_NOT_SATISFIED: ConditionNotSatisfiedError,
    StatusKind.NOT_FOUND: NotFoundError,
    StatusKind.UNEXPECTED: UnexpectedStatusError,
}


@dataclass(frozen=True)
class Status:
    code: int
    kind: StatusKind

    def is_success(self) -> bool:
        return self.kind is StatusKind.SUCCESS


def classify(sw: int) -> Status:
    try:
        return Status(sw, _KNOWN_STATUS_WORDS[StatusWord(sw)])
    except ValueError:
        return Status(sw, StatusKind.UNEXPECTED)


def status_error(status: Status, step: str) -> CardServiceError:
    if status.is_success():
        raise ValueError("A successful status does not describe an error")
    return _STATUS_ERRORS[status.kind](
        f"Could not {step}", step=step, status=status.code
    )
