"""Error codes reported by the distributor program and the exceptions carrying them."""

from __future__ import annotations

from enum import Enum

# Custom program error codes start at this offset.
ERROR_CODE_OFFSET = 6000


class ErrorCode(Enum):
    """Program error codes; ``value`` is the numeric code, ``message`` the text."""

    message: str

    def __new__(cls, code: int, message: str) -> ErrorCode:
        member = object.__new__(cls)
        member._value_ = code
        member.message = message
        return member

    INSUFFICIENT_UNLOCKED_TOKENS = (ERROR_CODE_OFFSET + 0, "Insufficient unlocked tokens")
    START_TOO_FAR_IN_FUTURE = (ERROR_CODE_OFFSET + 1, "Deposit Start too far in future")
    INVALID_PROOF = (ERROR_CODE_OFFSET + 2, "Invalid Merkle proof.")
    EXCEEDED_MAX_CLAIM = (ERROR_CODE_OFFSET + 3, "Exceeded maximum claim amount")
    MAX_NODES_EXCEEDED = (ERROR_CODE_OFFSET + 4, "Exceeded maximum node count")
    UNAUTHORIZED = (
        ERROR_CODE_OFFSET + 5,
        "Account is not authorized to execute this instruction",
    )
    OWNER_MISMATCH = (ERROR_CODE_OFFSET + 6, "Token account owner did not match intended owner")
    CLAWBACK_DURING_VESTING = (ERROR_CODE_OFFSET + 7, "Clawback cannot be before vesting ends")
    CLAWBACK_BEFORE_START = (ERROR_CODE_OFFSET + 8, "Attempted clawback before start")
    CLAWBACK_ALREADY_CLAIMED = (ERROR_CODE_OFFSET + 9, "Clawback already claimed")
    INSUFFICIENT_CLAWBACK_DELAY = (
        ERROR_CODE_OFFSET + 10,
        "Clawback start must be at least one day after vesting end",
    )
    SAME_CLAWBACK_RECEIVER = (
        ERROR_CODE_OFFSET + 11,
        "New and old Clawback receivers are identical",
    )
    SAME_ADMIN = (ERROR_CODE_OFFSET + 12, "New and old admin are identical")
    CLAIM_EXPIRED = (ERROR_CODE_OFFSET + 13, "Claim window expired")
    ARITHMETIC_ERROR = (ERROR_CODE_OFFSET + 14, "Arithmetic Error (overflow/underflow)")
    START_TIMESTAMP_AFTER_END = (
        ERROR_CODE_OFFSET + 15,
        "Start Timestamp cannot be after end Timestamp",
    )
    TIMESTAMPS_NOT_IN_FUTURE = (ERROR_CODE_OFFSET + 16, "Timestamps cannot be in the past")
    INVALID_VERSION = (ERROR_CODE_OFFSET + 17, "Airdrop Version Mismatch")
    CLAIMING_IS_NOT_STARTED = (ERROR_CODE_OFFSET + 18, "Claiming is not started")
    CANNOT_CLOSE_DISTRIBUTOR = (ERROR_CODE_OFFSET + 19, "Cannot close distributor")
    CANNOT_CLOSE_CLAIM_STATUS = (ERROR_CODE_OFFSET + 20, "Cannot close claim status")
    INVALID_ACTIVATION_TYPE = (ERROR_CODE_OFFSET + 21, "Invalid activation type")
    TYPE_CASTED_ERROR = (ERROR_CODE_OFFSET + 22, "Type casted error")
    INVALID_OPERATOR = (ERROR_CODE_OFFSET + 23, "Invalid operator")
    INVALID_CLAIM_TYPE = (ERROR_CODE_OFFSET + 24, "Invalid claim type")
    SAME_OPERATOR = (ERROR_CODE_OFFSET + 25, "Same operator")
    INVALID_LOCKER = (ERROR_CODE_OFFSET + 26, "Invalid locker")
    ESCROW_IS_NOT_MAX_LOCK = (ERROR_CODE_OFFSET + 27, "Escrow is not max lock")


class DistributorError(Exception):
    """An instruction failed with one of the program's error codes."""

    def __init__(self, code: ErrorCode) -> None:
        super().__init__(code.message)
        self.code = code


class AccountConstraintError(Exception):
    """An account did not satisfy a constraint the instruction requires."""

    def __init__(self, constraint: str, account: str) -> None:
        super().__init__(f"{constraint} constraint violated by account {account}")
        self.constraint = constraint
        self.account = account