"""Checked fixed-width integer arithmetic that fails with an arithmetic error code."""

from __future__ import annotations

import logging
from enum import Enum

from merkle_airdrop.program_errors import DistributorError, ErrorCode

logger = logging.getLogger(__name__)

_OFFSET_MAX = 2**32 - 1


class IntKind(Enum):
    """Fixed-width integer types the checked operations work on."""

    bits: int
    signed: bool

    def __new__(cls, name: str, bits: int, signed: bool) -> IntKind:
        member = object.__new__(cls)
        member._value_ = name
        member.bits = bits
        member.signed = signed
        return member

    U16 = ("u16", 16, False)
    I32 = ("i32", 32, True)
    U32 = ("u32", 32, False)
    U64 = ("u64", 64, False)
    I64 = ("i64", 64, True)
    U128 = ("u128", 128, False)
    I128 = ("i128", 128, True)
    USIZE = ("usize", 64, False)

    @property
    def min(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    def contains(self, value: int) -> bool:
        return self.min <= value <= self.max


def _operand(value: int, kind: IntKind) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {value!r}")
    if not kind.contains(value):
        raise ValueError(f"{value} is not a valid {kind.value}")
    return value


def _offset(offset: int) -> int:
    if isinstance(offset, bool) or not isinstance(offset, int):
        raise TypeError(f"expected an integer offset, got {offset!r}")
    if not 0 <= offset <= _OFFSET_MAX:
        raise ValueError(f"{offset} is not a valid u32 offset")
    return offset


def _fail(op: str, lhs: int, rhs: int, kind: IntKind) -> DistributorError:
    logger.warning("Math error thrown at %s(%d, %d) on %s", op, lhs, rhs, kind.value)
    return DistributorError(ErrorCode.ARITHMETIC_ERROR)


def _checked(op: str, lhs: int, rhs: int, kind: IntKind, result: int) -> int:
    if not kind.contains(result):
        raise _fail(op, lhs, rhs, kind)
    return result


def _truncated_quotient(lhs: int, rhs: int) -> int:
    quotient = abs(lhs) // abs(rhs)
    return -quotient if (lhs < 0) != (rhs < 0) else quotient


def safe_add(lhs: int, rhs: int, kind: IntKind) -> int:
    """``lhs + rhs``; raises an arithmetic error on overflow."""
    _operand(lhs, kind), _operand(rhs, kind)
    return _checked("safe_add", lhs, rhs, kind, lhs + rhs)


def safe_sub(lhs: int, rhs: int, kind: IntKind) -> int:
    """``lhs - rhs``; raises an arithmetic error on overflow or underflow."""
    _operand(lhs, kind), _operand(rhs, kind)
    return _checked("safe_sub", lhs, rhs, kind, lhs - rhs)


def safe_mul(lhs: int, rhs: int, kind: IntKind) -> int:
    """``lhs * rhs``; raises an arithmetic error on overflow."""
    _operand(lhs, kind), _operand(rhs, kind)
    return _checked("safe_mul", lhs, rhs, kind, lhs * rhs)


def safe_div(lhs: int, rhs: int, kind: IntKind) -> int:
    """Quotient rounded toward zero; raises on division by zero or overflow."""
    _operand(lhs, kind), _operand(rhs, kind)
    if rhs == 0:
        raise _fail("safe_div", lhs, rhs, kind)
    return _checked("safe_div", lhs, rhs, kind, _truncated_quotient(lhs, rhs))


def safe_rem(lhs: int, rhs: int, kind: IntKind) -> int:
    """Remainder with the sign of ``lhs``; raises on division by zero or overflow."""
    _operand(lhs, kind), _operand(rhs, kind)
    if rhs == 0:
        raise _fail("safe_rem", lhs, rhs, kind)
    quotient = _checked("safe_rem", lhs, rhs, kind, _truncated_quotient(lhs, rhs))
    return lhs - rhs * quotient


def safe_shl(value: int, offset: int, kind: IntKind) -> int:
    """Shift left, dropping bits past the width; raises if ``offset`` >= width."""
    _operand(value, kind), _offset(offset)
    if offset >= kind.bits:
        raise _fail("safe_shl", value, offset, kind)
    raw = (value << offset) & ((1 << kind.bits) - 1)
    if kind.signed and raw > kind.max:
        raw -= 1 << kind.bits
    return raw


def safe_shr(value: int, offset: int, kind: IntKind) -> int:
    """Shift right (arithmetic for signed kinds); raises if ``offset`` >= width."""
    _operand(value, kind), _offset(offset)
    if offset >= kind.bits:
        raise _fail("safe_shr", value, offset, kind)
    return value >> offset