"""Per-claimant record of what was claimed from a distributor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from merkle_airdrop.pubkey import Pubkey
from merkle_airdrop.safe_math import IntKind, safe_add, safe_div, safe_mul, safe_sub

_U64_MASK = (1 << 64) - 1


@dataclass
class ClaimStatus:
    """Whether and how much a claimant has claimed."""

    SPACE: ClassVar[int] = 152

    admin: Pubkey = field(default_factory=Pubkey.default)
    distributor: Pubkey = field(default_factory=Pubkey.default)
    claimant: Pubkey = field(default_factory=Pubkey.default)
    locked_amount: int = 0
    locked_amount_withdrawn: int = 0
    unlocked_amount: int = 0
    bonus_amount: int = 0
    closable: bool = False

    def amount_withdrawable(self, curr_ts: int, start_ts: int, end_ts: int) -> int:
        """Vested locked amount not yet withdrawn."""
        return safe_sub(
            self.vested_amount(curr_ts, start_ts, end_ts),
            self.locked_amount_withdrawn,
            IntKind.U64,
        )

    def vested_amount(self, curr_ts: int, start_ts: int, end_ts: int) -> int:
        """Locked amount released linearly between ``start_ts`` and ``end_ts``."""
        if curr_ts < start_ts:
            return 0
        if curr_ts >= end_ts:
            return self.locked_amount
        time_into_unlock = safe_sub(curr_ts, start_ts, IntKind.I64)
        total_unlock_time = safe_sub(end_ts, start_ts, IntKind.I64)
        product = safe_mul(time_into_unlock, self.locked_amount, IntKind.U128)
        return safe_div(product, total_unlock_time, IntKind.U128) & _U64_MASK

    def total_unlocked_amount(self) -> int:
        """Unlocked amount plus bonus."""
        return safe_add(self.unlocked_amount, self.bonus_amount, IntKind.U64)