"""Claim leaves of an airdrop tree and helpers over lists of them."""

from __future__ import annotations

import decimal
from collections.abc import Iterable
from dataclasses import dataclass

from merkle_airdrop.csv_entry import CsvEntry
from merkle_airdrop.merkle_tree import MerkleTree
from merkle_airdrop.pubkey import Pubkey
from merkle_airdrop.verify import hashv

U64_MAX = 2**64 - 1


def _checked_u64(value: int) -> int:
    if value > U64_MAX:
        raise OverflowError(f"{value} does not fit in an unsigned 64-bit integer")
    return value


@dataclass
class TreeNode:
    """Claim information for one account."""

    claimant: Pubkey
    amount: int
    locked_amount: int
    proof: list[bytes] | None = None

    def hash(self) -> bytes:
        """Hash of claimant, unlocked and locked amounts (little-endian u64s)."""
        return hashv(
            bytes(self.claimant),
            self.amount.to_bytes(8, "little"),
            self.locked_amount.to_bytes(8, "little"),
        )

    def total_amount(self) -> int:
        """Unlocked plus locked amount."""
        return _checked_u64(self.amount + self.locked_amount)

    @classmethod
    def from_csv(cls, entry: CsvEntry, decimals: int) -> TreeNode:
        """Build a node from a CSV entry, scaling UI amounts by ``decimals``."""
        return cls(
            claimant=Pubkey.from_string(entry.pubkey),
            amount=ui_amount_to_token_amount(entry.amount, decimals),
            locked_amount=ui_amount_to_token_amount(entry.locked_amount, decimals),
        )


def ui_amount_to_token_amount(amount: str, decimals: int) -> int:
    """Convert a UI amount to base units, rounding down."""
    if decimals < 0:
        raise ValueError("decimals must not be negative")
    scale = _checked_u64(10**decimals)
    try:
        value = decimal.Decimal(amount)
    except decimal.InvalidOperation:
        raise ValueError(f"invalid amount {amount!r}") from None
    if not value.is_finite():
        raise ValueError(f"invalid amount {amount!r}")
    with decimal.localcontext() as ctx:
        ctx.prec = 100
        scaled = (value * scale).to_integral_value(rounding=decimal.ROUND_FLOOR)
    result = int(scaled)
    if result < 0:
        raise ValueError(f"amount {amount!r} is negative")
    return _checked_u64(result)


def get_proof(merkle_tree: MerkleTree, index: int) -> list[bytes]:
    """Sibling hashes along the path from leaf ``index`` to the root."""
    path = merkle_tree.find_path(index)
    if path is None:
        raise IndexError(f"no leaf at index {index}")
    return [
        entry.left_sibling if entry.left_sibling is not None else entry.right_sibling
        for entry in path
    ]


def get_total_unlocked_amount(nodes: Iterable[TreeNode]) -> int:
    """Sum of unlocked amounts; raises OverflowError past u64."""
    total = 0
    for node in nodes:
        total = _checked_u64(total + node.amount)
    return total


def get_total_locked_amount(nodes: Iterable[TreeNode]) -> int:
    """Sum of locked amounts; raises OverflowError past u64."""
    total = 0
    for node in nodes:
        total = _checked_u64(total + node.locked_amount)
    return total