"""Binary merkle tree with domain-separated leaf and intermediate hashes."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from merkle_airdrop.verify import hashv

# Leaves and intermediate nodes carry distinct prefixes so that an
# intermediate node can never be passed off as a leaf.
LEAF_PREFIX = b"\x00"
INTERMEDIATE_PREFIX = b"\x01"


def hash_leaf(data: bytes) -> bytes:
    """Hash a leaf item."""
    return hashv(LEAF_PREFIX, data)


def hash_intermediate(left: bytes, right: bytes) -> bytes:
    """Hash two child nodes into their parent."""
    return hashv(INTERMEDIATE_PREFIX, left, right)


def next_level_len(level_len: int) -> int:
    """Number of nodes in the level above one of ``level_len`` nodes."""
    if level_len == 1:
        return 0
    return (level_len + 1) // 2


def calculate_capacity(leaf_count: int) -> int:
    """Upper bound on the total node count of a tree with ``leaf_count`` leaves."""
    if leaf_count <= 0:
        return 0
    return (leaf_count.bit_length() - 1) + 2 * leaf_count + 1


@dataclass(frozen=True)
class ProofEntry:
    """One step of a path: the parent hash and exactly one sibling."""

    target: bytes
    left_sibling: bytes | None
    right_sibling: bytes | None

    def __post_init__(self) -> None:
        if (self.left_sibling is None) == (self.right_sibling is None):
            raise ValueError("exactly one of left_sibling and right_sibling must be set")


@dataclass
class Proof:
    """Path of proof entries from a leaf up to the root."""

    entries: list[ProofEntry] = field(default_factory=list)

    def push(self, entry: ProofEntry) -> None:
        self.entries.append(entry)

    def verify(self, candidate: bytes) -> bool:
        """Check that ``candidate`` hashes up through every entry."""
        for entry in self.entries:
            left = entry.left_sibling if entry.left_sibling is not None else candidate
            right = entry.right_sibling if entry.right_sibling is not None else candidate
            candidate = hash_intermediate(left, right)
            if candidate != entry.target:
                return False
        return True

    def __iter__(self) -> Iterator[ProofEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


class MerkleTree:
    """Merkle tree over a sequence of byte strings.

    An odd node at the end of a level is paired with itself. With
    ``sorted_hashes`` each pair is hashed smaller-first.
    """

    def __init__(self, items: Sequence[bytes], sorted_hashes: bool = False) -> None:
        self.leaf_count = len(items)
        self.sorted_hashes = sorted_hashes
        level = [hash_leaf(bytes(item)) for item in items]
        self.levels: list[list[bytes]] = [level] if level else []
        while len(level) > 1:
            padded = level + [level[-1]] if len(level) % 2 else level
            pairs = iter(padded)
            level = [self._combine(left, right) for left, right in zip(pairs, pairs)]
            self.levels.append(level)

    def _combine(self, left: bytes, right: bytes) -> bytes:
        if self.sorted_hashes and right < left:
            left, right = right, left
        return hash_intermediate(left, right)

    @property
    def nodes(self) -> list[bytes]:
        """All nodes, level by level from the leaves up."""
        return [node for level in self.levels for node in level]

    def root(self) -> bytes | None:
        """The root hash, or None for an empty tree."""
        return self.levels[-1][-1] if self.levels else None

    def find_path(self, index: int) -> Proof | None:
        """Proof for the leaf at ``index``, or None if out of range."""
        if not 0 <= index < self.leaf_count:
            return None
        proof = Proof()
        node_index = index
        for lower, upper in zip(self.levels, self.levels[1:]):
            if node_index % 2 == 0:
                left = None
                right = lower[node_index + 1] if node_index + 1 < len(lower) else lower[node_index]
            else:
                left = lower[node_index - 1]
                right = None
            node_index //= 2
            proof.push(ProofEntry(upper[node_index], left, right))
        return proof