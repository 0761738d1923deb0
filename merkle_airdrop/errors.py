"""Errors raised while building and validating airdrop merkle trees."""

from __future__ import annotations


class MerkleTreeError(Exception):
    """Base class for every merkle tree failure."""


class MerkleValidationError(MerkleTreeError):
    """A tree failed one of its consistency checks."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Merkle Tree Validation Error: {message}")
        self.message = message


class MerkleRootError(MerkleTreeError):
    """A tree has no root (it was built from no leaves)."""

    def __init__(self) -> None:
        super().__init__("Merkle Root Error")