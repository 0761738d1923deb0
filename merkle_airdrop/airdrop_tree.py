"""Airdrop merkle tree: claim nodes, their proofs and the root to publish."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any

from merkle_airdrop.csv_entry import CsvEntry
from merkle_airdrop.errors import MerkleRootError, MerkleTreeError, MerkleValidationError
from merkle_airdrop.merkle_tree import LEAF_PREFIX, MerkleTree
from merkle_airdrop.pubkey import Pubkey
from merkle_airdrop.tree_node import (
    U64_MAX,
    TreeNode,
    get_proof,
    get_total_locked_amount,
    get_total_unlocked_amount,
)
from merkle_airdrop.verify import hashv, verify

logger = logging.getLogger(__name__)

MAX_NUM_NODES = 2**32 - 1


@dataclass
class UserProof:
    """What a claimant needs to submit a claim."""

    merkle_tree: str
    amount: int
    locked_amount: int
    proof: list[bytes]


def _u64(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U64_MAX:
        raise ValueError(f"expected an unsigned 64-bit integer, got {value!r}")
    return value


def _bytes32(value: Any) -> bytes:
    if not isinstance(value, list) or len(value) != 32:
        raise ValueError("expected an array of 32 bytes")
    if any(isinstance(b, bool) or not isinstance(b, int) or not 0 <= b <= 255 for b in value):
        raise ValueError("byte values must be integers from 0 to 255")
    return bytes(value)


def _node_to_dict(node: TreeNode) -> dict[str, Any]:
    return {
        "claimant": list(bytes(node.claimant)),
        "amount": node.amount,
        "locked_amount": node.locked_amount,
        "proof": None if node.proof is None else [list(p) for p in node.proof],
    }


def _node_from_dict(data: dict[str, Any]) -> TreeNode:
    proof = data["proof"]
    if proof is not None and not isinstance(proof, list):
        raise ValueError("proof must be an array or null")
    return TreeNode(
        claimant=Pubkey(_bytes32(data["claimant"])),
        amount=_u64(data["amount"]),
        locked_amount=_u64(data["locked_amount"]),
        proof=None if proof is None else [_bytes32(p) for p in proof],
    )


@dataclass
class AirdropMerkleTree:
    """Everything needed to verify claims against a published merkle root."""

    merkle_root: bytes
    airdrop_version: int
    max_num_nodes: int
    total_unlocked_amount: int
    total_locked_amount: int
    tree_nodes: list[TreeNode]

    @classmethod
    def build(cls, tree_nodes: Iterable[TreeNode], airdrop_version: int) -> AirdropMerkleTree:
        """Build and validate a tree; nodes sharing a claimant are combined in place."""
        combined: dict[Pubkey, TreeNode] = {}
        for node in tree_nodes:
            existing = combined.get(node.claimant)
            if existing is None:
                combined[node.claimant] = replace(node)
                continue
            logger.info("duplicate claimant %s found, combining", existing.claimant)
            existing.amount = _checked_add(existing.amount, node.amount)
            existing.locked_amount = _checked_add(existing.locked_amount, node.locked_amount)

        nodes = list(combined.values())
        tree = MerkleTree([node.hash() for node in nodes], True)
        for index, node in enumerate(nodes):
            node.proof = get_proof(tree, index)

        root = tree.root()
        if root is None:
            raise MerkleRootError()
        result = cls(
            merkle_root=root,
            airdrop_version=airdrop_version,
            max_num_nodes=len(nodes),
            total_unlocked_amount=get_total_unlocked_amount(nodes),
            total_locked_amount=get_total_locked_amount(nodes),
            tree_nodes=nodes,
        )
        logger.info(
            "created merkle tree version %d with %d nodes and total_unlocked_amount %d "
            "total_locked_amount %d",
            airdrop_version,
            result.max_num_nodes,
            result.total_unlocked_amount,
            result.total_locked_amount,
        )
        result._validate()
        return result

    @classmethod
    def from_csv(
        cls, path: str | os.PathLike[str], version: int, decimals: int
    ) -> AirdropMerkleTree:
        """Build a tree from a CSV file of UI amounts."""
        return cls.from_entries(CsvEntry.read_file(path), version, decimals)

    @classmethod
    def from_entries(
        cls, csv_entries: Iterable[CsvEntry], version: int, decimals: int
    ) -> AirdropMerkleTree:
        """Build a tree from parsed CSV entries."""
        return cls.build((TreeNode.from_csv(entry, decimals) for entry in csv_entries), version)

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> AirdropMerkleTree:
        """Load a tree previously written with :meth:`write_to_file`."""
        try:
            with open(path, encoding="utf-8") as handle:
                text = handle.read()
        except OSError as exc:
            raise MerkleTreeError(f"io Error: {exc}") from exc
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise MerkleTreeError(f"Serde Error: {exc}") from exc
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AirdropMerkleTree:
        """Rebuild a tree from its JSON-compatible form, without validating it."""
        try:
            nodes = data["tree_nodes"]
            if not isinstance(nodes, list):
                raise ValueError("tree_nodes must be an array")
            return cls(
                merkle_root=_bytes32(data["merkle_root"]),
                airdrop_version=_u64(data["airdrop_version"]),
                max_num_nodes=_u64(data["max_num_nodes"]),
                total_unlocked_amount=_u64(data["total_unlocked_amount"]),
                total_locked_amount=_u64(data["total_locked_amount"]),
                tree_nodes=[_node_from_dict(node) for node in nodes],
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise MerkleTreeError(f"Serde Error: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible form; byte arrays become lists of integers."""
        return {
            "merkle_root": list(self.merkle_root),
            "airdrop_version": self.airdrop_version,
            "max_num_nodes": self.max_num_nodes,
            "total_unlocked_amount": self.total_unlocked_amount,
            "total_locked_amount": self.total_locked_amount,
            "tree_nodes": [_node_to_dict(node) for node in self.tree_nodes],
        }

    def write_to_file(self, path: str | os.PathLike[str]) -> None:
        """Write the tree as pretty-printed JSON."""
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(json.dumps(self.to_dict(), indent=2))

    def max_total_claim(self) -> int:
        """Unlocked plus locked totals."""
        return _checked_add(self.total_unlocked_amount, self.total_locked_amount)

    def get_node(self, claimant: Pubkey) -> TreeNode:
        """A copy of the node for ``claimant``; KeyError if absent."""
        for node in self.tree_nodes:
            if node.claimant == claimant:
                return replace(node, proof=None if node.proof is None else list(node.proof))
        raise KeyError(f"Claimant not found in tree: {claimant}")

    def _validate(self) -> None:
        if self.max_num_nodes > MAX_NUM_NODES:
            raise MerkleValidationError(
                f"Max num nodes {self.max_num_nodes} is greater than 2^32 - 1"
            )
        if len(self.tree_nodes) != self.max_num_nodes:
            raise MerkleValidationError(
                f"Tree nodes length {len(self.tree_nodes)} does not match "
                f"max_num_nodes {self.max_num_nodes}"
            )
        if len({node.claimant for node in self.tree_nodes}) != len(self.tree_nodes):
            raise MerkleValidationError("Duplicate claimants found")
        unlocked = get_total_unlocked_amount(self.tree_nodes)
        if unlocked != self.total_unlocked_amount:
            raise MerkleValidationError(
                f"Tree nodes total_unlocked_amount {unlocked} does not match "
                f"{self.total_unlocked_amount}"
            )
        locked = get_total_locked_amount(self.tree_nodes)
        if locked != self.total_locked_amount:
            raise MerkleValidationError(
                f"Tree nodes total_locked_amount {locked} does not match "
                f"{self.total_locked_amount}"
            )
        try:
            self.verify_proof()
        except MerkleValidationError as exc:
            raise MerkleValidationError("Merkle root is invalid given nodes") from exc

    def verify_proof(self) -> None:
        """Check that the nodes rebuild the root and each leaf proves against it."""
        hashed = [node.hash() for node in self.tree_nodes]
        tree = MerkleTree(hashed, True)
        root = tree.root()
        if root is None:
            raise MerkleValidationError("invalid merkle proof")
        if root != self.merkle_root:
            raise MerkleValidationError("merkle root does not match the tree nodes")
        for index, node_hash in enumerate(hashed):
            leaf = hashv(LEAF_PREFIX, node_hash)
            if not verify(get_proof(tree, index), self.merkle_root, leaf):
                raise MerkleValidationError("invalid merkle proof")

    def by_claimant(self) -> dict[Pubkey, TreeNode]:
        """Nodes keyed by claimant."""
        return {node.claimant: node for node in self.tree_nodes}


def _checked_add(lhs: int, rhs: int) -> int:
    total = lhs + rhs
    if total > U64_MAX:
        raise OverflowError(f"{total} does not fit in an unsigned 64-bit integer")
    return total