"""Merkle-tree airdrops: tree building, proofs and an in-memory distributor claim model."""

__version__ = "0.0.1"

__all__ = [
    "admin",
    "airdrop_tree",
    "claim",
    "claim_status",
    "csv_entry",
    "distributor",
    "errors",
    "merkle_tree",
    "program_errors",
    "pubkey",
    "safe_math",
    "stake",
    "tree_node",
    "verify",
]