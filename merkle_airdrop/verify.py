"""Hashing and sorted-pair merkle proof verification."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable

_INTERMEDIATE_PREFIX = b"\x01"


def hashv(*args: bytes) -> bytes:
    """Return the SHA-256 digest of the concatenation of ``args``."""
    digest = hashlib.sha256()
    for part in args:
        digest.update(bytes(part))
    return digest.digest()


def verify(proof: Iterable[bytes], root: bytes, leaf: bytes) -> bool:
    """Return whether ``leaf`` belongs to the tree with ``root``.

    Each pair of nodes along the path is hashed in sorted order.
    """
    computed = bytes(leaf)
    for element in proof:
        element = bytes(element)
        if computed <= element:
            computed = hashv(_INTERMEDIATE_PREFIX, computed, element)
        else:
            computed = hashv(_INTERMEDIATE_PREFIX, element, computed)
    return computed == bytes(root)