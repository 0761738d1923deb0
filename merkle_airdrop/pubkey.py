"""Public keys, base58 text form and program-derived addresses."""

from __future__ import annotations

import itertools
from collections.abc import Sequence
from dataclasses import dataclass

from merkle_airdrop.verify import hashv

_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_INDEX = {char: value for value, char in enumerate(_ALPHABET)}

PUBKEY_BYTES = 32
MAX_BASE58_LEN = 44
MAX_SEEDS = 16
MAX_SEED_LEN = 32
PDA_MARKER = b"ProgramDerivedAddress"

_P = 2**255 - 19
_D = (-121665 * pow(121666, _P - 2, _P)) % _P


def b58encode(data: bytes) -> str:
    """Encode bytes as base58 text."""
    data = bytes(data)
    stripped = data.lstrip(b"\x00")
    number = int.from_bytes(stripped, "big")
    chars = []
    while number:
        number, rem = divmod(number, 58)
        chars.append(_ALPHABET[rem])
    return "1" * (len(data) - len(stripped)) + "".join(reversed(chars))


def b58decode(text: str) -> bytes:
    """Decode base58 text into bytes."""
    number = 0
    for char in text:
        try:
            number = number * 58 + _INDEX[char]
        except KeyError:
            raise ValueError(f"invalid base58 character {char!r}") from None
    padding = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    return b"\x00" * padding + body


def is_on_curve(data: bytes) -> bool:
    """Whether 32 bytes decompress to a point on the ed25519 curve."""
    data = bytes(data)
    if len(data) != PUBKEY_BYTES:
        return False
    y = (int.from_bytes(data, "little") & ((1 << 255) - 1)) % _P
    y2 = y * y % _P
    u = (y2 - 1) % _P
    v = (_D * y2 + 1) % _P
    x2 = u * pow(v, _P - 2, _P) % _P
    return x2 == 0 or pow(x2, (_P - 1) // 2, _P) == 1


_unique_counter = itertools.count(1)


@dataclass(frozen=True, order=True, repr=False)
class Pubkey:
    """A 32-byte account address."""

    key: bytes

    def __post_init__(self) -> None:
        key = bytes(self.key)
        if len(key) != PUBKEY_BYTES:
            raise ValueError(f"a pubkey is {PUBKEY_BYTES} bytes, got {len(key)}")
        object.__setattr__(self, "key", key)

    @classmethod
    def from_string(cls, text: str) -> Pubkey:
        """Parse a base58 address."""
        if len(text) > MAX_BASE58_LEN:
            raise ValueError("base58 pubkey string is too long")
        decoded = b58decode(text)
        if len(decoded) != PUBKEY_BYTES:
            raise ValueError(f"decoded pubkey has {len(decoded)} bytes")
        return cls(decoded)

    @classmethod
    def default(cls) -> Pubkey:
        """The all-zero key."""
        return cls(bytes(PUBKEY_BYTES))

    @classmethod
    def new_unique(cls) -> Pubkey:
        """A key distinct from every other one made this way in the process."""
        counter = next(_unique_counter)
        return cls(counter.to_bytes(8, "big") + bytes(PUBKEY_BYTES - 8))

    def __str__(self) -> str:
        return b58encode(self.key)

    def __repr__(self) -> str:
        return f"Pubkey({self})"

    def __bytes__(self) -> bytes:
        return self.key


def _check_seeds(seeds: Sequence[bytes], extra: int = 0) -> list[bytes]:
    parts = [bytes(seed) for seed in seeds]
    if len(parts) + extra > MAX_SEEDS:
        raise ValueError(f"at most {MAX_SEEDS} seeds are allowed")
    for seed in parts:
        if len(seed) > MAX_SEED_LEN:
            raise ValueError(f"seeds are at most {MAX_SEED_LEN} bytes long")
    return parts


def _derive(parts: Sequence[bytes], program_id: Pubkey) -> bytes:
    return hashv(*parts, bytes(program_id), PDA_MARKER)


def create_program_address(seeds: Sequence[bytes], program_id: Pubkey) -> Pubkey:
    """Derive the address for ``seeds``; raise if it lies on the curve."""
    digest = _derive(_check_seeds(seeds), program_id)
    if is_on_curve(digest):
        raise ValueError("invalid seeds: derived address lies on the ed25519 curve")
    return Pubkey(digest)


def find_program_address(seeds: Sequence[bytes], program_id: Pubkey) -> tuple[Pubkey, int]:
    """Find the first off-curve address, trying bump seeds from 255 down."""
    parts = _check_seeds(seeds, extra=1)
    for bump in range(255, 0, -1):
        digest = _derive([*parts, bytes([bump])], program_id)
        if not is_on_curve(digest):
            return Pubkey(digest), bump
    raise ValueError("unable to find a viable program address bump seed")


def get_merkle_distributor_pda(
    program_id: Pubkey, base: Pubkey, mint: Pubkey, version: int
) -> tuple[Pubkey, int]:
    """Address of the distributor for ``base``, ``mint`` and ``version``."""
    return find_program_address(
        [b"MerkleDistributor", bytes(base), bytes(mint), version.to_bytes(8, "little")],
        program_id,
    )


def get_claim_status_pda(
    program_id: Pubkey, claimant: Pubkey, distributor: Pubkey
) -> tuple[Pubkey, int]:
    """Address of a claimant's claim status under ``distributor``."""
    return find_program_address(
        [b"ClaimStatus", bytes(claimant), bytes(distributor)],
        program_id,
    )