"""Claim instructions that lock the claimed tokens in a voting escrow instead of paying them out."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from merkle_airdrop.claim import leaf_for_claim
from merkle_airdrop.claim_status import ClaimStatus
from merkle_airdrop.distributor import (
    ClaimedEvent,
    Clock,
    MerkleDistributor,
    NewClaimEvent,
    TokenAccount,
)
from merkle_airdrop.program_errors import AccountConstraintError, DistributorError, ErrorCode
from merkle_airdrop.pubkey import Pubkey
from merkle_airdrop.safe_math import IntKind, safe_add
from merkle_airdrop.verify import verify

logger = logging.getLogger(__name__)

_U64_MAX = (1 << 64) - 1
_SECONDS_PER_DAY = 24 * 60 * 60


@dataclass
class Escrow:
    """A voting escrow of a locker, holding locked tokens for its owner."""

    address: Pubkey
    owner: Pubkey
    locker: Pubkey
    tokens: TokenAccount
    is_max_lock: bool = True
    amount: int = 0

    def increase_locked_amount(self, source: TokenAccount, amount: int) -> None:
        """Move ``amount`` tokens from ``source`` into the escrow and lock them."""
        if amount < 0:
            raise ValueError("locked amount increase must not be negative")
        if self.amount + amount > _U64_MAX:
            raise OverflowError("escrow locked amount would overflow")
        source.transfer_to(self.tokens, amount)
        self.amount += amount


def _check_accounts(
    distributor: MerkleDistributor, vault: TokenAccount, escrow: Escrow
) -> None:
    if escrow.locker != distributor.locker:
        raise AccountConstraintError("has_one", "locker")
    if vault.address != distributor.token_vault:
        raise AccountConstraintError("address", "from")
    if vault.mint != distributor.mint:
        raise AccountConstraintError("associated_token::mint", "from")


def new_claim_and_stake(
    distributor: MerkleDistributor,
    claimant: Pubkey,
    amount_unlocked: int,
    amount_locked: int,
    proof: Sequence[bytes],
    vault: TokenAccount,
    escrow: Escrow,
    clock: Clock,
    operator: Pubkey | None = None,
) -> tuple[ClaimStatus, NewClaimEvent]:
    """Verify a claim and lock its unlocked amount plus bonus in ``escrow``.

    The vault's owner is taken as the distributor's address. Nothing is
    changed unless every check passes.
    """
    _check_accounts(distributor, vault, escrow)
    if distributor.clawed_back:
        raise DistributorError(ErrorCode.CLAIM_EXPIRED)
    distributor.authorize_claim_and_stake(operator)
    if not escrow.is_max_lock:
        raise DistributorError(ErrorCode.ESCROW_IS_NOT_MAX_LOCK)

    handler = distributor.activation_handler(clock)
    handler.validate_claim()

    num_nodes_claimed = safe_add(distributor.num_nodes_claimed, 1, IntKind.U64)
    if num_nodes_claimed > distributor.max_num_nodes:
        raise DistributorError(ErrorCode.MAX_NODES_EXCEEDED)

    leaf = leaf_for_claim(claimant, amount_unlocked, amount_locked)
    if not verify(proof, distributor.root, leaf):
        raise DistributorError(ErrorCode.INVALID_PROOF)

    status = ClaimStatus(
        admin=distributor.admin,
        distributor=vault.owner,
        claimant=claimant,
        locked_amount=amount_locked,
        locked_amount_withdrawn=0,
        unlocked_amount=amount_unlocked,
        bonus_amount=distributor.bonus_for_claimant(amount_unlocked, handler),
        closable=distributor.closable,
    )
    amount_with_bonus = status.total_unlocked_amount()

    total_claimed = safe_add(distributor.total_amount_claimed, amount_with_bonus, IntKind.U64)
    total_claimed_bonus = safe_add(
        distributor.airdrop_bonus.total_claimed_bonus, status.bonus_amount, IntKind.U64
    )
    if total_claimed > distributor.max_total_claim:
        raise DistributorError(ErrorCode.EXCEEDED_MAX_CLAIM)

    logger.info(
        "Created new claim with locked %d, unlocked %d and bonus %d with lockup start:%d end:%d",
        status.locked_amount,
        status.unlocked_amount,
        status.bonus_amount,
        distributor.start_ts,
        distributor.end_ts,
    )

    escrow.increase_locked_amount(vault, amount_with_bonus)
    distributor.num_nodes_claimed = num_nodes_claimed
    distributor.total_amount_claimed = total_claimed
    distributor.airdrop_bonus.total_claimed_bonus = total_claimed_bonus

    return status, NewClaimEvent(claimant=claimant, timestamp=clock.unix_timestamp)


def claim_locked_and_stake(
    distributor: MerkleDistributor,
    claim_status: ClaimStatus,
    claimant: Pubkey,
    vault: TokenAccount,
    escrow: Escrow,
    clock: Clock,
    operator: Pubkey | None = None,
) -> ClaimedEvent:
    """Lock in ``escrow`` the part of the locked amount vested so far and not yet taken."""
    _check_accounts(distributor, vault, escrow)
    if claim_status.distributor != vault.owner:
        raise AccountConstraintError("has_one", "distributor")
    if claim_status.claimant != claimant:
        raise AccountConstraintError("has_one", "claimant")
    if distributor.clawed_back:
        raise DistributorError(ErrorCode.CLAIM_EXPIRED)
    distributor.authorize_claim_and_stake(operator)
    if not escrow.is_max_lock:
        raise DistributorError(ErrorCode.ESCROW_IS_NOT_MAX_LOCK)

    handler = distributor.activation_handler(clock)
    handler.validate_claim()

    curr_ts = clock.unix_timestamp
    amount = claim_status.amount_withdrawable(curr_ts, distributor.start_ts, distributor.end_ts)
    if amount <= 0:
        raise DistributorError(ErrorCode.INSUFFICIENT_UNLOCKED_TOKENS)

    withdrawn = safe_add(claim_status.locked_amount_withdrawn, amount, IntKind.U64)
    if withdrawn > claim_status.locked_amount:
        raise DistributorError(ErrorCode.EXCEEDED_MAX_CLAIM)

    total_claimed = safe_add(distributor.total_amount_claimed, amount, IntKind.U64)
    if total_claimed > distributor.max_total_claim:
        raise DistributorError(ErrorCode.EXCEEDED_MAX_CLAIM)

    remaining = distributor.end_ts - curr_ts if curr_ts < distributor.end_ts else 0
    days, seconds = divmod(remaining, _SECONDS_PER_DAY)
    logger.info(
        "Withdrew amount %d with %d days and %d seconds left in lockup", amount, days, seconds
    )

    escrow.increase_locked_amount(vault, amount)
    claim_status.locked_amount_withdrawn = withdrawn
    distributor.total_amount_claimed = total_claimed

    return ClaimedEvent(claimant=claimant, amount=amount)