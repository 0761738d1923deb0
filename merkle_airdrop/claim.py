"""Claim instructions: first claim against the merkle root and later locked withdrawals."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from merkle_airdrop.claim_status import ClaimStatus
from merkle_airdrop.distributor import (
    ClaimedEvent,
    Clock,
    MerkleDistributor,
    NewClaimEvent,
    TokenAccount,
)
from merkle_airdrop.merkle_tree import LEAF_PREFIX
from merkle_airdrop.program_errors import AccountConstraintError, DistributorError, ErrorCode
from merkle_airdrop.pubkey import Pubkey
from merkle_airdrop.safe_math import IntKind, safe_add
from merkle_airdrop.verify import hashv, verify

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 24 * 60 * 60


def _check_vault(distributor: MerkleDistributor, vault: TokenAccount) -> None:
    if vault.address != distributor.token_vault:
        raise AccountConstraintError("address", "from")
    if vault.mint != distributor.mint:
        raise AccountConstraintError("associated_token::mint", "from")


def leaf_for_claim(claimant: Pubkey, amount_unlocked: int, amount_locked: int) -> bytes:
    """The leaf hash a claim must prove against the distributor root."""
    node = hashv(
        bytes(claimant),
        amount_unlocked.to_bytes(8, "little"),
        amount_locked.to_bytes(8, "little"),
    )
    return hashv(LEAF_PREFIX, node)


def new_claim(
    distributor: MerkleDistributor,
    claimant: Pubkey,
    amount_unlocked: int,
    amount_locked: int,
    proof: Sequence[bytes],
    vault: TokenAccount,
    destination: TokenAccount,
    clock: Clock,
    operator: Pubkey | None = None,
) -> tuple[ClaimStatus, NewClaimEvent]:
    """Verify a claim, pay out its unlocked amount plus bonus and record it.

    The vault's owner is taken as the distributor's address. Nothing is
    changed unless every check passes.
    """
    _check_vault(distributor, vault)
    if distributor.clawed_back:
        raise DistributorError(ErrorCode.CLAIM_EXPIRED)
    distributor.authorize_claim(operator)

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
        "Created new claim with locked %d, unlocked %d and bonus %d with lockup "
        "start:%d end:%d, activation_point %d current_point %d",
        status.locked_amount,
        status.unlocked_amount,
        status.bonus_amount,
        distributor.start_ts,
        distributor.end_ts,
        handler.activation_point,
        handler.curr_point,
    )

    vault.transfer_to(destination, amount_with_bonus)
    distributor.num_nodes_claimed = num_nodes_claimed
    distributor.total_amount_claimed = total_claimed
    distributor.airdrop_bonus.total_claimed_bonus = total_claimed_bonus

    return status, NewClaimEvent(claimant=claimant, timestamp=clock.unix_timestamp)


def claim_locked(
    distributor: MerkleDistributor,
    claim_status: ClaimStatus,
    claimant: Pubkey,
    vault: TokenAccount,
    destination: TokenAccount,
    clock: Clock,
    operator: Pubkey | None = None,
) -> ClaimedEvent:
    """Withdraw the part of the locked amount vested so far and not yet taken."""
    _check_vault(distributor, vault)
    if claim_status.distributor != vault.owner:
        raise AccountConstraintError("has_one", "distributor")
    if claim_status.claimant != claimant:
        raise AccountConstraintError("has_one", "claimant")
    if distributor.clawed_back:
        raise DistributorError(ErrorCode.CLAIM_EXPIRED)
    distributor.authorize_claim(operator)

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

    vault.transfer_to(destination, amount)
    claim_status.locked_amount_withdrawn = withdrawn
    distributor.total_amount_claimed = total_claimed

    return ClaimedEvent(claimant=claimant, amount=amount)