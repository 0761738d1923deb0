"""Administrative instructions: clawback, closing accounts and changing roles."""

from __future__ import annotations

import logging

from merkle_airdrop.claim_status import ClaimStatus
from merkle_airdrop.distributor import ClaimType, Clock, MerkleDistributor, TokenAccount
from merkle_airdrop.program_errors import AccountConstraintError, DistributorError, ErrorCode
from merkle_airdrop.pubkey import Pubkey

logger = logging.getLogger(__name__)


def _has_one(actual: Pubkey, expected: Pubkey, account: str) -> None:
    if actual != expected:
        raise AccountConstraintError("has_one", account)


def _check_vault(distributor: MerkleDistributor, vault: TokenAccount) -> None:
    if vault.address != distributor.token_vault:
        raise AccountConstraintError("address", "from")
    if vault.mint != distributor.mint:
        raise AccountConstraintError("associated_token::mint", "from")


def clawback(
    distributor: MerkleDistributor,
    vault: TokenAccount,
    receiver: TokenAccount,
    clock: Clock,
) -> int:
    """Send every token left in the vault to the clawback receiver.

    Returns the amount moved. Allowed once, and not before the clawback start.
    """
    _has_one(receiver.address, distributor.clawback_receiver, "clawback_receiver")
    _check_vault(distributor, vault)
    if distributor.clawed_back:
        raise DistributorError(ErrorCode.CLAWBACK_ALREADY_CLAIMED)
    if clock.unix_timestamp < distributor.clawback_start_ts:
        raise DistributorError(ErrorCode.CLAWBACK_BEFORE_START)
    amount = vault.amount
    vault.transfer_to(receiver, amount)
    distributor.clawed_back = True
    return amount


def close_distributor(
    distributor: MerkleDistributor,
    admin: Pubkey,
    vault: TokenAccount,
    destination: TokenAccount,
) -> int:
    """Empty the vault into ``destination`` before the distributor is closed.

    Only a closable distributor may be closed, and only by its admin.
    Returns the amount moved.
    """
    _has_one(admin, distributor.admin, "admin")
    _has_one(vault.address, distributor.token_vault, "token_vault")
    if not distributor.closable:
        raise DistributorError(ErrorCode.CANNOT_CLOSE_DISTRIBUTOR)
    amount = vault.amount
    vault.transfer_to(destination, amount)
    return amount


def close_claim_status(claim_status: ClaimStatus, claimant: Pubkey, admin: Pubkey) -> Pubkey:
    """Check that a claim status may be closed; return who receives its balance."""
    _has_one(claimant, claim_status.claimant, "claimant")
    _has_one(admin, claim_status.admin, "admin")
    if not claim_status.closable:
        raise DistributorError(ErrorCode.CANNOT_CLOSE_CLAIM_STATUS)
    return claimant


def set_activation_point(
    distributor: MerkleDistributor, admin: Pubkey, activation_point: int
) -> None:
    """Change the slot or timestamp from which claims are accepted."""
    _has_one(admin, distributor.admin, "admin")
    distributor.activation_point = activation_point


def set_admin(distributor: MerkleDistributor, admin: Pubkey, new_admin: Pubkey) -> None:
    """Hand the admin role to ``new_admin``."""
    if admin != distributor.admin:
        raise DistributorError(ErrorCode.UNAUTHORIZED)
    if admin == new_admin:
        raise DistributorError(ErrorCode.SAME_ADMIN)
    distributor.admin = new_admin
    logger.info("set new admin to %s", new_admin)


def set_operator(distributor: MerkleDistributor, admin: Pubkey, new_operator: Pubkey) -> None:
    """Change the operator that co-signs claims on a permissioned distributor."""
    if admin != distributor.admin:
        raise DistributorError(ErrorCode.UNAUTHORIZED)
    try:
        claim_type = ClaimType(distributor.claim_type)
    except ValueError:
        raise DistributorError(ErrorCode.TYPE_CASTED_ERROR) from None
    if claim_type not in (ClaimType.PERMISSIONED, ClaimType.PERMISSIONED_WITH_STAKING):
        raise DistributorError(ErrorCode.INVALID_CLAIM_TYPE)
    if distributor.operator == new_operator:
        raise DistributorError(ErrorCode.SAME_OPERATOR)
    distributor.operator = new_operator