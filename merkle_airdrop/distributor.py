"""Distributor state, activation rules, bonuses and emitted events."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import ClassVar

from merkle_airdrop.program_errors import DistributorError, ErrorCode
from merkle_airdrop.pubkey import Pubkey
from merkle_airdrop.safe_math import IntKind, safe_add, safe_div, safe_mul, safe_sub

_U64_MASK = (1 << 64) - 1
DISTRIBUTOR_SEED = b"MerkleDistributor"


class ActivationType(IntEnum):
    """What the activation point is measured in."""

    SLOT = 0
    TIMESTAMP = 1


class ClaimType(IntEnum):
    """How claims against a distributor are authorised and paid out."""

    PERMISSIONLESS = 0
    PERMISSIONED = 1
    PERMISSIONLESS_WITH_STAKING = 2
    PERMISSIONED_WITH_STAKING = 3


@dataclass(frozen=True)
class Clock:
    """Current slot and unix timestamp."""

    slot: int = 0
    unix_timestamp: int = 0


@dataclass(frozen=True)
class NewClaimEvent:
    """Emitted when a new claim is created."""

    claimant: Pubkey
    timestamp: int


@dataclass(frozen=True)
class ClaimedEvent:
    """Emitted when tokens are claimed."""

    claimant: Pubkey
    amount: int


@dataclass
class TokenAccount:
    """A token balance held for an owner."""

    address: Pubkey
    mint: Pubkey
    owner: Pubkey
    amount: int = 0

    def transfer_to(self, destination: TokenAccount, amount: int) -> None:
        """Move ``amount`` tokens into ``destination``."""
        if amount < 0:
            raise ValueError("transfer amount must not be negative")
        if destination.mint != self.mint:
            raise ValueError("account not associated with this mint")
        if amount > self.amount:
            raise ValueError("insufficient funds")
        self.amount -= amount
        if destination.amount + amount > _U64_MASK:
            self.amount += amount
            raise OverflowError("destination balance would overflow")
        destination.amount += amount


@dataclass
class AirdropBonus:
    """Bonus pool shared among claimants and how it vests."""

    total_bonus: int = 0
    vesting_duration: int = 0
    total_claimed_bonus: int = 0


@dataclass
class ActivationHandler:
    """Current point against the distributor's activation point."""

    curr_point: int
    activation_point: int
    airdrop_bonus: AirdropBonus

    def validate_claim(self) -> None:
        """Raise if claiming has not started yet."""
        if self.activation_point > self.curr_point:
            raise DistributorError(ErrorCode.CLAIMING_IS_NOT_STARTED)

    def bonus_for_claimant(self, max_bonus: int) -> int:
        """Part of ``max_bonus`` vested at the current point."""
        start = self.activation_point
        duration = self.airdrop_bonus.vesting_duration
        end = safe_add(duration, start, IntKind.U64)
        if self.curr_point < start:
            return 0
        if self.curr_point >= end:
            return max_bonus
        into_unlock = safe_sub(self.curr_point, start, IntKind.U64)
        product = safe_mul(into_unlock, max_bonus, IntKind.U128)
        return safe_div(product, duration, IntKind.U128) & _U64_MASK


@dataclass(frozen=True)
class MerkleDistributorSigner:
    """Seeds with which the distributor signs for its vault."""

    base: bytes
    mint: bytes
    version: bytes
    bump: bytes

    def seeds(self) -> tuple[bytes, bytes, bytes, bytes, bytes]:
        return (DISTRIBUTOR_SEED, self.base, self.mint, self.version, self.bump)


@dataclass
class MerkleDistributor:
    """State of one airdrop distribution."""

    SPACE: ClassVar[int] = 440

    root: bytes = bytes(32)
    mint: Pubkey = field(default_factory=Pubkey.default)
    base: Pubkey = field(default_factory=Pubkey.default)
    token_vault: Pubkey = field(default_factory=Pubkey.default)
    clawback_receiver: Pubkey = field(default_factory=Pubkey.default)
    admin: Pubkey = field(default_factory=Pubkey.default)
    locker: Pubkey = field(default_factory=Pubkey.default)
    operator: Pubkey = field(default_factory=Pubkey.default)
    version: int = 0
    max_total_claim: int = 0
    max_num_nodes: int = 0
    total_amount_claimed: int = 0
    num_nodes_claimed: int = 0
    start_ts: int = 0
    end_ts: int = 0
    clawback_start_ts: int = 0
    activation_point: int = 0
    activation_type: int = ActivationType.SLOT
    claim_type: int = ClaimType.PERMISSIONLESS
    bump: int = 0
    clawed_back: bool = False
    closable: bool = False
    airdrop_bonus: AirdropBonus = field(default_factory=AirdropBonus)

    def activation_handler(self, clock: Clock) -> ActivationHandler:
        """Handler comparing ``clock`` with the activation point."""
        activation_type = ActivationType(self.activation_type)
        if activation_type is ActivationType.SLOT:
            curr_point = clock.slot
        else:
            curr_point = clock.unix_timestamp & _U64_MASK
        return ActivationHandler(
            curr_point=curr_point,
            activation_point=self.activation_point,
            airdrop_bonus=replace(self.airdrop_bonus),
        )

    def accumulate_bonus(self, bonus: int) -> None:
        """Record ``bonus`` as paid out."""
        self.airdrop_bonus.total_claimed_bonus = safe_add(
            self.airdrop_bonus.total_claimed_bonus, bonus, IntKind.U64
        )

    def max_bonus_for_claimant(self, unlocked_amount: int) -> int:
        """Share of the bonus pool proportional to ``unlocked_amount``."""
        without_bonus = safe_sub(
            self.max_total_claim, self.airdrop_bonus.total_bonus, IntKind.U64
        )
        product = safe_mul(unlocked_amount, self.airdrop_bonus.total_bonus, IntKind.U128)
        return safe_div(product, without_bonus, IntKind.U128) & _U64_MASK

    def bonus_for_claimant(
        self, unlocked_amount: int, activation_handler: ActivationHandler
    ) -> int:
        """Vested bonus for a claimant with ``unlocked_amount``."""
        max_bonus = self.max_bonus_for_claimant(unlocked_amount)
        return activation_handler.bonus_for_claimant(max_bonus)

    def _claim_type(self) -> ClaimType:
        try:
            return ClaimType(self.claim_type)
        except ValueError:
            raise DistributorError(ErrorCode.TYPE_CASTED_ERROR) from None

    def _authorize(
        self,
        operator: Pubkey | None,
        allowed: tuple[ClaimType, ClaimType],
        permissioned: ClaimType,
    ) -> None:
        claim_type = self._claim_type()
        if claim_type not in allowed:
            raise DistributorError(ErrorCode.INVALID_CLAIM_TYPE)
        if claim_type is permissioned:
            if operator is None:
                raise ValueError("an operator signature is required")
            if operator != self.operator:
                raise DistributorError(ErrorCode.INVALID_OPERATOR)

    def authorize_claim(self, operator: Pubkey | None) -> None:
        """Check that a plain claim is allowed, with ``operator`` as co-signer."""
        self._authorize(
            operator,
            (ClaimType.PERMISSIONLESS, ClaimType.PERMISSIONED),
            ClaimType.PERMISSIONED,
        )

    def authorize_claim_and_stake(self, operator: Pubkey | None) -> None:
        """Check that a claim-and-stake is allowed, with ``operator`` as co-signer."""
        self._authorize(
            operator,
            (ClaimType.PERMISSIONLESS_WITH_STAKING, ClaimType.PERMISSIONED_WITH_STAKING),
            ClaimType.PERMISSIONED_WITH_STAKING,
        )

    def signer(self) -> MerkleDistributorSigner:
        """Seeds of this distributor's address."""
        return MerkleDistributorSigner(
            base=bytes(self.base),
            mint=bytes(self.mint),
            version=self.version.to_bytes(8, "little"),
            bump=bytes([self.bump]),
        )