import pytest

from merkle_airdrop.distributor import (
    ActivationHandler,
    ActivationType,
    AirdropBonus,
    ClaimedEvent,
    ClaimType,
    Clock,
    MerkleDistributor,
    NewClaimEvent,
    TokenAccount,
)
from merkle_airdrop.program_errors import DistributorError, ErrorCode
from merkle_airdrop.pubkey import (
    Pubkey,
    create_program_address,
    get_merkle_distributor_pda,
)


def test_enum_values_match_stored_bytes():
    assert [t.value for t in ActivationType] == [0, 1]
    assert ClaimType(0) is ClaimType.PERMISSIONLESS
    assert ClaimType(3) is ClaimType.PERMISSIONED_WITH_STAKING


def test_activation_handler_uses_slot_or_timestamp():
    clock = Clock(slot=500, unix_timestamp=1_700_000_000)
    by_slot = MerkleDistributor(activation_type=ActivationType.SLOT, activation_point=7)
    by_time = MerkleDistributor(activation_type=ActivationType.TIMESTAMP)
    assert by_slot.activation_handler(clock).curr_point == clock.slot
    assert by_slot.activation_handler(clock).activation_point == 7
    assert by_time.activation_handler(clock).curr_point == clock.unix_timestamp


def test_activation_handler_copies_bonus():
    distributor = MerkleDistributor(airdrop_bonus=AirdropBonus(total_bonus=10))
    handler = distributor.activation_handler(Clock())
    distributor.accumulate_bonus(4)
    assert handler.airdrop_bonus.total_claimed_bonus == 0
    assert distributor.airdrop_bonus.total_claimed_bonus == 4


def test_validate_claim_before_activation():
    handler = ActivationHandler(curr_point=9, activation_point=10, airdrop_bonus=AirdropBonus())
    with pytest.raises(DistributorError) as excinfo:
        handler.validate_claim()
    assert excinfo.value.code is ErrorCode.CLAIMING_IS_NOT_STARTED
    started = ActivationHandler(curr_point=10, activation_point=10, airdrop_bonus=AirdropBonus())
    assert started.validate_claim() is None


def test_bonus_vesting_edges():
    bonus = AirdropBonus(total_bonus=1000, vesting_duration=100)
    before = ActivationHandler(curr_point=5, activation_point=10, airdrop_bonus=bonus)
    after = ActivationHandler(curr_point=110, activation_point=10, airdrop_bonus=bonus)
    assert before.bonus_for_claimant(400) == 0
    assert after.bonus_for_claimant(400) == 400


def test_bonus_vesting_quarter():
    bonus = AirdropBonus(total_bonus=1000, vesting_duration=100)
    handler = ActivationHandler(curr_point=25, activation_point=0, airdrop_bonus=bonus)
    assert handler.bonus_for_claimant(400) == 100


def test_bonus_vesting_is_monotonic():
    bonus = AirdropBonus(total_bonus=1000, vesting_duration=37)
    amounts = [
        ActivationHandler(curr_point=p, activation_point=3, airdrop_bonus=bonus).bonus_for_claimant(99)
        for p in range(0, 60)
    ]
    assert amounts == sorted(amounts)
    assert amounts[-1] == 99


def test_max_bonus_shares_sum_to_pool():
    distributor = MerkleDistributor(
        max_total_claim=1100, airdrop_bonus=AirdropBonus(total_bonus=100)
    )
    shares = [distributor.max_bonus_for_claimant(u) for u in (250, 750)]
    assert sum(shares) == distributor.airdrop_bonus.total_bonus


def test_max_bonus_with_no_non_bonus_claim_is_arithmetic_error():
    distributor = MerkleDistributor(
        max_total_claim=100, airdrop_bonus=AirdropBonus(total_bonus=100)
    )
    with pytest.raises(DistributorError) as excinfo:
        distributor.max_bonus_for_claimant(10)
    assert excinfo.value.code is ErrorCode.ARITHMETIC_ERROR


def test_bonus_for_claimant_after_vesting_equals_max():
    distributor = MerkleDistributor(
        max_total_claim=2000, airdrop_bonus=AirdropBonus(total_bonus=200, vesting_duration=10)
    )
    handler = distributor.activation_handler(Clock(slot=50))
    assert distributor.bonus_for_claimant(900, handler) == distributor.max_bonus_for_claimant(900)


def test_accumulate_bonus_overflow():
    distributor = MerkleDistributor(airdrop_bonus=AirdropBonus(total_claimed_bonus=2**64 - 1))
    with pytest.raises(DistributorError) as excinfo:
        distributor.accumulate_bonus(1)
    assert excinfo.value.code is ErrorCode.ARITHMETIC_ERROR


def test_authorize_claim_by_claim_type():
    distributor = MerkleDistributor(claim_type=ClaimType.PERMISSIONLESS)
    assert distributor.authorize_claim(None) is None
    with pytest.raises(DistributorError) as excinfo:
        distributor.authorize_claim_and_stake(None)
    assert excinfo.value.code is ErrorCode.INVALID_CLAIM_TYPE


def test_permissioned_claim_checks_operator():
    operator = Pubkey.new_unique()
    distributor = MerkleDistributor(claim_type=ClaimType.PERMISSIONED, operator=operator)
    with pytest.raises(DistributorError) as excinfo:
        distributor.authorize_claim(Pubkey.new_unique())
    assert excinfo.value.code is ErrorCode.INVALID_OPERATOR
    with pytest.raises(ValueError):
        distributor.authorize_claim(None)
    assert distributor.authorize_claim(operator) is None


def test_permissioned_staking_checks_operator():
    operator = Pubkey.new_unique()
    distributor = MerkleDistributor(
        claim_type=ClaimType.PERMISSIONED_WITH_STAKING, operator=operator
    )
    with pytest.raises(DistributorError) as excinfo:
        distributor.authorize_claim_and_stake(Pubkey.new_unique())
    assert excinfo.value.code is ErrorCode.INVALID_OPERATOR
    with pytest.raises(DistributorError) as excinfo:
        distributor.authorize_claim(operator)
    assert excinfo.value.code is ErrorCode.INVALID_CLAIM_TYPE


def test_unknown_claim_type_is_type_cast_error():
    distributor = MerkleDistributor(claim_type=9)
    with pytest.raises(DistributorError) as excinfo:
        distributor.authorize_claim(None)
    assert excinfo.value.code is ErrorCode.TYPE_CASTED_ERROR


def test_signer_seeds_layout():
    base, mint = Pubkey.new_unique(), Pubkey.new_unique()
    seeds = MerkleDistributor(base=base, mint=mint, version=3, bump=254).signer().seeds()
    assert seeds[0] == b"MerkleDistributor"
    assert seeds[1] == bytes(base)
    assert seeds[2] == bytes(mint)
    assert seeds[3] == (3).to_bytes(8, "little")
    assert seeds[4] == bytes([254])


def test_signer_seeds_derive_distributor_address():
    program_id = Pubkey.new_unique()
    base, mint = Pubkey.new_unique(), Pubkey.new_unique()
    address, bump = get_merkle_distributor_pda(program_id, base, mint, 5)
    distributor = MerkleDistributor(base=base, mint=mint, version=5, bump=bump)
    assert create_program_address(distributor.signer().seeds(), program_id) == address


def test_token_transfer_moves_balance():
    mint = Pubkey.new_unique()
    source = TokenAccount(Pubkey.new_unique(), mint, Pubkey.new_unique(), amount=100)
    destination = TokenAccount(Pubkey.new_unique(), mint, Pubkey.new_unique(), amount=5)
    source.transfer_to(destination, 30)
    assert source.amount == 70
    assert destination.amount == 35


def test_token_transfer_errors_leave_balances():
    mint = Pubkey.new_unique()
    source = TokenAccount(Pubkey.new_unique(), mint, Pubkey.new_unique(), amount=10)
    destination = TokenAccount(Pubkey.new_unique(), mint, Pubkey.new_unique())
    other = TokenAccount(Pubkey.new_unique(), Pubkey.new_unique(), Pubkey.new_unique())
    with pytest.raises(ValueError):
        source.transfer_to(destination, 11)
    with pytest.raises(ValueError):
        source.transfer_to(other, 1)
    assert (source.amount, destination.amount, other.amount) == (10, 0, 0)


def test_events_hold_their_fields():
    claimant = Pubkey.new_unique()
    assert NewClaimEvent(claimant, 12) == NewClaimEvent(claimant=claimant, timestamp=12)
    assert ClaimedEvent(claimant, 5).amount == 5