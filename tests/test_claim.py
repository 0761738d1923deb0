from dataclasses import dataclass

import pytest

from merkle_airdrop.airdrop_tree import AirdropMerkleTree
from merkle_airdrop.claim import claim_locked, leaf_for_claim, new_claim
from merkle_airdrop.distributor import (
    AirdropBonus,
    ClaimType,
    Clock,
    MerkleDistributor,
    TokenAccount,
)
from merkle_airdrop.merkle_tree import hash_leaf
from merkle_airdrop.program_errors import AccountConstraintError, DistributorError, ErrorCode
from merkle_airdrop.pubkey import Pubkey
from merkle_airdrop.tree_node import TreeNode
from merkle_airdrop.verify import verify

START = 1000
END = 2000
ALICE_UNLOCKED = 100
ALICE_LOCKED = 1000


@dataclass
class Env:
    distributor: MerkleDistributor
    vault: TokenAccount
    destination: TokenAccount
    tree: AirdropMerkleTree
    alice: Pubkey
    bob: Pubkey
    address: Pubkey


@pytest.fixture
def env():
    alice, bob = Pubkey.new_unique(), Pubkey.new_unique()
    tree = AirdropMerkleTree.build(
        [TreeNode(alice, ALICE_UNLOCKED, ALICE_LOCKED), TreeNode(bob, 200, 0)], 0
    )
    mint = Pubkey.new_unique()
    address = Pubkey.new_unique()
    vault = TokenAccount(Pubkey.new_unique(), mint, address, tree.max_total_claim())
    distributor = MerkleDistributor(
        root=tree.merkle_root,
        mint=mint,
        token_vault=vault.address,
        admin=Pubkey.new_unique(),
        max_total_claim=tree.max_total_claim(),
        max_num_nodes=tree.max_num_nodes,
        start_ts=START,
        end_ts=END,
    )
    destination = TokenAccount(Pubkey.new_unique(), mint, alice)
    return Env(distributor, vault, destination, tree, alice, bob, address)


def _claim(env, clock=None, operator=None, amounts=None, proof=None):
    node = env.tree.get_node(env.alice)
    unlocked, locked = amounts or (node.amount, node.locked_amount)
    return new_claim(
        env.distributor,
        env.alice,
        unlocked,
        locked,
        node.proof if proof is None else proof,
        env.vault,
        env.destination,
        clock or Clock(slot=1, unix_timestamp=START),
        operator,
    )


def test_leaf_matches_tree_leaf(env):
    node = env.tree.get_node(env.alice)
    leaf = leaf_for_claim(env.alice, ALICE_UNLOCKED, ALICE_LOCKED)
    assert leaf == hash_leaf(node.hash())
    assert verify(node.proof, env.tree.merkle_root, leaf)
    assert not verify(node.proof, env.tree.merkle_root, leaf_for_claim(env.alice, 1, 1))


def test_new_claim_pays_unlocked_amount(env):
    before = env.vault.amount
    status, event = _claim(env, clock=Clock(slot=3, unix_timestamp=START + 5))
    assert env.destination.amount == ALICE_UNLOCKED
    assert env.vault.amount == before - ALICE_UNLOCKED
    assert env.distributor.num_nodes_claimed == 1
    assert env.distributor.total_amount_claimed == ALICE_UNLOCKED
    assert status.locked_amount == ALICE_LOCKED
    assert status.unlocked_amount == ALICE_UNLOCKED
    assert status.locked_amount_withdrawn == 0
    assert status.claimant == env.alice
    assert status.distributor == env.address
    assert status.admin == env.distributor.admin
    assert event.claimant == env.alice
    assert event.timestamp == START + 5


def test_new_claim_bad_proof_changes_nothing(env):
    bob_proof = env.tree.get_node(env.bob).proof
    with pytest.raises(DistributorError) as excinfo:
        _claim(env, proof=bob_proof)
    assert excinfo.value.code is ErrorCode.INVALID_PROOF
    assert env.distributor.num_nodes_claimed == 0
    assert env.destination.amount == 0


def test_new_claim_wrong_amounts(env):
    with pytest.raises(DistributorError) as excinfo:
        _claim(env, amounts=(ALICE_UNLOCKED + 1, ALICE_LOCKED))
    assert excinfo.value.code is ErrorCode.INVALID_PROOF


def test_new_claim_after_clawback(env):
    env.distributor.clawed_back = True
    with pytest.raises(DistributorError) as excinfo:
        _claim(env)
    assert excinfo.value.code is ErrorCode.CLAIM_EXPIRED


def test_new_claim_before_activation(env):
    env.distributor.activation_point = 10
    with pytest.raises(DistributorError) as excinfo:
        _claim(env, clock=Clock(slot=9, unix_timestamp=START))
    assert excinfo.value.code is ErrorCode.CLAIMING_IS_NOT_STARTED


def test_new_claim_max_nodes(env):
    env.distributor.max_num_nodes = 0
    with pytest.raises(DistributorError) as excinfo:
        _claim(env)
    assert excinfo.value.code is ErrorCode.MAX_NODES_EXCEEDED


def test_new_claim_max_total(env):
    env.distributor.max_total_claim = ALICE_UNLOCKED - 1
    with pytest.raises(DistributorError) as excinfo:
        _claim(env)
    assert excinfo.value.code is ErrorCode.EXCEEDED_MAX_CLAIM
    assert env.distributor.total_amount_claimed == 0


def test_new_claim_staking_type_rejected(env):
    env.distributor.claim_type = ClaimType.PERMISSIONLESS_WITH_STAKING
    with pytest.raises(DistributorError) as excinfo:
        _claim(env)
    assert excinfo.value.code is ErrorCode.INVALID_CLAIM_TYPE


def test_new_claim_permissioned(env):
    operator = Pubkey.new_unique()
    env.distributor.claim_type = ClaimType.PERMISSIONED
    env.distributor.operator = operator
    with pytest.raises(DistributorError) as excinfo:
        _claim(env, operator=Pubkey.new_unique())
    assert excinfo.value.code is ErrorCode.INVALID_OPERATOR
    status, _ = _claim(env, operator=operator)
    assert status.claimant == env.alice


def test_new_claim_wrong_vault(env):
    env.vault.address = Pubkey.new_unique()
    with pytest.raises(AccountConstraintError) as excinfo:
        _claim(env)
    assert excinfo.value.constraint == "address"


def test_new_claim_with_vested_bonus(env):
    env.distributor.airdrop_bonus = AirdropBonus(total_bonus=130, vesting_duration=100)
    env.distributor.max_total_claim += 130
    env.vault.amount += 130
    max_bonus = env.distributor.max_bonus_for_claimant(ALICE_UNLOCKED)
    status, _ = _claim(env, clock=Clock(slot=100, unix_timestamp=START))
    assert status.bonus_amount == max_bonus
    assert status.bonus_amount > 0
    assert env.destination.amount == ALICE_UNLOCKED + status.bonus_amount
    assert env.distributor.airdrop_bonus.total_claimed_bonus == status.bonus_amount
    assert env.distributor.total_amount_claimed == ALICE_UNLOCKED + status.bonus_amount


def test_claim_locked_at_end_takes_everything(env):
    status, _ = _claim(env)
    event = claim_locked(
        env.distributor, status, env.alice, env.vault, env.destination,
        Clock(slot=1, unix_timestamp=END),
    )
    assert event.amount == ALICE_LOCKED
    assert event.claimant == env.alice
    assert status.locked_amount_withdrawn == ALICE_LOCKED
    assert env.destination.amount == ALICE_UNLOCKED + ALICE_LOCKED
    assert env.distributor.total_amount_claimed == ALICE_UNLOCKED + ALICE_LOCKED
    with pytest.raises(DistributorError) as excinfo:
        claim_locked(
            env.distributor, status, env.alice, env.vault, env.destination,
            Clock(slot=1, unix_timestamp=END + 1),
        )
    assert excinfo.value.code is ErrorCode.INSUFFICIENT_UNLOCKED_TOKENS


def test_claim_locked_in_two_steps(env):
    status, _ = _claim(env)
    mid = (START + END) // 2
    first = claim_locked(
        env.distributor, status, env.alice, env.vault, env.destination,
        Clock(slot=1, unix_timestamp=mid),
    ).amount
    assert 0 < first < ALICE_LOCKED
    assert first == status.vested_amount(mid, START, END)
    second = claim_locked(
        env.distributor, status, env.alice, env.vault, env.destination,
        Clock(slot=1, unix_timestamp=END),
    ).amount
    assert first + second == ALICE_LOCKED
    assert env.destination.amount == ALICE_UNLOCKED + ALICE_LOCKED


def test_claim_locked_before_start(env):
    status, _ = _claim(env)
    with pytest.raises(DistributorError) as excinfo:
        claim_locked(
            env.distributor, status, env.alice, env.vault, env.destination,
            Clock(slot=1, unix_timestamp=START - 1),
        )
    assert excinfo.value.code is ErrorCode.INSUFFICIENT_UNLOCKED_TOKENS


def test_claim_locked_wrong_claimant(env):
    status, _ = _claim(env)
    with pytest.raises(AccountConstraintError) as excinfo:
        claim_locked(
            env.distributor, status, env.bob, env.vault, env.destination,
            Clock(slot=1, unix_timestamp=END),
        )
    assert excinfo.value.account == "claimant"


def test_claim_locked_after_clawback(env):
    status, _ = _claim(env)
    env.distributor.clawed_back = True
    with pytest.raises(DistributorError) as excinfo:
        claim_locked(
            env.distributor, status, env.alice, env.vault, env.destination,
            Clock(slot=1, unix_timestamp=END),
        )
    assert excinfo.value.code is ErrorCode.CLAIM_EXPIRED
    assert status.locked_amount_withdrawn == 0