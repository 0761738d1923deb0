# merkle_airdrop

Tools for distributing tokens against a Merkle root.

The package builds a sorted-hash Merkle tree from a list of claimants and
their unlocked and locked amounts. It gives each claimant an inclusion proof
and can check those proofs against the root. It also models the distributor
state that such a root controls: claims, linear vesting of locked amounts,
activation points, bonuses, clawback and administrative changes.

The package uses only the standard library.

## Installation

```
pip install .
```

To run the test suite, install the `test` extra:

```
pip install ".[test]"
pytest
```

## Building a tree

Allocations can be read from a CSV file that has a header row with the
columns `pubkey`, `amount` and `locked_amount`. Columns are matched by name,
and any other columns are ignored. Amounts are UI amounts. They are scaled by
the token's decimals and rounded down:

```python
from merkle_airdrop.airdrop_tree import AirdropMerkleTree

tree = AirdropMerkleTree.from_csv("allocations.csv", version=0, decimals=6)
print(tree.merkle_root.hex(), tree.max_total_claim())
tree.write_to_file("merkle_tree.json")
```

You can also build a tree from parsed rows with
`AirdropMerkleTree.from_entries(entries, version, decimals)`, or from
`merkle_airdrop.tree_node.TreeNode` objects with
`AirdropMerkleTree.build(nodes, airdrop_version)`.

Nodes that share a claimant are merged by adding their amounts. The order in
which claimants first appear is kept. Each node then carries its proof:

```python
first = tree.tree_nodes[0]
node = tree.get_node(first.claimant)      # KeyError if the claimant is absent
print(str(node.claimant), node.amount, node.locked_amount, node.proof)
```

`tree.by_claimant()` returns the nodes as a dict keyed by
`merkle_airdrop.pubkey.Pubkey`.

`write_to_file` writes pretty-printed JSON in which byte arrays are lists of
integers. `AirdropMerkleTree.from_file(path)` reads that file back, and
`from_dict` / `to_dict` convert the same form in memory. `tree.verify_proof()`
rebuilds the root from the nodes and checks every leaf against it.

Failures raise exceptions from `merkle_airdrop.errors`:

- `MerkleValidationError` when a consistency check fails.
- `MerkleRootError` when the tree has no leaves.
- `MerkleTreeError` for file and JSON problems.

An amount sum that exceeds an unsigned 64-bit integer raises `OverflowError`.

## Verifying a proof

```python
from merkle_airdrop.claim import leaf_for_claim
from merkle_airdrop.verify import verify

leaf = leaf_for_claim(node.claimant, node.amount, node.locked_amount)
assert verify(node.proof, tree.merkle_root, leaf)
```

The lower-level `merkle_airdrop.merkle_tree.MerkleTree` builds a tree over any
sequence of byte strings. It uses distinct leaf and intermediate prefixes, and
with `sorted_hashes=True` it hashes each pair smaller-first. `find_path(index)`
returns a `Proof`, or `None` when the index is out of range.

`merkle_airdrop.pubkey` handles addresses:

- `Pubkey` with base58 text form: `Pubkey.from_string`, `str(key)`, `bytes(key)`.
- Program-derived addresses: `find_program_address`, `get_merkle_distributor_pda` and `get_claim_status_pda`.

## Distributor model

`merkle_airdrop.distributor.MerkleDistributor` holds the distributor state:

- the root, the vault, mint, admin, operator and locker keys
- the vesting window (`start_ts`, `end_ts`) and the clawback start
- the activation point and its type (slot or timestamp)
- the claim type and the bonus settings (`AirdropBonus`)

The current time comes from a `Clock` that you pass in. Token balances are
in-memory `TokenAccount` objects.

Instructions are plain functions that change these objects:

- `merkle_airdrop.claim.new_claim` verifies a proof, pays out the unlocked amount plus the vested bonus, and returns a new `ClaimStatus` and a `NewClaimEvent`. `claim_locked` pays out the locked amount vested so far and returns a `ClaimedEvent`.
- `merkle_airdrop.stake.new_claim_and_stake` and `claim_locked_and_stake` do the same, but move the tokens into a max-lock `Escrow`.
- `merkle_airdrop.admin` has `clawback`, `close_distributor`, `close_claim_status`, `set_activation_point`, `set_admin` and `set_operator`.

A failed check raises `merkle_airdrop.program_errors.DistributorError` carrying
an `ErrorCode`. An account that does not match the distributor raises
`AccountConstraintError`. The claim functions change nothing unless every
check passes.

All arithmetic is checked against the width of fixed-size integer types with
the helpers in `merkle_airdrop.safe_math` (`safe_add`, `safe_sub`, `safe_mul`,
`safe_div`, `safe_rem`, `safe_shl`, `safe_shr` with an `IntKind`).

## What this package does not do

- It has no command-line tool.
- It does not talk to a network, submit transactions or read accounts from a ledger. All distributor and token state lives in the Python objects you create.
- It has no instruction that creates a distributor. Construct a `MerkleDistributor` directly with the fields you need.