"""
examples/complete_workflow.py
End-to-end example: Build -> Publish -> Distribute -> Claim
"""
import sys
import os

# Add src to path for development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from allowlist_merkle import (
    AllowlistTree,
    AllowlistGate,
    AlreadyConsumedError,
    InMemoryListRegistry,
    InvalidProofError,
    ProofDocument,
    create_proof_document,
    to_hex,
)

# ============================================================
# STEP 1: OPERATOR - Collect Eligible Addresses
# ============================================================

addresses = [
    "0xab8483f64d9c6d1ecf9b849ae677dd3315835cb2",
    "0x5b38da6a701c568545dcfcb03fcb875f56beddc4",
    "0x78731d3ca6b7e34ac0f824c42a7cc18a495cabab",
    "0x617f2e2fd72fd9d5503197092ac168c91465e7f2",
    "0x17f6ad8ef982297579c203069c1dbffe4348c372",
    "0x5c6b0f7bf3e7ce046039bd8fabdfd3f9f5021678",
    "0x03c6fced478cbbc9a4fab34ef9f40767739d1ff7",
]

# ============================================================
# STEP 2: Build Merkle Tree
# ============================================================

print("=" * 60)
print("ALLOWLIST-MERKLE: Allowlist Membership Proofs")
print("=" * 60)
print()

tree = AllowlistTree.from_addresses(addresses, sort=True)
root = tree.get_root()

print(f"✓ Merkle Root: {to_hex(root)}")
print(f"✓ Tree contains {len(tree)} identities, {len(tree.levels)} levels")

# ============================================================
# STEP 3: Publish Root Under a List Id
# ============================================================

LIST_ID = 1
registry = InMemoryListRegistry()
registry.set_root(LIST_ID, root)
print(f"✓ Root published as list {LIST_ID}")

# ============================================================
# STEP 4: Distribute Proofs
# ============================================================

document = create_proof_document(tree)
print(f"✓ Proof document holds {len(document.entries)} entries")

# Members receive the JSON document (or just their own entry)
received = ProofDocument.from_json(document.to_json())

# ============================================================
# STEP 5: MEMBER - Claim
# ============================================================

print()
print("-" * 60)
print("CLAIMS")
print("-" * 60)

gate = AllowlistGate(registry)
member = tree.identities[2]
entry = received.get(member)

leaf = gate.claim(LIST_ID, member, entry.proof)
print(f"\n✓ {member} claimed (leaf {to_hex(leaf)})")
print(f"  - Proof length: {len(entry.proof)} hashes")

try:
    gate.claim(LIST_ID, member, entry.proof)
except AlreadyConsumedError as e:
    print(f"✓ Replay rejected: {e}")

outsider = "0x" + "42" * 20
try:
    gate.claim(LIST_ID, outsider, entry.proof)
except InvalidProofError as e:
    print(f"✓ Outsider rejected: {e}")

print()
print("=" * 60)
print("COMPLETE WORKFLOW SUCCESSFUL")
print("=" * 60)
