"""
allowlist-merkle: Merkle-root allowlists with compact membership proofs.

An operator commits a whole allowlist to a single 32-byte root; each member
proves inclusion with a short sibling path that can be checked without the
rest of the list.
"""

from .crypto import (
    keccak256,
    normalize_address,
    checksum_address,
    encode_address,
    hash_leaf,
    hash_pair,
    to_digest,
    to_hex,
    constant_time_compare,
    DIGEST_LENGTH,
    ADDRESS_LENGTH,
)

from .errors import (
    EmptyInputError,
    IndexOutOfRangeError,
    ClaimError,
    InvalidProofError,
    UnknownListError,
    AlreadyConsumedError,
)

from .merkle import (
    MerkleTree,
    MembershipProof,
    AllowlistTree,
    build_tree,
    extract_proof,
    verify_path,
)

from .registry import (
    ListRegistry,
    InMemoryListRegistry,
)

from .claim import (
    AllowlistGate,
    VerificationResult,
    verify_claim,
)

from .bundle import (
    ProofEntry,
    ProofDocument,
    create_proof_document,
    read_addresses,
)

__version__ = "0.1.0"

__all__ = [
    # Crypto
    "keccak256",
    "normalize_address",
    "checksum_address",
    "encode_address",
    "hash_leaf",
    "hash_pair",
    "to_digest",
    "to_hex",
    "constant_time_compare",
    "DIGEST_LENGTH",
    "ADDRESS_LENGTH",
    # Errors
    "EmptyInputError",
    "IndexOutOfRangeError",
    "ClaimError",
    "InvalidProofError",
    "UnknownListError",
    "AlreadyConsumedError",
    # Merkle
    "MerkleTree",
    "MembershipProof",
    "AllowlistTree",
    "build_tree",
    "extract_proof",
    "verify_path",
    # Registry
    "ListRegistry",
    "InMemoryListRegistry",
    # Claim
    "AllowlistGate",
    "VerificationResult",
    "verify_claim",
    # Bundle
    "ProofEntry",
    "ProofDocument",
    "create_proof_document",
    "read_addresses",
    # Meta
    "__version__",
]
