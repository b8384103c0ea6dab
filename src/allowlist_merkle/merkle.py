"""
allowlist_merkle/merkle.py
Sorted-pair Merkle tree for allowlist membership proofs.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from .crypto import (
    DIGEST_LENGTH,
    Identity,
    checksum_address,
    constant_time_compare,
    hash_leaf,
    hash_pair,
    normalize_address,
)
from .errors import EmptyInputError, IndexOutOfRangeError

logger = logging.getLogger(__name__)


@dataclass
class MerkleTree:
    """Every level of a built tree, leaves first, root last."""
    root: bytes
    levels: List[List[bytes]]


@dataclass
class MembershipProof:
    """Proof that one identity is a leaf of an allowlist tree."""
    identity: str  # EIP-55 checksum form
    leaf: bytes
    proof: List[bytes]
    leaf_index: int
    tree_size: int


def build_tree(leaves: Sequence[bytes]) -> MerkleTree:
    """Build a tree bottom-up from ordered leaf digests.

    Each level is paired left to right. When a level has an odd number
    of nodes the last one is paired with itself, so every level above
    the leaves has ceil(count / 2) nodes. Leaf order is significant:
    the same set in a different order generally gives a different root.

    Args:
        leaves: Non-empty ordered sequence of 32-byte digests

    Returns:
        MerkleTree with root and all levels

    Raises:
        EmptyInputError: If no leaves are given
        ValueError: If a leaf is not a 32-byte digest
    """
    if not leaves:
        raise EmptyInputError("Cannot build tree with no leaves")
    for leaf in leaves:
        if not isinstance(leaf, (bytes, bytearray)) or len(leaf) != DIGEST_LENGTH:
            raise ValueError(f"Leaves must be {DIGEST_LENGTH}-byte digests")

    current_level = [bytes(leaf) for leaf in leaves]
    levels = [current_level]

    while len(current_level) > 1:
        next_level = []
        for i in range(0, len(current_level), 2):
            left = current_level[i]
            right = current_level[i + 1] if i + 1 < len(current_level) else left
            next_level.append(hash_pair(left, right))
        levels.append(next_level)
        current_level = next_level

    logger.debug("Built tree of %d leaves, %d levels", len(leaves), len(levels))
    return MerkleTree(root=current_level[0], levels=levels)


def extract_proof(levels: Sequence[Sequence[bytes]], leaf_index: int) -> List[bytes]:
    """Collect the sibling path from a leaf up to (not including) the root.

    A node without a sibling was paired with itself by build_tree, so
    its own digest stands in as the sibling for that level. The proof
    therefore always has len(levels) - 1 entries.

    Args:
        levels: Levels as returned in MerkleTree.levels
        leaf_index: Position of the leaf in level 0

    Returns:
        Ordered list of 32-byte sibling digests

    Raises:
        IndexOutOfRangeError: If leaf_index is not a position in level 0
    """
    if not levels or not 0 <= leaf_index < len(levels[0]):
        raise IndexOutOfRangeError(f"Leaf index out of range: {leaf_index}")

    proof = []
    index = leaf_index

    for level in levels[:-1]:
        sibling_index = index ^ 1
        if sibling_index < len(level):
            proof.append(level[sibling_index])
        else:
            proof.append(level[index])
        index //= 2

    return proof


def verify_path(leaf: bytes, proof: Iterable[bytes], root: bytes) -> bool:
    """Recompute the root from a leaf and its sibling path.

    Needs no tree and no leaf index: hash_pair orders each pair by value,
    so the verifier never has to know which side a sibling was on.
    One hash per proof element.

    Args:
        leaf: 32-byte leaf digest
        proof: Sibling digests from leaf level upwards
        root: Expected 32-byte root

    Returns:
        True if the path reconstructs root, False otherwise
    """
    if len(leaf) != DIGEST_LENGTH or len(root) != DIGEST_LENGTH:
        return False

    current = leaf
    for sibling in proof:
        if len(sibling) != DIGEST_LENGTH:
            return False
        current = hash_pair(current, sibling)

    return constant_time_compare(current, root)


class AllowlistTree:
    """Allowlist of identities committed to a single Merkle root.

    Typically run once, off-line, by the operator publishing a list.

    Example:
        tree = AllowlistTree()
        tree.add_identity("0x5B38Da6a701c568545dCfcB03FcB875f56beddC4")
        tree.add_identity("0xAb8483F64d9C6d1EcF9b849Ae677dD3315835cb2")
        root = tree.build()

        proof = tree.generate_proof("0x5B38Da6a701c568545dCfcB03FcB875f56beddC4")
        is_valid = AllowlistTree.verify_proof(proof, root)
    """

    def __init__(self):
        self._identities: List[bytes] = []
        self._leaves: List[bytes] = []
        self._tree: MerkleTree = None
        self._index: Dict[bytes, int] = {}

    def add_identity(self, identity: Identity) -> int:
        """Add an identity as the next leaf.

        Args:
            identity: Address as raw bytes or hex string

        Returns:
            Index of the leaf in level 0

        Raises:
            ValueError: If tree already built, identity malformed or duplicate
        """
        if self._tree is not None:
            raise ValueError("Cannot add identities after tree is built")

        address = normalize_address(identity)
        if address in self._index:
            raise ValueError(f"Duplicate identity: {checksum_address(address)}")

        index = len(self._leaves)
        self._identities.append(address)
        self._leaves.append(hash_leaf(address))
        self._index[address] = index

        return index

    def build(self) -> bytes:
        """Build the tree and return its root.

        Raises:
            EmptyInputError: If no identities were added
        """
        self._tree = build_tree(self._leaves)
        return self._tree.root

    @property
    def built(self) -> bool:
        return self._tree is not None

    def get_root(self) -> bytes:
        """Get the 32-byte root.

        Raises:
            ValueError: If tree not yet built
        """
        return self._require_tree().root

    @property
    def levels(self) -> List[List[bytes]]:
        return self._require_tree().levels

    @property
    def identities(self) -> List[str]:
        """Checksum addresses in leaf order."""
        return [checksum_address(address) for address in self._identities]

    def __len__(self) -> int:
        return len(self._leaves)

    def leaf_index(self, identity: Identity) -> int:
        address = normalize_address(identity)
        if address not in self._index:
            raise ValueError(f"Identity not in allowlist: {checksum_address(address)}")
        return self._index[address]

    def generate_proof(self, identity: Identity) -> MembershipProof:
        """Generate the membership proof for one identity.

        Raises:
            ValueError: If tree not built or identity not a member
        """
        tree = self._require_tree()
        index = self.leaf_index(identity)

        return MembershipProof(
            identity=checksum_address(self._identities[index]),
            leaf=self._leaves[index],
            proof=extract_proof(tree.levels, index),
            leaf_index=index,
            tree_size=len(self._leaves),
        )

    @staticmethod
    def verify_proof(proof: MembershipProof, root: bytes) -> bool:
        """Verify a membership proof against a root.

        The leaf is rederived from the identity, so a proof carrying
        someone else's leaf does not verify.
        """
        if not constant_time_compare(hash_leaf(proof.identity), proof.leaf):
            return False
        return verify_path(proof.leaf, proof.proof, root)

    @classmethod
    def from_addresses(
        cls,
        addresses: Iterable[Identity],
        sort: bool = True
    ) -> 'AllowlistTree':
        """Create and build a tree from a list of addresses.

        Args:
            addresses: Identities as raw bytes or hex strings
            sort: Order leaves by ascending raw address bytes. Whoever
                rebuilds the list must use the same convention.

        Returns:
            Built AllowlistTree instance
        """
        normalized = [normalize_address(address) for address in addresses]
        if sort:
            normalized.sort()

        tree = cls()
        for address in normalized:
            tree.add_identity(address)
        tree.build()

        logger.info(
            "Allowlist of %d identities committed to root 0x%s",
            len(tree), tree.get_root().hex()
        )
        return tree

    def _require_tree(self) -> MerkleTree:
        if self._tree is None:
            raise ValueError("Tree not built yet. Call build() first.")
        return self._tree
