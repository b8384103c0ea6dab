"""
allowlist_merkle/registry.py
Root-per-list storage and consumption record.

The registry is owned by the integrating system (on-chain state in
production). InMemoryListRegistry implements the same contract for
tests, examples and off-chain simulation.
"""
from typing import Dict, List, Optional, Protocol, Set, Tuple

from .crypto import DIGEST_LENGTH, Identity, normalize_address


class ListRegistry(Protocol):
    """Read/write contract the claim flow depends on."""

    def root_of(self, list_id: int) -> Optional[bytes]:
        ...

    def is_consumed(self, list_id: int, identity: Identity) -> bool:
        ...

    def mark_consumed(self, list_id: int, identity: Identity) -> None:
        ...


def _check_list_id(list_id: int) -> int:
    if isinstance(list_id, bool) or not isinstance(list_id, int):
        raise TypeError("list_id must be an int")
    if list_id == 0:
        raise ValueError("list_id must be non-zero")
    return list_id


class InMemoryListRegistry:
    """Dictionary-backed ListRegistry.

    Identities are stored in 20-byte form, so different spellings of
    the same address share one consumed flag.
    """

    def __init__(self):
        self._roots: Dict[int, bytes] = {}
        self._consumed: Set[Tuple[int, bytes]] = set()

    def set_root(self, list_id: int, root: bytes) -> Optional[bytes]:
        """Commit a root under a list id.

        Replacing an existing root is destructive: proofs distributed for
        the old root stop verifying. Consumption flags are kept.

        Returns:
            The previous root, or None for a new list

        Raises:
            ValueError: If list_id is zero or root is not 32 bytes
        """
        _check_list_id(list_id)
        if not isinstance(root, (bytes, bytearray)) or len(root) != DIGEST_LENGTH:
            raise ValueError(f"Root must be {DIGEST_LENGTH} bytes")

        previous = self._roots.get(list_id)
        self._roots[list_id] = bytes(root)
        return previous

    def root_of(self, list_id: int) -> Optional[bytes]:
        return self._roots.get(list_id)

    def list_ids(self) -> List[int]:
        return sorted(self._roots)

    def is_consumed(self, list_id: int, identity: Identity) -> bool:
        return (list_id, normalize_address(identity)) in self._consumed

    def mark_consumed(self, list_id: int, identity: Identity) -> None:
        _check_list_id(list_id)
        self._consumed.add((list_id, normalize_address(identity)))
