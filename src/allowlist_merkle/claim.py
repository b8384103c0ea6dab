"""
allowlist_merkle/claim.py
Claim flow: verify membership against a registered root, then consume.
"""
import logging
from dataclasses import dataclass
from typing import Sequence, Union

from .crypto import Identity, checksum_address, hash_leaf, to_digest
from .errors import (
    AlreadyConsumedError,
    ClaimError,
    InvalidProofError,
    UnknownListError,
)
from .merkle import verify_path
from .registry import ListRegistry

logger = logging.getLogger(__name__)

ProofInput = Sequence[Union[str, bytes]]

NOT_ELIGIBLE = "not eligible"
ALREADY_CLAIMED = "already claimed"


@dataclass
class VerificationResult:
    """Result of a claim or membership check."""
    is_valid: bool
    list_id: int
    identity: str
    error_message: str = ""


class AllowlistGate:
    """Answers "is this identity a member of list L?" and records claims.

    The gate reads roots and consumption flags from the registry and
    only writes through mark_consumed, after a proof has verified.
    Making verify-then-consume atomic against concurrent claims for
    the same identity is left to the caller's transaction boundary.
    """

    def __init__(self, registry: ListRegistry):
        self.registry = registry

    def _root(self, list_id: int, identity: str) -> bytes:
        root = self.registry.root_of(list_id)
        if root is None:
            raise UnknownListError(NOT_ELIGIBLE, list_id=list_id, identity=identity)
        return root

    def is_member(self, list_id: int, identity: Identity, proof: ProofInput) -> bool:
        """Check membership without consuming.

        Raises:
            UnknownListError: If no root is registered for list_id
            ValueError: If identity or a proof element is malformed
        """
        address = checksum_address(identity)
        root = self._root(list_id, address)
        siblings = [to_digest(sibling) for sibling in proof]
        return verify_path(hash_leaf(address), siblings, root)

    def is_consumed(self, list_id: int, identity: Identity) -> bool:
        return self.registry.is_consumed(list_id, identity)

    def claim(self, list_id: int, identity: Identity, proof: ProofInput) -> bytes:
        """Verify a proof and mark the identity consumed for list_id.

        Args:
            list_id: Registered list identifier
            identity: Claiming address
            proof: Sibling digests as bytes or 0x-hex

        Returns:
            The identity's leaf digest

        Raises:
            UnknownListError: No root registered for list_id
            InvalidProofError: Proof does not reconstruct the root
            AlreadyConsumedError: Proof is valid but already used
            ValueError: Malformed identity or proof element
        """
        address = checksum_address(identity)
        if not self.is_member(list_id, address, proof):
            raise InvalidProofError(NOT_ELIGIBLE, list_id=list_id, identity=address)

        if self.registry.is_consumed(list_id, address):
            logger.warning("Replayed claim on list %d by %s", list_id, address)
            raise AlreadyConsumedError(
                ALREADY_CLAIMED, list_id=list_id, identity=address
            )

        self.registry.mark_consumed(list_id, address)
        logger.info("Claim on list %d accepted for %s", list_id, address)
        return hash_leaf(address)


def verify_claim(
    registry: ListRegistry,
    list_id: int,
    identity: Identity,
    proof: ProofInput,
    consume: bool = False
) -> VerificationResult:
    """Check (and optionally consume) a claim without raising.

    Invalid proofs and unknown lists both report "not eligible" with no
    further detail. Replays report "already claimed" so they can be told
    apart from forgery attempts.

    Args:
        registry: Root and consumption storage
        list_id: Registered list identifier
        identity: Claiming address
        proof: Sibling digests as bytes or 0x-hex
        consume: Mark the identity consumed on success

    Returns:
        VerificationResult with validity status
    """
    gate = AllowlistGate(registry)
    display = identity if isinstance(identity, str) else repr(identity)

    try:
        display = checksum_address(identity)
        if consume:
            gate.claim(list_id, display, proof)
        else:
            if not gate.is_member(list_id, display, proof):
                raise InvalidProofError(NOT_ELIGIBLE, list_id=list_id, identity=display)
            if gate.is_consumed(list_id, display):
                raise AlreadyConsumedError(
                    ALREADY_CLAIMED, list_id=list_id, identity=display
                )
    except (ClaimError, ValueError, TypeError) as e:
        return VerificationResult(
            is_valid=False,
            list_id=list_id,
            identity=display,
            error_message=str(e)
        )

    return VerificationResult(is_valid=True, list_id=list_id, identity=display)
