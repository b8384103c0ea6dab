"""
tests/test_claim.py
Integration tests for the registry boundary and claim flow.
"""
import logging

import pytest

from allowlist_merkle.claim import AllowlistGate, VerificationResult, verify_claim
from allowlist_merkle.crypto import hash_leaf, to_hex
from allowlist_merkle.errors import (
    AlreadyConsumedError,
    ClaimError,
    InvalidProofError,
    UnknownListError,
)
from allowlist_merkle.merkle import AllowlistTree
from allowlist_merkle.registry import InMemoryListRegistry, ListRegistry

LIST_ID = 1
OUTSIDER = "0x" + "42" * 20


@pytest.fixture
def addresses():
    """Sample allowlist."""
    return [
        "0x5b38da6a701c568545dcfcb03fcb875f56beddc4",
        "0xab8483f64d9c6d1ecf9b849ae677dd3315835cb2",
        "0x4b20993bc481177ec7e8f571cecae8a9e22c02db",
        "0x78731d3ca6b7e34ac0f824c42a7cc18a495cabab",
        "0x617f2e2fd72fd9d5503197092ac168c91465e7f2",
    ]


@pytest.fixture
def tree(addresses):
    """Built allowlist tree."""
    return AllowlistTree.from_addresses(addresses)


@pytest.fixture
def registry(tree):
    """Registry with the tree's root published under LIST_ID."""
    registry = InMemoryListRegistry()
    registry.set_root(LIST_ID, tree.get_root())
    return registry


@pytest.fixture
def gate(registry):
    return AllowlistGate(registry)


class TestInMemoryListRegistry:
    """Tests for the reference registry."""

    def test_satisfies_protocol(self):
        """Reference registry should type-check as a ListRegistry."""
        registry: ListRegistry = InMemoryListRegistry()
        assert registry.root_of(LIST_ID) is None

    def test_set_and_get_root(self):
        """Published root is returned for its list id."""
        registry = InMemoryListRegistry()
        assert registry.set_root(7, b"\x01" * 32) is None
        assert registry.root_of(7) == b"\x01" * 32
        assert registry.list_ids() == [7]

    def test_replace_returns_previous(self):
        """Replacing a root is explicit and returns the old one."""
        registry = InMemoryListRegistry()
        registry.set_root(7, b"\x01" * 32)
        assert registry.set_root(7, b"\x02" * 32) == b"\x01" * 32
        assert registry.root_of(7) == b"\x02" * 32

    def test_zero_list_id_rejected(self):
        """List id 0 is reserved."""
        with pytest.raises(ValueError, match="list_id must be non-zero"):
            InMemoryListRegistry().set_root(0, b"\x01" * 32)

    def test_non_int_list_id_rejected(self):
        """List ids are plain integers."""
        with pytest.raises(TypeError):
            InMemoryListRegistry().set_root(True, b"\x01" * 32)
        with pytest.raises(TypeError):
            InMemoryListRegistry().set_root("1", b"\x01" * 32)

    def test_bad_root_length_rejected(self):
        """Roots must be 32 bytes."""
        with pytest.raises(ValueError, match="Root must be 32 bytes"):
            InMemoryListRegistry().set_root(1, b"\x01" * 20)

    def test_consumed_flag_shared_across_spellings(self, addresses):
        """Lowercase, uppercase and raw forms share one flag."""
        registry = InMemoryListRegistry()
        registry.mark_consumed(LIST_ID, addresses[0])
        assert registry.is_consumed(LIST_ID, "0x" + addresses[0][2:].upper())
        assert registry.is_consumed(LIST_ID, bytes.fromhex(addresses[0][2:]))

    def test_consumed_flag_per_list(self, addresses):
        """Consumption on one list does not affect another."""
        registry = InMemoryListRegistry()
        registry.mark_consumed(1, addresses[0])
        assert registry.is_consumed(2, addresses[0]) is False


class TestAllowlistGate:
    """Tests for the claim flow."""

    def test_claim_succeeds_and_consumes(self, gate, tree, addresses):
        """Valid proof is accepted and the identity marked consumed."""
        proof = tree.generate_proof(addresses[2]).proof
        leaf = gate.claim(LIST_ID, addresses[2], proof)

        assert leaf == hash_leaf(addresses[2])
        assert gate.is_consumed(LIST_ID, addresses[2]) is True

    def test_replay_rejected(self, gate, tree, addresses):
        """Resubmitting the same triple fails with AlreadyConsumedError."""
        proof = tree.generate_proof(addresses[0]).proof
        gate.claim(LIST_ID, addresses[0], proof)

        with pytest.raises(AlreadyConsumedError, match="already claimed") as exc_info:
            gate.claim(LIST_ID, addresses[0], proof)
        assert exc_info.value.list_id == LIST_ID
        assert exc_info.value.identity.lower() == addresses[0]

    def test_replay_logged(self, gate, tree, addresses, caplog):
        """Replay attempts are logged for operators."""
        proof = tree.generate_proof(addresses[0]).proof
        gate.claim(LIST_ID, addresses[0], proof)

        with caplog.at_level(logging.WARNING, logger="allowlist_merkle.claim"):
            with pytest.raises(AlreadyConsumedError):
                gate.claim(LIST_ID, addresses[0], proof)
        assert "Replayed claim" in caplog.text

    def test_unknown_list_rejected(self, gate, tree, addresses):
        """Claims against an unregistered list fail."""
        proof = tree.generate_proof(addresses[0]).proof
        with pytest.raises(UnknownListError, match="not eligible"):
            gate.claim(99, addresses[0], proof)

    def test_invalid_proof_rejected(self, gate, tree, addresses):
        """Another member's proof does not work for this identity."""
        proof = tree.generate_proof(addresses[1]).proof
        with pytest.raises(InvalidProofError, match="not eligible"):
            gate.claim(LIST_ID, addresses[0], proof)

    def test_outsider_rejected(self, gate, tree, addresses):
        """Non-members cannot borrow a member's proof."""
        proof = tree.generate_proof(addresses[0]).proof
        with pytest.raises(InvalidProofError):
            gate.claim(LIST_ID, OUTSIDER, proof)

    def test_failed_claim_does_not_consume(self, gate, tree, addresses):
        """Only verified claims touch the consumption record."""
        bad_proof = tree.generate_proof(addresses[1]).proof
        with pytest.raises(InvalidProofError):
            gate.claim(LIST_ID, addresses[0], bad_proof)
        assert gate.is_consumed(LIST_ID, addresses[0]) is False

        good_proof = tree.generate_proof(addresses[0]).proof
        gate.claim(LIST_ID, addresses[0], good_proof)

    def test_invalid_proof_checked_before_consumption(self, gate, tree, addresses):
        """A bad proof from a consumed identity is still InvalidProof."""
        gate.claim(LIST_ID, addresses[0], tree.generate_proof(addresses[0]).proof)
        bad_proof = tree.generate_proof(addresses[1]).proof
        with pytest.raises(InvalidProofError):
            gate.claim(LIST_ID, addresses[0], bad_proof)

    def test_hex_proof_accepted(self, gate, tree, addresses):
        """Proof elements may be 0x-hex strings."""
        proof = [to_hex(s) for s in tree.generate_proof(addresses[3]).proof]
        assert gate.is_member(LIST_ID, addresses[3], proof) is True
        gate.claim(LIST_ID, addresses[3], proof)

    def test_malformed_proof_element_raises(self, gate, addresses):
        """Proof elements of the wrong size are a caller error."""
        with pytest.raises(ValueError):
            gate.claim(LIST_ID, addresses[0], ["0x1234"])

    def test_same_identity_on_two_lists(self, registry, tree, addresses):
        """Each list keeps its own consumption flag."""
        registry.set_root(2, tree.get_root())
        gate = AllowlistGate(registry)
        proof = tree.generate_proof(addresses[0]).proof

        gate.claim(1, addresses[0], proof)
        gate.claim(2, addresses[0], proof)
        with pytest.raises(AlreadyConsumedError):
            gate.claim(2, addresses[0], proof)

    def test_replaced_root_invalidates_old_proofs(self, registry, tree, addresses):
        """After a root replacement, proofs for the old root fail."""
        proof = tree.generate_proof(addresses[0]).proof
        replacement = AllowlistTree.from_addresses(addresses[:3])
        registry.set_root(LIST_ID, replacement.get_root())

        with pytest.raises(InvalidProofError):
            AllowlistGate(registry).claim(LIST_ID, addresses[0], proof)

    def test_is_member_does_not_consume(self, gate, tree, addresses):
        """Membership checks are read-only."""
        proof = tree.generate_proof(addresses[4]).proof
        assert gate.is_member(LIST_ID, addresses[4], proof) is True
        assert gate.is_consumed(LIST_ID, addresses[4]) is False

    def test_errors_share_base(self):
        """All claim rejections derive from ClaimError."""
        for cls in (InvalidProofError, UnknownListError, AlreadyConsumedError):
            assert issubclass(cls, ClaimError)


class TestVerifyClaim:
    """Tests for the non-raising wrapper."""

    def test_valid_claim(self, registry, tree, addresses):
        """Valid proof yields a valid result without consuming."""
        proof = tree.generate_proof(addresses[0]).proof
        result = verify_claim(registry, LIST_ID, addresses[0], proof)

        assert isinstance(result, VerificationResult)
        assert result.is_valid is True
        assert result.error_message == ""
        assert result.identity.lower() == addresses[0]
        assert registry.is_consumed(LIST_ID, addresses[0]) is False

    def test_consume_then_replay(self, registry, tree, addresses):
        """consume=True marks the identity; a second call reports replay."""
        proof = tree.generate_proof(addresses[0]).proof
        first = verify_claim(registry, LIST_ID, addresses[0], proof, consume=True)
        second = verify_claim(registry, LIST_ID, addresses[0], proof, consume=True)

        assert first.is_valid is True
        assert second.is_valid is False
        assert second.error_message == "already claimed"

    def test_consumed_reported_without_consume(self, registry, tree, addresses):
        """Read-only checks also report consumed identities."""
        proof = tree.generate_proof(addresses[0]).proof
        registry.mark_consumed(LIST_ID, addresses[0])
        result = verify_claim(registry, LIST_ID, addresses[0], proof)
        assert result.error_message == "already claimed"

    def test_unknown_and_invalid_look_alike(self, registry, tree, addresses):
        """Unknown list and bad proof both report only "not eligible"."""
        proof = tree.generate_proof(addresses[0]).proof
        unknown = verify_claim(registry, 99, addresses[0], proof)
        invalid = verify_claim(registry, LIST_ID, OUTSIDER, proof)

        assert unknown.is_valid is False
        assert invalid.is_valid is False
        assert unknown.error_message == invalid.error_message == "not eligible"

    def test_malformed_identity_handled(self, registry):
        """Malformed input becomes an invalid result."""
        result = verify_claim(registry, LIST_ID, "0x1234", [])
        assert result.is_valid is False
        assert "Invalid address" in result.error_message
