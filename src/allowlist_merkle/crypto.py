"""
allowlist_merkle/crypto.py
Hash primitives and canonical identity encoding.
"""
import hmac
from typing import Union

from eth_utils import (
    decode_hex,
    encode_hex,
    is_checksum_address,
    is_checksum_formatted_address,
    is_hex_address,
    keccak,
    to_canonical_address,
    to_checksum_address,
)

DIGEST_LENGTH = 32  # keccak-256 output
ADDRESS_LENGTH = 20
ABI_WORD_LENGTH = 32  # abi.encode pads every static value to one word

Identity = Union[str, bytes]


def keccak256(data: bytes) -> bytes:
    """Ethereum keccak-256 (pre-NIST padding, not hashlib.sha3_256)."""
    return keccak(data)


def normalize_address(identity: Identity) -> bytes:
    """Reduce an identity to its canonical 20-byte form.

    Hex strings may be all-lowercase or all-uppercase. Mixed case is
    treated as EIP-55 and must carry a valid checksum.

    Args:
        identity: Raw 20 bytes or a hex address, with or without 0x

    Returns:
        20-byte address

    Raises:
        ValueError: If the value is not a well-formed address
        TypeError: If the value is neither str nor bytes
    """
    if isinstance(identity, (bytes, bytearray)):
        if len(identity) != ADDRESS_LENGTH:
            raise ValueError(
                f"Address must be {ADDRESS_LENGTH} bytes, got {len(identity)}"
            )
        return bytes(identity)

    if not isinstance(identity, str):
        raise TypeError("identity must be bytes or hex string")

    candidate = identity.strip()
    if not is_hex_address(candidate):
        raise ValueError(f"Invalid address: {identity!r}")
    if is_checksum_formatted_address(candidate) and not is_checksum_address(candidate):
        raise ValueError(f"Bad address checksum: {identity!r}")

    return to_canonical_address(candidate)


def checksum_address(identity: Identity) -> str:
    """EIP-55 display form of an identity."""
    return to_checksum_address(normalize_address(identity))


def encode_address(identity: Identity) -> bytes:
    """Encode an identity exactly as Solidity's abi.encode(address).

    Format: 12 zero bytes || 20 address bytes

    Every producer and verifier must agree on this layout. A different
    padding or byte order does not fail here; it only shows up later as
    proofs that never verify.
    """
    address = normalize_address(identity)
    return b'\x00' * (ABI_WORD_LENGTH - ADDRESS_LENGTH) + address


def hash_leaf(identity: Identity) -> bytes:
    """Derive the leaf digest for an identity.

    Format: keccak256(keccak256(abi.encode(address)))

    The second hash keeps a 64-byte internal-node preimage from ever
    being accepted as a leaf.

    Args:
        identity: Address as raw bytes or hex string

    Returns:
        32-byte leaf digest
    """
    return keccak256(keccak256(encode_address(identity)))


def hash_pair(a: bytes, b: bytes) -> bytes:
    """Combine two sibling digests into their parent.

    Format: keccak256(min(a, b) || max(a, b))

    Siblings are ordered by byte value rather than position, so
    hash_pair(a, b) == hash_pair(b, a). Equal inputs hash the value
    concatenated with itself.

    Args:
        a: 32-byte digest
        b: 32-byte digest

    Returns:
        32-byte parent digest
    """
    if a <= b:
        return keccak256(a + b)
    return keccak256(b + a)


def to_digest(value: Union[str, bytes]) -> bytes:
    """Parse a 32-byte digest from raw bytes or 0x-prefixed hex.

    Raises:
        ValueError: If the value is not exactly 32 bytes
    """
    if isinstance(value, str):
        try:
            value = decode_hex(value)
        except Exception as exc:
            raise ValueError(f"Invalid hex digest: {value!r}") from exc
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError("digest must be bytes or hex string")
    if len(value) != DIGEST_LENGTH:
        raise ValueError(
            f"Digest must be {DIGEST_LENGTH} bytes, got {len(value)}"
        )
    return bytes(value)


def to_hex(digest: bytes) -> str:
    """0x-prefixed lowercase hex, the format used in proof documents."""
    return encode_hex(digest)


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """Compare two byte strings in constant time.

    Use for every root comparison; == leaks how many leading
    bytes matched.
    """
    return hmac.compare_digest(a, b)
