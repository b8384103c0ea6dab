"""
allowlist_merkle/bundle.py
Proof distribution document: root plus {leaf, proof} per identity.
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from .crypto import (
    Identity,
    checksum_address,
    constant_time_compare,
    hash_leaf,
    to_digest,
    to_hex,
)
from .merkle import AllowlistTree, verify_path


@dataclass
class ProofEntry:
    """Everything one identity needs to claim."""
    leaf: bytes
    proof: List[bytes]


@dataclass
class ProofDocument:
    """Proofs for every identity of one allowlist.

    Serialized layout:
        {
          "root": "0x…",
          "proofs": {"0xChecksumAddress": {"proof": ["0x…"], "leaf": "0x…"}}
        }
    """
    root: bytes
    entries: Dict[str, ProofEntry] = field(default_factory=dict)

    def get(self, identity: Identity) -> ProofEntry:
        """Look up an entry by any spelling of the address.

        Raises:
            KeyError: If the identity has no entry
        """
        key = checksum_address(identity)
        if key not in self.entries:
            raise KeyError(key)
        return self.entries[key]

    def verify(self, identity: Identity) -> bool:
        """Check a distributed entry against the document root.

        The leaf is rederived from the identity and must match the
        distributed one before the path is checked.
        """
        try:
            entry = self.get(identity)
        except KeyError:
            return False
        if not constant_time_compare(hash_leaf(identity), entry.leaf):
            return False
        return verify_path(entry.leaf, entry.proof, self.root)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'root': to_hex(self.root),
            'proofs': {
                identity: {
                    'proof': [to_hex(sibling) for sibling in entry.proof],
                    'leaf': to_hex(entry.leaf)
                }
                for identity, entry in self.entries.items()
            }
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProofDocument':
        """Parse a document dict.

        Raises:
            ValueError: On malformed digests or addresses
            KeyError: On missing fields
        """
        entries = {}
        for identity, raw in data['proofs'].items():
            entries[checksum_address(identity)] = ProofEntry(
                leaf=to_digest(raw['leaf']),
                proof=[to_digest(sibling) for sibling in raw['proof']]
            )
        return cls(root=to_digest(data['root']), entries=entries)

    @classmethod
    def from_json(cls, text: str) -> 'ProofDocument':
        return cls.from_dict(json.loads(text))

    def save(self, path: Union[str, Path]) -> None:
        Path(path).write_text(self.to_json(), encoding='utf-8')

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ProofDocument':
        return cls.from_json(Path(path).read_text(encoding='utf-8'))


def create_proof_document(tree: AllowlistTree) -> ProofDocument:
    """Collect proofs for every identity of a built tree.

    Args:
        tree: Built AllowlistTree

    Returns:
        ProofDocument ready for distribution
    """
    entries = {}
    for identity in tree.identities:
        proof = tree.generate_proof(identity)
        entries[proof.identity] = ProofEntry(leaf=proof.leaf, proof=proof.proof)

    return ProofDocument(root=tree.get_root(), entries=entries)


def read_addresses(text: str) -> List[str]:
    """Parse an operator-supplied address list.

    Accepts a JSON array, comma-separated values, or one address per
    line. Blank lines and # comments are skipped. Addresses are
    returned as written; validation happens when they are hashed.
    """
    stripped = text.strip()
    if stripped.startswith('['):
        return [str(item).strip() for item in json.loads(stripped)]

    addresses = []
    for line in stripped.splitlines():
        line = line.split('#', 1)[0]
        addresses.extend(part.strip() for part in line.split(',') if part.strip())
    return addresses
