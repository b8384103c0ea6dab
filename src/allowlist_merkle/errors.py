"""
allowlist_merkle/errors.py
Error taxonomy for tree construction and membership claims.
"""


class EmptyInputError(ValueError):
    """Raised when a tree is built from zero leaves."""


class IndexOutOfRangeError(IndexError):
    """Raised when a proof is requested for a leaf index outside level 0."""


class ClaimError(Exception):
    """Base class for claim-time rejections."""

    def __init__(self, message: str, list_id: int = None, identity: str = None):
        super().__init__(message)
        self.list_id = list_id
        self.identity = identity


class InvalidProofError(ClaimError):
    """The supplied proof does not reconstruct the committed root."""


class UnknownListError(ClaimError):
    """No root is registered for the requested list id."""


class AlreadyConsumedError(ClaimError):
    """The identity already claimed against this list."""
