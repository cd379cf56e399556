"""
Member Records
==============

Application records are mapped to accumulator exponents by hashing:
x = SHA-256(record) mod r. The accumulator never sees the record itself,
only x, so two records that hash alike are the same member to it.
"""

import hashlib
from abc import ABC, abstractmethod

from charm.toolbox.pairinggroup import PairingGroup, ZR

from .errors import RecordTypeMismatch
from .utils import digest_to_scalar


class Content(ABC):
    """Anything that can be accumulated: hashable and comparable."""

    @abstractmethod
    def calculate_hash(self) -> bytes:
        """Return the 32-byte digest of the record."""

    @abstractmethod
    def equals(self, other: "Content") -> bool:
        """Compare with another record of the same shape."""

    def to_scalar(self, group: PairingGroup) -> ZR:
        """The accumulator exponent x for this record."""
        return digest_to_scalar(self.calculate_hash(), group)


class MemberRecord(Content):
    """
    Identity record of a member.

    Parameters
    ----------
    public_key : str
        Member public key, hex encoded
    attributes : str
        Attribute string (see hash_attributes)
    role : str
        Role information

    Notes
    -----
    Only public_key and attributes enter the hash; role takes part in
    equals() but not in the exponent.
    """

    def __init__(self, public_key: str, attributes: str, role: str):
        self.public_key = public_key
        self.attributes = attributes
        self.role = role

    def calculate_hash(self) -> bytes:
        h = hashlib.sha256()
        h.update(self.public_key.encode('utf-8') + self.attributes.encode('utf-8'))
        return h.digest()

    def equals(self, other: Content) -> bool:
        if not isinstance(other, MemberRecord):
            raise RecordTypeMismatch(f"value is not of type MemberRecord: {type(other).__name__}")
        return (self.public_key == other.public_key
                and self.attributes == other.attributes
                and self.role == other.role)

    def to_dict(self) -> dict:
        return {'publicKey': self.public_key, 'attributes': self.attributes, 'role': self.role}

    @classmethod
    def from_dict(cls, data: dict) -> "MemberRecord":
        return cls(data['publicKey'], data['attributes'], data['role'])

    def __repr__(self):
        return "MemberRecord(public_key=%r, attributes=%r, role=%r)" % (
            self.public_key, self.attributes, self.role)


def hash_attributes(attributes: str) -> str:
    """Hex-encoded SHA-256 of an attribute string."""
    return hashlib.sha256(attributes.encode('utf-8')).hexdigest()
