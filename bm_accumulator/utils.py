"""
Utility Functions
=================

Scalar helpers shared by the accumulator engine and the record layer.

According to charm-crypto documentation:
- Scalars are ZR elements; group.init(ZR, n) builds one from an integer
- Inverse is computed as elem ** -1
- int(elem) returns the canonical residue in [0, r)
"""

from charm.toolbox.pairinggroup import PairingGroup, ZR

from .errors import InvalidScalar
from .groups import group_order


def scalar_width(group: PairingGroup) -> int:
    """Number of bytes in the fixed-width encoding of a scalar."""
    return (group_order(group).bit_length() + 7) // 8


def digest_to_scalar(digest: bytes, group: PairingGroup) -> ZR:
    """
    Reduce a byte digest to a scalar in Z_r.

    Parameters
    ----------
    digest : bytes
        Output of the record hasher (32 bytes for SHA-256)
    group : PairingGroup
        The pairing group

    Returns
    -------
    ZR
        ``int.from_bytes(digest, 'big') mod r``
    """
    r = group_order(group)
    return group.init(ZR, int.from_bytes(digest, 'big') % r)


def invert_scalar(t: ZR, what: str = "exponent") -> ZR:
    """
    Return 1/t in Z_r.

    Raises
    ------
    InvalidScalar
        If t reduces to 0 mod r.
    """
    if t == 0:
        raise InvalidScalar(f"{what} reduces to 0 mod r and has no inverse")
    return t ** -1
