"""
Bilinear Map Dynamic Accumulator
================================

This module implements a dynamic accumulator over an asymmetric pairing
e: G1 × G2 → GT. The authority keeps one G1 value V committing to the
multiset S of member exponents; each member keeps a G1 witness W.

Key Concepts:
-------------
- Accumulator value V: g^(s · ∏_{x∈S}(x + s)). It is seeded with
  V_0 = pk1 = g^s, so one factor of s is folded in before any member.
- Witness W for x: V^(1/(x + s)).
- Verification: e(W, h^x · pk2) = e(V, h).
- Witness updates need only the changed exponent, the holder's own
  exponent and the published accumulator values; no trapdoor.

Transitions:
------------
- add:    V' = V^(x_add + s)
          W' = W^(x_add - x_self) · V          (V = value BEFORE the add)
- delete: V' = V^(1/(x_del + s))
          W' = (W / V')^(1/(x_del - x_self))   (V' = value AFTER the delete)

Security:
---------
- Based on the q-Strong Bilinear Diffie-Hellman (q-SBDH) assumption
- add_element_with_key, delete_element_with_key and
  derive_witness_with_key need the trapdoor s and belong to the authority
- The accumulator does not record S: re-adding an exponent or deleting a
  non-member is accepted and silently leaves no valid witness behind

Every function below takes and returns values; nothing is mutated.
"""

import logging

from charm.toolbox.pairinggroup import ZR, G1, G2, pair

from .keys import AccumulatorPublicKey
from .utils import invert_scalar

logger = logging.getLogger(__name__)


class Accumulator:
    """
    Current accumulator value V (a single G1 element).

    The value changes only through add_element_with_key and
    delete_element_with_key, which return a new Accumulator.
    """

    def __init__(self, value: G1):
        self.value = value

    @classmethod
    def setup(cls, public_key: AccumulatorPublicKey) -> "Accumulator":
        """Initial accumulator V_0 = pk1 (empty member set)."""
        return cls(public_key.pk1)

    def is_empty(self, public_key: AccumulatorPublicKey) -> bool:
        """
        True when V still equals its seed pk1.

        Notes
        -----
        Adding x and deleting it again returns to the seed, so this reports
        "no net members" rather than "never used".
        """
        return self.value == public_key.pk1

    def add_element_with_key(self, x_add: ZR, key: ZR) -> "Accumulator":
        return Accumulator(add_element_with_key(self.value, x_add, key))

    def delete_element_with_key(self, x_del: ZR, key: ZR) -> "Accumulator":
        return Accumulator(delete_element_with_key(self.value, x_del, key))

    def __eq__(self, other):
        if not isinstance(other, Accumulator):
            return NotImplemented
        return self.value == other.value

    def __repr__(self):
        return "Accumulator(%s)" % (self.value,)


class Witness:
    """
    Membership witness W plus the accumulator snapshot it was computed for.

    The snapshot is bookkeeping only: it tells the holder whether an update
    is owed (``is_fresh``). It is never checked cryptographically.
    """

    def __init__(self, value: G1, acc: Accumulator):
        self.value = value
        self.acc = acc

    @classmethod
    def before_join(cls, acc_before: Accumulator) -> "Witness":
        """
        Start an incremental witness from the accumulator value immediately
        before the holder's own exponent is added.

        The result is valid only after it has been advanced through the
        holder's own add transition with ``add_element``.
        """
        return cls(acc_before.value, acc_before)

    def is_fresh(self, acc: Accumulator) -> bool:
        return self.acc == acc

    def add_element(self, x_add: ZR, x_self: ZR, acc_before: Accumulator,
                    acc_after: Accumulator) -> "Witness":
        """
        Advance the witness over the addition of ``x_add``.

        Parameters
        ----------
        x_add : ZR
            The exponent just added
        x_self : ZR
            The holder's own exponent
        acc_before : Accumulator
            Accumulator value BEFORE the addition
        acc_after : Accumulator
            Accumulator value after the addition (becomes the new snapshot)
        """
        value = add_element_for_witness(self.value, acc_before.value, x_add, x_self)
        return Witness(value, acc_after)

    def delete_element(self, x_del: ZR, x_self: ZR, acc_after: Accumulator) -> "Witness":
        """
        Advance the witness over the deletion of ``x_del``.

        ``acc_after`` is the accumulator AFTER the deletion; it is used in
        the update and becomes the new snapshot.

        Raises
        ------
        InvalidScalar
            If ``x_del`` equals ``x_self``.
        """
        value = delete_element_for_witness(self.value, acc_after.value, x_del, x_self)
        return Witness(value, acc_after)

    def verify(self, acc: Accumulator, x: ZR, public_key: AccumulatorPublicKey) -> bool:
        return verify_witness(self.value, acc.value, x, public_key.h, public_key.pk2)

    def __eq__(self, other):
        if not isinstance(other, Witness):
            return NotImplemented
        return self.value == other.value and self.acc == other.acc

    def __repr__(self):
        return "Witness(%s, acc=%s)" % (self.value, self.acc.value)


def add_element_with_key(acc_value: G1, x_add: ZR, key: ZR) -> G1:
    """
    Fold a new exponent into the accumulator (authority only).

    Parameters
    ----------
    acc_value : G1
        The current accumulator value V
    x_add : ZR
        The exponent of the joining member
    key : ZR
        The trapdoor s

    Returns
    -------
    G1
        V' = V^(x_add + s)

    Notes
    -----
    No membership check is possible here. Re-adding an exponent folds it in
    a second time.
    """
    return acc_value ** (x_add + key)


def delete_element_with_key(acc_value: G1, x_del: ZR, key: ZR) -> G1:
    """
    Remove an exponent from the accumulator (authority only).

    Parameters
    ----------
    acc_value : G1
        The current accumulator value V
    x_del : ZR
        The exponent of the leaving member
    key : ZR
        The trapdoor s

    Returns
    -------
    G1
        V' = V^(1/(x_del + s))

    Raises
    ------
    InvalidScalar
        If x_del + s = 0 mod r.

    Notes
    -----
    This exactly undoes add_element_with_key(V, x_del, s). Applied to an
    exponent that was never added it returns a value no witness opens.
    """
    t_inv = invert_scalar(x_del + key, "x_del + s")
    return acc_value ** t_inv


def add_element_for_witness(wit_value: G1, acc_before: G1, x_add: ZR, x_self: ZR) -> G1:
    """
    Update a witness after another exponent was added (public, no trapdoor).

    Parameters
    ----------
    wit_value : G1
        The holder's current witness W
    acc_before : G1
        The accumulator value immediately BEFORE x_add was folded in
    x_add : ZR
        The exponent just added
    x_self : ZR
        The holder's own exponent

    Returns
    -------
    G1
        W' = W^(x_add - x_self) · acc_before

    Notes
    -----
    With the post-addition value, or a different x_add, the result is a
    witness that fails verification; no error is raised.
    """
    return (wit_value ** (x_add - x_self)) * acc_before


def delete_element_for_witness(wit_value: G1, acc_after: G1, x_del: ZR, x_self: ZR) -> G1:
    """
    Update a witness after another exponent was deleted (public, no trapdoor).

    Parameters
    ----------
    wit_value : G1
        The holder's current witness W
    acc_after : G1
        The accumulator value AFTER x_del was removed
    x_del : ZR
        The exponent just removed
    x_self : ZR
        The holder's own exponent

    Returns
    -------
    G1
        W' = (W · acc_after^-1)^(1/(x_del - x_self))

    Raises
    ------
    InvalidScalar
        If x_del = x_self. A member cannot follow its own removal.
    """
    d_inv = invert_scalar(x_del - x_self, "x_del - x_self")
    delta = wit_value * (acc_after ** -1)
    return delta ** d_inv


def verify_witness(wit_value: G1, acc_value: G1, x: ZR, h: G2, pk2: G2) -> bool:
    """
    Check a membership witness with public values only.

    Parameters
    ----------
    wit_value : G1
        The presented witness W
    acc_value : G1
        The current accumulator value V
    x : ZR
        The exponent the witness is claimed for
    h : G2
        The public generator of G2
    pk2 : G2
        The authority's public key h^s

    Returns
    -------
    bool
        True iff e(W, h^x · pk2) = e(V, h).

    Notes
    -----
    Never raises: stale, forged or malformed inputs give False.
    """
    try:
        lhs = pair(wit_value, (h ** x) * pk2)
        rhs = pair(acc_value, h)
        return lhs == rhs
    except Exception as e:
        logger.debug("Witness verification failed with %s: %s", type(e).__name__, e)
        return False


def derive_witness_with_key(acc_value: G1, x: ZR, key: ZR) -> Witness:
    """
    Compute a witness directly from the trapdoor (trusted issuer only).

    Parameters
    ----------
    acc_value : G1
        The current accumulator value V, which must already contain x
    x : ZR
        The member's exponent
    key : ZR
        The trapdoor s

    Returns
    -------
    Witness
        W = V^(1/(x + s)) with snapshot V.

    Raises
    ------
    InvalidScalar
        If x + s = 0 mod r.

    Notes
    -----
    Calling this before x is added yields a witness for the pre-add value,
    not a membership proof for x.
    """
    t_inv = invert_scalar(x + key, "x + s")
    return Witness(acc_value ** t_inv, Accumulator(acc_value))
