"""
Accumulator Member
==================

A member holds its own exponent x and a witness W with the accumulator
snapshot it was last updated to. It:
1. Builds its witness when it joins (from the value just before its add)
2. Applies every later announcement from the authority, in epoch order
3. Presents (W, x) to any verifier

No trapdoor is involved; members of different identities update
independently and in any order relative to each other.
"""

import logging
from typing import Dict, Tuple

from charm.toolbox.pairinggroup import ZR, G1

from bm_accumulator.accumulator import Accumulator, Witness
from bm_accumulator.config import config
from bm_accumulator.errors import InvalidUpdate, StaleWitness
from bm_accumulator.keys import AccumulatorPublicKey
import acc_utils

logger = logging.getLogger(__name__)


class Member:
    """
    Witness holder for a single exponent.
    """

    def __init__(self, x: ZR, witness: Witness, public_key: AccumulatorPublicKey,
                 group=None, verifying_key=None, epoch: int = 0):
        """
        Parameters
        ----------
        x : ZR
            The member's exponent
        witness : Witness
            Current witness and its accumulator snapshot
        public_key : AccumulatorPublicKey
            The authority's public key
        group : PairingGroup, optional
            Needed to check announcement signatures
        verifying_key : VerifyingKey, optional
            The authority's ECDSA key; without it signatures are not checked
        epoch : int
            Epoch of the last announcement applied
        """
        self.x = x
        self.witness = witness
        self.public_key = public_key
        self.group = group
        self.verifying_key = verifying_key
        self.epoch = epoch

    @classmethod
    def join(cls, x: ZR, update: Dict, public_key: AccumulatorPublicKey,
             group=None, verifying_key=None) -> "Member":
        """
        Build a member from the announcement of its own addition.

        The witness starts as the accumulator immediately before the add
        and is advanced through that add, which leaves it at acc_before
        with the post-add snapshot.
        """
        member = cls(x, None, public_key, group=group, verifying_key=verifying_key)
        member._check_announcement(update)
        if update["op"] != "add" or update["element"] != x:
            raise InvalidUpdate("join requires the announcement adding this member")

        acc_before = Accumulator(update["acc_before"])
        acc_after = Accumulator(update["acc_after"])
        member.witness = Witness.before_join(acc_before).add_element(x, x, acc_before, acc_after)
        member.epoch = update["epoch"]
        return member

    def _check_announcement(self, update: Dict) -> None:
        if self.verifying_key is None or not config.verify_update_signatures:
            return
        if self.group is None:
            raise InvalidUpdate("a pairing group is required to check announcement signatures")
        if not acc_utils.verify_update_signature(self.verifying_key, update, self.group):
            raise InvalidUpdate(f"bad signature on epoch {update.get('epoch')} announcement")

    def apply_update(self, update: Dict) -> Witness:
        """
        Advance the witness over one announced transition.

        Parameters
        ----------
        update : dict
            Announcement from acc_authority.Authority

        Returns
        -------
        Witness
            The new witness (also stored on the member)

        Raises
        ------
        InvalidUpdate
            If the signature does not verify.
        StaleWitness
            If the witness snapshot is not the announcement's acc_before,
            i.e. an earlier announcement was missed or this one was
            already applied.
        InvalidScalar
            If the announcement deletes this member's own exponent.
        """
        self._check_announcement(update)

        acc_before = Accumulator(update["acc_before"])
        acc_after = Accumulator(update["acc_after"])
        if not self.witness.is_fresh(acc_before):
            raise StaleWitness(
                f"witness is at epoch {self.epoch}, announcement {update['epoch']} starts elsewhere")

        if update["op"] == "add":
            self.witness = self.witness.add_element(update["element"], self.x, acc_before, acc_after)
        elif update["op"] == "delete":
            self.witness = self.witness.delete_element(update["element"], self.x, acc_after)
        else:
            raise InvalidUpdate(f"unknown operation {update['op']!r}")

        self.epoch = update["epoch"]
        logger.debug("Witness advanced to epoch %d", self.epoch)
        return self.witness

    def is_fresh(self, acc: Accumulator) -> bool:
        return self.witness.is_fresh(acc)

    def is_valid(self) -> bool:
        """Verify the witness against its own snapshot."""
        return self.witness.verify(self.witness.acc, self.x, self.public_key)

    def present(self) -> Tuple[G1, ZR]:
        """The (W, x) pair handed to a verifier."""
        return self.witness.value, self.x
