"""
Membership Verifier
===================

A verifier holds only public data: the authority's public key, the
latest accumulator value and optionally the authority's ECDSA key.

Security Model:
---------------
- Verifiers must track every announcement; an outdated accumulator makes
  fresh witnesses fail and may accept revoked ones
- A False result is an authoritative "not a member", never transient
"""

import logging
from typing import Dict

from charm.toolbox.pairinggroup import ZR, G1

from bm_accumulator.accumulator import Accumulator, verify_witness
from bm_accumulator.config import config
from bm_accumulator.errors import DecodeError, InvalidUpdate
from bm_accumulator.keys import AccumulatorPublicKey
from bm_accumulator.serialization import deserialize_accumulator, deserialize_public_key
import acc_utils

logger = logging.getLogger(__name__)


class Verifier:
    """
    Public verifier of membership witnesses.
    """

    def __init__(self, public_key: AccumulatorPublicKey, accumulator: Accumulator,
                 group=None, verifying_key=None, epoch: int = 0):
        self.public_key = public_key
        self.accumulator = accumulator
        self.group = group
        self.verifying_key = verifying_key
        self.epoch = epoch

    @classmethod
    def from_public_parameters(cls, data: Dict, group) -> "Verifier":
        """
        Build a verifier from Authority.get_public_parameters() output.

        Raises
        ------
        DecodeError
            If any field is missing or malformed.
        """
        try:
            return cls(deserialize_public_key(data["public_key"], group),
                       deserialize_accumulator(data["accumulator"], group),
                       group=group,
                       verifying_key=acc_utils.deserialize_vk(data["vk_sig"]),
                       epoch=int(data["epoch"]))
        except KeyError as e:
            raise DecodeError(f"public parameters are missing field {e}") from e

    def update_accumulator(self, update: Dict) -> Accumulator:
        """
        Move to the accumulator value of the next announcement.

        Raises
        ------
        InvalidUpdate
            If the signature fails, or the announcement does not continue
            from the current accumulator at the next epoch.
        """
        if self.verifying_key is not None and config.verify_update_signatures:
            if self.group is None:
                raise InvalidUpdate("a pairing group is required to check announcement signatures")
            if not acc_utils.verify_update_signature(self.verifying_key, update, self.group):
                raise InvalidUpdate(f"bad signature on epoch {update.get('epoch')} announcement")

        if update["epoch"] != self.epoch + 1 or update["acc_before"] != self.accumulator.value:
            raise InvalidUpdate(
                f"announcement {update['epoch']} does not follow epoch {self.epoch}")

        self.accumulator = Accumulator(update["acc_after"])
        self.epoch = update["epoch"]
        return self.accumulator

    def verify_membership(self, witness_value: G1, x: ZR) -> bool:
        """
        Check a presented (W, x) against the current accumulator.

        Returns
        -------
        bool
            True iff e(W, h^x · pk2) = e(V, h)
        """
        result = verify_witness(witness_value, self.accumulator.value, x,
                                self.public_key.h, self.public_key.pk2)
        if not result:
            logger.info("Rejected membership witness at epoch %d", self.epoch)
        return result
