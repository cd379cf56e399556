"""
Accumulator Authority
=====================

The authority is the only party holding the trapdoor s. It:
1. Publishes the generators and the public key (g, h, pk1, pk2)
2. Owns the current accumulator value V (seeded with pk1)
3. Adds and deletes member exponents
4. Publishes a signed announcement for every transition so members can
   update their witnesses without the trapdoor
5. Issues witnesses directly when asked (trapdoor shortcut)

Concurrency:
------------
Every read-modify-write of V happens under one lock, so concurrent
add_member / delete_member calls are serialized and each announcement
carries a consistent (acc_before, acc_after) pair and a unique epoch.

Security Model:
---------------
- The authority is trusted to apply transitions correctly
- s and the ECDSA signing key must be kept secret
"""

import logging
import threading
from typing import Dict, Tuple

from charm.toolbox.pairinggroup import ZR

from bm_accumulator.accumulator import (
    Accumulator,
    Witness,
    add_element_with_key,
    delete_element_with_key,
    derive_witness_with_key,
)
from bm_accumulator.groups import get_generators
from bm_accumulator.keys import AccumulatorKeyPair, AccumulatorPublicKey
from bm_accumulator.records import Content
from bm_accumulator.serialization import serialize_accumulator, serialize_public_key
import acc_utils

logger = logging.getLogger(__name__)


class Authority:
    """
    Accumulator authority - owns V and s, publishes signed transitions.
    """

    def __init__(self, params: dict, secret: ZR = None, generators: Tuple = None):
        """
        Initialize the authority.

        Parameters
        ----------
        params : dict
            Output of bm_accumulator.setup()
        secret : ZR, optional
            Fixed trapdoor, for tests only
        generators : tuple, optional
            Fixed (g, h); sampled when omitted

        Notes
        -----
        This sets up:
        1. Generators and accumulator key pair
        2. Signing keys (ECDSA)
        3. Initial accumulator V_0 = pk1
        """
        self.group = params['group']

        g, h = generators if generators is not None else get_generators(self.group)
        self.key_pair = AccumulatorKeyPair.generate(self.group, g, h, secret=secret)

        # Signing keys (ECDSA, separate from pairing curve)
        self.sk_sig, self.vk_sig = acc_utils.generate_signing_keys()

        self.accumulator = Accumulator.setup(self.key_pair.public_key)
        self.epoch = 0

        self._lock = threading.Lock()

    def get_public_key(self) -> AccumulatorPublicKey:
        return self.key_pair.public_key

    def get_verifying_key(self):
        return self.vk_sig

    def get_accumulator(self) -> Accumulator:
        with self._lock:
            return self.accumulator

    def get_public_parameters(self) -> Dict:
        """
        Everything a verifier needs, in JSON-safe form.

        Returns
        -------
        dict
            - public_key: serialized (g, h, pk1, pk2)
            - accumulator: serialized current V
            - epoch: epoch of the last announcement
            - vk_sig: the ECDSA verification key for announcements
        """
        with self._lock:
            accumulator, epoch = self.accumulator, self.epoch
        return {
            "public_key": serialize_public_key(self.key_pair.public_key, self.group),
            "accumulator": serialize_accumulator(accumulator, self.group),
            "epoch": epoch,
            "vk_sig": acc_utils.serialize_vk(self.vk_sig),
        }

    def _publish(self, op: str, element: ZR, acc_before: Accumulator,
                 acc_after: Accumulator) -> Dict:
        self.epoch += 1
        update = {
            "op": op,
            "element": element,
            "acc_before": acc_before.value,
            "acc_after": acc_after.value,
            "epoch": self.epoch,
        }
        update["sigma"] = acc_utils.sign_update(self.sk_sig, update, self.group)
        return update

    def add_member(self, x: ZR) -> Dict:
        """
        Add an exponent to the accumulator.

        Parameters
        ----------
        x : ZR
            The joining member's exponent

        Returns
        -------
        dict
            Signed update announcement with keys op="add", element,
            acc_before, acc_after, epoch, sigma.

        Notes
        -----
        The joining member builds its witness from acc_before (see
        acc_member.Member.join); all other members apply the announcement.
        """
        with self._lock:
            acc_before = self.accumulator
            acc_after = Accumulator(add_element_with_key(acc_before.value, x, self.key_pair.secret))
            self.accumulator = acc_after
            update = self._publish("add", x, acc_before, acc_after)
        logger.info("Added member at epoch %d", update["epoch"])
        return update

    def delete_member(self, x: ZR) -> Dict:
        """
        Remove an exponent from the accumulator.

        Returns
        -------
        dict
            Signed update announcement with op="delete".

        Raises
        ------
        InvalidScalar
            If x + s = 0 mod r. The accumulator is left unchanged.
        """
        with self._lock:
            acc_before = self.accumulator
            acc_after = Accumulator(delete_element_with_key(acc_before.value, x, self.key_pair.secret))
            self.accumulator = acc_after
            update = self._publish("delete", x, acc_before, acc_after)
        logger.info("Deleted member at epoch %d", update["epoch"])
        return update

    def enroll(self, record: Content) -> Tuple[ZR, Dict]:
        """
        Hash a member record to its exponent and add it.

        Returns
        -------
        x : ZR
            The record's exponent
        update : dict
            The signed add announcement
        """
        x = record.to_scalar(self.group)
        return x, self.add_member(x)

    def issue_witness(self, x: ZR) -> Witness:
        """
        Derive a witness for x against the current accumulator.

        Notes
        -----
        Trusted issuer only: uses the trapdoor. x must already have been
        added, otherwise the witness does not prove membership.
        """
        with self._lock:
            return derive_witness_with_key(self.accumulator.value, x, self.key_pair.secret)
