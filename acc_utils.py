"""
Accumulator Utility Functions
=============================

ECDSA signing of update announcements.

Every transition the authority publishes (op, element, acc_before,
acc_after, epoch) is signed so that members and verifiers, who receive it
over an untrusted channel, can check it came from the authority before
touching their witness or their copy of the accumulator.

Security Notes:
---------------
- We use ECDSA (separate from the pairing curve) for update signatures
- The signature covers the canonical encoding of all update fields,
  including the epoch, so replayed or reordered announcements are detected
"""

import base64
import hashlib
import logging
from typing import Dict, Tuple

from charm.toolbox.pairinggroup import PairingGroup
from ecdsa import SigningKey, VerifyingKey, NIST256p, BadSignatureError
from ecdsa.util import sigdecode_string, sigencode_string

from bm_accumulator.errors import DecodeError
from bm_accumulator.serialization import update_to_bytes

logger = logging.getLogger(__name__)


def generate_signing_keys() -> Tuple[SigningKey, VerifyingKey]:
    """
    Generate ECDSA signing and verification keys.

    Returns
    -------
    sk : SigningKey
        The secret signing key (for the authority)
    vk : VerifyingKey
        The public verification key (for members and verifiers)

    Notes
    -----
    We use NIST P-256 curve (separate from the pairing curve).
    """
    sk = SigningKey.generate(curve=NIST256p)
    vk = sk.get_verifying_key()
    return sk, vk


def hash_for_signing(update: Dict, group: PairingGroup) -> bytes:
    """SHA-256 of the canonical encoding of an update (signature excluded)."""
    return hashlib.sha256(update_to_bytes(update, group)).digest()


def sign_update(sk_ecdsa: SigningKey, update: Dict, group: PairingGroup) -> bytes:
    """
    Sign an update announcement.

    Returns
    -------
    bytes
        sigma = Sign(sk, Hash(op ‖ epoch ‖ element ‖ acc_before ‖ acc_after))
    """
    h = hash_for_signing(update, group)
    return sk_ecdsa.sign(h, sigencode=sigencode_string)


def verify_update_signature(vk_ecdsa: VerifyingKey, update: Dict, group: PairingGroup) -> bool:
    """
    Verify the signature carried in ``update['sigma']``.

    Returns
    -------
    bool
        True if the signature is present and valid, False otherwise
    """
    sigma = update.get('sigma')
    if sigma is None:
        return False
    try:
        h = hash_for_signing(update, group)
        vk_ecdsa.verify(sigma, h, sigdecode=sigdecode_string)
        return True
    except BadSignatureError:
        return False
    except Exception as e:
        logger.debug("Update signature check failed with %s: %s", type(e).__name__, e)
        return False


def serialize_vk(vk: VerifyingKey) -> str:
    """Base64 of the raw encoding of the authority's verification key."""
    return base64.b64encode(vk.to_string()).decode('utf-8')


def deserialize_vk(data: str) -> VerifyingKey:
    """
    Rebuild the authority's verification key.

    Raises
    ------
    DecodeError
        If the data is not base64 of a P-256 public key.
    """
    try:
        return VerifyingKey.from_string(base64.b64decode(data, validate=True), curve=NIST256p)
    except Exception as e:
        raise DecodeError(f"malformed verification key: {e}") from e
