"""
Accumulator Serialization
=========================

Canonical byte encodings for group elements and scalars, and JSON-safe
forms of the public key, accumulator, witness and update announcements.

Element encoding
----------------
charm's ``group.serialize`` produces ``b"<tag>:<base64 body>"`` with the
compressed point as body; the tag is 1 for G1, 2 for G2 and 3 for GT.
``decode_element`` checks the tag, the base64 body and its length before
handing the bytes to charm, so a malformed input raises DecodeError instead
of reaching the C layer.

Scalar encoding
---------------
Fixed-width big-endian integers of ``scalar_width(group)`` bytes.
"""

import base64
import binascii
from typing import Dict

from charm.toolbox.pairinggroup import PairingGroup, ZR, G1, G2, GT, pair

from .accumulator import Accumulator, Witness
from .errors import DecodeError
from .keys import AccumulatorPublicKey
from .groups import group_order
from .utils import scalar_width


ELEMENT_TAGS = {G1: 1, G2: 2, GT: 3}


def encode_element(elem, group: PairingGroup) -> bytes:
    """Serialize a G1, G2 or GT element to its canonical bytes."""
    return group.serialize(elem)


def element_width(group: PairingGroup, kind=G1) -> int:
    """Length of the decoded body of a canonical G1, G2 or GT encoding."""
    widths = group.__dict__.setdefault('_element_widths', {})
    if kind not in widths:
        if kind == GT:
            sample = pair(group.random(G1), group.random(G2))
        else:
            sample = group.random(kind)
        widths[kind] = len(base64.b64decode(encode_element(sample, group).partition(b':')[2]))
    return widths[kind]


def decode_element(data: bytes, group: PairingGroup, expected=G1):
    """
    Deserialize canonical bytes into a group element.

    Parameters
    ----------
    data : bytes
        Output of encode_element
    group : PairingGroup
        The pairing group
    expected : int, optional
        charm type constant (G1, G2 or GT) the bytes must carry

    Returns
    -------
    G1, G2 or GT
        The decoded element

    Raises
    ------
    DecodeError
        On a wrong type tag, a malformed or wrong-length body, or bytes
        charm rejects.
    """
    if not isinstance(data, (bytes, bytearray)):
        raise DecodeError(f"expected bytes, got {type(data).__name__}")

    tag, sep, body = bytes(data).partition(b':')
    if not sep or not tag.isdigit():
        raise DecodeError("missing element type tag")
    if int(tag) != ELEMENT_TAGS[expected]:
        raise DecodeError(f"element type tag {int(tag)} does not match expected {ELEMENT_TAGS[expected]}")
    try:
        raw = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"malformed element body: {e}") from e
    if not raw:
        raise DecodeError("empty element body")
    width = element_width(group, expected)
    if len(raw) != width:
        raise DecodeError(f"element body is {len(raw)} bytes, expected {width}")

    try:
        elem = group.deserialize(bytes(data))
    except Exception as e:
        raise DecodeError(f"group provider rejected element: {e}") from e
    if elem is None or elem is False:
        raise DecodeError("group provider rejected element")
    return elem


def encode_scalar(x: ZR, group: PairingGroup) -> bytes:
    """Encode a scalar as fixed-width big-endian bytes."""
    return int(x).to_bytes(scalar_width(group), 'big')


def decode_scalar(data: bytes, group: PairingGroup) -> ZR:
    """
    Decode a fixed-width big-endian scalar.

    Raises
    ------
    DecodeError
        If the width is wrong or the value is not below r.
    """
    width = scalar_width(group)
    if not isinstance(data, (bytes, bytearray)) or len(data) != width:
        raise DecodeError(f"scalar encoding must be exactly {width} bytes")
    value = int.from_bytes(data, 'big')
    if value >= group_order(group):
        raise DecodeError("scalar encoding is not reduced mod r")
    return group.init(ZR, value)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode('utf-8')


def _unb64(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise DecodeError(f"malformed base64 field: {e}") from e


def serialize_g1(elem, group: PairingGroup) -> str:
    return _b64(encode_element(elem, group))


def deserialize_g1(data: str, group: PairingGroup):
    return decode_element(_unb64(data), group, G1)


def serialize_g2(elem, group: PairingGroup) -> str:
    return _b64(encode_element(elem, group))


def deserialize_g2(data: str, group: PairingGroup):
    return decode_element(_unb64(data), group, G2)


def serialize_zr(x: ZR, group: PairingGroup) -> str:
    return _b64(encode_scalar(x, group))


def deserialize_zr(data: str, group: PairingGroup) -> ZR:
    return decode_scalar(_unb64(data), group)


def serialize_public_key(public_key: AccumulatorPublicKey, group: PairingGroup) -> Dict:
    """Serialize the published generators and public key (g, h, pk1, pk2)."""
    return {
        'g': serialize_g1(public_key.g, group),
        'h': serialize_g2(public_key.h, group),
        'pk1': serialize_g1(public_key.pk1, group),
        'pk2': serialize_g2(public_key.pk2, group),
    }


def deserialize_public_key(data: Dict, group: PairingGroup) -> AccumulatorPublicKey:
    try:
        return AccumulatorPublicKey(
            g=deserialize_g1(data['g'], group),
            h=deserialize_g2(data['h'], group),
            pk1=deserialize_g1(data['pk1'], group),
            pk2=deserialize_g2(data['pk2'], group),
        )
    except KeyError as e:
        raise DecodeError(f"public key is missing field {e}") from e


def serialize_accumulator(acc: Accumulator, group: PairingGroup) -> str:
    return serialize_g1(acc.value, group)


def deserialize_accumulator(data: str, group: PairingGroup) -> Accumulator:
    return Accumulator(deserialize_g1(data, group))


def serialize_witness(witness: Witness, group: PairingGroup) -> Dict:
    """Serialize a witness together with its cached accumulator snapshot."""
    return {
        'value': serialize_g1(witness.value, group),
        'acc': serialize_g1(witness.acc.value, group),
    }


def deserialize_witness(data: Dict, group: PairingGroup) -> Witness:
    try:
        return Witness(deserialize_g1(data['value'], group),
                       Accumulator(deserialize_g1(data['acc'], group)))
    except KeyError as e:
        raise DecodeError(f"witness is missing field {e}") from e


def update_to_bytes(update: Dict, group: PairingGroup) -> bytes:
    """
    Canonical byte string of an update announcement, without its signature.

    Notes
    -----
    Layout: op ‖ epoch (8 bytes) ‖ element ‖ acc_before ‖ acc_after, with a
    two-byte length prefix in front of every variable-length part.
    """
    parts = [
        update['op'].encode('utf-8'),
        int(update['epoch']).to_bytes(8, 'big'),
        encode_scalar(update['element'], group),
        encode_element(update['acc_before'], group),
        encode_element(update['acc_after'], group),
    ]
    result = b""
    for part in parts:
        result += len(part).to_bytes(2, 'big') + part
    return result


def serialize_update(update: Dict, group: PairingGroup) -> Dict:
    """Serialize an update announcement for transport."""
    result = {
        'op': update['op'],
        'epoch': int(update['epoch']),
        'element': serialize_zr(update['element'], group),
        'acc_before': serialize_g1(update['acc_before'], group),
        'acc_after': serialize_g1(update['acc_after'], group),
    }
    if update.get('sigma') is not None:
        result['sigma'] = _b64(update['sigma'])
    return result


def deserialize_update(data: Dict, group: PairingGroup) -> Dict:
    try:
        update = {
            'op': data['op'],
            'epoch': int(data['epoch']),
            'element': deserialize_zr(data['element'], group),
            'acc_before': deserialize_g1(data['acc_before'], group),
            'acc_after': deserialize_g1(data['acc_after'], group),
            'sigma': _unb64(data['sigma']) if data.get('sigma') is not None else None,
        }
    except KeyError as e:
        raise DecodeError(f"update is missing field {e}") from e
    if update['op'] not in ('add', 'delete'):
        raise DecodeError(f"unknown update operation {update['op']!r}")
    return update
