"""
Bilinear Map Dynamic Accumulator
================================

A constant-size commitment to a dynamic set of members, with constant-size
membership witnesses that members update without the authority's secret
key, built on charm-crypto Type-3 pairings.

Modules:
--------
- groups: Pairing group setup and generators
- keys: Authority key pair (s, pk1 = g^s, pk2 = h^s)
- accumulator: Accumulator, Witness and the add/delete/verify/derive operations
- records: Member records and their mapping to exponents
- serialization: Canonical encodings and JSON-safe forms
- errors: Error taxonomy
- config: Environment configuration and logging setup

Usage:
------
    from bm_accumulator import setup, get_generators, AccumulatorKeyPair, Accumulator
    from charm.toolbox.pairinggroup import ZR
    from bm_accumulator.accumulator import derive_witness_with_key

    params = setup('MNT224')
    group = params['group']
    g, h = get_generators(group)
    keys = AccumulatorKeyPair.generate(group, g, h)

    acc = Accumulator.setup(keys.public_key)
    x = group.random(ZR)
    acc = acc.add_element_with_key(x, keys.secret)
    wit = derive_witness_with_key(acc.value, x, keys.secret)
    assert wit.verify(acc, x, keys.public_key)
"""

__version__ = "0.1.0"

from .groups import setup, get_generators
from .keys import AccumulatorKeyPair, AccumulatorPublicKey
from .accumulator import (
    Accumulator,
    Witness,
    add_element_with_key,
    delete_element_with_key,
    add_element_for_witness,
    delete_element_for_witness,
    verify_witness,
    derive_witness_with_key,
)
from .records import Content, MemberRecord, hash_attributes
from .errors import (
    AccumulatorError,
    InvalidScalar,
    DecodeError,
    RecordTypeMismatch,
    StaleWitness,
    InvalidUpdate,
)

__all__ = [
    'setup', 'get_generators',
    'AccumulatorKeyPair', 'AccumulatorPublicKey',
    'Accumulator', 'Witness',
    'add_element_with_key', 'delete_element_with_key',
    'add_element_for_witness', 'delete_element_for_witness',
    'verify_witness', 'derive_witness_with_key',
    'Content', 'MemberRecord', 'hash_attributes',
    'AccumulatorError', 'InvalidScalar', 'DecodeError',
    'RecordTypeMismatch', 'StaleWitness', 'InvalidUpdate',
]
