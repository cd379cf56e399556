"""
Tests for public witness updates
================================

Adds need the accumulator BEFORE the addition; deletes need the accumulator
AFTER the deletion. Both directions are pinned here, including what happens
when the wrong value is passed.
"""

import random

import pytest
from charm.toolbox.pairinggroup import ZR

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from bm_accumulator.groups import setup, get_generators
from bm_accumulator.keys import AccumulatorKeyPair
from bm_accumulator.accumulator import (
    Accumulator,
    Witness,
    add_element_for_witness,
    delete_element_for_witness,
    derive_witness_with_key,
)
from bm_accumulator.errors import InvalidScalar


@pytest.fixture(scope="module")
def group():
    return setup('MNT224')['group']


@pytest.fixture(scope="module")
def keys(group):
    g, h = get_generators(group)
    return AccumulatorKeyPair.generate(group, g, h)


@pytest.fixture
def member(group, keys):
    """An accumulator with three members and a held witness for x_self."""
    acc = Accumulator.setup(keys.public_key)
    for _ in range(3):
        acc = acc.add_element_with_key(group.random(ZR), keys.secret)
    x_self = group.random(ZR)
    acc = acc.add_element_with_key(x_self, keys.secret)
    wit = derive_witness_with_key(acc.value, x_self, keys.secret)
    return acc, x_self, wit


def test_incremental_join_matches_derived_witness(group, keys):
    """Update equivalence: join early, follow n additions, compare."""
    x_self = group.random(ZR)
    acc = Accumulator.setup(keys.public_key)

    wit = Witness.before_join(acc)
    acc_after = acc.add_element_with_key(x_self, keys.secret)
    wit = wit.add_element(x_self, x_self, acc, acc_after)
    acc = acc_after
    assert wit.verify(acc, x_self, keys.public_key)

    for _ in range(6):
        x_add = group.random(ZR)
        acc_after = acc.add_element_with_key(x_add, keys.secret)
        wit = wit.add_element(x_add, x_self, acc, acc_after)
        acc = acc_after
        assert wit.is_fresh(acc)
        assert wit.verify(acc, x_self, keys.public_key)

    derived = derive_witness_with_key(acc.value, x_self, keys.secret)
    assert wit == derived


def test_add_update_needs_pre_add_value(group, keys, member):
    acc, x_self, wit = member
    x_add = group.random(ZR)
    acc_after = acc.add_element_with_key(x_add, keys.secret)

    good = add_element_for_witness(wit.value, acc.value, x_add, x_self)
    assert Witness(good, acc_after).verify(acc_after, x_self, keys.public_key)

    wrong = add_element_for_witness(wit.value, acc_after.value, x_add, x_self)
    assert not Witness(wrong, acc_after).verify(acc_after, x_self, keys.public_key)


def test_add_update_with_wrong_exponent_fails_silently(group, keys, member):
    acc, x_self, wit = member
    x_add = group.random(ZR)
    acc_after = acc.add_element_with_key(x_add, keys.secret)

    updated = wit.add_element(group.random(ZR), x_self, acc, acc_after)
    assert not updated.verify(acc_after, x_self, keys.public_key)


def test_delete_update_needs_post_delete_value(group, keys):
    acc = Accumulator.setup(keys.public_key)
    x_del, x_self = group.random(ZR), group.random(ZR)
    acc = acc.add_element_with_key(x_del, keys.secret)
    acc = acc.add_element_with_key(x_self, keys.secret)
    wit = derive_witness_with_key(acc.value, x_self, keys.secret)

    acc_after = acc.delete_element_with_key(x_del, keys.secret)

    good = delete_element_for_witness(wit.value, acc_after.value, x_del, x_self)
    assert Witness(good, acc_after).verify(acc_after, x_self, keys.public_key)

    wrong = delete_element_for_witness(wit.value, acc.value, x_del, x_self)
    assert not Witness(wrong, acc_after).verify(acc_after, x_self, keys.public_key)


def test_own_deletion_cannot_be_followed(keys, member):
    acc, x_self, wit = member
    acc_after = acc.delete_element_with_key(x_self, keys.secret)

    with pytest.raises(InvalidScalar):
        wit.delete_element(x_self, x_self, acc_after)


def test_mixed_history(group, keys, member):
    """Adds and deletes interleaved, witness followed publicly throughout."""
    acc, x_self, wit = member
    others = []
    for step in range(8):
        if others and step % 3 == 2:
            x_del = others.pop(0)
            acc_after = acc.delete_element_with_key(x_del, keys.secret)
            wit = wit.delete_element(x_del, x_self, acc_after)
        else:
            x_add = group.random(ZR)
            others.append(x_add)
            acc_after = acc.add_element_with_key(x_add, keys.secret)
            wit = wit.add_element(x_add, x_self, acc, acc_after)
        acc = acc_after
        assert wit.verify(acc, x_self, keys.public_key)

    assert wit == derive_witness_with_key(acc.value, x_self, keys.secret)


def test_members_update_independently(group, keys):
    """Witnesses of different members can be advanced in any order."""
    acc = Accumulator.setup(keys.public_key)
    xs = [group.random(ZR) for _ in range(4)]
    for x in xs:
        acc = acc.add_element_with_key(x, keys.secret)
    witnesses = {i: derive_witness_with_key(acc.value, x, keys.secret) for i, x in enumerate(xs)}

    x_add = group.random(ZR)
    acc_after = acc.add_element_with_key(x_add, keys.secret)

    order = list(witnesses)
    random.shuffle(order)
    for i in order:
        witnesses[i] = witnesses[i].add_element(x_add, xs[i], acc, acc_after)

    for i, x in enumerate(xs):
        assert witnesses[i].verify(acc_after, x, keys.public_key)
