"""
End-to-end tests for the authority / member / verifier flow
===========================================================

Workflow under test:
1. Authority publishes its public key and signs every transition
2. Members join from the announcement of their own addition
3. Members follow later announcements without the trapdoor
4. Verifiers follow the same announcements and check presented witnesses
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from charm.toolbox.pairinggroup import ZR

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from bm_accumulator import setup
from bm_accumulator.accumulator import Accumulator, add_element_with_key
from bm_accumulator.errors import DecodeError, InvalidScalar, InvalidUpdate, StaleWitness
from bm_accumulator.records import MemberRecord, hash_attributes
from bm_accumulator import serialization as ser
from acc_authority import Authority
from acc_member import Member
from acc_verifier import Verifier
import acc_utils


class TestAuthorityFlow:
    """Authority, members and verifier working together."""

    @pytest.fixture
    def setup_system(self):
        params = setup('MNT224')
        group = params['group']
        authority = Authority(params)
        verifier = Verifier(authority.get_public_key(), authority.get_accumulator(),
                            group=group, verifying_key=authority.get_verifying_key())
        return {
            'group': group,
            'authority': authority,
            'verifier': verifier,
        }

    def _join(self, sys_, x):
        authority = sys_['authority']
        update = authority.add_member(x)
        member = Member.join(x, update, authority.get_public_key(),
                             group=sys_['group'], verifying_key=authority.get_verifying_key())
        return member, update

    def test_join_and_verify(self, setup_system):
        sys_ = setup_system
        group, authority, verifier = sys_['group'], sys_['authority'], sys_['verifier']

        x = group.random(ZR)
        member, update = self._join(sys_, x)
        verifier.update_accumulator(update)

        assert member.is_valid()
        assert member.is_fresh(authority.get_accumulator())
        assert verifier.verify_membership(*member.present())
        assert member.witness == authority.issue_witness(x)

    def test_members_follow_adds_and_deletes(self, setup_system):
        sys_ = setup_system
        group, authority, verifier = sys_['group'], sys_['authority'], sys_['verifier']

        xs = [group.random(ZR) for _ in range(4)]
        members = []
        for x in xs:
            member, update = self._join(sys_, x)
            for m in members:
                m.apply_update(update)
            verifier.update_accumulator(update)
            members.append(member)

        # remove the second member
        update = authority.delete_member(xs[1])
        verifier.update_accumulator(update)
        removed = members.pop(1)
        for m in members:
            m.apply_update(update)

        for m in members:
            assert m.is_valid()
            assert verifier.verify_membership(*m.present())
        assert not verifier.verify_membership(*removed.present())

        with pytest.raises(InvalidScalar):
            removed.apply_update(update)

    def test_enroll_record(self, setup_system):
        sys_ = setup_system
        group, authority = sys_['group'], sys_['authority']
        record = MemberRecord("04deadbeef", hash_attributes("Test Attribute"), "Test Role")

        x, update = authority.enroll(record)
        assert x == record.to_scalar(group)
        member = Member.join(x, update, authority.get_public_key(),
                             group=group, verifying_key=authority.get_verifying_key())
        assert member.is_valid()

    def test_tampered_announcement_is_rejected(self, setup_system):
        sys_ = setup_system
        group, authority, verifier = sys_['group'], sys_['authority'], sys_['verifier']

        member, first = self._join(sys_, group.random(ZR))
        verifier.update_accumulator(first)

        update = authority.add_member(group.random(ZR))
        forged = dict(update, element=group.random(ZR))
        with pytest.raises(InvalidUpdate):
            member.apply_update(forged)
        with pytest.raises(InvalidUpdate):
            verifier.update_accumulator(forged)

        unsigned = dict(update, sigma=None)
        with pytest.raises(InvalidUpdate):
            member.apply_update(unsigned)

        member.apply_update(update)
        verifier.update_accumulator(update)
        assert verifier.verify_membership(*member.present())

    def test_missed_announcement_is_detected(self, setup_system):
        sys_ = setup_system
        group, authority, verifier = sys_['group'], sys_['authority'], sys_['verifier']

        member, first = self._join(sys_, group.random(ZR))
        verifier.update_accumulator(first)
        skipped = authority.add_member(group.random(ZR))
        latest = authority.add_member(group.random(ZR))

        with pytest.raises(StaleWitness):
            member.apply_update(latest)
        with pytest.raises(InvalidUpdate, match="does not follow"):
            verifier.update_accumulator(latest)

        member.apply_update(skipped)
        member.apply_update(latest)
        with pytest.raises(StaleWitness):
            member.apply_update(latest)

        verifier.update_accumulator(skipped)
        verifier.update_accumulator(latest)
        assert verifier.verify_membership(*member.present())

    def test_stale_witness_fails_verification(self, setup_system):
        sys_ = setup_system
        group, authority, verifier = sys_['group'], sys_['authority'], sys_['verifier']

        member, first = self._join(sys_, group.random(ZR))
        verifier.update_accumulator(first)
        verifier.update_accumulator(authority.add_member(group.random(ZR)))

        assert not member.is_fresh(authority.get_accumulator())
        assert not verifier.verify_membership(*member.present())

    def test_announcements_survive_serialization(self, setup_system):
        sys_ = setup_system
        group, authority = sys_['group'], sys_['authority']

        member, _ = self._join(sys_, group.random(ZR))
        update = authority.add_member(group.random(ZR))

        wire = ser.deserialize_update(ser.serialize_update(update, group), group)
        assert acc_utils.verify_update_signature(authority.get_verifying_key(), wire, group)
        member.apply_update(wire)
        assert member.is_valid()

    def test_failed_delete_leaves_accumulator_untouched(self, setup_system):
        sys_ = setup_system
        group, authority = sys_['group'], sys_['authority']
        before = authority.get_accumulator()
        epoch = authority.epoch

        with pytest.raises(InvalidScalar):
            authority.delete_member(group.init(ZR, 0) - authority.key_pair.secret)
        assert authority.get_accumulator() == before
        assert authority.epoch == epoch

    def test_concurrent_adds_are_serialized(self, setup_system):
        sys_ = setup_system
        group, authority = sys_['group'], sys_['authority']
        xs = [group.random(ZR) for _ in range(8)]
        start = authority.get_accumulator()

        with ThreadPoolExecutor(max_workers=4) as pool:
            updates = list(pool.map(authority.add_member, xs))

        epochs = sorted(u["epoch"] for u in updates)
        assert epochs == list(range(1, len(xs) + 1))

        # announcements chain in epoch order
        chain = sorted(updates, key=lambda u: u["epoch"])
        assert chain[0]["acc_before"] == start.value
        for prev, nxt in zip(chain, chain[1:]):
            assert prev["acc_after"] == nxt["acc_before"]

        expected = start.value
        for x in xs:
            expected = add_element_with_key(expected, x, authority.key_pair.secret)
        assert authority.get_accumulator() == Accumulator(expected)

    def test_verifier_from_public_parameters(self, setup_system):
        sys_ = setup_system
        group, authority = sys_['group'], sys_['authority']

        member, _ = self._join(sys_, group.random(ZR))
        params = authority.get_public_parameters()
        assert params["epoch"] == 1

        verifier = Verifier.from_public_parameters(params, group)
        assert verifier.public_key == authority.get_public_key()
        assert verifier.accumulator == authority.get_accumulator()
        assert verifier.verify_membership(*member.present())

        # the transported ECDSA key still authenticates later announcements
        update = authority.add_member(group.random(ZR))
        verifier.update_accumulator(update)
        member.apply_update(update)
        assert verifier.verify_membership(*member.present())

        with pytest.raises(InvalidUpdate):
            verifier.update_accumulator(dict(authority.add_member(group.random(ZR)),
                                             sigma=b"\x00" * 64))

    def test_verifying_key_round_trip(self, setup_system):
        authority = setup_system['authority']
        vk = authority.get_verifying_key()

        restored = acc_utils.deserialize_vk(acc_utils.serialize_vk(vk))
        assert restored.to_string() == vk.to_string()

        with pytest.raises(DecodeError):
            acc_utils.deserialize_vk("not base64!")
        with pytest.raises(DecodeError):
            acc_utils.deserialize_vk(acc_utils.serialize_vk(vk)[:-8])

    def test_public_parameters_missing_field(self, setup_system):
        group, authority = setup_system['group'], setup_system['authority']
        params = authority.get_public_parameters()
        del params["vk_sig"]

        with pytest.raises(DecodeError, match="vk_sig"):
            Verifier.from_public_parameters(params, group)
