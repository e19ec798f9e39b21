"""Tests for dual-field identifier resolution."""

from __future__ import annotations

import itertools

import pytest

from bolddesk.sdk.identity import DualFieldIdentity, resolve_identity
from bolddesk.sdk.models import Contact, ContactGroup, DecodeOptions


class TestDualFieldIdentity:
    def test_primary_wins_over_later_fallback(self):
        identity = DualFieldIdentity("userId", "contactId")
        identity.write_primary(1)
        identity.write_fallback(2)
        assert identity.value == 1

    def test_primary_overrides_earlier_fallback(self):
        identity = DualFieldIdentity("userId", "contactId")
        identity.write_fallback(2)
        identity.write_primary(1)
        assert identity.value == 1

    def test_last_primary_write_wins(self):
        identity = DualFieldIdentity("userId", "contactId")
        identity.write_primary(1)
        identity.write_fallback(2)
        identity.write_primary(3)
        assert identity.value == 3

    def test_fallback_only(self):
        identity = DualFieldIdentity("userId", "contactId")
        identity.write_fallback(2)
        assert identity.value == 2
        assert identity.written
        assert not identity.primary_written

    def test_nothing_written(self):
        identity = DualFieldIdentity("userId", "contactId")
        assert identity.value is None
        assert not identity.written

    @pytest.mark.parametrize(
        "writes",
        list(itertools.permutations([("p", 10), ("f", 20), ("p", 30), ("f", 40)])),
    )
    def test_every_ordering_resolves_to_last_primary(self, writes):
        identity = DualFieldIdentity("userId", "contactId")
        for which, value in writes:
            if which == "p":
                identity.write_primary(value)
            else:
                identity.write_fallback(value)
        last_primary = [v for w, v in writes if w == "p"][-1]
        assert identity.value == last_primary


class TestResolveIdentity:
    def test_folds_fallback_into_primary(self):
        result = resolve_identity({"contactId": 5, "name": "x"}, "userId", "contactId")
        assert result == {"userId": 5, "name": "x"}

    def test_primary_kept_when_both_present(self):
        result = resolve_identity({"userId": 1, "contactId": 5}, "userId", "contactId")
        assert result == {"userId": 1}

    def test_case_insensitive_keys(self):
        result = resolve_identity({"CONTACTID": 5, "UserID": 1}, "userId", "contactId")
        assert result == {"userId": 1}

    def test_case_sensitive_ignores_other_casing(self):
        result = resolve_identity(
            {"ContactId": 5}, "userId", "contactId", case_insensitive=False
        )
        assert result == {"ContactId": 5}

    def test_absent_identifier_left_absent(self):
        assert resolve_identity({"name": "x"}, "userId", "contactId") == {"name": "x"}


class TestEntityIdentity:
    def test_contact_from_fallback(self):
        contact = Contact.model_validate({"contactId": 77, "emailId": "a@b.c"})
        assert contact.user_id == 77

    def test_contact_primary_after_fallback(self):
        contact = Contact.model_validate({"contactId": 77, "userId": 12})
        assert contact.user_id == 12

    def test_contact_primary_before_fallback(self):
        contact = Contact.model_validate({"userId": 12, "contactId": 77})
        assert contact.user_id == 12

    def test_contact_group_from_plain_id(self):
        group = ContactGroup.model_validate({"id": 3, "contactGroupName": "VIP"})
        assert group.contact_group_id == 3
        assert group.contact_group_name == "VIP"

    def test_contact_group_prefers_contact_group_id(self):
        group = ContactGroup.model_validate({"contactGroupId": 8, "id": 3})
        assert group.contact_group_id == 8

    def test_case_sensitive_decode(self):
        contact = Contact.model_validate(
            {"ContactId": 77},
            context=DecodeOptions(case_insensitive=False).as_context(),
        )
        assert contact.user_id == 0
