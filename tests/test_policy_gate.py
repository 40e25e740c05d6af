"""Tests for the create/update eligibility checks."""

import pytest

from claimlink.models.claims import Claims
from claimlink.services.policy_gate import can_create, can_update


def _claims(**attributes):
    return Claims(email="ann@example.com", subject_identifier="sub-1", attributes=attributes)


def test_create_requires_family_name_and_verified_email():
    assert can_create(_claims(family_name="Li", email_verified="true")) is True


@pytest.mark.parametrize(
    "attributes",
    [
        {"email_verified": "true"},
        {"family_name": "Li"},
        {"family_name": "Li", "email_verified": "false"},
        {"family_name": "Li", "email_verified": "TRUE"},
        {"family_name": "Li", "email_verified": ""},
        {"family_name": "Li", "email_verified": None},
    ],
)
def test_create_rejected(attributes):
    assert can_create(_claims(**attributes)) is False


def test_create_accepts_empty_family_name_value():
    # Presence of the key is what counts.
    assert can_create(_claims(family_name="", email_verified="true")) is True


def test_update_only_needs_verified_email():
    assert can_update(_claims(email_verified="true")) is True


@pytest.mark.parametrize("value", ["false", "True", "1", "", None])
def test_update_rejected_without_literal_true(value):
    assert can_update(_claims(email_verified=value)) is False


def test_update_rejected_when_key_missing():
    assert can_update(_claims(family_name="Li")) is False


def test_none_claims_are_never_eligible():
    assert can_create(None) is False
    assert can_update(None) is False
