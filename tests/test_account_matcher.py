"""Tests for resolving login subjects to directory users."""

import pytest

from claimlink.models.enums import MatchSource, UserType
from claimlink.services.account_matcher import AccountMatcher


@pytest.fixture
def matcher(directory, logger):
    return AccountMatcher(directory=directory, logger=logger)


def test_linked_subject_matches_its_user(matcher, directory, make_claims, seed_user):
    user = seed_user("ann@example.com")
    directory.link_account("sub-001", user.id)

    matched, source = matcher.resolve(make_claims())

    assert matched.id == user.id
    assert source == MatchSource.LINKED_ACCOUNT


def test_linked_subject_with_changed_email_is_not_matched(matcher, directory, make_claims, seed_user):
    user = seed_user("old@example.com")
    directory.link_account("sub-001", user.id)
    # Another user already owns the claimed email; the stale link must not
    # fall through to it.
    seed_user("ann@example.com")

    assert matcher.match(make_claims(email="ann@example.com")) is None


def test_linked_inactive_user_is_not_matched(matcher, directory, make_claims, seed_user):
    user = seed_user("ann@example.com", is_active=False)
    directory.link_account("sub-001", user.id)

    assert matcher.match(make_claims()) is None


def test_linked_guest_user_is_not_matched(matcher, directory, make_claims, seed_user):
    user = seed_user("ann@example.com", user_type=UserType.GUEST)
    directory.link_account("sub-001", user.id)

    assert matcher.match(make_claims()) is None


def test_unlinked_subject_falls_back_to_email(matcher, make_claims, seed_user):
    user = seed_user("ann@example.com")

    matched, source = matcher.resolve(make_claims())

    assert matched.id == user.id
    assert source == MatchSource.EMAIL


def test_email_fallback_skips_guests_and_inactive_users(matcher, make_claims, seed_user):
    seed_user("ann@example.com", username="guest-ann", user_type=UserType.GUEST)
    seed_user("ann@example.com", username="old-ann", is_active=False)

    assert matcher.match(make_claims()) is None


def test_email_fallback_takes_first_of_several_matches(matcher, make_claims, seed_user):
    first = seed_user("ann@example.com", username="ann-1")
    seed_user("ann@example.com", username="ann-2")

    matched = matcher.match(make_claims())

    assert matched.id == first.id


def test_no_match_without_email(matcher, make_claims, seed_user):
    seed_user("ann@example.com")

    assert matcher.match(make_claims(email=None)) is None


def test_unknown_subject_and_email(matcher, make_claims):
    assert matcher.resolve(make_claims()) == (None, None)
