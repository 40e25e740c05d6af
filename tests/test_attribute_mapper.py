"""Tests for claim-to-user attribute mapping."""

import pytest

from claimlink.models.enums import RegistrationErrorKind
from claimlink.models.user import UserRecord
from claimlink.services.attribute_mapper import AttributeMapper, derive_alias


@pytest.fixture
def mapper(directory, logger):
    return AttributeMapper(
        directory=directory,
        logger=logger,
        locale_provider=lambda: "fr_FR",
        email_encoding_key="UTF-8",
    )


def test_alias_truncates_long_names_last_name_first():
    assert derive_alias("Smithsonian", "Ann") == "smithson"


def test_alias_left_unset_for_short_names():
    assert derive_alias("Li", "An") is None
    assert derive_alias("Smith", "Ann") is None  # exactly 8 characters


def test_alias_tolerates_missing_name_parts():
    assert derive_alias(None, "Bartholomew") == "bartholo"
    assert derive_alias(None, None) is None


def test_maps_names_email_and_alias(mapper, make_claims):
    user = UserRecord()

    result = mapper.prepare_user_data(make_claims(), user)

    assert result.success
    assert result.data is user
    assert user.email == "ann@example.com"
    assert user.first_name == "Ann"
    assert user.last_name == "Smithsonian"
    assert user.alias == "smithson"


def test_short_names_keep_existing_alias(mapper, make_claims, seed_user):
    user = seed_user("li@example.com", alias="legacy")

    mapper.prepare_user_data(
        make_claims(email="li@example.com", given_name="An", family_name="Li"), user,
    )

    assert user.alias == "legacy"


def test_new_user_gets_email_as_username(mapper, make_claims):
    user = UserRecord()

    mapper.prepare_user_data(make_claims(), user)

    assert user.username == "ann@example.com"


def test_new_user_with_taken_username_fails_untouched(mapper, make_claims, seed_user):
    seed_user("someone@example.com", username="ann@example.com")
    user = UserRecord()

    result = mapper.prepare_user_data(make_claims(), user)

    assert not result.success
    assert result.error_kind == RegistrationErrorKind.USERNAME_CONFLICT
    assert user.username is None
    assert user.first_name is None


def test_existing_user_keeps_username_when_email_changes(mapper, make_claims, seed_user):
    user = seed_user("old@example.com", username="original-handle")

    result = mapper.prepare_user_data(make_claims(email="new@example.com"), user)

    assert result.success
    assert user.username == "original-handle"
    assert user.email == "new@example.com"


def test_absent_keys_leave_fields_untouched(mapper, make_claims, seed_user):
    user = seed_user(
        "ann@example.com", first_name="Annie", phone="555-0100", timezone_key="Europe/Paris",
        city="Springfield",
    )

    mapper.prepare_user_data(
        make_claims(without=("given_name", "family_name", "email")), user,
    )

    assert user.first_name == "Annie"
    assert user.phone == "555-0100"
    assert user.timezone_key == "Europe/Paris"
    assert user.city == "Springfield"
    assert user.email == "ann@example.com"


def test_mobile_phone_type_selects_mobile_field(mapper, make_claims):
    user = UserRecord()

    mapper.prepare_user_data(make_claims(phone_number="+1 555 0101", phone_type="mobile"), user)

    assert user.mobile_phone == "+1 555 0101"
    assert user.phone is None


@pytest.mark.parametrize("phone_type", ["work", "Mobile", None])
def test_other_phone_types_select_landline(mapper, make_claims, phone_type):
    user = UserRecord()

    mapper.prepare_user_data(make_claims(phone_number="555-0102", phone_type=phone_type), user)

    assert user.phone == "555-0102"
    assert user.mobile_phone is None


def test_present_but_empty_phone_is_written(mapper, make_claims, seed_user):
    user = seed_user("ann@example.com", phone="555-0100")

    mapper.prepare_user_data(make_claims(phone_number=""), user)

    assert user.phone == ""


def test_address_claim_is_parsed_into_fields(mapper, make_claims):
    user = UserRecord()
    address = "{country=US, street_address=1 Main St, locality=Springfield, state=IL, postal_code=62704}"

    mapper.prepare_user_data(make_claims(address=address), user)

    assert user.street == "1 Main St"
    assert user.city == "Springfield"
    assert user.state == "IL"
    assert user.country == "US"
    assert user.postal_code == "62704"


def test_missing_address_sub_fields_are_cleared(mapper, make_claims, seed_user):
    user = seed_user("ann@example.com", state="IL", postal_code="62704")

    mapper.prepare_user_data(make_claims(address="{country=US}"), user)

    assert user.country == "US"
    assert user.state is None
    assert user.postal_code is None


def test_locale_claim_sets_locale_and_language(mapper, make_claims):
    user = UserRecord()

    mapper.prepare_user_data(make_claims(locale="en-GB"), user)

    assert user.locale_key == "en_GB"
    assert user.language_key == "en_GB"


def test_missing_locale_uses_environment_locale(mapper, make_claims):
    user = UserRecord()

    mapper.prepare_user_data(make_claims(), user)

    assert user.locale_key == "fr_FR"
    assert user.language_key == "fr_FR"


def test_zoneinfo_sets_timezone(mapper, make_claims):
    user = UserRecord()

    mapper.prepare_user_data(make_claims(zoneinfo="America/Chicago"), user)

    assert user.timezone_key == "America/Chicago"


def test_email_encoding_is_always_forced(mapper, make_claims, seed_user):
    user = seed_user("ann@example.com", email_encoding_key="ISO-8859-1")

    mapper.prepare_user_data(make_claims(), user)

    assert user.email_encoding_key == "UTF-8"


def test_mapping_twice_is_idempotent(mapper, make_claims, seed_user):
    user = seed_user("ann@example.com")
    claims = make_claims(
        phone_number="555-0103",
        address="{locality=Springfield, country=US}",
        locale="de-DE",
        zoneinfo="Europe/Berlin",
    )

    mapper.prepare_user_data(claims, user)
    first = user.model_dump()
    mapper.prepare_user_data(claims, user)

    assert user.model_dump() == first
