"""Tests for net-new user provisioning."""

import pytest

from claimlink.models.enums import UserType
from claimlink.models.user import UserRecord
from claimlink.services.record_provisioner import NewRecordProvisioner, ProfileNotFoundError


def _provisioner(directory, logger, **overrides):
    settings = {
        "community_context_claim": "sfdc_networkid",
        "community_organization_name": "Community Members",
        "community_profile_name": "Community User",
        "standard_profile_name": "Standard User",
    }
    settings.update(overrides)
    return NewRecordProvisioner(directory=directory, logger=logger, **settings)


def test_standard_login_gets_standard_profile(directory, logger, make_claims):
    user = UserRecord(first_name="Ann", last_name="Smithsonian")

    _provisioner(directory, logger).provision(make_claims(), user)

    assert user.profile_id == directory.find_profile_by_name("Standard User").id
    assert user.user_type == UserType.STANDARD
    assert user.contact_id is None


def test_community_login_gets_contact_and_community_profile(directory, db, logger, make_claims):
    user = UserRecord(first_name="Ann", last_name="Smithsonian")

    _provisioner(directory, logger).provision(make_claims(sfdc_networkid="0DB000001"), user)

    assert user.profile_id == directory.find_profile_by_name("Community User").id
    assert user.user_type == UserType.COMMUNITY
    contact = db.sqlite.execute(
        "SELECT * FROM contacts WHERE id = ?", (user.contact_id,)
    ).fetchone()
    assert contact["first_name"] == "Ann"
    assert contact["last_name"] == "Smithsonian"
    organization = directory.find_or_create_organization("Community Members")
    assert contact["organization_id"] == organization.id


def test_community_organization_is_reused(directory, db, logger, make_claims):
    provisioner = _provisioner(directory, logger)
    claims = make_claims(sfdc_networkid="0DB000001")

    provisioner.provision(claims, UserRecord(first_name="Ann", last_name="Smithsonian"))
    provisioner.provision(claims, UserRecord(first_name="Bo", last_name="Li"))

    count = db.sqlite.execute("SELECT COUNT(*) FROM organizations").fetchone()[0]
    assert count == 1


def test_missing_profile_raises(directory, logger, make_claims):
    provisioner = _provisioner(directory, logger, standard_profile_name="Does Not Exist")

    with pytest.raises(ProfileNotFoundError) as excinfo:
        provisioner.provision(make_claims(), UserRecord())

    assert excinfo.value.profile_name == "Does Not Exist"
