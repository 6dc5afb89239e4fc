"""
Tests for ProfileService business rules.
"""

from datetime import date

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from core.exceptions import ExperienceNotFound, ProfileNotFound, StoreFailure, ValidationFailed
from core.models import Experience, Profile, User
from core.security import Identity
from core.services import ProfileService, parse_skills


def _experience(title: str, **overrides) -> dict:
    entry = {
        "title": title,
        "company": "Acme",
        "location": "Remote",
        "from": date(2020, 1, 1),
        "to": None,
        "current": False,
        "description": None,
    }
    entry.update(overrides)
    return entry


def _boom(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("connection lost"))


# =============================================================================
# Skills parsing
# =============================================================================


def test_parse_skills_trims_and_keeps_order():
    assert parse_skills("a, b ,c") == ["a", "b", "c"]


def test_parse_skills_drops_blank_items():
    assert parse_skills("python,, ,go,") == ["python", "go"]


def test_parse_skills_accepts_list():
    assert parse_skills([" rust ", "zig"]) == ["rust", "zig"]


# =============================================================================
# Upsert
# =============================================================================


def test_first_upsert_creates_profile_owned_by_caller(test_session, identity, sample_profile_fields):
    service = ProfileService(test_session)

    profile = service.upsert(identity, sample_profile_fields)

    assert profile.id is not None
    assert profile.user_id == identity.user_id
    assert profile.skills == ["python", "fastapi", "sqlalchemy"]
    assert profile.social == {
        "twitter": "https://twitter.com/octodev",
        "linkedin": "https://linkedin.com/in/octodev",
    }
    assert profile.user.name == "Owner"


def test_repeated_upserts_keep_a_single_profile(test_session, identity):
    service = ProfileService(test_session)

    ids = {
        service.upsert(identity, {"status": f"Level {n}", "skills": "python"}).id
        for n in range(5)
    }

    assert len(ids) == 1
    assert test_session.query(Profile).filter(Profile.user_id == identity.user_id).count() == 1


def test_upsert_returns_post_update_state(test_session, identity, sample_profile_fields):
    service = ProfileService(test_session)
    service.upsert(identity, sample_profile_fields)

    updated = service.upsert(identity, {"status": "Senior Developer", "skills": "go"})

    assert updated.status == "Senior Developer"
    assert updated.skills == ["go"]


def test_upsert_keeps_fields_not_supplied(test_session, identity, sample_profile_fields):
    service = ProfileService(test_session)
    service.upsert(identity, sample_profile_fields)

    updated = service.upsert(
        identity,
        {"status": "Lead", "skills": "python", "company": "", "youtube": "https://youtube.com/c/dev"},
    )

    assert updated.company == "Acme"
    assert updated.location == "Lisbon"
    assert updated.social == {
        "twitter": "https://twitter.com/octodev",
        "linkedin": "https://linkedin.com/in/octodev",
        "youtube": "https://youtube.com/c/dev",
    }


def test_invalid_upsert_reports_both_fields_and_writes_nothing(
    test_session, identity, sample_profile_fields
):
    service = ProfileService(test_session)
    service.upsert(identity, sample_profile_fields)
    test_session.commit()

    with pytest.raises(ValidationFailed) as exc_info:
        service.upsert(identity, {"company": "Elsewhere"})

    assert [v.field for v in exc_info.value.violations] == ["status", "skills"]
    profile = service.get_self(identity)
    assert profile.company == "Acme"
    assert profile.status == "Developer"


@pytest.mark.parametrize("skills", [",", " , ,", [" "], []])
def test_upsert_with_only_blank_skills_is_rejected(test_session, identity, skills):
    service = ProfileService(test_session)

    with pytest.raises(ValidationFailed) as exc_info:
        service.upsert(identity, {"status": "Dev", "skills": skills})

    assert [v.field for v in exc_info.value.violations] == ["skills"]
    assert exc_info.value.violations[0].message == "Skills is required"
    assert test_session.query(Profile).count() == 0


# =============================================================================
# Reads
# =============================================================================


def test_get_self_without_profile(test_session, identity):
    with pytest.raises(ProfileNotFound, match="There is no profile for this user"):
        ProfileService(test_session).get_self(identity)


@pytest.mark.parametrize(
    "bad_id",
    ["abc", "5f1b2c3d4e5f6a7b8c9d0e1f", "", "-3", "0", None, "1_0", " 7", "99999999999999999999999"],
)
def test_get_by_owner_with_malformed_id_is_not_found(test_session, bad_id):
    with pytest.raises(ProfileNotFound):
        ProfileService(test_session).get_by_owner(bad_id)


def test_get_by_owner_accepts_string_id(test_session, identity):
    service = ProfileService(test_session)
    service.upsert(identity, {"status": "Dev", "skills": "c"})

    assert service.get_by_owner(str(identity.user_id)).user_id == identity.user_id


def test_get_by_owner_unknown_user(test_session):
    with pytest.raises(ProfileNotFound):
        ProfileService(test_session).get_by_owner(99999)


def test_list_all(test_session, make_user):
    service = ProfileService(test_session)
    for name in ("Ann", "Ben"):
        service.upsert(Identity(user_id=make_user(name).id), {"status": "Dev", "skills": "js"})

    assert [p.user.name for p in service.list_all()] == ["Ann", "Ben"]


# =============================================================================
# Experience
# =============================================================================


def test_experience_is_most_recent_first(test_session, identity):
    service = ProfileService(test_session)
    service.upsert(identity, {"status": "Dev", "skills": "python"})

    service.add_experience(identity, _experience("E1"))
    profile = service.add_experience(identity, _experience("E2"))

    assert [e.title for e in profile.experience] == ["E2", "E1"]
    assert [e.position for e in profile.experience] == [0, 1]
    assert len({e.id for e in profile.experience}) == 2


def test_add_experience_parses_iso_dates(test_session, identity):
    service = ProfileService(test_session)
    service.upsert(identity, {"status": "Dev", "skills": "python"})

    profile = service.add_experience(
        identity, _experience("Engineer", **{"from": "2019-03-01", "to": "2021-06-30"})
    )

    assert profile.experience[0].from_date == date(2019, 3, 1)
    assert profile.experience[0].to_date == date(2021, 6, 30)


def test_add_experience_requires_fields(test_session, identity):
    service = ProfileService(test_session)
    service.upsert(identity, {"status": "Dev", "skills": "python"})

    with pytest.raises(ValidationFailed) as exc_info:
        service.add_experience(identity, {"title": "", "company": None})

    assert [v.field for v in exc_info.value.violations] == ["title", "company", "from"]


def test_add_experience_without_profile(test_session, identity):
    with pytest.raises(ProfileNotFound):
        ProfileService(test_session).add_experience(identity, _experience("E1"))


def test_remove_experience_removes_exactly_that_entry(test_session, identity):
    service = ProfileService(test_session)
    service.upsert(identity, {"status": "Dev", "skills": "python"})
    for title in ("E1", "E2", "E3"):
        profile = service.add_experience(identity, _experience(title))
    middle_id = profile.experience[1].id

    profile = service.remove_experience(identity, middle_id)

    assert [e.title for e in profile.experience] == ["E3", "E1"]
    assert [e.position for e in profile.experience] == [0, 1]
    assert test_session.get(Experience, middle_id) is None


def test_remove_experience_with_repeated_positions(test_session, identity):
    service = ProfileService(test_session)
    service.upsert(identity, {"status": "Dev", "skills": "python"})
    for title in ("C", "B", "A"):
        profile = service.add_experience(identity, _experience(title))
    ids = {entry.title: entry.id for entry in profile.experience}

    # Two unlocked prepends can both write position 0
    test_session.execute(update(Experience).where(Experience.id == ids["B"]).values(position=0))
    test_session.execute(update(Experience).where(Experience.id == ids["C"]).values(position=1))
    test_session.expire_all()

    profile = service.remove_experience(identity, ids["B"])

    assert sorted(e.title for e in profile.experience) == ["A", "C"]
    assert test_session.get(Experience, ids["B"]) is None
    assert test_session.get(Experience, ids["A"]) is not None


def test_remove_unknown_experience_leaves_list_unchanged(test_session, identity):
    service = ProfileService(test_session)
    service.upsert(identity, {"status": "Dev", "skills": "python"})
    service.add_experience(identity, _experience("E1"))
    service.add_experience(identity, _experience("E2"))

    with pytest.raises(ExperienceNotFound):
        service.remove_experience(identity, "does-not-exist")

    assert [e.title for e in service.get_self(identity).experience] == ["E2", "E1"]


def test_remove_experience_without_profile(test_session, identity):
    with pytest.raises(ProfileNotFound):
        ProfileService(test_session).remove_experience(identity, "abc")


# =============================================================================
# Delete
# =============================================================================


def test_delete_account_removes_profile_and_user(test_session, identity):
    service = ProfileService(test_session)
    service.upsert(identity, {"status": "Dev", "skills": "python"})
    service.add_experience(identity, _experience("E1"))

    service.delete_account(identity)

    with pytest.raises(ProfileNotFound):
        service.get_self(identity)
    assert test_session.get(User, identity.user_id) is None
    assert test_session.query(Experience).count() == 0


def test_delete_account_without_profile_removes_user(test_session, identity):
    ProfileService(test_session).delete_account(identity)

    assert test_session.get(User, identity.user_id) is None


def test_delete_account_partial_failure_leaves_user(test_session, identity, monkeypatch):
    service = ProfileService(test_session)
    service.upsert(identity, {"status": "Dev", "skills": "python"})
    monkeypatch.setattr(service.users, "delete", _boom)

    with pytest.raises(StoreFailure) as exc_info:
        service.delete_account(identity)

    assert exc_info.value.operation == "delete_user"
    test_session.rollback()
    assert test_session.query(Profile).count() == 0
    assert test_session.get(User, identity.user_id) is not None


# =============================================================================
# Store failures
# =============================================================================


def test_store_errors_become_store_failure(test_session, identity, monkeypatch):
    service = ProfileService(test_session)
    monkeypatch.setattr(service.profiles, "get_by_user_id", _boom)

    with pytest.raises(StoreFailure) as exc_info:
        service.upsert(identity, {"status": "Dev", "skills": "python"})

    assert exc_info.value.operation == "upsert_profile"
    assert isinstance(exc_info.value.__cause__, OperationalError)


def test_validation_runs_before_store(test_session, identity, monkeypatch):
    service = ProfileService(test_session)
    monkeypatch.setattr(service.profiles, "get_by_user_id", _boom)

    with pytest.raises(ValidationFailed):
        service.upsert(identity, {})
