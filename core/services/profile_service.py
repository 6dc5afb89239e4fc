"""
Profile Service.

Business logic for profiles and their experience entries:
- Upsert: create on first call, update in place afterwards
- Experience: prepend new entries, remove by id
- Account deletion: profile first, then the owning user

Concurrency:
    Upsert is a plain read-then-write. Two concurrent upserts for the same
    user both read the old row and the last flush wins for every column it
    sets. Experience mutations lock the profile row (``SELECT ... FOR
    UPDATE``) so a concurrent add/remove cannot drop an entry on databases
    that support row locks.

    Account deletion commits the profile removal and the user removal
    separately. If the second commit fails the profile is gone while the
    user remains; this is logged as ``account_delete_partial``.
"""

import uuid
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from datetime import date
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import ExperienceNotFound, ProfileNotFound, StoreFailure
from core.logging import get_logger
from core.models import SOCIAL_FIELDS, Experience, Profile
from core.repositories import ProfileRepository, UserRepository
from core.security.identity import Identity
from core.validation import (
    EXPERIENCE_RULES,
    PROFILE_RULES,
    ensure_valid,
    not_empty,
    parse_record_id,
)

logger = get_logger("service.profile")

# Optional scalar columns copied from the payload when supplied
PROFILE_SCALAR_FIELDS = ("company", "website", "location", "bio", "status", "githubusername")

NO_PROFILE_FOR_USER = "There is no profile for this user"


def parse_skills(raw: str | Iterable[str] | None) -> list[str]:
    """
    Normalize skills into a trimmed, ordered list.

    Accepts the comma-separated form (``"a, b ,c"``) or an iterable of
    strings. Blank items are dropped.
    """
    if raw is None:
        return []
    items = raw.split(",") if isinstance(raw, str) else raw
    return [item.strip() for item in items if item and item.strip()]


def _as_date(value: date | str | None) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


class ProfileService:
    """
    Service for profile-related business logic.

    The service flushes through its repositories; the caller's session
    scope commits, except for ``delete_account`` which commits each step.

    Usage:
        with db.session() as session:
            service = ProfileService(session)
            profile = service.upsert(identity, {"status": "Developer", "skills": "python"})
    """

    def __init__(self, session: Session):
        self.session = session
        self.profiles = ProfileRepository(session)
        self.users = UserRepository(session)

    @contextmanager
    def _store(self, operation: str, **context: Any) -> Iterator[None]:
        """Turn persistence errors into ``StoreFailure`` after logging them."""
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error(
                "store_failure",
                operation=operation,
                error=str(exc),
                error_type=type(exc).__name__,
                **context,
            )
            raise StoreFailure(operation) from exc

    # =========================================================================
    # Reads
    # =========================================================================

    def get_self(self, identity: Identity) -> Profile:
        """Profile owned by the caller."""
        with self._store("get_self", user_id=identity.user_id):
            profile = self.profiles.get_by_user_id(identity.user_id)
        if profile is None:
            raise ProfileNotFound(NO_PROFILE_FOR_USER)
        return profile

    def list_all(self) -> list[Profile]:
        with self._store("list_profiles"):
            return self.profiles.list_all()

    def get_by_owner(self, user_id: int | str) -> Profile:
        """
        Profile owned by ``user_id``.

        An id the store cannot hold (not a plain digit string, not positive,
        or past the integer column range) is reported as ``ProfileNotFound``
        like any other miss, without querying.
        """
        owner_id = parse_record_id(user_id)
        if owner_id is None:
            logger.info("profile_lookup_malformed_id", user_id=str(user_id)[:64])
            raise ProfileNotFound()

        with self._store("get_by_owner", user_id=owner_id):
            profile = self.profiles.get_by_user_id(owner_id)
        if profile is None:
            raise ProfileNotFound()
        return profile

    # =========================================================================
    # Upsert / delete
    # =========================================================================

    def upsert(self, identity: Identity, fields: Mapping[str, Any]) -> Profile:
        """
        Create the caller's profile, or update it in place.

        Only non-empty fields are written, so omitted fields keep their stored
        value. Supplied social links are merged into the stored ones.

        Returns:
            The profile as it is after the write.

        Raises:
            ValidationFailed: If status or skills are missing; nothing is written
            StoreFailure: On any database error
        """
        # Skills are checked after parsing so "," or [" "] count as missing
        skills = parse_skills(fields.get("skills"))
        ensure_valid(PROFILE_RULES, {**fields, "skills": skills})

        values: dict[str, Any] = {
            name: fields[name] for name in PROFILE_SCALAR_FIELDS if not_empty(fields.get(name))
        }
        values["skills"] = skills
        social = {name: fields[name] for name in SOCIAL_FIELDS if not_empty(fields.get(name))}

        with self._store("upsert_profile", user_id=identity.user_id):
            profile = self.profiles.get_by_user_id(identity.user_id)

            if profile is None:
                profile = self.profiles.create(user_id=identity.user_id, social=social, **values)
                logger.info("profile_created", user_id=identity.user_id, profile_id=profile.id)
                return profile

            if social:
                # New dict so the JSON column is seen as changed
                values["social"] = {**(profile.social or {}), **social}
            self.profiles.update(profile, **values)
            logger.info(
                "profile_updated",
                user_id=identity.user_id,
                profile_id=profile.id,
                fields=sorted(values),
            )
            return profile

    def delete_account(self, identity: Identity) -> None:
        """
        Remove the caller's profile, then the caller's user account.

        Each step is committed on its own; see the module docstring for the
        partial-failure window.
        """
        user_id = identity.user_id

        with self._store("delete_profile", user_id=user_id):
            profile = self.profiles.get_by_user_id(user_id)
            if profile is not None:
                self.profiles.delete(profile)
            self.session.commit()

        try:
            user = self.users.get_by_id(user_id)
            if user is not None:
                self.users.delete(user)
            self.session.commit()
        except SQLAlchemyError as exc:
            logger.error(
                "account_delete_partial",
                user_id=user_id,
                profile_removed=profile is not None,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise StoreFailure("delete_user") from exc

        logger.info("account_deleted", user_id=user_id, had_profile=profile is not None)

    # =========================================================================
    # Experience
    # =========================================================================

    def _locked_profile(self, identity: Identity) -> Profile:
        profile = self.profiles.get_by_user_id(identity.user_id, for_update=True)
        if profile is None:
            raise ProfileNotFound()
        return profile

    def add_experience(self, identity: Identity, entry: Mapping[str, Any]) -> Profile:
        """
        Prepend a new experience entry to the caller's profile.

        ``entry`` uses the request field names (``from``/``to`` for dates).

        Raises:
            ValidationFailed: If title, company or from are missing
            ProfileNotFound: If the caller has no profile
        """
        ensure_valid(EXPERIENCE_RULES, entry)

        with self._store("add_experience", user_id=identity.user_id):
            profile = self._locked_profile(identity)
            experience = Experience(
                id=uuid.uuid4().hex,
                title=entry["title"],
                company=entry["company"],
                location=entry.get("location") or None,
                from_date=_as_date(entry["from"]),
                to_date=_as_date(entry.get("to") or None),
                current=bool(entry.get("current")),
                description=entry.get("description") or None,
            )
            profile.experience.insert(0, experience)
            self.session.flush()

        logger.info(
            "experience_added",
            user_id=identity.user_id,
            profile_id=profile.id,
            experience_id=experience.id,
            count=len(profile.experience),
        )
        return profile

    def remove_experience(self, identity: Identity, experience_id: str) -> Profile:
        """
        Remove exactly the entry with ``experience_id``.

        Raises:
            ProfileNotFound: If the caller has no profile
            ExperienceNotFound: If no entry has that id; nothing is removed
        """
        with self._store("remove_experience", user_id=identity.user_id):
            profile = self._locked_profile(identity)
            index = profile.experience_index().get(experience_id)
            if index is None:
                logger.info(
                    "experience_not_found",
                    user_id=identity.user_id,
                    experience_id=experience_id[:64],
                )
                raise ExperienceNotFound()

            profile.experience.pop(index)
            self.session.flush()

        logger.info(
            "experience_removed",
            user_id=identity.user_id,
            profile_id=profile.id,
            experience_id=experience_id,
            count=len(profile.experience),
        )
        return profile
