"""Profile repository."""

from sqlalchemy.orm import joinedload, selectinload

from core.models import Profile

from .base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Repository for Profile operations."""

    model = Profile

    def _query(self):
        return self.session.query(Profile).options(
            joinedload(Profile.user),
            selectinload(Profile.experience),
        )

    def get_by_user_id(self, user_id: int, for_update: bool = False) -> Profile | None:
        """
        Get the profile owned by ``user_id`` with its user and experience loaded.

        With ``for_update`` the profile row is locked until the transaction
        ends (``SELECT ... FOR UPDATE``; SQLite ignores the clause) and any
        copy already in the identity map is overwritten with fresh state.
        """
        query = self._query().filter(Profile.user_id == user_id)
        if for_update:
            query = query.with_for_update(of=Profile).populate_existing()
        return query.first()

    def list_all(self) -> list[Profile]:
        """All profiles with the owning user joined, oldest first."""
        return self._query().order_by(Profile.id).all()
