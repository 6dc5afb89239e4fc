"""
Profile and experience SQLAlchemy models.
"""

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .user import User


# Keys allowed inside Profile.social
SOCIAL_FIELDS = ("youtube", "facebook", "twitter", "instagram", "linkedin")


class Profile(Base):
    """
    Public-facing profile, exactly one per user.

    Attributes:
        skills: Ordered list of skill names
        social: Subset of SOCIAL_FIELDS mapped to URLs
        experience: Experience entries, most recently added first
    """

    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, index=True
    )
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    website: Mapped[str | None] = mapped_column(String(512), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str | None] = mapped_column(String(255), nullable=True)
    githubusername: Mapped[str | None] = mapped_column(String(255), nullable=True)
    skills: Mapped[list[str]] = mapped_column(JSON, default=list)
    social: Mapped[dict[str, str]] = mapped_column(JSON, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="profile")
    experience: Mapped[list["Experience"]] = relationship(
        "Experience",
        order_by="Experience.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )

    def experience_index(self) -> dict[str, int]:
        """
        Map each experience id to its index in the loaded ``experience`` list.

        Built from list order rather than the stored ``position`` column,
        which can repeat after unlocked concurrent writes.
        """
        return {entry.id: index for index, entry in enumerate(self.experience)}


class Experience(Base):
    """
    Dated work entry owned by a profile.

    ``position`` is renumbered by the ordering list on every insert or
    removal; 0 is the most recently added entry.
    """

    __tablename__ = "experience"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)
    title: Mapped[str] = mapped_column(String(255))
    company: Mapped[str] = mapped_column(String(255))
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    from_date: Mapped[date] = mapped_column(Date)
    to_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    current: Mapped[bool] = mapped_column(Boolean, default=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
