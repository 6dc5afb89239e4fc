"""
Pydantic schemas for request and response validation.

Request bodies declare every field optional: required-field checks run in
``core.validation`` so that all violations come back together as a 400.
"""

from datetime import date, datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class UserResponse(BaseModel):
    """
    Caller's own account; the credential hash is never included.

    ``email`` is echoed as stored, not re-validated.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    avatar: str | None = None
    created_at: datetime | None = None


class UserSummary(BaseModel):
    """Public user fields joined onto every profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    avatar: str | None = None


class SocialLinks(BaseModel):
    youtube: str | None = None
    facebook: str | None = None
    twitter: str | None = None
    instagram: str | None = None
    linkedin: str | None = None


class ExperienceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    company: str
    location: str | None = None
    from_date: date = Field(
        validation_alias=AliasChoices("from_date", "from"), serialization_alias="from"
    )
    to_date: date | None = Field(
        default=None,
        validation_alias=AliasChoices("to_date", "to"),
        serialization_alias="to",
    )
    current: bool = False
    description: str | None = None


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user: UserSummary
    company: str | None = None
    website: str | None = None
    location: str | None = None
    bio: str | None = None
    status: str | None = None
    githubusername: str | None = None
    skills: list[str] = Field(default_factory=list)
    social: SocialLinks = Field(default_factory=SocialLinks)
    experience: list[ExperienceResponse] = Field(
        default_factory=list, description="Most recently added first"
    )
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("skills", "social", mode="before")
    @classmethod
    def _empty_when_null(cls, v, info):
        if v is None:
            return [] if info.field_name == "skills" else {}
        return v


class ProfileUpsertRequest(BaseModel):
    """Body of ``POST /profile``; status and skills are required."""

    company: str | None = None
    website: str | None = None
    location: str | None = None
    bio: str | None = None
    status: str | None = None
    githubusername: str | None = None
    skills: str | list[str] | None = Field(
        default=None, description="Comma-separated string or list of skills"
    )
    youtube: str | None = None
    facebook: str | None = None
    twitter: str | None = None
    instagram: str | None = None
    linkedin: str | None = None


class ExperienceCreateRequest(BaseModel):
    """Body of ``PUT /profile/experience``; title, company and from are required."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    company: str | None = None
    location: str | None = None
    from_date: date | None = Field(default=None, alias="from")
    to_date: date | None = Field(default=None, alias="to")
    current: bool = False
    description: str | None = None

    @field_validator("from_date", "to_date", mode="before")
    @classmethod
    def _blank_date_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class MessageResponse(BaseModel):
    msg: str
