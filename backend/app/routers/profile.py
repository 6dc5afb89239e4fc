"""
Profile management endpoints.

Public:
    GET  /profile                   all profiles
    GET  /profile/user/{user_id}    profile of one user

Authenticated:
    GET    /profile/me
    POST   /profile                 create or update
    DELETE /profile                 delete profile and account
    PUT    /profile/experience      add an experience entry
    DELETE /profile/experience/{experience_id}
"""

from fastapi import APIRouter, Depends

from core.logging import get_logger
from core.models import Profile
from core.security import Identity
from core.services import ProfileService

from ..auth.dependencies import get_current_identity
from ..dependencies import get_profile_service
from ..schemas import (
    ExperienceCreateRequest,
    MessageResponse,
    ProfileResponse,
    ProfileUpsertRequest,
)

logger = get_logger("profile")

router = APIRouter(prefix="/profile", tags=["profile"])


def _profile_to_response(profile: Profile) -> ProfileResponse:
    """Serialize while the request session is still open."""
    return ProfileResponse.model_validate(profile)


@router.get("/me", response_model=ProfileResponse)
def get_my_profile(
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    """Get current user's profile."""
    return _profile_to_response(service.get_self(identity))


@router.post("", response_model=ProfileResponse)
def upsert_profile(
    payload: ProfileUpsertRequest,
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    """Create the caller's profile, or update the fields supplied."""
    profile = service.upsert(identity, payload.model_dump())
    return _profile_to_response(profile)


@router.get("", response_model=list[ProfileResponse])
def list_profiles(service: ProfileService = Depends(get_profile_service)):
    return [_profile_to_response(profile) for profile in service.list_all()]


@router.get("/user/{user_id}", response_model=ProfileResponse)
def get_profile_by_user(
    user_id: str,
    service: ProfileService = Depends(get_profile_service),
):
    """
    Get a user's profile.

    ``user_id`` is taken as a string so a malformed id is reported as
    "Profile not found" rather than a request validation error.
    """
    return _profile_to_response(service.get_by_owner(user_id))


@router.delete("", response_model=MessageResponse)
def delete_account(
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    """Delete the caller's profile and user account."""
    service.delete_account(identity)
    return MessageResponse(msg="User deleted")


@router.put("/experience", response_model=ProfileResponse)
def add_experience(
    payload: ExperienceCreateRequest,
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    """Add an experience entry at the top of the caller's list."""
    profile = service.add_experience(identity, payload.model_dump(by_alias=True))
    return _profile_to_response(profile)


@router.delete("/experience/{experience_id}", response_model=ProfileResponse)
def remove_experience(
    experience_id: str,
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    profile = service.remove_experience(identity, experience_id)
    return _profile_to_response(profile)
