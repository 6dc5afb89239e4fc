"""
Authentication router.

Tokens are issued elsewhere; this router only reports who the caller is.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import StoreFailure, Unauthorized
from core.logging import get_logger
from core.repositories import UserRepository
from core.security import Identity

from ..auth.dependencies import get_current_identity
from ..dependencies import get_user_repository
from ..schemas import UserResponse

logger = get_logger("auth")

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("", response_model=UserResponse)
def get_authenticated_user(
    identity: Identity = Depends(get_current_identity),
    users: UserRepository = Depends(get_user_repository),
):
    """Return the caller's user record without the credential hash."""
    try:
        user = users.get_by_id(identity.user_id)
    except SQLAlchemyError as exc:
        logger.error("store_failure", operation="load_user", user_id=identity.user_id, error=str(exc))
        raise StoreFailure("load_user") from exc

    if user is None:
        logger.warning("token_user_missing", user_id=identity.user_id)
        raise Unauthorized("User not found")

    return UserResponse.model_validate(user)
