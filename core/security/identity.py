"""
Caller identity resolution.

Route handlers depend on the ``IdentityResolver`` protocol only, so the
signing scheme can be replaced without touching the profile service.
"""

from dataclasses import dataclass
from typing import Protocol

from core.exceptions import Unauthorized
from core.logging import get_logger
from core.validation import parse_record_id

from .tokens import decode_access_token

logger = get_logger("security.identity")


@dataclass(frozen=True)
class Identity:
    """Verified caller: the id of the user the token was issued to."""

    user_id: int


class IdentityResolver(Protocol):
    def resolve(self, token: str | None) -> Identity:
        """Verify ``token`` and return its identity, or raise ``Unauthorized``."""
        ...


class JWTIdentityResolver:
    """Resolve identities from HS256 tokens whose ``sub`` is the user id."""

    def resolve(self, token: str | None) -> Identity:
        if not token:
            raise Unauthorized("Not authenticated")

        try:
            payload = decode_access_token(token)
        except ValueError:
            logger.info("token_rejected", reason="decode_failed")
            raise Unauthorized() from None

        user_id = parse_record_id(payload.get("sub"))
        if user_id is None:
            logger.info("token_rejected", reason="bad_subject")
            raise Unauthorized()

        return Identity(user_id=user_id)
