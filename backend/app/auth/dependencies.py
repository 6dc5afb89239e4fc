"""
Authentication dependencies for FastAPI routes.

Supports both:
- Bearer token in the Authorization header
- Legacy ``x-auth-token`` header sent by the existing web client
"""

from fastapi import Depends, Header
from fastapi.security import OAuth2PasswordBearer

from core.security import Identity, IdentityResolver, JWTIdentityResolver

# auto_error=False so a missing token reaches the resolver and becomes a 401
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


def get_identity_resolver() -> IdentityResolver:
    """Resolver used by protected routes. Override to swap the token scheme."""
    return JWTIdentityResolver()


def get_token_from_request(
    token_header: str | None = Depends(oauth2_scheme),
    legacy_token: str | None = Header(None, alias="x-auth-token"),
) -> str | None:
    """
    Extract the raw token from the request.

    Checks in order:
    1. Authorization header (Bearer token)
    2. x-auth-token header
    """
    return token_header or legacy_token


def get_current_identity(
    token: str | None = Depends(get_token_from_request),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Identity:
    """Resolve the caller, raising ``Unauthorized`` (401) when that fails."""
    return resolver.resolve(token)
