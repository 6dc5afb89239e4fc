"""
Security module for DevConnector.

Provides:
- JWT encode/decode helpers
- Identity resolution from bearer tokens
"""

from .identity import Identity, IdentityResolver, JWTIdentityResolver
from .tokens import create_access_token, decode_access_token

__all__ = [
    "Identity",
    "IdentityResolver",
    "JWTIdentityResolver",
    "create_access_token",
    "decode_access_token",
]
