"""
SQLAlchemy models for DevConnector.

Usage:
    from core.models import User, Profile, Experience
"""

from .base import Base
from .profile import SOCIAL_FIELDS, Experience, Profile
from .user import User

__all__ = [
    "Base",
    "User",
    "Profile",
    "Experience",
    "SOCIAL_FIELDS",
]
