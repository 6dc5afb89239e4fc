"""
FastAPI dependency injection module.

Provides centralized dependencies for:
- Repositories
- Services
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from core.db import get_db
from core.repositories import UserRepository
from core.services import ProfileService


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    """Get ProfileService bound to the request's session."""
    return ProfileService(db)


__all__ = [
    "get_user_repository",
    "get_profile_service",
]
