"""
Core services holding the business rules for profiles.
"""

from core.services.profile_service import ProfileService, parse_skills

__all__ = [
    "ProfileService",
    "parse_skills",
]
