"""
DevConnector core library.

Configuration, database access, models, repositories, identity resolution
and the profile service. The HTTP layer lives in ``backend.app``.

Usage:
    from core.db import db, get_db
    from core.models import User, Profile, Experience
    from core.services import ProfileService
    from core.config import get_settings
    from core.logging import get_logger, configure_logging
"""

__version__ = "0.1.0"
