"""
Pytest fixtures for DevConnector tests.

Each test gets a fresh in-memory SQLite database built from the ORM models.
"""

import os

# Settings are cached on first use; pin them before any app import
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "devconnector-test-secret-0123456789-abcdefghijkl")
os.environ.setdefault("ENV", "development")

import pytest  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from core.db import Base, build_engine  # noqa: E402
from core.models import User  # noqa: E402
from core.security import Identity  # noqa: E402


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh test database for each test using ORM."""
    db_url = "sqlite://"
    engine = build_engine(db_url)

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    yield db_url, TestingSessionLocal, engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_session(test_db):
    """Get a test session from the test database."""
    _, TestingSessionLocal, _ = test_db
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def make_user(test_session):
    """Factory inserting users into the test session."""
    counter = {"n": 0}

    def _make_user(name: str = "Dev", avatar: str | None = None) -> User:
        counter["n"] += 1
        user = User(
            name=name,
            email=f"dev{counter['n']}@devconnector.io",
            password="$2b$10$hash",
            avatar=avatar or f"https://gravatar.example/{counter['n']}",
        )
        test_session.add(user)
        test_session.flush()
        return user

    return _make_user


@pytest.fixture
def identity(make_user) -> Identity:
    return Identity(user_id=make_user("Owner").id)


@pytest.fixture
def sample_profile_fields():
    """Upsert payload in request form."""
    return {
        "status": "Developer",
        "skills": "python, fastapi ,sqlalchemy",
        "company": "Acme",
        "website": "https://acme.example",
        "location": "Lisbon",
        "bio": "Builds APIs",
        "githubusername": "octodev",
        "twitter": "https://twitter.com/octodev",
        "linkedin": "https://linkedin.com/in/octodev",
    }
