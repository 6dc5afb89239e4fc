import os
import sys
from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from backend.app.main import create_app  # noqa: E402
from core.db import get_db  # noqa: E402
from core.models import User  # noqa: E402
from core.security import create_access_token  # noqa: E402


@pytest.fixture
def test_app_client(test_db) -> Iterator[tuple[TestClient, sessionmaker]]:
    _, TestingSessionLocal, _ = test_db

    app = create_app()

    def override_get_db() -> Iterator[Session]:
        db = TestingSessionLocal()
        try:
            yield db
            db.commit()  # Auto-commit on success like production
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client, TestingSessionLocal


@pytest.fixture
def create_user(test_app_client) -> Callable[..., tuple[int, dict]]:
    """Insert a user and return its id with auth headers carrying a real JWT."""
    _, TestingSessionLocal = test_app_client
    counter = {"n": 0}

    def _create_user(name: str = "Tester", email: str | None = None) -> tuple[int, dict]:
        counter["n"] += 1
        session = TestingSessionLocal()
        user = User(
            name=name,
            email=email or f"user{counter['n']}@devconnector.io",
            password="$2b$10$hash",
            avatar="http://example.com/avatar.png",
        )
        session.add(user)
        session.commit()
        user_id = user.id
        session.close()

        token = create_access_token({"sub": str(user_id)})
        return user_id, {"Authorization": f"Bearer {token}"}

    return _create_user


@pytest.fixture
def authorized_client(
    test_app_client, create_user
) -> Iterator[tuple[TestClient, int, dict, sessionmaker]]:
    client, TestingSessionLocal = test_app_client
    user_id, headers = create_user()
    yield client, user_id, headers, TestingSessionLocal
