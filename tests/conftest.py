"""
Shared fixtures.

The environment is prepared before ``rosaiq_server`` is imported because
settings are read and validated at import time.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Callable, Dict

import pytest

_SCRATCH = Path(tempfile.mkdtemp(prefix="rosaiq-tests-"))

os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-characters!")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_SCRATCH / 'app.db'}")
os.environ.setdefault("FIRMWARE_DIR", str(_SCRATCH / "firmware"))
os.environ.setdefault("RETENTION_SWEEP_INTERVAL_HOURS", "0")
os.environ.setdefault("API_AUTH_ENABLED", "false")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from rosaiq_server import models  # noqa: E402,F401
from rosaiq_server.config import settings  # noqa: E402
from rosaiq_server.database import Base, build_engine, get_db  # noqa: E402
from rosaiq_server.dependencies import get_firmware_storage  # noqa: E402
from rosaiq_server.main import app  # noqa: E402
from rosaiq_server.models.user import ROLE_ADMIN, ROLE_USER, User  # noqa: E402
from rosaiq_server.services import auth_service  # noqa: E402
from rosaiq_server.services.auth_service import create_access_token, get_password_hash  # noqa: E402
from rosaiq_server.services.firmware_storage import FirmwareStorage  # noqa: E402
from rosaiq_server.services.registry import DeviceRegistry  # noqa: E402

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def _fast_password_hashing(monkeypatch):
    monkeypatch.setattr(auth_service, "PBKDF2_ITERATIONS", 1000)


@pytest.fixture
def engine(tmp_path):
    """A fresh SQLite file database per test."""
    test_engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory) -> Session:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def firmware_storage(tmp_path) -> FirmwareStorage:
    return FirmwareStorage(tmp_path / "firmware", max_bytes=64 * 1024, allowed_extensions=[".bin"])


@pytest.fixture
def registry(db_session) -> DeviceRegistry:
    return DeviceRegistry(db_session, settings.device_id_prefixes)


@pytest.fixture
def client(db_session, firmware_storage):
    """Test client wired to the per-test database and firmware directory."""
    def _get_test_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_firmware_storage] = lambda: firmware_storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session) -> Callable[..., User]:
    def _make_user(username: str, role: str = ROLE_USER, password: str = TEST_PASSWORD) -> User:
        user = User(username=username, password_hash=get_password_hash(password), role=role)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user("admin", role=ROLE_ADMIN)


@pytest.fixture
def standard_user(make_user) -> User:
    return make_user("alice")


@pytest.fixture
def other_user(make_user) -> User:
    return make_user("bob")


def auth_headers_for(user: User) -> Dict[str, str]:
    token = create_access_token({"sub": str(user.id), "username": user.username, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user) -> Dict[str, str]:
    return auth_headers_for(admin_user)


@pytest.fixture
def user_headers(standard_user) -> Dict[str, str]:
    return auth_headers_for(standard_user)


@pytest.fixture
def other_headers(other_user) -> Dict[str, str]:
    return auth_headers_for(other_user)
