import os

# Settings are read at import time; give the test run its own values
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-access-control")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from app.database import get_db
from app.models.base import Base
from app.config import settings
# Import all model classes to ensure they're registered with SQLAlchemy
from app.models.audit_log import AuditLogEntry
from app.models.invite_code import InviteCode
from app.models.invite_claim import InviteClaim
from app.models.temp_password import TempPasswordRecord
# Import FastAPI app AFTER model imports
from app.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeClock:
    """Controllable replacement for utcnow"""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def file_session_factory(tmp_path):
    """
    Session factory over a file-backed SQLite database.

    Each session gets its own connection, which is what the concurrent
    claim/redeem tests need.
    """
    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'access.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=file_engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    finally:
        file_engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(
    user_id: str = "test-user-123",
    role: str | None = "owner",
    tenant_id: str | None = "tenant-1",
    tenant_type: str | None = "retail",
    permissions: dict | list | None = None,
    expired: bool = False,
) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        role: Role claim
        tenant_id: Active tenant claim
        tenant_type: Active tenant's business type
        permissions: Per-user permission overrides
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": user_id, "exp": exp, "iat": datetime.now(UTC)}
    if role is not None:
        payload["role"] = role
    if tenant_id is not None:
        payload["tenant_id"] = tenant_id
    if tenant_type is not None:
        payload["tenant_type"] = tenant_type
    if permissions is not None:
        payload["permissions"] = permissions

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


def headers_for(**kwargs) -> dict:
    return {"Authorization": f"Bearer {create_test_token(**kwargs)}"}


@pytest.fixture
def mock_jwt_token():
    """Generate valid JWT token"""
    return create_test_token()


@pytest.fixture
def auth_headers(mock_jwt_token):
    """Authorization headers for authenticated requests"""
    return {"Authorization": f"Bearer {mock_jwt_token}"}


@pytest.fixture
def owner_headers():
    return headers_for(user_id="owner-1", role="owner")


@pytest.fixture
def manager_headers():
    return headers_for(user_id="manager-1", role="manager")


@pytest.fixture
def seller_headers():
    return headers_for(user_id="seller-1", role="seller")


@pytest.fixture
def viewer_headers():
    return headers_for(user_id="viewer-1", role="viewer")


@pytest.fixture
def super_admin_headers():
    return headers_for(user_id="admin-1", role="super_admin", tenant_id=None, tenant_type=None)


@pytest.fixture
def other_owner_headers():
    """Owner of a different tenant"""
    return headers_for(user_id="owner-2", role="owner", tenant_id="tenant-2", tenant_type="service")
