# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from typing import Generator

from core.collections import COLLECTION_USERS
from core.config import settings
from core.document_store import SERVER_TIMESTAMP
from core.rate_limiter import RateLimiter
from dependencies.services import get_document_store, get_identity_gateway, get_rate_limiter
from main import create_app
from models.enums import Role, UserStatus
from services.assignments import AssignmentManager
from services.leads import LeadService
from services.profile_resolver import ProfileResolver
from services.projects import ProjectService
from services.promotion import LeadPromotionWorkflow
from services.users import UserService
from tests.fakes import FakeIdentityGateway, MemoryDocumentStore


@pytest.fixture(autouse=True)
def no_jwt_secret(monkeypatch):
    """Bearer tokens are validated through the gateway in tests."""
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", None)


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def gateway() -> FakeIdentityGateway:
    return FakeIdentityGateway()


@pytest.fixture
def rate_limiter() -> RateLimiter:
    return RateLimiter(max_requests=5, window_seconds=900)


# -----------------------------------------------------
# Services wired to the fakes
# -----------------------------------------------------
@pytest.fixture
def resolver(store) -> ProfileResolver:
    return ProfileResolver(store)


@pytest.fixture
def users(store, gateway) -> UserService:
    return UserService(store, gateway)


@pytest.fixture
def leads(store) -> LeadService:
    return LeadService(store)


@pytest.fixture
def projects(store, users) -> ProjectService:
    return ProjectService(store, users)


@pytest.fixture
def assignments(store, users, projects) -> AssignmentManager:
    return AssignmentManager(store, users, projects)


@pytest.fixture
def workflow(leads, users, projects) -> LeadPromotionWorkflow:
    return LeadPromotionWorkflow(leads, users, projects)


# -----------------------------------------------------
# Profiles
# -----------------------------------------------------
@pytest.fixture
def make_user(store, gateway):
    """Create an identity plus a profile document; returns the user id."""

    def _make(email: str, role: Role = Role.CLIENT, status: UserStatus = UserStatus.active, display_name=None):
        user_id = gateway.add_account(email, display_name=display_name)
        store.set(
            COLLECTION_USERS,
            user_id,
            {
                "user_id": user_id,
                "email": email,
                "display_name": display_name or email.split("@")[0],
                "role": role.value,
                "status": status.value,
                "created_at": SERVER_TIMESTAMP,
                "updated_at": SERVER_TIMESTAMP,
            },
        )
        return user_id

    return _make


@pytest.fixture
def auth_headers(gateway, make_user):
    """Bearer header for a fresh user with the given role."""

    def _headers(role: Role = Role.ADMIN, status: UserStatus = UserStatus.active, email=None):
        email = email or f"{role.value.lower()}@lucidence.io"
        user_id = make_user(email, role, status)
        return {"Authorization": f"Bearer {gateway.issue_token(user_id)}"}

    return _headers


# -----------------------------------------------------
# App + client
# -----------------------------------------------------
@pytest.fixture(scope="function")
def app(store, gateway, rate_limiter):
    """Create a test FastAPI application instance."""
    app = create_app()
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_identity_gateway] = lambda: gateway
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    return app


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client
