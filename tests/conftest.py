"""
Shared pytest fixtures.

The API fixtures run the application against the in-memory storage backend
with the Sonar client in mock mode, so no database or network is needed.
"""

import pytest
from faker import Faker
from fastapi.testclient import TestClient

from learnsphere.src.config import Settings
from learnsphere.src.main import create_app

TEST_JWT_SECRET = "test-secret-key-for-learnsphere-unit-tests-only"


@pytest.fixture
def faker() -> Faker:
    fake = Faker()
    fake.seed_instance(1234)
    return fake


@pytest.fixture
def settings() -> Settings:
    """Settings for an isolated test application."""
    return Settings(
        environment="test",
        storage_backend="memory",
        seed_demo_users=True,
        jwt_secret_key=TEST_JWT_SECRET,
        password_bcrypt_rounds=4,
        sonar_api_key=None,
        rate_limit_enabled=False,
        log_level="WARNING",
        log_format="text",
        cors_origins=["http://localhost:3000"],
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """TestClient with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_credentials(faker):
    return {
        "name": faker.name(),
        "email": faker.unique.email(),
        "password": "secret123",
    }


@pytest.fixture
def auth_headers(client, user_credentials):
    """Register a fresh user and return its bearer header."""
    response = client.post("/api/auth/register", json=user_credentials)
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['token']}"}
