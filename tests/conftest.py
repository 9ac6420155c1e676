"""
Shared pytest fixtures and configuration for the FileDrop test suite.

This module provides:
- Hypothesis configuration for property-based testing
- In-memory storage, identity provider and clock fixtures
- Flask application and test client fixtures
"""

from datetime import datetime, timezone

import pytest
from hypothesis import HealthCheck, Phase, settings

from tests.fixtures import (
    OTHER_TOKEN,
    VALID_TOKEN,
    FakeIdentityProvider,
    FrozenClock,
    InMemoryStorageRepository,
)
from filedrop.application import AuthService, FileService
from filedrop.domain.identity import Identity

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile("default")


# =============================================================================
# Time-related Fixtures
# =============================================================================

@pytest.fixture
def fixed_datetime() -> datetime:
    """Provide a fixed UTC datetime for deterministic testing."""
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_datetime) -> FrozenClock:
    """Provide a clock frozen at fixed_datetime."""
    return FrozenClock(fixed_datetime)


# =============================================================================
# Repository and Service Fixtures
# =============================================================================

@pytest.fixture
def storage(clock) -> InMemoryStorageRepository:
    """Provide an empty in-memory storage backend."""
    return InMemoryStorageRepository(clock=clock)


@pytest.fixture
def identity() -> Identity:
    return Identity(user_id="user-123", email="alice@example.com")


@pytest.fixture
def identity_provider(identity) -> FakeIdentityProvider:
    """Provide an identity provider accepting VALID_TOKEN and OTHER_TOKEN."""
    return FakeIdentityProvider(
        {
            VALID_TOKEN: identity,
            OTHER_TOKEN: Identity(user_id="user-456", email="bob@example.com"),
        }
    )


@pytest.fixture
def file_service(storage, clock) -> FileService:
    return FileService(storage, clock=clock)


@pytest.fixture
def auth_service(identity_provider) -> AuthService:
    return AuthService(identity_provider=identity_provider)


# =============================================================================
# Flask Fixtures
# =============================================================================

@pytest.fixture
def app_config(monkeypatch):
    """Application configuration with Celery disabled and auth optional."""
    monkeypatch.setenv("CELERY_ENABLED", "false")
    monkeypatch.delenv("REQUIRE_AUTH", raising=False)

    from app_factory import AppConfig

    return AppConfig()


@pytest.fixture
def app(app_config, storage, identity_provider, clock):
    """Flask app wired to in-memory storage and the fake identity provider."""
    from app_factory import create_app

    flask_app = create_app(
        app_config, storage=storage, identity_provider=identity_provider, clock=clock
    )
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (real filesystem, full app)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
