"""Shared test doubles for the FileDrop test suite."""

from .mock_repositories import (
    OTHER_TOKEN,
    VALID_TOKEN,
    FakeIdentityProvider,
    FrozenClock,
    InMemoryStorageRepository,
)

__all__ = [
    "OTHER_TOKEN",
    "VALID_TOKEN",
    "FakeIdentityProvider",
    "FrozenClock",
    "InMemoryStorageRepository",
]
