"""Shared fixtures for the registration test suites."""

from typing import Any, Dict

import pytest
from prometheus_client import CollectorRegistry

from api.src.repositories.account_repo import InMemoryAccountRepository
from api.src.services.password_hasher import PasswordHasher
from api.src.services.provisioner import AccountProvisioner
from shared.metrics import RegistrationMetrics

# Minimum bcrypt cost accepted by passlib; keeps the suites fast
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def valid_payload() -> Dict[str, Any]:
    """Minimal payload that passes validation."""
    return {
        "username": "alice",
        "password": "secret1",
        "email": "alice@example.com",
        "firstName": "Alice",
        "lastName": "Smith",
    }


@pytest.fixture
def metrics() -> RegistrationMetrics:
    """Metrics bound to a private registry."""
    return RegistrationMetrics(registry=CollectorRegistry())


@pytest.fixture
def password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def memory_repo() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def provisioner(memory_repo, password_hasher, metrics) -> AccountProvisioner:
    """Provisioner over an empty in-memory store."""
    return AccountProvisioner(memory_repo, password_hasher, metrics=metrics)
