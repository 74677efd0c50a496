"""
Shared pytest fixtures for Userbase tests.

This module provides common fixtures including:
- Redis mocks for store tests
- A controllable clock for session expiry tests
- In-memory auth stacks and a static config provider
"""

import os
import sys
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from userbase.config.provider import APIConfig, AuthConfig, RedisConfig
from userbase.modules.auth import AuthFactory
from userbase.modules.store import InMemoryCredentialStore


class FakeClock:
    """Clock whose current time only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class StaticConfigProvider:
    """ConfigProvider returning fixed values, for app tests."""

    def __init__(self, environment: str = "development", unify_credential_errors: bool = False):
        self.environment = environment
        self.unify_credential_errors = unify_credential_errors

    def get_redis_config(self) -> RedisConfig:
        return RedisConfig(
            backend="memory",
            host="localhost",
            port=6379,
            db=0,
            password=None,
            users_table="users",
            sessions_table="sessions",
        )

    def get_api_config(self) -> APIConfig:
        return APIConfig(
            port=8080,
            host="127.0.0.1",
            debug=False,
            environment=self.environment,
            log_level="INFO",
        )

    def get_auth_config(self) -> AuthConfig:
        return AuthConfig(
            salt_rounds=4,
            username_max_length=100,
            password_min_length=8,
            password_max_length=72,
            unify_credential_errors=self.unify_credential_errors,
            secure_cookies=self.get_api_config().is_production,
        )


@pytest.fixture
def mock_redis():
    """Create a mock Redis client."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.eval = AsyncMock(return_value=1)
    return redis


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def memory_store():
    return InMemoryCredentialStore()


@pytest.fixture
def auth_service(memory_store, clock):
    """AuthService over an in-memory store with a controllable clock."""
    return AuthFactory.build_for_testing(store=memory_store, clock=clock)
