"""
Authentication Factory following Black Box Design principles.

This factory:
- Constructs the authentication stack based on configuration
- Wires the store, hasher and session module together
- Returns only the service (hiding implementation)
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from userbase.config.provider import ConfigProvider
from userbase.modules.session import SessionModule
from userbase.modules.store import InMemoryCredentialStore, RedisCredentialStore

from .passwords import MIN_SALT_ROUNDS, PasswordHasher
from .service import AuthService, CredentialPolicy

logger = logging.getLogger(__name__)


class AuthFactory:
    """
    Factory for building the authentication stack.

    This is the composition root that:
    - Creates all auth components
    - Wires them together via dependency injection
    - Returns only the public interface
    """

    @staticmethod
    def build(
        config_provider: ConfigProvider,
        redis_client: Optional[Any] = None
    ) -> AuthService:
        """
        Build the complete authentication stack.

        Args:
            config_provider: Configuration provider
            redis_client: Async Redis client, owned by the caller. Required
                unless the memory backend is configured.

        Returns:
            AuthService ready for use
        """
        redis_config = config_provider.get_redis_config()
        auth_config = config_provider.get_auth_config()

        if redis_config.backend == "memory":
            logger.warning("Building authentication stack with in-memory store (not persistent)")
            store = InMemoryCredentialStore()
        else:
            if redis_client is None:
                raise ValueError("A Redis client is required for the redis store backend")
            logger.info("Building authentication stack with Redis store")
            store = RedisCredentialStore(redis_client)

        session_module = SessionModule(store, sessions_table=redis_config.sessions_table)
        policy = CredentialPolicy(
            username_max_length=auth_config.username_max_length,
            password_min_length=auth_config.password_min_length,
            password_max_length=auth_config.password_max_length,
        )

        if auth_config.unify_credential_errors:
            logger.info("Sign-in failures will not distinguish unknown usernames")

        return AuthService(
            store=store,
            session_module=session_module,
            hasher=PasswordHasher(rounds=auth_config.salt_rounds),
            users_table=redis_config.users_table,
            policy=policy,
            unify_credential_errors=auth_config.unify_credential_errors,
        )

    @staticmethod
    def build_for_testing(
        store: Optional[Any] = None,
        clock: Optional[Callable[[], datetime]] = None,
        unify_credential_errors: bool = False,
    ) -> AuthService:
        """
        Build auth stack for testing with an in-memory store.

        Args:
            store: Store to use (a fresh InMemoryCredentialStore by default)
            clock: Clock for the session module
            unify_credential_errors: See AuthService

        Returns:
            AuthService using the cheapest bcrypt work factor
        """
        store = store if store is not None else InMemoryCredentialStore()
        if clock is not None:
            session_module = SessionModule(store, clock=clock)
        else:
            session_module = SessionModule(store)

        return AuthService(
            store=store,
            session_module=session_module,
            hasher=PasswordHasher(rounds=MIN_SALT_ROUNDS),
            unify_credential_errors=unify_credential_errors,
        )
