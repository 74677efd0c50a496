"""
Authentication Service following Black Box Design principles.

This module provides:
- sign up, sign in, sign out and per-request session authentication
- input validation mapped onto the error taxonomy
- user records and the public user payload

Every operation returns an AuthResult; domain failures are never raised.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from userbase.modules.errors import AuthErrorKind, AuthFailure, AuthResult
from userbase.modules.session import SessionModule, SessionRecord, SessionState
from userbase.modules.store import ConditionFailedError, CredentialStore, StoreError

from .passwords import PasswordHasher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialPolicy:
    """Length bounds for usernames and passwords."""

    username_max_length: int = 100
    password_min_length: int = 8
    # bcrypt only reads the first 72 bytes of its input
    password_max_length: int = 72


@dataclass(frozen=True)
class UserRecord:
    username: str
    password_hash: str
    user_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "password_hash": self.password_hash,
            "user_id": self.user_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserRecord":
        try:
            return cls(
                username=data["username"],
                password_hash=data["password_hash"],
                user_id=data["user_id"],
            )
        except (KeyError, TypeError) as e:
            raise StoreError(f"Malformed user record: {e!r}") from e

    def public(self) -> Dict[str, str]:
        """User payload safe to return to clients (no password hash)."""
        return {"userId": self.user_id, "username": self.username}


@dataclass(frozen=True)
class UserSession:
    """A user together with the session just issued for them."""

    user: UserRecord
    session: SessionRecord


def validate_username(username: Any, policy: CredentialPolicy) -> Optional[AuthFailure]:
    if not isinstance(username, str):
        if username is None:
            return AuthFailure(AuthErrorKind.USERNAME_CANNOT_BE_BLANK)
        return AuthFailure(AuthErrorKind.USERNAME_MUST_BE_STRING)
    if not username.strip():
        return AuthFailure(AuthErrorKind.USERNAME_CANNOT_BE_BLANK)
    if len(username) > policy.username_max_length:
        return AuthFailure.username_too_long(policy.username_max_length)
    return None


def validate_password(password: Any, policy: CredentialPolicy) -> Optional[AuthFailure]:
    if not isinstance(password, str):
        if password is None:
            return AuthFailure(AuthErrorKind.PASSWORD_CANNOT_BE_BLANK)
        return AuthFailure(AuthErrorKind.PASSWORD_MUST_BE_STRING)
    if not password.strip():
        return AuthFailure(AuthErrorKind.PASSWORD_CANNOT_BE_BLANK)
    if len(password) < policy.password_min_length:
        return AuthFailure.password_too_short(policy.password_min_length)
    if len(password.encode("utf-8")) > policy.password_max_length:
        return AuthFailure.password_too_long(policy.password_max_length)
    return None


def _validate_present(username: Any, password: Any) -> Optional[AuthFailure]:
    """Type and blank checks only; used on sign-in where bounds do not apply."""
    if username is None or (isinstance(username, str) and not username.strip()):
        return AuthFailure(AuthErrorKind.USERNAME_CANNOT_BE_BLANK)
    if not isinstance(username, str):
        return AuthFailure(AuthErrorKind.USERNAME_MUST_BE_STRING)
    if password is None or (isinstance(password, str) and not password.strip()):
        return AuthFailure(AuthErrorKind.PASSWORD_CANNOT_BE_BLANK)
    if not isinstance(password, str):
        return AuthFailure(AuthErrorKind.PASSWORD_MUST_BE_STRING)
    return None


class AuthService:
    """
    Session-based authentication over a credential store.

    The store's conditional insert is the only concurrency mechanism:
    concurrent sign-ups for one username race at the store and exactly one
    wins. Nothing here locks or retries.
    """

    def __init__(
        self,
        store: CredentialStore,
        session_module: SessionModule,
        hasher: PasswordHasher,
        users_table: str = "users",
        policy: Optional[CredentialPolicy] = None,
        unify_credential_errors: bool = False,
    ):
        """
        Args:
            store: Credential store holding the users table
            session_module: Session manager sharing the same store
            hasher: Password hasher
            users_table: Logical table name for user records
            policy: Username/password length bounds
            unify_credential_errors: Report unknown username and wrong password
                both as UsernameOrPasswordMismatch
        """
        self.store = store
        self.sessions = session_module
        self.hasher = hasher
        self.users_table = users_table
        self.policy = policy or CredentialPolicy()
        self.unify_credential_errors = unify_credential_errors

    async def sign_up(self, username: Any, password: Any) -> AuthResult[UserSession]:
        """
        Register a user and open a session for them.

        If the session cannot be created the user record is kept and the
        operation fails; the client signs in again to obtain a session.
        """
        failure = validate_username(username, self.policy) or validate_password(
            password, self.policy
        )
        if failure:
            return AuthResult.fail(failure)

        try:
            password_hash = await self.hasher.hash_async(password)
        except (ValueError, TypeError) as e:
            logger.error(f"Failed to hash password: {e}")
            return AuthResult.fail(AuthFailure.internal(f"Failed to sign up with {e}"))

        user = UserRecord(
            username=username.lower(),
            password_hash=password_hash,
            user_id=str(uuid.uuid4()),
        )

        try:
            await self.store.put(self.users_table, user.username, user.to_dict(), if_absent=True)
        except ConditionFailedError:
            logger.info("Sign up rejected: username already exists")
            return AuthResult.fail(
                AuthFailure(AuthErrorKind.USERNAME_ALREADY_EXISTS, detail="Failed to sign up")
            )
        except StoreError as e:
            logger.error(f"Failed to store new user: {e}")
            return AuthResult.fail(
                AuthFailure.internal(f"Failed to sign up with {e}", status=e.status)
            )

        session_result = await self.sessions.create_session(user.user_id)
        if not session_result.ok:
            logger.warning(f"User {user.user_id} created without a session")
            return AuthResult.fail(session_result.failure)

        logger.info(f"User {user.user_id} signed up")
        return AuthResult.success(UserSession(user=user, session=session_result.value))

    async def sign_in(self, username: Any, password: Any) -> AuthResult[UserSession]:
        """Verify credentials and open a new session."""
        failure = _validate_present(username, password)
        if failure:
            return AuthResult.fail(failure)

        try:
            data = await self.store.get(self.users_table, username.lower())
            user = UserRecord.from_dict(data) if data is not None else None
        except StoreError as e:
            logger.error(f"Failed to read user: {e}")
            return AuthResult.fail(
                AuthFailure.internal(f"Failed to sign in with {e}", status=e.status)
            )

        if user is None:
            return self._credential_failure(AuthErrorKind.USERNAME_NOT_FOUND)

        if not await self.hasher.verify_async(password, user.password_hash):
            return self._credential_failure(AuthErrorKind.INCORRECT_PASSWORD)

        session_result = await self.sessions.create_session(user.user_id)
        if not session_result.ok:
            return AuthResult.fail(session_result.failure)

        logger.info(f"User {user.user_id} signed in")
        return AuthResult.success(UserSession(user=user, session=session_result.value))

    async def sign_out(self, session_id: Optional[str]) -> AuthResult[None]:
        """
        Invalidate the presented session.

        Presenting a session id is enough to invalidate it; ownership is not
        checked further.
        """
        if not session_id:
            return AuthResult.fail_with(AuthErrorKind.USER_NOT_SIGNED_IN)

        result = await self.sessions.invalidate_session(session_id)
        if result.ok:
            logger.info("Session invalidated on sign out")
        return result

    async def authenticate_user(self, session_id: Optional[str]) -> AuthResult[str]:
        """
        Gate for protected operations.

        Returns:
            AuthResult with the session's user id when the session is valid
        """
        if not session_id:
            return AuthResult.fail_with(AuthErrorKind.SESSION_DOES_NOT_EXIST)

        session_result = await self.sessions.get_session(session_id)
        if not session_result.ok:
            return AuthResult.fail(session_result.failure)

        session = session_result.value
        if session is None:
            return AuthResult.fail_with(AuthErrorKind.SESSION_DOES_NOT_EXIST)

        state = self.sessions.session_state(session)
        if state is SessionState.INVALIDATED:
            return AuthResult.fail_with(AuthErrorKind.SESSION_INVALIDATED)
        if state is SessionState.EXPIRED:
            return AuthResult.fail_with(AuthErrorKind.SESSION_EXPIRED)

        return AuthResult.success(session.user_id)

    def _credential_failure(self, kind: AuthErrorKind) -> AuthResult[UserSession]:
        if self.unify_credential_errors:
            kind = AuthErrorKind.USERNAME_OR_PASSWORD_MISMATCH
        return AuthResult.fail_with(kind)
