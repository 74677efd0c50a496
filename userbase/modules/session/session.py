import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Optional

from userbase.modules.errors import AuthFailure, AuthResult
from userbase.modules.store import CredentialStore, RecordNotFoundError, StoreError

logger = logging.getLogger(__name__)

# OWASP session management guidance: at least 128 bits of entropy
SESSION_ID_BYTES = 16
SESSION_LENGTH = timedelta(hours=24)


class SessionState(str, Enum):
    """Derived state of a session at a point in time."""

    VALID = "valid"
    INVALIDATED = "invalidated"
    EXPIRED = "expired"


@dataclass(frozen=True)
class SessionRecord:
    session_id: str
    user_id: str
    creation_date: datetime
    invalidated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "creation_date": self.creation_date.isoformat(),
            "invalidated": self.invalidated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        try:
            creation_date = datetime.fromisoformat(data["creation_date"])
            session_id = data["session_id"]
            user_id = data["user_id"]
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Malformed session record: {e!r}") from e

        if creation_date.tzinfo is None:
            creation_date = creation_date.replace(tzinfo=UTC)
        return cls(
            session_id=session_id,
            user_id=user_id,
            creation_date=creation_date,
            invalidated=bool(data.get("invalidated", False)),
        )


def generate_session_id() -> str:
    """Return a fresh session id: 16 CSPRNG bytes as 32 lowercase hex chars."""
    return secrets.token_hex(SESSION_ID_BYTES)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionModule:
    def __init__(
        self,
        store: CredentialStore,
        sessions_table: str = "sessions",
        session_length: timedelta = SESSION_LENGTH,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize session module.

        Args:
            store: Credential store holding the sessions table
            sessions_table: Logical table name for session records
            session_length: Fixed lifetime of a session (no sliding expiry)
            clock: Returns the current timezone-aware time
        """
        self.store = store
        self.sessions_table = sessions_table
        self.session_length = session_length
        self.clock = clock

    async def create_session(self, user_id: str) -> AuthResult[SessionRecord]:
        """
        Create and persist a new session for a user.

        Args:
            user_id: Owning user identifier

        Returns:
            AuthResult with the stored SessionRecord, or an internal failure
            carrying the store's status. Never retried.
        """
        session = SessionRecord(
            session_id=generate_session_id(),
            user_id=user_id,
            creation_date=self.clock(),
        )

        try:
            await self.store.put(self.sessions_table, session.session_id, session.to_dict())
        except StoreError as e:
            logger.error(f"Failed to create session for user {user_id}: {e}")
            return AuthResult.fail(
                AuthFailure.internal(f"Failed to create session with {e}", status=e.status)
            )

        logger.info(f"Session created for user {user_id}")
        return AuthResult.success(session)

    async def get_session(self, session_id: str) -> AuthResult[Optional[SessionRecord]]:
        """
        Get session details.

        Returns:
            AuthResult with the SessionRecord, or None when it does not exist
        """
        try:
            data = await self.store.get(self.sessions_table, session_id)
            session = SessionRecord.from_dict(data) if data is not None else None
        except StoreError as e:
            logger.error(f"Failed to read session: {e}")
            return AuthResult.fail(
                AuthFailure.internal(f"Failed to read session with {e}", status=e.status)
            )

        return AuthResult.success(session)

    def session_state(self, session: SessionRecord, now: Optional[datetime] = None) -> SessionState:
        """
        Compute the state of a session.

        Invalidation takes precedence over expiry. A session is still valid
        when exactly session_length has elapsed.
        """
        if session.invalidated:
            return SessionState.INVALIDATED

        now = now or self.clock()
        if now - session.creation_date > self.session_length:
            return SessionState.EXPIRED
        return SessionState.VALID

    async def invalidate_session(self, session_id: str) -> AuthResult[None]:
        """
        Mark a session invalidated. Idempotent.

        A session missing from the store is logged and treated as success.
        """
        try:
            await self.store.update(self.sessions_table, session_id, {"invalidated": True})
        except RecordNotFoundError:
            logger.warning("Invalidation requested for a session that does not exist")
            return AuthResult.success()
        except StoreError as e:
            logger.error(f"Failed to invalidate session: {e}")
            return AuthResult.fail(
                AuthFailure.internal(f"Failed to sign out with {e}", status=e.status)
            )

        return AuthResult.success()
