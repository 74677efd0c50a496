"""
Session Module - Black Box Interface

Purpose: Manage login session lifecycle
Interface: create_session(), get_session(), invalidate_session(), session_state()
Hidden: Session id generation, record layout, expiry computation

Sessions are never deleted; expiry and invalidation are logical.
"""

from .session import (
    SESSION_ID_BYTES,
    SESSION_LENGTH,
    SessionModule,
    SessionRecord,
    SessionState,
    generate_session_id,
)

__all__ = [
    "SessionModule",
    "SessionRecord",
    "SessionState",
    "SESSION_ID_BYTES",
    "SESSION_LENGTH",
    "generate_session_id",
]
