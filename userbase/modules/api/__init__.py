"""
API Module - Black Box Interface

Purpose: HTTP request/response shapes and session cookie handling
Interface: Pydantic models, set_session_cookie(), clear_session_cookie()
Hidden: Cookie attributes

The API layer only orchestrates - it contains no business logic.
All logic is delegated to the auth module.
"""

from .cookies import SESSION_COOKIE_NAME, clear_session_cookie, set_session_cookie
from .models import (
    CredentialsRequest,
    ErrorResponse,
    SessionUserResponse,
    SignOutResponse,
    UserResponse,
)

__all__ = [
    "CredentialsRequest",
    "ErrorResponse",
    "SessionUserResponse",
    "SignOutResponse",
    "UserResponse",
    "SESSION_COOKIE_NAME",
    "set_session_cookie",
    "clear_session_cookie",
]
