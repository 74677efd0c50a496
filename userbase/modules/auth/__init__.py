"""
Authentication Module - Black Box Interface

Purpose: Register users, verify credentials, issue and check sessions
Interface: sign_up(), sign_in(), sign_out(), authenticate_user()
Hidden: Password hashing, input validation, record layout

This module can be replaced with any other auth implementation that returns
AuthResult values without affecting the API layer.
"""

from .factory import AuthFactory
from .passwords import PasswordHasher
from .service import AuthService, CredentialPolicy, UserRecord, UserSession

__all__ = [
    "AuthFactory",
    "AuthService",
    "CredentialPolicy",
    "PasswordHasher",
    "UserRecord",
    "UserSession",
]
