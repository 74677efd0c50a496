"""
Errors Module - Black Box Interface

Purpose: Closed taxonomy of authentication failures
Interface: AuthErrorKind, AuthFailure, AuthResult, status_for()
Hidden: Message templates, status lookup table

Failures carry only the data they need; HTTP status mapping is a pure lookup.
"""

from .errors import STATUS_CODES, AuthErrorKind, AuthFailure, AuthResult, status_for

__all__ = ["AuthErrorKind", "AuthFailure", "AuthResult", "STATUS_CODES", "status_for"]
