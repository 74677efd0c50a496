"""
Error taxonomy for the authentication modules.

Failures are data, not control flow: every operation returns an AuthResult
and callers match on AuthFailure.kind. HTTP status mapping lives in one
lookup table (STATUS_CODES) and is applied by status_for().
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class AuthErrorKind(str, Enum):
    """Closed set of authentication failure kinds."""

    USERNAME_ALREADY_EXISTS = "UsernameAlreadyExists"
    USERNAME_CANNOT_BE_BLANK = "UsernameCannotBeBlank"
    USERNAME_MUST_BE_STRING = "UsernameMustBeString"
    USERNAME_TOO_LONG = "UsernameTooLong"
    PASSWORD_CANNOT_BE_BLANK = "PasswordCannotBeBlank"
    PASSWORD_MUST_BE_STRING = "PasswordMustBeString"
    PASSWORD_TOO_SHORT = "PasswordTooShort"
    PASSWORD_TOO_LONG = "PasswordTooLong"
    USERNAME_OR_PASSWORD_MISMATCH = "UsernameOrPasswordMismatch"
    USER_NOT_SIGNED_IN = "UserNotSignedIn"
    USER_ALREADY_SIGNED_IN = "UserAlreadySignedIn"
    USER_CANCELED_SIGN_IN = "UserCanceledSignIn"
    APP_ID_NOT_VALID = "AppIdNotValid"
    USERNAME_NOT_FOUND = "UsernameNotFound"
    INCORRECT_PASSWORD = "IncorrectPassword"
    SESSION_DOES_NOT_EXIST = "SessionDoesNotExist"
    SESSION_INVALIDATED = "SessionInvalidated"
    SESSION_EXPIRED = "SessionExpired"
    INTERNAL_SERVER_ERROR = "InternalServerError"


STATUS_CODES: Dict[AuthErrorKind, int] = {
    AuthErrorKind.USERNAME_ALREADY_EXISTS: 409,
    AuthErrorKind.USERNAME_CANNOT_BE_BLANK: 400,
    AuthErrorKind.USERNAME_MUST_BE_STRING: 400,
    AuthErrorKind.USERNAME_TOO_LONG: 400,
    AuthErrorKind.PASSWORD_CANNOT_BE_BLANK: 400,
    AuthErrorKind.PASSWORD_MUST_BE_STRING: 400,
    AuthErrorKind.PASSWORD_TOO_SHORT: 400,
    AuthErrorKind.PASSWORD_TOO_LONG: 400,
    AuthErrorKind.USERNAME_OR_PASSWORD_MISMATCH: 401,
    AuthErrorKind.USER_NOT_SIGNED_IN: 400,
    AuthErrorKind.USER_ALREADY_SIGNED_IN: 400,
    AuthErrorKind.USER_CANCELED_SIGN_IN: 400,
    AuthErrorKind.APP_ID_NOT_VALID: 500,
    AuthErrorKind.USERNAME_NOT_FOUND: 404,
    AuthErrorKind.INCORRECT_PASSWORD: 401,
    AuthErrorKind.SESSION_DOES_NOT_EXIST: 401,
    AuthErrorKind.SESSION_INVALIDATED: 401,
    AuthErrorKind.SESSION_EXPIRED: 401,
    AuthErrorKind.INTERNAL_SERVER_ERROR: 500,
}

# Kinds whose status comes from the failure itself when one was supplied
_CARRIED_STATUS_KINDS = {AuthErrorKind.APP_ID_NOT_VALID, AuthErrorKind.INTERNAL_SERVER_ERROR}

MESSAGES: Dict[AuthErrorKind, str] = {
    AuthErrorKind.USERNAME_ALREADY_EXISTS: "Username already exists.",
    AuthErrorKind.USERNAME_CANNOT_BE_BLANK: "Username cannot be blank.",
    AuthErrorKind.USERNAME_MUST_BE_STRING: "Username must be a string.",
    AuthErrorKind.USERNAME_TOO_LONG: "Username too long. Must be a max of {max_len} characters.",
    AuthErrorKind.PASSWORD_CANNOT_BE_BLANK: "Password cannot be blank.",
    AuthErrorKind.PASSWORD_MUST_BE_STRING: "Password must be a string.",
    AuthErrorKind.PASSWORD_TOO_SHORT: "Password too short. Must be a minimum of {min_len} characters.",
    AuthErrorKind.PASSWORD_TOO_LONG: "Password too long. Must be a max of {max_len} bytes.",
    AuthErrorKind.USERNAME_OR_PASSWORD_MISMATCH: "Username or password mismatch.",
    AuthErrorKind.USER_NOT_SIGNED_IN: "User is not signed in.",
    AuthErrorKind.USER_ALREADY_SIGNED_IN: "User already signed in.",
    AuthErrorKind.USER_CANCELED_SIGN_IN: "Canceled.",
    AuthErrorKind.APP_ID_NOT_VALID: "App ID not valid.",
    AuthErrorKind.USERNAME_NOT_FOUND: "Username not found",
    AuthErrorKind.INCORRECT_PASSWORD: "Incorrect password",
    AuthErrorKind.SESSION_DOES_NOT_EXIST: "Session does not exist",
    AuthErrorKind.SESSION_INVALIDATED: "Invalid session",
    AuthErrorKind.SESSION_EXPIRED: "Session expired",
    AuthErrorKind.INTERNAL_SERVER_ERROR: "Internal server error",
}


@dataclass(frozen=True)
class AuthFailure:
    """
    A single failure variant.

    Only the fields relevant to the kind are set: max_len/min_len for the
    length checks, username for the sign-in state kinds, status for
    AppIdNotValid and store failures, detail for internal error text.
    """

    kind: AuthErrorKind
    max_len: Optional[int] = None
    min_len: Optional[int] = None
    username: Optional[str] = None
    status: Optional[int] = None
    detail: Optional[str] = None

    @property
    def message(self) -> str:
        """Human-readable message with parameters filled in."""
        return MESSAGES[self.kind].format(max_len=self.max_len, min_len=self.min_len)

    @property
    def status_code(self) -> int:
        return status_for(self)

    def to_payload(self) -> Dict[str, Any]:
        """Render the failure as the `{err, readableMessage}` response body."""
        err = self.kind.value
        if self.detail:
            err = f"{err}: {self.detail}"
        payload: Dict[str, Any] = {"err": err, "readableMessage": self.message}
        if self.username is not None:
            payload["username"] = self.username
        return payload

    # Constructors for the parameterised kinds

    @classmethod
    def username_too_long(cls, max_len: int) -> "AuthFailure":
        return cls(AuthErrorKind.USERNAME_TOO_LONG, max_len=max_len)

    @classmethod
    def password_too_short(cls, min_len: int) -> "AuthFailure":
        return cls(AuthErrorKind.PASSWORD_TOO_SHORT, min_len=min_len)

    @classmethod
    def password_too_long(cls, max_len: int) -> "AuthFailure":
        return cls(AuthErrorKind.PASSWORD_TOO_LONG, max_len=max_len)

    @classmethod
    def user_already_signed_in(cls, username: str) -> "AuthFailure":
        return cls(AuthErrorKind.USER_ALREADY_SIGNED_IN, username=username)

    @classmethod
    def user_canceled_sign_in(cls, username: str) -> "AuthFailure":
        return cls(AuthErrorKind.USER_CANCELED_SIGN_IN, username=username)

    @classmethod
    def app_id_not_valid(cls, status: int, username: str) -> "AuthFailure":
        return cls(AuthErrorKind.APP_ID_NOT_VALID, status=status, username=username)

    @classmethod
    def internal(cls, detail: str, status: Optional[int] = None) -> "AuthFailure":
        return cls(AuthErrorKind.INTERNAL_SERVER_ERROR, status=status, detail=detail)


def status_for(failure: AuthFailure) -> int:
    """Map a failure to its HTTP status code."""
    if failure.kind in _CARRIED_STATUS_KINDS and failure.status is not None:
        return failure.status
    return STATUS_CODES[failure.kind]


@dataclass
class AuthResult(Generic[T]):
    """Standardized operation result: a success value or one failure."""

    ok: bool
    value: Optional[T] = None
    failure: Optional[AuthFailure] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "AuthResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def fail(cls, failure: AuthFailure) -> "AuthResult[T]":
        return cls(ok=False, failure=failure)

    @classmethod
    def fail_with(cls, kind: AuthErrorKind) -> "AuthResult[T]":
        return cls(ok=False, failure=AuthFailure(kind))
