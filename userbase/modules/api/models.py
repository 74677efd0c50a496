"""
Userbase API data models.

Request bodies accept any JSON value for credentials so that type errors are
reported through the auth error taxonomy instead of framework validation.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# Request Models (API Input)


class CredentialsRequest(BaseModel):
    """Username and password for sign up and sign in."""

    username: Any = Field(None, description="Username (case-insensitive)")
    password: Any = Field(None, description="Plaintext password")


# Response Models (API Output)


class UserResponse(BaseModel):
    """Public view of a user record."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", description="Globally unique user identifier")
    username: str = Field(..., description="Lowercase-normalized username")


class SessionUserResponse(BaseModel):
    """User bound to the presented session."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")


class SignOutResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    """Failure payload."""

    model_config = ConfigDict(populate_by_name=True)

    err: str = Field(..., description="Failure kind and internal detail")
    readable_message: Optional[str] = Field(None, alias="readableMessage")
    username: Optional[str] = None
