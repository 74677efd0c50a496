"""
Session Authentication Middleware Module - Black Box Interface

Purpose: Reusable per-request session authentication for FastAPI routes
Interface: SessionGate dependency, AuthFailureError, auth_failure_handler()
Hidden: Cookie extraction, failure rendering

Can be used by any FastAPI app or router that needs a signed-in user.
"""

import logging
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse

from userbase.modules.api.cookies import SESSION_COOKIE_NAME
from userbase.modules.auth import AuthService
from userbase.modules.errors import AuthErrorKind, AuthFailure, status_for

logger = logging.getLogger(__name__)


class AuthFailureError(Exception):
    """Raised at the HTTP boundary to abort a request with a taxonomy failure."""

    def __init__(self, failure: AuthFailure):
        super().__init__(failure.message)
        self.failure = failure


async def auth_failure_handler(request: Request, exc: AuthFailureError) -> JSONResponse:
    """Render an AuthFailureError as `{err, readableMessage}`."""
    return JSONResponse(status_code=status_for(exc.failure), content=exc.failure.to_payload())


class SessionGate:
    """
    FastAPI dependency that admits only requests carrying a valid session.

    Usage:
        gate = SessionGate(lambda: app.state.auth_service)

        @app.get("/protected")
        async def protected(user_id: str = Depends(gate)):
            ...
    """

    def __init__(
        self,
        service_resolver: Callable[[], AuthService],
        cookie_name: str = SESSION_COOKIE_NAME,
        log_attempts: bool = True
    ):
        """
        Initialize session gate.

        Args:
            service_resolver: Returns the AuthService (resolved per request so the
                service can be created during application startup)
            cookie_name: Cookie carrying the session id
            log_attempts: Whether to log rejected requests
        """
        self.service_resolver = service_resolver
        self.cookie_name = cookie_name
        self.log_attempts = log_attempts

    async def __call__(self, request: Request) -> str:
        """Authenticate the request and return the session's user id."""
        service = self.service_resolver()
        if service is None:
            raise AuthFailureError(AuthFailure.internal("Service not initialized", status=503))

        session_id = request.cookies.get(self.cookie_name)
        result = await service.authenticate_user(session_id)

        if not result.ok:
            if self.log_attempts and result.failure.kind != AuthErrorKind.INTERNAL_SERVER_ERROR:
                logger.warning(
                    f"Rejected {request.method} {request.url.path}: {result.failure.message}"
                )
            raise AuthFailureError(result.failure)

        # Store user id for downstream use
        request.state.user_id = result.value
        return result.value


# Module interface - what this module provides
__all__ = [
    "AuthFailureError",
    "SessionGate",
    "auth_failure_handler",
]
