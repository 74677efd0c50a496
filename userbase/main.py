#!/usr/bin/env python3
"""
Userbase - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Owns the Redis connection and builds the auth stack
3. Exposes sign up, sign in, sign out and session routes

All business logic is in the modules, following black box principles.
"""

import logging
import logging.config as log_config
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
import uvicorn
from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from userbase.config.provider import ConfigProvider, EnvConfigProvider, RedisConfig
from userbase.logging_config import get_logging_config
from userbase.modules.api import (
    SESSION_COOKIE_NAME,
    CredentialsRequest,
    ErrorResponse,
    SessionUserResponse,
    SignOutResponse,
    UserResponse,
    clear_session_cookie,
    set_session_cookie,
)
from userbase.modules.auth import AuthFactory, AuthService
from userbase.modules.errors import AuthFailure, status_for
from userbase.modules.middleware import AuthFailureError, SessionGate, auth_failure_handler

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


async def get_redis_client(redis_config: RedisConfig) -> redis.Redis:
    """Create Redis client from configuration."""
    return await redis.from_url(
        redis_config.url,
        password=redis_config.password,  # Passed separately to avoid URL encoding issues
        encoding="utf-8",
        decode_responses=True,
    )


def _failure_response(failure: AuthFailure) -> JSONResponse:
    return JSONResponse(status_code=status_for(failure), content=failure.to_payload())


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    auth_service: Optional[AuthService] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config_provider: Configuration source (environment by default)
        auth_service: Pre-built service; when given, no Redis connection is opened
    """
    config_provider = config_provider or EnvConfigProvider()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - initialize and cleanup resources.
        """
        logger.info("Starting Userbase API...")
        redis_client = None
        app.state.secure_cookies = config_provider.get_auth_config().secure_cookies

        if auth_service is not None:
            app.state.auth_service = auth_service
        else:
            redis_config = config_provider.get_redis_config()
            if redis_config.backend == "redis":
                redis_client = await get_redis_client(redis_config)
            app.state.auth_service = AuthFactory.build(config_provider, redis_client)
            logger.info("Authentication service initialized via factory")

        logger.info("Userbase API started successfully")

        yield

        logger.info("Shutting down Userbase API...")
        if redis_client:
            await redis_client.aclose()
        logger.info("Userbase API shutdown complete")

    app = FastAPI(
        title="Userbase API",
        description="Session-based user authentication",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.auth_service = None
    app.state.secure_cookies = False
    app.add_exception_handler(AuthFailureError, auth_failure_handler)

    require_session = SessionGate(lambda: app.state.auth_service)

    async def get_auth_service(request: Request) -> AuthService:
        service = request.app.state.auth_service
        if service is None:
            raise AuthFailureError(AuthFailure.internal("Service not initialized", status=503))
        return service

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.post("/api/auth/sign-up", response_model=UserResponse, responses=ERROR_RESPONSES)
    async def sign_up(
        payload: CredentialsRequest,
        request: Request,
        response: Response,
        service: AuthService = Depends(get_auth_service),
    ):
        """
        Register a user and start a session.

        Returns:
            200: User created, session cookie set
            400: Invalid username or password
            409: Username already exists
        """
        result = await service.sign_up(payload.username, payload.password)
        if not result.ok:
            return _failure_response(result.failure)

        set_session_cookie(
            response, result.value.session.session_id, secure=request.app.state.secure_cookies
        )
        return result.value.user.public()

    @app.post("/api/auth/sign-in", response_model=UserResponse, responses=ERROR_RESPONSES)
    async def sign_in(
        payload: CredentialsRequest,
        request: Request,
        response: Response,
        service: AuthService = Depends(get_auth_service),
    ):
        """
        Verify credentials and start a session.

        Returns:
            200: Signed in, session cookie set
            401: Incorrect password
            404: Username not found
        """
        result = await service.sign_in(payload.username, payload.password)
        if not result.ok:
            return _failure_response(result.failure)

        set_session_cookie(
            response, result.value.session.session_id, secure=request.app.state.secure_cookies
        )
        return result.value.user.public()

    @app.post("/api/auth/sign-out", response_model=SignOutResponse, responses=ERROR_RESPONSES)
    async def sign_out(
        request: Request,
        response: Response,
        service: AuthService = Depends(get_auth_service),
    ):
        """
        Invalidate the presented session and clear its cookie.

        Returns:
            200: Signed out
            400: No session cookie presented
        """
        result = await service.sign_out(request.cookies.get(SESSION_COOKIE_NAME))
        if not result.ok:
            return _failure_response(result.failure)

        clear_session_cookie(response, secure=request.app.state.secure_cookies)
        return SignOutResponse(success=True)

    @app.get("/api/auth/session", response_model=SessionUserResponse, responses=ERROR_RESPONSES)
    async def current_session(user_id: str = Depends(require_session)):
        """
        Identify the user behind the session cookie.

        Returns:
            200: Session valid
            401: Session missing, invalidated or expired
        """
        return {"userId": user_id}

    return app


app = create_app()


def main():
    """Run the API server."""
    config_provider = EnvConfigProvider()
    api_config = config_provider.get_api_config()

    log_config.dictConfig(get_logging_config(api_config.log_level))
    uvicorn.run(
        "userbase.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.debug,
        log_config=get_logging_config(api_config.log_level),
    )


if __name__ == "__main__":
    main()
