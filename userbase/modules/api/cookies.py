from fastapi import Response

from userbase.modules.session import SESSION_LENGTH

SESSION_COOKIE_NAME = "sessionId"
SESSION_COOKIE_PATH = "/"


def set_session_cookie(response: Response, session_id: str, secure: bool) -> None:
    """Attach the session id to the response as an http-only, same-site cookie."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_id,
        max_age=int(SESSION_LENGTH.total_seconds()),
        path=SESSION_COOKIE_PATH,
        httponly=True,
        samesite="strict",
        secure=secure,
    )


def clear_session_cookie(response: Response, secure: bool) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path=SESSION_COOKIE_PATH,
        httponly=True,
        samesite="strict",
        secure=secure,
    )
