"""Anonymous user identifier carried in an HttpOnly cookie."""

from __future__ import annotations

import uuid

from starlette.responses import Response

SESSION_COOKIE_NAME = "chatkit_session_id"
SESSION_COOKIE_MAX_AGE = 60 * 60 * 24 * 30  # 30 days


def is_valid_identifier(value: str | None) -> bool:
    """Return True if *value* is a well-formed UUID string."""
    if not value:
        return False
    try:
        uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        return False
    return True


def new_identifier() -> str:
    return str(uuid.uuid4())


def resolve_identifier(cookie_value: str | None) -> tuple[str, bool]:
    """Reuse the cookie's identifier or mint a fresh one.

    Returns:
        Tuple of (identifier, created) where *created* is True when the
        cookie was absent or malformed.
    """
    if is_valid_identifier(cookie_value):
        return cookie_value, False  # type: ignore[return-value]
    return new_identifier(), True


def set_identifier_cookie(response: Response, identifier: str, *, secure: bool = False) -> None:
    """(Re)set the identifier cookie with a 30-day expiry."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=identifier,
        max_age=SESSION_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        samesite="lax",
        secure=secure,
    )
