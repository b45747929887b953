import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Request, Response
import config
from auth import create_session_token, decode_session_token, generate_token
from database import get_db
from utils.errors import NotAuthenticatedError
from utils.route_helpers import get_user_by_id

logger = logging.getLogger(__name__)

SQLITE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def create_session(user_id: int) -> str:
    """Store a new session row and return the signed cookie value for it"""
    session_id = generate_token()
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=config.SESSION_EXPIRE_MINUTES)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO sessions (session_id, user_id, expires_at) VALUES (?, ?, ?)",
            (session_id, user_id, expires_at.strftime(SQLITE_TIMESTAMP_FORMAT))
        )
        conn.commit()
    return create_session_token(session_id)


def get_session_user(cookie_value: Optional[str]):
    """Resolve a cookie to a fresh user projection, or None when there is no live session"""
    if not cookie_value:
        return None
    session_id = decode_session_token(cookie_value)
    if not session_id:
        return None
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT user_id FROM sessions WHERE session_id = ? AND expires_at > CURRENT_TIMESTAMP",
            (session_id,)
        )
        row = cursor.fetchone()
    if not row:
        return None
    return get_user_by_id(row[0])


def delete_session(cookie_value: Optional[str]) -> bool:
    if not cookie_value:
        return False
    session_id = decode_session_token(cookie_value)
    if not session_id:
        return False
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM sessions WHERE session_id = ?", (session_id,))
        conn.commit()
        return cursor.rowcount > 0


def purge_expired_sessions() -> int:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM sessions WHERE expires_at <= CURRENT_TIMESTAMP")
        conn.commit()
        removed = cursor.rowcount
    if removed:
        logger.info("Purged %d expired sessions", removed)
    return removed


def get_current_user(request: Request) -> dict:
    """Auth gate for every user-scoped route"""
    user = get_session_user(request.cookies.get(config.SESSION_COOKIE_NAME))
    if not user:
        raise NotAuthenticatedError()
    request.state.user = user
    return user


def set_session_cookie(response: Response, cookie_value: str):
    response.set_cookie(
        config.SESSION_COOKIE_NAME,
        cookie_value,
        max_age=config.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=config.SESSION_COOKIE_SECURE,
    )


def clear_session_cookie(response: Response):
    response.delete_cookie(config.SESSION_COOKIE_NAME)
