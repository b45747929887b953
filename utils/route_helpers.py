from typing import Optional
from database import get_db
from file_utils import get_post_image_url

USER_COLUMNS = "user_id, username, email, role, first_name, last_name, profile_picture, bio, created_at"

COMMUNITY_SELECT = """
    SELECT c.community_id, c.name, c.description, c.community_type, c.created_by,
           u.username AS creator_username, c.created_at,
           (SELECT COUNT(*) FROM community_members cm WHERE cm.community_id = c.community_id) AS number_of_members
    FROM communities c
    JOIN users u ON c.created_by = u.user_id
"""

# The single placeholder is the viewing user's id (for liked_by_me)
POST_SELECT = """
    SELECT p.post_id, p.text, p.user_id, u.username, p.community_id, c.name, p.image, p.created_at,
           (SELECT COUNT(*) FROM post_likes pl WHERE pl.post_id = p.post_id) AS like_count,
           EXISTS (SELECT 1 FROM post_likes pl WHERE pl.post_id = p.post_id AND pl.user_id = ?) AS liked_by_me
    FROM posts p
    JOIN users u ON p.user_id = u.user_id
    JOIN communities c ON p.community_id = c.community_id
"""

POST_ORDER = " ORDER BY p.created_at DESC, p.post_id DESC"


def row_to_user(row) -> dict:
    return {
        "user_id": row[0], "username": row[1], "email": row[2], "role": row[3],
        "first_name": row[4], "last_name": row[5], "profile_picture": row[6],
        "bio": row[7], "created_at": row[8]
    }


def row_to_community(row) -> dict:
    return {
        "community_id": row[0], "name": row[1], "description": row[2],
        "community_type": row[3], "created_by": row[4], "creator_username": row[5],
        "created_at": row[6], "number_of_members": row[7]
    }


def row_to_post(row) -> dict:
    return {
        "post_id": row[0], "text": row[1], "user_id": row[2], "author_username": row[3],
        "community_id": row[4], "community_name": row[5],
        "image_url": get_post_image_url(row[6]), "created_at": row[7],
        "like_count": row[8], "liked_by_me": bool(row[9])
    }


def get_user_by_id(user_id: int) -> Optional[dict]:
    """Safe projection of a user (never includes the password hash)"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE user_id = ?", (user_id,))
        row = cursor.fetchone()
        return row_to_user(row) if row else None


def get_user_by_username(username: str, include_password=False) -> Optional[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f"SELECT {USER_COLUMNS}, password_hash FROM users WHERE username = ?", (username,))
        row = cursor.fetchone()
        if not row:
            return None
        user = row_to_user(row)
        if include_password:
            user["password_hash"] = row[9]
        return user


def get_display_name(user: dict) -> str:
    """First and last name, falling back to the username when both are empty"""
    full_name = f"{user.get('first_name') or ''} {user.get('last_name') or ''}".strip()
    return full_name or user["username"]


def get_community_by_id(community_id: int) -> Optional[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(COMMUNITY_SELECT + " WHERE c.community_id = ?", (community_id,))
        row = cursor.fetchone()
        return row_to_community(row) if row else None


def get_community_by_name(name: str) -> Optional[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(COMMUNITY_SELECT + " WHERE c.name = ?", (name,))
        row = cursor.fetchone()
        return row_to_community(row) if row else None


def is_community_member(community_id: int, user_id: int) -> bool:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT 1 FROM community_members WHERE community_id = ? AND user_id = ?", (community_id, user_id))
        return cursor.fetchone() is not None


def get_like_count(post_id: int) -> int:
    """Live aggregate, never a stored counter"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM post_likes WHERE post_id = ?", (post_id,))
        return cursor.fetchone()[0]


def get_post_by_id(post_id: int, viewer_id: int) -> Optional[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(POST_SELECT + " WHERE p.post_id = ?", (viewer_id, post_id))
        row = cursor.fetchone()
        return row_to_post(row) if row else None
