from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from database import get_db
from schemas.posts import LikeResponse
from sessions import get_current_user
from utils.negotiation import wants_json
from utils.route_helpers import get_like_count

router = APIRouter(prefix="/posts", tags=["posts"])


def get_post_community_id(post_id: int) -> int:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT community_id FROM posts WHERE post_id = ?", (post_id,))
        row = cursor.fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Post not found.")
    return row[0]


def like_response(request: Request, post_id: int, community_id: int, liked: bool):
    if not wants_json(request):
        return RedirectResponse(f"/communities/{community_id}", status_code=302)
    return LikeResponse(post_id=post_id, like_count=get_like_count(post_id), liked=liked).model_dump()


@router.post("/{post_id}/like")
def like_post(post_id: int, request: Request, current_user: dict = Depends(get_current_user)):
    """Liking twice is a no-op"""
    community_id = get_post_community_id(post_id)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT OR IGNORE INTO post_likes (user_id, post_id) VALUES (?, ?)",
            (current_user["user_id"], post_id)
        )
        conn.commit()
    return like_response(request, post_id, community_id, True)


@router.post("/{post_id}/unlike")
def unlike_post(post_id: int, request: Request, current_user: dict = Depends(get_current_user)):
    community_id = get_post_community_id(post_id)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "DELETE FROM post_likes WHERE user_id = ? AND post_id = ?",
            (current_user["user_id"], post_id)
        )
        conn.commit()
    return like_response(request, post_id, community_id, False)
