from fastapi import APIRouter, Depends, Request
from typing import Optional
from database import get_db
from schemas.posts import PostResponse
from sessions import get_current_user
from utils.negotiation import respond
from utils.route_helpers import COMMUNITY_SELECT, POST_SELECT, POST_ORDER, row_to_community, row_to_post
from routes.communities import community_response

router = APIRouter(tags=["browse"])

HOME_FEED_LIMIT = 3


def get_member_feed(user_id: int, limit: Optional[int] = None) -> list:
    """Posts from every community the user belongs to, newest first"""
    query = POST_SELECT + """
        WHERE p.community_id IN (SELECT community_id FROM community_members WHERE user_id = ?)
    """ + POST_ORDER
    params = [user_id, user_id]
    if limit is not None:
        query += " LIMIT ?"
        params.append(limit)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(query, params)
        return [PostResponse(**row_to_post(row)).model_dump() for row in cursor.fetchall()]


def get_unjoined_communities(user_id: int) -> list:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(COMMUNITY_SELECT + """
            WHERE c.community_id NOT IN (SELECT community_id FROM community_members WHERE user_id = ?)
            ORDER BY c.name COLLATE NOCASE
        """, (user_id,))
        return [community_response(row_to_community(row), False) for row in cursor.fetchall()]


@router.get("/home")
def home(request: Request, current_user: dict = Depends(get_current_user)):
    return respond(request, "home.html", {"posts": get_member_feed(current_user["user_id"], HOME_FEED_LIMIT)})


@router.get("/activity")
def activity(request: Request, current_user: dict = Depends(get_current_user)):
    return respond(request, "activity.html", {"posts": get_member_feed(current_user["user_id"])})


@router.get("/explore")
def explore(request: Request, current_user: dict = Depends(get_current_user)):
    return respond(request, "explore.html", {"communities": get_unjoined_communities(current_user["user_id"])})
