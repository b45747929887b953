import logging
import sqlite3
from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.datastructures import UploadFile
from database import get_db, transaction
from file_utils import save_post_image, delete_post_image
from schemas.communities import CommunityCreate, CommunityResponse
from schemas.posts import PostCreate, PostResponse
from sessions import get_current_user
from utils.errors import ConflictError
from utils.forms import read_body, parse_form
from utils.negotiation import respond, redirect_or_json
from utils.route_helpers import (
    COMMUNITY_SELECT, POST_SELECT, POST_ORDER,
    row_to_community, row_to_post,
    get_community_by_id, get_community_by_name, get_post_by_id, is_community_member
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/communities", tags=["communities"])

DUPLICATE_COMMUNITY_MESSAGE = "A community with that name already exists."


def community_response(community: dict, is_member=None) -> dict:
    return CommunityResponse(**community, is_member=is_member).model_dump()


def list_communities_for(user_id: int) -> list:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(COMMUNITY_SELECT + " ORDER BY c.name COLLATE NOCASE")
        rows = cursor.fetchall()
        cursor.execute("SELECT community_id FROM community_members WHERE user_id = ?", (user_id,))
        joined = {row[0] for row in cursor.fetchall()}
    return [community_response(row_to_community(row), row[0] in joined) for row in rows]


def get_community_posts(community_id: int, viewer_id: int) -> list:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(POST_SELECT + " WHERE p.community_id = ?" + POST_ORDER, (viewer_id, community_id))
        return [PostResponse(**row_to_post(row)).model_dump() for row in cursor.fetchall()]


def require_community(community_id: int) -> dict:
    community = get_community_by_id(community_id)
    if not community:
        raise HTTPException(status_code=404, detail="Community not found.")
    return community


def create_community(form: CommunityCreate, creator_id: int) -> int:
    """Insert the community and its creator's membership together"""
    with get_db() as conn:
        try:
            with transaction(conn) as cursor:
                cursor.execute("""
                    INSERT INTO communities (name, description, community_type, created_by)
                    VALUES (?, ?, ?, ?)
                """, (form.name, form.description, form.community_type, creator_id))
                community_id = cursor.lastrowid
                cursor.execute(
                    "INSERT INTO community_members (user_id, community_id) VALUES (?, ?)",
                    (creator_id, community_id)
                )
        except sqlite3.IntegrityError:
            existing = get_community_by_name(form.name)
            raise ConflictError(DUPLICATE_COMMUNITY_MESSAGE, {
                "duplicate": True,
                "existing_community": community_response(existing) if existing else None,
            })
    return community_id


def insert_post(text: str, user_id: int, community_id: int, image_name=None) -> int:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO posts (text, user_id, community_id, image) VALUES (?, ?, ?, ?)",
            (text, user_id, community_id, image_name)
        )
        conn.commit()
        return cursor.lastrowid


def delete_community_rows(community_id: int) -> list:
    """Remove a community and everything that references it.

    Deletion runs child-first (likes, posts, memberships, community) so every
    statement satisfies the foreign keys. Returns the image files the deleted
    posts referenced.
    """
    with get_db() as conn:
        with transaction(conn) as cursor:
            cursor.execute("SELECT image FROM posts WHERE community_id = ? AND image IS NOT NULL", (community_id,))
            images = [row[0] for row in cursor.fetchall()]
            cursor.execute("""
                DELETE FROM post_likes
                WHERE post_id IN (SELECT post_id FROM posts WHERE community_id = ?)
            """, (community_id,))
            cursor.execute("DELETE FROM posts WHERE community_id = ?", (community_id,))
            cursor.execute("DELETE FROM community_members WHERE community_id = ?", (community_id,))
            cursor.execute("DELETE FROM communities WHERE community_id = ?", (community_id,))
    return images


@router.get("")
def list_communities(request: Request, current_user: dict = Depends(get_current_user)):
    communities = list_communities_for(current_user["user_id"])
    return respond(request, "communities.html", {
        "communities": communities,
        "joined": [c for c in communities if c["is_member"]],
    })


@router.post("/new")
def new_community(request: Request, current_user: dict = Depends(get_current_user), data: dict = Depends(read_body)):
    form = parse_form(CommunityCreate, data)
    community_id = create_community(form, current_user["user_id"])
    logger.info("User %s created community %r (%d)", current_user["username"], form.name, community_id)
    community = community_response(get_community_by_id(community_id), True)
    return redirect_or_json(request, f"/communities/{community_id}",
                            {"success": True, "message": "Community created.", "community": community},
                            status_code=201)


@router.post("/create-post")
def create_post(request: Request, current_user: dict = Depends(get_current_user), data: dict = Depends(read_body)):
    form = parse_form(PostCreate, data)
    require_community(form.community_id)
    if not is_community_member(form.community_id, current_user["user_id"]):
        raise HTTPException(status_code=403, detail="You must join this community before posting.")

    image_name = None
    upload = data.get("post_image")
    if isinstance(upload, UploadFile) and upload.filename:
        content = upload.file.read()
        if content:
            try:
                image_name = save_post_image(content, upload.filename)
            except ValueError as exc:
                raise HTTPException(status_code=400, detail=str(exc))

    try:
        post_id = insert_post(form.post_text, current_user["user_id"], form.community_id, image_name)
    except sqlite3.Error:
        if image_name:
            delete_post_image(image_name)
        raise
    post = PostResponse(**get_post_by_id(post_id, current_user["user_id"])).model_dump()
    return redirect_or_json(request, f"/communities/{form.community_id}",
                            {"success": True, "message": "Post created.", "post": post},
                            status_code=201)


@router.get("/{community_id}")
def get_community(community_id: int, request: Request, current_user: dict = Depends(get_current_user)):
    community = require_community(community_id)
    is_member = is_community_member(community_id, current_user["user_id"])
    return respond(request, "community.html", {
        "community": community_response(community, is_member),
        "posts": get_community_posts(community_id, current_user["user_id"]),
    })


@router.post("/{community_id}/delete")
def delete_community(community_id: int, request: Request, current_user: dict = Depends(get_current_user)):
    """Creator or site admin only"""
    community = require_community(community_id)
    if community["created_by"] != current_user["user_id"] and current_user["role"] != "admin":
        raise HTTPException(status_code=403, detail="Only the community creator or an admin can delete this community.")
    for image in delete_community_rows(community_id):
        delete_post_image(image)
    logger.info("User %s deleted community %r (%d)", current_user["username"], community["name"], community_id)
    return redirect_or_json(request, "/communities", {"success": True, "message": "Community deleted."})


@router.post("/{community_id}/join")
def join_community(community_id: int, request: Request, current_user: dict = Depends(get_current_user)):
    require_community(community_id)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT OR IGNORE INTO community_members (user_id, community_id) VALUES (?, ?)",
            (current_user["user_id"], community_id)
        )
        conn.commit()
    community = community_response(get_community_by_id(community_id), True)
    return redirect_or_json(request, f"/communities/{community_id}",
                            {"success": True, "message": "Joined community.", "community": community})


@router.post("/{community_id}/leave")
def leave_community(community_id: int, request: Request, current_user: dict = Depends(get_current_user)):
    community = require_community(community_id)
    if community["created_by"] == current_user["user_id"]:
        raise HTTPException(status_code=400, detail="The creator of a community cannot leave it. Delete the community instead.")
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "DELETE FROM community_members WHERE user_id = ? AND community_id = ?",
            (current_user["user_id"], community_id)
        )
        conn.commit()
    community = community_response(get_community_by_id(community_id), False)
    return redirect_or_json(request, "/communities",
                            {"success": True, "message": "Left community.", "community": community})
