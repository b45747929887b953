import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from auth import hash_password, verify_password
from database import get_db
from schemas.profile import ProfileUpdate, PasswordChange, ProfileResponse
from sessions import get_current_user
from utils.forms import read_body, parse_form
from utils.negotiation import respond, redirect_or_json, error_response
from utils.route_helpers import get_user_by_id, get_display_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profiles"])


def get_profile_data(user_id: int) -> dict:
    user = get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    return ProfileResponse(
        user_id=user["user_id"],
        username=user["username"],
        email=user["email"],
        role=user["role"],
        first_name=user["first_name"],
        last_name=user["last_name"],
        display_name=get_display_name(user),
        bio=user["bio"],
        profile_picture=user["profile_picture"],
        created_at=user["created_at"],
    ).model_dump()


def update_profile(user_id: int, bio: str, avatar_url: str) -> int:
    """Returns the number of rows updated (0 means a stale id)"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE users SET bio = ?, profile_picture = ? WHERE user_id = ?",
            (bio or None, avatar_url or None, user_id)
        )
        conn.commit()
        return cursor.rowcount


def get_password_hash(user_id: int):
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT password_hash FROM users WHERE user_id = ?", (user_id,))
        row = cursor.fetchone()
        return row[0] if row else None


@router.get("")
def get_profile(request: Request, current_user: dict = Depends(get_current_user)):
    return respond(request, "profile.html", get_profile_data(current_user["user_id"]))


@router.post("")
def edit_profile(request: Request, current_user: dict = Depends(get_current_user), data: dict = Depends(read_body)):
    # Fields left out of the body keep their stored value
    merged = {
        "bio": data.get("bio", current_user["bio"]),
        "avatar_url": data.get("avatar_url", current_user["profile_picture"]),
    }
    try:
        form = parse_form(ProfileUpdate, merged)
    except HTTPException as exc:
        profile = get_profile_data(current_user["user_id"])
        return error_response(request, exc.status_code, exc.detail, "profile.html", **profile)

    if update_profile(current_user["user_id"], form.bio, form.avatar_url) == 0:
        raise HTTPException(status_code=404, detail="User not found.")
    logger.info("User %s updated their profile", current_user["username"])
    profile = get_profile_data(current_user["user_id"])
    return redirect_or_json(request, "/profile", {"success": True, "message": "Profile updated.", "profile": profile})


@router.post("/change-password")
def change_password(request: Request, current_user: dict = Depends(get_current_user), data: dict = Depends(read_body)):
    profile = get_profile_data(current_user["user_id"])
    try:
        form = parse_form(PasswordChange, data)
        if form.new_password != form.confirm_password:
            raise HTTPException(status_code=400, detail="New passwords do not match.")
        if not verify_password(form.current_password, get_password_hash(current_user["user_id"])):
            raise HTTPException(status_code=400, detail="Current password is incorrect.")
    except HTTPException as exc:
        return error_response(request, exc.status_code, exc.detail, "profile.html", **profile)

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE users SET password_hash = ? WHERE user_id = ?",
            (hash_password(form.new_password), current_user["user_id"])
        )
        conn.commit()
        if cursor.rowcount == 0:
            raise HTTPException(status_code=404, detail="User not found.")
    logger.info("User %s changed their password", current_user["username"])
    return respond(request, "profile.html", {**profile, "success": True, "message": "Password updated."})
