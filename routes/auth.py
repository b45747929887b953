import logging
import sqlite3
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
import config
from auth import hash_password, verify_password, generate_token
from database import get_db, transaction
from mailer import send_verification_email
from schemas.auth import RegisterRequest, LoginRequest, ResendVerificationRequest, UserResponse
from sessions import create_session, delete_session, get_session_user, set_session_cookie, clear_session_cookie
from utils.forms import read_body, parse_form
from utils.negotiation import respond, wants_json, error_response
from utils.route_helpers import get_user_by_id, get_user_by_username, get_display_name

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])

REGISTER_SUCCESS_MESSAGE = "Registration successful! Please check your email to verify your account."
USERNAME_TAKEN_MESSAGE = "Username already exists. Please try again."
EMAIL_TAKEN_MESSAGE = "Email already exists. Please try again."
INVALID_CREDENTIALS_MESSAGE = "Incorrect username or password."
INVALID_TOKEN_MESSAGE = "Invalid or expired verification token."


def clean_field(data: dict, name: str) -> str:
    value = data.get(name)
    return value.strip() if isinstance(value, str) else ""


def user_response(user: dict) -> dict:
    return UserResponse(
        user_id=user["user_id"],
        username=user["username"],
        email=user["email"],
        role=user["role"],
        display_name=get_display_name(user),
        profile_picture=user["profile_picture"],
    ).model_dump()


def token_age_limit() -> str:
    """sqlite datetime modifier for the oldest token still redeemable"""
    return f"-{config.VERIFICATION_TOKEN_EXPIRE_HOURS} hours"


def is_taken(column: str, value: str) -> bool:
    """True if a user or an unexpired pending registration already uses `value`"""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f"""
            SELECT 1 FROM users WHERE {column} = ?
            UNION ALL
            SELECT 1 FROM verification_tokens
            WHERE {column} = ? AND created_at >= datetime('now', ?)
            LIMIT 1
        """, (value, value, token_age_limit()))
        return cursor.fetchone() is not None


def username_exists(username: str) -> bool:
    return is_taken("username", username)


def email_exists(email: str) -> bool:
    return is_taken("email", email)


def create_verification_token(email: str, username: str, password_hash: str) -> str:
    token = generate_token()
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO verification_tokens (token, email, username, password_hash) VALUES (?, ?, ?, ?)",
            (token, email, username, password_hash)
        )
        conn.commit()
    return token


def redeem_verification_token(token: str) -> int:
    """Turn a pending registration into a user row and return its id.

    Lookup, insert and delete share one immediate transaction, so a token can
    be redeemed at most once even under concurrent requests.
    """
    with get_db() as conn:
        with transaction(conn) as cursor:
            cursor.execute("""
                SELECT email, username, password_hash FROM verification_tokens
                WHERE token = ? AND created_at >= datetime('now', ?)
            """, (token, token_age_limit()))
            row = cursor.fetchone()
            if not row:
                raise HTTPException(status_code=400, detail=INVALID_TOKEN_MESSAGE)
            email, username, password_hash = row
            try:
                cursor.execute(
                    "INSERT INTO users (username, email, password_hash) VALUES (?, ?, ?)",
                    (username, email, password_hash)
                )
            except sqlite3.IntegrityError:
                raise HTTPException(status_code=400, detail="Username or email already registered.")
            user_id = cursor.lastrowid
            cursor.execute("DELETE FROM verification_tokens WHERE token = ?", (token,))
    return user_id


def start_session(response, user_id: int):
    set_session_cookie(response, create_session(user_id))
    return response


@router.get("/")
def index():
    return RedirectResponse("/home", status_code=302)


@router.get("/welcome")
def welcome():
    """Sanity endpoint, independent of auth state"""
    return {"success": True, "message": "Welcome!"}


@router.get("/login")
def login_page(request: Request):
    return respond(request, "login.html", {})


@router.post("/login")
def login(request: Request, data: dict = Depends(read_body)):
    try:
        form = parse_form(LoginRequest, data)
    except HTTPException as exc:
        return error_response(request, exc.status_code, exc.detail, "login.html")

    user = get_user_by_username(form.username, include_password=True)
    # Same answer for unknown users and wrong passwords
    if not user or not verify_password(form.password, user.get("password_hash")):
        logger.warning("Failed login for username %r", form.username)
        return error_response(request, 401, INVALID_CREDENTIALS_MESSAGE, "login.html", username=form.username)

    user.pop("password_hash", None)
    logger.info("User %s logged in", user["username"])
    if wants_json(request):
        response = JSONResponse({"success": True, "message": "Login successful.", "user": user_response(user)})
    else:
        response = RedirectResponse("/home", status_code=302)
    return start_session(response, user["user_id"])


@router.get("/register")
def register_page(request: Request):
    return respond(request, "register.html", {})


@router.post("/register")
def register(request: Request, background_tasks: BackgroundTasks, data: dict = Depends(read_body)):
    try:
        form = parse_form(RegisterRequest, data)
        if username_exists(form.username):
            raise HTTPException(status_code=400, detail=USERNAME_TAKEN_MESSAGE)
        if email_exists(form.email):
            raise HTTPException(status_code=400, detail=EMAIL_TAKEN_MESSAGE)
    except HTTPException as exc:
        return error_response(request, exc.status_code, exc.detail, "register.html",
                              username=clean_field(data, "username"), email=clean_field(data, "email"))

    token = create_verification_token(form.email, form.username, hash_password(form.password))
    background_tasks.add_task(send_verification_email, form.email, form.username, token)
    logger.info("Registration pending verification for %s", form.username)
    return respond(request, "register.html", {"success": True, "message": REGISTER_SUCCESS_MESSAGE})


@router.post("/register/resend")
def resend_verification(request: Request, background_tasks: BackgroundTasks, data: dict = Depends(read_body)):
    """Issue a fresh token for a pending registration.

    Unknown addresses get the same answer so the endpoint does not reveal
    which emails are pending.
    """
    try:
        form = parse_form(ResendVerificationRequest, data)
    except HTTPException as exc:
        return error_response(request, exc.status_code, exc.detail, "register.html")

    with get_db() as conn:
        with transaction(conn) as cursor:
            cursor.execute("""
                SELECT username, password_hash FROM verification_tokens
                WHERE email = ? ORDER BY created_at DESC LIMIT 1
            """, (form.email,))
            row = cursor.fetchone()
            token = None
            if row:
                cursor.execute("DELETE FROM verification_tokens WHERE email = ?", (form.email,))
                token = generate_token()
                cursor.execute(
                    "INSERT INTO verification_tokens (token, email, username, password_hash) VALUES (?, ?, ?, ?)",
                    (token, form.email, row[0], row[1])
                )
    if token:
        background_tasks.add_task(send_verification_email, form.email, row[0], token)
        logger.info("Verification email re-issued for %s", row[0])
    return respond(request, "register.html", {
        "success": True,
        "message": "If that address has a pending registration, a new verification email is on its way."
    })


@router.get("/verify-email")
def verify_email(request: Request, token: str = ""):
    if not token:
        raise HTTPException(status_code=400, detail=INVALID_TOKEN_MESSAGE)
    user_id = redeem_verification_token(token)
    logger.info("Email verified, created user %d", user_id)
    if wants_json(request):
        user = get_user_by_id(user_id)
        response = JSONResponse({"success": True, "message": "Email verified.", "user": user_response(user)})
    else:
        response = RedirectResponse("/home", status_code=302)
    return start_session(response, user_id)


@router.get("/logout")
def logout(request: Request):
    cookie_value = request.cookies.get(config.SESSION_COOKIE_NAME)
    user = get_session_user(cookie_value)
    delete_session(cookie_value)
    if user:
        logger.info("User %s logged out", user["username"])
    if wants_json(request):
        response = JSONResponse({"success": True, "message": "Logged out."})
    else:
        response = RedirectResponse("/login", status_code=302)
    clear_session_cookie(response)
    return response
