import sqlite3
import config
from conftest import JSON, login


def pending_token(username):
    conn = sqlite3.connect(config.DB_NAME)
    try:
        row = conn.execute("SELECT token FROM verification_tokens WHERE username = ?", (username,)).fetchone()
    finally:
        conn.close()
    return row[0] if row else None


def register(client, email="a@x.edu", username="alice", password="p1"):
    return client.post("/register", json={"email": email, "username": username, "password": password},
                       headers=JSON)


def test_welcome_is_always_available(client):
    response = client.get("/welcome")
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Welcome!"}

    login(client, "user1", "user123")
    assert client.get("/welcome").json()["message"] == "Welcome!"


def test_login_page_renders_html(client):
    response = client.get("/login")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")


def test_register_creates_pending_token(client, db):
    response = register(client)
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert pending_token("alice") is not None
    assert db.execute("SELECT COUNT(*) FROM users WHERE username = 'alice'").fetchone()[0] == 0


def test_register_duplicate_username(client, db):
    assert register(client).status_code == 200
    response = register(client, email="b@x.edu")
    assert response.status_code == 400
    assert response.json()["error"] == "Username already exists. Please try again."
    assert response.json()["message"] == "Username already exists. Please try again."
    assert db.execute("SELECT COUNT(*) FROM verification_tokens").fetchone()[0] == 1


def test_register_duplicate_pending_email(client, db):
    assert register(client).status_code == 200
    response = register(client, username="alice2")
    assert response.status_code == 400
    assert response.json()["error"] == "Email already exists. Please try again."
    assert db.execute("SELECT COUNT(*) FROM verification_tokens").fetchone()[0] == 1


def test_expired_pending_registration_frees_the_name(client, db):
    register(client)
    db.execute("UPDATE verification_tokens SET created_at = datetime('now', '-3 days')")
    db.commit()
    assert register(client, email="b@x.edu").status_code == 200


def test_register_existing_user_is_rejected(client, db):
    response = register(client, email="user1@colorado.edu", username="user1", password="user123")
    assert response.status_code == 400
    assert response.json()["error"] == "Username already exists. Please try again."
    assert db.execute("SELECT COUNT(*) FROM verification_tokens").fetchone()[0] == 0


def test_register_duplicate_email(client):
    response = register(client, email="user1@colorado.edu", username="newbie")
    assert response.status_code == 400
    assert response.json()["error"] == "Email already exists. Please try again."


def test_register_requires_fields(client):
    response = register(client, username="   ")
    assert response.status_code == 400
    assert response.json()["message"] == "Username is required."

    response = register(client, email="not-an-email")
    assert response.status_code == 400
    assert response.json()["message"] == "Please enter a valid email address."


def test_register_accepts_form_posts(client):
    response = client.post("/register", data={"email": "f@x.edu", "username": "formy", "password": "pw"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert pending_token("formy") is not None


def test_verify_email_creates_user_and_session(client, db):
    register(client)
    token = pending_token("alice")

    response = client.get("/verify-email", params={"token": token}, headers=JSON)
    assert response.status_code == 200
    assert response.json()["user"]["username"] == "alice"

    rows = db.execute("SELECT username, email FROM users WHERE username = 'alice'").fetchall()
    assert rows == [("alice", "a@x.edu")]
    assert db.execute("SELECT COUNT(*) FROM verification_tokens WHERE token = ?", (token,)).fetchone()[0] == 0

    profile = client.get("/profile", headers=JSON)
    assert profile.status_code == 200
    assert profile.json()["username"] == "alice"


def test_verify_email_redirects_browsers_home(client):
    register(client)
    response = client.get(f"/verify-email?token={pending_token('alice')}", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/home"


def test_verify_email_token_is_single_use(client, db):
    register(client)
    token = pending_token("alice")
    assert client.get("/verify-email", params={"token": token}, headers=JSON).status_code == 200

    response = client.get("/verify-email", params={"token": token}, headers=JSON)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid or expired verification token."
    assert db.execute("SELECT COUNT(*) FROM users WHERE username = 'alice'").fetchone()[0] == 1


def test_verify_email_rejects_unknown_and_expired_tokens(client, db):
    assert client.get("/verify-email", params={"token": "nope"}, headers=JSON).status_code == 400

    register(client)
    token = pending_token("alice")
    db.execute("UPDATE verification_tokens SET created_at = datetime('now', '-3 days')")
    db.commit()
    assert client.get("/verify-email", params={"token": token}, headers=JSON).status_code == 400


def test_verify_email_when_username_taken_meanwhile(client, db):
    register(client, username="bob", email="bob1@x.edu")
    token = pending_token("bob")
    db.execute("INSERT INTO users (username, email, password_hash) VALUES ('bob', 'bob2@x.edu', '')")
    db.commit()

    response = client.get("/verify-email", params={"token": token}, headers=JSON)
    assert response.status_code == 400
    assert response.json()["message"] == "Username or email already registered."
    assert db.execute("SELECT COUNT(*) FROM users WHERE username = 'bob'").fetchone()[0] == 1


def test_resend_replaces_pending_token(client):
    register(client)
    old_token = pending_token("alice")
    response = client.post("/register/resend", json={"email": "a@x.edu"}, headers=JSON)
    assert response.status_code == 200
    new_token = pending_token("alice")
    assert new_token and new_token != old_token


def test_resend_does_not_reveal_unknown_emails(client):
    response = client.post("/register/resend", json={"email": "ghost@x.edu"}, headers=JSON)
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_login_success(client):
    response = login(client, "user1", "user123")
    assert response.json()["user"]["username"] == "user1"
    assert "password_hash" not in response.json()["user"]
    assert config.SESSION_COOKIE_NAME in response.cookies


def test_login_form_redirects_home(client):
    response = client.post("/login", data={"username": "user1", "password": "user123"}, follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/home"


def test_login_failures_share_one_message(client):
    wrong_password = client.post("/login", json={"username": "user1", "password": "bad"}, headers=JSON)
    unknown_user = client.post("/login", json={"username": "nobody", "password": "bad"}, headers=JSON)
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json()["message"] == unknown_user.json()["message"] == "Incorrect username or password."


def test_login_requires_fields(client):
    response = client.post("/login", json={"username": "user1"}, headers=JSON)
    assert response.status_code == 400
    assert response.json()["message"] == "Password is required."


def test_profile_requires_session(client):
    response = client.get("/profile", headers=JSON)
    assert response.status_code == 401
    assert response.json()["message"] == "Not authenticated"


def test_gate_redirects_browsers_to_login(client):
    response = client.get("/home", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/login"


def test_logout_ends_session(client, db):
    login(client, "user1", "user123")
    assert client.get("/profile", headers=JSON).status_code == 200

    response = client.get("/logout", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/login"
    assert db.execute("SELECT COUNT(*) FROM sessions").fetchone()[0] == 0
    assert client.get("/profile", headers=JSON).status_code == 401


def test_forged_cookie_is_ignored(client):
    client.cookies.set(config.SESSION_COOKIE_NAME, "not-a-token")
    assert client.get("/profile", headers=JSON).status_code == 401
