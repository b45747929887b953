from conftest import JSON, login


def test_profile_projection(client):
    login(client, "user1", "user123")
    profile = client.get("/profile", headers=JSON).json()
    assert profile["username"] == "user1"
    assert profile["display_name"] == "Alex Rivera"
    assert profile["role"] == "member"
    assert "password_hash" not in profile


def test_display_name_falls_back_to_username(client):
    login(client, "user2", "user234")
    assert client.get("/profile", headers=JSON).json()["display_name"] == "user2"


def test_profile_page_renders_html(client):
    login(client, "user1", "user123")
    response = client.get("/profile")
    assert response.status_code == 200
    assert "Alex Rivera" in response.text


def test_update_profile_trims_and_persists(client):
    login(client, "user1", "user123")
    response = client.post("/profile", json={"bio": "  CS junior  ", "avatar_url": " https://img.example.edu/a.png "},
                           headers=JSON)
    assert response.status_code == 200
    assert response.json()["profile"]["bio"] == "CS junior"

    profile = client.get("/profile", headers=JSON).json()
    assert profile["bio"] == "CS junior"
    assert profile["profile_picture"] == "https://img.example.edu/a.png"


def test_update_profile_keeps_fields_left_out(client):
    login(client, "user1", "user123")
    client.post("/profile", json={"bio": "first", "avatar_url": "/static/me.png"}, headers=JSON)
    client.post("/profile", json={"bio": "second"}, headers=JSON)
    profile = client.get("/profile", headers=JSON).json()
    assert profile["bio"] == "second"
    assert profile["profile_picture"] == "/static/me.png"


def test_update_profile_rejects_bad_avatar(client):
    login(client, "user1", "user123")
    response = client.post("/profile", json={"bio": "", "avatar_url": "javascript:alert(1)"}, headers=JSON)
    assert response.status_code == 400


def test_session_for_removed_user_is_rejected(client, db):
    login(client, "user1", "user123")
    # Session survives but the row behind it is gone
    db.execute("PRAGMA foreign_keys = OFF")
    db.execute("UPDATE users SET user_id = 999 WHERE username = 'user1'")
    db.commit()
    assert client.post("/profile", json={"bio": "x"}, headers=JSON).status_code == 401


def test_profile_form_redirects_back(client):
    login(client, "user1", "user123")
    response = client.post("/profile", data={"bio": "hi", "avatar_url": ""}, follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/profile"


def change_password(client, current, new, confirm):
    return client.post("/profile/change-password",
                       json={"current_password": current, "new_password": new, "confirm_password": confirm},
                       headers=JSON)


def test_change_password(client):
    login(client, "user1", "user123")
    response = change_password(client, "user123", "newpass", "newpass")
    assert response.status_code == 200
    client.get("/logout")

    bad = client.post("/login", json={"username": "user1", "password": "user123"}, headers=JSON)
    assert bad.status_code == 401
    login(client, "user1", "newpass")


def test_change_password_requires_all_fields(client):
    login(client, "user1", "user123")
    response = change_password(client, "user123", "", "")
    assert response.status_code == 400
    assert response.json()["message"] == "All password fields are required."


def test_change_password_mismatch(client):
    login(client, "user1", "user123")
    response = change_password(client, "user123", "a", "b")
    assert response.status_code == 400
    assert response.json()["message"] == "New passwords do not match."


def test_change_password_wrong_current(client):
    login(client, "user1", "user123")
    response = change_password(client, "wrong", "a", "a")
    assert response.status_code == 400
    assert response.json()["message"] == "Current password is incorrect."
