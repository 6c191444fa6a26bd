from urllib.parse import parse_qs, urlparse

from models.auth_session import AuthSession
from models.log import Log
from utils.google_oauth import GoogleOAuthError, google_client
from utils.tokenJWT import create_magic_link_token


def _login(client, email, password):
    return client.post("/auth/login", json={"email": email, "password": password})


def test_signup_then_login_and_me(client):
    r = client.post("/auth/signup", json={
        "email": "New.Person@Example.com", "password": "s3cret-pass", "name": "New Person", "department": "Sales",
    })
    assert r.status_code == 201
    assert r.json()["email"] == "new.person@example.com"
    assert r.json()["is_admin"] is False

    r = _login(client, "new.person@example.com", "s3cret-pass")
    assert r.status_code == 200
    token = r.json()["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["name"] == "New Person"


def test_signup_twice_is_rejected(client):
    body = {"email": "a@example.com", "password": "password1", "name": "A"}
    assert client.post("/auth/signup", json=body).status_code == 201
    assert client.post("/auth/signup", json=body).status_code == 400


def test_signup_cannot_claim_existing_passwordless_record(client, db, admin):
    r = client.post("/auth/signup", json={"email": "Admin@Example.com", "password": "hijacked1", "name": "Mallory"})
    assert r.status_code == 400
    db.refresh(admin)
    assert admin.password_hash is None
    assert admin.name != "Mallory"
    assert _login(client, "admin@example.com", "hijacked1").status_code == 401


def test_wrong_password_is_unauthorized(client, make_staff):
    make_staff(email="pw@example.com", password="right-password")
    assert _login(client, "pw@example.com", "wrong-password").status_code == 401
    assert _login(client, "nobody@example.com", "whatever1").status_code == 401


def test_role_comes_from_database_not_token(client, db, make_staff, auth_headers):
    staff = make_staff()
    headers = auth_headers(staff)
    assert client.get("/analytics/overview", headers=headers).status_code == 403

    staff.role = "admin"
    db.commit()
    assert client.get("/analytics/overview", headers=headers).status_code == 200


def test_logout_revokes_session(client, make_staff):
    make_staff(email="out@example.com", password="password1")
    token = _login(client, "out@example.com", "password1").json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    assert client.post("/auth/logout", headers=headers).status_code == 200
    assert client.get("/auth/me", headers=headers).status_code == 401


def test_refresh_rotates_session(client, db, make_staff):
    make_staff(email="rot@example.com", password="password1")
    old = _login(client, "rot@example.com", "password1").json()["access_token"]

    r = client.post("/auth/refresh", headers={"Authorization": f"Bearer {old}"})
    assert r.status_code == 200
    new = r.json()["access_token"]

    assert client.get("/auth/me", headers={"Authorization": f"Bearer {old}"}).status_code == 401
    assert client.get("/auth/me", headers={"Authorization": f"Bearer {new}"}).status_code == 200
    assert db.query(AuthSession).filter(AuthSession.revoked_at.isnot(None)).count() == 1


def test_magic_link_flow(client, make_staff):
    make_staff(email="magic@example.com")
    assert client.post("/auth/magic-link", json={"email": "magic@example.com"}).status_code == 202
    # Unknown addresses get the same answer
    assert client.post("/auth/magic-link", json={"email": "ghost@example.com"}).status_code == 202

    r = client.post("/auth/magic-link/verify", json={"token": create_magic_link_token("magic@example.com")})
    assert r.status_code == 200
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {r.json()['access_token']}"})
    assert me.json()["email"] == "magic@example.com"


def test_magic_link_is_single_use(client, make_staff):
    make_staff(email="magic@example.com")
    token = create_magic_link_token("magic@example.com")
    first = client.post("/auth/magic-link/verify", json={"token": token})
    assert first.status_code == 200

    # Still rejected after the session it opened is signed out
    client.post("/auth/logout", headers={"Authorization": f"Bearer {first.json()['access_token']}"})
    assert client.post("/auth/magic-link/verify", json={"token": token}).status_code == 401


def test_magic_link_rejects_session_tokens(client, make_staff):
    make_staff(email="magic@example.com", password="password1")
    session_token = _login(client, "magic@example.com", "password1").json()["access_token"]
    assert client.post("/auth/magic-link/verify", json={"token": session_token}).status_code == 401


def test_change_password(client, make_staff, auth_headers):
    staff = make_staff(email="pw@example.com", password="old-password")
    headers = auth_headers(staff)

    bad = client.put("/auth/password", headers=headers, json={"current_password": "nope", "new_password": "new-password"})
    assert bad.status_code == 400

    ok = client.put("/auth/password", headers=headers,
                    json={"current_password": "old-password", "new_password": "new-password"})
    assert ok.status_code == 200
    assert _login(client, "pw@example.com", "new-password").status_code == 200


def test_google_login_unconfigured(client):
    assert client.get("/auth/google/login").status_code == 503


def test_google_login_and_callback(client, monkeypatch):
    monkeypatch.setattr(google_client, "client_id", "cid")
    monkeypatch.setattr(google_client, "client_secret", "secret")
    monkeypatch.setattr(google_client, "allowed_domain", "example.com")

    r = client.get("/auth/google/login", params={"next": "/vote"}, follow_redirects=False)
    assert r.status_code == 302
    query = parse_qs(urlparse(r.headers["location"]).query)
    assert query["hd"] == ["example.com"]
    assert query["prompt"] == ["select_account"]
    state = query["state"][0]

    async def fake_identity(code):
        return {"email": "g.user@example.com", "name": "G User", "picture": None}

    monkeypatch.setattr(google_client, "verified_identity", fake_identity)
    r = client.get("/auth/callback", params={"code": "abc", "state": state}, follow_redirects=False)
    assert r.status_code == 302
    location = r.headers["location"]
    assert "/vote#access_token=" in location

    token = location.split("#access_token=", 1)[1]
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["email"] == "g.user@example.com"


def test_google_callback_errors_redirect(client, monkeypatch):
    monkeypatch.setattr(google_client, "client_id", "cid")
    monkeypatch.setattr(google_client, "client_secret", "secret")

    r = client.get("/auth/callback", params={"code": "abc", "state": "forged"}, follow_redirects=False)
    assert r.status_code == 302
    assert "/auth/auth-code-error?error=invalid_state" in r.headers["location"]


def test_google_callback_rejected_identity_is_logged(client, db, monkeypatch):
    monkeypatch.setattr(google_client, "client_id", "cid")
    monkeypatch.setattr(google_client, "client_secret", "secret")
    state = parse_qs(urlparse(
        client.get("/auth/google/login", follow_redirects=False).headers["location"]
    ).query)["state"][0]

    async def wrong_domain(code):
        raise GoogleOAuthError("domain_not_allowed")

    monkeypatch.setattr(google_client, "verified_identity", wrong_domain)
    r = client.get("/auth/callback", params={"code": "abc", "state": state}, follow_redirects=False)
    assert r.status_code == 302
    assert "error=domain_not_allowed" in r.headers["location"]

    failures = db.query(Log).filter(Log.action == "LOGIN", Log.status == "FAIL").all()
    assert len(failures) == 1
