import pytest
from fastapi.testclient import TestClient

from stockalert.core.security import create_session_token

SESSION = {"MANAGER_AUTH_MODE": "session", "MANAGER_PASSWORD": "hunter2"}


@pytest.fixture
def session_client(make_app):
    return TestClient(make_app(**SESSION))


def test_unauthenticated_manager_redirects_to_login(session_client):
    resp = session_client.get("/manager?range=all", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login?next=%2Fmanager%3Frange%3Dall"


def test_login_form_carries_next(session_client):
    resp = session_client.get("/login", params={"next": "/manager?range=all"})
    assert resp.status_code == 200
    assert 'name="next" value="/manager?range=all"' in resp.text
    assert 'name="password"' in resp.text


def test_login_sets_cookie_and_grants_access(session_client):
    resp = session_client.post(
        "/login", data={"password": "hunter2", "next": "/manager?range=all"}, follow_redirects=False
    )
    assert resp.status_code == 303
    assert resp.headers["location"] == "/manager?range=all"
    set_cookie = resp.headers["set-cookie"].lower()
    assert "stockalert_session=" in set_cookie
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie

    page = session_client.get("/manager")
    assert page.status_code == 200
    assert 'href="/logout"' in page.text
    # Links need no key in session mode
    assert 'href="/checklist"' in page.text


def test_wrong_password_rerenders_form(session_client):
    resp = session_client.post("/login", data={"password": "nope", "next": "/checklist"}, follow_redirects=False)
    assert resp.status_code == 401
    assert "Incorrect password" in resp.text
    assert "stockalert_session" not in resp.headers.get("set-cookie", "")


def test_open_redirects_are_ignored(session_client):
    resp = session_client.post("/login", data={"password": "hunter2", "next": "//evil.example"}, follow_redirects=False)
    assert resp.headers["location"] == "/checklist"


def test_logout_clears_session(session_client):
    session_client.post("/login", data={"password": "hunter2"}, follow_redirects=False)
    assert session_client.get("/checklist").status_code == 200

    out = session_client.get("/logout", follow_redirects=False)
    assert out.status_code == 303
    assert out.headers["location"] == "/login"

    assert session_client.get("/checklist", follow_redirects=False).status_code == 303


def test_expired_or_forged_session_redirects(make_app):
    expired = TestClient(make_app(**SESSION), cookies={"stockalert_session": create_session_token("manager", "test-session-secret", -1)})
    assert expired.get("/manager", follow_redirects=False).status_code == 303

    forged = TestClient(make_app(**SESSION), cookies={"stockalert_session": create_session_token("manager", "guessed", 7)})
    assert forged.get("/manager", follow_redirects=False).status_code == 303


def test_landing_redirects(session_client):
    resp = session_client.get("/", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/login?next=%2Fchecklist"

    session_client.post("/login", data={"password": "hunter2"}, follow_redirects=False)
    resp = session_client.get("/", follow_redirects=False)
    assert resp.headers["location"] == "/checklist"


def test_unconfigured_password_denies_without_redirect(make_app):
    client = TestClient(make_app(MANAGER_AUTH_MODE="session"))
    assert client.get("/manager", follow_redirects=False).status_code == 401
    assert client.post("/login", data={"password": ""}).status_code == 401
    assert "not configured" in client.get("/login").text
