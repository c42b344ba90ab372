from fastapi.testclient import TestClient


def test_alert_limit_follows_app_settings(make_app, event_log):
    client = TestClient(make_app(RATE_LIMIT_ENABLED=True, ALERT_RATE_LIMIT="2/minute"))
    headers = {"X-Forwarded-For": "198.51.100.23"}

    statuses = [client.get("/alert", params={"item": "milk"}, headers=headers).status_code for _ in range(3)]

    assert statuses == [200, 200, 429]
    assert len(event_log.appended) == 2


def test_limits_are_per_client_ip(make_app):
    client = TestClient(make_app(RATE_LIMIT_ENABLED=True, ALERT_RATE_LIMIT="1/minute"))

    assert client.get("/alert", headers={"X-Forwarded-For": "198.51.100.31"}).status_code == 200
    assert client.get("/alert", headers={"X-Forwarded-For": "198.51.100.32"}).status_code == 200
    assert client.get("/alert", headers={"X-Forwarded-For": "198.51.100.31"}).status_code == 429


def test_disabled_limiter_never_rejects(make_app):
    client = TestClient(make_app(RATE_LIMIT_ENABLED=False, ALERT_RATE_LIMIT="1/minute"))
    headers = {"X-Forwarded-For": "198.51.100.40"}

    assert all(client.get("/alert", headers=headers).status_code == 200 for _ in range(3))


def test_login_limit_follows_app_settings(make_app):
    client = TestClient(
        make_app(MANAGER_AUTH_MODE="session", MANAGER_PASSWORD="hunter2", RATE_LIMIT_ENABLED=True, LOGIN_RATE_LIMIT="1/minute")
    )
    headers = {"X-Forwarded-For": "198.51.100.50"}

    assert client.post("/login", data={"password": "nope"}, headers=headers).status_code == 401
    assert client.post("/login", data={"password": "hunter2"}, headers=headers, follow_redirects=False).status_code == 429
