from fastapi.testclient import TestClient


def test_healthz_reports_integrations(make_app):
    client = TestClient(make_app(ONESIGNAL_APP_ID="app", ONESIGNAL_API_KEY="key"))
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "push": True, "event_log": False, "auth_mode": "shared_secret"}


def test_live(client):
    assert client.get("/live").json() == {"status": "alive"}


def test_security_headers(client):
    resp = client.get("/live")
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert "cdn.onesignal.com" in resp.headers["Content-Security-Policy"]
    assert "Strict-Transport-Security" not in resp.headers


def test_metrics_endpoint_for_managers(client):
    client.get("/alert", params={"item": "milk"})
    resp = client.get("/metrics", params={"key": "letmein"})
    assert resp.status_code == 200
    text = resp.text
    assert "stockalert_alerts_received_total" in text
    assert 'stockalert_notifications_total{outcome="sent"}' in text
    assert "stockalert_provider_latency_seconds" in text


def test_static_push_assets(client):
    worker = client.get("/OneSignalSDKWorker.js")
    assert worker.status_code == 200
    assert "OneSignalSDK.sw.js" in worker.text
    manifest = client.get("/manifest.json")
    assert manifest.json()["start_url"] == "/checklist"


def test_unknown_path_is_404(client):
    assert client.get("/nope").status_code == 404


def test_subscribe_page(make_app):
    configured = TestClient(make_app(ONESIGNAL_APP_ID="app-xyz")).get("/subscribe")
    assert configured.status_code == 200
    assert '"app-xyz"' in configured.text

    missing = TestClient(make_app()).get("/subscribe")
    assert "not configured" in missing.text
