from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from conftest import make_event

from stockalert.models.alert import utc_timestamp

KEY = {"key": "letmein"}


def _yesterday() -> str:
    return utc_timestamp(datetime.now(timezone.utc) - timedelta(days=1))


def _seed(event_log):
    event_log.events = [
        make_event(item="Milk", status="Out", location="Aisle 3"),
        make_event(item="Bread", status="Ok", location=""),
        make_event(item="Milk", status="Low", location="Aisle 3"),
        make_event(item="Eggs", status="Running Low", location="Dairy", timestamp=_yesterday()),
    ]


def test_manager_view_today(client, event_log):
    _seed(event_log)
    resp = client.get("/manager", params=KEY)
    assert resp.status_code == 200
    assert "Showing alerts from today." in resp.text
    assert resp.text.count("<tr>") == 1 + 3
    assert "Eggs" not in resp.text
    assert 'class="status-badge status-critical">Out<' in resp.text
    assert 'class="status-badge status-normal">Ok<' in resp.text
    assert 'href="/manager.csv?range=today&amp;key=letmein"' in resp.text
    assert 'href="/manager?range=all&amp;key=letmein"' in resp.text
    assert 'href="/checklist?key=letmein"' in resp.text


def test_manager_view_all(client, event_log):
    _seed(event_log)
    resp = client.get("/manager", params={"range": "all", **KEY})
    assert "Showing all recent alerts." in resp.text
    assert 'class="status-badge status-warning">Running Low<' in resp.text


def test_manager_view_empty_range(client):
    resp = client.get("/manager", params=KEY)
    assert resp.status_code == 200
    assert "No alerts for the selected range." in resp.text


def test_manager_view_escapes_logged_values(client, event_log):
    event_log.events = [make_event(item="<b>Milk</b>", user_agent='"><script>x</script>')]
    resp = client.get("/manager", params=KEY)
    assert "<b>Milk</b>" not in resp.text
    assert "&lt;b&gt;Milk&lt;/b&gt;" in resp.text
    assert "<script>x</script>" not in resp.text


def test_manager_csv(client, event_log):
    _seed(event_log)
    resp = client.get("/manager.csv", params={"range": "all", **KEY})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.headers["content-disposition"] == 'attachment; filename="inventory-alerts-all.csv"'
    lines = resp.text.split("\r\n")
    assert lines[0] == '"Time","Item","Status","Location","IP","User Agent"'
    assert len([line for line in lines if line]) == 1 + 4


def test_manager_csv_defaults_to_today(client, event_log):
    _seed(event_log)
    resp = client.get("/manager.csv", params=KEY)
    assert resp.headers["content-disposition"] == 'attachment; filename="inventory-alerts-today.csv"'
    assert "Eggs" not in resp.text


def test_checklist(client, event_log):
    _seed(event_log)
    resp = client.get("/checklist", params=KEY)
    assert resp.status_code == 200
    assert resp.text.count("&#x2610;") == 1
    assert "Milk &ndash; Aisle 3" in resp.text
    assert "Bread" not in resp.text
    assert 'href="/manager?key=letmein"' in resp.text


def test_checklist_empty(client):
    resp = client.get("/checklist", params=KEY)
    assert "No low-inventory items logged today yet." in resp.text


def test_read_failures_return_500(client, event_log):
    event_log.fail_reads = True
    assert client.get("/manager", params=KEY).text == "Error loading manager view."
    assert client.get("/manager.csv", params=KEY).text == "Error generating CSV."
    resp = client.get("/checklist", params=KEY)
    assert resp.status_code == 500
    assert resp.text == "Error loading checklist."


def test_manager_fetch_limit_applies(make_app, event_log):
    event_log.events = [make_event(item=f"Item {i}") for i in range(5)]
    client = TestClient(make_app(MANAGER_KEY="letmein", MANAGER_FETCH_LIMIT=2))
    resp = client.get("/manager", params=KEY)
    assert "Item 1" in resp.text
    assert "Item 2" not in resp.text


def test_qr_code_png(client):
    resp = client.get("/qr.png", params={"item": "whole_milk", "location": "aisle_3", **KEY})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert resp.content.startswith(b"\x89PNG")


def test_qr_code_requires_manager(client):
    assert client.get("/qr.png", params={"item": "milk"}).status_code == 401
