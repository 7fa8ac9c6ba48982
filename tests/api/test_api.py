import pytest
from fastapi.testclient import TestClient

import API_LAYER.app as app_module
from executors.conversation import HELP_TEXT


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(app_module, "DATABASE_URL", None)
    monkeypatch.setattr(
        app_module,
        "request_counters",
        {"text": 0, "report": 0, "confirmation": 0, "total": 0, "errors": 0},
    )
    with TestClient(app_module.app) as c:
        yield c


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json() == {"message": "Finance Chatbot API is running."}


def test_health_reports_in_memory_storage(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["db_connected"] is False
    assert body["db_error"] == "DATABASE_URL not set"


def test_process_text_reply(client):
    r = client.post("/process", json={"text": "catat pengeluaran 50rb makan siang", "user_id": "api-user"})
    assert r.status_code == 200
    body = r.json()
    assert body["kind"] == "text"
    assert body["content"].startswith("✅ Pengeluaran sebesar Rp 50.000")
    assert body["advisories"] == []


def test_process_report_reply(client):
    body = client.post("/process", json={"text": "lihat laporan", "user_id": "api-user"}).json()
    assert body["kind"] == "report"
    assert body["intro_message"] == "Berikut laporan keuangan Anda:"
    assert "income" in body["summary_data"]


def test_process_dialogue(client):
    ask = client.post("/process", json={"text": "bayar", "user_id": "api-dialogue"}).json()
    confirm = client.post("/process", json={"text": "25rb", "user_id": "api-dialogue"}).json()

    assert ask["kind"] == "text"
    assert confirm["kind"] == "confirmation"
    assert confirm["options"] == ["ya", "tidak", "batal"]

    health = client.get("/health").json()
    assert health["active_contexts"] >= 1


def test_help_over_http(client):
    body = client.post("/process", json={"text": "bantuan", "user_id": "api-user"}).json()
    assert body["content"] == HELP_TEXT


def test_metrics_count_reply_kinds(client):
    client.post("/process", json={"text": "bantuan", "user_id": "m"})
    client.post("/process", json={"text": "lihat laporan", "user_id": "m"})

    assert client.get("/metrics").json() == {
        "text": 1,
        "report": 1,
        "confirmation": 0,
        "total": 2,
        "errors": 0,
    }


def test_invalid_payload_is_rejected(client):
    r = client.post("/process", json={"text": "bantuan"})
    assert r.status_code == 422


def test_not_ready_returns_503(monkeypatch):
    monkeypatch.setattr(app_module, "dispatcher", None)
    monkeypatch.setattr(
        app_module,
        "request_counters",
        {"text": 0, "report": 0, "confirmation": 0, "total": 0, "errors": 0},
    )
    # No context manager: startup does not run
    r = TestClient(app_module.app).post("/process", json={"text": "bantuan", "user_id": "u"})
    assert r.status_code == 503
