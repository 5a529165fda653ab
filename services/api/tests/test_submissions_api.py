"""
End-to-end tests for the submission endpoints (local JSON backend).

Run with: pytest tests/test_submissions_api.py -v
"""
import json

import pytest
from fastapi.testclient import TestClient

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import core.storage as storage
from main import create_app
from settings import Settings


def make_settings(tmp_path, **overrides):
    values = dict(
        google_spreadsheet_id="",
        google_service_account_email="",
        google_private_key="",
        data_dir=str(tmp_path / "data"),
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def client(tmp_path):
    with TestClient(create_app(make_settings(tmp_path))) as c:
        yield c


def read_records(tmp_path, name):
    return json.loads((tmp_path / "data" / f"{name}.json").read_text(encoding="utf-8"))


class TestRsvp:
    """Tests for POST /submissions/rsvp."""

    def test_valid_rsvp(self, client, tmp_path):
        resp = client.post("/submissions/rsvp", json={"name": " Lan ", "phone": "0901", "guests": "3", "note": "vegetarian"})
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}

        records = read_records(tmp_path, "rsvp")
        assert len(records) == 1
        assert records[0]["name"] == "Lan"
        assert records[0]["guests"] == 3
        assert records[0]["type"] == "RSVP"
        assert records[0]["timestamp"].endswith("GMT+7")

    def test_guests_default_and_coercion(self, client, tmp_path):
        client.post("/submissions/rsvp", json={"name": "A"})
        client.post("/submissions/rsvp", json={"name": "B", "guests": "several"})
        records = read_records(tmp_path, "rsvp")
        assert [r["guests"] for r in records] == [1, 1]

    def test_empty_name_rejected(self, client, tmp_path):
        resp = client.post("/submissions/rsvp", json={"name": "   ", "guests": 2})
        assert resp.status_code == 400
        assert resp.json() == {"ok": False, "error": "Name is required"}
        assert read_records(tmp_path, "rsvp") == []

    def test_missing_body_rejected(self, client):
        resp = client.post("/submissions/rsvp")
        assert resp.status_code == 400
        assert resp.json()["error"] == "Name is required"

    def test_invalid_json_rejected(self, client):
        resp = client.post("/submissions/rsvp", content=b"{nope", headers={"content-type": "application/json"})
        assert resp.status_code == 400
        assert resp.json() == {"ok": False, "error": "Invalid request body"}

    def test_form_encoded(self, client, tmp_path):
        resp = client.post("/submissions/rsvp", data={"name": "Lan", "guests": "2"})
        assert resp.status_code == 200
        assert read_records(tmp_path, "rsvp")[0]["guests"] == 2

    def test_side_in_body(self, client, tmp_path):
        resp = client.post("/submissions/rsvp", json={"name": "Lan", "side": "bride"})
        assert resp.status_code == 200
        assert read_records(tmp_path, "rsvp_bride")[0]["side"] == "bride"
        assert read_records(tmp_path, "rsvp") == []

    def test_unknown_side_rejected(self, client, tmp_path):
        resp = client.post("/submissions/rsvp", json={"name": "Lan", "side": "neighbours"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Unknown side"

    def test_far_future_timestamp_still_saved(self, client, tmp_path):
        resp = client.post("/submissions/rsvp", json={"name": "Lan", "timestamp": "9999-12-31T23:00:00Z"})
        assert resp.status_code == 200
        assert read_records(tmp_path, "rsvp")[0]["timestamp"].endswith("GMT+7")


class TestGuestbook:
    """Tests for the guestbook endpoints."""

    def test_empty_message_rejected(self, client, tmp_path):
        resp = client.post("/submissions/guestbook", json={"name": "Lan", "message": ""})
        assert resp.status_code == 400
        assert resp.json() == {"ok": False, "error": "Name and message are required"}
        assert read_records(tmp_path, "guestbook") == []

    def test_missing_name_rejected(self, client):
        resp = client.post("/submissions/guestbook", json={"message": "Congrats"})
        assert resp.status_code == 400

    def test_list_is_most_recent_first_and_capped(self, client):
        for i in range(12):
            resp = client.post("/submissions/guestbook", json={"name": f"G{i}", "message": f"m{i}"})
            assert resp.status_code == 200

        resp = client.get("/submissions/guestbook")
        assert resp.status_code == 200
        body = resp.json()
        assert body["ok"] is True
        assert [item["name"] for item in body["items"]] == [f"G{i}" for i in range(11, 1, -1)]
        assert set(body["items"][0]) == {"timestamp", "name", "contact", "message"}

    def test_list_with_limit(self, client):
        for i in range(3):
            client.post("/submissions/guestbook", json={"name": f"G{i}", "message": "hi"})
        items = client.get("/submissions/guestbook", params={"limit": 2}).json()["items"]
        assert [item["name"] for item in items] == ["G2", "G1"]

    def test_invalid_limit_rejected(self, client):
        resp = client.get("/submissions/guestbook", params={"limit": 0})
        assert resp.status_code == 400
        assert resp.json()["ok"] is False

    def test_fields_round_trip(self, client):
        client.post(
            "/submissions/guestbook",
            json={"name": "Lan", "contact": "@lan", "message": "Trăm năm hạnh phúc", "timestamp": "2024-05-01T03:04:05Z"},
        )
        items = client.get("/submissions/guestbook").json()["items"]
        assert items == [
            {"timestamp": "2024-05-01 10:04:05 GMT+7", "name": "Lan", "contact": "@lan", "message": "Trăm năm hạnh phúc"}
        ]


class TestSideRoutes:
    """Tests for /api/rsvp/{side} and /api/guestbook/{side}."""

    def test_rsvp_for_side(self, client, tmp_path):
        resp = client.post("/api/rsvp/groom", json={"name": "Lan"})
        assert resp.status_code == 200
        assert read_records(tmp_path, "rsvp_groom")[0]["name"] == "Lan"

    def test_guestbook_sides_are_separate(self, client):
        client.post("/api/guestbook/groom", json={"name": "A", "message": "for groom"})
        client.post("/api/guestbook/bride", json={"name": "B", "message": "for bride"})

        groom = client.get("/api/guestbook/groom").json()["items"]
        bride = client.get("/submissions/guestbook", params={"side": "bride"}).json()["items"]
        shared = client.get("/submissions/guestbook").json()["items"]
        assert [i["message"] for i in groom] == ["for groom"]
        assert [i["message"] for i in bride] == ["for bride"]
        assert shared == []

    def test_path_side_wins_over_body(self, client, tmp_path):
        client.post("/api/guestbook/bride", json={"name": "A", "message": "m", "side": "groom"})
        assert len(read_records(tmp_path, "guestbook_bride")) == 1
        assert read_records(tmp_path, "guestbook_groom") == []

    def test_unknown_side_path(self, client):
        assert client.post("/api/rsvp/uncle", json={"name": "Lan"}).status_code == 400
        assert client.get("/api/guestbook/uncle").status_code == 400


class TestStorageFailures:
    """Storage errors become generic 500s."""

    class BrokenAdapter:
        backend = "json"

        def append_entry(self, entry):
            raise OSError("disk full")

        def recent_entries(self, collection, limit):
            raise OSError("disk gone")

        def ping(self):
            raise OSError("disk gone")

    def test_save_failure(self, client):
        client.app.state.storage_adapter = self.BrokenAdapter()
        resp = client.post("/submissions/rsvp", json={"name": "Lan"})
        assert resp.status_code == 500
        assert resp.json() == {"ok": False, "error": "Unable to save RSVP"}

        resp = client.post("/submissions/guestbook", json={"name": "Lan", "message": "hi"})
        assert resp.json() == {"ok": False, "error": "Unable to save guestbook entry"}

    def test_load_failure(self, client):
        client.app.state.storage_adapter = self.BrokenAdapter()
        resp = client.get("/submissions/guestbook")
        assert resp.status_code == 500
        assert resp.json() == {"ok": False, "error": "Unable to load guestbook"}

    def test_health_reports_unhealthy(self, client):
        client.app.state.storage_adapter = self.BrokenAdapter()
        resp = client.get("/health")
        assert resp.status_code == 503
        assert resp.json()["status"] == "unhealthy"


class TestFallback:
    """Unreachable Sheets at startup -> everything still works on local files."""

    class UnreachableSheetsAdapter:
        backend = "sheets"

        def __init__(self, **kwargs):
            pass

        def initialize(self):
            raise ConnectionError("sheets.googleapis.com unreachable")

    def test_submissions_survive_sheets_outage(self, tmp_path, monkeypatch):
        monkeypatch.setattr(storage, "SheetsAdapter", self.UnreachableSheetsAdapter)
        settings = make_settings(
            tmp_path,
            google_spreadsheet_id="sheet-123",
            google_service_account_email="forms@example.iam.gserviceaccount.com",
            google_private_key="key",
        )
        with TestClient(create_app(settings)) as client:
            assert client.get("/health").json() == {"status": "healthy", "backend": "json"}
            assert client.post("/submissions/guestbook", json={"name": "Lan", "message": "hi"}).status_code == 200
            items = client.get("/submissions/guestbook").json()["items"]

        assert [i["name"] for i in items] == ["Lan"]
        assert read_records(tmp_path, "guestbook")[0]["message"] == "hi"


class TestMisc:
    def test_error_envelope_documented(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        for path, method in [
            ("/submissions/rsvp", "post"),
            ("/submissions/guestbook", "get"),
            ("/api/guestbook/{side}", "post"),
        ]:
            responses = paths[path][method]["responses"]
            for status in ("400", "500"):
                ref = responses[status]["content"]["application/json"]["schema"]["$ref"]
                assert ref.endswith("/ErrorResponse")

    def test_request_id_header(self, client):
        resp = client.get("/healthz")
        assert resp.status_code == 200
        assert resp.headers["X-Request-ID"]

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy", "backend": "json"}
