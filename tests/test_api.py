import json

import pytest
from fastapi.testclient import TestClient

from icsfeed import main
from icsfeed.cache import InMemoryCache
from icsfeed.pipeline import FeedPipeline
from icsfeed.properties import InMemoryPropertyStore

from conftest import ICS_URL


@pytest.fixture
def client(monkeypatch, fetcher):
    properties = InMemoryPropertyStore({"ICS_URL": ICS_URL})
    pipeline = FeedPipeline(properties, InMemoryCache(), fetcher)
    monkeypatch.setattr(main, "properties", properties)
    monkeypatch.setattr(main, "pipeline", pipeline)
    return TestClient(main.app)


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestFeedEndpoint:
    def test_feed_returns_json_records(self, client):
        resp = client.get("/feed")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/json")
        assert [r["SUMMARY"] for r in resp.json()] == ["Opening talk", "Workshop", "Closing"]

    def test_error_payload_uses_json_content_type(self, client):
        client.put("/properties/ICS_URL", json={"value": ""})
        resp = client.get("/feed")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/json")
        assert resp.json() == {"error": "ICS_URL is not configured"}

    def test_status_reports_last_run(self, client):
        assert client.get("/feed/status").json() == {"last_run": None}
        client.get("/feed")
        last_run = client.get("/feed/status").json()["last_run"]
        assert last_run["source"] == "regenerated"
        assert last_run["records"] == 3


class TestCacheAndProperties:
    def test_clear_cache_regenerates_next_feed(self, client, fetcher):
        first = client.get("/feed").content
        fetcher.add(ICS_URL, "BEGIN:VEVENT\nSUMMARY:Changed\nEND:VEVENT")
        assert client.get("/feed").content == first

        assert client.post("/cache/clear").json() == {"status": "scheduled"}
        assert json.loads(client.get("/feed").content) == [{"SUMMARY": "Changed"}]
        assert client.get("/properties").json()["properties"]["CLEAR_CACHE"] == "false"

    def test_set_property(self, client):
        resp = client.put("/properties/KEY_RENAMES", json={"value": "SUMMARY:title"})
        assert resp.json() == {"key": "KEY_RENAMES", "value": "SUMMARY:title"}
        assert client.get("/properties").json()["properties"]["KEY_RENAMES"] == "SUMMARY:title"
        assert client.get("/feed").json()[0]["title"] == "Opening talk"

    def test_unknown_property_rejected(self, client):
        resp = client.put("/properties/SOMETHING_ELSE", json={"value": "x"})
        assert resp.status_code == 400
        assert "SOMETHING_ELSE" not in client.get("/properties").json()["properties"]
