"""End-to-end tests for the lead finder API.

The real Service runs against httpx.MockTransport; MX lookups are patched.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from api.leadfinder.app import create_app
from api.leadfinder.routes import get_service
from services.leadfinder.config import LeadFinderConfig
from services.leadfinder.service import Service


def _web(places=None, pages=None, places_status=200, places_body=""):
    pages = pages or {}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "places.googleapis.com":
            if places_status != 200:
                return httpx.Response(places_status, text=places_body)
            return httpx.Response(200, json={"places": places or []})
        url = str(request.url).rstrip("/")
        if url in pages:
            return httpx.Response(200, html=pages[url])
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def _client(transport=None, api_key="test-key", service=None, **app_kwargs) -> TestClient:
    app = create_app(**app_kwargs)
    if service is None:
        config = LeadFinderConfig(google_maps_api_key=api_key)
        service = Service(config=config, transport=transport or _web())
    app.dependency_overrides[get_service] = lambda: service
    return TestClient(app)


class TestHealth:

    def test_root(self):
        resp = _client().get("/")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert "running" in resp.text

    def test_cors_headers(self):
        resp = _client().get("/")
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_preflight(self):
        resp = _client().options("/api/run")
        assert resp.status_code == 204
        assert resp.headers["access-control-allow-origin"] == "*"
        assert "POST" in resp.headers["access-control-allow-methods"]


class TestRunEndpoint:

    def test_empty_items_is_400(self):
        resp = _client().post("/api/run", json={"mode": "websites", "items": []})
        assert resp.status_code == 400
        assert "items" in resp.json()["detail"]

    def test_missing_items_is_400(self):
        resp = _client().post("/api/run", json={"mode": "websites"})
        assert resp.status_code == 400

    def test_unknown_mode_is_400(self):
        resp = _client().post("/api/run", json={"mode": "fax", "items": ["x"]})
        assert resp.status_code == 400

    def test_places_without_api_key_is_400(self):
        resp = _client(api_key=None).post("/api/run", json={"mode": "places", "items": ["coffee"]})
        assert resp.status_code == 400
        assert "GOOGLE_MAPS_API_KEY" in resp.json()["detail"]

    def test_websites_end_to_end(self):
        resp = _client().post(
            "/api/run",
            json={"mode": "websites", "items": ["example.com"], "verify": False},
        )
        assert resp.status_code == 200
        rows = resp.json()["rows"]
        assert len(rows) == 1
        assert rows[0]["website"] == "example.com"
        assert isinstance(rows[0]["emails"], list)
        assert rows[0]["verifiedEmails"] == []

    def test_websites_capped_at_100(self):
        items = [f"site{i}.com" for i in range(150)]
        resp = _client().post("/api/run", json={"mode": "websites", "items": items})
        assert resp.status_code == 200
        assert len(resp.json()["rows"]) == 100

    def test_places_end_to_end(self):
        transport = _web(
            places=[{"displayName": {"text": "Bean There"}, "websiteUri": "https://beanthere.com"}],
            pages={"https://beanthere.com": "<p>Say hi: hello@beanthere.com</p>"},
        )
        resp = _client(transport).post(
            "/api/run",
            json={"mode": "places", "items": ["coffee shops in Seattle"]},
        )
        assert resp.status_code == 200
        rows = resp.json()["rows"]
        assert len(rows) == 1
        assert rows[0]["name"] == "Bean There"
        assert rows[0]["emails"] == ["hello@beanthere.com"]

    def test_verify_flag(self):
        transport = _web(pages={"https://shop.com": "<p>a@shop.com b@yopmail.com</p>"})
        with patch("lib.contacts.mx_validator.has_mx", AsyncMock(return_value=True)):
            resp = _client(transport).post(
                "/api/run",
                json={"mode": "websites", "items": ["shop.com"], "verify": True},
            )
        assert resp.json()["rows"][0]["verifiedEmails"] == ["a@shop.com"]

    def test_csv_format(self):
        transport = _web(pages={"https://shop.com": "<p>a@shop.com</p>"})
        resp = _client(transport).post(
            "/api/run",
            json={"mode": "websites", "items": ["shop.com"], "format": "csv"},
        )
        body = resp.json()
        assert len(body["rows"]) == 1
        assert body["csv"].split("\n")[1] == '"","","shop.com","","","a@shop.com",""'

    def test_no_csv_by_default(self):
        resp = _client().post("/api/run", json={"mode": "websites", "items": ["a.com"]})
        assert "csv" not in resp.json()

    def test_upstream_error_is_500_with_raw_body(self):
        transport = _web(places_status=403, places_body='{"error": "denied"}')
        resp = _client(transport).post("/api/run", json={"mode": "places", "items": ["q"]})
        assert resp.status_code == 500
        assert resp.json()["detail"] == '{"error": "denied"}'

    def test_unexpected_error_is_500(self):
        service = AsyncMock()
        service.run = AsyncMock(side_effect=RuntimeError("boom"))
        resp = _client(service=service).post("/api/run", json={"mode": "websites", "items": ["a.com"]})
        assert resp.status_code == 500
        assert resp.json() == {"detail": "boom"}

    def test_body_too_large(self):
        client = _client(max_body_bytes=100)
        resp = client.post("/api/run", json={"mode": "websites", "items": ["x" * 200]})
        assert resp.status_code == 413

    def test_chunked_body_too_large(self):
        def chunks():
            yield b'{"mode": "websites", "items": ['
            for i in range(20):
                yield f'"site{i}.example.com", '.encode()
            yield b'"last.com"]}'

        client = _client(max_body_bytes=100)
        resp = client.post("/api/run", content=chunks(), headers={"Content-Type": "application/json"})
        assert resp.status_code == 413
        assert resp.json() == {"detail": "Request body too large"}
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_chunked_body_within_limit(self):
        def chunks():
            yield b'{"mode": "websites", '
            yield b'"items": ["a.com"]}'

        client = _client(max_body_bytes=1000)
        resp = client.post("/api/run", content=chunks(), headers={"Content-Type": "application/json"})
        assert resp.status_code == 200
        assert resp.json()["rows"][0]["website"] == "a.com"

    def test_missing_body_is_400(self):
        resp = _client().post("/api/run")
        assert resp.status_code == 400
        assert resp.json()["detail"].startswith("Invalid request")

    def test_invalid_json_is_400(self):
        resp = _client().post(
            "/api/run",
            content=b'{"mode": "websites", "items": [',
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400

    @pytest.mark.parametrize("body", [
        {"mode": 5, "items": ["a.com"]},
        {"mode": "websites", "items": ["a.com"], "verify": "x"},
        {"mode": "websites", "items": ["a.com"], "format": "xml"},
    ])
    def test_ill_typed_field_is_400(self, body):
        resp = _client().post("/api/run", json=body)
        assert resp.status_code == 400
        assert "Invalid request" in resp.json()["detail"]
        assert resp.headers["access-control-allow-origin"] == "*"


class TestPlacesToCsvEndpoint:

    def test_missing_query_is_400(self):
        resp = _client().post("/api/places-to-csv", json={})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "textQuery required"

    def test_non_string_query_is_400(self):
        resp = _client().post("/api/places-to-csv", json={"textQuery": 123})
        assert resp.status_code == 400
        assert "textQuery" in resp.json()["detail"]

    def test_missing_body_is_400(self):
        resp = _client().post("/api/places-to-csv")
        assert resp.status_code == 400

    def test_missing_api_key_is_400(self):
        resp = _client(api_key=None).post("/api/places-to-csv", json={"textQuery": "pubs"})
        assert resp.status_code == 400

    def test_rows_and_csv(self):
        transport = _web(
            places=[{
                "displayName": {"text": 'O"Brien\'s'},
                "formattedAddress": "1 Quay St",
                "rating": 4.2,
                "websiteUri": "https://obriens.ie",
            }],
            pages={"https://obriens.ie": '<a href="mailto:bar@obriens.ie">email</a>'},
        )
        resp = _client(transport).post(
            "/api/places-to-csv",
            json={"textQuery": "pubs in Galway", "maxResults": 5},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["count"] == 1
        row = body["rows"][0]
        assert row["businessName"] == 'O"Brien\'s'
        assert row["foundEmails"] == ["bar@obriens.ie"]
        assert row["verifiedEmails"] == []
        assert '"O""Brien\'s"' in body["csv"]
