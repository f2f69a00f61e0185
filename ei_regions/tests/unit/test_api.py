"""
tests/unit/test_api.py
──────────────────────────────────────────────────────────────────────────────
Unit tests for the FastAPI boundary, wired to the in-memory mocks.

Verifies routing, the {"data": [...]} envelope, lifespan schema/close calls
and the error → status mapping.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from ei_regions.interfaces.api import create_app


@pytest.fixture
def client(services):
    app = create_app(services_factory=lambda: services)
    with TestClient(app) as c:
        yield c


class TestLifespan:
    def test_schema_initialised_on_startup(self, client, memory_store):
        assert memory_store.schema_ready is True

    def test_adapters_closed_on_shutdown(self, services, memory_store, fake_source):
        app = create_app(services_factory=lambda: services)
        with TestClient(app):
            assert memory_store.closed is False
        assert memory_store.closed is True
        assert fake_source.closed is True


class TestRoutes:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_scrape_route(self, client):
        resp = client.get("/scrape", params={"postalCode": "K1A 0A1"})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert len(data) == 1
        assert data[0]["PostalCode"] == "K1A0A1"
        assert data[0]["EconomicRegionDetails"]["EconomicRegionCode"] == "3520"

    def test_path_route(self, client):
        resp = client.get("/api/postal-codes/k1a0a1")
        assert resp.status_code == 200
        assert resp.json()["data"][0]["EIEconomicRegionName"] == "Ottawa"

    def test_hit_and_miss_serialise_identically(self, client):
        first = client.get("/scrape", params={"postalCode": "K1A0A1"}).json()
        second = client.get("/scrape", params={"postalCode": "K1A0A1"}).json()
        assert first == second

    def test_missing_query_param(self, client):
        assert client.get("/scrape").status_code == 422


class TestErrorMapping:
    def test_blank_postal_code_is_422(self, client):
        resp = client.get("/scrape", params={"postalCode": "  "})
        assert resp.status_code == 422
        assert "error" in resp.json()

    def test_overlong_postal_code_is_422(self, client, fake_source):
        resp = client.get("/api/postal-codes/" + "K1A0A1" * 5)
        assert resp.status_code == 422
        assert resp.json()["error"].startswith("Invalid postal_code")
        assert fake_source.postal_fetches == []

    def test_store_error_is_503(self, client, memory_store):
        memory_store.fail_reads = True
        resp = client.get("/scrape", params={"postalCode": "K1A0A1"})
        assert resp.status_code == 503
        assert resp.json() == {"error": "Database error"}

    def test_unknown_postal_code_is_404(self, client):
        resp = client.get("/scrape", params={"postalCode": "X0X0X0"})
        assert resp.status_code == 404

    def test_region_source_down_is_502(self, client, fake_source):
        fake_source.region_unavailable = True
        resp = client.get("/scrape", params={"postalCode": "K1A0A1"})
        assert resp.status_code == 502
        assert "data" not in resp.json()
