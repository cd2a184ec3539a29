"""Tests for the FastAPI host wiring."""

import httpx
import pytest
from fastapi.testclient import TestClient

from operation_registry.api import create_fastapi_app
from operation_registry.cache import InMemoryCache
from operation_registry.exceptions import ConfigError


@pytest.fixture
def host_cache():
    return InMemoryCache()


@pytest.fixture
def make_client(config, host_cache, manifest_server):
    """Build a TestClient whose agent talks to the fake manifest endpoint."""

    def _make() -> TestClient:
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(manifest_server.handler)
        )
        app = create_fastapi_app(config, cache=host_cache, client=http_client)
        return TestClient(app)

    return _make


class TestLifespan:
    """Tests for agent startup and shutdown with the app."""

    def test_startup_fetches_manifest(self, make_client, manifest_server, host_cache):
        """Test that the manifest is applied before the app serves requests."""
        manifest_server.publish([("a", "docA")], etag='"v1"')

        with make_client() as client:
            assert host_cache.snapshot() == {"apq:a": "docA"}
            assert client.app.state.agent.is_running is True

        assert client.app.state.agent.is_running is False

    def test_startup_survives_fetch_failure(self, make_client, manifest_server):
        """Test that the app starts even if the manifest is unavailable."""
        manifest_server.status_code = 500

        with make_client() as client:
            response = client.get("/api/registry/status")

        assert response.status_code == 200
        assert response.json()["known_signatures"] == 0
        assert response.json()["last_success"] is None

    def test_missing_service_id(self, monkeypatch):
        """Test that the app cannot be built without a service id."""
        monkeypatch.delenv("ENGINE_SERVICE_ID", raising=False)
        monkeypatch.setenv("SCHEMA_HASH", "schema123")

        with pytest.raises(ConfigError):
            create_fastapi_app()


class TestRegistryRoutes:
    """Tests for registry routes."""

    def test_status(self, make_client, manifest_server):
        """Test the status payload after a successful startup."""
        manifest_server.publish([("a", "docA"), ("b", "docB")], etag='"v1"')

        with make_client() as client:
            response = client.get("/api/registry/status")

        data = response.json()
        assert response.status_code == 200
        assert data["state"] == "idle"
        assert data["running"] is True
        assert data["poll_seconds"] == 30
        assert data["known_signatures"] == 2
        assert data["times_checked"] == 1
        assert data["has_etag"] is True
        assert data["last_success"] is not None
        assert data["manifest_url"].startswith("https://manifests.test/")

    def test_check_not_modified(self, make_client, manifest_server):
        """Test a manual check against an unchanged manifest."""
        manifest_server.publish([("a", "docA")], etag='"v1"')

        with make_client() as client:
            response = client.post("/api/registry/check")

        assert response.status_code == 200
        assert response.json() == {"changed": False}

    def test_check_changed(self, make_client, manifest_server, host_cache):
        """Test a manual check picking up a new manifest."""
        manifest_server.publish([("a", "docA")], etag='"v1"')

        with make_client() as client:
            manifest_server.publish([("b", "docB")], etag='"v2"')
            response = client.post("/api/registry/check")

        assert response.json() == {"changed": True}
        assert host_cache.snapshot() == {"apq:b": "docB"}

    def test_check_fetch_error(self, make_client, manifest_server):
        """Test that fetch failures map to 502."""
        with make_client() as client:
            manifest_server.status_code = 500
            response = client.post("/api/registry/check")

        assert response.status_code == 502
        assert "Could not fetch manifest" in response.json()["detail"]

    def test_check_invalid_manifest(self, make_client, manifest_server):
        """Test that malformed manifests map to 422."""
        with make_client() as client:
            manifest_server.manifest = {"version": 3, "operations": []}
            response = client.post("/api/registry/check")

        assert response.status_code == 422

    def test_get_allowed_operation(self, make_client, manifest_server):
        """Test looking up an operation present in the manifest."""
        manifest_server.publish([("a", "query A { a }")])

        with make_client() as client:
            response = client.get("/api/operations/a")

        assert response.status_code == 200
        assert response.json() == {"signature": "a", "document": "query A { a }"}

    def test_get_unknown_operation(self, make_client):
        """Test that unknown operations are not allowed."""
        with make_client() as client:
            response = client.get("/api/operations/missing")

        assert response.status_code == 404
