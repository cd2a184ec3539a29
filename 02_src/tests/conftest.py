"""Pytest configuration and fixtures."""

import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


class FakeManifestServer:
    """In-process manifest endpoint served through httpx.MockTransport."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.manifest: dict = {"version": 1, "operations": []}
        self.etag: str | None = None
        self.status_code = 200
        self.content_type: str | None = "application/json"
        self.body: bytes | None = None
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    def publish(self, operations: list[tuple[str, str]], etag: str | None = None) -> None:
        """Replace the published manifest."""
        self.manifest = {
            "version": 1,
            "operations": [
                {"signature": signature, "document": document}
                for signature, document in operations
            ],
        }
        self.etag = etag

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.gate is not None:
            await self.gate.wait()

        if self.error is not None:
            raise self.error

        if self.etag and request.headers.get("if-none-match") == self.etag:
            return httpx.Response(304)

        headers = {}
        if self.content_type:
            headers["content-type"] = self.content_type
        if self.etag:
            headers["etag"] = self.etag

        content = self.body
        if content is None:
            content = json.dumps(self.manifest).encode("utf-8")

        return httpx.Response(self.status_code, headers=headers, content=content)


@pytest.fixture
def config():
    """Create agent config for testing."""
    from operation_registry.config import AgentConfig

    return AgentConfig(
        service_id="test-service",
        schema_hash="schema123",
        poll_seconds=30,
        debug=True,
        manifest_base_url="https://manifests.test",
    )


@pytest.fixture
def fast_config():
    """Create agent config with a short poll interval."""
    from operation_registry.config import AgentConfig

    return AgentConfig(
        service_id="test-service",
        schema_hash="schema123",
        poll_seconds=0.05,
        manifest_base_url="https://manifests.test",
    )


@pytest.fixture
def cache():
    """Create in-memory cache."""
    from operation_registry.cache import InMemoryCache

    return InMemoryCache()


@pytest.fixture
def manifest_server():
    """Create fake manifest endpoint."""
    return FakeManifestServer()


@pytest_asyncio.fixture
async def http_client(manifest_server):
    """Create HTTP client routed to the fake manifest endpoint."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(manifest_server.handler))
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def agent(config, cache, http_client):
    """Create Agent for testing."""
    from operation_registry.agent import Agent

    ag = Agent(config, cache, client=http_client)
    yield ag
    await ag.aclose()


@pytest_asyncio.fixture
async def fast_agent(fast_config, cache, http_client):
    """Create Agent that polls every 50ms."""
    from operation_registry.agent import Agent

    ag = Agent(fast_config, cache, client=http_client)
    yield ag
    await ag.aclose()
