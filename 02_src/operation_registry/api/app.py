"""FastAPI host wiring for the operation registry agent."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from ..agent import Agent
from ..cache import IKeyValueCache, InMemoryCache
from ..config import AgentConfig
from ..logging_config import get_logger
from .routes import create_registry_router

logger = get_logger(__name__)


def create_fastapi_app(
    config: AgentConfig | None = None,
    cache: IKeyValueCache | None = None,
    client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create the host app; the agent starts and stops with its lifespan.

    Raises ConfigError if the service id or schema hash is missing.
    """
    if config is None:
        config = AgentConfig.from_env()
    if cache is None:
        cache = InMemoryCache()

    agent = Agent(config, cache, client=client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage agent lifespan."""
        # Startup
        await agent.start()
        logger.info("Operation registry agent started")
        yield
        # Shutdown
        await agent.aclose()

    fastapi_app = FastAPI(
        title="Operation Registry",
        description="Allowed-operation registry synchronized from the manifest",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.agent = agent

    fastapi_app.include_router(create_registry_router(agent, cache))

    return fastapi_app
