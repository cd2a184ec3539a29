"""Registry status and control routes."""

from datetime import datetime

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ...agent import Agent
from ...cache import IKeyValueCache, cache_key
from ...exceptions import FetchError, ManifestFormatError


class RegistryStatusResponse(BaseModel):
    """Response model for agent status."""

    state: str
    running: bool
    poll_seconds: float
    manifest_url: str
    known_signatures: int
    last_success: datetime | None
    times_checked: int
    has_etag: bool


class CheckResponse(BaseModel):
    """Response model for a manual manifest check."""

    changed: bool


class OperationResponse(BaseModel):
    """Response model for an allowed operation."""

    signature: str
    document: str


def create_registry_router(agent: Agent, cache: IKeyValueCache) -> APIRouter:
    """Create registry router."""
    router = APIRouter(prefix="/api", tags=["registry"])

    @router.get("/registry/status", response_model=RegistryStatusResponse)
    async def get_status() -> RegistryStatusResponse:
        """Current synchronization state of the agent."""
        return RegistryStatusResponse(
            state=agent.state.value,
            running=agent.is_running,
            poll_seconds=agent.config.poll_seconds,
            manifest_url=agent.manifest_url,
            known_signatures=len(agent.known_signatures),
            last_success=agent.last_success,
            times_checked=agent.times_checked,
            has_etag=agent.etag is not None,
        )

    @router.post("/registry/check", response_model=CheckResponse)
    async def check_now() -> CheckResponse:
        """Run a manifest check now, or join the one in flight."""
        try:
            changed = await agent.check_for_update()
        except FetchError as e:
            raise HTTPException(status_code=502, detail=e.message)
        except ManifestFormatError as e:
            raise HTTPException(status_code=422, detail=e.message)
        return CheckResponse(changed=changed)

    @router.get("/operations/{signature}", response_model=OperationResponse)
    async def get_operation(signature: str) -> OperationResponse:
        """Look up an allowed operation by signature."""
        document = await cache.get(cache_key(signature))
        if document is None:
            raise HTTPException(
                status_code=404, detail=f"Operation {signature} is not allowed"
            )
        return OperationResponse(signature=signature, document=document)

    return router
