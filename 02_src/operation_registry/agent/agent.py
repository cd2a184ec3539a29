"""Agent: schedules manifest checks and keeps the operation cache in sync."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol

import httpx

from ..cache import IKeyValueCache
from ..config import SYNC_WARN_TIME_SECONDS, AgentConfig
from ..fetcher import ManifestFetcher
from ..logging_config import get_logger
from ..models import AgentState, Manifest, ManifestDiff
from ..reconciler import Reconciler

logger = get_logger(__name__)


class IAgent(Protocol):
    """Periodic manifest synchronization."""

    async def start(self) -> None:
        """Run one check, then poll every `poll_seconds`."""
        ...

    async def stop(self) -> None:
        """Stop future polling. A running check is left to finish."""
        ...

    async def check_for_update(self) -> bool:
        """Fetch and apply the manifest; at most one check runs at a time."""
        ...


class Agent:
    """Operation registry agent.

    Owns the polling timer, the in-flight guard and the staleness tracking.
    Fetching and reconciliation are delegated to ManifestFetcher and
    Reconciler.
    """

    def __init__(
        self,
        config: AgentConfig,
        cache: IKeyValueCache,
        client: httpx.AsyncClient | None = None,
        log: logging.Logger | None = None,
    ):
        self._config = config
        self._cache = cache
        self._logger = log or logger

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=True)

        self._fetcher = ManifestFetcher(config, self._client, log=self._logger)
        self._reconciler = Reconciler(cache, debug=config.debug, log=self._logger)

        self._state = AgentState.IDLE
        self._pending: asyncio.Task | None = None
        self._timer: asyncio.Task | None = None
        self._last_success: datetime | None = None

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def state(self) -> AgentState:
        return self._state

    @property
    def is_running(self) -> bool:
        """True while the polling timer is armed."""
        return self._timer is not None and not self._timer.done()

    @property
    def known_signatures(self) -> frozenset[str]:
        return self._reconciler.known_signatures

    @property
    def last_success(self) -> datetime | None:
        return self._last_success

    @property
    def etag(self) -> str | None:
        return self._fetcher.etag

    @property
    def times_checked(self) -> int:
        return self._fetcher.times_checked

    @property
    def manifest_url(self) -> str:
        return self._fetcher.manifest_url

    async def start(self) -> None:
        """Run one check, then poll every `poll_seconds`."""
        self._logger.info(
            "Starting operation registry agent (poll every %ss)",
            self._config.poll_seconds,
        )

        # The first check happens before the timer is armed.
        try:
            await self.check_for_update()
        except Exception as e:
            self._logger.error(
                "Could not fetch the operation manifest at startup. Fetching "
                "will be retried, but all operations are forbidden until the "
                "manifest is fetched: %s",
                e,
                exc_info=True,
                extra={"context": self._failure_context(e)},
            )

        if self._timer is None:
            self._timer = asyncio.create_task(self._poll())

    async def stop(self) -> None:
        """Stop future polling. A running check is left to finish."""
        timer, self._timer = self._timer, None
        if timer:
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                pass
            self._logger.info("Stopped operation registry agent")

    async def aclose(self) -> None:
        """Stop polling and release the HTTP client if the agent created it."""
        await self.stop()

        if self._pending is not None:
            await asyncio.wait([self._pending])

        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def request_pending(self) -> bool | None:
        """Wait for the in-flight check, if any."""
        if self._pending is None:
            return None
        return await asyncio.shield(self._pending)

    async def check_for_update(self) -> bool:
        """Fetch and apply the manifest; at most one check runs at a time.

        Concurrent callers share the in-flight check and observe the same
        result or exception.
        """
        self._warn_when_loss_of_sync()

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._run_check())

        # A cancelled caller must not cancel the check other callers share.
        return await asyncio.shield(self._pending)

    async def update_manifest(
        self, manifest: Manifest | Mapping[str, Any]
    ) -> ManifestDiff:
        """Apply a manifest directly, without any network I/O."""
        return await self._reconciler.update_manifest(manifest)

    async def _run_check(self) -> bool:
        self._state = AgentState.CHECKING
        try:
            changed = await self._fetcher.try_update(
                self._reconciler.update_manifest
            )
            self._last_success = datetime.now(timezone.utc)
            return changed
        finally:
            self._state = AgentState.IDLE
            self._pending = None

    async def _poll(self) -> None:
        """Background timer for periodic checks."""
        while True:
            await asyncio.sleep(self._config.poll_seconds)
            try:
                await self.check_for_update()
            except asyncio.CancelledError:
                break
            except Exception as e:
                # Keep serving from the previous manifest until sync returns.
                self._logger.error(
                    "Manifest check failed: %s",
                    e,
                    exc_info=True,
                    extra={"context": self._failure_context(e)},
                )

    def _failure_context(self, error: Exception) -> dict[str, Any]:
        return {
            "manifest_url": self.manifest_url,
            "times_checked": self.times_checked,
            "status_code": getattr(error, "status_code", None),
            "last_success": self._last_success,
        }

    def _seconds_since_last_success(self) -> float:
        if self._last_success is None:
            return float("inf")
        return (datetime.now(timezone.utc) - self._last_success).total_seconds()

    def _warn_when_loss_of_sync(self) -> None:
        if self._seconds_since_last_success() > SYNC_WARN_TIME_SECONDS:
            self._logger.warning(
                "More than %s seconds has elapsed since a successful fetch of "
                "the manifest. (Last success: %s)",
                SYNC_WARN_TIME_SECONDS,
                self._last_success,
            )
