"""Conditional manifest fetcher."""

import hashlib
import json
import logging
from typing import Any, Awaitable, Callable, Protocol

import httpx

from ..config import AgentConfig
from ..exceptions import FetchError, ManifestFormatError
from ..logging_config import get_logger

logger = get_logger(__name__)

MANIFEST_CONTENT_TYPE = "application/json"

ManifestHandler = Callable[[Any], Awaitable[Any]]


def hash_service_id(service_id: str) -> str:
    """One-way hash of the service id used in the manifest URL."""
    return hashlib.sha512(service_id.encode("utf-8")).hexdigest()


def get_operation_manifest_url(
    base_url: str, hashed_service_id: str, schema_hash: str
) -> str:
    """Manifest location for one service/schema pair."""
    return f"{base_url.rstrip('/')}/{hashed_service_id}/{schema_hash}"


class IManifestFetcher(Protocol):
    """Fetches the manifest and hands changed payloads to a handler."""

    async def try_update(self, apply: ManifestHandler) -> bool:
        """Return True if a new manifest was applied, False if unchanged."""
        ...


class ManifestFetcher:
    """Conditional GET of the operation manifest, keyed by the last ETag."""

    def __init__(
        self,
        config: AgentConfig,
        client: httpx.AsyncClient,
        log: logging.Logger | None = None,
    ):
        self._config = config
        self._client = client
        self._logger = log or logger
        self._hashed_service_id: str | None = None
        self._etag: str | None = None

        # Only exposed for testing and status reporting.
        self.times_checked = 0

    @property
    def etag(self) -> str | None:
        """Validator token from the last applied manifest."""
        return self._etag

    @property
    def manifest_url(self) -> str:
        if self._hashed_service_id is None:
            self._hashed_service_id = hash_service_id(self._config.service_id)
        return get_operation_manifest_url(
            self._config.manifest_base_url,
            self._hashed_service_id,
            self._config.schema_hash,
        )

    def _maybe_log(self, msg: str, *args: Any) -> None:
        if self._config.debug:
            self._logger.debug(msg, *args)

    async def try_update(self, apply: ManifestHandler) -> bool:
        """Fetch the manifest and apply it if it changed.

        Returns False on `304 Not Modified` without touching any state. The
        ETag of a new manifest is only remembered after `apply` succeeds, so a
        rejected manifest is downloaded again on the next attempt.

        The media type must be exactly `application/json`; parameters such as
        `charset` are ignored and a missing Content-Type header is accepted.
        """
        manifest_url = self.manifest_url

        self._maybe_log("Checking for manifest changes at %s", manifest_url)
        self.times_checked += 1

        headers = {}
        if self._etag:
            headers["If-None-Match"] = self._etag

        try:
            response = await self._client.get(
                manifest_url,
                headers=headers,
                timeout=self._config.fetch_timeout,
            )
        except httpx.HTTPError as e:
            raise FetchError(
                f"Unable to fetch operation manifest for "
                f"{self._config.schema_hash} in '{self._config.service_id}': {e}"
            ) from e

        if response.status_code == httpx.codes.NOT_MODIFIED:
            self._maybe_log(
                "The published manifest was the same as the previous attempt."
            )
            return False

        if not response.is_success:
            raise FetchError(
                f"Could not fetch manifest {response.text}",
                status_code=response.status_code,
            )

        content_type = response.headers.get("content-type")
        if content_type:
            media_type = content_type.split(";", 1)[0].strip().lower()
            if media_type != MANIFEST_CONTENT_TYPE:
                raise FetchError(
                    f"Unexpected 'Content-Type' header: {content_type}",
                    status_code=response.status_code,
                )

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ManifestFormatError("Invalid manifest format.") from e

        await apply(payload)

        received_etag = response.headers.get("etag")
        if received_etag:
            self._etag = received_etag

        return True
