"""Reconciler: applies manifest diffs to the operation cache."""

import logging
from typing import Any, Mapping, Protocol

from pydantic import ValidationError

from ..cache import IKeyValueCache, cache_key
from ..exceptions import ManifestFormatError
from ..logging_config import get_logger
from ..models import SUPPORTED_MANIFEST_VERSION, Manifest, ManifestDiff

logger = get_logger(__name__)


class IReconciler(Protocol):
    """Keeps the `apq:` cache namespace equal to the latest manifest."""

    async def update_manifest(
        self, manifest: Manifest | Mapping[str, Any]
    ) -> ManifestDiff:
        """Apply the add/remove diff between the known and incoming signatures."""
        ...

    @property
    def known_signatures(self) -> frozenset[str]:
        """Signatures present after the last successful reconciliation."""
        ...


def parse_manifest(payload: Manifest | Mapping[str, Any] | Any) -> Manifest:
    """Validate a raw or hand-built manifest. Raises ManifestFormatError."""
    if isinstance(payload, Manifest):
        manifest = payload
    else:
        try:
            manifest = Manifest.model_validate(payload)
        except ValidationError as e:
            raise ManifestFormatError("Invalid manifest format.") from e

    if manifest.version != SUPPORTED_MANIFEST_VERSION:
        raise ManifestFormatError("Invalid manifest format.")

    return manifest


class Reconciler:
    """Diffs incoming manifests against the last applied one."""

    def __init__(
        self,
        cache: IKeyValueCache,
        debug: bool = False,
        log: logging.Logger | None = None,
    ):
        self._cache = cache
        self._debug = debug
        self._logger = log or logger
        self._known_signatures: frozenset[str] = frozenset()

    @property
    def known_signatures(self) -> frozenset[str]:
        """Signatures present after the last successful reconciliation."""
        return self._known_signatures

    def _maybe_log(self, msg: str, *args: Any) -> None:
        if self._debug:
            self._logger.debug(msg, *args)

    async def update_manifest(
        self, manifest: Manifest | Mapping[str, Any]
    ) -> ManifestDiff:
        """Apply the add/remove diff between the known and incoming signatures.

        Documents are content-addressed by signature, so signatures present in
        both sets are never re-written. The known set is replaced wholesale
        once the cache has been updated. If a cache call fails, the known set
        keeps every signature that may still be cached so a later manifest
        purges it.
        """
        manifest = parse_manifest(manifest)

        incoming: dict[str, str] = {}
        for entry in manifest.operations:
            if entry.signature in incoming:
                self._maybe_log(
                    "Duplicate signature in manifest, last entry wins: %s",
                    entry.signature,
                )
            incoming[entry.signature] = entry.document

        diff = ManifestDiff()
        attempted: set[str] = set()
        completed = False

        try:
            for signature, document in incoming.items():
                if signature not in self._known_signatures:
                    self._maybe_log("Incoming manifest ADDs: %s", signature)
                    # A failed set may still have landed in the cache.
                    attempted.add(signature)
                    await self._cache.set(cache_key(signature), document)
                    diff.added.append(signature)

            for signature in self._known_signatures:
                if signature not in incoming:
                    self._maybe_log("Incoming manifest REMOVEs: %s", signature)
                    await self._cache.delete(cache_key(signature))
                    diff.removed.append(signature)

            completed = True
        finally:
            if completed:
                self._known_signatures = frozenset(incoming)
            else:
                self._known_signatures = (
                    self._known_signatures - frozenset(diff.removed)
                ) | attempted

        self._logger.info(
            "Manifest applied: %d added, %d removed, %d total",
            len(diff.added),
            len(diff.removed),
            len(incoming),
            extra={
                "context": {
                    "added": len(diff.added),
                    "removed": len(diff.removed),
                    "total": len(incoming),
                }
            },
        )
        return diff
