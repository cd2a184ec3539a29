"""Fetcher module."""

from .fetcher import (
    IManifestFetcher,
    ManifestFetcher,
    ManifestHandler,
    get_operation_manifest_url,
    hash_service_id,
)

__all__ = [
    "IManifestFetcher",
    "ManifestFetcher",
    "ManifestHandler",
    "get_operation_manifest_url",
    "hash_service_id",
]
