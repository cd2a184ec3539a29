"""Data models for the operation registry."""

from .agent import AgentState
from .manifest import (
    SUPPORTED_MANIFEST_VERSION,
    Manifest,
    ManifestDiff,
    ManifestEntry,
)

__all__ = [
    # Manifest
    "Manifest",
    "ManifestEntry",
    "ManifestDiff",
    "SUPPORTED_MANIFEST_VERSION",
    # Agent
    "AgentState",
]
