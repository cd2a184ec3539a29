"""Operation registry agent."""

from .agent import Agent, IAgent
from .cache import IKeyValueCache, InMemoryCache, cache_key
from .config import AgentConfig
from .exceptions import (
    ConfigError,
    FetchError,
    ManifestFormatError,
    OperationRegistryError,
)
from .fetcher import IManifestFetcher, ManifestFetcher
from .models import AgentState, Manifest, ManifestDiff, ManifestEntry
from .reconciler import IReconciler, Reconciler

__all__ = [
    # Agent
    "Agent",
    "IAgent",
    "AgentConfig",
    # Models
    "AgentState",
    "Manifest",
    "ManifestEntry",
    "ManifestDiff",
    # Components
    "IKeyValueCache",
    "InMemoryCache",
    "cache_key",
    "IManifestFetcher",
    "ManifestFetcher",
    "IReconciler",
    "Reconciler",
    # Errors
    "OperationRegistryError",
    "ConfigError",
    "FetchError",
    "ManifestFormatError",
]
