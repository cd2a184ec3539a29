"""Agent configuration, defaults and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .exceptions import ConfigError

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_LOG_PATH = LOGS_DIR / "operation_registry.log"

DEFAULT_POLL_SECONDS = 30
SYNC_WARN_TIME_SECONDS = 60
CACHE_KEY_PREFIX = "apq:"
DEFAULT_MANIFEST_BASE_URL = (
    "https://storage.googleapis.com/engine-op-manifest-storage-prod"
)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AgentConfig:
    """Immutable agent configuration, created once at startup."""

    service_id: str | None = None
    schema_hash: str | None = None
    poll_seconds: float = DEFAULT_POLL_SECONDS
    debug: bool = False
    manifest_base_url: str = DEFAULT_MANIFEST_BASE_URL

    def __post_init__(self) -> None:
        if not isinstance(self.service_id, str) or not self.service_id:
            raise ConfigError("`service_id` must be passed to the Agent.")
        if not isinstance(self.schema_hash, str) or not self.schema_hash:
            raise ConfigError("`schema_hash` must be passed to the Agent.")
        if self.poll_seconds <= 0:
            raise ConfigError(
                f"`poll_seconds` must be positive, got {self.poll_seconds}"
            )
        if not self.manifest_base_url:
            raise ConfigError("`manifest_base_url` must not be empty.")

    @property
    def fetch_timeout(self) -> float:
        """Request timeout: three polling intervals."""
        return self.poll_seconds * 3

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AgentConfig":
        """Build configuration from environment variables."""
        env = os.environ if environ is None else environ

        raw_poll = env.get("MANIFEST_POLL_SECONDS")
        try:
            poll_seconds = float(raw_poll) if raw_poll else DEFAULT_POLL_SECONDS
        except ValueError as e:
            raise ConfigError(
                f"MANIFEST_POLL_SECONDS must be a number, got {raw_poll!r}"
            ) from e

        return cls(
            service_id=env.get("ENGINE_SERVICE_ID"),
            schema_hash=env.get("SCHEMA_HASH"),
            poll_seconds=poll_seconds,
            debug=env.get("OPERATION_REGISTRY_DEBUG", "").lower() in _TRUTHY,
            manifest_base_url=env.get(
                "MANIFEST_BASE_URL", DEFAULT_MANIFEST_BASE_URL
            ),
        )
