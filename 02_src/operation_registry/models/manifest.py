"""Manifest data models."""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, StrictInt

SUPPORTED_MANIFEST_VERSION = 1


class ManifestEntry(BaseModel):
    """One allowed operation. The signature is the dedup key."""

    model_config = ConfigDict(frozen=True)

    signature: str
    document: str


class Manifest(BaseModel):
    """Versioned list of allowed operations published by the control plane."""

    model_config = ConfigDict(frozen=True)

    version: StrictInt
    operations: list[ManifestEntry]


@dataclass
class ManifestDiff:
    """Signatures added and removed by one reconciliation."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)
