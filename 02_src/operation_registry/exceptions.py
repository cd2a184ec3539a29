"""Exceptions raised by the operation registry agent."""

from typing import Optional


class OperationRegistryError(Exception):
    """Base exception for all operation registry errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigError(OperationRegistryError):
    """Raised when the agent is constructed without required identifiers."""

    pass


class FetchError(OperationRegistryError):
    """Raised when the manifest could not be fetched.

    Covers transport failures, timeouts, non-success statuses and
    unexpected content types.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ManifestFormatError(OperationRegistryError):
    """Raised when a manifest payload does not have the expected shape."""

    pass
