"""Agent-related data models."""

from enum import Enum


class AgentState(str, Enum):
    """Whether a manifest check is currently running."""

    IDLE = "idle"
    CHECKING = "checking"
