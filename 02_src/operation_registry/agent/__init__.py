"""Agent module."""

from .agent import Agent, IAgent

__all__ = ["Agent", "IAgent"]
