"""API routes."""

from .registry import create_registry_router

__all__ = ["create_registry_router"]
