"""Cache module."""

from .cache import IKeyValueCache, InMemoryCache, cache_key

__all__ = ["IKeyValueCache", "InMemoryCache", "cache_key"]
