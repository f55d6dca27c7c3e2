"""
Local persistent key-value store.

The local cache mirrors what the domain services hold in memory. Values are
stored as serialized JSON text under string keys.
"""

from .local_store import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore

__all__ = ["KeyValueStore", "InMemoryKeyValueStore", "JsonFileKeyValueStore"]
