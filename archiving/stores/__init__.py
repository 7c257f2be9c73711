"""Config store implementations."""

from .memory_store import InMemoryConfigStore
from .pocketbase_store import PocketBaseConfigStore

__all__ = ["InMemoryConfigStore", "PocketBaseConfigStore"]
