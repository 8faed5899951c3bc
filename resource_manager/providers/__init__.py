"""Storage provider implementations."""

from resource_manager.providers.memory import MemoryProvider
from resource_manager.providers.sqlite import SqliteProvider

__all__ = ["MemoryProvider", "SqliteProvider"]
