"""Storage provider interface for resource management."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")


class StorageProvider(ABC, Generic[T]):
    """Abstract base class for storage backends.

    Keys are opaque strings built by the caller, in practice ``"type:id"``.
    ``create`` and ``update`` both insert or overwrite.
    """

    @abstractmethod
    async def create(self, key: str, value: T) -> None:
        """Store a value under a key."""
        pass

    @abstractmethod
    async def get(self, key: str) -> T | None:
        """Return the value stored under a key, or None if absent."""
        pass

    @abstractmethod
    async def list(self, prefix: str) -> list[T]:
        """Return every value whose key starts with the prefix.

        Ordering is backend-defined.
        """
        pass

    @abstractmethod
    async def update(self, key: str, value: T) -> None:
        """Store a value under a key, creating it if absent."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key.

        Returns:
            True if an entry was removed, False if the key was absent
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources. Safe to call more than once."""
        pass
