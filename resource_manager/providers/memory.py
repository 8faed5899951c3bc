"""In-memory storage provider."""

import structlog

from resource_manager.models import Resource
from resource_manager.provider import StorageProvider

logger = structlog.get_logger()


class MemoryProvider(StorageProvider[Resource]):
    """Dictionary-backed provider that keeps live resource references.

    Nothing is persisted: all state is lost when the process ends.
    """

    def __init__(self, namespace: str | None = None, store: dict[str, Resource] | None = None) -> None:
        """Initialize memory provider.

        Args:
            namespace: Prefix prepended to every key
            store: Container to use, allowing several namespaced providers to share one dictionary
        """
        self.namespace = namespace or ""
        self._store: dict[str, Resource] = store if store is not None else {}

    def _namespace_key(self, key: str) -> str:
        return f"{self.namespace}:{key}" if self.namespace else key

    async def create(self, key: str, value: Resource) -> None:
        logger.debug("Storing resource in memory", key=key)
        self._store[self._namespace_key(key)] = value

    async def get(self, key: str) -> Resource | None:
        return self._store.get(self._namespace_key(key))

    async def list(self, prefix: str) -> list[Resource]:
        ns_prefix = self._namespace_key(prefix)
        results = [value for key, value in self._store.items() if key.startswith(ns_prefix)]
        logger.debug("Listed resources from memory", prefix=prefix, count=len(results))
        return results

    async def update(self, key: str, value: Resource) -> None:
        logger.debug("Updating resource in memory", key=key)
        self._store[self._namespace_key(key)] = value

    async def delete(self, key: str) -> bool:
        return self._store.pop(self._namespace_key(key), None) is not None

    async def close(self) -> None:
        pass
