"""Resource store facade over a configurable storage provider."""

from dataclasses import dataclass
from typing import Literal

import structlog

from resource_manager.exceptions import ConfigurationError
from resource_manager.models import Resource
from resource_manager.provider import StorageProvider
from resource_manager.providers import MemoryProvider, SqliteProvider

logger = structlog.get_logger()

StorageKind = Literal["memory", "durable", "custom"]

STORAGE_KINDS: tuple[str, ...] = ("memory", "durable", "custom")

DEFAULT_DB_PATH = ".resource-manager/resources.db"


@dataclass
class StorageConfig:
    """Selects and configures the storage backend of a ResourceStore.

    Raises:
        ConfigurationError: If the kind is unsupported, or "custom" has no provider
    """

    kind: StorageKind = "memory"
    namespace: str | None = None
    path: str | None = None
    custom_provider: StorageProvider[Resource] | None = None

    def __post_init__(self) -> None:
        if self.kind not in STORAGE_KINDS:
            raise ConfigurationError(f"Unsupported storage kind: {self.kind}")
        if self.kind == "custom" and self.custom_provider is None:
            raise ConfigurationError("Custom storage provider required for kind 'custom'")


async def create_provider(config: StorageConfig) -> StorageProvider[Resource]:
    """Instantiate, and open where needed, the provider described by a configuration.

    Args:
        config: Storage configuration

    Returns:
        Ready-to-use storage provider
    """
    logger.debug("Creating storage provider", kind=config.kind, namespace=config.namespace)
    if config.kind == "memory":
        logger.info("Using in-memory storage provider (no persistence)", namespace=config.namespace)
        return MemoryProvider(namespace=config.namespace)
    elif config.kind == "durable":
        provider = SqliteProvider(namespace=config.namespace, path=config.path or DEFAULT_DB_PATH)
        await provider.open()
        return provider
    elif config.kind == "custom":
        if config.custom_provider is None:
            raise ConfigurationError("Custom storage provider required for kind 'custom'")
        return config.custom_provider
    else:
        raise ConfigurationError(f"Unsupported storage kind: {config.kind}")


class ResourceStore:
    """Single entry point for storing resources, whatever the backend.

    Resources are keyed ``"type:id"``. Construction performs no I/O; the provider
    is created on ``initialize()`` or on the first operation. ``close()`` releases
    the provider, and a later operation opens a fresh one.

    Create and update are both upserts. Provider errors propagate unchanged.
    """

    def __init__(self, config: StorageConfig | None = None) -> None:
        """Initialize resource store.

        Args:
            config: Storage configuration (defaults to in-memory storage)
        """
        self.config = config or StorageConfig()
        self._provider: StorageProvider[Resource] | None = None

    @property
    def is_initialized(self) -> bool:
        return self._provider is not None

    async def initialize(self) -> None:
        """Create the configured provider if not done yet."""
        await self._ensure_initialized()

    async def _ensure_initialized(self) -> StorageProvider[Resource]:
        if self._provider is None:
            self._provider = await create_provider(self.config)
            logger.info("Resource store initialized", kind=self.config.kind)
        return self._provider

    @staticmethod
    def _make_key(type: str, id: str) -> str:
        return f"{type}:{id}"

    async def create_resource(self, resource: Resource) -> None:
        provider = await self._ensure_initialized()
        logger.debug("Creating resource", type=resource.type, id=resource.id)
        await provider.create(self._make_key(resource.type, resource.id), resource)

    async def get_resource(self, type: str, id: str) -> Resource | None:
        provider = await self._ensure_initialized()
        return await provider.get(self._make_key(type, id))

    async def update_resource(self, resource: Resource) -> None:
        provider = await self._ensure_initialized()
        logger.debug("Updating resource", type=resource.type, id=resource.id)
        await provider.update(self._make_key(resource.type, resource.id), resource)

    async def delete_resource(self, type: str, id: str) -> bool:
        provider = await self._ensure_initialized()
        deleted = await provider.delete(self._make_key(type, id))
        logger.debug("Deleted resource", type=type, id=id, deleted=deleted)
        return deleted

    async def list_resources(self, type: str) -> list[Resource]:
        """List every resource of a type; an unknown type yields an empty list."""
        provider = await self._ensure_initialized()
        return await provider.list(f"{type}:")

    async def close(self) -> None:
        if self._provider is not None:
            await self._provider.close()
            self._provider = None
            logger.info("Resource store closed", kind=self.config.kind)
