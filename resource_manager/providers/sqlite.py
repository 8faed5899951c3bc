"""Durable key-value storage provider backed by SQLite."""

import json
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from resource_manager.exceptions import SerializationError, StorageError
from resource_manager.models import Resource
from resource_manager.provider import StorageProvider

logger = structlog.get_logger()

MEMORY_PATH = ":memory:"

_SCHEMA = "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"


class SqliteProvider(StorageProvider[Resource]):
    """Ordered key-value provider with hierarchical keys stored in a SQLite table.

    A logical key ``"type:id"`` becomes the segment list ``[namespace?, type, id]``,
    stored as JSON array text. Resources are written in their wire format and
    reconstructed on read. ``open()`` must be awaited before any other call.
    """

    def __init__(self, namespace: str | None = None, path: str | Path = MEMORY_PATH) -> None:
        """Initialize SQLite provider.

        Args:
            namespace: Leading key segment shared by every key of this provider
            path: Database file, or ":memory:" for a private in-process database
        """
        self.namespace = namespace or ""
        self.path = str(path)
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def open(self) -> None:
        """Connect to the database and create the key-value table.

        Raises:
            StorageError: If the database cannot be opened
        """
        if self._conn is not None:
            return

        logger.debug("Opening SQLite store", path=self.path)
        try:
            if self.path != MEMORY_PATH:
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(self.path)
        except (OSError, aiosqlite.Error) as e:
            logger.error("Failed to open SQLite store", path=self.path, error=str(e))
            raise StorageError(f"Failed to open SQLite store at {self.path}: {e}") from e

        try:
            await conn.execute(_SCHEMA)
            await conn.commit()
        except aiosqlite.Error as e:
            await conn.close()
            logger.error("Failed to prepare SQLite store", path=self.path, error=str(e))
            raise StorageError(f"Failed to prepare SQLite store at {self.path}: {e}") from e

        self._conn = conn
        logger.info("Connected to SQLite store", path=self.path)

    def _ensure_open(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StorageError("SQLite store not initialized. Call open() first.")
        return self._conn

    def _build_key(self, key: str) -> list[str]:
        """Split a logical key into segments, prefixed by the namespace when set."""
        parts = key.split(":")
        if self.namespace:
            return [self.namespace, *parts]
        return parts

    def _encode_key(self, key: str) -> str:
        return json.dumps(self._build_key(key))

    def _encode_prefix(self, prefix: str) -> str:
        """Encode a list prefix so that it matches whole leading segments.

        A trailing ":" yields an empty last segment, which selects everything
        below the preceding segments.
        """
        parts = self._build_key(prefix)
        if parts and parts[-1] == "":
            parts = parts[:-1]
        if not parts:
            return "["
        return json.dumps(parts)[:-1] + ", "

    def _serialize(self, resource: Resource) -> str:
        return json.dumps(resource.to_dict())

    def _deserialize(self, raw: str) -> Resource:
        try:
            data: Any = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Invalid resource data: {e}") from e
        return Resource.from_dict(data)

    async def _write(self, key: str, value: Resource) -> None:
        conn = self._ensure_open()
        try:
            await conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (self._encode_key(key), self._serialize(value)),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            logger.error("Failed to write resource", key=key, error=str(e))
            raise StorageError(f"Failed to write resource at key {key}: {e}") from e

    async def create(self, key: str, value: Resource) -> None:
        logger.debug("Creating resource in SQLite store", key=key)
        await self._write(key, value)

    async def get(self, key: str) -> Resource | None:
        conn = self._ensure_open()
        try:
            async with conn.execute("SELECT value FROM kv WHERE key = ?", (self._encode_key(key),)) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.error("Failed to read resource", key=key, error=str(e))
            raise StorageError(f"Failed to read resource at key {key}: {e}") from e
        if row is None:
            return None
        return self._deserialize(row[0])

    async def list(self, prefix: str) -> list[Resource]:
        conn = self._ensure_open()
        encoded = self._encode_prefix(prefix)
        try:
            async with conn.execute(
                "SELECT value FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(encoded), encoded),
            ) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.error("Failed to list resources", prefix=prefix, error=str(e))
            raise StorageError(f"Failed to list resources with prefix {prefix}: {e}") from e
        resources = [self._deserialize(row[0]) for row in rows]
        logger.debug("Listed resources from SQLite store", prefix=prefix, count=len(resources))
        return resources

    async def update(self, key: str, value: Resource) -> None:
        logger.debug("Updating resource in SQLite store", key=key)
        await self._write(key, value)

    async def delete(self, key: str) -> bool:
        """Delete a key and report whether it is gone.

        The result is inferred by reading the key back, so deleting a key that
        never existed also reports True.
        """
        conn = self._ensure_open()
        try:
            await conn.execute("DELETE FROM kv WHERE key = ?", (self._encode_key(key),))
            await conn.commit()
        except aiosqlite.Error as e:
            logger.error("Failed to delete resource", key=key, error=str(e))
            raise StorageError(f"Failed to delete resource at key {key}: {e}") from e
        return await self.get(key) is None

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.debug("Closed SQLite store", path=self.path)
