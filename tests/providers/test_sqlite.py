"""Tests for the SQLite key-value provider."""

import json
from collections.abc import AsyncIterator
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio

from resource_manager.exceptions import SerializationError, StorageError
from resource_manager.models import Link, Resource
from resource_manager.providers import SqliteProvider


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "resources.db"


@pytest_asyncio.fixture
async def provider(db_path: Path) -> AsyncIterator[SqliteProvider]:
    """Create an opened provider on a temporary database."""
    provider = SqliteProvider(namespace="app", path=db_path)
    await provider.open()
    yield provider
    await provider.close()


@pytest.mark.asyncio
async def test_requires_open() -> None:
    """Test that operations before open() fail with a storage error."""
    provider = SqliteProvider()
    with pytest.raises(StorageError, match="not initialized"):
        await provider.get("test:1")
    with pytest.raises(StorageError, match="not initialized"):
        await provider.list("test:")
    with pytest.raises(StorageError, match="not initialized"):
        await provider.create("test:1", Resource(type="test", id="1"))


@pytest.mark.asyncio
async def test_open_failure(tmp_path: Path) -> None:
    """Test that an unusable path raises a storage error."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    provider = SqliteProvider(path=blocker / "resources.db")
    with pytest.raises(StorageError, match="Failed to open"):
        await provider.open()
    assert not provider.is_open


@pytest.mark.asyncio
async def test_open_creates_directory_and_is_idempotent(db_path: Path) -> None:
    """Test opening twice and closing twice."""
    provider = SqliteProvider(path=db_path)
    await provider.open()
    await provider.open()
    assert db_path.exists()
    await provider.close()
    await provider.close()
    assert not provider.is_open


@pytest.mark.asyncio
async def test_round_trip(provider: SqliteProvider) -> None:
    """Test that type, id, properties, links, state and embedded resources survive storage."""
    resource = Resource(type="test", id="123", properties={"name": "Test Resource", "tags": ["a", "b"]}, state="active")
    resource.add_link("self", Link(href="/tests/123", method="GET"))
    resource.add_link("search", Link(href="/tests{?q}", templated=True))
    child = Resource(type="child", id="c1")
    child.add_embedded("children", Resource(type="grandchild", id="g1"))
    resource.add_embedded("children", child)

    await provider.create("test:123", resource)
    restored = await provider.get("test:123")

    assert restored is not None
    assert restored is not resource
    assert restored.to_dict() == resource.to_dict()


@pytest.mark.asyncio
async def test_get_missing(provider: SqliteProvider) -> None:
    assert await provider.get("test:missing") is None


@pytest.mark.asyncio
async def test_update_overwrites(provider: SqliteProvider) -> None:
    """Test upsert semantics of create and update."""
    await provider.update("test:1", Resource(type="test", id="1", properties={"v": 1}))
    await provider.create("test:1", Resource(type="test", id="1", properties={"v": 2}))
    await provider.update("test:1", Resource(type="test", id="1", properties={"v": 3}))

    resources = await provider.list("test:")
    assert len(resources) == 1
    assert resources[0].get_property("v") == 3


@pytest.mark.asyncio
async def test_list_by_segment_prefix(provider: SqliteProvider) -> None:
    """Test that listing matches whole key segments, ordered by key."""
    await provider.create("item:2", Resource(type="item", id="2"))
    await provider.create("item:1", Resource(type="item", id="1"))
    await provider.create("items:1", Resource(type="items", id="1"))
    await provider.create("other:1", Resource(type="other", id="1"))

    assert [resource.id for resource in await provider.list("item:")] == ["1", "2"]
    assert len(await provider.list("other:")) == 1
    assert await provider.list("unknown:") == []
    assert len(await provider.list("")) == 4


@pytest.mark.asyncio
async def test_delete(provider: SqliteProvider) -> None:
    """Test that delete removes the key."""
    await provider.create("test:1", Resource(type="test", id="1"))
    assert await provider.delete("test:1") is True
    assert await provider.get("test:1") is None


@pytest.mark.asyncio
async def test_delete_missing_reports_true(provider: SqliteProvider) -> None:
    """Test that success is inferred from absence after deleting."""
    assert await provider.delete("test:never-existed") is True


@pytest.mark.asyncio
async def test_hierarchical_key_layout(provider: SqliteProvider, db_path: Path) -> None:
    """Test the persisted key and record format."""
    await provider.create("test:123", Resource(type="test", id="123", properties={"name": "x"}))

    async with aiosqlite.connect(db_path) as conn:
        async with conn.execute("SELECT key, value FROM kv") as cursor:
            rows = await cursor.fetchall()

    assert len(rows) == 1
    key, value = rows[0]
    assert json.loads(key) == ["app", "test", "123"]
    assert json.loads(value) == {"type": "test", "id": "123", "properties": {"name": "x"}, "_links": {}}


@pytest.mark.asyncio
async def test_namespaces_are_isolated(db_path: Path) -> None:
    """Test that two namespaces in one database do not see each other."""
    first = SqliteProvider(namespace="first", path=db_path)
    second = SqliteProvider(namespace="second", path=db_path)
    await first.open()
    await second.open()
    try:
        await first.create("test:1", Resource(type="test", id="1"))
        assert await second.get("test:1") is None
        assert await second.list("test:") == []
    finally:
        await first.close()
        await second.close()


@pytest.mark.asyncio
async def test_persists_across_connections(db_path: Path) -> None:
    """Test durability after closing and reopening."""
    provider = SqliteProvider(path=db_path)
    await provider.open()
    await provider.create("test:1", Resource(type="test", id="1", properties={"name": "kept"}))
    await provider.close()

    reopened = SqliteProvider(path=db_path)
    await reopened.open()
    try:
        resource = await reopened.get("test:1")
        assert resource is not None
        assert resource.get_property("name") == "kept"
    finally:
        await reopened.close()


@pytest.mark.asyncio
async def test_malformed_record(provider: SqliteProvider, db_path: Path) -> None:
    """Test that a stored record that is not an object raises a serialization error."""
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("INSERT INTO kv (key, value) VALUES (?, ?)", (json.dumps(["app", "test", "bad"]), "[1, 2]"))
        await conn.commit()

    with pytest.raises(SerializationError):
        await provider.get("test:bad")


@pytest.mark.asyncio
async def test_database_errors_become_storage_errors(provider: SqliteProvider, db_path: Path) -> None:
    """Test that failures of the underlying table surface as storage errors on every operation."""
    await provider.create("test:1", Resource(type="test", id="1"))
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("DROP TABLE kv")
        await conn.commit()

    with pytest.raises(StorageError, match="Failed to write"):
        await provider.create("test:2", Resource(type="test", id="2"))
    with pytest.raises(StorageError, match="Failed to read"):
        await provider.get("test:1")
    with pytest.raises(StorageError, match="Failed to list"):
        await provider.list("test:")
    with pytest.raises(StorageError, match="Failed to delete"):
        await provider.delete("test:1")
