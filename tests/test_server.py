"""Tests for MCP server wiring."""

from pathlib import Path

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from resource_manager.handlers import ResourceRef, text_result
from resource_manager.server import _unwrap, _validated, build_server, build_todo_server, open_store
from resource_manager.store import ResourceStore, StorageConfig
from resource_manager.todo import TodoApp


@pytest.mark.asyncio
async def test_build_server_registers_resource_tools() -> None:
    """Test the resource tool names."""
    server = build_server(ResourceStore())
    tools = await server.list_tools()
    assert {tool.name for tool in tools} == {
        "getResource",
        "listResources",
        "createResource",
        "updateResource",
        "deleteResource",
    }


@pytest.mark.asyncio
async def test_build_todo_server_registers_todo_tools() -> None:
    """Test the todo tool names."""
    server = build_todo_server(TodoApp(ResourceStore()))
    tools = await server.list_tools()
    assert {tool.name for tool in tools} == {"list_todos", "get_todo", "add_todo", "toggle_todo", "delete_todo"}


def test_unwrap() -> None:
    """Test translating handler results for FastMCP."""
    assert _unwrap(text_result("ok")) == "ok"
    with pytest.raises(ToolError, match="boom"):
        _unwrap(text_result("boom", is_error=True))


def test_validated() -> None:
    """Test that invalid input is reported as a tool error."""
    assert _validated(ResourceRef, "getResource", type="test", id="1") == ResourceRef(type="test", id="1")
    with pytest.raises(ToolError, match="Error executing tool 'getResource': Invalid input"):
        _validated(ResourceRef, "getResource", type="", id="1")


@pytest.mark.asyncio
async def test_open_store_falls_back_to_memory(tmp_path: Path) -> None:
    """Test that an unusable durable backend falls back to in-memory storage."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    store = ResourceStore(StorageConfig(kind="durable", namespace="app", path=str(blocker / "kv.db")))

    opened = await open_store(store)
    try:
        assert opened is not store
        assert opened.config.kind == "memory"
        assert opened.config.namespace == "app"
        assert opened.is_initialized
    finally:
        await opened.close()


@pytest.mark.asyncio
async def test_open_store_keeps_working_store() -> None:
    store = ResourceStore()
    assert await open_store(store) is store
    await store.close()
