"""MCP server wiring for the resource store and the todo application."""

from typing import Any

import structlog
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import CallToolResult, TextContent
from pydantic import ValidationError

from resource_manager import VERSION
from resource_manager.exceptions import StorageError
from resource_manager.handlers import (
    LinkInput,
    ResourceInput,
    ResourceRef,
    TypeRef,
    handle_create_resource,
    handle_delete_resource,
    handle_get_resource,
    handle_list_resources,
    handle_update_resource,
)
from resource_manager.store import ResourceStore, StorageConfig
from resource_manager.todo import TodoApp

logger = structlog.get_logger()


def _unwrap(result: CallToolResult) -> str:
    """Return the text of a handler result, raising ToolError for error results."""
    text = "\n".join(item.text for item in result.content if isinstance(item, TextContent))
    if result.isError:
        raise ToolError(text)
    return text


def _validated(model: type[Any], tool_name: str, **data: Any) -> Any:
    try:
        return model(**data)
    except ValidationError as e:
        messages = ", ".join(error["msg"] for error in e.errors())
        raise ToolError(f"Error executing tool '{tool_name}': Invalid input: {messages}") from e


def build_server(store: ResourceStore) -> FastMCP:
    """Create an MCP server exposing resource CRUD tools backed by a store."""
    server = FastMCP("ResourceManagerServer")
    logger.debug("Registering resource tools", version=VERSION)

    @server.tool(name="getResource", description="Get a resource by type and ID")
    async def get_resource(type: str, id: str) -> str:
        params = _validated(ResourceRef, "getResource", type=type, id=id)
        return _unwrap(await handle_get_resource(store, params))

    @server.tool(name="listResources", description="List all resources of a type")
    async def list_resources(type: str) -> str:
        params = _validated(TypeRef, "listResources", type=type)
        return _unwrap(await handle_list_resources(store, params))

    @server.tool(name="createResource", description="Create a resource")
    async def create_resource(
        type: str,
        id: str,
        properties: dict[str, Any] | None = None,
        links: dict[str, LinkInput] | None = None,
        state: str | None = None,
    ) -> str:
        data = _validated(
            ResourceInput, "createResource", type=type, id=id, properties=properties, links=links, state=state
        )
        return _unwrap(await handle_create_resource(store, data))

    @server.tool(name="updateResource", description="Update an existing resource, replacing its links")
    async def update_resource(
        type: str,
        id: str,
        properties: dict[str, Any] | None = None,
        links: dict[str, LinkInput] | None = None,
        state: str | None = None,
    ) -> str:
        data = _validated(
            ResourceInput, "updateResource", type=type, id=id, properties=properties, links=links, state=state
        )
        return _unwrap(await handle_update_resource(store, data))

    @server.tool(name="deleteResource", description="Delete a resource by type and ID")
    async def delete_resource(type: str, id: str) -> str:
        params = _validated(ResourceRef, "deleteResource", type=type, id=id)
        return _unwrap(await handle_delete_resource(store, params))

    return server


def build_todo_server(app: TodoApp) -> FastMCP:
    """Create an MCP server exposing the todo application."""
    server = FastMCP("TodoAppServer")

    @server.tool(description="List all todos")
    async def list_todos() -> dict[str, Any]:
        try:
            return (await app.get_tasks()).to_dict()
        except Exception as e:
            raise ToolError(f"Error listing todos: {e}") from e

    @server.tool(description="Get a todo by ID")
    async def get_todo(id: str) -> dict[str, Any]:
        try:
            return (await app.get_task(id)).to_dict()
        except Exception as e:
            raise ToolError(f"Error getting todo {id}: {e}") from e

    @server.tool(description="Add a new todo")
    async def add_todo(title: str) -> dict[str, Any]:
        if not title:
            raise ToolError("Error adding todo: title cannot be empty")
        try:
            return (await app.create_task(title)).to_dict()
        except Exception as e:
            raise ToolError(f"Error adding todo: {e}") from e

    @server.tool(description="Toggle the completion status of a todo")
    async def toggle_todo(id: str) -> dict[str, Any]:
        try:
            return (await app.toggle_task(id)).to_dict()
        except Exception as e:
            raise ToolError(f"Error toggling todo {id}: {e}") from e

    @server.tool(description="Delete a todo")
    async def delete_todo(id: str) -> str:
        try:
            deleted = await app.delete_task(id)
        except Exception as e:
            raise ToolError(f"Error deleting todo {id}: {e}") from e
        if not deleted:
            raise ToolError(f"Todo {id} not found or could not be deleted.")
        return f"Successfully deleted todo {id}."

    return server


async def open_store(store: ResourceStore) -> ResourceStore:
    """Initialize a store, falling back to in-memory storage if the backend cannot be opened."""
    try:
        await store.initialize()
        logger.info("Store initialized", kind=store.config.kind)
        return store
    except StorageError as e:
        logger.warning("Failed to initialize store, falling back to in-memory storage", error=str(e))
        fallback = ResourceStore(StorageConfig(kind="memory", namespace=store.config.namespace))
        await fallback.initialize()
        return fallback


async def serve(store: ResourceStore, app_name: str = "resources") -> None:
    """Serve tools over stdio until the client disconnects, then close the store."""
    store = await open_store(store)
    try:
        if app_name == "todo":
            server = build_todo_server(TodoApp(store))
        else:
            server = build_server(store)
        logger.info("MCP server ready, waiting for client over stdio", app=app_name)
        await server.run_stdio_async()
    finally:
        await store.close()
        logger.info("Store closed")
