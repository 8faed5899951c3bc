"""Tool handlers exposing resource store CRUD operations to MCP clients.

Each handler takes a store plus already-validated input and returns a
``CallToolResult``: pretty JSON text on success, or an error message with
``isError`` set. Store errors and "not found" outcomes are translated here and
nowhere else.
"""

import json
from typing import Any
from urllib.parse import urlsplit

import structlog
from mcp.types import CallToolResult, TextContent
from pydantic import BaseModel, Field, field_validator

from resource_manager.exceptions import ResourceNotFoundError, ToolExecutionError
from resource_manager.models import Link, Resource
from resource_manager.store import ResourceStore

logger = structlog.get_logger()


class LinkInput(BaseModel):
    """Schema for a link in tool input."""

    href: str
    method: str | None = None
    title: str | None = None
    templated: bool | None = None

    @field_validator("href")
    @classmethod
    def check_href(cls, value: str) -> str:
        if value.startswith("/"):
            return value
        parts = urlsplit(value)
        if not parts.scheme or not parts.netloc:
            raise ValueError("href must be an absolute URL or an absolute path")
        return value

    def to_link(self) -> Link:
        return Link(href=self.href, method=self.method, title=self.title, templated=self.templated)


class ResourceRef(BaseModel):
    type: str = Field(min_length=1, description="Resource type")
    id: str = Field(min_length=1, description="Resource ID")


class TypeRef(BaseModel):
    type: str = Field(min_length=1, description="Resource type")


class ResourceInput(BaseModel):
    """Schema for a full resource payload in tool input."""

    type: str = Field(min_length=1, description="Resource type cannot be empty")
    id: str = Field(min_length=1, description="Resource ID cannot be empty")
    properties: dict[str, Any] | None = None
    links: dict[str, LinkInput] | None = None
    state: str | None = None


def text_result(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def json_result(data: Any) -> CallToolResult:
    return text_result(json.dumps(data, indent=2))


def error_result(tool_name: str, error: BaseException) -> CallToolResult:
    return text_result(str(ToolExecutionError(tool_name, error)), is_error=True)


async def handle_get_resource(store: ResourceStore, params: ResourceRef) -> CallToolResult:
    """Retrieve a resource by type and ID."""
    logger.info("Handling getResource", type=params.type, id=params.id)
    try:
        resource = await store.get_resource(params.type, params.id)
        if resource is None:
            raise ResourceNotFoundError(params.type, params.id)
        return json_result(resource.to_dict())
    except Exception as e:
        logger.error("Error in getResource", error=str(e))
        return error_result("getResource", e)


async def handle_list_resources(store: ResourceStore, params: TypeRef) -> CallToolResult:
    """List resources of a type."""
    logger.info("Handling listResources", type=params.type)
    try:
        resources = await store.list_resources(params.type)
        logger.debug("Found resources", type=params.type, count=len(resources))
        return json_result([resource.to_dict() for resource in resources])
    except Exception as e:
        logger.error("Error in listResources", error=str(e))
        return error_result("listResources", e)


async def handle_create_resource(store: ResourceStore, data: ResourceInput) -> CallToolResult:
    """Create a resource, overwriting any resource with the same type and ID."""
    logger.info("Handling createResource", type=data.type, id=data.id)
    try:
        resource = Resource(type=data.type, id=data.id, properties=data.properties, state=data.state)
        for rel, link in (data.links or {}).items():
            resource.add_link(rel, link.to_link())
        await store.create_resource(resource)
        logger.info("Resource created", type=data.type, id=data.id)
        return json_result(resource.to_dict())
    except Exception as e:
        logger.error("Error in createResource", error=str(e))
        return error_result("createResource", e)


async def handle_update_resource(store: ResourceStore, data: ResourceInput) -> CallToolResult:
    """Update an existing resource.

    Properties are merged, the state is replaced when given, and links are
    always replaced by the supplied set. A missing resource is an error.
    """
    logger.info("Handling updateResource", type=data.type, id=data.id)
    try:
        resource = await store.get_resource(data.type, data.id)
        if resource is None:
            raise ResourceNotFoundError(data.type, data.id)

        for key, value in (data.properties or {}).items():
            resource.set_property(key, value)
        if data.state is not None:
            resource.state = data.state

        resource.clear_links()
        for rel, link in (data.links or {}).items():
            resource.add_link(rel, link.to_link())

        await store.update_resource(resource)
        logger.info("Resource updated", type=data.type, id=data.id)
        return json_result(resource.to_dict())
    except Exception as e:
        logger.error("Error in updateResource", error=str(e))
        return error_result("updateResource", e)


async def handle_delete_resource(store: ResourceStore, params: ResourceRef) -> CallToolResult:
    """Delete a resource by type and ID."""
    logger.info("Handling deleteResource", type=params.type, id=params.id)
    try:
        deleted = await store.delete_resource(params.type, params.id)
        if not deleted:
            raise ResourceNotFoundError(params.type, params.id)
        return text_result(f"Successfully deleted resource {params.type}/{params.id}.")
    except Exception as e:
        logger.error("Error in deleteResource", error=str(e))
        return error_result("deleteResource", e)
