"""CLI for resource manager."""

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import Annotated, Any, Literal, TypeVar

import structlog
from cyclopts import App, Parameter

from resource_manager.config import get_config
from resource_manager.config_commands import config_app
from resource_manager.models import Resource
from resource_manager.server import serve as serve_store
from resource_manager.store import ResourceStore
from resource_manager.todo_commands import todo_app

logger = structlog.get_logger()

T = TypeVar("T")

app = App(
    help="Resource Manager - hypermedia resources for LLM tools",
)

app.command(config_app)
app.command(todo_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level, writing to stderr."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def get_store() -> ResourceStore:
    """Get a store for the configured backend."""
    config = get_config()
    return ResourceStore(config.storage_config())


def run_with_store(operation: Callable[[ResourceStore], Awaitable[T]]) -> T:
    """Run an async operation against a freshly configured store, closing it afterwards."""

    async def runner() -> T:
        store = get_store()
        try:
            return await operation(store)
        finally:
            await store.close()

    return asyncio.run(runner())


def parse_properties(properties: str) -> dict[str, Any]:
    """Parse a "key:value,key2:value2" string into a dict."""
    result: dict[str, Any] = {}
    for item in properties.split(","):
        item = item.strip()
        if not item:
            continue
        if ":" in item:
            key, value = item.split(":", 1)
            result[key.strip()] = value.strip()
        else:
            result[item] = ""
    return result


def print_resource(resource: Resource) -> None:
    print(json.dumps(resource.to_dict(), indent=2))


@app.command
def create(
    type: str,
    id: str,
    properties: str = "",
    state: str | None = None,
) -> None:
    """Create a resource."""
    resource = Resource(type=type, id=id, properties=parse_properties(properties), state=state)
    run_with_store(lambda store: store.create_resource(resource))
    print(f"Created resource {type}/{id}")


@app.command
def read(type: str, id: str) -> None:
    """Read a resource by type and ID."""
    resource = run_with_store(lambda store: store.get_resource(type, id))
    if resource is None:
        print(f"Resource {type}/{id} not found")
        sys.exit(1)
    print_resource(resource)


@app.command
def update(
    type: str,
    id: str,
    properties: str = "",
    state: str | None = None,
) -> None:
    """Update properties and state of an existing resource."""

    async def operation(store: ResourceStore) -> Resource | None:
        resource = await store.get_resource(type, id)
        if resource is None:
            return None
        for key, value in parse_properties(properties).items():
            resource.set_property(key, value)
        if state is not None:
            resource.state = state
        await store.update_resource(resource)
        return resource

    resource = run_with_store(operation)
    if resource is None:
        print(f"Resource {type}/{id} not found")
        sys.exit(1)
    print(f"Updated resource {type}/{id}")


@app.command
def delete(type: str, id: str) -> None:
    """Delete a resource."""
    deleted = run_with_store(lambda store: store.delete_resource(type, id))
    if not deleted:
        print(f"Resource {type}/{id} not found")
        sys.exit(1)
    print(f"Deleted resource {type}/{id}")


@app.command(name="list")
def list_resources(type: str) -> None:
    """List resources of a type."""
    resources = run_with_store(lambda store: store.list_resources(type))

    print(f"Found {len(resources)} resource(s) of type {type}:\n")
    for resource in resources:
        state_str = f" ({resource.state})" if resource.state else ""
        print(f"{resource.type}/{resource.id}{state_str}")


@app.command
def serve(app_name: Annotated[Literal["resources", "todo"], Parameter(name="--app")] = "resources") -> None:
    """Run an MCP server over stdio."""
    try:
        asyncio.run(serve_store(get_store(), app_name))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


if __name__ == "__main__":
    app.meta()
