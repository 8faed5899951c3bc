"""Exceptions raised by resource-manager."""

__all__ = [
    "ResourceManagerError",
    "ConfigurationError",
    "StorageError",
    "SerializationError",
    "ResourceNotFoundError",
    "ToolExecutionError",
]


class ResourceManagerError(Exception):
    """Generic base exception used for this library."""


class ConfigurationError(ResourceManagerError, ValueError):
    """Raised when the storage configuration is invalid."""


class StorageError(ResourceManagerError):
    """Raised when the storage medium is unavailable or an I/O call fails."""


class SerializationError(ResourceManagerError):
    """Raised when a stored record cannot be turned back into a resource."""


class ResourceNotFoundError(ResourceManagerError):
    """Raised by callers that treat a missing resource as an error."""

    def __init__(self, type: str, id: str) -> None:
        super().__init__(f"Resource {type}/{id} not found.")
        self.type = type
        self.id = id


class ToolExecutionError(ResourceManagerError):
    """Raised when a tool handler fails, wrapping the original cause."""

    def __init__(self, tool_name: str, cause: BaseException | str) -> None:
        super().__init__(f"Error executing tool '{tool_name}': {cause}")
        self.tool_name = tool_name
        self.cause = cause
