"""Resource Manager - hypermedia resources over pluggable storage."""

from resource_manager.models import Link, Resource
from resource_manager.store import ResourceStore, StorageConfig

__all__ = ["Link", "Resource", "ResourceStore", "StorageConfig", "VERSION"]

VERSION = "1.0.0"
