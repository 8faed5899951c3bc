"""Data models for resource manager."""

from dataclasses import dataclass
from typing import Any

from resource_manager.exceptions import SerializationError


@dataclass(frozen=True)
class Link:
    """Represents a hypermedia link from a resource.

    A link without a method is a plain retrieval, equivalent to GET.
    """

    href: str
    method: str | None = None
    title: str | None = None
    templated: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form of the link, omitting unset fields."""
        data: dict[str, Any] = {"href": self.href}
        if self.method is not None:
            data["method"] = self.method
        if self.title is not None:
            data["title"] = self.title
        if self.templated is not None:
            data["templated"] = self.templated
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "Link":
        """Build a link from its wire form.

        Raises:
            SerializationError: If the record is not a mapping with an href
        """
        if not isinstance(data, dict) or not isinstance(data.get("href"), str):
            raise SerializationError(f"Invalid link data: {data!r}")
        return cls(
            href=data["href"],
            method=data.get("method"),
            title=data.get("title"),
            templated=data.get("templated"),
        )


class Resource:
    """A hypermedia resource with properties, links, embedded resources and a state.

    The ``(type, id)`` pair identifies the resource within a store. Both must be
    non-empty; callers validate input before constructing a resource and this
    class does not check again.

    Collections returned by the accessors are copies. Internal state only
    changes through the mutator methods.
    """

    def __init__(
        self,
        type: str,
        id: str,
        properties: dict[str, Any] | None = None,
        links: dict[str, Link] | None = None,
        state: str | None = None,
    ) -> None:
        """Initialize a resource.

        Args:
            type: Resource type, used as the storage namespace (e.g. "task")
            id: Identifier, unique within the type
            properties: Initial property values
            links: Initial links keyed by relation name
            state: Optional lifecycle label
        """
        self._type = type
        self._id = id
        self._properties: dict[str, Any] = dict(properties or {})
        self._links: dict[str, Link] = dict(links or {})
        self._embedded: dict[str, list[Resource]] = {}
        self._state = state

    def __repr__(self) -> str:
        return f"Resource(type={self._type!r}, id={self._id!r}, state={self._state!r})"

    @property
    def type(self) -> str:
        return self._type

    @property
    def id(self) -> str:
        return self._id

    @property
    def state(self) -> str | None:
        return self._state

    @state.setter
    def state(self, state: str | None) -> None:
        self._state = state

    def get_property(self, key: str) -> Any:
        """Return a property value, or None if it is not set."""
        return self._properties.get(key)

    def set_property(self, key: str, value: Any) -> None:
        self._properties[key] = value

    def get_properties(self) -> dict[str, Any]:
        return dict(self._properties)

    def add_link(self, rel: str, link: Link) -> None:
        """Add a link, replacing any existing link for the same relation."""
        self._links[rel] = link

    def get_link(self, rel: str) -> Link | None:
        return self._links.get(rel)

    def get_links(self) -> dict[str, Link]:
        return dict(self._links)

    def clear_links(self) -> None:
        self._links = {}

    def add_embedded(self, rel: str, resource: "Resource") -> None:
        """Append an embedded resource under a relation."""
        self._embedded.setdefault(rel, []).append(resource)

    def get_embedded(self, rel: str) -> list["Resource"] | None:
        embedded = self._embedded.get(rel)
        if embedded is None:
            return None
        return list(embedded)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the resource to its wire format.

        Returns:
            Dictionary with ``type``, ``id``, ``properties`` and ``_links``, plus
            ``_embedded`` when any resource is embedded and ``state`` when set
        """
        data: dict[str, Any] = {
            "type": self._type,
            "id": self._id,
            "properties": dict(self._properties),
            "_links": {rel: link.to_dict() for rel, link in self._links.items()},
        }
        if self._embedded:
            data["_embedded"] = {
                rel: [resource.to_dict() for resource in resources] for rel, resources in self._embedded.items()
            }
        if self._state is not None:
            data["state"] = self._state
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "Resource":
        """Reconstruct a resource, including nested embedded resources, from its wire format.

        Args:
            data: Record produced by ``to_dict``

        Returns:
            Resource object

        Raises:
            SerializationError: If the record is malformed
        """
        if not isinstance(data, dict):
            raise SerializationError(f"Invalid resource data: expected an object, got {type(data).__name__}")
        if not isinstance(data.get("type"), str) or not isinstance(data.get("id"), str):
            raise SerializationError("Invalid resource data: 'type' and 'id' must be strings")

        properties = data.get("properties") or {}
        if not isinstance(properties, dict):
            raise SerializationError("Invalid resource data: 'properties' must be an object")
        state = data.get("state")
        if state is not None and not isinstance(state, str):
            raise SerializationError("Invalid resource data: 'state' must be a string")

        resource = cls(type=data["type"], id=data["id"], properties=properties, state=state)

        links = data.get("_links") or {}
        if not isinstance(links, dict):
            raise SerializationError("Invalid resource data: '_links' must be an object")
        for rel, link in links.items():
            resource.add_link(rel, Link.from_dict(link))

        embedded = data.get("_embedded") or {}
        if not isinstance(embedded, dict):
            raise SerializationError("Invalid resource data: '_embedded' must be an object")
        for rel, items in embedded.items():
            if not isinstance(items, list):
                raise SerializationError(f"Invalid resource data: embedded '{rel}' must be an array")
            for item in items:
                resource.add_embedded(rel, cls.from_dict(item))

        return resource
