"""Todo example application built on resources."""

import uuid
from datetime import datetime, timezone

import structlog

from resource_manager.exceptions import ResourceNotFoundError
from resource_manager.models import Link, Resource
from resource_manager.store import ResourceStore

logger = structlog.get_logger()

TASK_TYPE = "task"


def create_task(id: str, title: str, completed: bool = False) -> Resource:
    """Create a task resource with its hypermedia controls.

    Args:
        id: Task ID
        title: Task title
        completed: Initial completion flag

    Returns:
        Task resource in the "active" state
    """
    task = Resource(
        type=TASK_TYPE,
        id=id,
        properties={
            "title": title,
            "completed": completed,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        },
        state="active",
    )
    task.add_link("self", Link(href=f"/tasks/{id}", method="GET"))
    task.add_link("update", Link(href=f"/tasks/{id}", method="PUT"))
    task.add_link("delete", Link(href=f"/tasks/{id}", method="DELETE"))
    task.add_link("toggle", Link(href=f"/tasks/{id}/toggle", method="POST", title="Toggle completion status"))
    return task


def create_task_collection(tasks: list[Resource]) -> Resource:
    """Create a collection resource embedding the given tasks."""
    collection = Resource(type="collection", id="tasks", properties={"count": len(tasks)})
    collection.add_link("self", Link(href="/tasks", method="GET"))
    collection.add_link("create", Link(href="/tasks", method="POST", title="Create a new task"))
    for task in tasks:
        collection.add_embedded("tasks", task)
    return collection


class TodoApp:
    """Todo list whose tasks live in a resource store."""

    def __init__(self, store: ResourceStore) -> None:
        self.store = store

    async def seed(self) -> None:
        """Populate the store with sample tasks."""
        await self.store.create_resource(create_task("task-1", "Learn the resource framework"))
        await self.store.create_resource(create_task("task-2", "Build a hypermedia app"))
        await self.store.create_resource(create_task("task-3", "Integrate with an MCP client", completed=True))
        logger.info("Seeded sample tasks", count=3)

    async def get_tasks(self) -> Resource:
        tasks = await self.store.list_resources(TASK_TYPE)
        return create_task_collection(tasks)

    async def get_task(self, id: str) -> Resource:
        task = await self.store.get_resource(TASK_TYPE, id)
        if task is None:
            raise ResourceNotFoundError(TASK_TYPE, id)
        return task

    async def create_task(self, title: str) -> Resource:
        task = create_task(f"task-{uuid.uuid4().hex[:12]}", title)
        await self.store.create_resource(task)
        logger.info("Task created", id=task.id, title=title)
        return task

    async def toggle_task(self, id: str) -> Resource:
        """Flip a task's completion flag and move it between "active" and "completed"."""
        task = await self.get_task(id)
        completed = not task.get_property("completed")
        task.set_property("completed", completed)
        task.state = "completed" if completed else "active"
        await self.store.update_resource(task)
        logger.info("Task toggled", id=id, completed=completed)
        return task

    async def delete_task(self, id: str) -> bool:
        return await self.store.delete_resource(TASK_TYPE, id)
