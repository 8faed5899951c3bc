"""Todo example commands for resource manager CLI."""

import asyncio
import json

from cyclopts import App

from resource_manager.store import ResourceStore
from resource_manager.todo import TodoApp

todo_app = App(name="todo", help="Manage tasks of the example todo application")


@todo_app.command(name="list")
def list_tasks() -> None:
    """List all tasks."""
    from resource_manager.cli import run_with_store

    collection = run_with_store(lambda store: TodoApp(store).get_tasks())
    tasks = collection.get_embedded("tasks") or []

    print(f"Found {len(tasks)} task(s):\n")
    for task in tasks:
        status_marker = "○" if task.get_property("completed") else "●"
        print(f"{status_marker} {task.id}: {task.get_property('title')}")


@todo_app.command
def show(id: str) -> None:
    """Show a task."""
    from resource_manager.cli import run_with_store

    task = run_with_store(lambda store: TodoApp(store).get_task(id))
    print(json.dumps(task.to_dict(), indent=2))


@todo_app.command
def add(title: str) -> None:
    """Add a task."""
    from resource_manager.cli import run_with_store

    task = run_with_store(lambda store: TodoApp(store).create_task(title))
    print(f"Created task {task.id}: {title}")


@todo_app.command
def toggle(id: str) -> None:
    """Toggle a task's completion status."""
    from resource_manager.cli import run_with_store

    task = run_with_store(lambda store: TodoApp(store).toggle_task(id))
    print(f"Task {task.id} is now {task.state}")


@todo_app.command
def delete(id: str) -> None:
    """Delete a task."""
    from resource_manager.cli import run_with_store

    deleted = run_with_store(lambda store: TodoApp(store).delete_task(id))
    if deleted:
        print(f"Deleted task {id}")
    else:
        print(f"Task {id} not found")


@todo_app.command
def demo() -> None:
    """Walk through the todo application on a fresh in-memory store."""

    async def run() -> None:
        app = TodoApp(ResourceStore())
        try:
            await app.seed()
            print("=== All Tasks ===")
            print(json.dumps((await app.get_tasks()).to_dict(), indent=2))
            print("\n=== Toggle Task ===")
            print(json.dumps((await app.toggle_task("task-1")).to_dict(), indent=2))
            print("\n=== Create Task ===")
            print(json.dumps((await app.create_task("Implement MCP integration")).to_dict(), indent=2))
            print("\n=== Delete Task ===")
            print(f"Task deleted: {await app.delete_task('task-2')}")
            print("\n=== Updated Task List ===")
            print(json.dumps((await app.get_tasks()).to_dict(), indent=2))
        finally:
            await app.store.close()

    asyncio.run(run())
