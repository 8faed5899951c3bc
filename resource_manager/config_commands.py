"""Configuration commands for resource manager CLI."""

import sys

from cyclopts import App

from resource_manager.config import get_config
from resource_manager.exceptions import ConfigurationError
from resource_manager.store import DEFAULT_DB_PATH, STORAGE_KINDS

config_app = App(name="config", help="Manage configuration")


def _scope(global_: bool) -> str:
    return "global" if global_ else "local"


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Set a configuration setting.

    Args:
        key: Configuration key, e.g. storage.kind, storage.namespace or storage.path
        value: Configuration value
        global_: If True, set in global config. If False, set in local config.
    """
    if key == "storage.kind" and (value not in STORAGE_KINDS or value == "custom"):
        print(f"Invalid storage kind '{value}', expected one of: memory, durable")
        sys.exit(1)
    config = get_config(use_global=global_)
    config.set(key, value)
    print(f"Set {key} = {value} ({_scope(global_)})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Unset a configuration setting."""
    config = get_config(use_global=global_)
    config.unset(key)
    print(f"Unset {key} ({_scope(global_)})")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Get the value of a configuration setting."""
    value = get_config(use_global=global_).get(key)
    if value is None:
        print(f"{key} is not set")
    else:
        print(f"{key} = {value}")


@config_app.command(name="list")
def list_config(global_: bool = False) -> None:
    """List all configuration settings (merged with global settings unless --global)."""
    settings = get_config(use_global=global_).list()

    if not settings:
        print(f"No {_scope(global_)} configuration settings")
        return

    print(f"{'Global' if global_ else 'Configuration'} settings:\n")
    for key, value in settings.items():
        print(f"{key} = {value}")


@config_app.command
def storage() -> None:
    """Show the effective storage backend."""
    try:
        storage_config = get_config().storage_config()
    except ConfigurationError as e:
        print(f"Invalid storage configuration: {e}")
        sys.exit(1)

    print(f"kind = {storage_config.kind}")
    print(f"namespace = {storage_config.namespace or '(none)'}")
    if storage_config.kind == "durable":
        print(f"path = {storage_config.path or DEFAULT_DB_PATH}")
