"""Configuration management for resource-manager using YAML files."""

from pathlib import Path
from typing import Any

import structlog
import yaml

from resource_manager.exceptions import ConfigurationError
from resource_manager.store import StorageConfig

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".resource-manager"

DEFAULT_STORAGE_KIND = "durable"


class Config:
    """Storage and CLI settings kept in a flat YAML mapping of dotted keys.

    A project file at ``./.resource-manager/config.yaml`` is layered over a
    per-user file at ``~/.resource-manager/config.yaml``. Writes always go to the
    file this instance was opened on; reads see the project value first.
    """

    def __init__(
        self,
        use_global: bool = False,
        config_dir: Path | None = None,
        global_config_dir: Path | None = None,
    ) -> None:
        """Open the project or per-user settings file.

        Args:
            use_global: Read and write only the per-user file
            config_dir: Directory of the file to open, replacing the default location
            global_config_dir: Directory of the per-user file, defaulting to one under the home directory
        """
        global_dir = Path(global_config_dir) if global_config_dir is not None else Path.home() / CONFIG_DIR_NAME
        if config_dir is not None:
            self.config_dir = Path(config_dir)
            self.is_global = use_global
        elif use_global:
            self.config_dir = global_dir
            self.is_global = True
        else:
            self.config_dir = Path.cwd() / CONFIG_DIR_NAME
            self.is_global = False

        self.config_file = self.config_dir / "config.yaml"
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config: dict[str, Any] = self._load()

        # Project settings fall back to the per-user file
        self._global_config: dict[str, Any] = {}
        if not self.is_global:
            global_config_file = global_dir / "config.yaml"
            if global_config_file.exists() and global_config_file != self.config_file:
                try:
                    with open(global_config_file, "r") as f:
                        self._global_config = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logger.warning("Failed to load global config", error=str(e))

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    def _load(self) -> dict[str, Any]:
        """Read this instance's file, treating a missing file as empty settings."""
        if not self.config_file.exists():
            logger.debug("Config file does not exist, initializing empty config")
            return {}

        try:
            with open(self.config_file, "r") as f:
                config = yaml.safe_load(f) or {}
                logger.debug("Config loaded successfully", keys=list(config.keys()))
                return config
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load config", error=str(e))
            raise ValueError(f"Failed to load config from {self.config_file}: {e}") from e

    def _save(self) -> None:
        try:
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)
            logger.debug("Config saved successfully")
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to save config", error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e

    def get(self, key: str, default: str | None = None) -> str | None:
        """Look up a dotted key, consulting the per-user file when the project file lacks it.

        Args:
            key: Dotted key such as ``storage.path``
            default: Returned when neither file defines the key

        Returns:
            The stored string, or ``default``
        """
        if key in self._config:
            logger.debug("Getting config value from local", key=key)
            return self._config[key]

        if not self.is_global and key in self._global_config:
            logger.debug("Getting config value from global", key=key)
            return self._global_config[key]

        logger.debug("Config value not found", key=key)
        return default

    def set(self, key: str, value: str) -> None:
        """Store a value under a dotted key and write the file immediately."""
        logger.debug("Setting config value", key=key)
        self._config[key] = value
        self._save()

    def unset(self, key: str) -> None:
        """Remove a dotted key from this file; the per-user value, if any, shows through again."""
        logger.debug("Unsetting config value", key=key)
        if key in self._config:
            del self._config[key]
            self._save()

    def list(self) -> dict[str, str]:
        """Return every effective setting, with project values overriding per-user ones."""
        if self.is_global:
            return self._config.copy()
        merged = self._global_config.copy()
        merged.update(self._config)
        logger.debug("Listing merged config values", count=len(merged))
        return merged

    def storage_config(self) -> StorageConfig:
        """Build the storage configuration from the ``storage.*`` keys.

        Without ``storage.kind`` the durable store is used, so data written by
        one command is visible to the next.

        Raises:
            ConfigurationError: If ``storage.kind`` is not a supported kind
        """
        kind = self.get("storage.kind", DEFAULT_STORAGE_KIND)
        if kind == "custom":
            raise ConfigurationError("Storage kind 'custom' cannot be configured from a file")
        return StorageConfig(
            kind=kind,  # type: ignore[arg-type]
            namespace=self.get("storage.namespace"),
            path=self.get("storage.path"),
        )


def get_config(use_global: bool = False) -> Config:
    """Get a configuration instance.

    Args:
        use_global: If True, return global config. If False, return local config with global fallback.

    Returns:
        Config instance
    """
    return Config(use_global=use_global)
