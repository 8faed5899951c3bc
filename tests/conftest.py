"""Shared test configuration."""

import pytest

from resource_manager.cli import configure_logging


@pytest.fixture(autouse=True)
def log_to_stderr() -> None:
    """Keep log output off stdout so command output can be parsed."""
    configure_logging("debug")
