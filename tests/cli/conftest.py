# tests/cli/conftest.py
"""Shared fixtures for CLI tests."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import yaml


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """The CLI points the root handler at CliRunner's stderr, which closes after invoke."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def config_file(tmp_path: Path, properties: dict[str, str]) -> Path:
    """Job properties written as a flat YAML file."""
    path = tmp_path / "job.yaml"
    path.write_text(yaml.safe_dump(properties, sort_keys=False))
    return path
