"""Shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import pytest
from loguru import logger


@pytest.fixture
def temp_project_folder(tmp_path: Path) -> Path:
    project_folder = tmp_path / "project"
    project_folder.mkdir()
    return project_folder


@pytest.fixture
def temp_root(tmp_path: Path) -> Path:
    root = tmp_path / "tmp"
    root.mkdir()
    return root


@pytest.fixture
def log_records():
    """Collect loguru records emitted during a test."""
    records: List[Dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="TRACE")
    yield records
    logger.remove(handler_id)
