"""Staging directory and archive naming.

Names are derived from the wall clock at pipeline start with one-second
granularity. Two runs for the same project name within the same second get
distinct staging directories through a numeric suffix; their archive paths
would still collide, and the second pack stage fails instead of overwriting.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """Return YYYYMMDDHHMMSS for moment (default: now, local time)."""
    t = moment or datetime.now()
    return f"{t.year}{t.month:02d}{t.day:02d}{t.hour:02d}{t.minute:02d}{t.second:02d}"


def staging_dir_name(name: str, timestamp: str) -> str:
    return f"{name}-{timestamp}"


def archive_file_name(name: str, timestamp: str) -> str:
    return f"{name}.{timestamp}.zip"


def target_archive_path(target_dir: Path, name: str, timestamp: str) -> Path:
    return Path(target_dir) / archive_file_name(name, timestamp)


def allocate_staging_dir(temp_root: Path, name: str, timestamp: str) -> Path:
    """Create a fresh staging directory under temp_root and return its path.

    The directory is created with an exclusive mkdir. When the base name is
    taken, "-1", "-2", ... is appended until a free name is found.
    """
    base = staging_dir_name(name, timestamp)
    candidate = Path(temp_root) / base
    suffix = 0
    while True:
        try:
            candidate.mkdir()
            return candidate
        except FileExistsError:
            suffix += 1
            candidate = Path(temp_root) / f"{base}-{suffix}"
