"""
Error Types
===========
Exceptions raised by the packing pipeline.

Every fatal condition derives from ZmpackError so the CLI can report it once
and exit non-zero. Each type also derives from the closest builtin so callers
can keep catching FileNotFoundError, ValueError or OSError where that reads
better.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ZmpackError(Exception):
    """Base class for fatal pipeline errors."""


class ConfigMissingError(ZmpackError, FileNotFoundError):
    """Raised when zmpack.json is not present in the project directory."""


class ConfigError(ZmpackError, ValueError):
    """Raised when zmpack.json is unreadable or does not match the schema."""


class UnsupportedEntryKindError(ZmpackError, OSError):
    """Raised by strict removal when an entry is neither file nor directory."""

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f'cannot remove "{self.path}", is not either a file or directory')


class ShellCommandError(ZmpackError, RuntimeError):
    """Raised when a command action exits non-zero or cannot be spawned."""

    def __init__(
        self,
        *,
        stage: str,
        command_line: str,
        returncode: Optional[int],
        stdout: str = "",
        stderr: str = "",
        reason: Optional[str] = None,
    ):
        self.stage = stage
        self.command_line = command_line
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        if reason is None:
            reason = f"exited with code {returncode}"
        super().__init__(f'{stage}: command "{command_line}" {reason}')


class ArchiveError(ZmpackError, RuntimeError):
    """Raised when the archive cannot be written."""
