"""
Filesystem Walker
=================
Recursive copy and delete primitives used by the packing stages.

All functions take absolute paths from the caller and never consult the
process working directory. Entry kinds are classified with ``stat`` (symlinks
are followed), so a link to a file is copied as a file and a dangling link
counts as missing. Removal unlinks symlinks instead of following them.
"""

from __future__ import annotations

import os
import shutil
import stat
from enum import Enum
from pathlib import Path
from typing import Union

from loguru import logger

from zmpack.errors import UnsupportedEntryKindError

copy_logger = logger.bind(component="copy")
action_logger = logger.bind(component="action")

PathLike = Union[str, Path]


class EntryKind(str, Enum):
    MISSING = "missing"
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


def entry_kind(path: PathLike) -> EntryKind:
    """Classify a path as file, directory, other (fifo, socket, device) or missing."""
    try:
        mode = os.stat(path).st_mode
    except (FileNotFoundError, NotADirectoryError):
        return EntryKind.MISSING
    if stat.S_ISREG(mode):
        return EntryKind.FILE
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    return EntryKind.OTHER


def exists(path: PathLike) -> bool:
    """Return True when path exists. Never raises."""
    try:
        return os.path.exists(path)
    except (OSError, ValueError):
        return False


def join_under(base: PathLike, item_name: str) -> Path:
    """Join item_name onto base, keeping absolute names under base.

    ``Path("/w") / "/x"`` would discard the base, so a leading root or drive
    is dropped first: ``join_under("/w", "/x")`` is ``/w/x``.
    """
    item = Path(item_name)
    if item.anchor:
        item = Path(*item.parts[1:])
    return Path(base) / item


def copy_tree(source_path: PathLike, target_path: PathLike) -> int:
    """Mirror a directory tree into target_path.

    The target directory is created when missing (its parent must exist).
    Files are byte-copied and overwrite existing target files; entries already
    present in the target and absent from the source are left alone. Entries
    that are neither files nor directories are logged and skipped.

    Returns:
        Number of files copied.
    """
    source = Path(source_path)
    target = Path(target_path)
    if not exists(target):
        target.mkdir()

    copied = 0
    for item in sorted(os.listdir(source)):
        source_item = source / item
        target_item = target / item
        kind = entry_kind(source_item)
        if kind is EntryKind.FILE:
            shutil.copyfile(source_item, target_item)
            copied += 1
        elif kind is EntryKind.DIRECTORY:
            copied += copy_tree(source_item, target_item)
        else:
            copy_logger.warning('item "{}" is not either a file or a directory, skip', source_item)
    return copied


def copy_item(source_path: PathLike, target_path: PathLike) -> bool:
    """Copy one allow-listed item (file or directory) to target_path.

    Returns:
        True when the item was copied, False when it was skipped.
    """
    source = Path(source_path)
    kind = entry_kind(source)
    if kind is EntryKind.MISSING:
        copy_logger.warning('item "{}" not exists, skip', source)
        return False
    if kind is EntryKind.FILE:
        copy_logger.trace('copy file "{}"', source.name)
        shutil.copyfile(source, target_path)
        return True
    if kind is EntryKind.DIRECTORY:
        copy_logger.trace('copy directory "{}"', source.name)
        copy_tree(source, target_path)
        return True
    copy_logger.warning('item "{}" is not either a file or a directory, skip', source)
    return False


def remove_tree_recursive(path: PathLike) -> None:
    """Delete a directory and everything below it.

    Raises:
        UnsupportedEntryKindError: When an entry is neither file nor directory.
    """
    root = Path(path)
    for item in os.listdir(root):
        item_path = root / item
        if item_path.is_symlink():
            # Unlink the link itself, never what it points at.
            item_path.unlink()
            continue
        kind = entry_kind(item_path)
        if kind is EntryKind.FILE:
            item_path.unlink()
        elif kind is EntryKind.DIRECTORY:
            remove_tree_recursive(item_path)
        else:
            raise UnsupportedEntryKindError(item_path)
    root.rmdir()


def remove_item(path: PathLike) -> bool:
    """Delete a file or directory tree if it exists.

    A missing path is a silent no-op so delete actions stay idempotent.

    Returns:
        True when something was removed.
    """
    target = Path(path)
    if target.is_symlink():
        target.unlink()
        return True
    kind = entry_kind(target)
    if kind is EntryKind.MISSING:
        return False
    if kind is EntryKind.FILE:
        target.unlink()
        return True
    if kind is EntryKind.DIRECTORY:
        remove_tree_recursive(target)
        return True
    action_logger.warning('path "{}" is not either file or directory', target)
    return False
