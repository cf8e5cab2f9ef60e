"""ZIP archive creation.

Builds the output archive from the staging directory. The directory's
contents land at the archive root, not under the directory's own name.
"""

from __future__ import annotations

import os
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from zmpack.config import PACK
from zmpack.errors import ArchiveError
from zmpack.fs_walker import EntryKind, entry_kind

archiver_logger = logger.bind(component="archiver")

WarningCallback = Callable[[str], None]


@dataclass(frozen=True)
class ArchiveResult:
    path: Path
    entries: int
    total_bytes: int


def _log_warning(message: str) -> None:
    archiver_logger.warning(message)


def _add_tree(
    zf: zipfile.ZipFile,
    root: Path,
    directory: Path,
    on_warning: WarningCallback,
) -> int:
    added = 0
    for name in sorted(os.listdir(directory)):
        path = directory / name
        arcname = path.relative_to(root).as_posix()
        kind = entry_kind(path)
        if kind is EntryKind.FILE:
            zf.write(path, arcname)
            added += 1
        elif kind is EntryKind.DIRECTORY:
            # Explicit entry so empty directories survive extraction.
            zf.write(path, arcname)
            added += 1
            added += _add_tree(zf, root, path, on_warning)
        else:
            on_warning(f'"{arcname}" is not either a file or a directory, skip')
    return added


def create_zip_archive(
    source_dir: Path,
    target_path: Path,
    *,
    compress_level: Optional[int] = None,
    on_warning: Optional[WarningCallback] = None,
) -> ArchiveResult:
    """Archive the whole tree under source_dir into a new zip at target_path.

    Args:
        source_dir: Directory whose contents become the archive root.
        target_path: Output file. Must not exist yet.
        compress_level: Deflate level 0-9. Defaults to PACK.COMPRESSION_LEVEL.
        on_warning: Receives non-fatal warnings. Defaults to logging them.

    Returns:
        ArchiveResult with the entry count and finalized archive size.

    Raises:
        ArchiveError: When the archive cannot be written. A partial file is removed.
    """
    source_dir = Path(source_dir)
    target_path = Path(target_path)
    level = PACK.COMPRESSION_LEVEL if compress_level is None else int(compress_level)
    warn = on_warning or _log_warning

    if entry_kind(source_dir) is not EntryKind.DIRECTORY:
        raise ArchiveError(f'cannot archive "{source_dir}": not a directory')

    created = False
    try:
        # Mode "x" refuses to overwrite an existing archive.
        with zipfile.ZipFile(
            target_path,
            "x",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=level,
            strict_timestamps=False,
        ) as zf:
            created = True
            entries = _add_tree(zf, source_dir, source_dir, warn)
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        archiver_logger.error("{}: {}", type(e).__name__, e)
        if created:
            try:
                target_path.unlink()
            except OSError:
                archiver_logger.warning('could not remove partial archive "{}"', target_path)
        raise ArchiveError(f'failed to write "{target_path}": {type(e).__name__}: {e}') from e

    total_bytes = target_path.stat().st_size
    archiver_logger.info("finalized, total {} bytes", total_bytes)
    return ArchiveResult(path=target_path, entries=entries, total_bytes=total_bytes)
