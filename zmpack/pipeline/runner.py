"""Packing pipeline runner.

Runs the six stages in order:

    copyBefore  actions, in the project folder
    copy        allow-listed files into a fresh staging directory
    copyAfter   actions, in the project folder
    packBefore  actions, in the staging directory
    pack        zip the staging directory into the target folder
    packAfter   actions, in the staging directory

then removes the staging directory. Any failure propagates immediately;
later stages and the staging cleanup are skipped, so a failed run leaves its
staging directory behind for inspection.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union, cast

from loguru import logger

from zmpack.actions import run_actions
from zmpack.archive import create_zip_archive
from zmpack.config import PACK
from zmpack.fs_walker import copy_item, join_under, remove_tree_recursive
from zmpack.pipeline.context import PackContext
from zmpack.pipeline.staging import allocate_staging_dir, format_timestamp, target_archive_path
from zmpack.project_config import ProjectConfig, load_project_config

main_logger = logger.bind(component="main")

STAGES = ("copyBefore", "copy", "copyAfter", "packBefore", "pack", "packAfter")


def _copy_files(project_folder: Path, staging_dir: Path, files: tuple[str, ...]) -> Dict[str, Any]:
    copied: List[str] = []
    skipped: List[str] = []
    for item_name in files:
        if copy_item(join_under(project_folder, item_name), join_under(staging_dir, item_name)):
            copied.append(item_name)
        else:
            skipped.append(item_name)
    return {
        "success": True,
        "staging_dir": str(staging_dir),
        "copied": copied,
        "skipped": skipped,
    }


async def run_pack_pipeline(
    project_folder: Union[str, Path],
    config: ProjectConfig,
    *,
    temp_root: Optional[Union[str, Path]] = None,
    now: Optional[datetime] = None,
    compress_level: Optional[int] = None,
    context_out: Optional[Path] = None,
) -> PackContext:
    """Run every stage for config against project_folder.

    Args:
        project_folder: Directory holding the files to pack.
        config: Decoded zmpack.json.
        temp_root: Parent of the staging directory. Defaults to PACK.TEMP_ROOT.
        now: Pipeline start time used for naming. Defaults to the wall clock.
        compress_level: Deflate level passed to the archiver.
        context_out: When set, the run context is written here as JSON,
            including after a failure.

    Returns:
        PackContext; archive_path holds the produced zip.

    Raises:
        ShellCommandError, UnsupportedEntryKindError, ArchiveError, OSError:
            Whatever stops a stage. Nothing is retried.
    """
    pf = Path(project_folder).expanduser().resolve()
    timestamp = format_timestamp(now)
    context = PackContext(project_folder=pf, name=config.name, timestamp=timestamp)
    context.mark_checkpoint("start")

    try:
        await _run_stages(context, pf, config, temp_root=temp_root, compress_level=compress_level)
    finally:
        if context_out is not None:
            try:
                context.write_json(Path(context_out))
            except OSError:
                main_logger.exception('Failed to write run context to "{}"', context_out)

    return context


async def _run_stages(
    context: PackContext,
    pf: Path,
    config: ProjectConfig,
    *,
    temp_root: Optional[Union[str, Path]],
    compress_level: Optional[int],
) -> None:
    main_logger.info("run copyBefore")
    context.record_stage_result("copyBefore", await run_actions("copyBefore", pf, config.copy_before))

    main_logger.info("run copy")
    root = Path(temp_root) if temp_root is not None else Path(PACK.TEMP_ROOT)
    staging_dir = allocate_staging_dir(root, config.name, context.timestamp)
    context.staging_dir = staging_dir
    context.record_stage_result("copy", _copy_files(pf, staging_dir, config.files))

    main_logger.info("run copyAfter")
    context.record_stage_result("copyAfter", await run_actions("copyAfter", pf, config.copy_after))

    main_logger.info("run packBefore")
    context.record_stage_result("packBefore", await run_actions("packBefore", staging_dir, config.pack_before))

    main_logger.info("run pack")
    archive_path = target_archive_path(config.target_path, config.name, context.timestamp)
    archive = await asyncio.to_thread(
        create_zip_archive,
        staging_dir,
        archive_path,
        compress_level=compress_level,
    )
    context.archive_path = archive.path
    context.archive_bytes = archive.total_bytes
    context.record_stage_result(
        "pack",
        {"success": True, "archive_path": str(archive.path), "entries": archive.entries, "bytes": archive.total_bytes},
    )

    main_logger.info("run packAfter")
    context.record_stage_result("packAfter", await run_actions("packAfter", staging_dir, config.pack_after))

    remove_tree_recursive(staging_dir)
    context.staging_removed = True
    context.mark_checkpoint("end")


async def pack_project(
    project_folder: Union[str, Path],
    *,
    config_name: str = PACK.CONFIG_FILENAME,
    temp_root: Optional[Union[str, Path]] = None,
    context_out: Optional[Path] = None,
) -> Path:
    """Load the config file from project_folder, run the pipeline, return the archive path."""
    pf = Path(project_folder).expanduser().resolve()
    config = load_project_config(pf, config_name)
    context = await run_pack_pipeline(pf, config, temp_root=temp_root, context_out=context_out)
    return cast(Path, context.archive_path)
