"""Command line entrypoint.

Usage:
    zmpack [project_folder] [--config zmpack.json] [--log-level INFO]
           [--log-file PATH] [--context-out PATH]

Exit code behavior:
- 0 after the archive is written; its path is logged.
- 1 on any fatal error, logged once.
- 2 for CLI usage errors (argparse).
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from zmpack import __version__
from zmpack.config import LOGGING, PACK
from zmpack.errors import ZmpackError
from zmpack.pipeline.runner import pack_project

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level: str = LOGGING.LEVEL, log_file: Optional[str] = None) -> None:
    """Replace loguru's default sink with the zmpack format."""
    logger.remove()
    logger.configure(extra={"component": "main"})
    logger.add(sys.stderr, level=level.upper(), format=LOGGING.FORMAT)
    if log_file:
        logger.add(log_file, level="TRACE", format=LOGGING.FORMAT, encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zmpack",
        description="Package a project folder into a timestamped zip archive",
    )
    parser.add_argument(
        "project_folder",
        nargs="?",
        default=".",
        help="Folder containing the config file (default: current directory)",
    )
    parser.add_argument(
        "--config",
        default=PACK.CONFIG_FILENAME,
        help=f"Config file name inside the project folder (default: {PACK.CONFIG_FILENAME})",
    )
    parser.add_argument(
        "--log-level",
        default=LOGGING.LEVEL,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Console log level (default: INFO)",
    )
    parser.add_argument("--log-file", default=None, help="Also write a TRACE level log to this file")
    parser.add_argument("--context-out", default=None, help="Write the run context JSON to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    main_logger = logger.bind(component="main")
    context_out = Path(args.context_out).expanduser().resolve() if args.context_out else None

    try:
        archive_path = asyncio.run(
            pack_project(args.project_folder, config_name=args.config, context_out=context_out)
        )
    except (ZmpackError, OSError) as e:
        main_logger.error("{}: {}", type(e).__name__, e)
        return 1

    main_logger.info('packed on "{}"', archive_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
