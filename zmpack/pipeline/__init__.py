"""Packing pipeline.

This package sequences the six packing stages (copyBefore, copy, copyAfter,
packBefore, pack, packAfter) around a temporary staging directory.
"""

from zmpack.pipeline.context import PackContext
from zmpack.pipeline.runner import STAGES, pack_project, run_pack_pipeline

__all__ = ["PackContext", "STAGES", "pack_project", "run_pack_pipeline"]
