"""Packing run context.

This module defines a small, serializable state object used by the pipeline
runner. It stores stable primitives only (paths as strings, per-stage
summaries, checkpoint times) so a run can be written out for debugging.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class PackContext:
    """State accumulated while the pipeline runs."""

    project_folder: Path
    name: str
    timestamp: str
    run_id: str = field(default_factory=lambda: uuid4().hex)
    created_at: str = field(default_factory=_utc_now_iso)

    staging_dir: Optional[Path] = None
    archive_path: Optional[Path] = None
    archive_bytes: Optional[int] = None
    staging_removed: bool = False

    completed_stages: List[str] = field(default_factory=list)
    checkpoints: Dict[str, str] = field(default_factory=dict)
    stage_results: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def mark_checkpoint(self, name: str) -> None:
        if not name.strip():
            return
        self.checkpoints[name] = _utc_now_iso()

    def record_stage_result(self, stage: str, result: Any) -> None:
        payload: Dict[str, Any]

        if hasattr(result, "to_dict") and callable(getattr(result, "to_dict")):
            payload = result.to_dict()
        elif isinstance(result, dict):
            payload = dict(result)
        else:
            payload = {"repr": repr(result)}

        self.stage_results[stage] = payload
        self.completed_stages.append(stage)
        self.mark_checkpoint(f"{stage}_complete")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "schema_version": "1.0",
            "run_id": self.run_id,
            "created_at": self.created_at,
            "project_folder": str(self.project_folder),
            "name": self.name,
            "timestamp": self.timestamp,
            "staging_dir": str(self.staging_dir) if self.staging_dir else None,
            "archive_path": str(self.archive_path) if self.archive_path else None,
            "archive_bytes": self.archive_bytes,
            "staging_removed": self.staging_removed,
            "completed_stages": list(self.completed_stages),
            "checkpoints": dict(self.checkpoints),
            "stage_results": dict(self.stage_results),
        }

    def write_json(self, path: Path) -> None:
        path.write_text(
            json.dumps(self.to_payload(), indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
        )
