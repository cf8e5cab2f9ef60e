from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Any, Dict, List


def write_file(root: Path, relpath: str, content: str = "x") -> Path:
    p = root / relpath
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")
    return p


def tree_snapshot(root: Path) -> Dict[str, bytes]:
    """Map of relative posix path -> bytes for every file under root."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


def zip_snapshot(path: Path) -> Dict[str, bytes]:
    with zipfile.ZipFile(path) as zf:
        return {info.filename: zf.read(info) for info in zf.infolist() if not info.is_dir()}


def warnings_in(records: List[Dict[str, Any]]) -> List[str]:
    return [r["message"] for r in records if r["level"].name == "WARNING"]
