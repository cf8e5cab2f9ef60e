"""
Project Configuration
=====================
Loading of zmpack.json into an immutable ProjectConfig.

Example zmpack.json:

    {
        "name": "demo",
        "targetPath": "../releases",
        "copyBefore": [["command", "npm run build"]],
        "files": ["dist", "package.json"],
        "copyAfter": [["delete", "dist"]],
        "packBefore": [["command", "npm install --production"]],
        "packAfter": []
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from loguru import logger

from zmpack.actions import Action, parse_actions
from zmpack.config import PACK
from zmpack.errors import ConfigError, ConfigMissingError
from zmpack.utils.schema_validation import validate_project_config_payload

STAGE_KEYS = {
    "copy_before": "copyBefore",
    "copy_after": "copyAfter",
    "pack_before": "packBefore",
    "pack_after": "packAfter",
}


@dataclass(frozen=True)
class ProjectConfig:
    """Decoded zmpack.json."""

    name: str
    target_path: Path
    files: Tuple[str, ...] = ()
    copy_before: Tuple[Action, ...] = ()
    copy_after: Tuple[Action, ...] = ()
    pack_before: Tuple[Action, ...] = ()
    pack_after: Tuple[Action, ...] = ()

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], *, base_dir: Optional[Path] = None) -> "ProjectConfig":
        """Build a config from decoded JSON.

        Args:
            payload: Decoded zmpack.json object.
            base_dir: Directory a relative targetPath is resolved against.

        Raises:
            ConfigError: When the payload fails validation.
        """
        try:
            validate_project_config_payload(payload)
        except ValueError as e:
            raise ConfigError(str(e)) from e

        target_path = Path(payload["targetPath"]).expanduser()
        if not target_path.is_absolute() and base_dir is not None:
            target_path = Path(base_dir) / target_path

        stages = {attr: parse_actions(payload.get(key), stage=key) for attr, key in STAGE_KEYS.items()}

        return cls(
            name=payload["name"],
            target_path=target_path,
            files=tuple(payload.get("files") or ()),
            **stages,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "targetPath": str(self.target_path),
            "files": list(self.files),
        }
        for attr, key in STAGE_KEYS.items():
            payload[key] = [a.to_list() for a in getattr(self, attr)]
        return payload


def load_project_config(
    project_dir: Union[str, Path],
    config_name: str = PACK.CONFIG_FILENAME,
) -> ProjectConfig:
    """Read and validate the config file in project_dir.

    Raises:
        ConfigMissingError: When the file does not exist.
        ConfigError: When the file is not valid UTF-8 JSON or fails validation.
    """
    project_dir = Path(project_dir)
    config_path = project_dir / config_name
    if not config_path.is_file():
        raise ConfigMissingError(f'"{config_name}" is required')

    try:
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f'"{config_name}" is not valid JSON: {e}') from e

    config = ProjectConfig.from_dict(payload, base_dir=project_dir)
    logger.bind(component="main").debug('loaded "{}" for "{}"', config_path, config.name)
    return config
