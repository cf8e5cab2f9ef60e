"""
Action Runner
=============
Decoding and execution of stage actions.

An action in zmpack.json is a JSON array tagged by its first element:

    ["delete", "dist"]
    ["command", "npm run build"]

Actions are decoded once when the config is loaded. Unknown tags decode to
UnknownAction so the runner can warn and move on; malformed entries are
config errors.

Each stage runs against an explicit working directory. The process working
directory is never changed.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from loguru import logger

from zmpack.errors import ConfigError, ShellCommandError
from zmpack.fs_walker import join_under, remove_item

action_logger = logger.bind(component="action")
main_logger = logger.bind(component="main")


@dataclass(frozen=True)
class DeleteAction:
    """Remove a file or directory tree relative to the stage working directory."""

    item_name: str
    tag: str = field(default="delete", init=False)

    def to_list(self) -> List[str]:
        return [self.tag, self.item_name]


@dataclass(frozen=True)
class CommandAction:
    """Run a command line through the shell in the stage working directory."""

    command_line: str
    tag: str = field(default="command", init=False)

    def to_list(self) -> List[str]:
        return [self.tag, self.command_line]


@dataclass(frozen=True)
class UnknownAction:
    """An action whose tag is not recognized. Skipped with a warning."""

    tag: str
    args: Tuple[str, ...] = ()

    def to_list(self) -> List[str]:
        return [self.tag, *self.args]


Action = Union[DeleteAction, CommandAction, UnknownAction]


def _single_argument(raw: Sequence[Any], *, where: str) -> str:
    tag = raw[0]
    if len(raw) != 2 or not isinstance(raw[1], str) or not raw[1].strip():
        raise ConfigError(f"Invalid action at '{where}': \"{tag}\" takes exactly one non-empty string argument")
    return raw[1]


def parse_action(raw: Any, *, where: str = "action") -> Action:
    """Decode one JSON action.

    Args:
        raw: Decoded JSON value, expected to be a list of strings.
        where: Location used in error messages (for example 'copyBefore/0').

    Raises:
        ConfigError: When the entry is malformed.
    """
    if not isinstance(raw, list) or not raw:
        raise ConfigError(f"Invalid action at '{where}': expected a non-empty array")

    tag = raw[0]
    if not isinstance(tag, str) or not tag:
        raise ConfigError(f"Invalid action at '{where}': tag must be a non-empty string")

    if tag == "delete":
        return DeleteAction(item_name=_single_argument(raw, where=where))
    if tag == "command":
        return CommandAction(command_line=_single_argument(raw, where=where))

    if not all(isinstance(a, str) for a in raw[1:]):
        raise ConfigError(f"Invalid action at '{where}': arguments must be strings")
    return UnknownAction(tag=tag, args=tuple(raw[1:]))


def parse_actions(raw: Any, *, stage: str) -> Tuple[Action, ...]:
    """Decode a stage's action list. A missing list (None) decodes as empty."""
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ConfigError(f"Invalid action list at '{stage}': expected an array")
    return tuple(parse_action(item, where=f"{stage}/{i}") for i, item in enumerate(raw))


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of a command action."""

    command_line: str
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass
class StageResult:
    """Summary of one action stage."""

    stage: str
    working_dir: Path
    executed: int = 0
    skipped: int = 0
    deleted: List[str] = field(default_factory=list)
    commands: List[CommandResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "stage": self.stage,
            "working_dir": str(self.working_dir),
            "executed": self.executed,
            "skipped": self.skipped,
            "deleted": list(self.deleted),
            "commands": [
                {"command_line": c.command_line, "returncode": c.returncode}
                for c in self.commands
            ],
        }


def to_text(value: Optional[bytes]) -> str:
    if not value:
        return ""
    return value.decode("utf-8", errors="replace")


async def run_shell_command(command_line: str, *, cwd: Path, stage: str = "") -> CommandResult:
    """Run command_line through the system shell and wait for it.

    Raises:
        ShellCommandError: When the process cannot be spawned or exits non-zero.
    """
    try:
        proc = await asyncio.create_subprocess_shell(
            command_line,
            cwd=str(cwd),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        out, err = await proc.communicate()
    except OSError as e:
        raise ShellCommandError(
            stage=stage,
            command_line=command_line,
            returncode=None,
            reason=f"could not be started: {type(e).__name__}: {e}",
        ) from e

    result = CommandResult(
        command_line=command_line,
        returncode=int(proc.returncode if proc.returncode is not None else -1),
        stdout=to_text(out),
        stderr=to_text(err),
    )

    if result.stdout.strip():
        action_logger.info("stdout:\n{}", result.stdout.rstrip("\n"))
    if result.stderr.strip():
        action_logger.info("stderr:\n{}", result.stderr.rstrip("\n"))

    if not result.success:
        raise ShellCommandError(
            stage=stage,
            command_line=command_line,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    return result


async def run_actions(stage: str, working_dir: Path, actions: Sequence[Action]) -> StageResult:
    """Run a stage's actions in order against working_dir.

    Each action completes before the next starts, so filesystem changes made
    by a command are visible to the following actions.

    Raises:
        ShellCommandError: When a command action fails. Remaining actions are not run.
        UnsupportedEntryKindError: When a delete hits an entry it cannot remove.
    """
    working_dir = Path(working_dir)
    result = StageResult(stage=stage, working_dir=working_dir)
    action_logger.trace('{}: working directory "{}"', stage, working_dir)

    for action in actions:
        if isinstance(action, DeleteAction):
            action_logger.info('DELETE "{}"', action.item_name)
            if remove_item(join_under(working_dir, action.item_name)):
                result.deleted.append(action.item_name)
            result.executed += 1
        elif isinstance(action, CommandAction):
            action_logger.info('COMMAND "{}"', action.command_line)
            cmd_result = await run_shell_command(action.command_line, cwd=working_dir, stage=stage)
            result.commands.append(cmd_result)
            result.executed += 1
        else:
            main_logger.warning('unknown action "{}" in {}', action.tag, stage)
            result.skipped += 1

    return result
