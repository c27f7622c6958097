"""Launch a project in its IDE via PATH or a JetBrains Toolbox script."""

from __future__ import annotations

import asyncio
import os
import shlex
import shutil
from dataclasses import dataclass

import structlog

from code_launcher.constants import DEFAULT_TOOLCHAIN, IDE_COMMANDS, toolbox_scripts_dir
from code_launcher.exceptions import LaunchError

log = structlog.get_logger("code_launcher.launcher")


@dataclass
class LaunchResult:
    command: str
    pid: int


def ide_command_for(toolchain: str) -> str:
    return IDE_COMMANDS.get(toolchain, IDE_COMMANDS[DEFAULT_TOOLCHAIN])


def find_toolbox_script(command: str) -> str | None:
    candidate = os.path.join(toolbox_scripts_dir(), command)
    return candidate if os.path.exists(candidate) else None


def resolve_command(toolchain: str) -> str | None:
    """Full path of the IDE launcher: PATH first, then Toolbox scripts."""
    command = ide_command_for(toolchain)
    return shutil.which(command) or find_toolbox_script(command)


async def launch_project(project_path: str, toolchain: str) -> LaunchResult:
    """Spawn the IDE for *project_path* through a login shell.

    The process is not awaited; it keeps running after the caller returns.

    Raises ``LaunchError`` when no launcher is found or spawning fails.
    """
    command = ide_command_for(toolchain)
    command_path = resolve_command(toolchain)
    if not command_path:
        raise LaunchError(
            f'Could not find "{command}" in PATH or "{toolbox_scripts_dir()}".'
        )

    shell_line = f"{shlex.quote(command_path)} {shlex.quote(project_path)}"
    log.info("launcher.spawning", toolchain=toolchain, command=command_path, project=project_path)
    try:
        proc = await asyncio.create_subprocess_exec(
            "/bin/sh",
            "-lc",
            shell_line,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as exc:
        log.warning("launcher.spawn_failed", command=command_path, error=str(exc))
        raise LaunchError(f"Failed to launch {command}: {exc}") from exc

    log.info("launcher.spawned", command=command_path, pid=proc.pid)
    return LaunchResult(command=command_path, pid=proc.pid)
