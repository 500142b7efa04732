"""
Detached process spawning for the terminal front-end.

This module provides utilities for:
- Spawning a terminal fully detached from the parent's stdio and process group
- Platform-specific handling (Windows vs Unix)
- Observing exit without owning the process's lifetime

The spawned terminal is never waited on or killed by askterm; the parent
only polls its exit status as one possible completion signal.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from typing import Any, Protocol

from askterm.core.launch.models import LaunchSpec

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = sys.platform == "win32"
IS_UNIX = not IS_WINDOWS


class ObservedProcess(Protocol):
    """The only capability the coordinator keeps over a spawned process."""

    pid: int

    def poll(self) -> int | None: ...


def spawn_detached(spec: LaunchSpec) -> subprocess.Popen[bytes]:
    """
    Start a terminal described by a LaunchSpec, fully detached.

    Standard streams are not connected to the parent. On Unix the process
    gets its own session so it survives the parent; on Windows it gets its
    own process group and a visible console.

    Args:
        spec: Resolved launch target

    Returns:
        Popen handle, used only for exit observation

    Raises:
        OSError: If the process cannot be started (e.g. executable missing)
    """
    kwargs: dict[str, Any] = {
        "stdin": subprocess.DEVNULL,
        "stdout": subprocess.DEVNULL,
        "stderr": subprocess.DEVNULL,
        "shell": spec.use_shell,
        "close_fds": True,
    }

    if IS_UNIX:
        kwargs["start_new_session"] = True
    else:
        kwargs["creationflags"] = getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)

    command: str | list[str] = spec.executable if spec.use_shell else spec.argv

    logger.debug(f"Spawning terminal: {spec.describe()}")
    process = subprocess.Popen(command, **kwargs)
    logger.debug(f"Spawned terminal pid={process.pid}")
    return process


def exit_status(process: ObservedProcess) -> int | None:
    """
    Non-blocking exit check.

    Returns:
        The exit code if the process has terminated, otherwise None
    """
    try:
        return process.poll()
    except OSError as e:
        logger.debug(f"Exit check failed for pid={process.pid}: {e}")
        return None


__all__ = [
    "IS_UNIX",
    "IS_WINDOWS",
    "ObservedProcess",
    "exit_status",
    "spawn_detached",
]
