"""
Terminal resolution for the launch service.

Decides how the prompt front-end gets started: which terminal emulator to
use, and which argument template that terminal expects for a window title
and a command to execute. The resolver never decides *what* runs inside the
terminal; it receives one composed command string and only chooses how it
gets executed.
"""

from __future__ import annotations

import shutil
import sys
from collections.abc import Callable
from pathlib import Path, PurePath
from typing import Optional

from askterm.core.launch.models import DEFAULT_TITLE, LaunchSpec

Which = Callable[[str], Optional[str]]

# Probe order for Linux when no preference is configured.
# GPU-accelerated terminals first, xterm last.
LINUX_TERMINALS: tuple[str, ...] = (
    "kitty",
    "alacritty",
    "gnome-terminal",
    "konsole",
    "xterm",
)


class LaunchError(Exception):
    """Base exception for launch resolution errors."""


class NoTerminalAvailableError(LaunchError):
    """No usable terminal could be resolved for this platform."""

    def __init__(self, platform: str, preferred: str | None = None) -> None:
        self.platform = platform
        self.preferred = preferred
        if preferred:
            message = (
                f"Terminal '{preferred}' cannot be used on platform '{platform}'"
            )
        else:
            message = (
                f"No suitable terminal found on platform '{platform}'. "
                "Set $TERMINAL or install a supported terminal."
            )
        super().__init__(message)


def build_ui_command(
    session_id: str,
    temp_dir: str | Path,
    *,
    python: str | None = None,
) -> str:
    """
    Compose the command that runs the prompt front-end inside a terminal.

    Args:
        session_id: Session identifier passed to the front-end
        temp_dir: Directory holding the session channels
        python: Interpreter to use (defaults to the running interpreter)

    Returns:
        A single command string suitable for `sh -c` or `cmd /k`

    Examples:
        >>> build_ui_command("abc123", "/tmp", python="/usr/bin/python3")
        '"/usr/bin/python3" -m askterm.ui "abc123" "/tmp"'
    """
    interpreter = python or sys.executable
    return f'"{interpreter}" -m askterm.ui "{session_id}" "{temp_dir}"'


def is_terminal_available(name: str, which: Which | None = None) -> bool:
    """Check whether an executable is on PATH, without producing output."""
    try:
        return (which or shutil.which)(name) is not None
    except OSError:
        return False


def _escape_applescript(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _terminal_args(name: str, command: str, title: str) -> tuple[str, ...] | None:
    """
    Argument template for a known terminal family.

    Returns None when the name is not a known family.
    """
    inner = ("sh", "-c", command)
    templates: dict[str, tuple[str, ...]] = {
        "kitty": ("--title", title, "--", *inner),
        "alacritty": ("--title", title, "-e", *inner),
        "wezterm": ("start", "--", *inner),
        "gnome-terminal": (f"--title={title}", "--", *inner),
        "konsole": ("--title", title, "-e", *inner),
        "xterm": ("-title", title, "-e", *inner),
    }
    return templates.get(name)


def _iterm_spec(command: str) -> LaunchSpec:
    # iTerm2 has no direct CLI for opening a window with a command
    escaped = _escape_applescript(command)
    script = (
        "osascript -e 'tell application \"iTerm2\" to create window "
        f"with default profile command \"{escaped}\"'"
    )
    return LaunchSpec(executable=script, use_shell=True)


def _macos_terminal_spec(command: str) -> LaunchSpec:
    escaped = _escape_applescript(f"exec {command}; exit 0")
    script = (
        "osascript -e 'tell application \"Terminal\" to activate' "
        f"-e 'tell application \"Terminal\" to do script \"{escaped}\"'"
    )
    return LaunchSpec(executable=script, use_shell=True)


def _resolve_preferred(
    platform: str, preferred: str, command: str, title: str
) -> LaunchSpec:
    # PurePath handles both "/usr/bin/kitty" and "C:\\...\\kitty.exe" separators
    name = PurePath(preferred.replace("\\", "/")).name.lower()
    if name.endswith(".exe"):
        name = name[: -len(".exe")]

    if name in ("iterm", "iterm2"):
        if platform == "darwin":
            return _iterm_spec(command)
        raise NoTerminalAvailableError(platform, preferred)

    args = _terminal_args(name, command, title)
    if args is None:
        # Most terminals accept -e for executing a command
        args = ("-e", "sh", "-c", command)
    return LaunchSpec(executable=preferred, arguments=args)


def resolve_launch_spec(
    platform: str,
    preferred: str | None,
    command: str,
    *,
    title: str = DEFAULT_TITLE,
    which: Which | None = None,
) -> LaunchSpec:
    """
    Resolve how to launch a terminal that runs the given command.

    Resolution order:
        1. An explicitly preferred executable (usually $TERMINAL), matched by
           its case-insensitive base name against known terminal families.
        2. Platform defaults: Terminal.app via AppleScript on macOS, the first
           available terminal from LINUX_TERMINALS on Linux, a new console
           window on Windows.

    Args:
        platform: Platform name as reported by sys.platform
        preferred: Preferred terminal executable path, or None
        command: Composed command string to run inside the terminal
        title: Window title for terminals that accept one
        which: PATH lookup function (injectable for tests)

    Returns:
        LaunchSpec describing how to start the terminal

    Raises:
        NoTerminalAvailableError: If no usable terminal can be resolved

    Examples:
        >>> spec = resolve_launch_spec("linux", "/usr/local/bin/Kitty", "echo hi")
        >>> spec.arguments[:3]
        ('--title', 'Interactive Input', '--')
    """
    if preferred:
        return _resolve_preferred(platform, preferred, command, title)

    if platform == "darwin":
        return _macos_terminal_spec(command)

    if platform.startswith("linux"):
        for name in LINUX_TERMINALS:
            if is_terminal_available(name, which):
                args = _terminal_args(name, command, title)
                assert args is not None
                return LaunchSpec(executable=name, arguments=args)
        raise NoTerminalAvailableError(platform)

    if platform == "win32":
        return LaunchSpec(
            executable="cmd",
            arguments=("/c", "start", "cmd", "/k", command),
        )

    raise NoTerminalAvailableError(platform)


__all__ = [
    "LINUX_TERMINALS",
    "LaunchError",
    "NoTerminalAvailableError",
    "build_ui_command",
    "is_terminal_available",
    "resolve_launch_spec",
]
