"""
Launch target resolution for the prompt front-end.

This package decides how to open a terminal window that runs the prompt
front-end for a session.

Modules:
    resolver: Terminal family templates, platform defaults, PATH probing
    models: Data models (LaunchSpec)

Example Usage:
    >>> from askterm.core.launch import build_ui_command, resolve_launch_spec
    >>>
    >>> command = build_ui_command("3f9a1c0d2b4e6f70", "/tmp")
    >>> spec = resolve_launch_spec("linux", None, command)
    >>> spec.executable
    'kitty'
"""

from askterm.core.launch.models import DEFAULT_TITLE, LaunchSpec
from askterm.core.launch.resolver import (
    LINUX_TERMINALS,
    LaunchError,
    NoTerminalAvailableError,
    build_ui_command,
    is_terminal_available,
    resolve_launch_spec,
)

__all__ = [
    # Resolver
    "resolve_launch_spec",
    "build_ui_command",
    "is_terminal_available",
    "LINUX_TERMINALS",
    "LaunchError",
    "NoTerminalAvailableError",
    # Models
    "DEFAULT_TITLE",
    "LaunchSpec",
]
