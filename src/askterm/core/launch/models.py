"""
Data models for the launch resolver.

Defines the immutable description of how to start the prompt front-end
inside a terminal window.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_TITLE = "Interactive Input"


@dataclass(frozen=True)
class LaunchSpec:
    """
    Resolved launch target.

    Attributes:
        executable: Terminal executable, or a composed automation command
            string when use_shell is True
        arguments: Ordered arguments passed to the executable
        use_shell: Whether the executable must be run through the shell
    """

    executable: str
    arguments: tuple[str, ...] = ()
    use_shell: bool = False

    @property
    def argv(self) -> list[str]:
        """Full argument vector for direct (non-shell) spawning."""
        return [self.executable, *self.arguments]

    def describe(self) -> str:
        """Human-readable command line, for logs and diagnostics."""
        if self.use_shell:
            return self.executable
        return " ".join(self.argv)


__all__ = ["DEFAULT_TITLE", "LaunchSpec"]
