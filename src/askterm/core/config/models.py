"""
Configuration data models for askterm.

These models define the structure of .askterm.json and
~/.config/askterm/config.json files, with validation and type safety via
Pydantic.
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class SessionTiming(BaseModel):
    """
    Timing parameters for the session protocol.

    All values are in seconds. The defaults suit a human answering in a
    freshly opened terminal window; tests scale them down.
    """
    heartbeat_interval: float = Field(
        default=1.5,
        gt=0.0,
        description="How often the heartbeat channel is inspected"
    )
    stale_threshold: float = Field(
        default=3.0,
        gt=0.0,
        description="Heartbeat age after which the front-end is considered dead"
    )
    grace_period: float = Field(
        default=7.0,
        ge=0.0,
        description="Startup time allowed before a missing heartbeat is a failure"
    )
    timeout_buffer: float = Field(
        default=5.0,
        ge=0.0,
        description="Extra time added to the caller's timeout before giving up"
    )
    answer_poll_interval: float = Field(
        default=0.25,
        gt=0.0,
        description="How often the answer channel is checked for changes"
    )
    exit_poll_interval: float = Field(
        default=0.5,
        gt=0.0,
        description="How often the spawned terminal process is checked for exit"
    )


class AsktermConfig(BaseModel):
    """
    Top-level askterm configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = AsktermConfig(terminal="/usr/bin/kitty", default_timeout=30)
        >>> config.timing.grace_period
        7.0
    """
    terminal: Optional[str] = Field(
        default=None,
        description="Preferred terminal executable (overrides platform default)"
    )
    window_title: str = Field(
        default="Interactive Input",
        min_length=1,
        description="Title of the prompt window, where the terminal supports one"
    )
    project_name: str = Field(
        default="askterm",
        description="Project name shown in the prompt window"
    )
    default_timeout: int = Field(
        default=60,
        ge=1,
        description="Seconds the user has to answer when the caller sets no timeout"
    )
    show_countdown: bool = Field(
        default=True,
        description="Whether the prompt window shows the remaining time"
    )
    timing: SessionTiming = Field(
        default_factory=SessionTiming,
        description="Session protocol timing"
    )

    @model_validator(mode="after")
    def _normalize_terminal(self) -> "AsktermConfig":
        if self.terminal is not None and not self.terminal.strip():
            self.terminal = None
        return self
