"""
Input service: clean API for asking the user a question from a background process.

Provides a service layer wrapper around the session package: configuration
loading, payload assembly, and one coordinator per question.

Usage:
    >>> from askterm.core.services.input import InputService
    >>> service = InputService.from_config()
    >>>
    >>> result = await service.ask("Which environment?", predefined_options=["staging", "prod"])
    >>> if result.answered:
    ...     print(result.answer)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from askterm.core.config.loader import load_config
from askterm.core.config.models import AsktermConfig
from askterm.core.launch import LaunchSpec, build_ui_command, resolve_launch_spec
from askterm.core.session import (
    PromptPayload,
    SessionCoordinator,
    SessionResult,
    generate_session_id,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Typed exceptions
# ============================================================================


class InputServiceError(Exception):
    """Base exception for InputService errors."""


class EmptyPromptError(InputServiceError):
    """The question text is empty."""

    def __init__(self) -> None:
        super().__init__("Prompt text must not be empty")


# ============================================================================
# InputService
# ============================================================================


class InputService:
    """
    Service for obtaining text input from an interactive user.

    Each call to ask() runs an independent session with its own channels,
    so concurrent questions never interfere.

    Example:
        >>> service = InputService.from_config()
        >>> answer = await service.ask_text("Proceed with migration?", predefined_options=["yes", "no"])
    """

    def __init__(self, config: AsktermConfig, **coordinator_options: Any) -> None:
        """
        Initialize service with dependencies.

        Args:
            config: askterm configuration
            **coordinator_options: Extra SessionCoordinator arguments
                (platform, temp_dir, resolver, spawner, janitor, clock)
        """
        self._config = config
        self._coordinator_options = coordinator_options

    @classmethod
    def from_config(cls, config: AsktermConfig | None = None) -> InputService:
        """
        Create service from configuration.

        Args:
            config: Optional configuration (auto-loaded if None)

        Returns:
            Configured InputService instance
        """
        if config is None:
            config = load_config()
        return cls(config)

    @property
    def config(self) -> AsktermConfig:
        """The resolved askterm configuration."""
        return self._config

    def build_payload(
        self,
        prompt: str,
        *,
        project_name: str | None = None,
        predefined_options: list[str] | None = None,
    ) -> PromptPayload:
        """
        Assemble the payload rendered by the prompt front-end.

        Raises:
            EmptyPromptError: If prompt is blank
        """
        if not prompt.strip():
            raise EmptyPromptError()
        options = [o for o in (predefined_options or []) if o.strip()] or None
        return PromptPayload(
            project_name=project_name or self._config.project_name,
            prompt=prompt,
            predefined_options=options,
        )

    async def ask(
        self,
        prompt: str,
        *,
        project_name: str | None = None,
        predefined_options: list[str] | None = None,
        timeout_seconds: int | None = None,
        show_countdown: bool | None = None,
    ) -> SessionResult:
        """
        Ask a question and wait for the outcome.

        Args:
            prompt: Question text
            project_name: Project shown in the prompt window
            predefined_options: Choices offered for quick selection
            timeout_seconds: Seconds the user has (config default if None)
            show_countdown: Whether to show remaining time (config default if None)

        Returns:
            SessionResult; answer is "" unless outcome is ANSWERED

        Raises:
            EmptyPromptError: If prompt is blank
        """
        payload = self.build_payload(
            prompt, project_name=project_name, predefined_options=predefined_options
        )
        countdown = self._config.show_countdown if show_countdown is None else show_countdown
        coordinator = SessionCoordinator.from_config(self._config, **self._coordinator_options)

        result = await coordinator.run(payload, timeout_seconds, countdown)
        if not result.answered:
            logger.info(
                f"Session {result.session_id} ended without answer: "
                f"{result.outcome.value} ({result.detail})"
            )
        return result

    async def ask_text(self, prompt: str, **kwargs: Any) -> str:
        """Ask a question; return the answer or "" when none was obtained."""
        result = await self.ask(prompt, **kwargs)
        return result.answer

    def describe_launch_target(self, session_id: str | None = None) -> LaunchSpec:
        """
        Resolve the launch target a session would use right now.

        Raises:
            NoTerminalAvailableError: If no usable terminal can be resolved
        """
        command = build_ui_command(session_id or generate_session_id(), "<tmp>")
        platform = self._coordinator_options.get("platform") or sys.platform
        return resolve_launch_spec(
            platform,
            self._config.terminal,
            command,
            title=self._config.window_title,
        )


__all__ = ["EmptyPromptError", "InputService", "InputServiceError"]
