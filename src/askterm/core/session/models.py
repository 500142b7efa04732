"""
Session data models for askterm.

A session is one interactive input request: the identifiers and channel
locations shared between the coordinator and the prompt front-end, plus the
state and outcome types the coordinator uses to resolve it.
"""

from __future__ import annotations

import secrets
import tempfile
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

OPTIONS_PREFIX = "askterm-options-"
ANSWER_PREFIX = "askterm-response-"
HEARTBEAT_PREFIX = "askterm-heartbeat-"


def generate_session_id() -> str:
    """
    Generate a random session identifier.

    Format: 16 lowercase hex characters (e.g., '3f9a1c0d2b4e6f70')
    """
    return secrets.token_hex(8)


def options_channel_path(temp_dir: Path, session_id: str) -> Path:
    """Location of the options channel for a session."""
    return Path(temp_dir) / f"{OPTIONS_PREFIX}{session_id}.json"


def answer_channel_path(temp_dir: Path, session_id: str) -> Path:
    """Location of the answer channel for a session."""
    return Path(temp_dir) / f"{ANSWER_PREFIX}{session_id}.txt"


def heartbeat_channel_path(temp_dir: Path, session_id: str) -> Path:
    """Location of the heartbeat channel for a session."""
    return Path(temp_dir) / f"{HEARTBEAT_PREFIX}{session_id}.txt"


class SessionState(str, Enum):
    """Lifecycle state of a session coordinator.

    - IDLE: Created, nothing started
    - LAUNCHING: Resolving the terminal, writing options, spawning
    - ARMED: Completion triggers are active
    - RESOLVED: Exactly one outcome has been recorded (terminal state)
    """

    IDLE = "idle"
    LAUNCHING = "launching"
    ARMED = "armed"
    RESOLVED = "resolved"


class SessionOutcome(str, Enum):
    """How a session was resolved."""

    ANSWERED = "answered"
    NO_TERMINAL = "no_terminal"
    SPAWN_FAILURE = "spawn_failure"
    ABNORMAL_EXIT = "abnormal_exit"
    ANSWER_READ_FAILURE = "answer_read_failure"
    HEARTBEAT_LOST = "heartbeat_lost"
    HEARTBEAT_NEVER_APPEARED = "heartbeat_never_appeared"
    INPUT_TIMEOUT = "input_timeout"

    @property
    def is_failure(self) -> bool:
        """Whether the session ended without a usable answer."""
        return self != SessionOutcome.ANSWERED


class PromptPayload(BaseModel):
    """
    What the prompt front-end renders.

    Passed through to the options channel; the coordinator never interprets it.
    """

    project_name: str = Field(default="askterm", description="Project asking the question")
    prompt: str = Field(description="Question text")
    predefined_options: list[str] | None = Field(
        default=None, description="Choices offered for quick selection"
    )


class PromptOptions(BaseModel):
    """
    Options channel document, as read by the prompt front-end.

    Serialized with camelCase keys.
    """

    model_config = ConfigDict(populate_by_name=True)

    project_name: str = Field(alias="projectName")
    prompt: str
    timeout: int
    show_countdown: bool = Field(alias="showCountdown")
    session_id: str = Field(alias="sessionId")
    output_file: str = Field(alias="outputFile")
    heartbeat_file: str = Field(alias="heartbeatFile")
    predefined_options: list[str] | None = Field(default=None, alias="predefinedOptions")

    def to_json(self) -> str:
        """Serialize with wire (camelCase) keys."""
        return self.model_dump_json(by_alias=True)


class Session(BaseModel):
    """
    One interactive input request.

    Channel locations are derived from the session ID so concurrent sessions
    sharing the same temp directory never collide.

    Example:
        >>> session = Session.create(PromptPayload(prompt="Continue?"), timeout_seconds=30)
        >>> session.answer_path.name.startswith("askterm-response-")
        True
    """

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(default_factory=generate_session_id)
    created_at: float = Field(
        default_factory=time.time, description="Wall-clock creation time (epoch seconds)"
    )
    timeout_seconds: int = Field(ge=0)
    payload: PromptPayload
    temp_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))

    @classmethod
    def create(
        cls,
        payload: PromptPayload,
        timeout_seconds: int,
        temp_dir: Path | None = None,
        created_at: float | None = None,
    ) -> Session:
        """Create a new session with a fresh random ID."""
        kwargs: dict[str, Any] = {"payload": payload, "timeout_seconds": timeout_seconds}
        if temp_dir is not None:
            kwargs["temp_dir"] = Path(temp_dir)
        if created_at is not None:
            kwargs["created_at"] = created_at
        return cls(**kwargs)

    @property
    def options_path(self) -> Path:
        return options_channel_path(self.temp_dir, self.session_id)

    @property
    def answer_path(self) -> Path:
        return answer_channel_path(self.temp_dir, self.session_id)

    @property
    def heartbeat_path(self) -> Path:
        return heartbeat_channel_path(self.temp_dir, self.session_id)

    @property
    def channel_paths(self) -> tuple[Path, Path, Path]:
        """Options, answer, and heartbeat channel paths."""
        return (self.options_path, self.answer_path, self.heartbeat_path)

    def build_options(self, show_countdown: bool) -> PromptOptions:
        """Build the options channel document for this session."""
        return PromptOptions(
            project_name=self.payload.project_name,
            prompt=self.payload.prompt,
            timeout=self.timeout_seconds,
            show_countdown=show_countdown,
            session_id=self.session_id,
            output_file=str(self.answer_path),
            heartbeat_file=str(self.heartbeat_path),
            predefined_options=self.payload.predefined_options,
        )


@dataclass
class HeartbeatState:
    """Liveness observations, mutated only by the liveness monitor."""

    ever_seen: bool = False
    last_fresh_at: float | None = None


@dataclass(frozen=True)
class SessionResult:
    """
    Final result of a session.

    Attributes:
        answer: Trimmed answer, or "" when no usable answer was obtained
        outcome: Which completion path resolved the session
        session_id: ID of the resolved session
        detail: Diagnostic message for failure outcomes
    """

    answer: str
    outcome: SessionOutcome
    session_id: str
    detail: str | None = None

    @property
    def answered(self) -> bool:
        return self.outcome == SessionOutcome.ANSWERED


__all__ = [
    "ANSWER_PREFIX",
    "HEARTBEAT_PREFIX",
    "OPTIONS_PREFIX",
    "HeartbeatState",
    "PromptOptions",
    "PromptPayload",
    "Session",
    "SessionOutcome",
    "SessionResult",
    "SessionState",
    "answer_channel_path",
    "generate_session_id",
    "heartbeat_channel_path",
    "options_channel_path",
]
