"""
Interactive input sessions.

Modules:
    models: Session, payload, outcome and state types
    channels: Options/answer/heartbeat channel inspection and writes
    janitor: Best-effort channel teardown
    process: Detached terminal spawning and exit observation
    coordinator: SessionCoordinator state machine
"""

from askterm.core.session.channels import (
    ChannelProbe,
    ProbeKind,
    probe_channel,
    read_channel,
    reset_channel,
    write_options,
)
from askterm.core.session.coordinator import SessionCoordinator
from askterm.core.session.janitor import cleanup_session, remove_channel
from askterm.core.session.models import (
    HeartbeatState,
    PromptOptions,
    PromptPayload,
    Session,
    SessionOutcome,
    SessionResult,
    SessionState,
    generate_session_id,
)
from askterm.core.session.process import exit_status, spawn_detached

__all__ = [
    # Coordinator
    "SessionCoordinator",
    # Models
    "HeartbeatState",
    "PromptOptions",
    "PromptPayload",
    "Session",
    "SessionOutcome",
    "SessionResult",
    "SessionState",
    "generate_session_id",
    # Channels
    "ChannelProbe",
    "ProbeKind",
    "probe_channel",
    "read_channel",
    "reset_channel",
    "write_options",
    # Janitor
    "cleanup_session",
    "remove_channel",
    # Process
    "exit_status",
    "spawn_detached",
]
