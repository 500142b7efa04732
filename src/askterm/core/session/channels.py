"""
Filesystem channels shared with the prompt front-end.

Each channel is a file in the temp directory with a single writer:
the coordinator writes the options channel, the front-end writes the answer
channel once and keeps touching the heartbeat channel while it waits for
the user.
"""

from __future__ import annotations

import errno
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from askterm.core.session.models import Session

logger = logging.getLogger(__name__)


class ProbeKind(str, Enum):
    """Result discriminant of inspecting a channel."""

    PRESENT = "present"
    NOT_FOUND = "not_found"
    OTHER = "other"


@dataclass(frozen=True)
class ChannelProbe:
    """
    Result of inspecting a channel.

    Attributes:
        kind: Whether the channel exists, is missing, or could not be inspected
        modified_at: Last-modified time (epoch seconds) when PRESENT
        size: Size in bytes when PRESENT
        error: The underlying error when OTHER
    """

    kind: ProbeKind
    modified_at: float | None = None
    size: int | None = None
    error: OSError | None = None

    @property
    def signature(self) -> tuple[float, int] | None:
        """Change-detection signature (mtime, size), or None if absent."""
        if self.kind != ProbeKind.PRESENT or self.modified_at is None:
            return None
        return (self.modified_at, self.size or 0)


def probe_channel(path: Path) -> ChannelProbe:
    """
    Inspect a channel without raising.

    Args:
        path: Channel location

    Returns:
        ChannelProbe tagged PRESENT, NOT_FOUND, or OTHER
    """
    try:
        stat = path.stat()
    except FileNotFoundError:
        return ChannelProbe(kind=ProbeKind.NOT_FOUND)
    except OSError as e:
        if e.errno == errno.ENOENT:
            return ChannelProbe(kind=ProbeKind.NOT_FOUND)
        return ChannelProbe(kind=ProbeKind.OTHER, error=e)
    return ChannelProbe(
        kind=ProbeKind.PRESENT,
        modified_at=stat.st_mtime,
        size=stat.st_size,
    )


def read_channel(path: Path) -> str:
    """
    Read a channel's full contents.

    Raises:
        OSError: If the channel cannot be read
    """
    return path.read_text(encoding="utf-8")


def reset_channel(path: Path) -> None:
    """Create or truncate a channel so it starts out empty."""
    path.write_text("", encoding="utf-8")


def write_options(session: Session, show_countdown: bool) -> Path:
    """
    Write the options channel for a session.

    Args:
        session: Session whose options to write
        show_countdown: Whether the front-end should display remaining time

    Returns:
        Path of the written options channel
    """
    path = session.options_path
    path.write_text(session.build_options(show_countdown).to_json(), encoding="utf-8")
    logger.debug(f"Wrote options channel {path}")
    return path


__all__ = [
    "ChannelProbe",
    "ProbeKind",
    "probe_channel",
    "read_channel",
    "reset_channel",
    "write_options",
]
