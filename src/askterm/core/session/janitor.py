"""
Per-session channel teardown.

Removing channels is best-effort: a missing file is not an error and any
other failure is logged and swallowed.
"""

from __future__ import annotations

import logging
from pathlib import Path

from askterm.core.session.models import Session

logger = logging.getLogger(__name__)


def remove_channel(path: Path) -> bool:
    """
    Remove one channel file.

    Returns:
        True if the file was removed, False if it was absent or removal failed
    """
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Failed to remove channel {path}: {e}")
        return False
    return True


def cleanup_session(session: Session) -> list[Path]:
    """
    Remove the options, answer, and heartbeat channels of a session.

    Each removal is attempted independently.

    Args:
        session: Session whose channels to remove

    Returns:
        Paths that were actually removed
    """
    removed = [path for path in session.channel_paths if remove_channel(path)]
    logger.debug(f"Session {session.session_id}: removed {len(removed)} channel(s)")
    return removed


__all__ = ["cleanup_session", "remove_channel"]
