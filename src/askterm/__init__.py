"""
askterm - Ask a user for input from a background process

Launches a prompt in a new terminal window and waits for the answer through
file-based channels, with liveness monitoring and a timeout ceiling.
"""

__version__ = "0.1.0"

# Re-export the main entry points for convenience
from askterm.core.services.input import InputService
from askterm.core.session.coordinator import SessionCoordinator
from askterm.core.session.models import PromptPayload, SessionOutcome, SessionResult

__all__ = [
    "InputService",
    "PromptPayload",
    "SessionCoordinator",
    "SessionOutcome",
    "SessionResult",
    "__version__",
]
