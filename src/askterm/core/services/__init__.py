"""
Service layer for askterm.

Services are the API used by host processes (agents, MCP servers, the CLI)
to ask a question without dealing with sessions and channels directly.
"""

from askterm.core.services.input import EmptyPromptError, InputService, InputServiceError

__all__ = ["EmptyPromptError", "InputService", "InputServiceError"]
