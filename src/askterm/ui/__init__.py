"""Prompt front-end launched inside a terminal window (python -m askterm.ui)."""

from askterm.ui.app import run_prompt

__all__ = ["run_prompt"]
