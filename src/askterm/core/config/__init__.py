"""
Configuration system for askterm.

Provides layered configuration loading (defaults < user < project < env,
with .env files feeding the env layer) and validated models for terminal
preference and session timing.
"""

from .loader import (
    clear_cache,
    get_env_file_paths,
    get_project_config_path,
    get_user_config_path,
    load_config,
)
from .models import AsktermConfig, SessionTiming

__all__ = [
    "AsktermConfig",
    "SessionTiming",
    "clear_cache",
    "get_env_file_paths",
    "get_project_config_path",
    "get_user_config_path",
    "load_config",
]
