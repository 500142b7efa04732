"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars

The env var layer is the process environment on top of values read from
.env files (user, then project .env, then .env.local). .env files only feed
the askterm settings below and never modify os.environ.
"""

import json
import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from .models import AsktermConfig

logger = logging.getLogger(__name__)

# Environment variables that map onto AsktermConfig fields
ENV_KEYS = (
    "TERMINAL",
    "ASKTERM_TIMEOUT",
    "ASKTERM_SHOW_COUNTDOWN",
    "ASKTERM_WINDOW_TITLE",
)

# Cache so repeated prompts in one process don't re-read config files
_config_cache: AsktermConfig | None = None


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/askterm/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "askterm" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .askterm.json in the given directory
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".askterm.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`.
    Nested dicts are merged, not replaced.

    Example:
        >>> deep_merge({"timing": {"grace_period": 7}}, {"timing": {"timeout_buffer": 1}})
        {'timing': {'grace_period': 7, 'timeout_buffer': 1}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        # Config system should be resilient
        logger.warning(f"Failed to parse config at {path}: {e}")
        return None


def get_env_file_paths(project_dir: Path | None = None) -> list[Path]:
    """
    Get .env files that can supply askterm settings, lowest precedence first.

    Returns:
        [~/.config/askterm/.env, <project>/.env, <project>/.env.local]
    """
    if project_dir is None:
        project_dir = Path.cwd()
    return [
        get_xdg_config_home() / "askterm" / ".env",
        project_dir / ".env",
        project_dir / ".env.local",
    ]


def load_env_files(paths: Iterable[Path]) -> dict[str, str]:
    """
    Read askterm settings (ENV_KEYS) from .env files.

    Later files override earlier ones. Unrelated keys in the files are
    ignored, and unreadable files are skipped with a warning.

    Args:
        paths: .env files, lowest precedence first

    Returns:
        Mapping of the askterm variables found
    """
    values: dict[str, str] = {}
    for path in paths:
        if not path.exists():
            continue
        try:
            entries = dotenv_values(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read env file {path}: {e}")
            continue
        for key, value in entries.items():
            if key in ENV_KEYS and value is not None:
                values[key] = value
    return values


def apply_env_overrides(
    config_dict: dict[str, Any],
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.

    Supported env vars:
        TERMINAL - overrides terminal (preferred terminal executable)
        ASKTERM_TIMEOUT - overrides default_timeout
        ASKTERM_SHOW_COUNTDOWN - overrides show_countdown
        ASKTERM_WINDOW_TITLE - overrides window_title

    Args:
        config_dict: Configuration dictionary to override
        environ: Variables to read (defaults to os.environ)

    Returns:
        Configuration dictionary with env var overrides applied
    """
    env = os.environ if environ is None else environ
    result = config_dict.copy()

    if terminal := env.get("TERMINAL"):
        result["terminal"] = terminal

    if timeout_str := env.get("ASKTERM_TIMEOUT"):
        try:
            timeout = int(timeout_str)
            if timeout < 1:
                logger.warning(f"ASKTERM_TIMEOUT must be >= 1, got {timeout}, ignoring")
            else:
                result["default_timeout"] = timeout
        except ValueError:
            logger.warning(f"Invalid ASKTERM_TIMEOUT value '{timeout_str}', ignoring")

    if countdown_str := env.get("ASKTERM_SHOW_COUNTDOWN"):
        result["show_countdown"] = countdown_str.lower() not in ("false", "0", "no")

    if title := env.get("ASKTERM_WINDOW_TITLE"):
        result["window_title"] = title

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "window_title": "Interactive Input",
        "default_timeout": 60,
        "show_countdown": True,
        "timing": {
            "heartbeat_interval": 1.5,
            "stale_threshold": 3.0,
            "grace_period": 7.0,
            "timeout_buffer": 5.0,
        },
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> AsktermConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (TERMINAL, ASKTERM_*), then the same
           variables from .env files (.env.local > .env > user .env)
        2. Project config (.askterm.json)
        3. User config (~/.config/askterm/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .askterm.json and .env files from
            (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated AsktermConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    # Process environment wins over .env files
    environ = {**load_env_files(get_env_file_paths(project_dir)), **os.environ}
    merged = apply_env_overrides(merged, environ)

    config = AsktermConfig(**merged)
    _config_cache = config

    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
