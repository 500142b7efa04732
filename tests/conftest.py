"""
Pytest configuration and shared fixtures.

Provides fixtures for temp directories, scaled-down session timing, fake
terminal processes, and isolated configuration environments.
"""

import os
from unittest.mock import patch

import pytest

from askterm.core.config import SessionTiming, clear_cache
from askterm.core.launch import LaunchSpec
from askterm.core.session import PromptPayload, Session

# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def temp_dir(tmp_path):
    """Provide a temporary directory for tests."""
    return tmp_path


@pytest.fixture
def channel_dir(tmp_path):
    """Provide a directory standing in for the OS temp area."""
    channels = tmp_path / "channels"
    channels.mkdir()
    return channels


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


@pytest.fixture
def payload():
    """A prompt payload with predefined options."""
    return PromptPayload(
        project_name="demo",
        prompt="Deploy to production?",
        predefined_options=["yes", "no"],
    )


@pytest.fixture
def session(payload, channel_dir):
    """A session whose channels live in channel_dir."""
    return Session.create(payload, timeout_seconds=30, temp_dir=channel_dir)


@pytest.fixture
def fast_timing():
    """
    Session timing scaled down by 1/10 from the defaults.

    heartbeat 0.15s, stale 0.3s, grace 0.7s, buffer 0.5s.
    """
    return SessionTiming(
        heartbeat_interval=0.15,
        stale_threshold=0.3,
        grace_period=0.7,
        timeout_buffer=0.5,
        answer_poll_interval=0.02,
        exit_poll_interval=0.02,
    )


# ==============================================================================
# Fake Terminal
# ==============================================================================


class FakeProcess:
    """Stands in for a spawned terminal; exit code is set by the test."""

    def __init__(self, pid: int = 4242) -> None:
        self.pid = pid
        self.returncode: int | None = None

    def poll(self) -> int | None:
        return self.returncode


class FakeSpawner:
    """Records launch specs and returns a FakeProcess."""

    def __init__(self, process: FakeProcess | None = None, error: OSError | None = None) -> None:
        self.process = process or FakeProcess()
        self.error = error
        self.specs: list[LaunchSpec] = []

    def __call__(self, spec: LaunchSpec) -> FakeProcess:
        self.specs.append(spec)
        if self.error is not None:
            raise self.error
        return self.process


def _xterm_resolver(platform, preferred, command, *, title="Interactive Input"):
    """Resolver that always picks xterm."""
    return LaunchSpec(executable="xterm", arguments=("-e", "sh", "-c", command))


@pytest.fixture
def fake_process():
    return FakeProcess()


@pytest.fixture
def fake_spawner(fake_process):
    return FakeSpawner(fake_process)


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture
def clean_env(tmp_path, monkeypatch):
    """
    Isolate config lookups from the developer's machine.

    Clears TERMINAL/ASKTERM_* variables, points XDG_CONFIG_HOME at a temp
    directory, and resets the config cache.
    """
    for key in list(os.environ):
        if key == "TERMINAL" or key.startswith("ASKTERM_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
    clear_cache()
    yield tmp_path
    clear_cache()


@pytest.fixture
def no_terminals():
    """Make every PATH lookup fail."""
    with patch("askterm.core.launch.resolver.shutil.which", return_value=None):
        yield


@pytest.fixture
def xterm_resolver():
    """Resolver that always picks xterm, regardless of platform."""
    return _xterm_resolver


@pytest.fixture
def make_coordinator(fast_timing, channel_dir, xterm_resolver, fake_spawner):
    """
    Factory for coordinators wired to fakes and the scaled-down timing.

    Keyword arguments override the defaults.
    """
    from askterm.core.session import SessionCoordinator

    def _make(**kwargs):
        options = {
            "timing": fast_timing,
            "temp_dir": channel_dir,
            "resolver": xterm_resolver,
            "spawner": fake_spawner,
            "platform": "linux",
        }
        options.update(kwargs)
        return SessionCoordinator(**options)

    return _make
