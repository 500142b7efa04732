"""
Tests for launch target resolution.

Tests terminal family templates, platform defaults, Linux PATH probing,
and the composed front-end command.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from askterm.core.launch import (
    LINUX_TERMINALS,
    LaunchSpec,
    NoTerminalAvailableError,
    build_ui_command,
    is_terminal_available,
    resolve_launch_spec,
)

COMMAND = '"/usr/bin/python3" -m askterm.ui "abc123" "/tmp"'


def only(*available: str):
    """PATH lookup that finds only the given executables."""
    return lambda name: f"/usr/bin/{name}" if name in available else None


# ============================================================================
# Preferred Terminal Tests
# ============================================================================


class TestPreferredTerminal:
    """Tests for resolution with an explicitly preferred executable."""

    def test_kitty_uses_title_and_separator(self) -> None:
        """Test kitty gets the title + bare -- template."""
        spec = resolve_launch_spec("linux", "/usr/local/bin/kitty", COMMAND)
        assert spec.executable == "/usr/local/bin/kitty"
        assert spec.arguments == ("--title", "Interactive Input", "--", "sh", "-c", COMMAND)
        assert spec.use_shell is False

    def test_kitty_name_is_case_insensitive(self) -> None:
        """Test a path-qualified, mixed-case kitty still matches."""
        spec = resolve_launch_spec("linux", "/Applications/kitty.app/Contents/MacOS/KiTTy", COMMAND)
        assert spec.arguments[2] == "--"
        assert "-e" not in spec.arguments

    def test_alacritty_uses_execute_flag(self) -> None:
        """Test alacritty gets the title + -e template."""
        spec = resolve_launch_spec("linux", "alacritty", COMMAND)
        assert spec.arguments == ("--title", "Interactive Input", "-e", "sh", "-c", COMMAND)

    def test_wezterm_uses_start(self) -> None:
        """Test wezterm gets the start subcommand."""
        spec = resolve_launch_spec("linux", "/opt/wezterm", COMMAND)
        assert spec.arguments == ("start", "--", "sh", "-c", COMMAND)

    def test_gnome_terminal_title_syntax(self) -> None:
        """Test gnome-terminal gets --title= syntax."""
        spec = resolve_launch_spec("linux", "gnome-terminal", COMMAND, title="Ask")
        assert spec.arguments[0] == "--title=Ask"
        assert spec.arguments[1] == "--"

    def test_unknown_terminal_uses_generic_template(self) -> None:
        """Test unknown terminals fall back to -e."""
        spec = resolve_launch_spec("linux", "/usr/bin/foot", COMMAND)
        assert spec.executable == "/usr/bin/foot"
        assert spec.arguments == ("-e", "sh", "-c", COMMAND)

    def test_windows_exe_suffix_is_ignored(self) -> None:
        """Test a Windows path to a known terminal still matches its family."""
        spec = resolve_launch_spec("win32", "C:\\Program Files\\WezTerm\\wezterm.exe", COMMAND)
        assert spec.arguments[0] == "start"

    def test_custom_title(self) -> None:
        """Test the title is passed through."""
        spec = resolve_launch_spec("linux", "konsole", COMMAND, title="Deploy")
        assert spec.arguments[:2] == ("--title", "Deploy")

    def test_preferred_skips_path_probing(self) -> None:
        """Test a preferred terminal is used without probing PATH."""
        which = lambda name: pytest.fail("PATH should not be probed")  # noqa: E731
        spec = resolve_launch_spec("linux", "xterm", COMMAND, which=which)
        assert spec.arguments[:2] == ("-title", "Interactive Input")


class TestITerm:
    """Tests for the iTerm family, which needs AppleScript."""

    def test_iterm2_on_macos_uses_osascript(self) -> None:
        """Test iTerm2 is driven through osascript via the shell."""
        spec = resolve_launch_spec("darwin", "/Applications/iTerm.app/iTerm2", COMMAND)
        assert spec.use_shell is True
        assert spec.arguments == ()
        assert spec.executable.startswith("osascript -e 'tell application \"iTerm2\"")
        # Double quotes of the inner command are escaped for AppleScript
        assert '\\"/usr/bin/python3\\"' in spec.executable

    def test_iterm_alias(self) -> None:
        """Test 'iterm' is treated like 'iterm2'."""
        spec = resolve_launch_spec("darwin", "iTerm", COMMAND)
        assert spec.use_shell is True

    def test_iterm_off_macos_is_unavailable(self) -> None:
        """Test iTerm on Linux yields no terminal."""
        with pytest.raises(NoTerminalAvailableError) as exc_info:
            resolve_launch_spec("linux", "/usr/bin/iterm2", COMMAND)
        assert exc_info.value.platform == "linux"
        assert exc_info.value.preferred == "/usr/bin/iterm2"


# ============================================================================
# Platform Default Tests
# ============================================================================


class TestPlatformDefaults:
    """Tests for resolution without a preferred executable."""

    def test_macos_uses_terminal_app(self) -> None:
        """Test macOS defaults to Terminal.app via AppleScript."""
        spec = resolve_launch_spec("darwin", None, COMMAND)
        assert spec.use_shell is True
        assert spec.arguments == ()
        assert "tell application \"Terminal\" to activate" in spec.executable
        assert "do script" in spec.executable
        # The inner command is exec'd and its quotes are escaped for AppleScript
        assert 'exec \\"/usr/bin/python3\\" -m askterm.ui' in spec.executable
        assert "; exit 0" in spec.executable

    def test_linux_picks_first_available(self) -> None:
        """Test Linux returns the first terminal found in probe order."""
        spec = resolve_launch_spec("linux", None, COMMAND, which=only("konsole", "xterm"))
        assert spec.executable == "konsole"
        assert spec.arguments == ("--title", "Interactive Input", "-e", "sh", "-c", COMMAND)

    def test_linux_prefers_gpu_terminals(self) -> None:
        """Test kitty wins over xterm when both are present."""
        spec = resolve_launch_spec("linux", None, COMMAND, which=only("xterm", "kitty"))
        assert spec.executable == "kitty"

    def test_linux_probe_order(self) -> None:
        """Test probing follows LINUX_TERMINALS order."""
        probed: list[str] = []

        def which(name: str) -> None:
            probed.append(name)
            return None

        with pytest.raises(NoTerminalAvailableError):
            resolve_launch_spec("linux", None, COMMAND, which=which)
        assert probed == list(LINUX_TERMINALS)
        assert probed[-1] == "xterm"

    def test_linux_without_terminals(self, no_terminals) -> None:
        """Test Linux with nothing on PATH and no preference is unavailable."""
        with pytest.raises(NoTerminalAvailableError) as exc_info:
            resolve_launch_spec("linux", None, COMMAND)
        assert exc_info.value.preferred is None
        assert "$TERMINAL" in str(exc_info.value)

    def test_windows_opens_console(self) -> None:
        """Test Windows opens a new console window."""
        spec = resolve_launch_spec("win32", None, COMMAND)
        assert spec == LaunchSpec("cmd", ("/c", "start", "cmd", "/k", COMMAND))

    def test_unknown_platform(self) -> None:
        """Test an unrecognized platform is unavailable."""
        with pytest.raises(NoTerminalAvailableError):
            resolve_launch_spec("sunos5", None, COMMAND)

    def test_empty_preference_uses_default(self) -> None:
        """Test an empty preferred string behaves like no preference."""
        spec = resolve_launch_spec("win32", "", COMMAND)
        assert spec.executable == "cmd"


# ============================================================================
# Helper Tests
# ============================================================================


class TestBuildUiCommand:
    """Tests for build_ui_command."""

    def test_quotes_every_part(self) -> None:
        """Test interpreter, session ID and temp dir are double-quoted."""
        command = build_ui_command("abc123", "/tmp", python="/usr/bin/python3")
        assert command == COMMAND

    def test_defaults_to_running_interpreter(self) -> None:
        """Test sys.executable is used by default."""
        with patch("askterm.core.launch.resolver.sys.executable", "/venv/bin/python"):
            command = build_ui_command("id", "/tmp")
        assert command.startswith('"/venv/bin/python" -m askterm.ui')


class TestIsTerminalAvailable:
    """Tests for is_terminal_available."""

    def test_found(self) -> None:
        assert is_terminal_available("kitty", which=only("kitty")) is True

    def test_missing(self) -> None:
        assert is_terminal_available("kitty", which=only()) is False

    def test_lookup_error_is_not_fatal(self) -> None:
        """Test an OSError from PATH lookup counts as unavailable."""

        def broken(name: str) -> None:
            raise PermissionError("denied")

        assert is_terminal_available("kitty", which=broken) is False


class TestLaunchSpec:
    """Tests for the LaunchSpec model."""

    def test_argv(self) -> None:
        spec = LaunchSpec("xterm", ("-e", "sh"))
        assert spec.argv == ["xterm", "-e", "sh"]

    def test_describe_shell_command(self) -> None:
        spec = LaunchSpec("osascript -e 'x'", use_shell=True)
        assert spec.describe() == "osascript -e 'x'"

    def test_immutable(self) -> None:
        spec = LaunchSpec("xterm")
        with pytest.raises(AttributeError):
            spec.executable = "kitty"  # type: ignore[misc]
