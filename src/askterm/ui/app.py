"""
Prompt front-end that runs inside the spawned terminal window.

Protocol duties:
- read the options channel written by the coordinator
- create the heartbeat channel once, then refresh it every second while
  waiting for the user
- write the answer channel exactly once
- stop when the timeout elapses or when the coordinator has removed the
  session channels (the session was resolved some other way)
"""

from __future__ import annotations

import logging
import os
import signal
import sys
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from askterm.core.session.models import PromptOptions, options_channel_path

logger = logging.getLogger(__name__)

HEARTBEAT_INTERVAL = 1.0


class OptionsUnavailableError(Exception):
    """The options channel is missing or malformed."""


def load_options(session_id: str, temp_dir: Path) -> PromptOptions:
    """
    Read the options channel of a session.

    Raises:
        OptionsUnavailableError: If the channel is missing or invalid
    """
    path = options_channel_path(temp_dir, session_id)
    try:
        return PromptOptions.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        raise OptionsUnavailableError(f"Cannot read options from {path}: {e}") from e


def resolve_choice(reply: str, predefined_options: list[str] | None) -> str:
    """
    Turn the user's reply into an answer.

    A number selects the matching predefined option (1-based); anything else
    is taken as a custom answer.

    Examples:
        >>> resolve_choice("2", ["yes", "no"])
        'no'
        >>> resolve_choice(" maybe later ", ["yes", "no"])
        'maybe later'
    """
    text = reply.strip()
    if predefined_options and text.isdigit():
        index = int(text) - 1
        if 0 <= index < len(predefined_options):
            return predefined_options[index]
    return text


def write_answer(path: Path, answer: str) -> None:
    """Write the answer channel (single write)."""
    path.write_text(f"{answer}\n", encoding="utf-8")


class HeartbeatThread(threading.Thread):
    """
    Keeps the heartbeat channel fresh while the user is thinking.

    Calls on_orphaned once, and stops, as soon as one of the watched channels
    disappears.
    """

    def __init__(
        self,
        heartbeat_path: Path,
        watched_paths: list[Path],
        on_orphaned: Callable[[], None],
        interval: float = HEARTBEAT_INTERVAL,
    ) -> None:
        super().__init__(name="askterm-heartbeat", daemon=True)
        self.heartbeat_path = heartbeat_path
        self.watched_paths = watched_paths
        self.on_orphaned = on_orphaned
        self.interval = interval
        self._stop_event = threading.Event()

    def create(self) -> bool:
        """
        Create the heartbeat channel. Only called once, before the first beat.

        Returns:
            False if the session channels were already gone

        Raises:
            OSError: If the heartbeat cannot be created
        """
        self.heartbeat_path.touch()
        if any(not p.exists() for p in self.watched_paths):
            # Cleanup may have run between the touch and the check
            self.heartbeat_path.unlink(missing_ok=True)
            return False
        return True

    def beat(self) -> bool:
        """
        Refresh the heartbeat mtime. Never recreates a removed heartbeat.

        Returns:
            False if the session channels (heartbeat included) are gone
        """
        if any(not p.exists() for p in self.watched_paths):
            return False
        try:
            os.utime(self.heartbeat_path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.debug(f"Heartbeat refresh failed: {e}")
        return True

    def run(self) -> None:
        while not self._stop_event.is_set():
            if not self.beat():
                self.on_orphaned()
                return
            self._stop_event.wait(self.interval)

    def stop(self) -> None:
        self._stop_event.set()


def send_interrupt() -> None:
    """
    Deliver Ctrl-C to the main thread.

    A real signal is needed: a blocking console read only returns early when
    the read system call itself is interrupted.
    """
    if sys.platform == "win32":
        os.kill(0, signal.CTRL_C_EVENT)
    else:
        signal.pthread_kill(threading.main_thread().ident, signal.SIGINT)


class ReplyInterrupter:
    """
    Breaks the main thread out of waiting for the reply.

    Interrupts are only delivered while the main thread is inside reading(),
    and at most once.
    """

    def __init__(self, send: Callable[[], None] = send_interrupt) -> None:
        self._send = send
        self._lock = threading.Lock()
        self._reading = False
        self.fired = False

    @contextmanager
    def reading(self) -> Iterator[None]:
        with self._lock:
            self._reading = True
        try:
            yield
        finally:
            with self._lock:
                self._reading = False

    def interrupt(self) -> None:
        with self._lock:
            if not self._reading or self.fired:
                return
            self.fired = True
            self._send()


def render_prompt(console: Console, options: PromptOptions) -> None:
    """Show project, question, predefined options and deadline."""
    body = Text()
    body.append(options.prompt, style="bold cyan")

    if options.predefined_options:
        body.append("\n\n")
        for i, choice in enumerate(options.predefined_options, start=1):
            body.append(f"  {i}. ", style="green")
            body.append(f"{choice}\n")
        body.append("\nType a number to pick an option, or type a custom answer.", style="dim")

    if options.show_countdown and options.timeout > 0:
        deadline = time.strftime("%H:%M:%S", time.localtime(time.time() + options.timeout))
        body.append(f"\nAnswer within {options.timeout}s (until {deadline}).", style="yellow")

    console.print(Panel(body, title=options.project_name, border_style="cyan"))


def run_prompt(
    session_id: str,
    temp_dir: Path,
    *,
    console: Console | None = None,
    heartbeat_interval: float = HEARTBEAT_INTERVAL,
    interrupter: ReplyInterrupter | None = None,
) -> int:
    """
    Run the prompt front-end for a session.

    Must run on the main thread: the timeout and the heartbeat thread stop
    the wait for the reply with Ctrl-C.

    Args:
        session_id: Session identifier
        temp_dir: Directory holding the session channels
        console: Rich console (defaults to a new one)
        heartbeat_interval: Seconds between heartbeat refreshes
        interrupter: Stops the reply wait (defaults to sending Ctrl-C)

    Returns:
        Process exit code
    """
    console = console or Console()
    interrupter = interrupter or ReplyInterrupter()
    try:
        options = load_options(session_id, temp_dir)
    except OptionsUnavailableError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 1

    output_path = Path(options.output_file)
    heartbeat = HeartbeatThread(
        Path(options.heartbeat_file),
        [options_channel_path(temp_dir, session_id), output_path],
        on_orphaned=interrupter.interrupt,
        interval=heartbeat_interval,
    )
    try:
        if not heartbeat.create():
            logger.info(f"Session {session_id} was resolved before the prompt started")
            return 0
    except OSError as e:
        console.print(f"[red]Cannot create heartbeat: {escape(str(e))}[/red]")
        return 1

    timer: threading.Timer | None = None
    if options.timeout > 0:
        timer = threading.Timer(options.timeout, interrupter.interrupt)
        timer.daemon = True

    render_prompt(console, options)
    heartbeat.start()
    if timer is not None:
        timer.start()

    try:
        with interrupter.reading():
            reply = console.input("[bold green]> [/bold green]")
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]No answer given.[/yellow]")
        return 0
    finally:
        heartbeat.stop()
        if timer is not None:
            timer.cancel()

    answer = resolve_choice(reply, options.predefined_options)
    try:
        write_answer(output_path, answer)
    except OSError as e:
        console.print(f"[red]Could not deliver answer: {escape(str(e))}[/red]")
        return 1
    return 0


__all__ = [
    "HEARTBEAT_INTERVAL",
    "HeartbeatThread",
    "OptionsUnavailableError",
    "ReplyInterrupter",
    "load_options",
    "render_prompt",
    "resolve_choice",
    "run_prompt",
    "send_interrupt",
    "write_answer",
]
