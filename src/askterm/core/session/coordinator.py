"""
Session coordinator: obtain one answer from a prompt front-end in a terminal.

The coordinator drives a single session through an explicit state machine:

    IDLE -> LAUNCHING -> ARMED -> RESOLVED

While ARMED, four independent completion triggers race:

1. **Exit observer**: the spawned terminal exited non-zero.
2. **Answer watcher**: the answer channel changed and holds a non-empty answer.
3. **Liveness monitor**: the heartbeat channel went stale, vanished, or never
   appeared within the startup grace period.
4. **Timeout**: the caller's timeout plus a fixed buffer elapsed.

All of them report to ``_resolve()``. The first call wins: it moves the
session to RESOLVED and synchronously disarms every other trigger before any
cleanup happens, so a session resolves and cleans up exactly once.

Every failure degrades to an empty answer. The coordinator never kills the
spawned terminal; the front-end exits by itself once its channels are gone.

Example:
    >>> from askterm.core.session import PromptPayload, SessionCoordinator
    >>>
    >>> coordinator = SessionCoordinator()
    >>> answer = await coordinator.start(PromptPayload(prompt="Deploy now?"), 60)
    >>> print(answer or "(no answer)")
"""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from askterm.core.config.models import AsktermConfig, SessionTiming
from askterm.core.launch import (
    DEFAULT_TITLE,
    LaunchSpec,
    NoTerminalAvailableError,
    build_ui_command,
    resolve_launch_spec,
)
from askterm.core.session.channels import (
    ProbeKind,
    probe_channel,
    read_channel,
    reset_channel,
    write_options,
)
from askterm.core.session.janitor import cleanup_session
from askterm.core.session.models import (
    HeartbeatState,
    PromptPayload,
    Session,
    SessionOutcome,
    SessionResult,
    SessionState,
)
from askterm.core.session.process import ObservedProcess, exit_status, spawn_detached

logger = logging.getLogger(__name__)

Resolver = Callable[..., LaunchSpec]
Spawner = Callable[[LaunchSpec], ObservedProcess]
Janitor = Callable[[Session], Any]


class SessionCoordinator:
    """
    Drive one interactive input session end-to-end.

    A coordinator instance owns exactly one session; create a new instance
    per question.

    Attributes:
        timing: Protocol timing (intervals, thresholds, buffers)
        state: Current lifecycle state
        session: The session being driven, once started
    """

    def __init__(
        self,
        *,
        timing: SessionTiming | None = None,
        default_timeout: int = 60,
        preferred_terminal: str | None = None,
        window_title: str = DEFAULT_TITLE,
        platform: str | None = None,
        temp_dir: Path | None = None,
        resolver: Resolver = resolve_launch_spec,
        spawner: Spawner = spawn_detached,
        janitor: Janitor = cleanup_session,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize a coordinator.

        Args:
            timing: Protocol timing (defaults to SessionTiming())
            default_timeout: Seconds to wait when start() gets no timeout
            preferred_terminal: Preferred terminal executable ($TERMINAL)
            window_title: Title for the prompt window
            platform: Platform name (defaults to sys.platform)
            temp_dir: Directory for channels (defaults to the OS temp dir)
            resolver: Launch target resolver (injectable for tests)
            spawner: Detached process spawner (injectable for tests)
            janitor: Channel cleanup function (injectable for tests)
            clock: Wall-clock source, comparable with file mtimes
        """
        self.timing = timing or SessionTiming()
        self._default_timeout = default_timeout
        self._preferred_terminal = preferred_terminal
        self._window_title = window_title
        self._platform = platform or sys.platform
        self._temp_dir = temp_dir
        self._resolver = resolver
        self._spawner = spawner
        self._janitor = janitor
        self._clock = clock

        self._state = SessionState.IDLE
        self._session: Session | None = None
        self._heartbeat = HeartbeatState()
        self._process: ObservedProcess | None = None
        self._result: asyncio.Future[SessionResult] | None = None
        self._triggers: list[asyncio.Task[None]] = []
        self._disarmed: list[asyncio.Task[None]] = []
        self._timeout_handle: asyncio.TimerHandle | None = None

    @classmethod
    def from_config(cls, config: AsktermConfig, **kwargs: Any) -> SessionCoordinator:
        """Create a coordinator from askterm configuration."""
        return cls(
            timing=config.timing,
            default_timeout=config.default_timeout,
            preferred_terminal=config.terminal,
            window_title=config.window_title,
            **kwargs,
        )

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def heartbeat(self) -> HeartbeatState:
        return self._heartbeat

    # ============================================================================
    # Public API
    # ============================================================================

    async def start(
        self,
        payload: PromptPayload,
        timeout_seconds: int | None = None,
        show_countdown: bool = True,
    ) -> str:
        """
        Ask the user and wait for the answer.

        Args:
            payload: What the prompt front-end renders
            timeout_seconds: Seconds the user has to answer
            show_countdown: Whether the front-end shows the remaining time

        Returns:
            The trimmed answer, or "" when no usable answer was obtained
        """
        result = await self.run(payload, timeout_seconds, show_countdown)
        return result.answer

    async def run(
        self,
        payload: PromptPayload,
        timeout_seconds: int | None = None,
        show_countdown: bool = True,
    ) -> SessionResult:
        """
        Ask the user and wait for the outcome.

        Same protocol as start(), but reports how the session was resolved.

        Returns:
            SessionResult with answer and outcome

        Raises:
            RuntimeError: If this coordinator was already used
        """
        if self._state is not SessionState.IDLE:
            raise RuntimeError("SessionCoordinator drives a single session; create a new one")

        timeout = self._default_timeout if timeout_seconds is None else timeout_seconds
        try:
            session = Session.create(
                payload, timeout, temp_dir=self._temp_dir, created_at=self._clock()
            )
        except ValidationError as e:
            # Nothing was written or spawned, so there is nothing to clean up
            logger.error(f"Invalid session parameters (timeout={timeout!r}): {e}")
            self._state = SessionState.RESOLVED
            return SessionResult(
                answer="",
                outcome=SessionOutcome.SPAWN_FAILURE,
                session_id="",
                detail=f"Invalid session parameters: {e}",
            )
        self._session = session
        self._result = asyncio.get_running_loop().create_future()
        self._state = SessionState.LAUNCHING
        logger.debug(f"Session {session.session_id}: launching (timeout={timeout}s)")

        try:
            try:
                self._launch(session, show_countdown)
            except Exception as e:
                logger.exception(f"Session {session.session_id}: setup failed")
                self._resolve(SessionOutcome.SPAWN_FAILURE, detail=f"Setup failed: {e}")
            return await self._result
        finally:
            if self._state is not SessionState.RESOLVED:
                # Caller cancelled the wait
                self._state = SessionState.RESOLVED
                self._disarm()
            self._cleanup(session)
            await self._drain_disarmed()

    # ============================================================================
    # Launching
    # ============================================================================

    def _launch(self, session: Session, show_countdown: bool) -> None:
        command = build_ui_command(session.session_id, session.temp_dir)
        try:
            spec = self._resolver(
                self._platform,
                self._preferred_terminal,
                command,
                title=self._window_title,
            )
        except NoTerminalAvailableError as e:
            logger.error(f"Session {session.session_id}: {e}")
            self._resolve(SessionOutcome.NO_TERMINAL, detail=str(e))
            return

        write_options(session, show_countdown)

        try:
            self._process = self._spawner(spec)
        except OSError as e:
            logger.error(f"Session {session.session_id}: failed to start terminal: {e}")
            self._resolve(SessionOutcome.SPAWN_FAILURE, detail=str(e))
            return

        # Start from an empty answer channel so stale content never counts
        reset_channel(session.answer_path)
        self._arm(session)

    def _arm(self, session: Session) -> None:
        self._state = SessionState.ARMED
        loop = asyncio.get_running_loop()
        baseline = probe_channel(session.answer_path).signature

        sid = session.session_id
        self._triggers = [
            loop.create_task(self._observe_exit(), name=f"askterm-exit-{sid}"),
            loop.create_task(self._watch_answer(session, baseline), name=f"askterm-answer-{sid}"),
            loop.create_task(self._monitor_heartbeat(session), name=f"askterm-heartbeat-{sid}"),
        ]

        deadline = session.created_at + session.timeout_seconds + self.timing.timeout_buffer
        delay = max(0.0, deadline - self._clock())
        self._timeout_handle = loop.call_later(delay, self._on_timeout)
        logger.debug(f"Session {sid}: armed, timeout fires in {delay:.1f}s")

    # ============================================================================
    # Arbitration
    # ============================================================================

    def _resolve(
        self,
        outcome: SessionOutcome,
        answer: str = "",
        detail: str | None = None,
    ) -> bool:
        """
        Record the session outcome if it is the first to arrive.

        Returns:
            True if this call resolved the session, False if it was already resolved
        """
        if self._state is SessionState.RESOLVED:
            return False

        self._state = SessionState.RESOLVED
        self._disarm()

        assert self._session is not None
        result = SessionResult(
            answer=answer,
            outcome=outcome,
            session_id=self._session.session_id,
            detail=detail,
        )
        if self._result is not None and not self._result.done():
            self._result.set_result(result)

        logger.debug(f"Session {result.session_id}: resolved as {outcome.value}")
        return True

    def _disarm(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None

        current = asyncio.current_task()
        for task in self._triggers:
            if task is not current and not task.done():
                task.cancel()
                self._disarmed.append(task)
        self._triggers = []

    async def _drain_disarmed(self) -> None:
        tasks, self._disarmed = self._disarmed, []
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _cleanup(self, session: Session) -> None:
        try:
            self._janitor(session)
        except Exception as e:
            logger.warning(f"Session {session.session_id}: cleanup failed: {e}")

    # ============================================================================
    # Triggers
    # ============================================================================

    async def _observe_exit(self) -> None:
        process = self._process
        if process is None:
            return
        while True:
            code = exit_status(process)
            if code is not None:
                if code != 0:
                    logger.info(f"Terminal process {process.pid} exited with status {code}")
                    self._resolve(
                        SessionOutcome.ABNORMAL_EXIT,
                        detail=f"Terminal exited with status {code}",
                    )
                else:
                    logger.debug(f"Terminal process {process.pid} exited cleanly")
                return
            await asyncio.sleep(self.timing.exit_poll_interval)

    async def _watch_answer(self, session: Session, baseline: tuple[float, int] | None) -> None:
        last_seen = baseline
        while True:
            await asyncio.sleep(self.timing.answer_poll_interval)
            probe = probe_channel(session.answer_path)
            if probe.kind is ProbeKind.OTHER:
                logger.debug(f"Answer channel check failed: {probe.error}")
                continue

            signature = probe.signature
            if signature is None or signature == last_seen:
                continue
            last_seen = signature

            try:
                data = read_channel(session.answer_path)
            except OSError as e:
                logger.error(f"Error reading answer channel {session.answer_path}: {e}")
                self._resolve(SessionOutcome.ANSWER_READ_FAILURE, detail=str(e))
                return

            answer = data.strip()
            if answer:
                self._resolve(SessionOutcome.ANSWERED, answer=answer)
                return

    async def _monitor_heartbeat(self, session: Session) -> None:
        while True:
            await asyncio.sleep(self.timing.heartbeat_interval)
            if self.check_heartbeat(session):
                return

    def check_heartbeat(self, session: Session) -> bool:
        """
        Inspect the heartbeat channel once.

        Returns:
            True if the inspection resolved the session
        """
        path = session.heartbeat_path
        probe = probe_channel(path)
        now = self._clock()

        if probe.kind is ProbeKind.PRESENT:
            assert probe.modified_at is not None
            age = now - probe.modified_at
            if age > self.timing.stale_threshold:
                logger.info(
                    f"Heartbeat file {path} hasn't been updated for {age:.1f}s. "
                    "Process likely exited."
                )
                return self._resolve(
                    SessionOutcome.HEARTBEAT_LOST,
                    detail=f"Heartbeat stale for {age:.1f}s",
                )
            self._heartbeat.ever_seen = True
            self._heartbeat.last_fresh_at = probe.modified_at
            return False

        if probe.kind is ProbeKind.NOT_FOUND:
            if self._heartbeat.ever_seen:
                logger.info(f"Heartbeat file {path} not found after being seen. Process likely exited.")
                return self._resolve(
                    SessionOutcome.HEARTBEAT_LOST,
                    detail="Heartbeat channel disappeared",
                )
            waited = now - session.created_at
            if waited > self.timing.grace_period:
                logger.info(f"Heartbeat file {path} never appeared. Process likely failed to start.")
                return self._resolve(
                    SessionOutcome.HEARTBEAT_NEVER_APPEARED,
                    detail=f"No heartbeat after {waited:.1f}s",
                )
            # Still within the startup grace period
            return False

        logger.error(f"Heartbeat check error for {path}: {probe.error}")
        return self._resolve(
            SessionOutcome.HEARTBEAT_LOST,
            detail=f"Heartbeat check error: {probe.error}",
        )

    def _on_timeout(self) -> None:
        self._timeout_handle = None
        assert self._session is not None
        logger.info(f"Input timeout reached after {self._session.timeout_seconds} seconds.")
        self._resolve(
            SessionOutcome.INPUT_TIMEOUT,
            detail=f"No answer within {self._session.timeout_seconds}s",
        )


__all__ = ["SessionCoordinator"]
