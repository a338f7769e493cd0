"""Timer service for the GameTime match tracker."""

import threading
from typing import Callable, Optional, Protocol

from .errors import ValidationError
from .notification_service import LoggingNotifier, NotificationSink, Severity
from .persistence_service import PersistenceService
from ..models import MatchState
from ..utils import (
    GAME_DURATION_CHOICES, STORAGE_KEYS, TIMER_UPDATE_INTERVAL_MS,
    fmt_mmss, format_match_time, get_logger, now_ms
)

log = get_logger("services.timer")


class Ticker(Protocol):
    """Drives the periodic clock tick."""

    def start(self, callback: Callable[[], None], interval_seconds: float) -> None:
        ...

    def stop(self) -> None:
        ...


class ManualTicker:
    """Ticker that only fires when asked to; used by tests and one-shot tools."""

    def __init__(self):
        self.callback: Optional[Callable[[], None]] = None
        self.interval_seconds: Optional[float] = None

    @property
    def active(self) -> bool:
        return self.callback is not None

    def start(self, callback: Callable[[], None], interval_seconds: float) -> None:
        self.callback = callback
        self.interval_seconds = interval_seconds

    def stop(self) -> None:
        self.callback = None

    def fire(self) -> None:
        if self.callback is not None:
            self.callback()


class IntervalTicker:
    """
    Ticker running the callback on a background daemon thread.

    Each tick runs to completion before the next wait starts, so ticks never
    overlap. :meth:`stop` returns only once a tick in flight has finished.
    """

    def __init__(self):
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def active(self) -> bool:
        return self._thread is not None

    def start(self, callback: Callable[[], None], interval_seconds: float) -> None:
        self.stop()
        stop_event = threading.Event()

        def _run() -> None:
            while not stop_event.wait(interval_seconds):
                try:
                    callback()
                except Exception:
                    log.exception("Clock tick failed")

        self._stop_event = stop_event
        self._thread = threading.Thread(target=_run, name="gametime-clock", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        stop_event, thread = self._stop_event, self._thread
        self._stop_event = None
        self._thread = None
        if stop_event is not None:
            stop_event.set()
        # A tick stopping its own ticker cannot wait for itself
        if thread is not None and thread is not threading.current_thread():
            thread.join()


class TimerService:
    """
    Converts wall-clock time plus the running flag into elapsed match seconds.

    State machine: stopped -> running -> paused -> running ... -> stopped (reset).
    While running, ``start_epoch_ms`` is the wall-clock instant that maps to
    match second zero, so the live value survives a process restart.

    ``lock`` serializes the ticker thread with every clock command. Callers
    that mutate the match from other threads (the web layer) hold the same
    lock around each command.
    """

    def __init__(
        self,
        match_state: MatchState,
        persistence: Optional[PersistenceService] = None,
        notifier: Optional[NotificationSink] = None,
        ticker: Optional[Ticker] = None,
        interval_ms: int = TIMER_UPDATE_INTERVAL_MS,
    ):
        self.match_state = match_state
        self.persistence = persistence
        self.notifier = notifier or LoggingNotifier()
        self.ticker = ticker or ManualTicker()
        self.interval_ms = interval_ms
        self.lock = threading.RLock()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def current_seconds(self) -> int:
        """Live elapsed seconds while running, the frozen value otherwise."""
        state = self.match_state
        start_epoch_ms = state.start_epoch_ms
        if not state.is_running or start_epoch_ms is None:
            return state.elapsed_seconds
        return max(0, (now_ms() - start_epoch_ms) // 1000)

    def format_match_time(self, match_second: int) -> str:
        """Minute label for ``match_second`` under the current duration and half."""
        return format_match_time(
            match_second,
            self.match_state.game_duration_seconds,
            self.match_state.is_second_half,
        )

    def display_time(self) -> str:
        return fmt_mmss(self.current_seconds())

    # ------------------------------------------------------------------
    # Core timer controls
    # ------------------------------------------------------------------
    def start(self) -> bool:
        """
        Start or resume the clock.

        Returns:
            False if the clock was already running
        """
        with self.lock:
            state = self.match_state
            if state.is_running:
                return False

            if state.start_epoch_ms is None:
                state.start_epoch_ms = now_ms() - state.elapsed_seconds * 1000
            state.is_running = True
            self._start_ticking()
            self._persist()

        message = "Game Resumed!" if state.elapsed_seconds > 0 else "Game Started!"
        self.notifier.notify(message, Severity.SUCCESS)
        log.info(f"Clock started at {fmt_mmss(state.elapsed_seconds)} (epoch {state.start_epoch_ms})")
        return True

    def pause(self) -> bool:
        """
        Pause the clock, freezing the elapsed seconds.

        Returns:
            False if the clock was not running
        """
        with self.lock:
            state = self.match_state
            if not state.is_running:
                return False

            state.elapsed_seconds = self.current_seconds()
            self.ticker.stop()
            state.is_running = False
            state.start_epoch_ms = None
            self._persist()

        self.notifier.notify("Game Paused", Severity.DANGER)
        log.info(f"Clock paused at {fmt_mmss(state.elapsed_seconds)}")
        return True

    def toggle(self) -> bool:
        """Start when paused, pause when running. Returns the new running flag."""
        with self.lock:
            if self.match_state.is_running:
                self.pause()
            else:
                self.start()
            return self.match_state.is_running

    def tick(self) -> None:
        """
        Recompute the elapsed seconds; a no-op while paused.

        The value is persisted only when the whole second changes.
        """
        # A command holding the lock may be joining the ticker thread
        if not self.lock.acquire(blocking=False):
            return
        try:
            state = self.match_state
            if not state.is_running:
                return
            seconds = self.current_seconds()
            if seconds == state.elapsed_seconds:
                return
            state.elapsed_seconds = seconds
            if self.persistence is not None:
                self.persistence.save(STORAGE_KEYS["ELAPSED_TIME"], seconds)
        finally:
            self.lock.release()

    def force_to(self, seconds: int, running: bool = False) -> None:
        """Stop the clock at ``seconds``, optionally restarting it from there."""
        with self.lock:
            state = self.match_state
            self.ticker.stop()
            state.elapsed_seconds = max(0, int(seconds))
            state.is_running = False
            state.start_epoch_ms = None
            if running:
                state.start_epoch_ms = now_ms() - state.elapsed_seconds * 1000
                state.is_running = True
                self._start_ticking()
            self._persist()

    def resume_from_state(self) -> None:
        """
        Re-attach to a persisted clock after a restart.

        A clock that was running is recomputed from the stored epoch, so time
        spent while the process was down is not lost.
        """
        with self.lock:
            state = self.match_state
            if state.is_running and state.start_epoch_ms is not None:
                state.elapsed_seconds = self.current_seconds()
                self._start_ticking()
                log.info(f"Clock resumed after restart at {fmt_mmss(state.elapsed_seconds)}")
            elif state.is_running:
                # Running flag without an epoch cannot be resumed; keep the frozen value
                log.warning("Stored clock was running without a start epoch; pausing")
                state.is_running = False
            else:
                state.start_epoch_ms = None
            self._persist()

    def half_time(self) -> None:
        """Freeze at the half-time boundary and switch to the second half."""
        with self.lock:
            state = self.match_state
            self.force_to(state.game_duration_seconds // 2)
            state.is_second_half = True
            self._persist()
        self.notifier.notify("Half Time - Game Paused", Severity.INFO)

    def full_time(self) -> None:
        """Freeze at the current elapsed seconds."""
        with self.lock:
            self.force_to(self.current_seconds())
        self.notifier.notify("Full Time - Game Finished", Severity.INFO)

    def set_game_duration(self, seconds: int) -> None:
        """
        Change the regulation duration.

        Raises:
            ValidationError: If ``seconds`` is not an offered duration
        """
        if seconds not in GAME_DURATION_CHOICES:
            raise ValidationError(
                "game_duration_seconds",
                f"Must be one of {list(GAME_DURATION_CHOICES)}",
            )
        with self.lock:
            self.match_state.game_duration_seconds = seconds
            self._persist()

    def reset(self) -> None:
        """Stop the clock and return it to zero in the first half."""
        with self.lock:
            state = self.match_state
            self.ticker.stop()
            state.elapsed_seconds = 0
            state.is_running = False
            state.start_epoch_ms = None
            state.is_second_half = False
            self._persist()

    def shutdown(self) -> None:
        """Persist the live value and stop ticking, e.g. before exit."""
        with self.lock:
            if self.match_state.is_running:
                self.match_state.elapsed_seconds = self.current_seconds()
            self.ticker.stop()
            self._persist()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _start_ticking(self) -> None:
        self.ticker.start(self.tick, self.interval_ms / 1000)

    def _persist(self) -> None:
        if self.persistence is not None:
            self.persistence.save_clock(self.match_state)
