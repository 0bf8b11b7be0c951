#!/usr/bin/env python3
"""
clock.py

Two-thread console clock:
  • An updater thread refreshes the shared reading every UPDATE_INTERVAL
  • A display thread prints the latest reading every DISPLAY_INTERVAL
The ``Clock`` controller owns both threads and the shared ``ClockCell``.
``start`` and ``stop`` are idempotent and may be called from any thread.
"""

from __future__ import annotations

import datetime as _dt
import logging
import sys
import threading
from typing import Callable, List, Optional, TextIO

import config
from clock_cell import ClockCell
from time_pattern import TimePattern


class Clock:
    """Start/stop controller for the updater and display threads."""

    def __init__(
        self,
        pattern: Optional[str] = None,
        *,
        update_interval: Optional[float] = None,
        display_interval: Optional[float] = None,
        join_timeout: Optional[float] = None,
        timezone=None,
        output: Optional[TextIO] = None,
        now: Optional[Callable[[], _dt.datetime]] = None,
        thread_factory: Callable[..., threading.Thread] = threading.Thread,
    ) -> None:
        self.pattern = TimePattern(pattern or config.CLOCK_TIME_PATTERN)
        self.update_interval = config.coerce_seconds(
            config.UPDATE_INTERVAL if update_interval is None else update_interval,
            config.UPDATE_INTERVAL,
            minimum=config.MIN_INTERVAL,
            name="update_interval",
        )
        self.display_interval = config.coerce_seconds(
            config.DISPLAY_INTERVAL if display_interval is None else display_interval,
            config.DISPLAY_INTERVAL,
            minimum=config.MIN_INTERVAL,
            name="display_interval",
        )
        self.join_timeout = config.coerce_seconds(
            config.JOIN_TIMEOUT if join_timeout is None else join_timeout,
            config.JOIN_TIMEOUT,
            minimum=0.0,
            name="join_timeout",
        )
        self._tz = config.CLOCK_TIMEZONE if timezone is None else timezone
        self._now = now or self._system_now
        self._output = output
        self._thread_factory = thread_factory

        self._cell = ClockCell(self._now())
        self._lock = threading.RLock()
        self._output_lock = threading.Lock()
        self._running = False
        self._stop_event: Optional[threading.Event] = None
        self._updater: Optional[threading.Thread] = None
        self._display: Optional[threading.Thread] = None
        # Threads from earlier runs that outlived their join timeout.
        self._stragglers: List[threading.Thread] = []

    def _system_now(self) -> _dt.datetime:
        return _dt.datetime.now(self._tz)

    @property
    def cell(self) -> ClockCell:
        return self._cell

    @property
    def running(self) -> bool:
        return self._running

    def current(self) -> _dt.datetime:
        return self._cell.get()

    # ─── Lifecycle ────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Spawn the updater and display threads unless already running."""

        with self._lock:
            if self._running:
                return

            self._stragglers = [t for t in self._stragglers if t.is_alive()]
            for thread in self._stragglers:
                logging.warning(
                    "⚠️  %s from a previous run is still alive and may publish one stale reading.",
                    thread.name,
                )

            stop_event = threading.Event()
            updater = self._thread_factory(
                target=self._run_updater, args=(stop_event,), name="clock-updater", daemon=True
            )
            display = self._thread_factory(
                target=self._run_display, args=(stop_event,), name="clock-display", daemon=True
            )

            spawned = []
            try:
                for thread in (updater, display):
                    thread.start()
                    spawned.append(thread)
            except Exception:
                stop_event.set()
                for thread in spawned:
                    thread.join(self.join_timeout)
                raise

            self._stop_event = stop_event
            self._updater = updater
            self._display = display
            self._running = True
            logging.info(
                "⏱️  Clock started (update every %.2fs, display every %.2fs).",
                self.update_interval,
                self.display_interval,
            )

    def stop(self) -> None:
        """Signal both threads and wait up to ``join_timeout`` for each."""

        with self._lock:
            if not self._running:
                return
            self._running = False
            if self._stop_event is not None:
                self._stop_event.set()

            current = threading.current_thread()
            try:
                for thread in (self._updater, self._display):
                    if thread is None or thread is current:
                        continue
                    thread.join(self.join_timeout)
                    if thread.is_alive():
                        self._stragglers.append(thread)
                        logging.warning(
                            "⚠️  %s did not stop within %.1f seconds; continuing shutdown.",
                            thread.name,
                            self.join_timeout,
                        )
            finally:
                self._stop_event = None
                self._updater = None
                self._display = None
                logging.info("🛑 Clock stopped.")

    # ─── Task loops ───────────────────────────────────────────────────────────

    def _run_updater(self, stop_event: threading.Event) -> None:
        try:
            while not stop_event.is_set():
                self._cell.set(self._now())
                if stop_event.wait(self.update_interval):
                    break
        except Exception:
            logging.exception("[Updater] Unexpected error; updater thread exiting.")

    def _run_display(self, stop_event: threading.Event) -> None:
        try:
            while not stop_event.is_set():
                self._emit(self.pattern.format(self._cell.get()))
                if stop_event.wait(self.display_interval):
                    break
        except Exception:
            logging.exception("[Display] Unexpected error; display thread exiting.")

    def _emit(self, line: str) -> None:
        stream = self._output if self._output is not None else sys.stdout
        with self._output_lock:
            stream.write(line + "\n")
            stream.flush()
