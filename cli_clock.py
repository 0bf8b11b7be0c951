#!/usr/bin/env python3
"""Console entry point that runs the two-thread clock until interrupted or for N seconds."""

from __future__ import annotations

import argparse
import atexit
import logging
import signal
import time
from typing import Iterable, Optional

import config
from clock import Clock
from runtime_events import request_shutdown
from runtime_events import shutdown_event as _shutdown_event
from time_pattern import TimePattern

# Upper bound on a single wait so the main thread services signals promptly.
WAIT_SLICE = 0.5


def parse_duration(raw: Optional[str]) -> Optional[int]:
    """Return a positive run duration in seconds, or ``None`` to run until interrupted."""

    if raw is None:
        return None

    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        logging.warning(
            "Invalid argument %r. Provide a positive integer for run duration in seconds.", raw
        )
        logging.warning("Example: desk-clock 20")
        return None

    if value <= 0:
        logging.warning(
            "Run duration must be a positive integer. Running until interrupted instead."
        )
        return None

    return value


def _install_signal_handlers() -> dict:
    def _wrap(signame: str):
        return lambda *_: request_shutdown(signame)

    previous = {}
    for sig, name in (
        (getattr(signal, "SIGINT", None), "SIGINT"),
        (getattr(signal, "SIGTERM", None), "SIGTERM"),
    ):
        if sig is None:
            continue
        try:
            previous[sig] = signal.signal(sig, _wrap(name))
        except (ValueError, OSError):  # pragma: no cover - not the main thread / platform dependent
            continue
    return previous


def _restore_signal_handlers(previous: dict) -> None:
    for sig, handler in previous.items():
        try:
            signal.signal(sig, handler)
        except (ValueError, OSError, TypeError):  # pragma: no cover - platform dependent
            continue


def _wait_for_shutdown(duration: Optional[int]) -> None:
    deadline = None if duration is None else time.monotonic() + duration
    while True:
        timeout = WAIT_SLICE
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                request_shutdown("duration elapsed")
                return
            timeout = min(timeout, remaining)
        if _shutdown_event.wait(timeout):
            return


def run_clock(args: argparse.Namespace) -> int:
    duration = parse_duration(args.duration)

    clock = Clock(
        args.pattern,
        update_interval=args.update_interval,
        display_interval=args.display_interval,
        join_timeout=args.join_timeout,
        timezone=config.resolve_timezone(args.timezone) if args.timezone else None,
    )

    _shutdown_event.clear()
    previous_handlers = _install_signal_handlers()
    atexit.register(clock.stop)
    try:
        clock.start()
        if duration is None:
            logging.info("Running until interrupted (Ctrl+C).")
        else:
            logging.info("Running for %d second(s).", duration)
        _wait_for_shutdown(duration)
    finally:
        clock.stop()
        atexit.unregister(clock.stop)
        _restore_signal_handlers(previous_handlers)

    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "duration",
        nargs="?",
        default=None,
        help="Run for this many seconds, then stop (default: run until interrupted)",
    )
    parser.add_argument("--pattern", default=config.CLOCK_TIME_PATTERN, help="Time pattern, e.g. 'HH:mm:ss dd-MM-yyyy'")
    parser.add_argument("--timezone", default=None, help="pytz timezone name (default: configured or local time)")
    parser.add_argument("--update-interval", type=float, default=config.UPDATE_INTERVAL, help="Seconds between clock refreshes")
    parser.add_argument("--display-interval", type=float, default=config.DISPLAY_INTERVAL, help="Seconds between printed lines")
    parser.add_argument("--join-timeout", type=float, default=config.JOIN_TIMEOUT, help="Seconds to wait for each thread on stop")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level (INFO, DEBUG, ...)")
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )

    try:
        TimePattern(args.pattern)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        return run_clock(args)
    except KeyboardInterrupt:
        request_shutdown("KeyboardInterrupt")
        return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
