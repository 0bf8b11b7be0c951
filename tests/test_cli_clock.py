import logging
import os
import signal
import threading
import time

import pytest

import cli_clock
from runtime_events import request_shutdown, shutdown_event

FAST = ["--update-interval", "0.05", "--display-interval", "0.1"]


@pytest.fixture(autouse=True)
def _isolate_process_state():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    shutdown_event.clear()
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    shutdown_event.clear()


def _shutdown_later(delay):
    timer = threading.Timer(delay, request_shutdown, args=("test",))
    timer.start()
    return timer


@pytest.mark.parametrize(
    "raw, expected",
    [(None, None), ("5", 5), (" 12 ", 12), ("+3", 3)],
)
def test_parse_duration_valid(raw, expected):
    assert cli_clock.parse_duration(raw) == expected


@pytest.mark.parametrize(
    "raw, message",
    [
        ("abc", "Invalid argument"),
        ("2.5", "Invalid argument"),
        ("-3", "must be a positive integer"),
        ("0", "must be a positive integer"),
    ],
)
def test_parse_duration_invalid_falls_back(raw, message, caplog):
    with caplog.at_level(logging.WARNING):
        assert cli_clock.parse_duration(raw) is None
    assert message in caplog.text


def test_duration_runs_then_exits_cleanly(capsys):
    began = time.monotonic()
    assert cli_clock.main(["1", *FAST]) == 0
    elapsed = time.monotonic() - began

    out, err = capsys.readouterr()
    assert 0.9 <= elapsed < 2.5
    assert len(out.splitlines()) >= 5
    assert "Shutdown requested (duration elapsed)" in err
    assert "Clock stopped" in err
    assert "Clock" not in out


@pytest.mark.parametrize("raw", ["-3", "abc"])
def test_invalid_duration_runs_until_interrupted(raw, capsys):
    timer = _shutdown_later(0.5)
    try:
        assert cli_clock.main([raw, *FAST]) == 0
    finally:
        timer.cancel()

    out, err = capsys.readouterr()
    assert "positive integer" in err
    assert "Running until interrupted" in err
    assert "Shutdown requested (test)" in err
    assert out.splitlines()


def test_no_argument_runs_until_sigterm(capsys):
    def _send_sigterm():
        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            if signal.getsignal(signal.SIGTERM) not in (signal.SIG_DFL, None):
                break
            time.sleep(0.01)
        time.sleep(0.3)
        os.kill(os.getpid(), signal.SIGTERM)

    previous = signal.getsignal(signal.SIGTERM)
    sender = threading.Thread(target=_send_sigterm)
    sender.start()
    try:
        assert cli_clock.main(FAST) == 0
    finally:
        sender.join(5)

    out, err = capsys.readouterr()
    assert "Shutdown requested (SIGTERM)" in err
    assert out.splitlines()
    assert signal.getsignal(signal.SIGTERM) is previous


def test_custom_pattern(capsys):
    assert cli_clock.main(["1", "--pattern", "'tick' yyyy", *FAST]) == 0

    out, _ = capsys.readouterr()
    lines = out.splitlines()
    assert lines
    assert all(line.startswith("tick ") for line in lines)


def test_invalid_pattern_is_a_usage_error(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli_clock.main(["1", "--pattern", "HH:qq"])

    assert excinfo.value.code == 2
    assert "Unknown pattern letter" in capsys.readouterr().err


def test_non_finite_join_timeout_exits_cleanly(capsys):
    assert cli_clock.main(["1", "--join-timeout", "inf", *FAST]) == 0

    _, err = capsys.readouterr()
    assert "join_timeout must be finite" in err
    assert "Clock stopped" in err
