# config.py

#!/usr/bin/env python3
import copy
import json
import logging
import math
import os
import threading
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import pytz
import yaml
from dotenv import load_dotenv

# ─── Environment helpers ───────────────────────────────────────────────────────

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))


def _initialise_env() -> None:
    """Load environment variables from `.env` if present."""

    candidate_paths = []

    project_root = Path(SCRIPT_DIR)
    candidate_paths.append(project_root / ".env")

    cwd_path = Path.cwd() / ".env"
    if cwd_path != candidate_paths[0]:
        candidate_paths.append(cwd_path)

    for path in candidate_paths:
        if not path.is_file():
            continue
        load_dotenv(path, override=False)


_initialise_env()


def _get_first_env_var(*names: str):
    """Return the first populated environment variable from *names.*"""

    for name in names:
        value = os.environ.get(name)
        if value:
            return value

    return None


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a deep merge of *base* with *overrides* without mutating inputs."""

    result: Dict[str, Any] = copy.deepcopy(base)
    for key, value in overrides.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        elif isinstance(value, list):
            result[key] = [copy.deepcopy(item) for item in value]
        else:
            result[key] = copy.deepcopy(value)
    return result


def _load_profile_file(path: str) -> Dict[str, Any]:
    """Load an optional JSON/YAML clock profile file."""

    if not path:
        return {}
    if not os.path.isfile(path):
        return {}

    try:
        with open(path, "r", encoding="utf-8") as fh:
            if path.endswith((".yaml", ".yml")):
                data = yaml.safe_load(fh)
            else:
                data = json.load(fh)
    except Exception as exc:  # OSError, JSON or YAML parse errors
        logging.warning("Failed to load clock profile configuration %s: %s", path, exc)
        return {}

    if not isinstance(data, Mapping):
        logging.warning("Clock profile file %s did not contain an object", path)
        return {}

    return dict(data)

# ─── Clock profiles ────────────────────────────────────────────────────────────


def _base_profile_template() -> Dict[str, Any]:
    return {
        "description": "24-hour time, then day-month-year",
        "pattern": "HH:mm:ss dd-MM-yyyy",
        "timezone": None,
        "intervals": {
            "update": 0.2,
            "display": 1.0,
            "join_timeout": 2.0,
        },
    }


def _build_default_clock_profiles() -> Dict[str, Dict[str, Any]]:
    base = _base_profile_template()
    return {
        "default": base,
        "iso": _deep_merge(
            base,
            {
                "description": "ISO-style date and time with UTC offset",
                "pattern": "yyyy-MM-dd'T'HH:mm:ssZ",
            },
        ),
        "twelve_hour": _deep_merge(
            base,
            {
                "description": "12-hour time with weekday and month name",
                "pattern": "hh:mm:ss a EEE dd MMM yyyy",
            },
        ),
    }


CLOCK_PROFILES_PATH = os.environ.get(
    "CLOCK_PROFILES_PATH", os.path.join(SCRIPT_DIR, "clock_profiles.json")
)
DEFAULT_CLOCK_PROFILES = _build_default_clock_profiles()
_profile_file_payload = _load_profile_file(CLOCK_PROFILES_PATH)
if isinstance(_profile_file_payload, Mapping) and "profiles" in _profile_file_payload:
    raw_overrides = _profile_file_payload.get("profiles")
else:
    raw_overrides = _profile_file_payload

PROFILE_OVERRIDES: Dict[str, Any]
if isinstance(raw_overrides, Mapping):
    PROFILE_OVERRIDES = dict(raw_overrides)
else:
    PROFILE_OVERRIDES = {}

CLOCK_PROFILES: Dict[str, Dict[str, Any]] = {}
for profile_id, base_profile in DEFAULT_CLOCK_PROFILES.items():
    overrides = PROFILE_OVERRIDES.get(profile_id)
    if isinstance(overrides, Mapping):
        CLOCK_PROFILES[profile_id] = _deep_merge(base_profile, overrides)
    else:
        CLOCK_PROFILES[profile_id] = copy.deepcopy(base_profile)

for profile_id, profile_data in PROFILE_OVERRIDES.items():
    if profile_id in CLOCK_PROFILES:
        continue
    if isinstance(profile_data, Mapping):
        CLOCK_PROFILES[profile_id] = _deep_merge(
            _base_profile_template(), profile_data
        )

CLOCK_PROFILE_ID = os.environ.get("CLOCK_PROFILE", "default")
if CLOCK_PROFILE_ID not in CLOCK_PROFILES:
    logging.warning(
        "Unknown clock profile %s; defaulting to default",
        CLOCK_PROFILE_ID,
    )
    CLOCK_PROFILE_ID = "default"

ACTIVE_CLOCK_PROFILE = CLOCK_PROFILES[CLOCK_PROFILE_ID]


def get_available_clock_profiles() -> Sequence[str]:
    return tuple(sorted(CLOCK_PROFILES.keys()))


def get_clock_profile_id() -> str:
    return CLOCK_PROFILE_ID


def get_clock_profile() -> Dict[str, Any]:
    return copy.deepcopy(ACTIVE_CLOCK_PROFILE)


def profile_value(path: str, default: Any = None) -> Any:
    if not path:
        return copy.deepcopy(ACTIVE_CLOCK_PROFILE)

    parts = [part for part in path.split(".") if part]
    node: Any = ACTIVE_CLOCK_PROFILE
    for part in parts:
        if not isinstance(node, Mapping):
            return default
        node = node.get(part)
        if node is None:
            return default

    if isinstance(node, Mapping):
        return copy.deepcopy(node)
    if isinstance(node, list):
        return list(node)
    return node


def coerce_seconds(value: Any, default: float, *, minimum: float, name: str = "duration") -> float:
    """Return *value* as a finite number of seconds, logging on invalid input.

    Non-numeric or non-finite values fall back to *default*; the result is
    clamped to ``[minimum, threading.TIMEOUT_MAX]`` so it is always a valid
    wait or join timeout.
    """

    try:
        seconds = float(value)
    except (TypeError, ValueError):
        logging.warning("Invalid %s value %r; using default %.2f", name, value, default)
        seconds = float(default)

    if not math.isfinite(seconds):
        logging.warning("%s must be finite; using default %.2f", name, default)
        seconds = float(default)

    if seconds < minimum:
        logging.warning(
            "%s must be at least %.2f; clamping %.2f", name, minimum, seconds
        )
        seconds = minimum

    return min(seconds, threading.TIMEOUT_MAX)


def _env_seconds(env_name: str, default: float, *, minimum: float) -> float:
    """Return a duration in seconds from *env_name*, or *default* when unset."""

    raw_value = os.environ.get(env_name)
    if raw_value is None or not raw_value.strip():
        return default
    return coerce_seconds(raw_value, default, minimum=minimum, name=env_name)


def resolve_timezone(name: Optional[str]):
    """Return a pytz timezone for *name*, or ``None`` for system local time."""

    if name is None:
        return None
    name = str(name).strip()
    if not name or name.lower() == "local":
        return None
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logging.warning("Unknown timezone %s; using system local time", name)
        return None


# ─── Clock configuration ───────────────────────────────────────────────────────
MIN_INTERVAL = 0.01

CLOCK_TIME_PATTERN = (
    _get_first_env_var("CLOCK_PATTERN")
    or profile_value("pattern", None)
    or _base_profile_template()["pattern"]
)

CLOCK_TIMEZONE_NAME = _get_first_env_var("CLOCK_TIMEZONE") or profile_value("timezone", None)
CLOCK_TIMEZONE = resolve_timezone(CLOCK_TIMEZONE_NAME)

# How often the updater refreshes the shared reading.
UPDATE_INTERVAL = _env_seconds(
    "CLOCK_UPDATE_INTERVAL",
    coerce_seconds(
        profile_value("intervals.update", 0.2), 0.2, minimum=MIN_INTERVAL, name="intervals.update"
    ),
    minimum=MIN_INTERVAL,
)
# How often the display prints a line.
DISPLAY_INTERVAL = _env_seconds(
    "CLOCK_DISPLAY_INTERVAL",
    coerce_seconds(
        profile_value("intervals.display", 1.0), 1.0, minimum=MIN_INTERVAL, name="intervals.display"
    ),
    minimum=MIN_INTERVAL,
)
# Per-thread bound on waiting for a task to finish during stop().
JOIN_TIMEOUT = _env_seconds(
    "CLOCK_JOIN_TIMEOUT",
    coerce_seconds(
        profile_value("intervals.join_timeout", 2.0), 2.0, minimum=0.0, name="intervals.join_timeout"
    ),
    minimum=0.0,
)

LOG_LEVEL = os.environ.get("CLOCK_LOG_LEVEL", "INFO")
