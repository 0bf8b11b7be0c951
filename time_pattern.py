#!/usr/bin/env python3
"""
time_pattern.py

Render timestamps with letter patterns such as ``HH:mm:ss dd-MM-yyyy``.

  • Runs of the same letter form one field; the run length picks the width
  • Text inside single quotes is copied verbatim ('' is a literal quote)
  • Every other non-letter character is copied verbatim
Month and weekday names are always English so output does not depend on the
process locale.
"""

from __future__ import annotations

import datetime as _dt
from typing import Callable, List, Tuple

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

Field = Callable[[_dt.datetime], str]

DEFAULT_PATTERN = "HH:mm:ss dd-MM-yyyy"


def _number(getter: Callable[[_dt.datetime], int], width: int) -> Field:
    return lambda ts: str(getter(ts)).zfill(width)


def _year(count: int) -> Field:
    if count == 2:
        return lambda ts: f"{ts.year % 100:02d}"
    return _number(lambda ts: ts.year, count)


def _month(count: int) -> Field:
    if count <= 2:
        return _number(lambda ts: ts.month, count)
    if count == 3:
        return lambda ts: _MONTHS[ts.month - 1][:3]
    return lambda ts: _MONTHS[ts.month - 1]


def _weekday(count: int) -> Field:
    if count <= 3:
        return lambda ts: _WEEKDAYS[ts.weekday()][:3]
    return lambda ts: _WEEKDAYS[ts.weekday()]


def _fraction(count: int) -> Field:
    if count > 6:
        raise ValueError("Fraction of second supports at most 6 digits (SSSSSS)")
    return lambda ts: f"{ts.microsecond:06d}"[:count]


def _offset(_count: int) -> Field:
    def render(ts: _dt.datetime) -> str:
        offset = ts.utcoffset()
        if offset is None:
            return ""
        minutes = int(offset.total_seconds()) // 60
        sign = "-" if minutes < 0 else "+"
        hours, minutes = divmod(abs(minutes), 60)
        return f"{sign}{hours:02d}{minutes:02d}"

    return render


def _zone_name(_count: int) -> Field:
    return lambda ts: ts.tzname() or ""


def _hour12(ts: _dt.datetime) -> int:
    return ts.hour % 12 or 12


_FIELD_BUILDERS = {
    "y": _year,
    "M": _month,
    "d": lambda n: _number(lambda ts: ts.day, n),
    "H": lambda n: _number(lambda ts: ts.hour, n),
    "h": lambda n: _number(_hour12, n),
    "m": lambda n: _number(lambda ts: ts.minute, n),
    "s": lambda n: _number(lambda ts: ts.second, n),
    "S": _fraction,
    "a": lambda n: (lambda ts: "AM" if ts.hour < 12 else "PM"),
    "E": _weekday,
    "Z": _offset,
    "z": _zone_name,
}


def _literal(text: str) -> Field:
    return lambda ts: text


def _tokenize(pattern: str) -> List[Tuple[str, str]]:
    """Split *pattern* into ``("field", letters)`` and ``("text", literal)`` tokens."""

    tokens: List[Tuple[str, str]] = []
    i = 0
    length = len(pattern)
    while i < length:
        ch = pattern[i]
        if ch == "'":
            if i + 1 < length and pattern[i + 1] == "'":
                tokens.append(("text", "'"))
                i += 2
                continue
            end = i + 1
            chunk = []
            while True:
                if end >= length:
                    raise ValueError(f"Unterminated quote in time pattern {pattern!r}")
                if pattern[end] == "'":
                    if end + 1 < length and pattern[end + 1] == "'":
                        chunk.append("'")
                        end += 2
                        continue
                    break
                chunk.append(pattern[end])
                end += 1
            tokens.append(("text", "".join(chunk)))
            i = end + 1
        elif ch.isascii() and ch.isalpha():
            end = i
            while end < length and pattern[end] == ch:
                end += 1
            tokens.append(("field", pattern[i:end]))
            i = end
        else:
            tokens.append(("text", ch))
            i += 1
    return tokens


class TimePattern:
    """Compiled letter pattern; ``format`` renders a ``datetime`` with it."""

    def __init__(self, pattern: str = DEFAULT_PATTERN) -> None:
        self.pattern = pattern
        self._fields: List[Field] = []
        for kind, value in _tokenize(pattern):
            if kind == "text":
                self._fields.append(_literal(value))
                continue
            builder = _FIELD_BUILDERS.get(value[0])
            if builder is None:
                raise ValueError(f"Unknown pattern letter {value[0]!r} in {pattern!r}")
            self._fields.append(builder(len(value)))

    def format(self, timestamp: _dt.datetime) -> str:
        return "".join(field(timestamp) for field in self._fields)

    def __repr__(self) -> str:
        return f"TimePattern({self.pattern!r})"
