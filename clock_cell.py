"""Single-slot holder for the most recent clock reading."""

from __future__ import annotations

import datetime as _dt


class ClockCell:
    """Publish/observe cell shared by the updater and display threads.

    The cell holds a reference to an immutable ``datetime``.  ``set`` swaps the
    reference in a single attribute store and ``get`` reads it back in a single
    load; the interpreter performs both atomically, so a reader always sees a
    complete value that some writer (or the constructor) stored.  Neither side
    takes a lock.
    """

    __slots__ = ("_value",)

    def __init__(self, initial: _dt.datetime) -> None:
        self._value = initial

    def set(self, value: _dt.datetime) -> None:
        self._value = value

    def get(self) -> _dt.datetime:
        return self._value

    def __repr__(self) -> str:
        return f"ClockCell({self._value!r})"
