"""Shared runtime events for the long-running clock process."""

from __future__ import annotations

import logging
import threading

# A shared shutdown event lets signal handlers, exit hooks and the entry point
# cooperate when an exit is requested.  Modules import it as
# ``_shutdown_event``.
shutdown_event = threading.Event()


def request_shutdown(reason: str) -> None:
    """Trigger a graceful shutdown using the shared shutdown event."""

    if not shutdown_event.is_set():
        logging.info("✋ Shutdown requested (%s).", reason)
    shutdown_event.set()
