"""
Shared runtime state for the orchestration module.

This module defines the runtime state and the timeout constants shared by
the signal handler, the monitoring coordinator and the pollers.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class RuntimeState:
    """
    Runtime state shared across orchestration components.

    ``shutdown_requested`` is the single process-wide cancellation signal:
    it is set by SIGINT/SIGTERM and by the coordinator when a poller hits a
    fatal connection error. Pollers wait on it between cycles.
    """
    shutdown_requested: threading.Event = field(default_factory=threading.Event)
    fatal_error: Optional[BaseException] = None
    started_at: datetime = field(default_factory=datetime.now)
    signals_received: int = 0

    def request_shutdown(self, error: Optional[BaseException] = None) -> None:
        if error is not None and self.fatal_error is None:
            self.fatal_error = error
        self.shutdown_requested.set()


class TimeoutConstants:
    """
    Centralized timeout configuration.
    """
    # Poller thread timeouts
    POLLER_STOP_TIMEOUT = 5.0
    JOIN_POLL_INTERVAL = 0.5

    # Exit statuses
    EXIT_OK = 0
    EXIT_FAILURE = 1
