"""
Signal handling for the orchestration module.

This module manages signal registration, cleanup, and delegation to the
runtime state of active monitoring runs using a global registry.
"""

import logging
import signal
import threading
from typing import Any, Dict

from .shared_state import RuntimeState

logger = logging.getLogger(__name__)

# Signal handlers cannot be bound to instances, so active runs are kept in
# a registry keyed by id(state).
_active_states: Dict[int, RuntimeState] = {}
_active_states_lock = threading.Lock()


class SignalHandler:
    """
    Turns SIGINT and SIGTERM into a shutdown request for registered runs.
    """

    def __init__(self, state: RuntimeState):
        self.state = state
        self._original_sigint_handler = None
        self._original_sigterm_handler = None
        self._signal_handlers_set = False

    def setup_signal_handlers(self) -> None:
        """Register the run and install the handlers (main thread only)."""
        with _active_states_lock:
            _active_states[id(self.state)] = self.state
        try:
            self._original_sigint_handler = signal.signal(signal.SIGINT, self._global_signal_handler)
            self._original_sigterm_handler = signal.signal(signal.SIGTERM, self._global_signal_handler)
            self._signal_handlers_set = True
            logger.debug("Signal handlers set up for monitoring run")
        except ValueError as e:
            # signal.signal() raises ValueError outside the main thread.
            logger.warning(f"Failed to set up signal handlers: {e}")

    def cleanup_signal_handlers(self) -> None:
        """Unregister the run and restore the original handlers."""
        with _active_states_lock:
            _active_states.pop(id(self.state), None)

        if not self._signal_handlers_set:
            return

        try:
            if self._original_sigint_handler is not None:
                signal.signal(signal.SIGINT, self._original_sigint_handler)
            if self._original_sigterm_handler is not None:
                signal.signal(signal.SIGTERM, self._original_sigterm_handler)
            logger.debug("Signal handlers restored")
        except ValueError as e:
            logger.warning(f"Failed to restore signal handlers: {e}")
        finally:
            self._signal_handlers_set = False

    def __enter__(self) -> "SignalHandler":
        self.setup_signal_handlers()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cleanup_signal_handlers()

    @staticmethod
    def _global_signal_handler(signum: int, frame: Any) -> None:
        """
        Set the shutdown event of every registered run.

        Args:
            signum: Signal number that was received
            frame: Current stack frame (unused)
        """
        with _active_states_lock:
            states = list(_active_states.values())

        for state in states:
            state.signals_received += 1
            if state.shutdown_requested.is_set():
                logger.warning("Shutdown already in progress. Please be patient.")
                continue
            logger.info(f"Signal {signal.strsignal(signum)} received. Stopping pollers...")
            state.shutdown_requested.set()
