"""
Poller lifecycle.

A Poller drives one monitoring cycle on its own thread: run a cycle, wait
the interval, repeat, until the shared shutdown event is set or, in batch
mode, after the first cycle.
"""

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, List, Optional

from ..models.results import CycleResult
from ..validation import (
    DBConnectionError,
    ErrorSeverity,
    QueryError,
    handle_query_error,
)

logger = logging.getLogger(__name__)


class PollerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class MonitoringCycle(ABC):
    """One unit of work repeated by a poller."""

    name: str = ""

    @abstractmethod
    def run_once(self, cycle_number: int) -> CycleResult:
        """
        Run one complete cycle.

        Raises:
            QueryError: The cycle's snapshot could not be read; only this
                cycle is lost
            DBConnectionError: The server is unreachable; fatal to the poller
        """


class Poller:
    """
    Runs a MonitoringCycle repeatedly on a dedicated thread.

    State moves IDLE -> RUNNING -> (DRAINING ->) STOPPED. Shutdown is
    observed at the top of every iteration and during the inter-cycle
    delay, which is an interruptible wait on the shared event; a cycle in
    progress is always completed.
    """

    def __init__(
        self,
        cycle: MonitoringCycle,
        interval_seconds: float,
        shutdown_event: threading.Event,
        batch: bool = False,
        on_fatal: Optional[Callable[["Poller", BaseException], None]] = None,
    ):
        """
        Args:
            cycle: The work done on every iteration
            interval_seconds: Delay between the end of one cycle and the next
            shutdown_event: Process-wide cancellation signal
            batch: Stop after the first cycle
            on_fatal: Called from the poller thread on a fatal error
        """
        self.cycle = cycle
        self.name = cycle.name
        self.interval_seconds = interval_seconds
        self.shutdown_event = shutdown_event
        self.batch = batch
        self.on_fatal = on_fatal

        self.state = PollerState.IDLE
        self.thread: Optional[threading.Thread] = None
        self.error: Optional[BaseException] = None

        self.cycles_started = 0
        self.cycles_completed = 0
        self.cycles_failed = 0
        self.last_result: Optional[CycleResult] = None
        self.state_history: List[PollerState] = [PollerState.IDLE]

        logger.debug(f"Poller {self.name} initialized (interval {interval_seconds}s, batch={batch})")

    def _set_state(self, state: PollerState) -> None:
        self.state = state
        self.state_history.append(state)

    def start(self) -> None:
        """Start the poller thread."""
        if self.thread is not None and self.thread.is_alive():
            logger.warning(f"Poller {self.name} already running")
            return

        self.thread = threading.Thread(
            target=self.run,
            name=f"Poller-{self.name}",
            daemon=True,
        )
        self.thread.start()
        logger.info(f"Poller {self.name} started")

    def stop(self, timeout: float = 5.0) -> None:
        """
        Request shutdown and wait for the thread to finish.

        The shutdown event is shared, so this stops every poller using it.
        """
        self.shutdown_event.set()
        self.join(timeout)
        if self.is_alive():
            logger.warning(f"Poller {self.name} did not stop within {timeout}s")

    def join(self, timeout: Optional[float] = None) -> None:
        if self.thread is not None:
            self.thread.join(timeout=timeout)

    def is_alive(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def run(self) -> None:
        """The poller loop; the thread target, also callable directly."""
        self._set_state(PollerState.RUNNING)
        logger.info(f"Poller {self.name} loop started")
        try:
            while True:
                if self.shutdown_event.is_set():
                    self._set_state(PollerState.DRAINING)
                    break

                if not self._run_cycle():
                    break

                if self.batch:
                    logger.info(f"Poller {self.name}: batch mode, stopping after one cycle")
                    break

                if self.shutdown_event.wait(self.interval_seconds):
                    self._set_state(PollerState.DRAINING)
                    break
        finally:
            self._set_state(PollerState.STOPPED)
            logger.info(
                f"Poller {self.name} stopped after {self.cycles_completed} cycles "
                f"({self.cycles_failed} failed)"
            )

    def _run_cycle(self) -> bool:
        """Run one cycle; returns False when the poller must stop."""
        self.cycles_started += 1
        cycle_number = self.cycles_started
        try:
            result = self.cycle.run_once(cycle_number)
        except QueryError as e:
            self.cycles_failed += 1
            handle_query_error(
                e,
                f"{self.name} cycle {cycle_number}",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
            return True
        except DBConnectionError as e:
            self.cycles_failed += 1
            self.error = e
            logger.error(f"Poller {self.name} lost its database connection: {e}")
            if self.on_fatal is not None:
                self.on_fatal(self, e)
            return False

        self.cycles_completed += 1
        self.last_result = result
        logger.debug(
            f"Poller {self.name} cycle {cycle_number}: read {result.records_read}, "
            f"flagged {result.anomalies}, killed {result.kills_issued}"
        )
        return True
