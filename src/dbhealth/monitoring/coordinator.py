"""
Monitoring coordination.

The MonitoringCoordinator builds one Poller per enabled poller setting,
starts them all against the shared connection provider, waits for all of
them to finish and turns the outcome into a process exit status.
"""

import logging
import time
from typing import Dict, List, Optional, Type

from ..classification import StatementClassifier
from ..db import ConnectionProvider
from ..detection import ThresholdEvaluator
from ..models.config import POLLER_LOCKS, POLLER_PROCESSLIST, POLLER_TRANSACTIONS, AppConfig, PollerSettings
from ..orchestration import RuntimeState, TimeoutConstants
from ..reporting import RecordSerializer, SummaryReporter
from .cycles import DatabaseCycle, LockCycle, ProcessListCycle, TransactionCycle
from .poller import Poller

logger = logging.getLogger(__name__)

CYCLE_TYPES: Dict[str, Type[DatabaseCycle]] = {
    POLLER_PROCESSLIST: ProcessListCycle,
    POLLER_TRANSACTIONS: TransactionCycle,
    POLLER_LOCKS: LockCycle,
}


class MonitoringCoordinator:
    """
    Runs the enabled pollers concurrently until they all stop.

    Pollers stop on their own in batch mode; otherwise they run until the
    shared shutdown event is set by a signal or by a fatal connection error
    in any poller.
    """

    def __init__(
        self,
        app_config: AppConfig,
        provider: ConnectionProvider,
        state: RuntimeState,
        serializer: Optional[RecordSerializer] = None,
        classifier: Optional[StatementClassifier] = None,
    ):
        """
        Args:
            app_config: Loaded and overridden configuration
            provider: Shared connection provider, initialized lazily
            state: Runtime state holding the shutdown event
            serializer: Record output; stdout when None
            classifier: Diagnostic statement classifier; built from the
                configured rules when None
        """
        self.app_config = app_config
        self.provider = provider
        self.state = state
        self.serializer = serializer or RecordSerializer()
        self.classifier = classifier or StatementClassifier(
            app_config.rules, cache_size=app_config.classifier_cache_size
        )
        self.evaluator = ThresholdEvaluator(app_config.run, self.classifier)
        self.reporter = SummaryReporter(app_config.run, self.serializer)
        self.pollers: List[Poller] = []

    def build_cycle(self, settings: PollerSettings) -> DatabaseCycle:
        cycle_type = CYCLE_TYPES[settings.name]
        if cycle_type is TransactionCycle:
            return TransactionCycle(self.provider, self.evaluator, self.serializer, self.reporter)
        return cycle_type(self.provider, self.evaluator, self.serializer)

    def build_pollers(self) -> List[Poller]:
        self.pollers = [
            Poller(
                self.build_cycle(settings),
                interval_seconds=settings.interval_seconds,
                shutdown_event=self.state.shutdown_requested,
                batch=self.app_config.run.batch,
                on_fatal=self._on_fatal,
            )
            for settings in self.app_config.enabled_pollers()
        ]
        return self.pollers

    def _on_fatal(self, poller: Poller, error: BaseException) -> None:
        logger.error(f"Poller {poller.name} failed fatally; stopping all pollers")
        self.state.request_shutdown(error)

    def run(self) -> int:
        """
        Start every enabled poller and wait for all of them.

        Returns:
            0 after a completed batch run or an interrupt, 1 after a fatal
            connection error or when no poller is enabled
        """
        pollers = self.build_pollers()
        if not pollers:
            logger.error("No pollers enabled; nothing to monitor")
            return TimeoutConstants.EXIT_FAILURE

        logger.info(
            f"Starting {len(pollers)} pollers: {', '.join(p.name for p in pollers)} "
            f"(batch={self.app_config.run.batch}, kill={self.app_config.run.kill})"
        )
        for poller in pollers:
            poller.start()

        self._wait_for_pollers()

        if self.state.fatal_error is not None:
            logger.error(f"Monitoring aborted: {self.state.fatal_error}")
            return TimeoutConstants.EXIT_FAILURE

        logger.info("Monitoring finished")
        return TimeoutConstants.EXIT_OK

    def _wait_for_pollers(self) -> None:
        """
        Join all pollers, polling so the main thread keeps handling signals.

        There is no deadline: an in-flight cycle always finishes. Once shutdown
        is requested, a warning is logged every shutdown_timeout seconds while
        pollers are still running.
        """
        timeout = self.app_config.shutdown_timeout
        warn_at: Optional[float] = None
        for poller in self.pollers:
            while poller.is_alive():
                poller.join(timeout=TimeoutConstants.JOIN_POLL_INTERVAL)
                if not self.state.shutdown_requested.is_set():
                    continue
                now = time.monotonic()
                if warn_at is None:
                    warn_at = now + timeout
                elif now >= warn_at and poller.is_alive():
                    running = ", ".join(p.name for p in self.pollers if p.is_alive())
                    logger.warning(
                        f"Pollers still running {timeout}s after shutdown was requested: {running}; "
                        f"waiting for in-flight cycles to finish"
                    )
                    warn_at = now + timeout

    def get_poller_stats(self) -> List[Dict[str, object]]:
        return [
            {
                "name": p.name,
                "state": p.state.value,
                "cycles_completed": p.cycles_completed,
                "cycles_failed": p.cycles_failed,
                "error": str(p.error) if p.error else None,
            }
            for p in self.pollers
        ]
