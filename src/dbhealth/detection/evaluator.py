"""
Threshold evaluation.

Pure decision logic: given a snapshot record and the run configuration,
decide whether the record is an anomaly and whether plan capture and
termination apply. Nothing here touches the database.
"""

import logging
from datetime import datetime
from typing import Optional

from ..classification import StatementClassifier
from ..models.config import RunConfig
from ..models.results import Verdict
from ..models.snapshot import LockObservation, Session, Transaction

logger = logging.getLogger(__name__)


class ThresholdEvaluator:
    """
    Applies the slow-query, long-transaction and lock-contention thresholds.
    """

    def __init__(self, run_config: RunConfig, classifier: Optional[StatementClassifier] = None):
        """
        Args:
            run_config: Thresholds and mode for this run
            classifier: Recognizes diagnostic statements; built-in rules when None
        """
        self.run_config = run_config
        self.classifier = classifier or StatementClassifier()

    def evaluate_session(self, session: Session) -> Verdict:
        """
        A session is slow when it has been running longer than the slow
        threshold, is executing a statement, and that statement is not a
        diagnostic one.
        """
        if session.time <= self.run_config.slow_threshold or session.info is None:
            return Verdict.clear(session.id)

        if self.classifier.is_diagnostic(session.info):
            logger.debug(f"Session {session.id} is running a diagnostic statement; not flagged")
            return Verdict.clear(session.id)

        return Verdict(
            flagged=True,
            session_id=session.id,
            statement=session.info,
            reason=f"ProcessList threshold {self.run_config.slow_threshold} seconds",
            duration=session.time,
        )

    def evaluate_transaction(self, transaction: Transaction, now: Optional[datetime] = None) -> Verdict:
        """
        A transaction is long-running when its duration, derived from its
        start time as of ``now``, exceeds the slow threshold.

        The owning session may be idle inside the transaction, or running a
        diagnostic statement; the verdict then carries no statement, so no
        plan is captured, but it may still be terminated.
        """
        session = transaction.session
        duration = transaction.duration_seconds(now)
        if duration <= self.run_config.slow_threshold:
            return Verdict.clear(session.id)

        # The transaction is flagged either way; only the EXPLAIN is skipped.
        statement = session.info
        if statement is not None and self.classifier.is_diagnostic(statement):
            statement = None

        return Verdict(
            flagged=True,
            session_id=session.id,
            statement=statement,
            reason=f"Long running transaction threshold of {self.run_config.slow_threshold} seconds",
            duration=duration,
            rows_modified=transaction.rows_modified,
        )

    def evaluate_lock(self, lock: LockObservation) -> Verdict:
        """
        A granted lock is contended when its holder has been running for at
        least lock_min_time seconds or at least lock_min_waiting requests
        are blocked behind it. Either condition is enough.
        """
        contended = (
            lock.time >= self.run_config.lock_min_time
            or lock.waiting_threads >= self.run_config.lock_min_waiting
        )
        if not contended:
            return Verdict.clear(lock.session_id)

        return Verdict(
            flagged=True,
            session_id=lock.session_id,
            statement=lock.info,
            reason=(
                f"Lock on {lock.object_schema}.{lock.object_name} held for {lock.time}s "
                f"with {lock.waiting_threads} waiting"
            ),
            duration=lock.time,
        )

    def should_capture_plan(self, verdict: Verdict) -> bool:
        return verdict.flagged and verdict.statement is not None

    def should_terminate(self, verdict: Verdict) -> bool:
        return self.run_config.kill and verdict.flagged and verdict.session_id is not None
