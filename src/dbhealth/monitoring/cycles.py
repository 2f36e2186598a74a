"""
The three monitoring cycles.

Each cycle borrows one pooled connection, reads a snapshot, evaluates every
record and acts on the positive verdicts: emit the record, capture the plan
of its statement and, when killing is enabled, terminate its session.
A plan or kill failure only affects its own record.
"""

import logging
from typing import Any, List, Set

from ..db import ConnectionProvider, Mitigator, PlanCapture, SnapshotReader
from ..detection import ThresholdEvaluator
from ..models.config import POLLER_LOCKS, POLLER_PROCESSLIST, POLLER_TRANSACTIONS, RunConfig
from ..models.results import CycleResult, Verdict
from ..models.snapshot import Transaction
from ..reporting import RecordSerializer, SummaryReporter
from ..validation import ErrorSeverity, QueryError, handle_query_error
from .poller import MonitoringCycle

logger = logging.getLogger(__name__)


class DatabaseCycle(MonitoringCycle):
    """Shared plumbing for cycles that act on the monitored server."""

    def __init__(
        self,
        provider: ConnectionProvider,
        evaluator: ThresholdEvaluator,
        serializer: RecordSerializer,
    ):
        self.provider = provider
        self.evaluator = evaluator
        self.serializer = serializer

    @property
    def run_config(self) -> RunConfig:
        return self.evaluator.run_config

    def run_once(self, cycle_number: int) -> CycleResult:
        result = CycleResult(poller=self.name, cycle=cycle_number)
        with self.provider.connection() as connection:
            self._run(connection, result)
        return result

    def _run(self, connection: Any, result: CycleResult) -> None:
        raise NotImplementedError

    def _act(self, connection: Any, verdict: Verdict, result: CycleResult, killed: Set[int]) -> None:
        """Capture the plan and terminate the session, as the verdict allows."""
        if self.evaluator.should_capture_plan(verdict):
            self._capture_plan(connection, verdict, result)
        if self.evaluator.should_terminate(verdict):
            self._terminate(connection, verdict, result, killed)

    def _capture_plan(self, connection: Any, verdict: Verdict, result: CycleResult) -> None:
        try:
            plan = PlanCapture(connection).explain(verdict.statement)
        except QueryError as e:
            result.plan_failures += 1
            handle_query_error(
                e,
                f"EXPLAIN for session {verdict.session_id}",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
            return

        result.plans_captured += 1
        self.serializer.emit(
            "plan",
            f"EXPLAIN for session {verdict.session_id}",
            data=plan,
            poller=self.name,
            session_id=verdict.session_id,
            statement=verdict.statement,
        )

    def _terminate(self, connection: Any, verdict: Verdict, result: CycleResult, killed: Set[int]) -> None:
        session_id = verdict.session_id
        if session_id in killed:
            return
        killed.add(session_id)

        try:
            issued = Mitigator(connection).terminate(session_id)
        except QueryError as e:
            result.kill_failures += 1
            handle_query_error(
                e,
                f"KILL for session {session_id}",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger,
            )
            return

        if issued:
            result.kills_issued += 1
            result.killed_sessions.append(session_id)
            self.serializer.emit(
                "kill",
                f"Killed session {session_id}",
                poller=self.name,
                session_id=session_id,
                reason=verdict.reason,
            )

    def _inspect_locks(self, reader: SnapshotReader, result: CycleResult) -> int:
        """Read granted locks and emit the contended ones; returns the number read."""
        locks = reader.read_granted_locks()
        for lock in locks:
            verdict = self.evaluator.evaluate_lock(lock)
            if not verdict.flagged:
                continue
            result.contended_locks += 1
            self.serializer.emit(
                "lock_contention",
                verdict.reason,
                data=lock,
                poller=self.name,
            )
        return len(locks)


class ProcessListCycle(DatabaseCycle):
    """
    Flags statements running longer than the slow threshold.

    When the number of slow sessions in one cycle exceeds lock_threshold,
    the granted locks are inspected in the same cycle.
    """

    name = POLLER_PROCESSLIST

    def _run(self, connection: Any, result: CycleResult) -> None:
        reader = SnapshotReader(connection)
        sessions = reader.read_sessions()
        result.records_read = len(sessions)

        killed: Set[int] = set()
        for session in sessions:
            verdict = self.evaluator.evaluate_session(session)
            if not verdict.flagged:
                continue
            result.anomalies += 1
            self.serializer.emit(
                "slow_query",
                f"Long running query hit {verdict.reason}",
                data=session,
                poller=self.name,
            )
            self._act(connection, verdict, result, killed)

        threshold = self.run_config.lock_threshold
        if threshold > 0 and result.anomalies > threshold:
            logger.warning(
                f"{result.anomalies} slow sessions exceed lock threshold {threshold}; inspecting locks"
            )
            try:
                self._inspect_locks(reader, result)
            except QueryError as e:
                handle_query_error(
                    e,
                    "inline lock inspection",
                    severity=ErrorSeverity.WARNING,
                    reraise=False,
                    logger=logger,
                )


class TransactionCycle(DatabaseCycle):
    """
    Flags transactions open longer than the slow threshold and reports a
    per-cycle summary.
    """

    name = POLLER_TRANSACTIONS

    def __init__(
        self,
        provider: ConnectionProvider,
        evaluator: ThresholdEvaluator,
        serializer: RecordSerializer,
        reporter: SummaryReporter,
    ):
        super().__init__(provider, evaluator, serializer)
        self.reporter = reporter

    def _run(self, connection: Any, result: CycleResult) -> None:
        rc = self.run_config
        reader = SnapshotReader(connection)
        transactions = reader.read_long_running_transactions(
            min_age_seconds=rc.slow_threshold,
            min_rows_modified=rc.rows_threshold,
            limit=rc.transaction_limit,
        )
        result.records_read = len(transactions)

        anomalies: List[Verdict] = []
        records: List[Transaction] = []
        killed: Set[int] = set()
        for transaction in transactions:
            # Age is measured on the server clock that selected the row.
            verdict = self.evaluator.evaluate_transaction(transaction, transaction.server_now)
            if not verdict.flagged:
                continue
            anomalies.append(verdict)
            records.append(transaction)
            self.serializer.emit(
                "long_transaction",
                f"Long running transaction hit {verdict.reason}",
                data=transaction,
                poller=self.name,
                duration=verdict.duration,
            )
            self._act(connection, verdict, result, killed)

        result.anomalies = len(anomalies)
        result.summary = self.reporter.report(self.name, anomalies, records)


class LockCycle(DatabaseCycle):
    """Reports granted locks that are held long or block other requests."""

    name = POLLER_LOCKS

    def _run(self, connection: Any, result: CycleResult) -> None:
        result.records_read = self._inspect_locks(SnapshotReader(connection), result)
        result.anomalies = result.contended_locks
