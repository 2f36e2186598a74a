"""
Snapshot readers.

Each reader issues one fixed query and decodes every row into a snapshot
model. A failure to execute the query or to decode any single row raises
QueryError; there are no partial results.
"""

import logging
from typing import Any, Callable, List, Sequence, Tuple, TypeVar

from ..models.snapshot import LockObservation, Session, Transaction
from ..validation import QueryError
from .decoding import optional_text, required_int, timestamp
from .queries import (
    GRANTED_LOCKS_QUERY,
    LONG_RUNNING_TRANSACTIONS_QUERY,
    SESSIONS_QUERY,
    fetch_all,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SESSION_COLUMNS = 8
TRANSACTION_COLUMNS = SESSION_COLUMNS + 5
LOCK_COLUMNS = 11


def _decode_session(row: Sequence[Any]) -> Session:
    return Session(
        id=required_int(row[0], "Id"),
        user=optional_text(row[1]),
        host=optional_text(row[2]),
        db=optional_text(row[3]),
        command=optional_text(row[4]),
        time=required_int(row[5], "Time"),
        state=optional_text(row[6]),
        info=optional_text(row[7]),
    )


def _decode_transaction(row: Sequence[Any]) -> Transaction:
    return Transaction(
        session=_decode_session(row[:SESSION_COLUMNS]),
        trx_id=required_int(row[8], "trx_id"),
        started=timestamp(row[9], "trx_started"),
        thread_id=required_int(row[10], "trx_mysql_thread_id"),
        rows_modified=required_int(row[11], "trx_rows_modified"),
        server_now=timestamp(row[12], "server_now"),
    )


def _decode_lock(row: Sequence[Any]) -> LockObservation:
    return LockObservation(
        session_id=required_int(row[0], "PROCESSLIST_ID"),
        thread_name=optional_text(row[1]),
        thread_type=optional_text(row[2]),
        state=optional_text(row[3]),
        info=optional_text(row[4]),
        time=required_int(row[5], "PROCESSLIST_TIME"),
        object_schema=optional_text(row[6]),
        object_name=optional_text(row[7]),
        lock_mode=optional_text(row[8]),
        lock_status=optional_text(row[9]),
        waiting_threads=required_int(row[10], "WAITING_THREADS"),
    )


def decode_rows(
    rows: List[Tuple[Any, ...]],
    decoder: Callable[[Sequence[Any]], T],
    columns: int,
    context: str,
) -> List[T]:
    """
    Decode every row or none.

    Raises:
        QueryError: On the first row with the wrong shape or an undecodable value
    """
    decoded: List[T] = []
    for index, row in enumerate(rows):
        if len(row) < columns:
            raise QueryError(f"{context}: row {index} has {len(row)} columns, expected {columns}")
        try:
            decoded.append(decoder(row))
        except (TypeError, ValueError) as e:
            raise QueryError(f"{context}: cannot decode row {index}: {e}") from e
    return decoded


class SnapshotReader:
    """
    Reads session, transaction and lock snapshots over one borrowed connection.
    """

    def __init__(self, connection: Any):
        self.connection = connection

    def read_sessions(self) -> List[Session]:
        """Full process list, idle sessions included."""
        rows = fetch_all(self.connection, SESSIONS_QUERY, context="reading process list")
        sessions = decode_rows(rows, _decode_session, SESSION_COLUMNS, "process list")
        logger.debug(f"Read {len(sessions)} sessions")
        return sessions

    def read_long_running_transactions(
        self, min_age_seconds: int, min_rows_modified: int, limit: int
    ) -> List[Transaction]:
        """
        Transactions started more than ``min_age_seconds`` ago that have
        modified more than ``min_rows_modified`` rows, oldest first, then by
        rows modified descending, at most ``limit`` of them.
        """
        rows = fetch_all(
            self.connection,
            LONG_RUNNING_TRANSACTIONS_QUERY,
            (int(min_age_seconds), int(min_rows_modified), int(limit)),
            context="reading long-running transactions",
        )
        transactions = decode_rows(rows, _decode_transaction, TRANSACTION_COLUMNS, "transactions")
        logger.debug(f"Read {len(transactions)} long-running transactions")
        return transactions

    def read_granted_locks(self) -> List[LockObservation]:
        """Granted locks with the number of lock requests waiting on each."""
        rows = fetch_all(self.connection, GRANTED_LOCKS_QUERY, context="reading granted locks")
        locks = decode_rows(rows, _decode_lock, LOCK_COLUMNS, "granted locks")
        logger.debug(f"Read {len(locks)} granted locks")
        return locks
