"""
Snapshot data models.

These records are rebuilt from the live server on every cycle and discarded
once the cycle has reported. Nothing here is persisted.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Session:
    """
    One row of the server's process list.

    Attributes:
        id: Connection (processlist) identifier, the argument of KILL.
        user: Account the session is authenticated as.
        host: Client host and port.
        db: Default database, None when no database is selected.
        command: Command kind, e.g. "Query" or "Sleep".
        time: Seconds the session has been in its current state.
        state: Thread state, e.g. "Sending data".
        info: Statement being executed, None when the session is idle.
    """

    id: int
    user: Optional[str]
    host: Optional[str]
    db: Optional[str]
    command: Optional[str]
    time: int
    state: Optional[str]
    info: Optional[str]


@dataclass
class Transaction:
    """
    An active InnoDB transaction together with the session that owns it.
    """

    session: Session
    trx_id: int
    started: datetime
    thread_id: int
    # Rows inserted, updated or deleted so far; what a rollback has to undo.
    rows_modified: int
    # Server clock when the snapshot was read, same time zone as ``started``.
    server_now: Optional[datetime] = None

    def duration_seconds(self, now: Optional[datetime] = None) -> int:
        """
        Seconds elapsed since the transaction started, as of ``now``.

        Defaults to the server clock captured with the snapshot, falling back
        to the local clock for transactions built without one.
        """
        now = now or self.server_now or datetime.now()
        return max(0, int((now - self.started).total_seconds()))


@dataclass
class LockObservation:
    """
    A granted lock, the session holding it and the number of lock requests
    currently blocked behind it.
    """

    session_id: int
    thread_name: Optional[str]
    thread_type: Optional[str]
    state: Optional[str]
    info: Optional[str]
    time: int
    object_schema: Optional[str]
    object_name: Optional[str]
    lock_mode: Optional[str]
    lock_status: Optional[str]
    waiting_threads: int


@dataclass
class PlanRow:
    """
    One row of EXPLAIN output.

    ``id`` is the select identifier; MySQL reports it as NULL only for the
    UNION RESULT row. Every other column depends on the access type.
    """

    id: Optional[int]
    select_type: Optional[str] = None
    table: Optional[str] = None
    partitions: Optional[str] = None
    type: Optional[str] = None
    possible_keys: Optional[str] = None
    key: Optional[str] = None
    key_len: Optional[str] = None
    ref: Optional[str] = None
    rows: Optional[int] = None
    filtered: Optional[float] = None
    extra: Optional[str] = None
