"""
Fixed statements issued against the monitored server, and the cursor helpers
that run them.

Every statement here is fixed text; values are passed as driver parameters.
The one exception is the EXPLAIN prefix, which is applied verbatim to a
statement taken from the server's own process list.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

import mysql.connector

from ..validation import QueryError

logger = logging.getLogger(__name__)

SESSIONS_QUERY = "SHOW FULL PROCESSLIST"

# Transactions that started before NOW() - <min age> and have modified more
# than <min rows> rows, oldest first. Each row carries the server clock so the
# age is measured against the same clock as trx_started.
LONG_RUNNING_TRANSACTIONS_QUERY = """
    SELECT
        proc.ID,
        proc.USER,
        proc.HOST,
        proc.DB,
        proc.COMMAND,
        proc.TIME,
        proc.STATE,
        proc.INFO,
        trx.trx_id,
        trx.trx_started,
        trx.trx_mysql_thread_id,
        trx.trx_rows_modified,
        NOW() AS server_now
    FROM
        information_schema.innodb_trx AS trx
    JOIN
        information_schema.processlist AS proc ON trx.trx_mysql_thread_id = proc.ID
    WHERE
        trx.trx_started < NOW() - INTERVAL %s SECOND
        AND trx.trx_rows_modified > %s
    ORDER BY
        trx.trx_started ASC, trx.trx_rows_modified DESC
    LIMIT %s
"""

GRANTED_LOCKS_QUERY = """
    SELECT
        th.PROCESSLIST_ID,
        th.NAME,
        th.TYPE,
        th.PROCESSLIST_STATE,
        th.PROCESSLIST_INFO,
        th.PROCESSLIST_TIME,
        dl.OBJECT_SCHEMA,
        dl.OBJECT_NAME,
        dl.LOCK_MODE,
        dl.LOCK_STATUS,
        COUNT(dlw.REQUESTING_ENGINE_LOCK_ID) AS WAITING_THREADS
    FROM
        performance_schema.threads AS th
    JOIN
        performance_schema.data_locks AS dl ON th.THREAD_ID = dl.THREAD_ID
    LEFT JOIN
        performance_schema.data_lock_waits AS dlw ON dl.ENGINE_LOCK_ID = dlw.BLOCKING_ENGINE_LOCK_ID
    WHERE
        dl.LOCK_STATUS = 'GRANTED' AND th.PROCESSLIST_INFO IS NOT NULL
    GROUP BY
        dl.ENGINE_LOCK_ID
"""

EXPLAIN_PREFIX = "EXPLAIN "

KILL_STATEMENT = "KILL %s"

LIVENESS_QUERY = "SELECT VERSION()"


def fetch_all(
    connection: Any,
    statement: str,
    params: Optional[Sequence[Any]] = None,
    context: str = "query",
) -> List[Tuple[Any, ...]]:
    """
    Execute ``statement`` on ``connection`` and return every row.

    Args:
        connection: A driver connection (anything with ``cursor()``)
        statement: Statement text
        params: Driver parameters; None sends the statement unmodified
        context: Description used in error messages

    Raises:
        QueryError: If the driver reports any error
    """
    cursor = None
    try:
        cursor = connection.cursor()
        if params is None:
            cursor.execute(statement)
        else:
            cursor.execute(statement, tuple(params))
        rows = cursor.fetchall() if cursor.with_rows else []
        return list(rows)
    except mysql.connector.Error as e:
        raise QueryError(f"{context} failed: {e}", statement=statement, errno=e.errno) from e
    finally:
        if cursor is not None:
            try:
                cursor.close()
            except mysql.connector.Error as e:
                logger.debug(f"Ignoring error while closing cursor after {context}: {e}")


def execute(connection: Any, statement: str, params: Optional[Sequence[Any]] = None,
            context: str = "statement") -> None:
    """Execute a statement that returns no rows, such as KILL."""
    fetch_all(connection, statement, params, context=context)
