"""
Side effects on the monitored server: plan capture and session termination.
"""

import logging
from typing import Any, List, Sequence

from mysql.connector import errorcode

from ..models.snapshot import PlanRow
from ..validation import QueryError
from .decoding import optional_float, optional_int, optional_text
from .queries import EXPLAIN_PREFIX, KILL_STATEMENT, execute, fetch_all

logger = logging.getLogger(__name__)

EXPLAIN_COLUMNS = 12


def _decode_plan_row(row: Sequence[Any]) -> PlanRow:
    return PlanRow(
        id=optional_int(row[0]),
        select_type=optional_text(row[1]),
        table=optional_text(row[2]),
        partitions=optional_text(row[3]),
        type=optional_text(row[4]),
        possible_keys=optional_text(row[5]),
        key=optional_text(row[6]),
        key_len=optional_text(row[7]),
        ref=optional_text(row[8]),
        rows=optional_int(row[9]),
        filtered=optional_float(row[10]),
        extra=optional_text(row[11]),
    )


class PlanCapture:
    """Runs EXPLAIN for statements caught in the act."""

    def __init__(self, connection: Any):
        self.connection = connection

    def explain(self, statement: str) -> List[PlanRow]:
        """
        Return the execution plan of ``statement``.

        The statement is sent exactly as the server reported it, prefixed
        with EXPLAIN; it is not parsed or rewritten.

        Raises:
            QueryError: If the statement cannot be explained, e.g. it is not
                explainable or its output has an unexpected shape
        """
        rows = fetch_all(self.connection, EXPLAIN_PREFIX + statement, context="EXPLAIN")
        plan: List[PlanRow] = []
        for index, row in enumerate(rows):
            if len(row) < EXPLAIN_COLUMNS:
                raise QueryError(
                    f"EXPLAIN row {index} has {len(row)} columns, expected {EXPLAIN_COLUMNS}",
                    statement=statement,
                )
            try:
                plan.append(_decode_plan_row(row))
            except (TypeError, ValueError) as e:
                raise QueryError(f"Cannot decode EXPLAIN row {index}: {e}", statement=statement) from e
        return plan


class Mitigator:
    """Terminates sessions with KILL."""

    def __init__(self, connection: Any):
        self.connection = connection

    def terminate(self, session_id: int) -> bool:
        """
        Kill the connection ``session_id``.

        Returns:
            True if the KILL was issued, False if the session was already gone

        Raises:
            QueryError: For any other failure, e.g. missing privileges
        """
        try:
            execute(self.connection, KILL_STATEMENT, (int(session_id),), context=f"KILL {session_id}")
        except QueryError as e:
            if e.errno == errorcode.ER_NO_SUCH_THREAD:
                logger.info(f"Session {session_id} ended before it could be killed")
                return False
            raise
        logger.warning(f"Killed session {session_id}")
        return True
