"""
Detection and per-cycle result models.

A Verdict is produced by the threshold evaluator for every snapshot record;
a CycleResult is what one poller cycle hands back to its lifecycle controller.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Verdict:
    """
    The evaluator's decision about one snapshot record.

    For positive verdicts ``session_id`` identifies the session to terminate
    and ``statement`` the text to explain (None when the session is idle).
    """

    flagged: bool
    session_id: Optional[int] = None
    statement: Optional[str] = None
    reason: str = ""
    duration: int = 0
    rows_modified: int = 0

    @classmethod
    def clear(cls, session_id: Optional[int] = None) -> "Verdict":
        return cls(flagged=False, session_id=session_id)


@dataclass
class CycleSummary:
    """Aggregates over one cycle's anomalies."""

    count: int
    max_duration: int
    max_rows_modified: int
    # Statement of the anomaly with the longest duration.
    max_duration_statement: Optional[str]
    sum_duration: int
    sum_rows_modified: int


@dataclass
class CycleResult:
    """Counters describing what one cycle observed and did."""

    poller: str
    cycle: int
    records_read: int = 0
    anomalies: int = 0
    plans_captured: int = 0
    plan_failures: int = 0
    kills_issued: int = 0
    kill_failures: int = 0
    contended_locks: int = 0
    killed_sessions: List[int] = field(default_factory=list)
    summary: Optional[CycleSummary] = None
