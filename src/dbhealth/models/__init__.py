"""
Data models and structures for the monitoring system.

Configuration Models:
- Database connection parameters
- Detection thresholds and execution mode
- Per-poller cadence and diagnostic-statement rules

Snapshot Models:
- Sessions, transactions, lock observations and EXPLAIN rows, rebuilt
  from the live server on every cycle

Result Models:
- Threshold verdicts, per-cycle summaries and counters
"""

from .config import (
    POLLER_LOCKS,
    POLLER_NAMES,
    POLLER_PROCESSLIST,
    POLLER_TRANSACTIONS,
    AppConfig,
    DatabaseConfig,
    DiagnosticRule,
    PollerSettings,
    RunConfig,
)
from .results import CycleResult, CycleSummary, Verdict
from .snapshot import LockObservation, PlanRow, Session, Transaction

__all__ = [
    # Configuration
    "POLLER_LOCKS",
    "POLLER_NAMES",
    "POLLER_PROCESSLIST",
    "POLLER_TRANSACTIONS",
    "AppConfig",
    "DatabaseConfig",
    "DiagnosticRule",
    "PollerSettings",
    "RunConfig",
    # Snapshots
    "LockObservation",
    "PlanRow",
    "Session",
    "Transaction",
    # Results
    "CycleResult",
    "CycleSummary",
    "Verdict",
]
