"""
Configuration data models.

This module contains the configuration data structures for the monitored
database, the detection thresholds, the individual pollers and the rules
used to recognize diagnostic statements.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

POLLER_PROCESSLIST = "processlist"
POLLER_TRANSACTIONS = "transactions"
POLLER_LOCKS = "locks"
POLLER_NAMES = [POLLER_PROCESSLIST, POLLER_TRANSACTIONS, POLLER_LOCKS]


@dataclass
class DatabaseConfig:
    """
    Connection parameters for the monitored MySQL server, loaded from the
    `[database]` table and overridden by the MYSQL_* environment variables.
    """

    host: str
    user: str
    password: str = field(default="", repr=False)
    database: str = ""
    port: int = 3306
    pool_size: int = 5
    connection_timeout: int = 10


@dataclass(frozen=True)
class RunConfig:
    """
    Detection thresholds and execution mode for one run.

    Frozen: a run never changes its thresholds once pollers have started.
    """

    # Seconds a session or transaction may run before it is flagged.
    slow_threshold: int = 10
    # Transactions must have modified more than this many rows to be sampled.
    rows_threshold: int = 0
    # Issue KILL for flagged sessions.
    kill: bool = False
    # Single-shot mode: every poller stops after its first completed cycle.
    batch: bool = False
    # Emit per-cycle summaries even when not killing.
    verbose: bool = False
    # Slow sessions in one processlist cycle above which locks are inspected.
    # 0 disables the inline lock pass.
    lock_threshold: int = 7
    # Maximum number of transactions read per cycle.
    transaction_limit: int = 100
    # A granted lock is contended when its owner has run this long...
    lock_min_time: int = 3
    # ...or when at least this many lock requests wait on it.
    lock_min_waiting: int = 2


@dataclass
class PollerSettings:
    """Per-poller settings loaded from `[pollers.<name>]`."""

    name: str
    enabled: bool
    interval_seconds: float


@dataclass
class DiagnosticRule:
    """
    A rule recognizing a diagnostic or introspection statement.

    Statements matched by any rule are never flagged, explained or killed.
    """

    # Higher numbers are evaluated first.
    priority: int
    # Label reported in debug logs when the rule matches.
    category: str
    # One of 'prefix', 'contains', 'regex', 'in_list'.
    match_type: str
    # A string for prefix/contains/regex, a list of strings for in_list.
    patterns: Union[str, List[str]] = ""
    comment: str = ""


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    run: RunConfig
    database: DatabaseConfig
    pollers: Dict[str, PollerSettings]
    rules: List[DiagnosticRule]
    log_level: str = "INFO"
    classifier_cache_size: int = 4096
    shutdown_timeout: float = 30.0

    def enabled_pollers(self) -> List[PollerSettings]:
        """Return the enabled pollers in their canonical order."""
        return [
            self.pollers[name]
            for name in POLLER_NAMES
            if name in self.pollers and self.pollers[name].enabled
        ]

    def get_poller(self, name: str) -> Optional[PollerSettings]:
        return self.pollers.get(name)
