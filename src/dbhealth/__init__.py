"""
dbhealth: MySQL database health monitor.

This package watches a running MySQL server for slow statements, long-running
transactions and lock contention, captures the execution plans of offending
statements and can optionally kill the sessions running them.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Input validation and error handling
- classification: Diagnostic statement recognition
- db: Connection pooling, snapshot readers, EXPLAIN and KILL
- detection: Threshold evaluation
- reporting: JSON record output and per-cycle summaries
- monitoring: Pollers, cycles and their coordinator
- orchestration: Runtime state and signal handling
- cli: Command-line interface

Usage:
    From command line:
        dbhealth --slowis 30 --verbose
        python -m dbhealth --batch

    Programmatically:
        from dbhealth import ConnectionProvider, MonitoringCoordinator, RuntimeState, get_config
        config = get_config()
        coordinator = MonitoringCoordinator(config, ConnectionProvider(config.database), RuntimeState())
        coordinator.run()
"""

__version__ = "1.0.0"

# Main interfaces
from .config import apply_overrides, clear_config_cache, get_config, set_config_path
from .db import ConnectionProvider
from .monitoring import MonitoringCoordinator, Poller, PollerState
from .orchestration import RuntimeState
from .cli import main_cli

# Model classes for external use
from .models import (
    AppConfig,
    CycleResult,
    CycleSummary,
    DatabaseConfig,
    LockObservation,
    PlanRow,
    PollerSettings,
    RunConfig,
    Session,
    Transaction,
    Verdict,
)

# Errors
from .validation import (
    DBConnectionError,
    MonitorError,
    QueryError,
    ValidationError,
)

__all__ = [
    # Main interfaces
    "apply_overrides",
    "clear_config_cache",
    "get_config",
    "set_config_path",
    "ConnectionProvider",
    "MonitoringCoordinator",
    "Poller",
    "PollerState",
    "RuntimeState",
    "main_cli",
    # Models
    "AppConfig",
    "CycleResult",
    "CycleSummary",
    "DatabaseConfig",
    "LockObservation",
    "PlanRow",
    "PollerSettings",
    "RunConfig",
    "Session",
    "Transaction",
    "Verdict",
    # Errors
    "DBConnectionError",
    "MonitorError",
    "QueryError",
    "ValidationError",
]
