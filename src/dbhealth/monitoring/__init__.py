"""
Monitoring lifecycle: pollers, the cycles they run, and their coordinator.
"""

from .coordinator import CYCLE_TYPES, MonitoringCoordinator
from .cycles import DatabaseCycle, LockCycle, ProcessListCycle, TransactionCycle
from .poller import MonitoringCycle, Poller, PollerState

__all__ = [
    "CYCLE_TYPES",
    "DatabaseCycle",
    "LockCycle",
    "MonitoringCoordinator",
    "MonitoringCycle",
    "Poller",
    "PollerState",
    "ProcessListCycle",
    "TransactionCycle",
]
