"""
Database access for the dbhealth package.

- connection: the shared, lazily-initialized connection pool
- readers: session, transaction and lock snapshots
- actions: EXPLAIN plan capture and KILL
"""

from .actions import Mitigator, PlanCapture
from .connection import ConnectionProvider
from .readers import SnapshotReader

__all__ = [
    "ConnectionProvider",
    "Mitigator",
    "PlanCapture",
    "SnapshotReader",
]
