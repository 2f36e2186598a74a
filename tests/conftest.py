"""
Pytest configuration and shared fixtures for the dbhealth test suite.

This module provides common fixtures, a scripted fake MySQL server built on
unittest.mock, and row factories shaped like the server's result sets.
"""

import io
import shutil
import sys
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import Mock

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import mysql.connector  # noqa: E402
from mysql.connector import errorcode  # noqa: E402

from dbhealth.db.queries import (  # noqa: E402
    EXPLAIN_PREFIX,
    GRANTED_LOCKS_QUERY,
    KILL_STATEMENT,
    LONG_RUNNING_TRANSACTIONS_QUERY,
    SESSIONS_QUERY,
)


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


NOW = datetime(2024, 5, 1, 12, 0, 0)

# A single-table full scan, the plan most fake statements get.
DEFAULT_PLAN = [
    (1, "SIMPLE", "orders", None, "ALL", None, None, None, None, 120000, 10.0, "Using where"),
]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def output():
    """Text stream records are serialized to."""
    return io.StringIO()


class RowFactory:
    """Builds result rows in the column order of the monitor's queries."""

    @staticmethod
    def session(
        session_id: int,
        time: int,
        info: Optional[str] = "SELECT * FROM orders WHERE note LIKE '%x%'",
        command: str = "Query",
        user: str = "app",
        host: str = "10.0.0.7:51234",
        db: Optional[str] = "shop",
        state: Optional[str] = "Sending data",
    ) -> tuple:
        return (session_id, user, host, db, command, time, state, info)

    @staticmethod
    def transaction(
        session_id: int,
        age_seconds: int,
        rows_modified: int = 10,
        info: Optional[str] = "UPDATE orders SET status = 'x' WHERE id > 10",
        now: datetime = NOW,
        trx_id: Optional[int] = None,
    ) -> tuple:
        command = "Query" if info is not None else "Sleep"
        session = RowFactory.session(session_id, age_seconds, info=info, command=command)
        started = now - timedelta(seconds=age_seconds)
        return session + (trx_id or 400000 + session_id, started, session_id, rows_modified, now)

    @staticmethod
    def lock(
        session_id: int,
        time: int,
        waiting: int,
        info: Optional[str] = "UPDATE stock SET qty = qty - 1 WHERE sku = 'A-1'",
    ) -> tuple:
        return (
            session_id,
            "thread/sql/one_connection",
            "FOREGROUND",
            "updating",
            info,
            time,
            "shop",
            "stock",
            "X,REC_NOT_GAP",
            "GRANTED",
            waiting,
        )


@pytest.fixture
def rows():
    """Provide the row factory."""
    return RowFactory


# ============================================================================
# Fake Server Fixtures
# ============================================================================


def driver_error(errno: int, msg: str = "server error") -> mysql.connector.Error:
    return mysql.connector.errors.DatabaseError(msg=msg, errno=errno)


class FakeServer:
    """
    Scripted stand-in for the monitored server.

    Connections and cursors are Mocks whose execute() routes each statement
    to canned rows; every statement is recorded in ``executed``.
    """

    def __init__(self):
        self.sessions: List[tuple] = []
        self.transactions: List[tuple] = []
        self.locks: List[tuple] = []
        # statement -> plan rows, or an exception to raise for its EXPLAIN
        self.plans: Dict[str, Any] = {}
        # session id -> exception to raise for its KILL
        self.kill_errors: Dict[int, Exception] = {}
        # query text -> exception raised for every execution
        self.failures: Dict[str, Exception] = {}
        # query text -> callable run before every execution is answered
        self.hooks: Dict[str, Callable[[], None]] = {}
        self.executed: List[tuple] = []
        self.killed: List[int] = []
        self._lock = threading.Lock()

    @property
    def explained(self) -> List[str]:
        return [s for s, _ in self.executed if s.startswith(EXPLAIN_PREFIX)]

    def connection(self) -> Mock:
        conn = Mock(name="connection")
        conn.cursor.side_effect = self._cursor
        return conn

    def _cursor(self) -> Mock:
        cursor = Mock(name="cursor")
        result: Dict[str, Any] = {}

        def execute(statement, params=None):
            with self._lock:
                self.executed.append((statement, params))
            fetched = self._respond(statement, params)
            result["rows"] = fetched
            cursor.with_rows = fetched is not None

        cursor.execute.side_effect = execute
        cursor.fetchall.side_effect = lambda: list(result.get("rows") or [])
        return cursor

    def _respond(self, statement: str, params: Optional[tuple]) -> Optional[List[tuple]]:
        if statement in self.hooks:
            self.hooks[statement]()
        if statement in self.failures:
            raise self.failures[statement]
        if statement == SESSIONS_QUERY:
            return list(self.sessions)
        if statement == LONG_RUNNING_TRANSACTIONS_QUERY:
            return list(self.transactions)
        if statement == GRANTED_LOCKS_QUERY:
            return list(self.locks)
        if statement.startswith(EXPLAIN_PREFIX):
            outcome = self.plans.get(statement[len(EXPLAIN_PREFIX):], DEFAULT_PLAN)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        if statement == KILL_STATEMENT:
            session_id = params[0]
            if session_id in self.kill_errors:
                raise self.kill_errors[session_id]
            with self._lock:
                self.killed.append(session_id)
            return None
        raise driver_error(errorcode.ER_PARSE_ERROR, f"unexpected statement: {statement[:40]}")


class FakeProvider:
    """ConnectionProvider stand-in handing out connections to a FakeServer."""

    def __init__(self, server: FakeServer):
        self.server = server
        self.borrowed = 0
        self.error: Optional[Exception] = None
        self.closed = False

    @contextmanager
    def connection(self):
        if self.error is not None:
            raise self.error
        self.borrowed += 1
        yield self.server.connection()

    def close(self):
        self.closed = True


@pytest.fixture
def server_error():
    """Build driver errors carrying a server error number."""
    return driver_error


@pytest.fixture
def fake_server():
    return FakeServer()


@pytest.fixture
def fake_provider(fake_server):
    return FakeProvider(fake_server)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def sample_config_data():
    """Sample config.toml content as parsed data."""
    return {
        "monitor": {
            "log_level": "INFO",
            "thresholds": {"slow_threshold": 10, "rows_threshold": 0, "transaction_limit": 100},
            "mode": {"kill": False, "batch": False, "verbose": False},
            "locks": {"lock_threshold": 7, "min_time": 3, "min_waiting": 2},
        },
        "pollers": {
            "processlist": {"enabled": True, "interval_seconds": 1.0},
            "transactions": {"enabled": True, "interval_seconds": 1.0},
            "locks": {"enabled": False, "interval_seconds": 10.0},
        },
        "database": {"host": "db.internal", "user": "monitor", "password": "secret", "port": 3306},
    }


SAMPLE_CONFIG_TOML = """
[monitor]
log_level = "DEBUG"

[monitor.thresholds]
slow_threshold = 30
rows_threshold = 5

[monitor.mode]
verbose = true

[monitor.locks]
lock_threshold = 4

[pollers.processlist]
enabled = true
interval_seconds = 2.0

[pollers.locks]
enabled = false

[database]
host = "db.internal"
user = "monitor"
password = "from-file"
"""

SAMPLE_RULES_TOML = """
[[rules]]
priority = 10
category = "show"
match_type = "prefix"
patterns = "SHOW"

[[rules]]
priority = 50
category = "ping"
match_type = "in_list"
patterns = ["SELECT 1", "SELECT VERSION()"]
"""


@pytest.fixture
def config_files(temp_dir):
    """Write a config.toml (with a rules file) into a temporary directory."""
    config_file = temp_dir / "config.toml"
    config_file.write_text(SAMPLE_CONFIG_TOML + '\n[paths]\nrules_config = "rules.toml"\n')
    rules_file = temp_dir / "rules.toml"
    rules_file.write_text(SAMPLE_RULES_TOML)
    return {"config": config_file, "rules": rules_file, "dir": temp_dir}


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear the configuration cache after each test."""
    original_config_path = Path(__file__).parent.parent / "conf" / "config.toml"

    yield  # Run the test

    from dbhealth.config import clear_config_cache, set_config_path

    clear_config_cache()
    set_config_path(original_config_path)
