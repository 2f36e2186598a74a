"""
MySQL connection provider.

One ConnectionProvider is built at startup and handed to every poller. It
creates its connection pool lazily, exactly once, on the first call to
acquire(); concurrent first callers wait on the same initialization.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import mysql.connector
from mysql.connector import pooling

from ..models.config import DatabaseConfig
from ..validation import DBConnectionError
from .queries import LIVENESS_QUERY

logger = logging.getLogger(__name__)


class ConnectionProvider:
    """
    Lazily-initialized, shared access to the monitored server.

    The underlying MySQLConnectionPool is the shared handle; each caller
    borrows a connection from it and returns it when done, so pollers on
    different threads never share a connection object.
    """

    def __init__(self, db_config: DatabaseConfig, pool_name: str = "dbhealth"):
        self.db_config = db_config
        self.pool_name = pool_name
        self.server_version: Optional[str] = None
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._init_lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._pool is not None

    def _initialize(self) -> pooling.MySQLConnectionPool:
        """Create the pool and run the liveness check, once."""
        with self._init_lock:
            if self._pool is not None:
                return self._pool

            cfg = self.db_config
            logger.debug(f"Creating MySQL connection pool '{self.pool_name}'")
            logger.debug(f"   Host: {cfg.host}:{cfg.port}")
            logger.debug(f"   Database: {cfg.database or '(none)'}")
            logger.debug(f"   User: {cfg.user}")

            connect_args = dict(
                host=cfg.host,
                port=cfg.port,
                user=cfg.user,
                password=cfg.password,
                autocommit=True,
                connection_timeout=cfg.connection_timeout,
                charset="utf8mb4",
            )
            if cfg.database:
                connect_args["database"] = cfg.database

            try:
                pool = pooling.MySQLConnectionPool(
                    pool_name=self.pool_name,
                    pool_size=cfg.pool_size,
                    pool_reset_session=True,
                    **connect_args,
                )
                conn = pool.get_connection()
                try:
                    cursor = conn.cursor()
                    cursor.execute(LIVENESS_QUERY)
                    row = cursor.fetchone()
                    cursor.close()
                finally:
                    conn.close()
            except mysql.connector.Error as e:
                logger.error(f"Failed to connect to MySQL at {cfg.host}:{cfg.port}: {e}")
                raise DBConnectionError(
                    f"Cannot connect to {cfg.user}@{cfg.host}:{cfg.port}: {e}",
                    errno=getattr(e, "errno", None),
                ) from e

            self.server_version = str(row[0]) if row else None
            self._pool = pool
            logger.info(f"Connected to MySQL {self.server_version} at {cfg.host}:{cfg.port}")
            return pool

    def acquire(self) -> Any:
        """
        Borrow a connection from the shared pool, creating the pool on first use.

        The caller must close() the returned connection to return it to the
        pool; prefer the connection() context manager.

        Raises:
            DBConnectionError: If the pool cannot be created, the liveness
                check fails, or no connection can be obtained
        """
        pool = self._pool or self._initialize()
        try:
            return pool.get_connection()
        except mysql.connector.Error as e:
            raise DBConnectionError(
                f"Cannot obtain a connection from pool '{self.pool_name}': {e}",
                errno=getattr(e, "errno", None),
            ) from e

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Borrow a pooled connection for the duration of a with-block."""
        conn = self.acquire()
        try:
            yield conn
        finally:
            try:
                conn.close()
            except mysql.connector.Error as e:
                logger.warning(f"Error returning connection to pool '{self.pool_name}': {e}")

    def close(self) -> None:
        """
        Close the idle pooled connections and release the pool.

        Called after every poller has stopped, when no connection is borrowed.
        """
        pool, self._pool = self._pool, None
        if pool is None:
            return
        # MySQLConnectionPool has no public close(); this disconnects every
        # connection waiting in its queue.
        try:
            closed = pool._remove_connections()
        except mysql.connector.Error as e:
            logger.warning(f"Error closing idle connections of pool '{self.pool_name}': {e}")
            return
        logger.info(f"Closed MySQL pool '{self.pool_name}' ({closed} idle connections)")
