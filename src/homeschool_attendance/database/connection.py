from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, ContextManager, Iterator, Optional, Protocol

import mysql.connector
from mysql.connector import pooling
from mysql.connector.errors import PoolError

from ..app_logger import get_logger
from ..core.constants import DEFAULT_POOL_NAME, DEFAULT_POOL_SIZE, DEFAULT_POOL_TIMEOUT, POOL_RETRY_INTERVAL
from ..core.exceptions import StorageError

logger = get_logger("database")


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = DEFAULT_POOL_SIZE
    pool_timeout: float = DEFAULT_POOL_TIMEOUT

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "homeschool_attendance")),
            pool_size=int(db_config.get("pool_size", DEFAULT_POOL_SIZE)),
            pool_timeout=float(db_config.get("pool_timeout", DEFAULT_POOL_TIMEOUT)),
        )


class TransactionProvider(Protocol):
    """What services need to group several repository calls into one commit."""

    def transaction(self) -> ContextManager[Any]:
        raise NotImplementedError


class DatabaseConnection(TransactionProvider):
    """Process-wide storage handle.

    Owns a mysql-connector pool opened once by :meth:`open`. Repositories
    borrow a pooled connection per operation, except inside
    :meth:`transaction`, where every repository call made by the same thread
    shares one connection and commits (or rolls back) together.
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._local = threading.local()

    @property
    def config(self) -> DBConfig:
        return self._config

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self) -> "DatabaseConnection":
        if self._pool is not None:
            return self
        try:
            self._pool = pooling.MySQLConnectionPool(
                pool_name=DEFAULT_POOL_NAME,
                pool_size=self._config.pool_size,
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
                autocommit=False,
            )
        except mysql.connector.Error as e:
            raise StorageError(f"Could not open database {self._config.database!r}: {e}") from e
        logger.info(
            "database pool ready: %s@%s:%s/%s (size=%s)",
            self._config.user,
            self._config.host,
            self._config.port,
            self._config.database,
            self._config.pool_size,
        )
        return self

    def connect(self):
        """Borrow a pooled connection, waiting up to ``pool_timeout`` seconds when all are in use."""

        if self._pool is None:
            raise StorageError("Database is not open; call open() first")
        deadline = time.monotonic() + self._config.pool_timeout
        while True:
            try:
                return self._pool.get_connection()
            except PoolError as e:
                if time.monotonic() >= deadline:
                    raise StorageError(
                        f"No free database connection after {self._config.pool_timeout}s "
                        f"(pool size {self._config.pool_size}): {e}"
                    ) from e
                time.sleep(POOL_RETRY_INTERVAL)
            except mysql.connector.Error as e:
                raise StorageError(f"Could not get a database connection: {e}") from e

    def current(self):
        """Connection bound to the running transaction of this thread, if any."""
        return getattr(self._local, "conn", None)

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        outer = self.current()
        if outer is not None:
            # Nested transaction blocks join the outer one.
            yield outer
            return

        conn = self.connect()
        self._local.conn = conn
        try:
            try:
                yield conn
                conn.commit()
            except mysql.connector.Error as e:
                _safe_rollback(conn)
                raise StorageError(f"Transaction failed: {e}") from e
            except BaseException:
                _safe_rollback(conn)
                raise
        finally:
            self._local.conn = None
            conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error:
        logger.exception("rollback failed")
