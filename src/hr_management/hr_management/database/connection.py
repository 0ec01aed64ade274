from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from mysql.connector import pooling

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 5


class DatabaseConnection:
    """Process-wide pool of MySQL connections.

    Each ``db_cursor`` block borrows one connection and runs one transaction on it;
    closing the connection hands it back to the pool.
    """

    _instance: Optional["DatabaseConnection"] = None
    _lock = threading.Lock()

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        with cls._lock:
            if cls._instance is None:
                cls._instance = DatabaseConnection(config)
            return cls._instance

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        # Created lazily so building the app does not need a reachable database.
        if self._pool is None:
            with self._lock:
                if self._pool is None:
                    c = self._config
                    self._pool = pooling.MySQLConnectionPool(
                        pool_name="hr_management",
                        pool_size=max(int(c.pool_size), 1),
                        host=c.host,
                        port=int(c.port),
                        user=c.user,
                        password=c.password,
                        database=c.database,
                        autocommit=False,
                    )
                    logger.info("MySQL pool ready (%d connections) for %s@%s/%s", c.pool_size, c.user, c.host, c.database)
        return self._pool

    def connect(self):
        return self._get_pool().get_connection()
