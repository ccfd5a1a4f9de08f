from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Optional

import mysql.connector
from mysql.connector import pooling

POOL_NAME = "student_portal"


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "student_portal")),
        )

    def connect_kwargs(self, *, with_database: bool = True) -> dict[str, Any]:
        params: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
        }
        if with_database:
            params["database"] = self.database
        return params


class DatabaseConnection:
    """Connection factory handed to every MySQL repository.

    Repositories open a connection per call and close it when the transaction
    ends. With ``pool_size`` > 0 those connections are borrowed from a
    mysql-connector pool, and ``close()`` hands them back.
    """

    def __init__(self, config: DBConfig, *, pool_size: int = 0):
        self._config = config
        self._pool_size = int(pool_size)
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._lock = threading.Lock()

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        with self._lock:
            if self._pool is None:
                self._pool = pooling.MySQLConnectionPool(
                    pool_name=POOL_NAME,
                    pool_size=self._pool_size,
                    **self._config.connect_kwargs(),
                )
            return self._pool

    def connect(self):
        if self._pool_size > 0:
            return self._get_pool().get_connection()
        return mysql.connector.connect(**self._config.connect_kwargs())
