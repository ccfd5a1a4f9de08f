from __future__ import annotations

import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import mysql.connector

from ..core.logger import get_logger
from .connection import DBConfig

logger = get_logger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"
SEED_PATH = Path(__file__).resolve().parent / "seed.sql"


def _strip_comments_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?m)^\s*--.*$", "", sql)
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on ``;`` that sit outside quoted literals."""
    start = 0
    quote = ""
    i = 0
    while i < len(sql):
        ch = sql[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = ""
        elif ch in "'\"":
            quote = ch
        elif ch == ";":
            stmt = sql[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = sql[start:].strip()
    if tail:
        yield tail


@contextmanager
def _admin_cursor(db_config: dict, *, with_database: bool = True):
    target = DBConfig.from_dict(db_config)
    conn = mysql.connector.connect(use_pure=True, **target.connect_kwargs(with_database=with_database))
    try:
        yield target, conn.cursor()
        conn.commit()
    finally:
        conn.close()


def _run_script(db_config: dict, path: Path) -> int:
    sql = _strip_comments_and_use(Path(path).read_text(encoding="utf-8"))
    count = 0
    with _admin_cursor(db_config) as (_, cur):
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
    logger.info("Ran {} statements from {}", count, Path(path).name)
    return count


def ensure_database_exists(db_config: dict) -> None:
    with _admin_cursor(db_config, with_database=False) as (target, cur):
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> int:
    ensure_database_exists(db_config)
    return _run_script(db_config, Path(schema_path))


def apply_seed_sql(db_config: dict, *, seed_path: str | Path = SEED_PATH) -> int:
    return _run_script(db_config, Path(seed_path))


def list_tables(db_config: dict) -> list[str]:
    with _admin_cursor(db_config) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
