from __future__ import annotations

import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Optional

import mysql.connector

from ..app_logger import get_logger
from ..core.exceptions import StorageError
from .connection import DBConfig

logger = get_logger("bootstrap")

SCHEMA_PATH = Path(__file__).with_name("schema.sql")


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql usable regardless of the configured database name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def load_schema_statements(schema_path: Optional[str | Path] = None) -> list[str]:
    sql = Path(schema_path or SCHEMA_PATH).read_text(encoding="utf-8")
    return list(iter_sql_statements(_strip_create_db_and_use(_strip_comments(sql))))


@contextmanager
def _server_connection(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    try:
        conn = mysql.connector.connect(**kwargs)
    except mysql.connector.Error as e:
        raise StorageError(f"Could not connect to {target.host}:{target.port}: {e}") from e
    try:
        yield conn
    except mysql.connector.Error as e:
        raise StorageError(str(e)) from e
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    with _server_connection(target, with_database=False) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: Optional[str | Path] = None) -> None:
    """Create the database and its tables (idempotent)."""
    target = DBConfig.from_dict(db_config)
    ensure_database_exists(db_config)

    statements = load_schema_statements(schema_path)
    with _server_connection(target) as conn:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    logger.info("schema applied to %s (%d statements)", target.database, len(statements))


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    with _server_connection(target) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
