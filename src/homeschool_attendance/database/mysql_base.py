from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..app_logger import get_logger
from ..core.exceptions import ConstraintViolation, StorageError
from .connection import DatabaseConnection

logger = get_logger("database")


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` and translate driver errors into domain errors.

    Inside ``conn_factory.transaction()`` the transaction's connection is
    reused and the commit is left to the transaction; otherwise a pooled
    connection is borrowed and committed when the block exits cleanly.
    """

    shared = conn_factory.current()
    conn = shared if shared is not None else conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            if shared is None:
                conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        if shared is None:
            conn.rollback()
        raise translate_error(e) from e
    except Exception:
        if shared is None:
            conn.rollback()
        raise
    finally:
        if shared is None:
            conn.close()


def translate_error(e: mysql.connector.Error) -> Exception:
    if isinstance(e, mysql.connector.IntegrityError) or e.errno in (
        errorcode.ER_DUP_ENTRY,
        errorcode.ER_ROW_IS_REFERENCED_2,
        errorcode.ER_NO_REFERENCED_ROW_2,
    ):
        return ConstraintViolation(str(e))
    logger.error("storage failure: %s", e)
    return StorageError(str(e))


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
