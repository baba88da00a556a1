from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError, DependencyError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)``; commit on success, roll back on any error.

    Driver errors leave this block as domain errors: duplicate keys become
    ConflictError, everything else DependencyError.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise DependencyError(f"Record store unavailable: {e}") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as e:
        conn.rollback()
        if e.errno == errorcode.ER_DUP_ENTRY:
            raise ConflictError("Record already exists") from e
        raise DependencyError(f"Record store rejected the write: {e}") from e
    except mysql.connector.Error as e:
        conn.rollback()
        raise DependencyError(f"Record store unavailable: {e}") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def naive(value):
    """MySQL DATETIME columns hold facility-local wall time without tzinfo."""
    if value is None or getattr(value, "tzinfo", None) is None:
        return value
    return value.replace(tzinfo=None)
