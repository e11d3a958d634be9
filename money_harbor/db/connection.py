"""
SQLite connection management for the leads database.

``get_connection()`` yields a connection with ``sqlite3.Row`` rows, foreign
keys on, a busy timeout and (optionally) WAL journaling.  It commits on a
clean exit and rolls back if the block raises.

``open_database()`` is the config-driven variant used by the CLI and the
dashboard: it reads ``AppConfig.database`` and makes sure the schema exists.

Usage::

    from money_harbor.db.connection import open_database

    with open_database(config.database) as conn:
        LeadRepository(conn).insert(lead)
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Generator

from money_harbor.db.schema import apply_schema

if TYPE_CHECKING:
    from money_harbor.config import DatabaseConfig

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
) -> Generator[sqlite3.Connection, None, None]:
    """Context manager yielding a configured SQLite connection.

    Args:
        db_path: Database file, or ``":memory:"``. Parent directories of a
            file path are created on demand.
        wal_mode: Enable WAL journaling (ignored for in-memory databases).
        busy_timeout_ms: How long to wait on a locked database.

    Yields:
        An open ``sqlite3.Connection``.

    Raises:
        sqlite3.OperationalError: If the database cannot be opened or is locked.
    """
    if db_path != MEMORY_DB:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row

    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
        if wal_mode and db_path != MEMORY_DB:
            conn.execute("PRAGMA journal_mode = WAL;")

        yield conn
        conn.commit()

    except Exception:
        conn.rollback()
        raise

    finally:
        conn.close()


@contextmanager
def open_database(config: "DatabaseConfig") -> Generator[sqlite3.Connection, None, None]:
    """Open the configured database and ensure its schema is applied."""
    with get_connection(
        config.db_path,
        wal_mode=config.wal_mode,
        busy_timeout_ms=config.busy_timeout_ms,
    ) as conn:
        apply_schema(conn)
        yield conn
