"""
Base repository with the shared SQLite helpers.

Repositories receive an open ``sqlite3.Connection`` (usually from
``get_connection()``/``open_database()``) and never manage its lifetime.
SQL is written out explicitly in each repository method; there is no ORM.
Repositories accept and return pydantic models, not raw rows.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Optional

logger = logging.getLogger(__name__)

Params = tuple[Any, ...] | dict[str, Any]


class BaseRepository:
    """Shared SQL execution helpers.

    Attributes:
        conn: The active ``sqlite3.Connection``.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def execute(self, sql: str, params: Params = ()) -> sqlite3.Cursor:
        logger.debug("SQL: %s | params: %s", " ".join(sql.split()), params)
        return self.conn.execute(sql, params)

    def fetchone(self, sql: str, params: Params = ()) -> Optional[sqlite3.Row]:
        """Run a query and return its first row, or ``None``."""
        return self.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: Params = ()) -> list[sqlite3.Row]:
        return self.execute(sql, params).fetchall()

    def scalar_int(self, sql: str, params: Params = ()) -> int:
        """Run a single-value query (``COUNT(*)`` etc.) and return it as int."""
        row = self.fetchone(sql, params)
        assert row is not None
        return int(row[0])
