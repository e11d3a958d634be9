"""
SQLite schema DDL for the leads database.

One table, ``leads``: an append-only log of every investment report that was
emailed, with the search profile of the person who asked for it.  Rows are
never updated or deleted by the application.

All statements use ``IF NOT EXISTS``, so ``apply_schema()`` is idempotent.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_LEADS = """
CREATE TABLE IF NOT EXISTS leads (
    lead_id          INTEGER PRIMARY KEY AUTOINCREMENT,
    email            TEXT    NOT NULL,
    full_name        TEXT,
    investment_name  TEXT    NOT NULL DEFAULT 'Unknown',
    investment_type  TEXT,
    amount           REAL    NOT NULL DEFAULT 0,
    time_horizon     TEXT    NOT NULL DEFAULT '',
    risk_level       TEXT    NOT NULL DEFAULT '',
    knowledge_level  TEXT,
    additional_notes TEXT,
    pdf_sent         INTEGER NOT NULL DEFAULT 1 CHECK (pdf_sent IN (0, 1)),
    sent_at          TEXT,
    created_at       TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_LEADS_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_leads_created_at ON leads (created_at);
CREATE INDEX IF NOT EXISTS idx_leads_email ON leads (email);
"""

_ALL_DDL: list[str] = [
    _DDL_LEADS,
    _DDL_LEADS_INDEXES,
]

# Table names for introspection / tests
ALL_TABLE_NAMES = ["leads"]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``.

    Idempotent; safe to call on every startup.

    Args:
        conn: An open ``sqlite3.Connection``.
    """
    for ddl in _ALL_DDL:
        for statement in _split_ddl(ddl):
            conn.execute(statement)
    conn.commit()
    logger.debug("Schema applied: %d table(s) created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return the table names present in the database, sorted."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' "
        "AND name NOT LIKE 'sqlite_%' ORDER BY name;"
    ).fetchall()
    return [row[0] for row in rows]


def get_existing_indexes(conn: sqlite3.Connection) -> list[str]:
    """Return the explicitly created index names, sorted."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='index' "
        "AND name NOT LIKE 'sqlite_%' ORDER BY name;"
    ).fetchall()
    return [row[0] for row in rows]
