"""
Repository for captured leads (append-only).
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from money_harbor.db.repositories.base import BaseRepository
from money_harbor.models.lead import Lead

logger = logging.getLogger(__name__)


class LeadRepository(BaseRepository):
    """Read/append access to the ``leads`` table."""

    def insert(self, lead: Lead) -> int:
        """Insert ``lead`` and return its auto-assigned ``lead_id``.

        ``lead.lead_id`` and ``lead.created_at`` are ignored; the database
        assigns both.
        """
        cur = self.execute(
            """
            INSERT INTO leads (
                email, full_name, investment_name, investment_type,
                amount, time_horizon, risk_level, knowledge_level,
                additional_notes, pdf_sent, sent_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                lead.email,
                lead.full_name,
                lead.investment_name,
                lead.investment_type,
                lead.amount,
                lead.time_horizon,
                lead.risk_level,
                lead.knowledge_level,
                lead.additional_notes,
                int(lead.pdf_sent),
                lead.sent_at.isoformat() if lead.sent_at else None,
            ),
        )
        lead_id = int(cur.lastrowid)
        logger.debug("Inserted lead %d for %s", lead_id, lead.email)
        return lead_id

    def get_by_id(self, lead_id: int) -> Optional[Lead]:
        row = self.fetchone("SELECT * FROM leads WHERE lead_id = ?;", (lead_id,))
        return _row_to_lead(row) if row else None

    def list_recent(self, limit: Optional[int] = None) -> list[Lead]:
        """Return leads newest first (ties broken by insertion order).

        Args:
            limit: Maximum number of rows; ``None`` for all.
        """
        sql = "SELECT * FROM leads ORDER BY created_at DESC, lead_id DESC"
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (limit,)
        return [_row_to_lead(r) for r in self.fetchall(sql + ";", params)]

    def count(self) -> int:
        """Return the total number of leads."""
        return self.scalar_int("SELECT COUNT(*) FROM leads;")


# ── Private helper ────────────────────────────────────────────────────────────

def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _row_to_lead(row: sqlite3.Row) -> Lead:
    """Convert a ``leads`` row to a ``Lead``."""
    return Lead(
        lead_id=row["lead_id"],
        email=row["email"],
        full_name=row["full_name"],
        investment_name=row["investment_name"],
        investment_type=row["investment_type"],
        amount=row["amount"],
        time_horizon=row["time_horizon"],
        risk_level=row["risk_level"],
        knowledge_level=row["knowledge_level"],
        additional_notes=row["additional_notes"],
        pdf_sent=bool(row["pdf_sent"]),
        sent_at=_parse_ts(row["sent_at"]),
        created_at=_parse_ts(row["created_at"]),
    )
