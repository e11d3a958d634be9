"""
Lead model — one row per emailed investment report.

A lead is written after a report email is sent successfully and is never
updated afterwards (append-only).  The admin leads view reads these rows
newest-first.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Lead(BaseModel):
    """A captured lead: who asked for which report, with their search profile.

    Attributes:
        lead_id:          Auto-assigned DB PK; ``None`` before insertion.
        email:            Recipient address.
        full_name:        Display name, if the user gave one.
        investment_name:  Name of the investment the report was about.
        investment_type:  Risk level of that investment (kept for reporting).
        amount:           Amount from the user's search.
        time_horizon:     Horizon label from the search (or the option's buckets).
        risk_level:       Risk preference from the search.
        knowledge_level:  Knowledge tier from the search, if any.
        additional_notes: Free-text notes from the search, if any.
        pdf_sent:         Whether the PDF attachment went out.
        sent_at:          UTC time the email was sent.
        created_at:       Set by the database on insert.
    """

    model_config = ConfigDict(frozen=True)

    lead_id: Optional[int] = None
    email: str
    full_name: Optional[str] = None
    investment_name: str = "Unknown"
    investment_type: Optional[str] = None
    amount: float = 0.0
    time_horizon: str = ""
    risk_level: str = ""
    knowledge_level: Optional[str] = None
    additional_notes: Optional[str] = None
    pdf_sent: bool = True
    sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if "@" not in v:
            raise ValueError(f"Invalid email address: '{v}'.")
        return v
