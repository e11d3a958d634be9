"""
Report dispatch: email a rendered PDF report and record the lead, and send
portfolio-review reminder confirmations.

``send_report()`` flow
----------------------
1. Validate the request (email, investment and PDF are required).
2. Estimate the decoded PDF size from its base64 length
   (``len * 0.75 / 1024 / 1024`` MB) and reject anything over the limit.
3. Render the HTML body and send it with the PDF attached as
   ``MoneyHarbor-Investment-Report-<epoch-ms>.pdf``.
4. Append a ``Lead`` row.  The email has already gone out at this point, so
   a database failure is logged and reported in the result, never raised.

Search-profile fields on the lead come from the user's search when given,
falling back to the investment's own values.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from money_harbor.clients.email_client import BrevoEmailClient, EmailAttachment
from money_harbor.db.repositories.lead_repo import LeadRepository
from money_harbor.models.investment import InvestmentOption
from money_harbor.models.lead import Lead
from money_harbor.reporting.email_templates import (
    REMINDER_SUBJECT,
    render_reminder_email,
    render_report_email,
    report_subject,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTACHMENT_MB = 25.0
DEFAULT_REMINDER_MONTHS = 6
# Reminder months are counted as 30 days each
_DAYS_PER_MONTH = 30


class ReportValidationError(ValueError):
    """Raised when a report or reminder request is missing required data."""


class AttachmentTooLargeError(ValueError):
    """Raised when the PDF exceeds the provider's attachment limit."""

    def __init__(self, size_mb: float, limit_mb: float) -> None:
        super().__init__(f"PDF too large ({size_mb:.1f} MB, limit {limit_mb:g} MB).")
        self.size_mb = size_mb
        self.limit_mb = limit_mb


# ── Request / result types ────────────────────────────────────────────────────

class SearchParams(BaseModel):
    """The user's search profile as attached to a report request."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    amount: Optional[float] = None
    time_horizon: Optional[str] = None
    risk_level: Optional[str] = None
    knowledge_level: Optional[str] = None
    additional_notes: Optional[str] = None


class ReportRequest(BaseModel):
    """One "email me this report" request.

    Attributes:
        email:         Recipient address.
        full_name:     Optional recipient name.
        investment:    The recommendation the report is about.
        pdf_base64:    The already-rendered PDF, base64-encoded.
        search_params: The search that produced the recommendation, if known.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    email: str = ""
    full_name: Optional[str] = None
    investment: Optional[InvestmentOption] = None
    pdf_base64: str = ""
    search_params: Optional[SearchParams] = None


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of a successful send.

    Attributes:
        message_id: Provider message id.
        lead_id:    Inserted lead row, or ``None`` if it was not recorded.
        pdf_size_mb: Estimated attachment size.
        lead_error: Why the lead was not recorded, when it was attempted and failed.
    """

    message_id: str
    lead_id: Optional[int]
    pdf_size_mb: float
    lead_error: Optional[str] = None


@dataclass(frozen=True)
class ReminderResult:
    email: str
    reminder_date: date


# ── Helpers ───────────────────────────────────────────────────────────────────

def estimate_pdf_size_mb(pdf_base64: str) -> float:
    """Approximate decoded size in MB of a base64 payload."""
    return len(pdf_base64) * 0.75 / 1024 / 1024


def attachment_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"MoneyHarbor-Investment-Report-{int(now.timestamp() * 1000)}.pdf"


def build_lead(
    request: ReportRequest,
    sent_at: Optional[datetime] = None,
) -> Lead:
    """Build the lead row for a sent report."""
    investment = request.investment
    assert investment is not None
    search = request.search_params or SearchParams()

    amount = search.amount or investment.min_amount or 0.0
    time_horizon = search.time_horizon or ", ".join(investment.time_horizon)
    risk_level = search.risk_level or str(investment.risk_level)

    return Lead(
        email=request.email,
        full_name=request.full_name or None,
        investment_name=investment.name or "Unknown",
        investment_type=str(investment.risk_level),
        amount=amount,
        time_horizon=time_horizon,
        risk_level=risk_level,
        knowledge_level=search.knowledge_level,
        additional_notes=search.additional_notes,
        pdf_sent=True,
        sent_at=sent_at or datetime.now(timezone.utc),
    )


def validate_request(request: ReportRequest) -> None:
    """Check the required fields of ``request``.

    Raises:
        ReportValidationError: Naming every missing field.
    """
    missing = [
        name
        for name, present in (
            ("email", bool(request.email.strip())),
            ("investment", request.investment is not None),
            ("pdfBase64", bool(request.pdf_base64)),
        )
        if not present
    ]
    if missing:
        raise ReportValidationError(f"Missing required fields: {', '.join(missing)}.")


# ── Operations ────────────────────────────────────────────────────────────────

def send_report(
    request: ReportRequest,
    email_client: BrevoEmailClient,
    lead_repo: Optional[LeadRepository] = None,
    max_attachment_mb: float = DEFAULT_MAX_ATTACHMENT_MB,
) -> DispatchResult:
    """Email the PDF report and record the lead.

    Args:
        request:           The report request.
        email_client:      Configured Brevo client.
        lead_repo:         Where to record the lead; ``None`` skips recording.
        max_attachment_mb: Attachment size limit.

    Returns:
        DispatchResult for the sent email.

    Raises:
        ReportValidationError:   On missing fields.
        AttachmentTooLargeError: If the PDF exceeds ``max_attachment_mb``.
        httpx.HTTPStatusError:   If the email provider rejects the send.
    """
    validate_request(request)
    investment = request.investment
    assert investment is not None

    size_mb = estimate_pdf_size_mb(request.pdf_base64)
    logger.info("Report for %s: '%s', PDF %.2f MB", request.email, investment.name, size_mb)
    if size_mb > max_attachment_mb:
        raise AttachmentTooLargeError(size_mb, max_attachment_mb)

    now = datetime.now(timezone.utc)
    message_id = email_client.send(
        to_email=request.email,
        to_name=request.full_name or request.email,
        subject=report_subject(investment.name),
        html_content=render_report_email(investment.name, request.full_name),
        attachments=[
            EmailAttachment(name=attachment_filename(now), content_base64=request.pdf_base64)
        ],
    )

    lead_id: Optional[int] = None
    lead_error: Optional[str] = None
    if lead_repo is not None:
        try:
            lead_id = lead_repo.insert(build_lead(request, sent_at=now))
            lead_repo.conn.commit()
        except (sqlite3.Error, ValidationError) as exc:
            lead_error = str(exc)
            logger.error("Report sent but lead could not be saved: %s", exc)
        else:
            logger.info("Lead %d saved for %s", lead_id, request.email)

    return DispatchResult(
        message_id=message_id,
        lead_id=lead_id,
        pdf_size_mb=size_mb,
        lead_error=lead_error,
    )


def default_reminder_date(
    months: int = DEFAULT_REMINDER_MONTHS,
    today: Optional[date] = None,
) -> date:
    """Return ``today`` plus ``months`` 30-day months."""
    return (today or date.today()) + timedelta(days=months * _DAYS_PER_MONTH)


def set_reminder(
    email: str,
    email_client: BrevoEmailClient,
    reminder_date: Optional[date] = None,
    months: int = DEFAULT_REMINDER_MONTHS,
) -> ReminderResult:
    """Send the confirmation email for a portfolio review reminder.

    Args:
        email:         Recipient; must contain ``@``.
        email_client:  Configured Brevo client.
        reminder_date: When to remind; defaults to ``months`` from today.
        months:        Default horizon when ``reminder_date`` is omitted.

    Raises:
        ReportValidationError: On an invalid address.
        httpx.HTTPStatusError: If the email provider rejects the send.
    """
    email = (email or "").strip()
    if "@" not in email:
        raise ReportValidationError("Invalid email address.")

    when = reminder_date or default_reminder_date(months)
    email_client.send(
        to_email=email,
        subject=REMINDER_SUBJECT,
        html_content=render_reminder_email(when),
    )
    logger.info("Reminder confirmation sent to %s for %s", email, when.isoformat())
    return ReminderResult(email=email, reminder_date=when)
