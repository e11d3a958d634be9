"""
Tests for money_harbor/dispatch/report_dispatcher.py.

Email traffic goes through ``httpx.MockTransport``; leads go to an
in-memory database.

What we test
------------
validate_request():
  - Names every missing field.

estimate_pdf_size_mb() / attachment_filename():
  - Base64 length * 0.75 / 1 MiB; epoch-millisecond file name.

build_lead():
  - Search params win; investment values fill the gaps.

send_report():
  - Sends one email with the PDF attached and records a lead.
  - Oversized PDFs are rejected before sending.
  - A lead-recording failure does not fail the send.
  - Provider errors propagate; no lead is recorded.

default_reminder_date() / set_reminder():
  - 6 x 30 days by default; explicit date honoured.
  - Invalid email rejected without sending.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import date, datetime, timezone

import httpx
import pytest

from money_harbor.clients.email_client import BrevoEmailClient
from money_harbor.db.repositories.lead_repo import LeadRepository
from money_harbor.dispatch.report_dispatcher import (
    AttachmentTooLargeError,
    ReportRequest,
    ReportValidationError,
    SearchParams,
    attachment_filename,
    build_lead,
    default_reminder_date,
    estimate_pdf_size_mb,
    send_report,
    set_reminder,
    validate_request,
)

_PDF_B64 = "JVBERi0xLjQK" * 10


class _Recorder:
    """Collects the JSON payloads posted to the mock Brevo API."""

    def __init__(self, status: int = 201) -> None:
        self.status = status
        self.payloads: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.payloads.append(json.loads(request.content))
        if self.status >= 400:
            return httpx.Response(self.status, json={"message": "rejected"})
        return httpx.Response(self.status, json={"messageId": f"msg-{len(self.payloads)}"})


def _email_client(recorder: _Recorder) -> BrevoEmailClient:
    return BrevoEmailClient(
        api_key="test",
        sender_email="noreply@moneyharbor.online",
        http_client=httpx.Client(transport=httpx.MockTransport(recorder)),
    )


@pytest.fixture
def request_(sample_option) -> ReportRequest:
    return ReportRequest(
        email="dana@example.com",
        full_name="Dana Levi",
        investment=sample_option,
        pdf_base64=_PDF_B64,
        search_params=SearchParams(
            amount=40_000,
            time_horizon="5 years",
            risk_level="medium",
            knowledge_level="beginner",
            additional_notes="First investment",
        ),
    )


# ── Helpers ───────────────────────────────────────────────────────────────────

class TestHelpers:
    def test_validate_names_missing_fields(self):
        with pytest.raises(ReportValidationError) as exc_info:
            validate_request(ReportRequest())
        message = str(exc_info.value)
        assert "email" in message
        assert "investment" in message
        assert "pdfBase64" in message

    def test_validate_ok(self, request_):
        validate_request(request_)

    def test_request_accepts_camel_case(self, sample_option):
        req = ReportRequest.model_validate({
            "email": "a@b.c",
            "fullName": "A",
            "investment": sample_option.model_dump(by_alias=True),
            "pdfBase64": "QUJD",
            "searchParams": {"amount": 100, "timeHorizon": "1 year"},
        })
        assert req.full_name == "A"
        assert req.search_params.time_horizon == "1 year"

    def test_pdf_size(self):
        assert estimate_pdf_size_mb("A" * (4 * 1024 * 1024)) == pytest.approx(3.0)

    def test_attachment_filename(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert attachment_filename(now) == "MoneyHarbor-Investment-Report-1735689600000.pdf"

    def test_build_lead_prefers_search_params(self, request_):
        lead = build_lead(request_)
        assert lead.amount == 40_000
        assert lead.time_horizon == "5 years"
        assert lead.knowledge_level == "beginner"
        assert lead.additional_notes == "First investment"
        assert lead.investment_name == "S&P 500 Index Fund"
        assert lead.investment_type == "medium"
        assert lead.pdf_sent is True

    def test_build_lead_falls_back_to_investment(self, request_):
        lead = build_lead(request_.model_copy(update={"search_params": None}))
        assert lead.amount == 1000
        assert lead.time_horizon == "medium, long"
        assert lead.risk_level == "medium"
        assert lead.knowledge_level is None


# ── send_report ───────────────────────────────────────────────────────────────

class TestSendReport:
    def test_sends_and_records(self, request_, in_memory_db):
        recorder = _Recorder()
        repo = LeadRepository(in_memory_db)
        with _email_client(recorder) as client:
            result = send_report(request_, client, lead_repo=repo)

        assert result.message_id == "msg-1"
        assert result.lead_error is None
        assert repo.count() == 1
        assert repo.get_by_id(result.lead_id).email == "dana@example.com"

        payload = recorder.payloads[0]
        assert payload["to"] == [{"email": "dana@example.com", "name": "Dana Levi"}]
        assert "S&P 500 Index Fund" in payload["subject"]
        assert "Dana Levi" in payload["htmlContent"]
        attachment = payload["attachment"][0]
        assert attachment["content"] == _PDF_B64
        assert attachment["name"].startswith("MoneyHarbor-Investment-Report-")
        assert attachment["name"].endswith(".pdf")

    def test_name_defaults_to_email(self, request_):
        recorder = _Recorder()
        with _email_client(recorder) as client:
            send_report(request_.model_copy(update={"full_name": None}), client)
        assert recorder.payloads[0]["to"][0]["name"] == "dana@example.com"

    def test_without_repo(self, request_):
        with _email_client(_Recorder()) as client:
            result = send_report(request_, client)
        assert result.lead_id is None
        assert result.lead_error is None

    def test_missing_fields_not_sent(self):
        recorder = _Recorder()
        with _email_client(recorder) as client:
            with pytest.raises(ReportValidationError):
                send_report(ReportRequest(email="a@b.c"), client)
        assert recorder.payloads == []

    def test_oversized_pdf_rejected(self, request_):
        recorder = _Recorder()
        big = request_.model_copy(update={"pdf_base64": "A" * (2 * 1024 * 1024)})
        with _email_client(recorder) as client:
            with pytest.raises(AttachmentTooLargeError) as exc_info:
                send_report(big, client, max_attachment_mb=1.0)
        assert exc_info.value.limit_mb == 1.0
        assert exc_info.value.size_mb == pytest.approx(1.5)
        assert recorder.payloads == []

    def test_lead_failure_does_not_fail_send(self, request_):
        conn = sqlite3.connect(":memory:")  # no schema -> insert fails
        with _email_client(_Recorder()) as client:
            result = send_report(request_, client, lead_repo=LeadRepository(conn))
        conn.close()
        assert result.message_id == "msg-1"
        assert result.lead_id is None
        assert "leads" in result.lead_error

    def test_provider_error_propagates(self, request_, in_memory_db):
        repo = LeadRepository(in_memory_db)
        with _email_client(_Recorder(status=400)) as client:
            with pytest.raises(httpx.HTTPStatusError):
                send_report(request_, client, lead_repo=repo)
        assert repo.count() == 0


# ── Reminders ─────────────────────────────────────────────────────────────────

class TestReminders:
    def test_default_date(self):
        assert default_reminder_date(today=date(2025, 1, 1)) == date(2025, 6, 30)

    def test_custom_months(self):
        assert default_reminder_date(months=1, today=date(2025, 1, 1)) == date(2025, 1, 31)

    def test_set_reminder_sends_confirmation(self):
        recorder = _Recorder()
        with _email_client(recorder) as client:
            result = set_reminder(" dana@example.com ", client, reminder_date=date(2025, 9, 1))
        assert result.email == "dana@example.com"
        assert result.reminder_date == date(2025, 9, 1)
        payload = recorder.payloads[0]
        assert payload["to"] == [{"email": "dana@example.com"}]
        assert "1 September 2025" in payload["htmlContent"]

    def test_set_reminder_default_date(self):
        with _email_client(_Recorder()) as client:
            result = set_reminder("a@b.c", client)
        assert result.reminder_date == default_reminder_date()

    @pytest.mark.parametrize("email", ["", "not-an-email", None])
    def test_invalid_email(self, email):
        recorder = _Recorder()
        with _email_client(recorder) as client:
            with pytest.raises(ReportValidationError):
                set_reminder(email, client)
        assert recorder.payloads == []
