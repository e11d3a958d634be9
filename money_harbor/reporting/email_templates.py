"""
HTML bodies and subject lines for the two transactional emails.

User-supplied values (name, investment name) are HTML-escaped before being
interpolated.  Templates use inline styles only, since most mail clients
strip ``<style>`` blocks.
"""

from __future__ import annotations

from datetime import date
from html import escape
from typing import Optional

BRAND = "MoneyHarbor"
MY_HARBOR_URL = "https://money-harbor.vercel.app/my-harbor"

_DISCLAIMER = (
    "The information in this report is general and educational only and does "
    "not constitute personal investment advice or a recommendation to act. "
    "Consult a licensed financial adviser before making investment decisions."
)

_LAYOUT = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: 'Helvetica Neue', Arial, sans-serif; background: #f1f3f5; padding: 40px 20px; margin: 0;">
  <div style="max-width: 640px; margin: 0 auto; background: #ffffff; border-radius: 12px; overflow: hidden;">
    <div style="background: #1a1a1a; padding: 40px; text-align: center;">
      <h1 style="margin: 0; color: {accent}; font-size: 38px; font-weight: 300;">{brand}</h1>
      <p style="margin: 10px 0 0; color: #d4af37; font-size: 13px; letter-spacing: 2px; text-transform: uppercase;">Investment Intelligence</p>
    </div>
    <div style="padding: 40px 32px; color: #4a4a4a; font-size: 16px; line-height: 1.8;">
{body}
      <div style="border-top: 1px solid #e9ecef; padding-top: 20px; margin-top: 25px;">
        <p style="color: #999; font-size: 12px; margin: 0;"><strong style="color: #666;">Important:</strong> {disclaimer}</p>
      </div>
    </div>
    <div style="background: #1a1a1a; padding: 25px; text-align: center;">
      <p style="margin: 0; color: #8a8a8a; font-size: 11px;">&copy; {year} {brand}</p>
    </div>
  </div>
</body>
</html>
"""


def _render(body: str, accent: str, disclaimer: str = _DISCLAIMER) -> str:
    return _LAYOUT.format(
        accent=accent,
        brand=BRAND,
        body=body,
        disclaimer=escape(disclaimer),
        year=date.today().year,
    )


# ── Report email ──────────────────────────────────────────────────────────────

def report_subject(investment_name: str) -> str:
    return f"Your {BRAND} investment report: {investment_name}"


def render_report_email(investment_name: str, full_name: Optional[str] = None) -> str:
    """HTML body for the email that carries the PDF report."""
    greeting = f"Hello {escape(full_name)}," if full_name else "Hello,"
    body = f"""      <h2 style="color: #1a1a1a; font-weight: 300;">Your personalised report is ready</h2>
      <p>{greeting}</p>
      <p>Attached is a detailed investment report prepared for you about
         <strong style="color: #d4af37;">{escape(investment_name)}</strong>.</p>
      <p>It covers an in-depth analysis, a step-by-step practical guide,
         recommended platforms and a full breakdown of costs.</p>
      <div style="background: #f8f9fa; border-left: 4px solid #d4af37; border-radius: 8px; padding: 20px;">
        <p style="margin: 0; color: #1a1a1a; font-weight: 600;">PDF attached to this email</p>
      </div>"""
    return _render(body, accent="#ffffff")


# ── Reminder email ────────────────────────────────────────────────────────────

REMINDER_SUBJECT = f"Reminder scheduled - {BRAND}"


def format_reminder_date(reminder_date: date) -> str:
    """Long-form date, e.g. ``1 September 2026``."""
    return f"{reminder_date.day} {reminder_date:%B %Y}"


def render_reminder_email(reminder_date: date) -> str:
    """HTML body confirming that a portfolio review reminder was scheduled."""
    body = f"""      <h2 style="color: #1a1a1a; font-weight: 300;">Your reminder is saved</h2>
      <p>We will email you on <strong style="color: #ffb347;">{format_reminder_date(reminder_date)}</strong>
         to revisit your harbor and update your investment strategy.</p>
      <p>In the meantime you can always return to the
         <a href="{MY_HARBOR_URL}" style="color: #ff9500;">My Harbor</a> page to track your investments.</p>"""
    return _render(
        body,
        accent="#ff9500",
        disclaimer=(
            "This email confirms a reminder you requested. Report content is "
            "general and educational only and is not investment advice."
        ),
    )
