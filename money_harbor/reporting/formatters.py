"""
ASCII terminal formatters for CLI commands.

All formatters take models (or lists of models) and return plain multi-line
strings suitable for ``typer.echo()``.  No third-party dependencies.

Long free-text values (names, match reasons, summaries) are truncated with
``...`` so every table row stays on one line.
"""

from __future__ import annotations

from typing import Sequence

from money_harbor.history.store import HistorySummary
from money_harbor.models.history import SearchBatch
from money_harbor.models.investment import InvestmentOption, ScoredInvestment
from money_harbor.models.lead import Lead
from money_harbor.models.report import InvestmentGuide, NewsBriefing
from money_harbor.recommendations.scorer import format_amount

_IMPACT_TAGS = {"positive": "[+]", "negative": "[-]", "neutral": "[=]"}


def _trunc(text: str, width: int) -> str:
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 3] + "..."


def _min_amount(option: InvestmentOption) -> str:
    return format_amount(option.min_amount) if option.min_amount else "-"


# ── Catalog ───────────────────────────────────────────────────────────────────

def format_catalog_table(catalog: Sequence[InvestmentOption]) -> str:
    """One row per catalog entry with its scales and minimum amount."""
    lines = ["", f"=== Investment Catalog ({len(catalog)} options) ==="]
    if not catalog:
        lines.append("  (catalog is empty)")
        return "\n".join(lines)

    lines.append(
        f"  {'ID':<18}  {'Name':<36}  {'Risk':<6}  {'Horizon':<18}  "
        f"{'Liquidity':<9}  {'Min':>9}"
    )
    lines.append("  " + "-" * 104)
    for opt in catalog:
        lines.append(
            f"  {_trunc(opt.id, 18):<18}  {_trunc(opt.name, 36):<36}  "
            f"{opt.risk_level:<6}  {','.join(opt.time_horizon):<18}  "
            f"{opt.liquidity:<9}  {_min_amount(opt):>9}"
        )
    return "\n".join(lines)


# ── Recommendations ──────────────────────────────────────────────────────────

def format_recommendations(
    recommendations: Sequence[ScoredInvestment],
    source: str = "rules",
) -> str:
    """Ranked recommendation blocks, one per investment.

    Example::

        === Your Top Recommendations (rules) ===

          1. S&P 500 Index Fund                               score  84.3
             risk medium | horizon medium,long | liquidity high | min ₪100
             Why: Fits your chosen time horizon (5 years), ...
    """
    lines = ["", f"=== Your Top Recommendations ({source}) ==="]
    if not recommendations:
        lines.append("")
        lines.append("  (no recommendations — the catalog is empty)")
        return "\n".join(lines)

    for rank, rec in enumerate(recommendations, start=1):
        lines.append("")
        lines.append(f"  {rank}. {_trunc(rec.name, 46):<46}  score {rec.score:>5.1f}")
        lines.append(
            f"     risk {rec.risk_level} | horizon {','.join(rec.time_horizon)} | "
            f"liquidity {rec.liquidity} | min {_min_amount(rec)}"
        )
        if rec.expected_return is not None:
            lines.append(f"     Expected return: ~{rec.expected_return:g}% per year")
        lines.append(f"     Why: {_trunc(rec.match_reason, 96)}")
        if rec.action_steps and rec.action_steps.platforms:
            lines.append(f"     Platforms: {', '.join(rec.action_steps.platforms)}")
    return "\n".join(lines)


# ── Guide ─────────────────────────────────────────────────────────────────────

def _bullets(items: Sequence[str], indent: str = "    - ") -> list[str]:
    return [f"{indent}{item}" for item in items]


def format_guide(investment_name: str, guide: InvestmentGuide) -> str:
    """Plain-text rendering of an expanded investment guide."""
    lines = ["", f"=== Investment Guide: {investment_name} ==="]

    def section(title: str, body: list[str]) -> None:
        if body:
            lines.append("")
            lines.append(f"  [{title}]")
            lines.extend(body)

    section("In short", _bullets(guide.tldr))
    section("What is it", [f"    {guide.what_is_it}"] if guide.what_is_it else [])
    section("Suitable for", _bullets(guide.who_is_it_for.suitable))
    section("Less suitable for", _bullets(guide.who_is_it_for.not_suitable))
    section(
        "Returns",
        [
            f"    {text}"
            for text in (guide.returns.historical, guide.returns.estimated, guide.returns.disclaimer)
            if text
        ],
    )
    section("Risks", _bullets(guide.risks))
    section("Time and liquidity", [f"    {guide.time_and_liquidity}"] if guide.time_and_liquidity else [])
    section("Costs", [f"    {guide.costs}"] if guide.costs else [])
    section("Taxation", [f"    {guide.taxation}"] if guide.taxation else [])
    section("How to start", [f"    {i}. {s}" for i, s in enumerate(guide.how_to_start, start=1)])
    section("Questions to ask", _bullets(guide.questions_to_ask))
    section("Summary", _bullets(guide.summary))
    if guide.disclaimer:
        lines.append("")
        lines.append(f"  * {guide.disclaimer}")
    return "\n".join(lines)


# ── Leads ─────────────────────────────────────────────────────────────────────

def format_leads_table(leads: Sequence[Lead], total: int | None = None) -> str:
    """Admin view of captured leads, newest first."""
    header = f"=== Leads ({len(leads)} shown" + (f" of {total})" if total is not None else ")") + " ==="
    lines = ["", header]
    if not leads:
        lines.append("  (no leads yet)")
        return "\n".join(lines)

    lines.append(
        f"  {'ID':>4}  {'Sent':<16}  {'Email':<28}  {'Name':<18}  "
        f"{'Investment':<28}  {'Amount':>10}  {'Risk':<6}"
    )
    lines.append("  " + "-" * 120)
    for lead in leads:
        sent = lead.sent_at or lead.created_at
        sent_str = sent.strftime("%Y-%m-%d %H:%M") if sent else "-"
        lines.append(
            f"  {lead.lead_id if lead.lead_id is not None else '-':>4}  {sent_str:<16}  "
            f"{_trunc(lead.email, 28):<28}  {_trunc(lead.full_name or '-', 18):<18}  "
            f"{_trunc(lead.investment_name, 28):<28}  {format_amount(lead.amount):>10}  "
            f"{lead.risk_level or '-':<6}"
        )
    return "\n".join(lines)


# ── History ───────────────────────────────────────────────────────────────────

def format_history(batches: Sequence[SearchBatch], summary: HistorySummary) -> str:
    """The "My Harbor" view: progress line plus one row per saved search."""
    lines = ["", "=== My Harbor ==="]
    lines.append(
        f"  {summary.total_investments} of {summary.total_queries} recommendations "
        f"marked as invested ({summary.percentage}%)"
    )
    if summary.message:
        lines.append(f"  {summary.message}")

    if not batches:
        lines.append("")
        lines.append("  (no saved searches — run 'money-harbor recommend' first)")
        return "\n".join(lines)

    lines.append("")
    lines.append(
        f"  {'Batch':<20}  {'Date':<10}  {'Amount':>10}  {'Horizon':<9}  "
        f"{'Risk':<6}  {'Status':<15}  {'#':>1}  Recommendations"
    )
    lines.append("  " + "-" * 110)
    for b in batches:
        names = ", ".join(r.name for r in b.recommendations)
        lines.append(
            f"  {b.batch_id:<20}  {b.created_at:%Y-%m-%d}  {format_amount(b.amount):>10}  "
            f"{b.time_horizon:<9}  {b.risk_level:<6}  {b.status:<15}  "
            f"{b.recommendations_count:>1}  {_trunc(names, 40)}"
        )
    return "\n".join(lines)


# ── News ──────────────────────────────────────────────────────────────────────

def format_news_briefing(briefing: NewsBriefing) -> str:
    """News items with an impact tag; flags demo content."""
    lines = ["", f"=== Market Briefing ({briefing.generated_at:%Y-%m-%d %H:%M} UTC) ==="]
    if briefing.is_demo:
        lines.append("  [DEMO] Live briefing unavailable" + (f": {briefing.error}" if briefing.error else ""))
    for item in briefing.items:
        lines.append("")
        lines.append(f"  {_IMPACT_TAGS.get(item.impact, '[?]')} {item.title}  ({item.category})")
        lines.append(f"      {item.summary}")
    if briefing.tokens_used:
        lines.append("")
        lines.append(f"  Tokens used: {briefing.tokens_used}")
    return "\n".join(lines)
