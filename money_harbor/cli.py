"""
MoneyHarbor — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute the action (recommend, send a report, list leads, ...).
  5. Report the result to stdout; errors go to stderr with exit code 1.

Install and run::

    pip install -e .
    money-harbor --help
    money-harbor init-db
    money-harbor recommend --amount 50000 --horizon "5 years" --risk medium \\
        --liquidity "Can lock funds for a medium period"
    money-harbor history
    money-harbor send-report --email dana@example.com --investment-id sp500-index \\
        --pdf report.pdf
"""

from __future__ import annotations

import base64
import json
from datetime import date
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="money-harbor",
    help="MoneyHarbor — personalised investment recommendations and reports.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from money_harbor.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from money_harbor.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_catalog_or_exit(config, catalog_path: Optional[str] = None):
    from money_harbor.catalog.loader import load_catalog

    path = Path(catalog_path or config.catalog.catalog_file)
    try:
        return load_catalog(path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _llm_client_or_none(config):
    """Return an LLM client, or ``None`` when OPENAI_API_KEY is not set."""
    from money_harbor.clients.llm_client import LLMClient

    if not config.llm.is_configured:
        return None
    return LLMClient.from_config(config.llm)


def _email_client_or_exit(config):
    from money_harbor.clients.email_client import BrevoEmailClient, EmailNotConfiguredError

    try:
        return BrevoEmailClient.from_config(config.email)
    except EmailNotConfiguredError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _history_store(config):
    from money_harbor.history.store import JsonFileHistoryStore

    try:
        return JsonFileHistoryStore(Path(config.history.history_file))
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _resolve_investment_or_exit(config, investment_id: str):
    """Find an investment by id in the catalog, then in the latest saved search."""
    from money_harbor.catalog.loader import find_option

    option = find_option(_load_catalog_or_exit(config), investment_id)
    if option is None:
        batches = _history_store(config).list_batches()
        if batches:
            option = find_option(batches[0].recommendations, investment_id)
    if option is None:
        typer.echo(f"[ERROR] Unknown investment id '{investment_id}'.", err=True)
        raise typer.Exit(code=1)
    return option


# ── Setup commands ────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None, "--db-path", help="Override DB path from config."
    ),
    config_path: Optional[str] = typer.Option(
        None, "--config", help="Path to TOML config file."
    ),
) -> None:
    """Initialize the leads database.  Safe to run multiple times."""
    from money_harbor.db.connection import get_connection
    from money_harbor.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with get_connection(
        target_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    ) as conn:
        apply_schema(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None, "--config", help="Path to TOML config file (default: config/default.toml)."
    ),
    show_full: bool = typer.Option(
        False, "--full", help="Print full config including all fields."
    ),
) -> None:
    """Validate the configuration and print the effective values.

    API keys are reported as configured / not configured, never printed.
    """
    config = _load_config_or_exit(config_path)

    def _status(ok: bool) -> str:
        return "configured" if ok else "NOT configured"

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:     {config.database.db_path}")
    typer.echo(f"  Catalog file:      {config.catalog.catalog_file}")
    typer.echo(f"  History file:      {config.history.history_file}")
    typer.echo(f"  Top N / jitter:    {config.recommendation.top_n} / ±{config.recommendation.jitter_points:g}")
    typer.echo(f"  AI recommender:    {'on' if config.recommendation.use_ai else 'off'}")
    typer.echo(f"  OpenAI API key:    {_status(config.llm.is_configured)}")
    typer.echo(f"  Brevo API key:     {_status(config.email.is_configured)}")
    typer.echo(f"  Log level:         {config.logging.level}")
    typer.echo(f"  Debug mode:        {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(mode="json"), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("list-catalog")
def list_catalog(
    catalog_path: Optional[str] = typer.Option(
        None, "--catalog", help="Override the catalog JSON file."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Validate and list the investment catalog."""
    from money_harbor.reporting.formatters import format_catalog_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    catalog = _load_catalog_or_exit(config, catalog_path)
    typer.echo(format_catalog_table(catalog))


# ── Recommendation commands ───────────────────────────────────────────────────

@app.command("recommend")
def recommend(
    amount: float = typer.Option(..., "--amount", help="Amount to invest (₪)."),
    horizon: str = typer.Option(
        ..., "--horizon", help='Time horizon label, e.g. "1 year", "3 years", "7+ years".'
    ),
    risk: str = typer.Option(..., "--risk", help="Risk tolerance: low | medium | high."),
    liquidity: str = typer.Option(
        "Can lock funds for a medium period",
        "--liquidity",
        help="Liquidity label as shown in the form.",
    ),
    knowledge: Optional[str] = typer.Option(
        None, "--knowledge", help="beginner | intermediate | advanced."
    ),
    notes: Optional[str] = typer.Option(None, "--notes", help="Free-text notes (AI path only)."),
    use_ai: Optional[bool] = typer.Option(
        None, "--ai/--no-ai", help="Force the AI recommender on or off (default: config)."
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed the jitter for reproducible output."),
    as_json: bool = typer.Option(False, "--json", help="Print recommendations as JSON."),
    save: bool = typer.Option(True, "--save/--no-save", help="Save the search to My Harbor."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Recommend three diversified investments for the given profile."""
    import random

    from pydantic import ValidationError

    from money_harbor.history.store import new_batch
    from money_harbor.models.investment import UserPreferences
    from money_harbor.recommendations.ai_recommender import recommend as run_recommend
    from money_harbor.reporting.formatters import format_recommendations

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        preferences = UserPreferences(
            amount=amount,
            time_horizon=horizon,
            risk_level=risk,
            liquidity=liquidity,
            knowledge_level=knowledge,
            additional_notes=notes,
        )
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid preferences:\n{exc}", err=True)
        raise typer.Exit(code=1)

    catalog = _load_catalog_or_exit(config)

    want_ai = config.recommendation.use_ai if use_ai is None else use_ai
    client = _llm_client_or_none(config) if want_ai else None
    if want_ai and client is None:
        typer.echo("[WARN] OPENAI_API_KEY not set; using the rule engine.", err=True)

    try:
        result = run_recommend(
            preferences,
            catalog,
            client=client,
            rng=random.Random(seed) if seed is not None else None,
            n=config.recommendation.top_n,
            jitter_points=config.recommendation.jitter_points,
        )
    finally:
        if client is not None:
            client.close()

    if save and result.recommendations:
        batch = new_batch(preferences, result.recommendations)
        _history_store(config).save_batch(batch, preferences)

    if as_json:
        typer.echo(json.dumps(
            {
                "source": result.source,
                "recommendations": [
                    r.model_dump(mode="json", by_alias=True) for r in result.recommendations
                ],
            },
            indent=2,
            ensure_ascii=False,
        ))
        return

    typer.echo(format_recommendations(result.recommendations, source=result.source))
    if save and result.recommendations:
        typer.echo("")
        typer.echo(f"[OK] Saved to My Harbor as {batch.batch_id}.")


@app.command("expand-guide")
def expand_guide(
    investment_id: str = typer.Option(
        ..., "--investment-id", help="Catalog id, or an ai-N id from the latest search."
    ),
    amount: Optional[float] = typer.Option(None, "--amount", help="Your planned amount (₪)."),
    as_json: bool = typer.Option(False, "--json", help="Print the guide as JSON."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Generate a detailed explainer guide for one investment (requires OPENAI_API_KEY)."""
    import httpx

    from money_harbor.clients.llm_client import LLMResponseError
    from money_harbor.reporting.formatters import format_guide
    from money_harbor.reporting.guide import expand_guide as run_expand_guide

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    investment = _resolve_investment_or_exit(config, investment_id)
    client = _llm_client_or_none(config)
    if client is None:
        typer.echo("[ERROR] OpenAI API key not configured. Set OPENAI_API_KEY in .env.", err=True)
        raise typer.Exit(code=1)

    try:
        with client:
            guide = run_expand_guide(investment, client, user_amount=amount)
    except (httpx.HTTPError, LLMResponseError) as exc:
        typer.echo(f"[ERROR] Guide generation failed: {exc}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(
            {"report": guide.model_dump(mode="json", by_alias=True)}, indent=2, ensure_ascii=False
        ))
    else:
        typer.echo(format_guide(investment.name, guide))


# ── Email commands ────────────────────────────────────────────────────────────

@app.command("send-report")
def send_report(
    email: str = typer.Option(..., "--email", help="Recipient address."),
    investment_id: str = typer.Option(..., "--investment-id", help="Investment the report covers."),
    pdf_path: str = typer.Option(..., "--pdf", help="Path to the rendered PDF report."),
    full_name: Optional[str] = typer.Option(None, "--name", help="Recipient name."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Email a PDF report and record the lead.

    The search profile recorded with the lead is the last search saved in
    My Harbor, if any.
    """
    import httpx

    from money_harbor.db.connection import open_database
    from money_harbor.db.repositories.lead_repo import LeadRepository
    from money_harbor.dispatch.report_dispatcher import (
        ReportRequest,
        SearchParams,
        send_report as run_send_report,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    pdf_file = Path(pdf_path)
    if not pdf_file.exists():
        typer.echo(f"[ERROR] PDF not found: {pdf_file}", err=True)
        raise typer.Exit(code=1)

    investment = _resolve_investment_or_exit(config, investment_id)
    last = _history_store(config).last_preferences()
    search_params = (
        SearchParams.model_validate(last.model_dump(mode="json")) if last is not None else None
    )
    request = ReportRequest(
        email=email,
        full_name=full_name,
        investment=investment,
        pdf_base64=base64.b64encode(pdf_file.read_bytes()).decode("ascii"),
        search_params=search_params,
    )

    email_client = _email_client_or_exit(config)
    try:
        with email_client, open_database(config.database) as conn:
            result = run_send_report(
                request,
                email_client,
                lead_repo=LeadRepository(conn),
                max_attachment_mb=config.email.max_attachment_mb,
            )
    except (ValueError, httpx.HTTPError) as exc:
        # ReportValidationError and AttachmentTooLargeError are ValueErrors
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"  PDF size:   {result.pdf_size_mb:.2f} MB")
    typer.echo(f"  Message id: {result.message_id}")
    if result.lead_id is not None:
        typer.echo(f"  Lead id:    {result.lead_id}")
    else:
        typer.echo(f"  [WARN] Lead not recorded: {result.lead_error}", err=True)
    typer.echo(f"[OK] Report sent to {email}.")


@app.command("set-reminder")
def set_reminder(
    email: str = typer.Option(..., "--email", help="Where to send the reminder."),
    reminder_date: Optional[str] = typer.Option(
        None, "--date", help="Reminder date YYYY-MM-DD (default: 6 months from today)."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Schedule a portfolio review reminder and email the confirmation."""
    import httpx

    from money_harbor.dispatch.report_dispatcher import set_reminder as run_set_reminder

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    when: Optional[date] = None
    if reminder_date:
        try:
            when = date.fromisoformat(reminder_date)
        except ValueError as exc:
            typer.echo(f"[ERROR] Invalid date format: {exc}", err=True)
            raise typer.Exit(code=1)

    email_client = _email_client_or_exit(config)
    try:
        with email_client:
            result = run_set_reminder(
                email, email_client, reminder_date=when, months=config.email.reminder_months
            )
    except (ValueError, httpx.HTTPError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"[OK] Reminder set for {result.reminder_date.isoformat()} ({result.email}).")


# ── Lead admin commands ───────────────────────────────────────────────────────

@app.command("list-leads")
def list_leads(
    limit: Optional[int] = typer.Option(50, "--limit", help="Maximum rows (0 = all)."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show captured leads, newest first."""
    from money_harbor.db.connection import open_database
    from money_harbor.db.repositories.lead_repo import LeadRepository
    from money_harbor.reporting.formatters import format_leads_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with open_database(config.database) as conn:
        repo = LeadRepository(conn)
        leads = repo.list_recent(limit=limit or None)
        total = repo.count()

    typer.echo(format_leads_table(leads, total=total))


@app.command("export-leads")
def export_leads(
    output: str = typer.Option(..., "--output", "-o", help="Destination file (.csv or .json)."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Export all leads to CSV or JSON (format chosen by file extension)."""
    from money_harbor.db.connection import open_database
    from money_harbor.db.repositories.lead_repo import LeadRepository
    from money_harbor.reporting.export import (
        LEAD_COLUMNS,
        export_to_csv,
        export_to_json,
        flatten_leads_for_export,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    out_path = Path(output)
    fmt = out_path.suffix.lower()
    if fmt not in (".csv", ".json"):
        typer.echo(f"[ERROR] Unsupported file format '{fmt}'. Use .csv or .json.", err=True)
        raise typer.Exit(code=1)

    with open_database(config.database) as conn:
        rows = flatten_leads_for_export(LeadRepository(conn).list_recent())

    if fmt == ".csv":
        export_to_csv(rows, out_path, fieldnames=LEAD_COLUMNS)
    else:
        export_to_json(rows, out_path)
    typer.echo(f"[OK] Exported {len(rows)} lead(s) to {out_path}.")


# ── News ──────────────────────────────────────────────────────────────────────

@app.command("news")
def news(
    as_json: bool = typer.Option(False, "--json", help="Print the briefing as JSON."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show the AI market news briefing (demo content without an API key)."""
    from money_harbor.reporting.formatters import format_news_briefing
    from money_harbor.reporting.news import generate_briefing

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    client = _llm_client_or_none(config)
    try:
        briefing = generate_briefing(client)
    finally:
        if client is not None:
            client.close()

    if as_json:
        typer.echo(json.dumps(
            briefing.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False
        ))
    else:
        typer.echo(format_news_briefing(briefing))


# ── My Harbor ─────────────────────────────────────────────────────────────────

@app.command("history")
def history(
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show saved searches and investment progress (My Harbor)."""
    from money_harbor.history.store import summarize_history
    from money_harbor.reporting.formatters import format_history

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    batches = _history_store(config).list_batches()
    typer.echo(format_history(batches, summarize_history(batches)))


@app.command("update-history")
def update_history(
    batch_id: str = typer.Argument(..., help="Batch id from 'money-harbor history'."),
    status: str = typer.Option(
        ..., "--status", help="not_invested | invested_in_one | combined."
    ),
    count: Optional[int] = typer.Option(
        None, "--count", min=0, max=3, help="How many of the three you invested in."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Record what you did with a saved search."""
    from money_harbor.models.history import BatchStatus

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        batch_status = BatchStatus(status)
    except ValueError:
        valid = ", ".join(s.value for s in BatchStatus)
        typer.echo(f"[ERROR] Unknown status '{status}'. Use one of: {valid}.", err=True)
        raise typer.Exit(code=1)

    try:
        updated = _history_store(config).update_status(batch_id, batch_status, count)
    except KeyError as exc:
        typer.echo(f"[ERROR] {exc.args[0]}", err=True)
        raise typer.Exit(code=1)

    typer.echo(
        f"[OK] {updated.batch_id}: {updated.status} ({updated.recommendations_count} invested)."
    )


if __name__ == "__main__":
    app()
