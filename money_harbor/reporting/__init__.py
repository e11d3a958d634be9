"""
money_harbor.reporting — LLM-backed content, email bodies, CLI formatting
and flat-file export.

Modules:
  guide           — Expanded per-investment guide via the LLM client.
  news            — Market news briefing with a demo fallback.
  email_templates — HTML bodies for report and reminder emails.
  formatters      — ASCII terminal formatters for Typer CLI commands.
  export          — CSV/JSON flat-file export helpers.
"""
