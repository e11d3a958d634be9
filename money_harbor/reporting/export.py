"""
Export helpers for leads and recommendations.

All writers create parent directories, write UTF-8 and return the written
``Path``.  CSV exports are flat (one scalar per column) so they open
directly in Excel or pandas; list-valued fields are joined with ``"; "``.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Sequence

from money_harbor.models.investment import ScoredInvestment
from money_harbor.models.lead import Lead

LEAD_COLUMNS = [
    "lead_id", "sent_at", "created_at", "email", "full_name",
    "investment_name", "investment_type", "amount", "time_horizon",
    "risk_level", "knowledge_level", "additional_notes", "pdf_sent",
]


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a CSV file.

    Args:
        records:    Row dicts.
        path:       Destination file.
        fieldnames: Column order; defaults to the keys of the first record.
                    With no records and no fieldnames an empty file is written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    cols = fieldnames or (list(records[0].keys()) if records else [])
    if not cols:
        path.write_text("", encoding="utf-8")
        return path
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(data: dict | list, path: Path) -> Path:
    """Write ``data`` as pretty-printed JSON (non-ASCII kept readable)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(data, indent=2, default=str, ensure_ascii=False), encoding="utf-8"
    )
    return path


def flatten_leads_for_export(leads: Sequence[Lead]) -> list[dict]:
    """One flat row per lead in ``LEAD_COLUMNS`` order."""
    rows: list[dict] = []
    for lead in leads:
        row = lead.model_dump(mode="json")
        rows.append({col: row.get(col) for col in LEAD_COLUMNS})
    return rows


def flatten_recommendations_for_export(
    recommendations: Sequence[ScoredInvestment],
) -> list[dict]:
    """One flat row per recommendation, ranked in the given order."""
    rows: list[dict] = []
    for rank, rec in enumerate(recommendations, start=1):
        steps = rec.action_steps
        rows.append(
            {
                "rank":            rank,
                "id":              rec.id,
                "name":            rec.name,
                "score":           round(rec.score, 2),
                "risk_level":      str(rec.risk_level),
                "time_horizon":    "; ".join(rec.time_horizon),
                "liquidity":       str(rec.liquidity),
                "min_amount":      rec.min_amount,
                "expected_return": rec.expected_return,
                "match_reason":    rec.match_reason,
                "platforms":       "; ".join(steps.platforms) if steps else "",
            }
        )
    return rows
