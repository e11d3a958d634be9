"""
Dashboard data loader.

Catalog and lead reads are decorated with ``@st.cache_data`` so Streamlit
only re-reads them when asked (sidebar "Clear cache" button) or after the
TTL expires.  Search history is read uncached because the dashboard itself
writes to it.

Functions return empty collections (rather than raising) when the backing
file or database does not exist yet, so every tab can show a graceful
"nothing here yet" message.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

import streamlit as st

from money_harbor.catalog.loader import load_catalog
from money_harbor.config import AppConfig
from money_harbor.db.connection import get_connection
from money_harbor.db.repositories.lead_repo import LeadRepository
from money_harbor.history.store import JsonFileHistoryStore
from money_harbor.models.history import SearchBatch
from money_harbor.models.investment import InvestmentOption
from money_harbor.reporting.export import flatten_leads_for_export


@st.cache_data(ttl=3600)
def load_catalog_cached(catalog_file: str) -> list[dict]:
    """Return the catalog as camelCase dicts (cache-friendly).

    TTL: 1 hour (the catalog is static between deployments).
    """
    return [
        opt.model_dump(mode="json", by_alias=True)
        for opt in load_catalog(Path(catalog_file))
    ]


def catalog_options(catalog_file: str) -> tuple[InvestmentOption, ...]:
    """Rehydrate the cached catalog into models."""
    return tuple(
        InvestmentOption.model_validate(rec) for rec in load_catalog_cached(catalog_file)
    )


def history_store(config: AppConfig) -> JsonFileHistoryStore:
    return JsonFileHistoryStore(Path(config.history.history_file))


def load_history(config: AppConfig) -> list[SearchBatch]:
    return history_store(config).list_batches()


@st.cache_data(ttl=60)
def load_leads(db_path: str, limit: int = 500) -> list[dict]:
    """Return recent leads as flat export rows, or ``[]`` when there is no DB.

    TTL: 1 minute.
    """
    if not Path(db_path).exists():
        return []
    try:
        with get_connection(db_path, wal_mode=False) as conn:
            leads = LeadRepository(conn).list_recent(limit=limit)
    except sqlite3.OperationalError:
        # Database file exists but the schema has not been applied yet.
        return []
    return flatten_leads_for_export(leads)
