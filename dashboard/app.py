"""
MoneyHarbor — Streamlit Dashboard
=================================

Optional local UI over the same engine the CLI uses.

App structure (4 tabs)
----------------------
  1. Find Investments — Preference form; shows the diversified top 3 and
                        saves the search to My Harbor.
  2. My Harbor        — Saved searches, per-search status and overall progress.
  3. Market News      — AI briefing (demo content without an API key).
  4. Leads            — Admin table of captured leads with CSV download.

Usage
-----
    pip install -e ".[dashboard]"
    streamlit run dashboard/app.py
"""

from __future__ import annotations

import sys
from pathlib import Path

# ── Ensure project root is importable ────────────────────────────────────────
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st

# ── Must be the first Streamlit call ─────────────────────────────────────────
st.set_page_config(
    page_title="MoneyHarbor",
    layout="wide",
    initial_sidebar_state="expanded",
)

import pandas as pd

from dashboard.data_loader import catalog_options, history_store, load_history, load_leads
from money_harbor.clients.llm_client import LLMClient
from money_harbor.config import load_config
from money_harbor.history.store import new_batch, summarize_history
from money_harbor.models.history import BatchStatus
from money_harbor.models.investment import UserPreferences
from money_harbor.platforms import parse_platform, verified_platforms_count
from money_harbor.recommendations.ai_recommender import recommend
from money_harbor.reporting.export import flatten_recommendations_for_export
from money_harbor.reporting.news import generate_briefing
from money_harbor.recommendations.scorer import format_amount
from money_harbor.taxonomy.investment_taxonomy import (
    LIQUIDITY_LABELS,
    TIME_HORIZON_LABELS,
    KnowledgeLevel,
    RiskLevel,
)

config = load_config()
_CATALOG_FILE = str(_ROOT / config.catalog.catalog_file)
_DB_PATH = str(_ROOT / config.database.db_path)


# ── Sidebar ───────────────────────────────────────────────────────────────────

with st.sidebar:
    st.title("MoneyHarbor")
    st.caption("Find the investments that fit you")
    st.divider()

    use_ai = st.toggle(
        "AI recommendations",
        value=config.recommendation.use_ai,
        disabled=not config.llm.is_configured,
        help="Requires OPENAI_API_KEY. Falls back to the rule engine on any error.",
    )
    st.caption(f"{verified_platforms_count()} verified platforms linked")

    if st.button("Clear cache", help="Force re-read the catalog and leads."):
        st.cache_data.clear()
        st.rerun()


def _llm_client():
    return LLMClient.from_config(config.llm) if config.llm.is_configured else None


tab_find, tab_harbor, tab_news, tab_leads = st.tabs(
    ["Find Investments", "My Harbor", "Market News", "Leads"]
)


# ── Tab 1: Find Investments ───────────────────────────────────────────────────

with tab_find:
    with st.form("preferences"):
        c1, c2 = st.columns(2)
        amount = c1.number_input("Amount (₪)", min_value=1.0, value=50_000.0, step=1_000.0)
        horizon = c2.selectbox("Time horizon", options=list(TIME_HORIZON_LABELS), index=4)
        risk = c1.radio("Risk tolerance", options=[r.value for r in RiskLevel], index=1, horizontal=True)
        liquidity = c2.selectbox("Liquidity", options=list(LIQUIDITY_LABELS), index=1)
        knowledge = c1.selectbox(
            "Knowledge level", options=["(not specified)"] + [k.value for k in KnowledgeLevel]
        )
        notes = st.text_area("Anything else we should know?", disabled=not use_ai)
        submitted = st.form_submit_button("Find investments")

    if submitted:
        prefs = UserPreferences(
            amount=amount,
            time_horizon=horizon,
            risk_level=risk,
            liquidity=liquidity,
            knowledge_level=None if knowledge == "(not specified)" else knowledge,
            additional_notes=notes or None,
        )
        client = _llm_client() if use_ai else None
        try:
            result = recommend(
                prefs,
                catalog_options(_CATALOG_FILE),
                client=client,
                n=config.recommendation.top_n,
                jitter_points=config.recommendation.jitter_points,
            )
        finally:
            if client is not None:
                client.close()

        if result.fallback_reason and use_ai:
            st.warning(f"AI unavailable ({result.fallback_reason}); showing rule-based picks.")

        if not result.recommendations:
            st.info("No investments available right now.")
        else:
            history_store(config).save_batch(new_batch(prefs, result.recommendations), prefs)
            cols = st.columns(len(result.recommendations))
            for col, rec in zip(cols, result.recommendations):
                with col:
                    st.subheader(rec.name)
                    st.metric("Match score", f"{rec.score:.0f}")
                    st.caption(f"Risk {rec.risk_level} · liquidity {rec.liquidity}")
                    if rec.min_amount:
                        st.caption(f"Minimum {format_amount(rec.min_amount)}")
                    st.write(rec.description)
                    st.write(f"**Why:** {rec.match_reason}")
                    if rec.action_steps:
                        for line in rec.action_steps.platforms:
                            link = parse_platform(line)
                            st.markdown(f"- [{link.name}]({link.url})" if link.url else f"- {link.name}")

            df = pd.DataFrame(flatten_recommendations_for_export(result.recommendations))
            st.download_button(
                "Download as CSV",
                df.to_csv(index=False).encode("utf-8"),
                file_name="money_harbor_recommendations.csv",
                mime="text/csv",
            )


# ── Tab 2: My Harbor ──────────────────────────────────────────────────────────

with tab_harbor:
    batches = load_history(config)
    summary = summarize_history(batches)

    m1, m2, m3 = st.columns(3)
    m1.metric("Recommendations received", summary.total_queries)
    m2.metric("Marked as invested", summary.total_investments)
    m3.metric("Progress", f"{summary.percentage}%")
    if summary.message:
        st.progress(min(summary.percentage, 100) / 100, text=summary.message)

    if not batches:
        st.info("No saved searches yet. Use **Find Investments** first.")

    _status_labels = {
        BatchStatus.NOT_INVESTED: "Did not invest",
        BatchStatus.INVESTED_IN_ONE: "Invested in one",
        BatchStatus.COMBINED: "Combined several",
    }
    for batch in batches:
        with st.expander(
            f"{batch.created_at:%Y-%m-%d} · {format_amount(batch.amount)} · "
            f"{batch.time_horizon} · {batch.risk_level}"
        ):
            for rec in batch.recommendations:
                st.write(f"- **{rec.name}** (score {rec.score:.0f})")
            status = st.radio(
                "What did you do?",
                options=list(_status_labels),
                format_func=_status_labels.get,
                index=list(_status_labels).index(batch.status),
                key=f"status-{batch.batch_id}",
                horizontal=True,
            )
            count = st.number_input(
                "How many did you invest in?",
                min_value=0,
                max_value=len(batch.recommendations),
                value=batch.recommendations_count,
                key=f"count-{batch.batch_id}",
            )
            if st.button("Save", key=f"save-{batch.batch_id}"):
                history_store(config).update_status(batch.batch_id, status, int(count))
                st.rerun()


# ── Tab 3: Market News ────────────────────────────────────────────────────────

with tab_news:
    if st.button("Refresh briefing"):
        client = _llm_client()
        try:
            st.session_state["briefing"] = generate_briefing(client)
        finally:
            if client is not None:
                client.close()

    briefing = st.session_state.get("briefing")
    if briefing is None:
        st.info("Press **Refresh briefing** to load today's market news.")
    else:
        if briefing.is_demo:
            st.warning("Live briefing unavailable; showing demo content.")
        st.caption(f"Generated {briefing.generated_at:%Y-%m-%d %H:%M} UTC")
        for item in briefing.items:
            badge = {"positive": "🟢", "negative": "🔴"}.get(item.impact, "⚪")
            st.markdown(f"{badge} **{item.title}**  \n{item.summary}")


# ── Tab 4: Leads ──────────────────────────────────────────────────────────────

with tab_leads:
    rows = load_leads(_DB_PATH)
    if not rows:
        st.info("No leads yet. Run `money-harbor init-db` and send a report first.")
    else:
        df_leads = pd.DataFrame(rows)
        st.metric("Leads", len(df_leads))
        st.dataframe(df_leads, use_container_width=True, hide_index=True)
        st.download_button(
            "Export CSV",
            df_leads.to_csv(index=False).encode("utf-8"),
            file_name="money_harbor_leads.csv",
            mime="text/csv",
        )
