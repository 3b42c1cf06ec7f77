"""Table helpers for rendering report rows in Streamlit."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from worklog_app.core.column_config import get_columns
from worklog_app.core.config import NONE_PLACEHOLDER, SETTINGS


def add_issue_link(df: pd.DataFrame, server: str, key_col: str = "issue_key", label: str = "Ticket"):
    if df.empty or key_col not in df.columns:
        return df, {}
    out = df.copy()
    base = server.rstrip("/")
    out[label] = (
        out[key_col]
        .astype(str)
        .apply(lambda k: f"{base}/browse/{k}" if k and k not in ("nan", NONE_PLACEHOLDER) else "")
    )
    cfg = {
        label: st.column_config.LinkColumn(
            label,
            display_text=r"browse/(.*)$",
            help="Open in Jira",
            width="medium",
        )
    }
    return out, cfg


def prepare_report_table(df: pd.DataFrame, server: str) -> tuple[pd.DataFrame, list[str], dict[str, object]]:
    if df.empty:
        return df, [], {}
    table, cfg = add_issue_link(df, server) if server else (df.copy(), {})
    display_cols = [col for col in get_columns("table") if col in table.columns]
    if "Ticket" in table.columns:
        display_cols = ["Ticket"] + [c for c in display_cols if c != "issue_key"]
    if not display_cols:
        display_cols = list(table.columns)
    return table, display_cols, cfg


def summarize_by_user(df: pd.DataFrame) -> pd.DataFrame:
    """Hours, days and issue counts per reported user name."""
    if df.empty:
        return pd.DataFrame(columns=["user_name", "issues", "time_spent_hours", "days"])
    agg = (
        df.groupby("user_name", dropna=False)
        .agg(
            issues=("issue_id", "count"),
            time_spent_hours=("time_spent_hours", "sum"),
            days=("days", "sum"),
        )
        .sort_values(by="time_spent_hours", ascending=False)
    )
    return agg.round(2).reset_index()


def render_report_table(df: pd.DataFrame, server: str, limit: int = SETTINGS.max_table_rows):
    prepared, cols, cfg = prepare_report_table(df, server)
    if prepared.empty:
        st.info("No qualifying issues for this selection.")
        return
    st.dataframe(prepared[cols].head(limit), hide_index=True, column_config=cfg)
