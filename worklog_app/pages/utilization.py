"""Utilization report page: run the report for a set of users and browse it."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from worklog_app.app import register_page
from worklog_app.core.config import (
    DEFAULT_ISSUE_TYPES,
    DEFAULT_MAX_PAGES,
    SETTINGS,
    default_date_range,
    load_settings,
)
from worklog_app.core.errors import RemoteServiceError, UserNotFoundError
from worklog_app.core.report import combine_reports, report_frames
from worklog_app.core.service import ReportService
from worklog_app.visual.progress import ProgressReporter
from worklog_app.visual.tables import render_report_table, summarize_by_user


def _parse_emails(text: str) -> list[str]:
    emails: list[str] = []
    for chunk in text.replace(";", ",").replace("\n", ",").split(","):
        email = chunk.strip()
        if email and email not in emails:
            emails.append(email)
    return emails


@register_page("Utilization Report")
def utilization_page():
    st.title("Utilization Report")
    st.caption("Hours logged in Tempo, folded per qualifying Jira issue.")
    clients = st.session_state.get("report_clients")
    if clients is None:
        st.warning("Initialize connection on Setup page first.")
        return

    start_default, end_default = default_date_range()
    emails_text = st.text_area("User emails (one per line)", value=st.session_state.get("report_emails", ""))
    col1, col2 = st.columns(2)
    date_from = col1.date_input("From", value=start_default)
    date_to = col2.date_input("To", value=end_default)
    types_text = st.text_input("Issue types", value=", ".join(DEFAULT_ISSUE_TYPES))
    include_multi = st.checkbox("Include issues with several authors (as MULTIPLE_USERS)", value=False)
    max_pages = st.number_input("Max worklog pages", min_value=1, max_value=500, value=DEFAULT_MAX_PAGES)
    run_btn = st.button("Build Report", type="primary")

    if run_btn:
        emails = _parse_emails(emails_text)
        if not emails:
            st.error("Enter at least one email.")
            return
        st.session_state["report_emails"] = emails_text
        try:
            settings = load_settings(
                date_from=date_from,
                date_to=date_to,
                issue_types=types_text,
                include_multi_user=include_multi,
                max_pages=int(max_pages),
            )
        except ValueError as exc:
            st.error(f"Invalid settings: {exc}")
            return
        jira, tempo = clients
        service = ReportService(jira, tempo, settings)
        reporter = ProgressReporter(f"Building report for {len(emails)} user(s)")
        try:
            result = service.run(emails, progress=reporter.callback)
        except UserNotFoundError as exc:
            reporter.error(str(exc))
            return
        except RemoteServiceError as exc:
            reporter.error(f"Jira user lookup failed: {exc}")
            return
        frames = report_frames(result)
        st.session_state["report_frames"] = frames
        st.session_state["report_combined"] = combine_reports(frames.values())
        st.session_state["report_stats"] = result.stats
        reporter.complete(f"Built {result.stats.records_emitted} row(s) for {len(result.users)} user(s).")

    combined: pd.DataFrame = st.session_state.get("report_combined", pd.DataFrame())
    if combined.empty:
        st.info("No report built yet.")
        return

    server = st.session_state.get("jira_server", "")
    stats = st.session_state.get("report_stats")
    if stats is not None:
        m1, m2, m3 = st.columns(3)
        m1.metric("Rows", stats.records_emitted)
        m2.metric("Multi-user skipped", stats.multi_user_skipped)
        m3.metric("Truncated paginations", stats.truncated_paginations)

    st.subheader("Summary by user")
    st.dataframe(summarize_by_user(combined), hide_index=True)

    frames: dict[str, pd.DataFrame] = st.session_state.get("report_frames", {})
    tabs = st.tabs(["Combined"] + list(frames.keys()))
    with tabs[0]:
        render_report_table(combined, server)
        st.download_button(
            "Download Combined CSV",
            data=combined.to_csv(index=False).encode(SETTINGS.download_encoding),
            file_name="worklog_combined.csv",
            mime="text/csv",
        )
    for tab, (name, df) in zip(tabs[1:], frames.items()):
        with tab:
            render_report_table(df, server)
