"""Connection setup page: collect Jira and Tempo credentials."""

from __future__ import annotations

import streamlit as st

from worklog_app.app import register_page
from worklog_app.core.config import TEMPO_DEFAULT_SERVER
from worklog_app.core.jira_client import JiraAPI
from worklog_app.core.tempo_client import TempoAPI


def _secret(name: str) -> str | None:
    section = st.secrets.get("jira", {})
    return section.get(name) or st.secrets.get(name)


def build_clients(server, email, token, tempo_token, tempo_server=None) -> tuple[JiraAPI, TempoAPI]:
    """Jira and Tempo clients; a blank Tempo URL falls back to the public API."""
    return JiraAPI(server, email, token), TempoAPI(tempo_token, tempo_server or TEMPO_DEFAULT_SERVER)


@register_page("Setup / Connection")
def setup_page():
    st.title("Jira & Tempo Connection Setup")
    st.caption("Enter credentials (use secrets manager in production).")

    server = st.text_input(
        "Jira Server URL",
        value=st.session_state.get("jira_server") or _secret("JIRA_SERVER") or "",
    )
    email = st.text_input(
        "Email / Username",
        value=st.session_state.get("jira_email") or _secret("JIRA_EMAIL") or "",
    )
    token = st.text_input(
        "Jira API Token",
        type="password",
        value=_secret("JIRA_API_TOKEN") or _secret("JIRA_TOKEN") or "",
    )
    tempo_token = st.text_input(
        "Tempo API Token",
        type="password",
        value=_secret("TEMPO_API_TOKEN") or "",
    )
    tempo_server = st.text_input("Tempo API URL", value=_secret("TEMPO_SERVER") or TEMPO_DEFAULT_SERVER)
    init_btn = st.button("Initialize Connection", type="primary")

    if init_btn:
        if not (server and email and token and tempo_token):
            st.error("All fields required.")
            return
        try:
            jira, tempo = build_clients(server, email, token, tempo_token, tempo_server)
            st.session_state["jira_server"] = server
            st.session_state["jira_email"] = email
            st.session_state["report_clients"] = (jira, tempo)
            st.success("Connection initialized.")
        except Exception as e:  # pragma: no cover
            st.error(f"Failed to initialize clients: {e}")

    if "report_clients" in st.session_state:
        st.info("Jira and Tempo clients ready.")
