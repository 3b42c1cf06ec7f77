"""Convenience launcher for the Streamlit app.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``worklog_app/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

from importlib import import_module
from pathlib import Path

import streamlit as st

from worklog_app.app import main

st.set_page_config(layout="wide")


def _auto_init_clients():
    """Initialize Jira and Tempo clients from Streamlit secrets if available."""
    if "report_clients" in st.session_state:
        return

    jira_secrets = st.secrets.get("jira", {})
    server = jira_secrets.get("JIRA_SERVER") or st.secrets.get("JIRA_SERVER")
    email = jira_secrets.get("JIRA_EMAIL") or st.secrets.get("JIRA_EMAIL")
    token = jira_secrets.get("JIRA_API_TOKEN") or st.secrets.get("JIRA_API_TOKEN")
    tempo_token = jira_secrets.get("TEMPO_API_TOKEN") or st.secrets.get("TEMPO_API_TOKEN")
    tempo_server = jira_secrets.get("TEMPO_SERVER") or st.secrets.get("TEMPO_SERVER")

    if server and email and token and tempo_token:
        st.sidebar.info("Secrets found, attempting to connect...")
        try:
            from worklog_app.pages.setup import build_clients

            st.session_state["jira_server"] = server
            st.session_state["report_clients"] = build_clients(server, email, token, tempo_token, tempo_server)
            st.sidebar.success("Connection successful!")
        except Exception as e:
            st.sidebar.error(f"Connection failed: {e}")
            st.session_state.pop("report_clients", None)
    else:
        st.sidebar.warning("Secrets not found. Please use the Setup page.")


_auto_init_clients()

PAGES_DIR = Path(__file__).parent / "worklog_app" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"worklog_app.pages.{py.stem}"
    try:
        import_module(mod_name)
    except Exception as e:  # pragma: no cover
        print(f"Failed importing page {mod_name}: {e}")

if __name__ == "__main__":
    main()
