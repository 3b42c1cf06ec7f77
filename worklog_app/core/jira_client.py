"""Jira API client wrapper (REST v3 + enhanced search pagination)."""

from __future__ import annotations

import logging
from typing import Any

import requests
from jira import JIRA, JIRAError

from .config import DEFAULT_SEARCH_PAGE_SIZE
from .errors import RemoteServiceError

logger = logging.getLogger(__name__)


class JiraAPI:
    def __init__(self, server: str, email: str, token: str):
        self.server = server.rstrip("/")
        self.client = JIRA(
            basic_auth=(email, token), options={"server": self.server, "rest_api_version": "3"}
        )

    def search_issues_raw(
        self,
        jql: str,
        fields: list[str] | None = None,
        page_size: int = DEFAULT_SEARCH_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        session = getattr(self.client, "_session", None)
        if session is None:
            raise RemoteServiceError("JIRA session unavailable")
        url = f"{self.server}/rest/api/3/search/jql"
        params = {"jql": jql, "maxResults": page_size}
        if fields:
            params["fields"] = ",".join(fields)
        out: list[dict[str, Any]] = []
        token = None
        while True:
            qp = dict(params)
            if token:
                qp["nextPageToken"] = token
            try:
                resp = session.get(url, params=qp)
            except (JIRAError, requests.RequestException) as exc:
                raise RemoteServiceError(f"Search failed for {jql!r}: {exc}") from exc
            if resp.status_code >= 400:
                raise RemoteServiceError(f"Enhanced search failed {resp.status_code}: {resp.text[:200]}")
            try:
                data = resp.json()
            except ValueError as exc:
                raise RemoteServiceError(f"Enhanced search returned invalid JSON for {jql!r}") from exc
            if not isinstance(data, dict):
                raise RemoteServiceError(f"Enhanced search returned unexpected payload {type(data)!r}")
            out.extend(data.get("issues", []))
            token = data.get("nextPageToken")
            if not token or data.get("isLast") is True:
                break
        return out

    def fetch_issue_raw(self, issue_id: str, fields: list[str] | None = None) -> dict[str, Any]:
        try:
            issue = self.client.issue(issue_id, fields=",".join(fields) if fields else None)
        except (JIRAError, requests.RequestException) as exc:
            raise RemoteServiceError(f"Failed to fetch issue {issue_id}: {exc}") from exc
        if hasattr(issue, "raw"):
            return issue.raw
        if isinstance(issue, dict):
            return issue
        raise RemoteServiceError(f"Unexpected issue payload type for {issue_id}: {type(issue)!r}")

    def find_user_by_email(self, email: str) -> dict[str, Any] | None:
        """Return ``{"accountId", "displayName"}`` for the first active match, if any."""
        try:
            users = self.client.search_users(query=email, maxResults=10)
        except (JIRAError, requests.RequestException) as exc:
            raise RemoteServiceError(f"User search failed for {email}: {exc}") from exc
        for user in users or []:
            raw = getattr(user, "raw", user)
            if not isinstance(raw, dict) or not raw.get("accountId"):
                continue
            if raw.get("active") is False:
                logger.debug("Skipping inactive account %s for %s", raw.get("accountId"), email)
                continue
            return {"accountId": raw["accountId"], "displayName": raw.get("displayName") or email}
        return None
