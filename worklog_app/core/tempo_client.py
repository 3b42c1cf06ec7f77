"""Tempo REST API v4 client wrapper (single worklog pages)."""

from __future__ import annotations

from datetime import date
from typing import Any

import requests

from .config import REQUEST_TIMEOUT_SECONDS, TEMPO_DEFAULT_SERVER
from .errors import RemoteServiceError


class TempoAPI:
    """Thin wrapper returning one page of worklogs per call.

    Pagination is driven by the caller; each page response is
    ``{"results": [...], "metadata": {"next": url?}}``.
    """

    def __init__(self, token: str, server: str = TEMPO_DEFAULT_SERVER):
        self.server = server.rstrip("/")
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            }
        )

    def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.server}{path}"
        try:
            resp = self.session.get(url, params=params, timeout=REQUEST_TIMEOUT_SECONDS)
        except requests.RequestException as exc:
            raise RemoteServiceError(f"GET {url} failed: {exc}") from exc
        if resp.status_code >= 400:
            raise RemoteServiceError(f"GET {url} failed {resp.status_code}: {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise RemoteServiceError(f"GET {url} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise RemoteServiceError(f"GET {url} returned unexpected payload {type(data)!r}")
        return data

    def worklogs_for_user(
        self,
        account_id: str,
        date_from: date,
        date_to: date,
        *,
        offset: int,
        limit: int,
    ) -> dict[str, Any]:
        return self._get(
            f"/worklogs/user/{account_id}",
            {
                "from": date_from.isoformat(),
                "to": date_to.isoformat(),
                "offset": offset,
                "limit": limit,
            },
        )

    def worklogs_for_issue(self, issue_id: str, *, offset: int, limit: int) -> dict[str, Any]:
        return self._get(f"/worklogs/issue/{issue_id}", {"offset": offset, "limit": limit})


def has_next_page(page: dict[str, Any]) -> bool:
    metadata = page.get("metadata") or {}
    return bool(metadata.get("next"))
