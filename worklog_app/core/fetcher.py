"""Paginated worklog retrieval by user/date range or by issue (and its children)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from .cache import CacheStore
from .config import CACHE_ISSUE_WORKLOGS, ReportSettings
from .errors import RemoteServiceError
from .mappers import map_worklogs
from .models import WorklogEntry
from .resolvers import ChildIssueResolver
from .tempo_client import TempoAPI, has_next_page

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int, int], dict[str, Any]]


class WorklogFetcher:
    def __init__(
        self,
        tempo: TempoAPI,
        cache: CacheStore,
        children: ChildIssueResolver,
        settings: ReportSettings,
    ):
        self.tempo = tempo
        self.cache = cache
        self.children = children
        self.settings = settings
        self.pages_read = 0
        self.truncations = 0
        self.failed_pages = 0

    def _paginate(self, fetch_page: PageFetcher, label: str) -> list[WorklogEntry]:
        """Read pages until the remote reports no next page or ``max_pages`` is hit.

        A failed page stops pagination for ``label`` but keeps what was read.
        """
        offset = self.settings.offset
        limit = self.settings.limit
        out: list[WorklogEntry] = []
        pages = 0
        while pages < self.settings.max_pages:
            try:
                page = fetch_page(offset, limit)
            except RemoteServiceError as exc:
                self.failed_pages += 1
                logger.warning(
                    "Worklog page failed for %s at offset %d; keeping %d entries: %s",
                    label,
                    offset,
                    len(out),
                    exc,
                )
                return out
            pages += 1
            self.pages_read += 1
            out.extend(map_worklogs(page.get("results") or []))
            if not has_next_page(page):
                return out
            offset += limit
        self.truncations += 1
        logger.warning(
            "Worklog pagination for %s truncated after %d page(s) (max_pages=%d); more results exist",
            label,
            pages,
            self.settings.max_pages,
        )
        return out

    def fetch_user_worklogs(self, account_id: str, date_from: date, date_to: date) -> list[WorklogEntry]:
        def fetch_page(offset: int, limit: int) -> dict[str, Any]:
            return self.tempo.worklogs_for_user(
                account_id, date_from, date_to, offset=offset, limit=limit
            )

        entries = self._paginate(fetch_page, f"user {account_id}")
        logger.debug("Fetched %d worklog(s) for user %s", len(entries), account_id)
        return entries

    def _fetch_single_issue(self, issue_id: str) -> list[WorklogEntry]:
        def fetch_page(offset: int, limit: int) -> dict[str, Any]:
            return self.tempo.worklogs_for_issue(issue_id, offset=offset, limit=limit)

        return self._paginate(fetch_page, f"issue {issue_id}")

    def fetch_issue_worklogs(self, issue_id: str) -> list[WorklogEntry]:
        """All worklogs of ``issue_id`` and its children, with no date filter."""
        issue_id = str(issue_id)
        cached = self.cache.get(CACHE_ISSUE_WORKLOGS, issue_id)
        if cached is not None:
            return list(cached)
        members = [issue_id] + self.children.descendants(issue_id, self.settings.child_depth)
        out: list[WorklogEntry] = []
        for member in members:
            out.extend(self._fetch_single_issue(member))
        self.cache.put(CACHE_ISSUE_WORKLOGS, issue_id, tuple(out))
        logger.debug(
            "Fetched %d worklog(s) for issue %s across %d member(s)", len(out), issue_id, len(members)
        )
        return out
