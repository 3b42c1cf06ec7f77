"""Memoized issue detail and child-set lookups over the Jira hierarchy."""

from __future__ import annotations

import logging
from collections import deque
from typing import Any

from .cache import CacheStore
from .config import CACHE_CHILDREN, CACHE_ISSUE_DETAIL, FieldMapping
from .errors import RemoteServiceError
from .jira_client import JiraAPI
from .mappers import map_issue_detail
from .models import IssueDetail

logger = logging.getLogger(__name__)


class IssueDetailResolver:
    """Resolve issue ids to IssueDetail, one remote fetch per id per run.

    Failed lookups are cached as ``IssueDetail.unknown_for(id)`` so a bad id
    never aborts the run and is never retried.
    """

    def __init__(self, api: JiraAPI, cache: CacheStore, fields: FieldMapping):
        self.api = api
        self.cache = cache
        self.fields = fields
        self.remote_calls = 0

    def resolve(self, issue_id: str) -> IssueDetail:
        issue_id = str(issue_id)
        cached = self.cache.get(CACHE_ISSUE_DETAIL, issue_id)
        if cached is not None:
            return cached
        self.remote_calls += 1
        try:
            raw = self.api.fetch_issue_raw(issue_id, fields=self.fields.fetch_fields())
            detail = map_issue_detail(raw, self.fields)
        except RemoteServiceError as exc:
            logger.warning("Issue detail lookup failed for %s; recording as unknown: %s", issue_id, exc)
            detail = IssueDetail.unknown_for(issue_id)
        self.cache.put(CACHE_ISSUE_DETAIL, issue_id, detail)
        return detail

    def prime(self, raw: dict[str, Any]) -> bool:
        """Cache a detail mapped from an already-fetched payload. Returns True if stored."""
        issue_id = raw.get("id")
        if issue_id is None or self.cache.contains(CACHE_ISSUE_DETAIL, str(issue_id)):
            return False
        return self.cache.put(CACHE_ISSUE_DETAIL, str(issue_id), map_issue_detail(raw, self.fields))


class ChildIssueResolver:
    """Resolve a parent id to the ordered ids of its children.

    Children are sub-tasks (``parent``) unioned with issues pointing at the
    parent through the secondary parent-link field. Child payloads from the
    search warm the detail cache.
    """

    def __init__(
        self,
        api: JiraAPI,
        cache: CacheStore,
        details: IssueDetailResolver,
        fields: FieldMapping,
    ):
        self.api = api
        self.cache = cache
        self.details = details
        self.fields = fields
        self.remote_calls = 0

    def child_jql(self, parent_id: str) -> str:
        return f'parent = {parent_id} OR "{self.fields.parent_link_field}" = {parent_id}'

    def children(self, parent_id: str) -> list[str]:
        parent_id = str(parent_id)
        cached = self.cache.get(CACHE_CHILDREN, parent_id)
        if cached is not None:
            return list(cached)
        self.remote_calls += 1
        try:
            raw_issues = self.api.search_issues_raw(
                self.child_jql(parent_id), fields=self.fields.fetch_fields()
            )
        except RemoteServiceError as exc:
            logger.warning("Child search failed for %s; treating as no children: %s", parent_id, exc)
            raw_issues = []

        out: list[str] = []
        seen = {parent_id}
        for raw in raw_issues:
            child_id = raw.get("id")
            if child_id is None or str(child_id) in seen:
                continue
            seen.add(str(child_id))
            out.append(str(child_id))
            self.details.prime(raw)
        self.cache.put(CACHE_CHILDREN, parent_id, tuple(out))
        logger.debug("Resolved %d child issue(s) for %s", len(out), parent_id)
        return out

    def descendants(self, parent_id: str, depth: int = 1) -> list[str]:
        """Breadth-first children down to ``depth`` levels, each id visited once."""
        parent_id = str(parent_id)
        visited = {parent_id}
        out: list[str] = []
        queue: deque[tuple[str, int]] = deque([(parent_id, 0)])
        while queue:
            current, level = queue.popleft()
            if level >= depth:
                continue
            for child_id in self.children(current):
                if child_id in visited:
                    continue
                visited.add(child_id)
                out.append(child_id)
                queue.append((child_id, level + 1))
        return out
