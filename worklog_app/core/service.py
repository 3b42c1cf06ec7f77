"""ReportService: orchestrates worklog fetching, classification, and aggregation."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from worklog_app.analytics.aggregator import aggregate_issue, resolve_attribution
from worklog_app.analytics.classifier import classify_issues, distinct_issue_ids

from .cache import CacheStore
from .config import ReportSettings
from .errors import UserNotFoundError
from .fetcher import WorklogFetcher
from .jira_client import JiraAPI
from .models import AggregatedIssueRecord, ReportResult, RunStats, UserAccount
from .resolvers import ChildIssueResolver, IssueDetailResolver
from .tempo_client import TempoAPI

ProgressCallback = Callable[[str, int | None, int | None], None]

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(
        self,
        jira: JiraAPI,
        tempo: TempoAPI,
        settings: ReportSettings,
        *,
        cache: CacheStore | None = None,
    ):
        self.jira = jira
        self.tempo = tempo
        self.settings = settings
        self.cache = cache if cache is not None else CacheStore()
        self.details = IssueDetailResolver(jira, self.cache, settings.fields)
        self.children = ChildIssueResolver(jira, self.cache, self.details, settings.fields)
        self.fetcher = WorklogFetcher(tempo, self.cache, self.children, settings)
        self.stats = RunStats()

    # ------------------ Users ------------------
    def resolve_users(self, emails: Sequence[str]) -> list[UserAccount]:
        """Look up every email up front; any miss aborts before processing starts."""
        users: list[UserAccount] = []
        for email in emails:
            found = self.jira.find_user_by_email(email)
            if not found:
                raise UserNotFoundError(email)
            if any(u.account_id == found["accountId"] for u in users):
                logger.debug("Ignoring duplicate account for %s", email)
                continue
            users.append(
                UserAccount(email=email, account_id=found["accountId"], display_name=found["displayName"])
            )
        return users

    # ------------------ Per-user report ------------------
    def build_user_report(
        self,
        user: UserAccount,
        *,
        progress: ProgressCallback | None = None,
    ) -> list[AggregatedIssueRecord]:
        settings = self.settings
        if progress:
            progress(f"Fetching worklogs for {user.display_name}", None, None)
        entries = self.fetcher.fetch_user_worklogs(user.account_id, settings.date_from, settings.date_to)
        self.stats.worklogs_fetched += len(entries)

        touched = distinct_issue_ids(entries)
        self.stats.issues_touched += len(touched)
        if progress:
            progress(f"Classifying {len(touched)} issue(s) for {user.display_name}", None, None)
        qualifying = classify_issues(
            touched,
            settings.issue_types,
            self.details.resolve,
            self.children.children,
        )
        self.stats.issues_qualified += len(qualifying)
        logger.info(
            "%s: %d worklog(s), %d issue(s) touched, %d qualifying",
            user.display_name,
            len(entries),
            len(touched),
            len(qualifying),
        )

        records: list[AggregatedIssueRecord] = []
        for idx, issue_id in enumerate(qualifying, start=1):
            if progress:
                progress(f"Aggregating worklogs for {user.display_name}", idx, len(qualifying))
            record = self._aggregate_for_user(issue_id, user)
            if record is not None:
                records.append(record)
        self.stats.records_emitted += len(records)
        return records

    def _aggregate_for_user(self, issue_id: str, user: UserAccount) -> AggregatedIssueRecord | None:
        worklogs = self.fetcher.fetch_issue_worklogs(issue_id)
        attribution = resolve_attribution(
            worklogs,
            user.account_id,
            user.display_name,
            self.settings.include_multi_user,
        )
        if attribution is None:
            self.stats.multi_user_skipped += 1
            logger.info("Skipping %s for %s: other authors logged time on it", issue_id, user.display_name)
            return None
        detail = self.details.resolve(issue_id)
        parent = self.details.resolve(detail.parent_id) if detail.parent_id is not None else None
        return aggregate_issue(
            issue_id,
            worklogs,
            detail,
            user_name=attribution.user_name,
            all_users=attribution.all_users,
            parent=parent,
        )

    # ------------------ Full run ------------------
    def run(
        self,
        emails: Sequence[str],
        *,
        progress: ProgressCallback | None = None,
    ) -> ReportResult:
        if progress:
            progress("Resolving user accounts", None, None)
        users = self.resolve_users(emails)
        result = ReportResult(users=users, stats=self.stats)
        for idx, user in enumerate(users, start=1):
            if progress:
                progress(f"Processing {user.display_name}", idx, len(users))
            result.per_user[user.account_id] = self.build_user_report(user, progress=progress)
            self.stats.users_processed += 1
        self.stats.truncated_paginations = self.fetcher.truncations
        self.stats.failed_pages = self.fetcher.failed_pages
        self.stats.cache = self.cache.stats()
        return result
