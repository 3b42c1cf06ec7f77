"""Domain data models for worklogs, issue details, and report rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .config import UNKNOWN_ISSUE_TYPE


@dataclass(frozen=True, slots=True)
class WorklogEntry:
    issue_id: str
    author_id: str
    start_date: date
    time_spent_seconds: int


@dataclass(frozen=True, slots=True)
class IssueDetail:
    issue_id: str
    issue_key: str | None
    issue_type: str | None
    summary: str | None
    parent_id: str | None = None
    story_points: Any | None = None
    business_value: Any | None = None
    status: str | None = None
    components: tuple[str, ...] = ()
    unknown: bool = False

    @classmethod
    def unknown_for(cls, issue_id: str) -> IssueDetail:
        """Placeholder cached when the detail lookup fails."""
        return cls(
            issue_id=str(issue_id),
            issue_key=None,
            issue_type=UNKNOWN_ISSUE_TYPE,
            summary=None,
            unknown=True,
        )


@dataclass(frozen=True, slots=True)
class UserAccount:
    email: str
    account_id: str
    display_name: str


@dataclass(frozen=True, slots=True)
class Attribution:
    user_name: str
    all_users: str


@dataclass(frozen=True, slots=True)
class AggregatedIssueRecord:
    issue_id: str
    issue_key: str | None
    issue_type: str | None
    summary: str | None
    user_name: str
    status: str | None
    oldest_worklog_date: date | None
    latest_worklog_date: date | None
    time_spent_hours: float
    story_points: float | None
    days: float
    velocity: float | None
    business_value: Any | None
    components: tuple[str, ...]
    parent_issue_key: str | None
    parent_issue_type: str | None
    parent_summary: str | None
    all_users: str


@dataclass(slots=True)
class RunStats:
    users_processed: int = 0
    worklogs_fetched: int = 0
    issues_touched: int = 0
    issues_qualified: int = 0
    records_emitted: int = 0
    multi_user_skipped: int = 0
    truncated_paginations: int = 0
    failed_pages: int = 0
    cache: dict[str, dict[str, int]] = field(default_factory=dict)


@dataclass(slots=True)
class ReportResult:
    users: list[UserAccount] = field(default_factory=list)
    per_user: dict[str, list[AggregatedIssueRecord]] = field(default_factory=dict)
    stats: RunStats = field(default_factory=RunStats)

    @property
    def combined(self) -> list[AggregatedIssueRecord]:
        out: list[AggregatedIssueRecord] = []
        for user in self.users:
            out.extend(self.per_user.get(user.account_id, []))
        return out
