"""Fold an issue's worklogs into a single report row (pure functions)."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from worklog_app.core.config import HOURS_PER_DAY, MULTIPLE_USERS, NONE_PLACEHOLDER
from worklog_app.core.models import AggregatedIssueRecord, Attribution, IssueDetail, WorklogEntry


def parse_story_points(value: Any) -> float | None:
    """Story points as a non-negative float, or None when absent or unparseable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value or value == NONE_PLACEHOLDER:
            return None
    try:
        points = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(points) or math.isinf(points) or points < 0:
        return None
    return points


def worklog_date_range(worklogs: Sequence[WorklogEntry]):
    """Oldest and latest start dates; ``(None, None)`` when there are no worklogs."""
    if not worklogs:
        return None, None
    ordered = sorted(worklogs, key=lambda w: w.start_date)
    return ordered[0].start_date, ordered[-1].start_date


def resolve_attribution(
    worklogs: Sequence[WorklogEntry],
    primary_account_id: str,
    primary_display_name: str,
    include_multi_user: bool,
) -> Attribution | None:
    """Decide who a row is reported under; None means the issue is skipped.

    Other authors are listed in order of first appearance, followed by the
    primary user.
    """
    others: list[str] = []
    for entry in worklogs:
        author = entry.author_id
        if author and author != primary_account_id and author not in others:
            others.append(author)
    if not others:
        return Attribution(user_name=primary_display_name, all_users=primary_account_id)
    if not include_multi_user:
        return None
    return Attribution(user_name=MULTIPLE_USERS, all_users=", ".join(others + [primary_account_id]))


def aggregate_issue(
    issue_id: str,
    worklogs: Sequence[WorklogEntry],
    detail: IssueDetail,
    user_name: str,
    all_users: str,
    parent: IssueDetail | None = None,
) -> AggregatedIssueRecord:
    oldest, latest = worklog_date_range(worklogs)
    total_seconds = sum(max(w.time_spent_seconds, 0) for w in worklogs)
    hours = round(total_seconds / 3600, 2)
    days = round(hours / HOURS_PER_DAY, 2)
    points = parse_story_points(detail.story_points)
    velocity = round(points / days, 4) if points is not None and days > 0 else None
    return AggregatedIssueRecord(
        issue_id=str(issue_id),
        issue_key=detail.issue_key,
        issue_type=detail.issue_type,
        summary=detail.summary,
        user_name=user_name,
        status=detail.status,
        oldest_worklog_date=oldest,
        latest_worklog_date=latest,
        time_spent_hours=hours,
        story_points=points,
        days=days,
        velocity=velocity,
        business_value=detail.business_value,
        components=detail.components,
        parent_issue_key=parent.issue_key if parent else None,
        parent_issue_type=parent.issue_type if parent else None,
        parent_summary=parent.summary if parent else None,
        all_users=all_users,
    )
