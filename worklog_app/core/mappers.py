"""Mapping raw Jira issue JSON and Tempo worklog JSON into domain models."""

from __future__ import annotations

from datetime import date
from typing import Any

import pandas as pd

from .config import FieldMapping
from .models import IssueDetail, WorklogEntry


def _scalar_from_option(value: Any) -> Any:
    """Unwrap Jira option/user/status objects to their display value."""
    if isinstance(value, dict):
        for key in ("value", "name", "displayName", "key"):
            if value.get(key) is not None:
                return value[key]
        return None
    return value


def extract_field(fields: dict[str, Any], field_id: str | None) -> Any:
    """Return the value of ``field_id`` from an issue ``fields`` payload.

    Option-like objects collapse to their display value and lists collapse to
    a list of display values; empty values come back as ``None``.
    """
    if not field_id:
        return None
    value = fields.get(field_id)
    if value is None:
        return None
    if isinstance(value, list):
        items = [_scalar_from_option(v) for v in value]
        return [i for i in items if i is not None]
    return _scalar_from_option(value)


def extract_names(fields: dict[str, Any], field_id: str | None) -> tuple[str, ...]:
    value = extract_field(fields, field_id)
    if value is None:
        return ()
    if not isinstance(value, list):
        value = [value]
    # Deduplicate preserve order
    seen = set()
    out: list[str] = []
    for item in value:
        name = str(item).strip()
        if name and name not in seen:
            out.append(name)
            seen.add(name)
    return tuple(out)


def map_issue_detail(raw: dict[str, Any], mapping: FieldMapping) -> IssueDetail:
    fields = raw.get("fields")
    if not isinstance(fields, dict):
        fields = {}
    parent = fields.get("parent")
    parent_id = parent.get("id") if isinstance(parent, dict) else None
    issuetype = fields.get("issuetype")
    status = extract_field(fields, mapping.status)
    return IssueDetail(
        issue_id=str(raw.get("id")),
        issue_key=raw.get("key"),
        issue_type=issuetype.get("name") if isinstance(issuetype, dict) else None,
        summary=fields.get("summary"),
        parent_id=str(parent_id) if parent_id is not None else None,
        story_points=extract_field(fields, mapping.story_points),
        business_value=extract_field(fields, mapping.business_value),
        status=str(status) if status is not None else None,
        components=extract_names(fields, mapping.components),
    )


def parse_worklog_date(value: Any) -> date | None:
    if not value:
        return None
    ts = pd.to_datetime(value, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.date()


def map_worklog(raw: dict[str, Any]) -> WorklogEntry | None:
    """Map one Tempo worklog; returns None when the entry lacks an issue or date."""
    issue = raw.get("issue") or {}
    issue_id = issue.get("id") if isinstance(issue, dict) else None
    if issue_id is None:
        issue_id = raw.get("issueId")
    start = parse_worklog_date(raw.get("startDate"))
    if issue_id is None or start is None:
        return None
    author = raw.get("author") or {}
    author_id = author.get("accountId") if isinstance(author, dict) else None
    try:
        seconds = max(int(raw.get("timeSpentSeconds") or 0), 0)
    except (TypeError, ValueError):
        seconds = 0
    return WorklogEntry(
        issue_id=str(issue_id),
        author_id=str(author_id or raw.get("authorAccountId") or ""),
        start_date=start,
        time_spent_seconds=seconds,
    )


def map_worklogs(raw_items: list[dict[str, Any]]) -> list[WorklogEntry]:
    out: list[WorklogEntry] = []
    for raw in raw_items:
        entry = map_worklog(raw)
        if entry is not None:
            out.append(entry)
    return out
