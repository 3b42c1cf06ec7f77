"""Select the issues to report from the ids a user logged time against."""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Iterable

from worklog_app.core.models import IssueDetail, WorklogEntry

logger = logging.getLogger(__name__)

DetailLookup = Callable[[str], IssueDetail]
ChildLookup = Callable[[str], list[str]]


def distinct_issue_ids(entries: Iterable[WorklogEntry]) -> list[str]:
    """Issue ids in order of first appearance."""
    seen: set[str] = set()
    out: list[str] = []
    for entry in entries:
        if entry.issue_id not in seen:
            seen.add(entry.issue_id)
            out.append(entry.issue_id)
    return out


def qualifying_ids_for(
    issue_id: str,
    wanted_types: Collection[str],
    details: DetailLookup,
    children: ChildLookup,
) -> list[str]:
    """Ids included on behalf of one touched issue; first matching rule wins.

    1. the issue itself when its type is wanted;
    2. otherwise its parent when the parent's type is wanted;
    3. otherwise every child whose type is wanted.
    """
    detail = details(issue_id)
    if detail.issue_type in wanted_types:
        return [issue_id]

    if detail.parent_id is not None:
        parent = details(detail.parent_id)
        if parent.issue_type in wanted_types:
            logger.debug("Issue %s qualifies through parent %s", issue_id, detail.parent_id)
            return [detail.parent_id]

    matched = [child for child in children(issue_id) if details(child).issue_type in wanted_types]
    if matched:
        logger.debug("Issue %s qualifies through %d child issue(s)", issue_id, len(matched))
    return matched


def classify_issues(
    issue_ids: Iterable[str],
    wanted_types: Collection[str],
    details: DetailLookup,
    children: ChildLookup,
) -> list[str]:
    """Deduplicated, discovery-ordered union of qualifying ids across ``issue_ids``."""
    seen: set[str] = set()
    out: list[str] = []
    for issue_id in issue_ids:
        for included in qualifying_ids_for(issue_id, wanted_types, details, children):
            if included not in seen:
                seen.add(included)
                out.append(included)
    return out
