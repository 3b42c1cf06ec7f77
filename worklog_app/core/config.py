"""Central configuration, constants, defaults, and report settings objects."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from pathlib import Path

import pytz

# =============================================================================
# Connection Settings
# =============================================================================
JIRA_DEFAULT_SERVER = "https://your-domain.atlassian.net"
TEMPO_DEFAULT_SERVER = "https://api.tempo.io/4"
TIMEZONE = "America/Santiago"
REQUEST_TIMEOUT_SECONDS = 30

# =============================================================================
# Report Defaults
# =============================================================================
DEFAULT_ISSUE_TYPES: Sequence[str] = ("Story", "Bug")
DEFAULT_PAGE_OFFSET: int = 0
DEFAULT_PAGE_LIMIT: int = 50  # Tempo caps pages at 5000; keep requests small
DEFAULT_MAX_PAGES: int = 20  # Hard ceiling on pages read per user / issue
DEFAULT_CHILD_DEPTH: int = 1  # 1 = direct children only
DEFAULT_OUTPUT_DIR = "reports"
DEFAULT_SEARCH_PAGE_SIZE: int = 100

HOURS_PER_DAY: float = 8.0

# =============================================================================
# Sentinels
# =============================================================================
# Label used when an issue carries time from more than one author.
MULTIPLE_USERS = "MULTIPLE_USERS"
# Issue type recorded for issues whose detail lookup failed.
UNKNOWN_ISSUE_TYPE = "Unknown"
# Serialized placeholders for absent values in report files.
NONE_PLACEHOLDER = "None"
EPOCH_PLACEHOLDER_DATE = "1970-01-01"

# =============================================================================
# Jira Custom Field IDs
# =============================================================================
# These differ between Jira deployments; override via env or CLI.
FIELD_IDS = {
    "story_points": "customfield_10016",
    "business_value": "customfield_10030",
    "status": "status",
    "components": "components",
}
PARENT_LINK_FIELD = "Parent Link"

# Fields always requested alongside the configurable ones
JIRA_FETCH_BASE_FIELDS = [
    "summary",
    "issuetype",
    "parent",
]

# =============================================================================
# Report Columns
# =============================================================================
REPORT_COLUMNS: Sequence[str] = (
    "issue_id",
    "issue_key",
    "issue_type",
    "summary",
    "user_name",
    "status",
    "oldest_worklog_date",
    "latest_worklog_date",
    "time_spent_hours",
    "story_points",
    "days",
    "velocity",
    "business_value",
    "components",
    "parent_issue_key",
    "parent_issue_type",
    "parent_summary",
    "all_users",
)

DATE_COLUMNS: Sequence[str] = ("oldest_worklog_date", "latest_worklog_date")
NUMERIC_COLUMNS: Sequence[str] = ("time_spent_hours", "story_points", "days", "velocity")

# Cache categories
CACHE_ISSUE_DETAIL = "issue_detail"
CACHE_CHILDREN = "children"
CACHE_ISSUE_WORKLOGS = "issue_worklogs"


@dataclass(slots=True)
class FieldMapping:
    """Remote field ids backing each logical issue field."""

    story_points: str = FIELD_IDS["story_points"]
    business_value: str = FIELD_IDS["business_value"]
    status: str = FIELD_IDS["status"]
    components: str = FIELD_IDS["components"]
    parent_link_field: str = PARENT_LINK_FIELD

    def fetch_fields(self) -> list[str]:
        out = list(JIRA_FETCH_BASE_FIELDS)
        for field_id in (self.story_points, self.business_value, self.status, self.components):
            if field_id and field_id not in out:
                out.append(field_id)
        return out


@dataclass(slots=True)
class ReportSettings:
    date_from: date
    date_to: date
    issue_types: frozenset[str] = frozenset(DEFAULT_ISSUE_TYPES)
    offset: int = DEFAULT_PAGE_OFFSET
    limit: int = DEFAULT_PAGE_LIMIT
    max_pages: int = DEFAULT_MAX_PAGES
    child_depth: int = DEFAULT_CHILD_DEPTH
    include_multi_user: bool = False
    fields: FieldMapping = field(default_factory=FieldMapping)
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)

    def __post_init__(self):
        if self.date_from > self.date_to:
            raise ValueError(f"date_from {self.date_from} is after date_to {self.date_to}")
        if self.limit <= 0:
            raise ValueError("limit must be positive")
        if self.max_pages <= 0:
            raise ValueError("max_pages must be positive")
        if self.offset < 0:
            raise ValueError("offset must not be negative")
        if self.child_depth < 0:
            raise ValueError("child_depth must not be negative")


def today_local(tz_name: str = TIMEZONE) -> date:
    return datetime.now(tz=pytz.timezone(tz_name)).date()


def default_date_range(today: date | None = None) -> tuple[date, date]:
    """First day of the current month through today (local timezone)."""
    today = today or today_local()
    return today.replace(day=1), today


def parse_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()


def parse_issue_types(value: str | Sequence[str] | None) -> frozenset[str]:
    """Parse a comma separated type list, ignoring blanks."""
    if value is None:
        return frozenset(DEFAULT_ISSUE_TYPES)
    items = value.split(",") if isinstance(value, str) else value
    types = frozenset(t.strip() for t in items if t and t.strip())
    return types or frozenset(DEFAULT_ISSUE_TYPES)


def _env_bool(raw: str | None, default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(raw: str | None, default: int) -> int:
    if raw is None or not raw.strip():
        return default
    return int(raw)


def load_settings(env: Mapping[str, str] | None = None, **overrides) -> ReportSettings:
    """Build ReportSettings from ``WORKLOG_*`` environment variables.

    Keyword overrides win over the environment; ``None`` overrides are ignored
    so CLI arguments left unset fall through to env values and defaults.
    """
    env = os.environ if env is None else env
    start, end = default_date_range()
    if env.get("WORKLOG_DATE_FROM"):
        start = parse_date(env["WORKLOG_DATE_FROM"])
    if env.get("WORKLOG_DATE_TO"):
        end = parse_date(env["WORKLOG_DATE_TO"])

    fields = FieldMapping(
        story_points=env.get("WORKLOG_FIELD_STORY_POINTS") or FIELD_IDS["story_points"],
        business_value=env.get("WORKLOG_FIELD_BUSINESS_VALUE") or FIELD_IDS["business_value"],
        status=env.get("WORKLOG_FIELD_STATUS") or FIELD_IDS["status"],
        components=env.get("WORKLOG_FIELD_COMPONENTS") or FIELD_IDS["components"],
        parent_link_field=env.get("WORKLOG_PARENT_LINK_FIELD") or PARENT_LINK_FIELD,
    )
    values = {
        "date_from": start,
        "date_to": end,
        "issue_types": parse_issue_types(env.get("WORKLOG_ISSUE_TYPES")),
        "offset": _env_int(env.get("WORKLOG_OFFSET"), DEFAULT_PAGE_OFFSET),
        "limit": _env_int(env.get("WORKLOG_LIMIT"), DEFAULT_PAGE_LIMIT),
        "max_pages": _env_int(env.get("WORKLOG_MAX_PAGES"), DEFAULT_MAX_PAGES),
        "child_depth": _env_int(env.get("WORKLOG_CHILD_DEPTH"), DEFAULT_CHILD_DEPTH),
        "include_multi_user": _env_bool(env.get("WORKLOG_INCLUDE_MULTI_USER"), False),
        "fields": fields,
        "output_dir": Path(env.get("WORKLOG_OUTPUT_DIR") or DEFAULT_OUTPUT_DIR),
    }

    field_overrides = {k: v for k, v in overrides.pop("field_overrides", {}).items() if v}
    if field_overrides:
        values["fields"] = replace(fields, **field_overrides)
    for key, value in overrides.items():
        if value is None:
            continue
        if key in ("date_from", "date_to"):
            value = parse_date(value)
        elif key == "issue_types":
            value = parse_issue_types(value)
        elif key == "output_dir":
            value = Path(value)
        values[key] = value
    return ReportSettings(**values)


@dataclass(slots=True)
class AppSettings:
    max_table_rows: int = 1000
    download_encoding: str = "utf-8"


SETTINGS = AppSettings()

# Columns shown in the Streamlit report table (override via columns.yaml)
TABLE_DISPLAY_COLUMNS: Sequence[str] = (
    "issue_key",
    "summary",
    "issue_type",
    "user_name",
    "status",
    "time_spent_hours",
    "days",
    "story_points",
    "velocity",
    "oldest_worklog_date",
    "latest_worklog_date",
    "parent_issue_key",
    "parent_summary",
    "components",
    "all_users",
)
