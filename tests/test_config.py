from datetime import date
from pathlib import Path

import pytest

from worklog_app.core.config import (
    DEFAULT_ISSUE_TYPES,
    FieldMapping,
    ReportSettings,
    default_date_range,
    load_settings,
    parse_issue_types,
)


def test_default_date_range_is_month_to_date():
    assert default_date_range(date(2024, 3, 17)) == (date(2024, 3, 1), date(2024, 3, 17))


def test_parse_issue_types():
    assert parse_issue_types("Story, Bug ,,") == frozenset({"Story", "Bug"})
    assert parse_issue_types(None) == frozenset(DEFAULT_ISSUE_TYPES)
    assert parse_issue_types(" , ") == frozenset(DEFAULT_ISSUE_TYPES)


def test_fetch_fields_include_mapping_once():
    fields = FieldMapping(story_points="customfield_1", status="status", components="components")
    out = fields.fetch_fields()
    assert out[:3] == ["summary", "issuetype", "parent"]
    assert out.count("status") == 1
    assert "customfield_1" in out


def test_settings_validation():
    with pytest.raises(ValueError):
        ReportSettings(date_from=date(2024, 3, 2), date_to=date(2024, 3, 1))
    with pytest.raises(ValueError):
        ReportSettings(date_from=date(2024, 3, 1), date_to=date(2024, 3, 2), max_pages=0)
    with pytest.raises(ValueError):
        ReportSettings(date_from=date(2024, 3, 1), date_to=date(2024, 3, 2), limit=0)


def test_load_settings_from_env():
    env = {
        "WORKLOG_DATE_FROM": "2024-01-01",
        "WORKLOG_DATE_TO": "2024-01-31",
        "WORKLOG_ISSUE_TYPES": "Epic,Story",
        "WORKLOG_MAX_PAGES": "3",
        "WORKLOG_INCLUDE_MULTI_USER": "yes",
        "WORKLOG_FIELD_STORY_POINTS": "customfield_20000",
        "WORKLOG_OUTPUT_DIR": "out",
    }
    settings = load_settings(env)
    assert settings.date_from == date(2024, 1, 1)
    assert settings.date_to == date(2024, 1, 31)
    assert settings.issue_types == frozenset({"Epic", "Story"})
    assert settings.max_pages == 3
    assert settings.include_multi_user is True
    assert settings.fields.story_points == "customfield_20000"
    assert settings.output_dir == Path("out")


def test_overrides_win_and_none_falls_through():
    env = {"WORKLOG_DATE_FROM": "2024-01-01", "WORKLOG_DATE_TO": "2024-01-31", "WORKLOG_LIMIT": "25"}
    settings = load_settings(
        env,
        date_to="2024-01-15",
        limit=None,
        include_multi_user=True,
        field_overrides={"components": "customfield_3", "status": None},
    )
    assert settings.date_to == date(2024, 1, 15)
    assert settings.limit == 25
    assert settings.include_multi_user is True
    assert settings.fields.components == "customfield_3"
    assert settings.fields.status == "status"
