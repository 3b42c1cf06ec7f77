from datetime import date

from fakes import issue_raw

from worklog_app.core.config import FieldMapping
from worklog_app.core.mappers import extract_field, extract_names, map_issue_detail, map_worklog, map_worklogs


def test_extract_field_unwraps_options_and_lists():
    fields = {
        "customfield_1": {"value": "High"},
        "customfield_2": [{"name": "API"}, {"name": "UI"}],
        "customfield_3": 5,
        "status": {"name": "Done"},
    }
    assert extract_field(fields, "customfield_1") == "High"
    assert extract_field(fields, "customfield_2") == ["API", "UI"]
    assert extract_field(fields, "customfield_3") == 5
    assert extract_field(fields, "status") == "Done"
    assert extract_field(fields, "missing") is None
    assert extract_field(fields, "") is None


def test_extract_names_dedupes_in_order():
    fields = {"components": [{"name": "UI"}, {"name": "API"}, {"name": "UI"}]}
    assert extract_names(fields, "components") == ("UI", "API")
    assert extract_names({}, "components") == ()


def test_map_issue_detail_uses_configured_field_ids():
    raw = issue_raw("100", "PROJ-1", "Story", parent="50", points=3, status="Done", components=("API",))
    raw["fields"]["customfield_99999"] = 8
    detail = map_issue_detail(raw, FieldMapping())
    assert detail.issue_id == "100"
    assert detail.issue_key == "PROJ-1"
    assert detail.issue_type == "Story"
    assert detail.parent_id == "50"
    assert detail.story_points == 3
    assert detail.business_value == "High"
    assert detail.status == "Done"
    assert detail.components == ("API",)
    assert not detail.unknown

    custom = map_issue_detail(raw, FieldMapping(story_points="customfield_99999"))
    assert custom.story_points == 8


def test_map_issue_detail_without_parent():
    detail = map_issue_detail(issue_raw("7", "PROJ-7", "Task"), FieldMapping())
    assert detail.parent_id is None
    assert detail.story_points is None


def test_map_worklog_shapes():
    entry = map_worklog(
        {"issue": {"id": 42}, "author": {"accountId": "u1"}, "startDate": "2024-03-05", "timeSpentSeconds": 1800}
    )
    assert entry.issue_id == "42"
    assert entry.author_id == "u1"
    assert entry.start_date == date(2024, 3, 5)
    assert entry.time_spent_seconds == 1800


def test_map_worklogs_skips_entries_without_issue_or_date():
    items = [
        {"issue": {}, "startDate": "2024-03-05", "timeSpentSeconds": 10},
        {"issue": {"id": 1}, "startDate": None, "timeSpentSeconds": 10},
        {"issue": {"id": 2}, "author": {"accountId": "u"}, "startDate": "2024-03-06", "timeSpentSeconds": "bad"},
    ]
    out = map_worklogs(items)
    assert len(out) == 1
    assert out[0].issue_id == "2"
    assert out[0].time_spent_seconds == 0


def test_map_issue_detail_tolerates_malformed_sub_objects():
    raw = {"id": "7", "key": "P-7", "fields": {"parent": "P-1", "issuetype": "Story", "summary": "Odd"}}
    detail = map_issue_detail(raw, FieldMapping())
    assert detail.parent_id is None
    assert detail.issue_type is None
    assert detail.summary == "Odd"
    assert map_issue_detail({"id": "8", "fields": "broken"}, FieldMapping()).issue_key is None
