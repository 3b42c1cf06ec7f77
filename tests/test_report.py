from datetime import date

import pandas as pd

from worklog_app.core.config import EPOCH_PLACEHOLDER_DATE, MULTIPLE_USERS, REPORT_COLUMNS
from worklog_app.core.models import AggregatedIssueRecord, ReportResult, UserAccount
from worklog_app.core.report import combine_reports, records_to_dataframe, report_frames, write_reports


def _record(issue_id="1", user_name="Alice", all_users="U1", **overrides):
    values = dict(
        issue_id=issue_id,
        issue_key=f"P-{issue_id}",
        issue_type="Story",
        summary="Thing",
        user_name=user_name,
        status="Done",
        oldest_worklog_date=date(2024, 3, 1),
        latest_worklog_date=date(2024, 3, 4),
        time_spent_hours=6.0,
        story_points=3.0,
        days=0.75,
        velocity=4.0,
        business_value=None,
        components=("API", "UI"),
        parent_issue_key=None,
        parent_issue_type=None,
        parent_summary=None,
        all_users=all_users,
    )
    values.update(overrides)
    return AggregatedIssueRecord(**values)


def test_dataframe_columns_and_placeholders():
    df = records_to_dataframe(
        [_record(), _record("2", oldest_worklog_date=None, latest_worklog_date=None, story_points=None, velocity=None)]
    )
    assert list(df.columns) == list(REPORT_COLUMNS)
    assert df.loc[0, "components"] == "API, UI"
    assert df.loc[0, "parent_issue_key"] == "None"
    assert df.loc[0, "business_value"] == "None"
    assert df.loc[0, "oldest_worklog_date"] == "2024-03-01"
    assert df.loc[1, "oldest_worklog_date"] == EPOCH_PLACEHOLDER_DATE
    assert df.loc[1, "latest_worklog_date"] == EPOCH_PLACEHOLDER_DATE
    assert pd.isna(df.loc[1, "velocity"])
    assert pd.isna(df.loc[1, "story_points"])


def test_empty_dataframe_keeps_columns():
    df = records_to_dataframe([])
    assert df.empty
    assert list(df.columns) == list(REPORT_COLUMNS)


def test_combine_keeps_multi_user_row_once():
    a = records_to_dataframe([_record("1"), _record("7", user_name=MULTIPLE_USERS, all_users="U2, U1")])
    b = records_to_dataframe([_record("7", user_name=MULTIPLE_USERS, all_users="U1, U2"), _record("8", "Bob", "U2")])
    combined = combine_reports([a, b])
    assert list(combined["issue_id"]) == ["1", "7", "8"]
    assert combined.loc[1, "all_users"] == "U2, U1"


def test_combine_of_nothing():
    combined = combine_reports([records_to_dataframe([])])
    assert combined.empty
    assert list(combined.columns) == list(REPORT_COLUMNS)


def test_write_reports(tmp_path):
    users = [
        UserAccount("alice@example.com", "U1", "Alice Smith"),
        UserAccount("bob@example.com", "U2", "Bob/Jones"),
    ]
    result = ReportResult(users=users, per_user={"U1": [_record("1")], "U2": []})
    paths = write_reports(result, tmp_path / "out", date(2024, 3, 1), date(2024, 3, 31))
    names = [p.name for p in paths]
    assert names == [
        "Alice_Smith_2024-03-01_2024-03-31.csv",
        "Bob_Jones_2024-03-01_2024-03-31.csv",
        "combined_2024-03-01_2024-03-31.csv",
    ]
    combined = pd.read_csv(paths[-1])
    assert len(combined) == 1
    assert combined.loc[0, "issue_key"] == "P-1"


def test_shared_display_names_get_distinct_frames_and_files(tmp_path):
    users = [
        UserAccount("ann.a@example.com", "U1", "Ann Lee"),
        UserAccount("ann.b@example.com", "U2", "Ann Lee"),
        UserAccount("bob@example.com", "U3", "Bob"),
    ]
    result = ReportResult(
        users=users, per_user={"U1": [_record("1")], "U2": [_record("2", "Ann Lee", "U2")], "U3": []}
    )
    frames = report_frames(result)
    assert list(frames) == ["Ann Lee (U1)", "Ann Lee (U2)", "Bob"]
    assert list(frames["Ann Lee (U2)"]["issue_id"]) == ["2"]
    paths = write_reports(result, tmp_path, date(2024, 3, 1), date(2024, 3, 31))
    assert [p.name for p in paths] == [
        "Ann_Lee_U1_2024-03-01_2024-03-31.csv",
        "Ann_Lee_U2_2024-03-01_2024-03-31.csv",
        "Bob_2024-03-01_2024-03-31.csv",
        "combined_2024-03-01_2024-03-31.csv",
    ]
    assert len(pd.read_csv(paths[-1])) == 2
