from datetime import date

from worklog_app.core.models import AggregatedIssueRecord
from worklog_app.core.report import records_to_dataframe
from worklog_app.visual.tables import add_issue_link, prepare_report_table, summarize_by_user


def _df():
    rows = []
    for i, (user, hours) in enumerate([("Alice", 6.0), ("Alice", 2.0), ("Bob", 4.0)]):
        rows.append(
            AggregatedIssueRecord(
                issue_id=str(i),
                issue_key=f"P-{i}" if i else None,
                issue_type="Story",
                summary=f"Issue {i}",
                user_name=user,
                status="Done",
                oldest_worklog_date=date(2024, 3, 1),
                latest_worklog_date=date(2024, 3, 2),
                time_spent_hours=hours,
                story_points=None,
                days=round(hours / 8, 2),
                velocity=None,
                business_value=None,
                components=(),
                parent_issue_key=None,
                parent_issue_type=None,
                parent_summary=None,
                all_users="U1",
            )
        )
    return records_to_dataframe(rows)


def test_issue_link_injection():
    linked, cfg = add_issue_link(_df(), "https://example.atlassian.net/")
    assert linked.loc[1, "Ticket"] == "https://example.atlassian.net/browse/P-1"
    # Missing keys render as the placeholder and get no link
    assert linked.loc[0, "Ticket"] == ""
    assert "Ticket" in cfg


def test_prepare_report_table_orders_columns():
    table, cols, _ = prepare_report_table(_df(), "https://example.atlassian.net")
    assert cols[0] == "Ticket"
    assert "issue_key" not in cols
    assert "time_spent_hours" in cols
    assert set(cols) <= set(table.columns)


def test_summarize_by_user():
    summary = summarize_by_user(_df())
    assert list(summary["user_name"]) == ["Alice", "Bob"]
    assert summary.loc[0, "time_spent_hours"] == 8.0
    assert summary.loc[0, "issues"] == 2
