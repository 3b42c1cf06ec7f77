from fakes import DummyJira, issue_raw

from worklog_app.core.cache import CacheStore
from worklog_app.core.config import CACHE_CHILDREN, CACHE_ISSUE_DETAIL, FieldMapping
from worklog_app.core.resolvers import ChildIssueResolver, IssueDetailResolver


def _resolvers(api):
    cache = CacheStore()
    details = IssueDetailResolver(api, cache, FieldMapping())
    children = ChildIssueResolver(api, cache, details, FieldMapping())
    return cache, details, children


def test_detail_resolved_once_then_cached():
    api = DummyJira(issues=[issue_raw("1", "P-1", "Story")])
    cache, details, _ = _resolvers(api)
    first = details.resolve("1")
    assert cache.hits(CACHE_ISSUE_DETAIL) == 0
    second = details.resolve("1")
    assert cache.hits(CACHE_ISSUE_DETAIL) == 1
    details.resolve("1")
    assert cache.hits(CACHE_ISSUE_DETAIL) == 2
    assert first is second
    assert api.fetch_calls["1"] == 1
    assert details.remote_calls == 1


def test_detail_failure_cached_as_unknown_and_not_retried():
    api = DummyJira(failing=["9"])
    _, details, _ = _resolvers(api)
    detail = details.resolve("9")
    assert detail.unknown
    assert detail.issue_type == "Unknown"
    assert detail.parent_id is None
    assert detail.story_points is None
    assert details.resolve("9") is detail
    assert api.fetch_calls["9"] == 1


def test_children_unions_both_parent_relationships():
    api = DummyJira(
        issues=[issue_raw("1", "P-1", "Epic"), issue_raw("2", "P-2", "Story"), issue_raw("3", "P-3", "Sub-task")],
        children={"1": ["2", "3", "2"]},
    )
    _, _, children = _resolvers(api)
    assert children.children("1") == ["2", "3"]
    assert api.jql == ['parent = 1 OR "Parent Link" = 1']


def test_children_parent_link_field_is_configurable():
    api = DummyJira()
    cache = CacheStore()
    fields = FieldMapping(parent_link_field="Epic Link")
    details = IssueDetailResolver(api, cache, fields)
    resolver = ChildIssueResolver(api, cache, details, fields)
    assert resolver.child_jql("5") == 'parent = 5 OR "Epic Link" = 5'


def test_children_cached_and_warm_detail_cache():
    api = DummyJira(
        issues=[issue_raw("1", "P-1", "Story"), issue_raw("2", "P-2", "Task", parent="1")],
        children={"1": ["2"]},
    )
    cache, details, children = _resolvers(api)
    assert children.children("1") == ["2"]
    assert children.children("1") == ["2"]
    assert api.search_calls["1"] == 1
    assert cache.hits(CACHE_CHILDREN) == 1
    # Detail for the child came from the search payload
    assert details.resolve("2").issue_type == "Task"
    assert api.fetch_calls["2"] == 0


def test_warming_does_not_overwrite_existing_detail():
    api = DummyJira(issues=[issue_raw("1", "P-1", "Story"), issue_raw("2", "P-2", "Task")], children={"1": ["2"]})
    cache, details, children = _resolvers(api)
    original = details.resolve("2")
    children.children("1")
    assert details.resolve("2") is original


def test_children_failure_cached_as_empty():
    api = DummyJira(failing_searches=["1"])
    cache, _, children = _resolvers(api)
    assert children.children("1") == []
    assert children.children("1") == []
    assert api.search_calls["1"] == 1
    assert cache.contains(CACHE_CHILDREN, "1")


def test_children_exclude_parent_itself():
    api = DummyJira(issues=[issue_raw("1", "P-1", "Story"), issue_raw("2", "P-2", "Task")], children={"1": ["1", "2"]})
    _, _, children = _resolvers(api)
    assert children.children("1") == ["2"]


def test_descendants_depth_and_cycle_safety():
    api = DummyJira(
        issues=[issue_raw(i, f"P-{i}", "Task") for i in ("1", "2", "3", "4")],
        children={"1": ["2"], "2": ["3", "1"], "3": ["4", "2"]},
    )
    _, _, children = _resolvers(api)
    assert children.descendants("1", 1) == ["2"]
    assert children.descendants("1", 0) == []
    assert children.descendants("1", 10) == ["2", "3", "4"]
    # Each node queried once despite the cycle
    assert api.search_calls["1"] == 1
    assert api.search_calls["2"] == 1


def test_detail_with_malformed_parent_resolves_without_raising():
    raw = issue_raw("4", "P-4", "Story")
    raw["fields"]["parent"] = "P-1"
    api = DummyJira(issues=[raw])
    _, details, _ = _resolvers(api)
    detail = details.resolve("4")
    assert detail.issue_key == "P-4"
    assert detail.parent_id is None
    assert not detail.unknown
