"""Filter query composition and its behaviour against a real table."""

from __future__ import annotations

from meresahar.services.filters import SUMMARY_PROJECTION, build_filter_query
from meresahar.services.listing import list_issues
from tests.conftest import make_issue


class TestBuildFilterQuery:
    def test_no_filters_selects_everything_newest_first(self) -> None:
        q = build_filter_query({})
        assert q.sql == f"SELECT {SUMMARY_PROJECTION} FROM issues ORDER BY id DESC"
        assert q.params == {}

    def test_none_mapping_is_same_as_empty(self) -> None:
        assert build_filter_query(None) == build_filter_query({})

    def test_single_filter(self) -> None:
        q = build_filter_query({"status": "Pending"})
        assert "WHERE status = :p1 ORDER BY id DESC" in q.sql
        assert q.params == {"p1": "Pending"}

    def test_placeholders_follow_predicate_order(self) -> None:
        q = build_filter_query({"urgency": "High", "category": "Garbage"})
        assert "WHERE category = :p1 AND urgency = :p2" in q.sql
        assert q.bind_values == ["Garbage", "High"]

    def test_all_three_filters(self) -> None:
        q = build_filter_query({"category": "Pothole", "status": "Ongoing", "urgency": "Low"})
        assert "category = :p1 AND status = :p2 AND urgency = :p3" in q.sql
        assert q.bind_values == ["Pothole", "Ongoing", "Low"]

    def test_absent_and_empty_values_add_nothing(self) -> None:
        q = build_filter_query({"category": None, "status": "", "urgency": "Medium"})
        assert "WHERE urgency = :p1" in q.sql
        assert q.params == {"p1": "Medium"}

    def test_unknown_keys_are_ignored(self) -> None:
        q = build_filter_query({"id": "1; DROP TABLE issues", "bogus": "x"})
        assert "WHERE" not in q.sql
        assert q.params == {}

    def test_values_never_reach_the_sql_text(self) -> None:
        hostile = "x' OR '1'='1"
        q = build_filter_query({"category": hostile})
        assert hostile not in q.sql
        assert q.params["p1"] == hostile


class TestFilteredListing:
    def test_each_combination_matches_by_strict_equality(self, store) -> None:
        a = make_issue(store, category="Pothole")
        b = make_issue(store, category="Garbage")
        c = make_issue(store, category="Pothole")
        store.update_issue(c, {"status": "Completed", "urgency": "High"})
        store.update_issue(b, {"urgency": "High"})

        assert [i.id for i in list_issues(store, {})] == [c, b, a]
        assert [i.id for i in list_issues(store, {"category": "Pothole"})] == [c, a]
        assert [i.id for i in list_issues(store, {"urgency": "High"})] == [c, b]
        assert [i.id for i in list_issues(store, {"category": "Pothole", "urgency": "High"})] == [c]
        assert [i.id for i in list_issues(store, {"status": "Completed", "category": "Garbage"})] == []

    def test_matching_is_case_sensitive(self, store) -> None:
        make_issue(store, category="Pothole")
        assert list_issues(store, {"category": "pothole"}) == []

    def test_injection_attempt_matches_nothing(self, store) -> None:
        make_issue(store)
        assert list_issues(store, {"category": "x' OR '1'='1"}) == []
        assert len(list_issues(store)) == 1
