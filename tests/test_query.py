"""Tests for signpost.http.query — immutable QueryParams."""

from signpost._internal.multimap import MultiValueMapping
from signpost.http.query import QueryParams


class TestQueryParams:
    def test_parse(self) -> None:
        q = QueryParams("page=2&sort=name")
        assert q["page"] == "2"
        assert q["sort"] == "name"

    def test_leading_question_mark(self) -> None:
        q = QueryParams("?page=2")
        assert q["page"] == "2"
        assert q.raw == "page=2"

    def test_bytes(self) -> None:
        q = QueryParams(b"tab=settings")
        assert q.get("tab") == "settings"

    def test_multi_values(self) -> None:
        q = QueryParams("tag=a&tag=b")
        assert q["tag"] == "a"
        assert q.get_list("tag") == ["a", "b"]
        assert q.get_list("missing") == []

    def test_blank_values_kept(self) -> None:
        q = QueryParams("debug=")
        assert "debug" in q
        assert q["debug"] == ""

    def test_get_int(self) -> None:
        q = QueryParams("page=3&name=x")
        assert q.get_int("page") == 3
        assert q.get_int("name", 1) == 1
        assert q.get_int("missing") is None

    def test_from_mapping(self) -> None:
        q = QueryParams({"page": "1"})
        assert q["page"] == "1"
        assert len(q) == 1

    def test_empty(self) -> None:
        q = QueryParams()
        assert len(q) == 0
        assert q.get("page") is None

    def test_satisfies_protocol(self) -> None:
        assert isinstance(QueryParams(), MultiValueMapping)
