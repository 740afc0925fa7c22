"""Tests for signpost.routing.route — definitions and request descriptors."""

import dataclasses
from collections.abc import Iterator

import pytest

from signpost.http.headers import Headers
from signpost.http.query import QueryParams
from signpost.routing.condition import compile_condition
from signpost.routing.route import MatchResult, RequestDescriptor, RouteDefinition


class _ServerHeaders:
    """Header object owned by an HTTP layer, not a signpost Headers."""

    def __init__(self, values: dict[str, list[str]]) -> None:
        self._values = values

    def __getitem__(self, key: str) -> str:
        return self._values[key.lower()][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self[key] if key in self else default

    def get_list(self, key: str) -> list[str]:
        return list(self._values.get(key.lower(), []))


class TestRouteDefinition:
    def test_defaults(self) -> None:
        route = RouteDefinition("home", "/")
        assert route.host is None
        assert route.methods == frozenset()
        assert route.schemes == frozenset()
        assert route.requirements == {}
        assert route.defaults == {}
        assert route.condition is None
        assert route.priority == 0

    def test_frozen(self) -> None:
        route = RouteDefinition("home", "/")
        with pytest.raises(dataclasses.FrozenInstanceError):
            route.priority = 5  # type: ignore[misc]

    def test_leading_slash_added(self) -> None:
        assert RouteDefinition("blog", "blog/{slug}").path == "/blog/{slug}"

    def test_methods_normalized(self) -> None:
        route = RouteDefinition("blog", "/blog", methods=["get", "post"])
        assert route.methods == frozenset({"GET", "POST"})

    def test_single_method_string(self) -> None:
        route = RouteDefinition("blog", "/blog", methods="get")
        assert route.methods == frozenset({"GET"})

    def test_schemes_lowercased(self) -> None:
        route = RouteDefinition("secure", "/secure", schemes=["HTTPS"])
        assert route.schemes == frozenset({"https"})

    def test_requirement_anchors_stripped(self) -> None:
        route = RouteDefinition("article", "/article/{id}", requirements={"id": r"^\d+$"})
        assert route.requirements == {"id": r"\d+"}

    def test_escaped_dollar_kept(self) -> None:
        route = RouteDefinition("price", "/price/{p}", requirements={"p": r"\d+\$"})
        assert route.requirements == {"p": r"\d+\$"}

    def test_host_lowercased(self) -> None:
        assert RouteDefinition("admin", "/", host="Admin.Example.com").host == "admin.example.com"

    def test_localized_paths(self) -> None:
        route = RouteDefinition("about", {"en": "about-us", "nl": "/over-ons"})
        assert route.is_localized
        assert route.paths == {"en": "/about-us", "nl": "/over-ons"}

    def test_unlocalized_paths(self) -> None:
        route = RouteDefinition("home", "/")
        assert not route.is_localized
        assert route.paths == {None: "/"}

    def test_replace_returns_copy(self) -> None:
        route = RouteDefinition("home", "/")
        moved = route.replace(path="/index")
        assert moved.path == "/index"
        assert route.path == "/"

    def test_describe(self) -> None:
        route = RouteDefinition("admin", "/dashboard", host="admin.example.com", methods=["GET"])
        assert route.describe() == "admin: GET /dashboard host=admin.example.com"

    def test_describe_any_method(self) -> None:
        assert RouteDefinition("home", "/").describe() == "home: ANY /"


class TestDeclarativeTables:
    def test_from_mapping(self) -> None:
        route = RouteDefinition.from_mapping(
            "article_show",
            {"path": "/article/{id}", "methods": ["GET"], "requirements": {"id": r"\d+"}},
        )
        assert route.name == "article_show"
        assert route.methods == frozenset({"GET"})

    def test_from_mapping_missing_path(self) -> None:
        with pytest.raises(KeyError):
            RouteDefinition.from_mapping("broken", {"methods": ["GET"]})

    def test_from_mapping_unknown_key(self) -> None:
        with pytest.raises(ValueError, match="unknown keys handler"):
            RouteDefinition.from_mapping("broken", {"path": "/", "handler": "x"})

    def test_to_dict_omits_empty_fields(self) -> None:
        assert RouteDefinition("home", "/").to_dict() == {"path": "/"}

    def test_to_dict_round_trip(self) -> None:
        route = RouteDefinition(
            "blog_show",
            "/blog/{slug}",
            host="example.com",
            methods=["GET", "HEAD"],
            schemes=["https"],
            requirements={"slug": "[a-z0-9-]+"},
            defaults={"_controller": "blog:show"},
            condition="request.method == 'GET'",
            priority=3,
        )
        assert RouteDefinition.from_mapping("blog_show", route.to_dict()) == route


class TestRequestDescriptor:
    def test_defaults(self) -> None:
        request = RequestDescriptor("/blog")
        assert request.method == "GET"
        assert request.scheme == "http"
        assert request.host == ""
        assert isinstance(request.headers, Headers)
        assert isinstance(request.query, QueryParams)
        assert request.client_ip is None
        assert request.environment == {}

    def test_normalizes(self) -> None:
        request = RequestDescriptor("", method="post", host="Example.COM", scheme="HTTPS")
        assert request.path == "/"
        assert request.method == "POST"
        assert request.host == "example.com"
        assert request.scheme == "https"

    def test_wraps_plain_headers_and_query(self) -> None:
        request = RequestDescriptor("/", headers={"User-Agent": "curl"}, query="page=2")
        assert request.headers["user-agent"] == "curl"
        assert request.query["page"] == "2"

    def test_multi_value_mappings_passed_through(self) -> None:
        headers = _ServerHeaders({"accept": ["text/html", "application/json"]})
        query = QueryParams("page=2")
        request = RequestDescriptor("/", headers=headers, query=query)
        assert request.headers is headers
        assert request.query is query

    def test_condition_reads_passed_through_headers(self) -> None:
        headers = _ServerHeaders({"accept": ["text/html", "application/json"]})
        request = RequestDescriptor("/", headers=headers)
        source = "'application/json' in request.headers.get_list('accept')"
        condition = compile_condition(source, "api")
        assert condition(request, {}) is True

    def test_hostname_strips_port(self) -> None:
        assert RequestDescriptor("/", host="example.com:8080").hostname == "example.com"

    def test_from_url(self) -> None:
        request = RequestDescriptor.from_url(
            "https://admin.example.com/dashboard?tab=2", method="POST"
        )
        assert request.path == "/dashboard"
        assert request.host == "admin.example.com"
        assert request.scheme == "https"
        assert request.method == "POST"
        assert request.query["tab"] == "2"

    def test_from_url_path_only(self) -> None:
        request = RequestDescriptor.from_url("/blog/my-post")
        assert request.path == "/blog/my-post"
        assert request.host == ""
        assert request.scheme == "http"


class TestMatchResult:
    def test_fields(self) -> None:
        result = MatchResult("home", {"_route": "home"})
        assert result.route_name == "home"
        assert result.methods == frozenset()
        assert result.format is None
        assert result.locale is None
