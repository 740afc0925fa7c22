"""Tests for signpost.routing.matcher — request descriptors to routes."""

import pytest

from signpost.errors import MethodNotAllowed, NotFound
from signpost.routing.collection import RouteCollection
from signpost.routing.matcher import Matcher
from signpost.routing.route import RequestDescriptor, RouteDefinition


def _matcher(*definitions: RouteDefinition) -> Matcher:
    return Matcher(RouteCollection(definitions))


def _get(path: str, **kwargs: object) -> RequestDescriptor:
    return RequestDescriptor(path, **kwargs)  # type: ignore[arg-type]


class TestBasicMatching:
    def test_static(self) -> None:
        result = _matcher(RouteDefinition("home", "/")).match(_get("/"))
        assert result.route_name == "home"
        assert result.parameters == {"_route": "home"}

    def test_placeholder(self) -> None:
        matcher = _matcher(RouteDefinition("blog_show", "/blog/{slug}"))
        result = matcher.match(_get("/blog/my-post"))
        assert result.parameters["slug"] == "my-post"
        assert result.parameters["_route"] == "blog_show"

    def test_captures_are_decoded(self) -> None:
        matcher = _matcher(RouteDefinition("search", "/search/{term}"))
        assert matcher.match(_get("/search/caf%C3%A9")).parameters["term"] == "café"

    def test_defaults_merged(self) -> None:
        matcher = _matcher(
            RouteDefinition("list", "/list/{page}", defaults={"page": "1", "_controller": "x"})
        )
        result = matcher.match(_get("/list/3"))
        assert result.parameters["page"] == "3"
        assert result.parameters["_controller"] == "x"

    def test_format_reported(self) -> None:
        matcher = _matcher(RouteDefinition("export", "/export.{_format}"))
        assert matcher.match(_get("/export.csv")).format == "csv"

    def test_trailing_slash_is_strict(self) -> None:
        matcher = _matcher(RouteDefinition("about", "/about"))
        with pytest.raises(NotFound):
            matcher.match(_get("/about/"))

    def test_empty_path_is_root(self) -> None:
        assert _matcher(RouteDefinition("home", "/")).match(_get("")).route_name == "home"

    def test_not_found(self) -> None:
        matcher = _matcher(RouteDefinition("home", "/"))
        with pytest.raises(NotFound) as exc_info:
            matcher.match(_get("/missing"))
        assert exc_info.value.status == 404
        assert "/missing" in exc_info.value.detail


class TestOptionalParameters:
    def test_archive_boundary(self) -> None:
        matcher = _matcher(
            RouteDefinition("archive", "/archive/{year}/{month}", defaults={"month": "1"})
        )
        assert matcher.match(_get("/archive/2024")).parameters["month"] == "1"
        assert matcher.match(_get("/archive/2024/5")).parameters["month"] == "5"
        with pytest.raises(NotFound):
            matcher.match(_get("/archive"))

    def test_root_with_optional_page(self) -> None:
        matcher = _matcher(RouteDefinition("index", "/{page}", defaults={"page": "1"}))
        assert matcher.match(_get("/")).parameters["page"] == "1"
        assert matcher.match(_get("/4")).parameters["page"] == "4"


class TestRequirements:
    def test_requirement_enforced(self) -> None:
        matcher = _matcher(
            RouteDefinition("article", "/article/{id}", requirements={"id": r"\d+"})
        )
        assert matcher.match(_get("/article/42")).parameters["id"] == "42"
        with pytest.raises(NotFound):
            matcher.match(_get("/article/abc"))

    def test_falls_through_to_next_route(self) -> None:
        matcher = _matcher(
            RouteDefinition("by_id", "/user/{id}", requirements={"id": r"\d+"}),
            RouteDefinition("by_name", "/user/{name}"),
        )
        assert matcher.match(_get("/user/7")).route_name == "by_id"
        assert matcher.match(_get("/user/ann")).route_name == "by_name"


class TestPriority:
    def test_higher_priority_wins(self) -> None:
        matcher = _matcher(
            RouteDefinition("generic", "/page/{slug}"),
            RouteDefinition("special", "/page/about", priority=10),
        )
        assert matcher.match(_get("/page/about")).route_name == "special"

    def test_registration_order_breaks_ties(self) -> None:
        matcher = _matcher(
            RouteDefinition("first", "/page/{slug}"),
            RouteDefinition("second", "/page/{name}"),
        )
        assert matcher.match(_get("/page/x")).route_name == "first"


class TestMethodsAndSchemes:
    def test_method_near_miss_is_405(self) -> None:
        matcher = _matcher(RouteDefinition("items", "/items", methods=["GET"]))
        with pytest.raises(MethodNotAllowed) as exc_info:
            matcher.match(_get("/items", method="POST"))
        err = exc_info.value
        assert err.status == 405
        assert err.allowed_methods == frozenset({"GET"})
        assert ("Allow", "GET") in err.headers

    def test_near_miss_then_later_route_wins(self) -> None:
        matcher = _matcher(
            RouteDefinition("items_list", "/items", methods=["GET"]),
            RouteDefinition("items_create", "/items", methods=["POST"]),
        )
        assert matcher.match(_get("/items", method="POST")).route_name == "items_create"

    def test_allowed_methods_unioned(self) -> None:
        matcher = _matcher(
            RouteDefinition("a", "/items", methods=["GET"]),
            RouteDefinition("b", "/items", methods=["PUT"]),
        )
        with pytest.raises(MethodNotAllowed) as exc_info:
            matcher.match(_get("/items", method="DELETE"))
        assert exc_info.value.allowed_methods == frozenset({"GET", "PUT"})

    def test_head_served_by_get(self) -> None:
        matcher = _matcher(RouteDefinition("items", "/items", methods=["GET"]))
        assert matcher.match(_get("/items", method="HEAD")).route_name == "items"

    def test_any_method_when_unrestricted(self) -> None:
        matcher = _matcher(RouteDefinition("items", "/items"))
        assert matcher.match(_get("/items", method="PATCH")).route_name == "items"

    def test_scheme_near_miss(self) -> None:
        matcher = _matcher(RouteDefinition("secure", "/secure", schemes=["https"]))
        with pytest.raises(MethodNotAllowed) as exc_info:
            matcher.match(_get("/secure"))
        assert exc_info.value.allowed_schemes == frozenset({"https"})
        assert matcher.match(_get("/secure", scheme="https")).route_name == "secure"

    def test_methods_reported(self) -> None:
        matcher = _matcher(RouteDefinition("items", "/items", methods=["GET", "HEAD"]))
        assert matcher.match(_get("/items")).methods == frozenset({"GET", "HEAD"})


class TestHosts:
    def test_static_host(self) -> None:
        matcher = _matcher(
            RouteDefinition("admin_dashboard", "/dashboard", host="admin.example.com"),
            RouteDefinition("dashboard", "/dashboard"),
        )
        admin = _get("/dashboard", host="admin.example.com")
        assert matcher.match(admin).route_name == "admin_dashboard"
        assert matcher.match(_get("/dashboard", host="example.com")).route_name == "dashboard"

    def test_host_port_ignored(self) -> None:
        matcher = _matcher(RouteDefinition("admin", "/", host="admin.example.com"))
        assert matcher.match(_get("/", host="admin.example.com:8080")).route_name == "admin"

    def test_host_placeholder(self) -> None:
        matcher = _matcher(RouteDefinition("account", "/users/{id}", host="{account}.example.com"))
        result = matcher.match(_get("/users/3", host="acme.example.com"))
        assert result.parameters["account"] == "acme"
        assert result.parameters["id"] == "3"

    def test_host_mismatch_is_404(self) -> None:
        matcher = _matcher(RouteDefinition("admin", "/", host="admin.example.com"))
        with pytest.raises(NotFound):
            matcher.match(_get("/", host="www.example.com"))


class TestConditions:
    def test_condition_filters(self) -> None:
        matcher = _matcher(
            RouteDefinition(
                "firefox",
                "/",
                condition="'firefox' in request.headers.get('user-agent', '').lower()",
            ),
            RouteDefinition("home", "/"),
        )
        ff = _get("/", headers={"User-Agent": "Mozilla Firefox"})
        assert matcher.match(ff).route_name == "firefox"
        assert matcher.match(_get("/")).route_name == "home"

    def test_condition_sees_params(self) -> None:
        matcher = _matcher(
            RouteDefinition("post", "/post/{id}", condition="params['id'] != '0'")
        )
        assert matcher.match(_get("/post/1")).route_name == "post"
        with pytest.raises(NotFound):
            matcher.match(_get("/post/0"))


class TestLocalized:
    def test_variant_sets_locale(self) -> None:
        matcher = _matcher(RouteDefinition("about", {"en": "/about-us", "nl": "/over-ons"}))
        result = matcher.match(_get("/over-ons"))
        assert result.route_name == "about"
        assert result.locale == "nl"
        assert result.parameters["_locale"] == "nl"


class TestHelpers:
    def test_has_match(self) -> None:
        matcher = _matcher(RouteDefinition("items", "/items", methods=["GET"]))
        assert matcher.has_match(_get("/items"))
        assert not matcher.has_match(_get("/items", method="POST"))
        assert not matcher.has_match(_get("/missing"))

    def test_match_route_name(self) -> None:
        matcher = _matcher(RouteDefinition("items", "/items"))
        assert matcher.match_route_name(_get("/items")) == "items"

    def test_freezes_collection(self) -> None:
        routes = RouteCollection([RouteDefinition("home", "/")])
        Matcher(routes)
        assert routes.frozen
