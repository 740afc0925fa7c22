"""Matcher — resolve a request descriptor to exactly one route.

Routes are tried in the collection's match order (descending priority,
then registration order). The first route whose host, path, method,
scheme and condition all accept the request wins.

A route whose path matched but whose method or scheme did not is a
near-miss: it is remembered and the scan continues, so a later route with
the right method can still win. Only when nothing matches do near-misses
turn into a 405 instead of a 404.
"""

import logging
from typing import Any
from urllib.parse import unquote

from signpost.errors import MatchError, MethodNotAllowed, NotFound
from signpost.routing.collection import RouteCollection
from signpost.routing.route import (
    CompiledRoute,
    CompiledTemplate,
    MatchResult,
    RequestDescriptor,
    RouteDefinition,
)

logger = logging.getLogger("signpost.routing")


def _method_allowed(method: str, allowed: frozenset[str]) -> bool:
    if not allowed or method in allowed:
        return True
    # HEAD is served by GET routes.
    return method == "HEAD" and "GET" in allowed


def _match_path(
    compiled: CompiledRoute, path: str
) -> tuple[CompiledTemplate, dict[str, str | None]] | None:
    for variant in compiled.variants:
        if not path.startswith(variant.static_prefix):
            continue
        found = variant.regex.fullmatch(path)
        if found is not None:
            return variant, found.groupdict()
    return None


def _merge(
    definition: RouteDefinition,
    captures: dict[str, str | None],
) -> dict[str, Any]:
    """Decoded captures over defaults; unmatched optional groups keep the default."""
    params: dict[str, Any] = dict(definition.defaults)
    for name, value in captures.items():
        if value is not None:
            params[name] = unquote(value)
        else:
            params.setdefault(name, None)
    return params


class Matcher:
    """Matches request descriptors against a frozen RouteCollection.

    Usage::

        matcher = Matcher(routes)
        result = matcher.match(RequestDescriptor("/blog/my-post"))
        result.route_name, result.parameters
    """

    __slots__ = ("_collection",)

    def __init__(self, collection: RouteCollection) -> None:
        collection.freeze()
        self._collection = collection

    @property
    def collection(self) -> RouteCollection:
        return self._collection

    def match(self, request: RequestDescriptor) -> MatchResult:
        """Match *request* against the collection.

        Returns a ``MatchResult`` on success.
        Raises ``NotFound`` if no route matches the request.
        Raises ``MethodNotAllowed`` if routes matched the path but none
        accepted the method or scheme.
        """
        path = request.path
        host = request.hostname
        allowed_methods: set[str] = set()
        allowed_schemes: set[str] = set()
        near_miss = False

        for definition, compiled in self._collection.all():
            host_captures: dict[str, str | None] = {}
            if compiled.host is not None:
                host_match = compiled.host.regex.fullmatch(host)
                if host_match is None:
                    continue
                host_captures = host_match.groupdict()

            path_match = _match_path(compiled, path)
            if path_match is None:
                continue
            variant, captures = path_match

            if not _method_allowed(request.method, definition.methods):
                near_miss = True
                allowed_methods |= definition.methods
                continue

            if definition.schemes and request.scheme not in definition.schemes:
                near_miss = True
                allowed_schemes |= definition.schemes
                allowed_methods |= definition.methods
                continue

            params = _merge(definition, {**captures, **host_captures})
            params["_route"] = definition.name
            if variant.locale is not None:
                params["_locale"] = variant.locale

            if compiled.condition is not None and not compiled.condition(request, params):
                continue

            logger.debug("%s %s matched route %r", request.method, path, definition.name)
            return MatchResult(
                route_name=definition.name,
                parameters=params,
                methods=definition.methods,
                format=params.get("_format"),
                locale=variant.locale or params.get("_locale"),
            )

        if near_miss:
            logger.debug("%s %s: method or scheme not allowed", request.method, path)
            raise MethodNotAllowed(allowed_methods, allowed_schemes)

        msg = f"No route found for {request.method} {path!r}"
        raise NotFound(msg)

    def has_match(self, request: RequestDescriptor) -> bool:
        """True if *request* resolves to a route (404 and 405 are False)."""
        try:
            self.match(request)
        except MatchError:
            return False
        return True

    def match_route_name(self, request: RequestDescriptor) -> str:
        """Match and return only the route name."""
        return self.match(request).route_name
