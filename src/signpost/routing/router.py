"""Router — one object for registration, matching and generation.

Routes are registered during setup. The first match or generate call
freezes the collection and builds the matcher/generator pair; from then
on the router is read-only and safe to share between threads.

Reloading never mutates the live table: ``reload()`` builds a new frozen
state and swaps a single reference, so in-flight matches finish against
the table they started with.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from signpost.config import RequestContext, RouterConfig
from signpost.routing.collection import RouteCollection
from signpost.routing.generator import Generator, ReferenceType
from signpost.routing.matcher import Matcher
from signpost.routing.route import MatchResult, RequestDescriptor, RouteDefinition

logger = logging.getLogger("signpost.routing")


@dataclass(frozen=True, slots=True)
class _RouterState:
    """Everything a request needs, swapped as one unit."""

    collection: RouteCollection
    matcher: Matcher
    generator: Generator


class Router:
    """Compiled router with priority-ordered regex matching.

    Usage::

        router = Router()
        router.add_route("blog_show", "/blog/{slug}", requirements={"slug": "[a-z0-9-]+"})
        router.freeze()
        match = router.match_path("/blog/my-post")
        router.generate("blog_show", {"slug": "my-post", "page": 2})
    """

    __slots__ = ("_collection", "_config", "_state")

    def __init__(
        self,
        collection: RouteCollection | None = None,
        config: RouterConfig | None = None,
    ) -> None:
        self._collection = collection if collection is not None else RouteCollection()
        self._config = config or RouterConfig()
        self._state: _RouterState | None = None
        if self._config.log_level:
            logging.getLogger("signpost").setLevel(self._config.log_level.upper())

    # -- Setup --

    def add(self, definition: RouteDefinition) -> RouteDefinition:
        """Register a route. Must be called before the router freezes."""
        return self._collection.register(definition)

    def add_route(self, name: str, path: str | Mapping[str, str], **options: Any) -> RouteDefinition:
        """Build a RouteDefinition from keyword options and register it."""
        return self.add(RouteDefinition(name=name, path=path, **options))

    def freeze(self) -> None:
        """Freeze the route table. No more routes can be added."""
        self._ensure_frozen()

    def _ensure_frozen(self) -> _RouterState:
        state = self._state
        if state is None:
            state = self._build_state(self._collection)
            self._state = state
        return state

    def _build_state(self, collection: RouteCollection) -> _RouterState:
        collection.freeze()
        return _RouterState(
            collection=collection,
            matcher=Matcher(collection),
            generator=Generator(collection, self._config),
        )

    def reload(self, collection: RouteCollection) -> None:
        """Swap in a new route table (copy-on-write).

        The new collection is frozen and compiled before the swap; readers
        holding the old state are unaffected.
        """
        state = self._build_state(collection)
        self._collection = collection
        self._state = state
        logger.info("router reloaded with %d route(s)", len(collection))

    @property
    def config(self) -> RouterConfig:
        return self._config

    @property
    def collection(self) -> RouteCollection:
        if self._state is not None:
            return self._state.collection
        return self._collection

    @property
    def routes(self) -> tuple[RouteDefinition, ...]:
        """All route definitions in match order."""
        return tuple(self.collection)

    # -- Matching --

    def match(self, request: RequestDescriptor) -> MatchResult:
        """Match a request descriptor. See ``Matcher.match``."""
        return self._ensure_frozen().matcher.match(request)

    def match_path(
        self,
        path: str,
        method: str = "GET",
        *,
        host: str = "",
        scheme: str = "http",
    ) -> MatchResult:
        """Match a bare path; shorthand for building a RequestDescriptor."""
        request = RequestDescriptor(path=path, method=method, host=host, scheme=scheme)
        return self.match(request)

    def has_match(self, request: RequestDescriptor) -> bool:
        return self._ensure_frozen().matcher.has_match(request)

    def match_route_name(self, request: RequestDescriptor) -> str:
        return self._ensure_frozen().matcher.match_route_name(request)

    # -- Generation --

    def generate(
        self,
        name: str,
        parameters: Mapping[str, Any] | None = None,
        reference_type: ReferenceType = ReferenceType.RELATIVE_PATH,
        *,
        context: RequestContext | None = None,
    ) -> str:
        """Generate a URL. See ``Generator.generate``."""
        generator = self._ensure_frozen().generator
        return generator.generate(name, parameters, reference_type, context=context)

    def generate_multiple(
        self,
        routes: Mapping[str, Mapping[str, Any] | None],
        reference_type: ReferenceType = ReferenceType.RELATIVE_PATH,
    ) -> dict[str, str]:
        return self._ensure_frozen().generator.generate_multiple(routes, reference_type)

    def has_route(self, name: str) -> bool:
        return name in self.collection

    # -- Construction helpers --

    @classmethod
    def from_dict(
        cls,
        config: Mapping[str, Mapping[str, Any]],
        router_config: RouterConfig | None = None,
    ) -> Router:
        """Create a router from ``{name: {"path": ..., ...}}`` tables."""
        return cls(RouteCollection.from_dict(config), router_config)

    @classmethod
    def from_file(cls, path: str | Path, router_config: RouterConfig | None = None) -> Router:
        """Create a router from a ``.toml`` or ``.json`` route file."""
        from signpost.routing.loader import load_routes

        return cls(load_routes(path), router_config)
