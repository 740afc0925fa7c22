"""Route collection — the registry the matcher and generator read from.

Routes are registered during setup and compiled as they arrive. ``freeze()``
sorts them once (descending priority, ties by registration order) and
closes the collection; after that it is shared read-only.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from signpost.errors import (
    ConfigurationError,
    DefinitionError,
    DuplicateName,
    FrozenCollectionError,
    InvalidDefinition,
)
from signpost.routing.compiler import compile_route
from signpost.routing.route import RouteDefinition, RouteEntry

logger = logging.getLogger("signpost.routing")


def _compile(definition: RouteDefinition) -> RouteEntry:
    try:
        compiled = compile_route(definition)
    except DefinitionError as exc:
        raise InvalidDefinition(exc) from exc
    return RouteEntry(definition, compiled)


class RouteCollection:
    """Ordered container of compiled routes, unique by name.

    Usage::

        routes = RouteCollection()
        routes.register(RouteDefinition("home", "/"))
        routes.register(RouteDefinition("blog_show", "/blog/{slug}"))
        routes.freeze()
        for entry in routes.all():
            ...
    """

    __slots__ = ("_entries", "_frozen", "_sorted")

    def __init__(self, definitions: Iterable[RouteDefinition] = ()) -> None:
        # Insertion order is the tie-breaker for equal priorities.
        self._entries: dict[str, RouteEntry] = {}
        self._frozen = False
        self._sorted: tuple[RouteEntry, ...] | None = None
        for definition in definitions:
            self.register(definition)

    # -- Registration --

    def register(self, definition: RouteDefinition) -> RouteDefinition:
        """Validate, compile and add a route. Returns the definition.

        Raises ``DuplicateName`` if the name is taken and
        ``InvalidDefinition`` if the definition does not compile.
        """
        self._ensure_mutable()
        if definition.name in self._entries:
            raise DuplicateName(definition.name)
        self._entries[definition.name] = _compile(definition)
        self._sorted = None
        logger.debug("registered route %s", definition.describe())
        return definition

    def freeze(self) -> None:
        """Sort once and forbid further mutation. Idempotent."""
        if self._frozen:
            return
        self._sorted = self._sort()
        self._frozen = True
        logger.debug("route collection frozen with %d route(s)", len(self._entries))

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _ensure_mutable(self) -> None:
        if self._frozen:
            msg = "Cannot modify a route collection after freeze(); build a new one and reload."
            raise FrozenCollectionError(msg)

    def _sort(self) -> tuple[RouteEntry, ...]:
        # sorted() is stable, so equal priorities keep registration order.
        return tuple(sorted(self._entries.values(), key=lambda e: -e.definition.priority))

    # -- Lookup --

    def all(self) -> tuple[RouteEntry, ...]:
        """All entries in match order."""
        if self._sorted is None:
            self._sorted = self._sort()
        return self._sorted

    def by_name(self, name: str) -> RouteEntry | None:
        return self._entries.get(name)

    def get(self, name: str) -> RouteDefinition:
        """Return the definition registered under *name*.

        Raises ``KeyError`` if there is none.
        """
        try:
            return self._entries[name].definition
        except KeyError:
            msg = f"Route {name!r} does not exist in the collection."
            raise KeyError(msg) from None

    def names(self) -> list[str]:
        """Route names in registration order."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RouteDefinition]:
        return (entry.definition for entry in self.all())

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"<RouteCollection {len(self)} route(s), {state}>"

    # -- Bulk edits (setup time only) --

    def remove(self, name: str) -> bool:
        """Remove a route. Returns False if it was not registered."""
        self._ensure_mutable()
        if self._entries.pop(name, None) is None:
            return False
        self._sorted = None
        return True

    def add_collection(self, other: RouteCollection, *, override: bool = False) -> None:
        """Merge *other* into this collection.

        Merged routes go to the end of the registration order. Without
        *override*, a name present in both raises ``DuplicateName``.
        """
        self._ensure_mutable()
        for name, entry in other._entries.items():
            if name in self._entries:
                if not override:
                    raise DuplicateName(name)
                del self._entries[name]
            self._entries[name] = entry
        self._sorted = None

    def _rewrite(self, change: Callable[[RouteDefinition], RouteDefinition]) -> None:
        """Replace every definition by ``change(definition)`` and recompile."""
        self._ensure_mutable()
        rewritten: dict[str, RouteEntry] = {}
        for entry in self._entries.values():
            definition = change(entry.definition)
            if definition.name in rewritten:
                raise DuplicateName(definition.name)
            rewritten[definition.name] = _compile(definition)
        self._entries = rewritten
        self._sorted = None

    def add_prefix(self, prefix: str) -> None:
        """Prefix every path: ``/users`` becomes ``/admin/users``."""
        prefix = prefix.strip()
        if prefix and not prefix.startswith("/"):
            prefix = "/" + prefix
        prefix = prefix.rstrip("/")
        if not prefix:
            return

        def change(definition: RouteDefinition) -> RouteDefinition:
            if isinstance(definition.path, Mapping):
                paths = {loc: prefix + path for loc, path in definition.path.items()}
                return definition.replace(path=paths)
            return definition.replace(path=prefix + definition.path)

        self._rewrite(change)

    def add_name_prefix(self, prefix: str) -> None:
        """Prefix every name: ``user_list`` becomes ``admin_user_list``."""
        if not prefix:
            return
        self._rewrite(lambda d: d.replace(name=prefix + d.name))

    def add_defaults(self, defaults: Mapping[str, Any]) -> None:
        """Merge *defaults* into every route (new values win)."""
        if not defaults:
            return
        self._rewrite(lambda d: d.replace(defaults={**d.defaults, **defaults}))

    def add_requirements(self, requirements: Mapping[str, str]) -> None:
        """Merge *requirements* into every route (new values win)."""
        if not requirements:
            return
        self._rewrite(lambda d: d.replace(requirements={**d.requirements, **requirements}))

    def set_methods(self, methods: Iterable[str]) -> None:
        """Restrict every route to *methods*."""
        allowed = frozenset(methods)
        self._rewrite(lambda d: d.replace(methods=allowed))

    def copy(self) -> RouteCollection:
        """An open (unfrozen) copy sharing the compiled entries."""
        clone = RouteCollection()
        clone._entries = dict(self._entries)
        return clone

    # -- Declarative configuration --

    @classmethod
    def from_dict(cls, config: Mapping[str, Mapping[str, Any]]) -> RouteCollection:
        """Build a collection from ``{name: {"path": ..., ...}}``.

        Example::

            RouteCollection.from_dict({
                "home": {"path": "/", "defaults": {"_controller": "home"}},
                "article_show": {
                    "path": "/article/{id}",
                    "requirements": {"id": r"\\d+"},
                    "methods": ["GET"],
                },
            })
        """
        collection = cls()
        for name, table in config.items():
            if not isinstance(table, Mapping):
                msg = f"Route {name!r} must be a table, got {type(table).__name__}."
                raise ConfigurationError(msg)
            try:
                definition = RouteDefinition.from_mapping(name, table)
            except KeyError as exc:
                msg = f"Route {name!r} must have a 'path' key."
                raise ConfigurationError(msg) from exc
            except (TypeError, ValueError, AttributeError) as exc:
                msg = f"Route {name!r}: {exc}"
                raise ConfigurationError(msg) from exc
            collection.register(definition)
        return collection

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Export in the ``from_dict`` format, registration order."""
        return {name: entry.definition.to_dict() for name, entry in self._entries.items()}
