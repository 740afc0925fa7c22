"""Route definitions, request descriptors and their compiled forms.

Everything here is a frozen dataclass. Definitions are created during
setup, compiled once when registered, and never change afterwards.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, NamedTuple
from urllib.parse import urlsplit

from signpost._internal.multimap import MultiValueMapping
from signpost.http.headers import Headers
from signpost.http.query import QueryParams

if TYPE_CHECKING:
    from signpost.routing.condition import Condition

# Keys a declarative route table may carry (see ``RouteDefinition.from_mapping``)
DEFINITION_KEYS = frozenset(
    {"path", "host", "methods", "schemes", "requirements", "defaults", "condition", "priority"}
)


def _as_tokens(value: str | Iterable[str] | None) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _strip_anchors(pattern: str) -> str:
    if isinstance(pattern, str):
        if pattern.startswith("^"):
            pattern = pattern[1:]
        if pattern.endswith("$") and not pattern.endswith("\\$"):
            pattern = pattern[:-1]
    return pattern


def _leading_slash(template: str) -> str:
    if isinstance(template, str) and not template.startswith("/"):
        return "/" + template
    return template


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """A frozen route definition.

    Created during setup, compiled into the collection on ``register()``.

    ``path`` is either a template (``"/blog/{slug}"``) or a mapping of
    locale to template for routes that are spelled differently per
    language::

        RouteDefinition("about", {"en": "/about-us", "nl": "/over-ons"})
    """

    name: str
    path: str | Mapping[str, str] = field(hash=False)
    host: str | None = None
    methods: frozenset[str] = frozenset()
    schemes: frozenset[str] = frozenset()
    requirements: Mapping[str, str] = field(default_factory=dict, hash=False)
    defaults: Mapping[str, Any] = field(default_factory=dict, hash=False)
    condition: str | None = None
    priority: int = 0

    def __post_init__(self) -> None:
        # Normalize in place; the instance is frozen, so bypass __setattr__.
        if isinstance(self.path, Mapping):
            path: str | Mapping[str, str] = {
                locale: _leading_slash(template) for locale, template in self.path.items()
            }
        else:
            path = _leading_slash(self.path)
        object.__setattr__(self, "path", path)
        object.__setattr__(
            self, "methods", frozenset(str(m).upper() for m in _as_tokens(self.methods))
        )
        object.__setattr__(
            self, "schemes", frozenset(str(s).lower() for s in _as_tokens(self.schemes))
        )
        object.__setattr__(
            self,
            "requirements",
            {key: _strip_anchors(value) for key, value in dict(self.requirements).items()},
        )
        object.__setattr__(self, "defaults", dict(self.defaults))
        if self.host is not None:
            object.__setattr__(self, "host", self.host.lower())

    @property
    def is_localized(self) -> bool:
        return isinstance(self.path, Mapping)

    @property
    def paths(self) -> dict[str | None, str]:
        """Path templates keyed by locale (``None`` for unlocalized routes)."""
        if isinstance(self.path, Mapping):
            return dict(self.path)
        return {None: self.path}

    def has_default(self, name: str) -> bool:
        return name in self.defaults

    def replace(self, **changes: Any) -> RouteDefinition:
        """Return a copy with *changes* applied (this instance is untouched)."""
        return dataclasses.replace(self, **changes)

    def describe(self) -> str:
        methods = ",".join(sorted(self.methods)) or "ANY"
        paths = self.paths
        shown = next(iter(paths.values())) if len(paths) == 1 else "|".join(paths.values())
        host = f" host={self.host}" if self.host else ""
        return f"{self.name}: {methods} {shown}{host}"

    @classmethod
    def from_mapping(cls, name: str, data: Mapping[str, Any]) -> RouteDefinition:
        """Build a definition from a declarative table (TOML, JSON, dict).

        Raises ``KeyError`` when ``path`` is missing and ``ValueError`` for
        keys outside ``DEFINITION_KEYS``.
        """
        unknown = set(data) - DEFINITION_KEYS
        if unknown:
            msg = f"unknown keys {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        fields = dict(data)
        path = fields.pop("path")
        return cls(name=name, path=path, **fields)

    def to_dict(self) -> dict[str, Any]:
        """Export as a declarative table, omitting empty fields."""
        data: dict[str, Any] = {
            "path": self.path if isinstance(self.path, str) else dict(self.path)
        }
        if self.host is not None:
            data["host"] = self.host
        if self.methods:
            data["methods"] = sorted(self.methods)
        if self.schemes:
            data["schemes"] = sorted(self.schemes)
        if self.requirements:
            data["requirements"] = dict(self.requirements)
        if self.defaults:
            data["defaults"] = dict(self.defaults)
        if self.condition is not None:
            data["condition"] = self.condition
        if self.priority:
            data["priority"] = self.priority
        return data


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """What the matcher needs to know about an incoming request.

    Supplied per call by the HTTP layer; the router never keeps it.
    """

    path: str
    method: str = "GET"
    host: str = ""
    scheme: str = "http"
    headers: MultiValueMapping = field(default_factory=Headers)
    query: MultiValueMapping = field(default_factory=QueryParams)
    client_ip: str | None = None
    environment: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", self.path or "/")
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "scheme", self.scheme.lower())
        object.__setattr__(self, "host", self.host.lower())
        # Plain mappings, pair lists and raw query strings are wrapped.
        if not isinstance(self.headers, MultiValueMapping):
            object.__setattr__(self, "headers", Headers(self.headers))
        if not isinstance(self.query, MultiValueMapping):
            object.__setattr__(self, "query", QueryParams(self.query))

    @property
    def hostname(self) -> str:
        """The host without a ``:port`` suffix."""
        return self.host.partition(":")[0]

    @classmethod
    def from_url(cls, url: str, method: str = "GET", **kwargs: Any) -> RequestDescriptor:
        """Build a descriptor from a full or partial URL.

        Example::

            RequestDescriptor.from_url("https://admin.example.com/dashboard?tab=2")
        """
        parts = urlsplit(url)
        kwargs.setdefault("host", parts.netloc)
        if parts.scheme:
            kwargs.setdefault("scheme", parts.scheme)
        kwargs.setdefault("query", QueryParams(parts.query))
        return cls(path=parts.path or "/", method=method, **kwargs)


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Result of a successful match."""

    route_name: str
    parameters: dict[str, Any]
    methods: frozenset[str] = frozenset()
    format: str | None = None
    locale: str | None = None


# ---------------------------------------------------------------------------
# Compiled forms
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Token:
    """A parsed piece of a route template.

    Text:      ``/blog``                        (is_param=False)
    Param:     ``/{slug}``  -> value="slug", separator="/"
    Dotted:    ``.{_format}`` -> value="_format", separator="."
    """

    value: str
    is_param: bool = False
    separator: str = ""


@dataclass(frozen=True, slots=True)
class CompiledTemplate:
    """One template turned into an anchored regex plus a generation plan."""

    template: str
    regex: re.Pattern[str]
    tokens: tuple[Token, ...]
    variables: tuple[str, ...]
    # Index of the first token of the optional tail; len(tokens) when none
    optional_from: int
    static_prefix: str = ""
    locale: str | None = None
    # Placeholder -> characters its default pattern stops at. Generated
    # values must not contain them literally.
    reserved: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """The cached, immutable artifact derived from a RouteDefinition."""

    name: str
    variants: tuple[CompiledTemplate, ...]
    host: CompiledTemplate | None = None
    condition: Condition | None = None

    @property
    def variables(self) -> tuple[str, ...]:
        """Placeholder names of the first path variant, then the host."""
        host_vars = self.host.variables if self.host is not None else ()
        return self.variants[0].variables + host_vars

    @property
    def locales(self) -> tuple[str, ...]:
        return tuple(v.locale for v in self.variants if v.locale is not None)

    def variant_for(self, locale: str | None) -> CompiledTemplate | None:
        for variant in self.variants:
            if variant.locale == locale:
                return variant
        return None


class RouteEntry(NamedTuple):
    """A registered (definition, compiled) pair."""

    definition: RouteDefinition
    compiled: CompiledRoute
