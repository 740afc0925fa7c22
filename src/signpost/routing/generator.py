"""Generator — build URLs from route names and parameters.

The structural inverse of the matcher::

    generator.generate("blog_show", {"slug": "my-post", "page": 2})
    -> "/blog/my-post?page=2"

Placeholders take their value from the parameters, then from the route's
defaults. Whatever is left over becomes the query string; ``_fragment``
becomes the ``#fragment``.
"""

import logging
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any
from urllib.parse import quote, urlencode

from signpost.config import RequestContext, RouterConfig
from signpost.errors import (
    GenerationError,
    MissingParameter,
    NoLocaleVariant,
    ParameterDoesNotMatch,
    RouteNotFound,
)
from signpost.routing.collection import RouteCollection
from signpost.routing.route import CompiledTemplate, RouteDefinition

logger = logging.getLogger("signpost.routing")

# Characters left readable in generated path segments.
PATH_SAFE = "@:;,=+!*|"
FRAGMENT_SAFE = "?/:@!$&'()*+,;="

LOCALE_KEY = "_locale"
FRAGMENT_KEY = "_fragment"


class ReferenceType(Enum):
    """The form a generated URL takes."""

    RELATIVE_PATH = "relative_path"  # /blog/my-post
    ABSOLUTE_URL = "absolute_url"  # https://example.com/blog/my-post
    NETWORK_PATH = "network_path"  # //example.com/blog/my-post


def stringify(value: Any) -> str:
    """Render a parameter value the way it appears in a URL."""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def _escape_dot_segments(path: str) -> str:
    # Never emit "." or ".." segments: they would be resolved away by clients.
    while "/../" in path or "/./" in path:
        path = path.replace("/../", "/%2E%2E/").replace("/./", "/%2E/")
    if path.endswith("/.."):
        path = path[:-2] + "%2E%2E"
    elif path.endswith("/."):
        path = path[:-1] + "%2E"
    return path


class _RequirementMismatch(Exception):  # noqa: N818
    """Internal signal for a non-strict requirement failure."""


class Generator:
    """Generates URLs from a frozen RouteCollection.

    Usage::

        generator = Generator(routes, RouterConfig(default_locale="en"))
        generator.generate("article_show", {"id": 42})
        generator.generate("article_show", {"id": 42}, ReferenceType.ABSOLUTE_URL)
    """

    __slots__ = ("_collection", "_config")

    def __init__(self, collection: RouteCollection, config: RouterConfig | None = None) -> None:
        collection.freeze()
        self._collection = collection
        self._config = config or RouterConfig()

    @property
    def config(self) -> RouterConfig:
        return self._config

    def has_route(self, name: str) -> bool:
        return name in self._collection

    def generate(
        self,
        name: str,
        parameters: Mapping[str, Any] | None = None,
        reference_type: ReferenceType = ReferenceType.RELATIVE_PATH,
        *,
        context: RequestContext | None = None,
    ) -> str:
        """Generate a URL for the route registered as *name*.

        Raises ``RouteNotFound``, ``MissingParameter``, ``NoLocaleVariant``
        or ``ParameterDoesNotMatch``. With ``strict_requirements=False`` a
        requirement mismatch is logged and ``""`` is returned instead.
        """
        entry = self._collection.by_name(name)
        if entry is None:
            raise RouteNotFound(name)
        definition, compiled = entry
        ctx = context or self._config.context
        params = dict(parameters or {})

        variant = self._select_variant(definition, compiled.variants, params)
        merged: dict[str, Any] = {**definition.defaults, **params}
        if variant.locale is not None:
            merged[LOCALE_KEY] = variant.locale

        consumed = set(variant.variables)
        if compiled.host is not None:
            consumed.update(compiled.host.variables)
        missing = [v for v in variant.variables if v not in merged]
        if compiled.host is not None:
            missing += [v for v in compiled.host.variables if v not in merged]
        if missing:
            raise MissingParameter(name, missing)

        try:
            path = self._build_path(definition, variant, merged)
            host = ctx.host
            if compiled.host is not None:
                host = self._build_host(definition, compiled.host, merged)
        except _RequirementMismatch:
            return ""

        url = ctx.base_url + path
        query = self._query_string(definition, params, consumed)
        if query:
            url += "?" + query
        fragment = params.get(FRAGMENT_KEY)
        if fragment is not None and fragment != "":
            url += "#" + quote(stringify(fragment), safe=FRAGMENT_SAFE)

        return self._qualify(url, definition, host, ctx, reference_type, compiled.host is not None)

    # -- Pieces --

    def _select_variant(
        self,
        definition: RouteDefinition,
        variants: tuple[CompiledTemplate, ...],
        params: Mapping[str, Any],
    ) -> CompiledTemplate:
        if not definition.is_localized:
            return variants[0]
        requested = params.get(LOCALE_KEY)
        candidates = (requested, definition.defaults.get(LOCALE_KEY), self._config.default_locale)
        for locale in candidates:
            if locale is None:
                continue
            for variant in variants:
                if variant.locale == locale:
                    return variant
        wanted = requested or self._config.default_locale
        raise NoLocaleVariant(
            definition.name, wanted, (v.locale for v in variants if v.locale is not None)
        )

    def _check(
        self,
        definition: RouteDefinition,
        param: str,
        value: str,
        pattern: str | None = None,
    ) -> None:
        pattern = pattern or definition.requirements.get(param)
        strict = self._config.strict_requirements
        if pattern is None or strict is None:
            return
        if re.fullmatch(pattern, value) is not None:
            return
        error = ParameterDoesNotMatch(definition.name, param, value, pattern)
        if strict:
            raise error
        logger.warning("%s", error)
        raise _RequirementMismatch

    def _build_path(
        self,
        definition: RouteDefinition,
        variant: CompiledTemplate,
        merged: Mapping[str, Any],
    ) -> str:
        tokens = variant.tokens
        defaults = definition.defaults

        # Drop optional trailing placeholders that add nothing.
        keep = len(tokens)
        for index in range(len(tokens) - 1, variant.optional_from - 1, -1):
            param = tokens[index].value
            value = merged[param]
            default = defaults.get(param)
            if value is None or (default is not None and stringify(value) == stringify(default)):
                keep = index
            else:
                break

        pieces: list[str] = []
        for token in tokens[:keep]:
            if not token.is_param:
                pieces.append(token.value)
                continue
            value = merged[token.value]
            if value is None:
                raise MissingParameter(definition.name, [token.value])
            text = stringify(value)
            self._check(definition, token.value, text)
            safe = PATH_SAFE + ("/" if token.value in definition.requirements else "")
            encoded = quote(text, safe=safe)
            for char in variant.reserved.get(token.value, ""):
                # A literal separator would end the capture early on match.
                encoded = encoded.replace(char, f"%{ord(char):02X}")
            pieces.append(token.separator + encoded)

        path = "".join(pieces)
        if not path.startswith("/"):
            path = "/" + path
        return _escape_dot_segments(path)

    def _build_host(
        self,
        definition: RouteDefinition,
        host: CompiledTemplate,
        merged: Mapping[str, Any],
    ) -> str:
        pieces: list[str] = []
        for token in host.tokens:
            if not token.is_param:
                pieces.append(token.value)
                continue
            value = merged[token.value]
            if value is None:
                raise MissingParameter(definition.name, [token.value])
            text = stringify(value)
            # Host labels cannot be percent-encoded, so the default pattern
            # is enforced like an explicit requirement.
            stop = host.reserved.get(token.value)
            pattern = f"[^{re.escape(stop)}]+" if stop else None
            self._check(definition, token.value, text, pattern)
            pieces.append(token.separator + text)
        return "".join(pieces).lower()

    def _query_string(
        self,
        definition: RouteDefinition,
        params: Mapping[str, Any],
        consumed: set[str],
    ) -> str:
        defaults = definition.defaults
        extra: dict[str, Any] = {}
        for key, value in params.items():
            if key in consumed or key.startswith("_") or value is None:
                continue
            if key in defaults and stringify(defaults[key]) == stringify(value):
                continue
            if isinstance(value, (list, tuple)):
                extra[key] = [stringify(v) for v in value]
            else:
                extra[key] = stringify(value)
        return urlencode(extra, doseq=True)

    def _qualify(
        self,
        url: str,
        definition: RouteDefinition,
        host: str,
        ctx: RequestContext,
        reference_type: ReferenceType,
        host_bound: bool,
    ) -> str:
        scheme = ctx.scheme
        if definition.schemes and scheme not in definition.schemes:
            # The current scheme cannot reach this route.
            scheme = sorted(definition.schemes)[0]
            reference_type = ReferenceType.ABSOLUTE_URL
        elif (
            host_bound
            and reference_type is ReferenceType.RELATIVE_PATH
            and host != ctx.host.lower()
        ):
            # A bare path cannot express a foreign host.
            reference_type = ReferenceType.NETWORK_PATH

        if reference_type is ReferenceType.RELATIVE_PATH:
            return url

        port = ""
        if scheme == "http" and ctx.http_port != 80:
            port = f":{ctx.http_port}"
        elif scheme == "https" and ctx.https_port != 443:
            port = f":{ctx.https_port}"

        if reference_type is ReferenceType.NETWORK_PATH:
            return f"//{host}{port}{url}"
        return f"{scheme}://{host}{port}{url}"

    # -- Conveniences --

    def generate_with_query(
        self,
        name: str,
        parameters: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
        reference_type: ReferenceType = ReferenceType.RELATIVE_PATH,
    ) -> str:
        """Generate with extra query parameters merged over *parameters*."""
        return self.generate(name, {**(parameters or {}), **(query or {})}, reference_type)

    def generate_multiple(
        self,
        routes: Mapping[str, Mapping[str, Any] | None],
        reference_type: ReferenceType = ReferenceType.RELATIVE_PATH,
    ) -> dict[str, str]:
        """Generate several URLs at once, e.g. for a menu or sitemap.

        Routes that fail to generate are logged and left out of the result.
        """
        urls: dict[str, str] = {}
        for name, params in routes.items():
            try:
                urls[name] = self.generate(name, params, reference_type)
            except GenerationError as exc:
                logger.warning("skipping route %r: %s", name, exc)
        return urls
