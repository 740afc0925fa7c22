"""Signpost exception hierarchy.

Shared across validation, compilation, the collection, the matcher and
the generator so every module raises and catches the same types.

Three families, by when they happen:

- ``ConfigurationError`` — a route table that must not go into service.
- ``MatchError`` — routine per-request outcomes (404 / 405).
- ``GenerationError`` — a caller asked for a URL it cannot have.
"""

from collections.abc import Iterable


class SignpostError(Exception):
    """Base for all signpost-specific errors."""


# ---------------------------------------------------------------------------
# Configuration time
# ---------------------------------------------------------------------------


class ConfigurationError(SignpostError):
    """Raised when the route configuration is invalid.

    Typically surfaces from ``RouteCollection.register()`` at startup.
    """


class DefinitionError(ConfigurationError):
    """A single route definition is malformed."""

    def __init__(self, route: str, message: str) -> None:
        self.route = route
        super().__init__(f"Route {route!r}: {message}")


class MalformedTemplate(DefinitionError):
    """Unbalanced braces or an empty ``{}`` placeholder."""


class InvalidParameterName(DefinitionError):
    """A placeholder name is not an identifier."""


class DuplicateParameter(DefinitionError):
    """The same placeholder appears twice across the route's templates."""


class InvalidRequirementRegex(DefinitionError):
    """A requirement does not compile as a regular expression."""


class OptionalBeforeRequired(DefinitionError):
    """A required placeholder follows an optional one."""


class UnknownMethod(DefinitionError):
    """An HTTP method token is not recognized."""


class UnknownScheme(DefinitionError):
    """A scheme token is not ``http`` or ``https``."""


class InvalidCondition(DefinitionError):
    """The condition expression does not parse or uses forbidden syntax."""


class CollectionError(ConfigurationError):
    """Base for errors raised by ``RouteCollection``."""


class DuplicateName(CollectionError):
    """A route with the same name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Route {name!r} already exists in the collection.")


class InvalidDefinition(CollectionError):
    """Registration failed because the definition did not compile."""

    def __init__(self, error: DefinitionError) -> None:
        self.error = error
        super().__init__(str(error))


class FrozenCollectionError(CollectionError):
    """The collection was mutated after ``freeze()``."""


# ---------------------------------------------------------------------------
# Match time
# ---------------------------------------------------------------------------


class MatchError(SignpostError):
    """A request descriptor did not resolve to a route.

    Carries the HTTP status and headers the caller should respond with.
    """

    def __init__(
        self,
        status: int,
        detail: str = "",
        headers: tuple[tuple[str, str], ...] = (),
    ) -> None:
        self.status = status
        self.detail = detail
        self.headers = headers
        super().__init__(detail)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(MatchError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(MatchError):  # noqa: N818 — conventional name in web frameworks
    """405 — a route matched the path but not the method or scheme.

    Includes an ``Allow`` header listing the valid methods (when any route
    restricted them) and embeds the allowed methods in the detail string.
    """

    def __init__(
        self,
        allowed_methods: Iterable[str] = (),
        allowed_schemes: Iterable[str] = (),
        detail: str = "",
    ) -> None:
        self.allowed_methods = frozenset(allowed_methods)
        self.allowed_schemes = frozenset(allowed_schemes)
        allow_value = ", ".join(sorted(self.allowed_methods))
        if not detail:
            parts = []
            if self.allowed_methods:
                parts.append(f"Allowed methods: {allow_value}")
            if self.allowed_schemes:
                parts.append(f"Allowed schemes: {', '.join(sorted(self.allowed_schemes))}")
            detail = "Method not allowed. " + "; ".join(parts) if parts else "Method not allowed."
        headers = (("Allow", allow_value),) if self.allowed_methods else ()
        super().__init__(status=405, detail=detail, headers=headers)


# ---------------------------------------------------------------------------
# Generation time
# ---------------------------------------------------------------------------


class GenerationError(SignpostError):
    """A URL could not be generated for the requested route."""

    def __init__(self, route: str, message: str) -> None:
        self.route = route
        super().__init__(message)


class RouteNotFound(GenerationError):  # noqa: N818
    """No route is registered under the requested name."""

    def __init__(self, route: str) -> None:
        super().__init__(route, f"Route {route!r} does not exist.")


class MissingParameter(GenerationError):
    """Mandatory placeholders have no value and no default."""

    def __init__(self, route: str, parameters: Iterable[str]) -> None:
        self.parameters = tuple(parameters)
        joined = ", ".join(self.parameters)
        super().__init__(route, f"Route {route!r} requires parameters: {joined}")


class ParameterDoesNotMatch(GenerationError):
    """A supplied value violates the placeholder's requirement."""

    def __init__(self, route: str, parameter: str, value: str, pattern: str) -> None:
        self.parameter = parameter
        self.value = value
        self.pattern = pattern
        super().__init__(
            route,
            f"Parameter {parameter!r} for route {route!r} must match "
            f"{pattern!r}, {value!r} given.",
        )


class NoLocaleVariant(GenerationError):
    """A localized route has no path for the requested or default locale."""

    def __init__(self, route: str, locale: str | None, available: Iterable[str]) -> None:
        self.locale = locale
        self.available = tuple(available)
        super().__init__(
            route,
            f"Route {route!r} has no variant for locale {locale!r} "
            f"(available: {', '.join(self.available)}).",
        )
