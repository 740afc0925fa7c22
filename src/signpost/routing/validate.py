"""Route definition validation.

Rejects malformed or ambiguous definitions before they are compiled, so a
bad route table fails at startup rather than on the first request.
"""

import re

from signpost.errors import (
    DefinitionError,
    DuplicateParameter,
    InvalidParameterName,
    InvalidRequirementRegex,
    MalformedTemplate,
    OptionalBeforeRequired,
    UnknownMethod,
    UnknownScheme,
)
from signpost.routing.compiler import tokenize
from signpost.routing.condition import compile_condition
from signpost.routing.route import RouteDefinition, Token

PARAMETER_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

KNOWN_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT", "PURGE"}
)
KNOWN_SCHEMES = frozenset({"http", "https"})


def validate(definition: RouteDefinition) -> None:
    """Check a definition; raise the matching ``DefinitionError`` if invalid.

    Pure: nothing is compiled or stored.
    """
    name = definition.name
    if not isinstance(name, str) or not name:
        raise DefinitionError(str(name), "route name must be a non-empty string")

    host_names: tuple[str, ...] = ()
    if definition.host is not None:
        host_tokens = _tokens(definition.host, name)
        host_names = _parameter_names(host_tokens, name, definition.host)

    paths = definition.paths
    if not paths:
        raise MalformedTemplate(name, "a localized route needs at least one path")
    for template in paths.values():
        tokens = _tokens(template, name)
        path_names = _parameter_names(tokens, name, template)
        for param in path_names:
            if param in host_names:
                msg = f"placeholder {{{param}}} appears in both host and path"
                raise DuplicateParameter(name, msg)
        _check_optional_order(tokens, definition, template)

    for param, pattern in definition.requirements.items():
        if not isinstance(pattern, str) or not pattern:
            msg = f"requirement for {param!r} must be a non-empty string"
            raise InvalidRequirementRegex(name, msg)
        try:
            re.compile(pattern)
        except re.error as exc:
            msg = f"requirement for {param!r} is not a valid regex ({pattern!r}: {exc})"
            raise InvalidRequirementRegex(name, msg) from exc

    unknown = definition.methods - KNOWN_METHODS
    if unknown:
        msg = f"unknown HTTP method(s): {', '.join(sorted(unknown))}"
        raise UnknownMethod(name, msg)

    unknown = definition.schemes - KNOWN_SCHEMES
    if unknown:
        msg = f"unknown scheme(s): {', '.join(sorted(unknown))}"
        raise UnknownScheme(name, msg)

    if isinstance(definition.priority, bool) or not isinstance(definition.priority, int):
        raise DefinitionError(name, f"priority must be an int, got {definition.priority!r}")

    if definition.condition is not None:
        compile_condition(definition.condition, name)


def _tokens(template: object, route: str) -> tuple[Token, ...]:
    if not isinstance(template, str):
        msg = f"template must be a string, got {type(template).__name__}"
        raise MalformedTemplate(route, msg)
    return tokenize(template, route)


def _parameter_names(tokens: tuple[Token, ...], route: str, template: str) -> tuple[str, ...]:
    names: list[str] = []
    for token in tokens:
        if not token.is_param:
            continue
        if not PARAMETER_NAME.fullmatch(token.value):
            msg = f"placeholder {{{token.value}}} in {template!r} is not a valid name"
            raise InvalidParameterName(route, msg)
        if token.value in names:
            msg = f"placeholder {{{token.value}}} appears twice in {template!r}"
            raise DuplicateParameter(route, msg)
        names.append(token.value)
    return tuple(names)


def _check_optional_order(
    tokens: tuple[Token, ...], definition: RouteDefinition, template: str
) -> None:
    optional: str | None = None
    for token in tokens:
        if not token.is_param:
            continue
        if definition.has_default(token.value):
            optional = optional or token.value
        elif optional is not None:
            msg = (
                f"required placeholder {{{token.value}}} follows optional "
                f"{{{optional}}} in {template!r}"
            )
            raise OptionalBeforeRequired(definition.name, msg)
