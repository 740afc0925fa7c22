"""Pattern compiler — route templates to anchored regular expressions.

A template is walked left to right. Literal runs are escaped verbatim and
every ``{name}`` placeholder becomes a named capture group::

    "/blog/{slug}"                -> /blog/(?P<slug>[^/]+)
    "/archive/{year}/{month}"     -> /archive/(?P<year>[^/]+)(?:/(?P<month>[^/]+))?
      (month has a default)
    "/export.{_format}"           -> /export\\.(?P<_format>[^/]+)

``compile_route()`` runs ``validate()`` before compiling anything.
"""

import re

from signpost.errors import InvalidRequirementRegex, MalformedTemplate
from signpost.routing.condition import compile_condition
from signpost.routing.route import CompiledRoute, CompiledTemplate, RouteDefinition, Token

# Characters that, directly before a placeholder, belong to it: the
# separator is dropped together with an omitted optional placeholder.
SEPARATORS = "/,;.:-_~+*=@|"

_PLACEHOLDER = re.compile(r"\{([^{}]*)\}")


def tokenize(template: str, route: str = "") -> tuple[Token, ...]:
    """Split a template into text and placeholder tokens.

    Examples::

        "/users"          -> (Token("/users"),)
        "/users/{id}"     -> (Token("/users"), Token("id", is_param=True, separator="/"))
        "{id}.json"       -> (Token("id", is_param=True), Token(".json"))

    Raises ``MalformedTemplate`` on stray braces or an empty ``{}``.
    """
    tokens: list[Token] = []
    pos = 0
    for match in _PLACEHOLDER.finditer(template):
        text = template[pos : match.start()]
        _check_braces(text, template, route)
        name = match.group(1)
        if not name:
            msg = f"empty placeholder in {template!r}"
            raise MalformedTemplate(route, msg)

        separator = ""
        if text and text[-1] in SEPARATORS:
            separator = text[-1]
            text = text[:-1]
        if text:
            tokens.append(Token(text))
        tokens.append(Token(name, is_param=True, separator=separator))
        pos = match.end()

    rest = template[pos:]
    _check_braces(rest, template, route)
    if rest:
        tokens.append(Token(rest))
    return tuple(tokens)


def _check_braces(text: str, template: str, route: str) -> None:
    if "{" in text or "}" in text:
        msg = f"unbalanced braces in {template!r}"
        raise MalformedTemplate(route, msg)


def optional_start(tokens: tuple[Token, ...], defaults: dict[str, object]) -> int:
    """Index of the first token of the trailing run of defaulted placeholders.

    Returns ``len(tokens)`` when the template ends in text or in a
    placeholder without a default.
    """
    first = len(tokens)
    for index in range(len(tokens) - 1, -1, -1):
        token = tokens[index]
        if token.is_param and token.value in defaults:
            first = index
        else:
            break
    return first


def _next_separator(tokens: tuple[Token, ...], index: int) -> str:
    if index + 1 >= len(tokens):
        return ""
    following = tokens[index + 1]
    if following.is_param:
        return following.separator
    return following.value[0] if following.value[0] in SEPARATORS else ""


def _stop_chars(tokens: tuple[Token, ...], index: int, excluded: str) -> str:
    chars = excluded
    nxt = _next_separator(tokens, index)
    if nxt and nxt not in chars:
        chars += nxt
    return chars


def compile_template(
    template: str,
    definition: RouteDefinition,
    *,
    is_host: bool = False,
    locale: str | None = None,
) -> CompiledTemplate:
    """Compile a single path or host template."""
    tokens = tokenize(template, definition.name)
    defaults = definition.defaults
    requirements = definition.requirements
    # Hosts never have optional parts.
    first_optional = len(tokens) if is_host else optional_start(tokens, defaults)
    excluded = "." if is_host else "/"

    parts: list[str] = []
    reserved: dict[str, str] = {}
    for index, token in enumerate(tokens):
        if not token.is_param:
            parts.append(re.escape(token.value))
            continue

        requirement = requirements.get(token.value)
        if not requirement:
            reserved[token.value] = _stop_chars(tokens, index, excluded)
            requirement = f"[^{re.escape(reserved[token.value])}]+"
        separator = re.escape(token.separator)
        group = f"(?P<{token.value}>{requirement})"

        if index == 0 and first_optional == 0:
            # The only token is an optional placeholder: keep its separator
            # mandatory so "/" still matches "/{page}".
            parts.append(f"{separator}{group}?")
            continue

        pattern = f"{separator}{group}"
        if index >= first_optional:
            pattern = f"(?:{pattern}"
            if index == len(tokens) - 1:
                closing = len(tokens) - first_optional - (1 if first_optional == 0 else 0)
                pattern += ")?" * closing
        parts.append(pattern)

    static_prefix = ""
    for token in tokens:
        if token.is_param:
            break
        static_prefix += token.value

    flags = re.IGNORECASE if is_host else 0
    try:
        regex = re.compile("".join(parts), flags)
    except re.error as exc:
        # Each requirement compiles alone but not inside the whole pattern:
        # inline global flags, or a group name used twice.
        msg = f"requirements do not combine into a valid pattern for {template!r}: {exc}"
        raise InvalidRequirementRegex(definition.name, msg) from exc

    return CompiledTemplate(
        template=template,
        regex=regex,
        tokens=tokens,
        variables=tuple(t.value for t in tokens if t.is_param),
        optional_from=first_optional,
        static_prefix=static_prefix.lower() if is_host else static_prefix,
        locale=locale,
        reserved=reserved,
    )


def compile_route(definition: RouteDefinition) -> CompiledRoute:
    """Validate a RouteDefinition and turn it into a CompiledRoute.

    Raises the ``DefinitionError`` subclass that applies. Localized routes
    compile to one CompiledRoute carrying a variant per locale, all under
    the same name.
    """
    from signpost.routing.validate import validate

    validate(definition)
    variants = tuple(
        compile_template(template, definition, locale=locale)
        for locale, template in definition.paths.items()
    )
    host = None
    if definition.host is not None:
        host = compile_template(definition.host, definition, is_host=True)
    condition = None
    if definition.condition is not None:
        condition = compile_condition(definition.condition, definition.name)
    return CompiledRoute(
        name=definition.name,
        variants=variants,
        host=host,
        condition=condition,
    )
