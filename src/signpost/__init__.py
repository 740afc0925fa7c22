"""Signpost — bidirectional URL routing.

Match incoming requests to named routes, and generate URLs from route
names and parameters, from one route table.

Basic usage::

    from signpost import Router

    router = Router()
    router.add_route("article_show", "/article/{id}", requirements={"id": r"\\d+"})

    router.match_path("/article/42").parameters   # {"id": "42"}
    router.generate("article_show", {"id": 42})   # "/article/42"

Route files (``.toml`` or ``.json``)::

    router = Router.from_file("routes.toml")
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "GenerationError",
    "MatchResult",
    "MethodNotAllowed",
    "NotFound",
    "ReferenceType",
    "RequestContext",
    "RequestDescriptor",
    "RouteCollection",
    "RouteDefinition",
    "Router",
    "RouterConfig",
    "SignpostError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import signpost`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from signpost.routing.router import Router

        return Router

    if name == "RouteCollection":
        from signpost.routing.collection import RouteCollection

        return RouteCollection

    if name in ("RouteDefinition", "RequestDescriptor", "MatchResult"):
        from signpost.routing import route as _route

        return getattr(_route, name)

    if name == "ReferenceType":
        from signpost.routing.generator import ReferenceType

        return ReferenceType

    if name in ("RequestContext", "RouterConfig"):
        from signpost import config as _config

        return getattr(_config, name)

    if name in (
        "SignpostError",
        "ConfigurationError",
        "GenerationError",
        "MethodNotAllowed",
        "NotFound",
    ):
        from signpost import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
