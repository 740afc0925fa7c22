"""Route files — declarative route tables in TOML or JSON.

A route file has one top-level ``routes`` table keyed by route name::

    [routes.home]
    path = "/"
    defaults = { _controller = "pages:home" }

    [routes.article_show]
    path = "/article/{id}"
    methods = ["GET"]
    requirements = { id = '\\d+' }
"""

import json
import logging
import tomllib
from pathlib import Path
from typing import Any

from signpost.errors import ConfigurationError
from signpost.routing.collection import RouteCollection

logger = logging.getLogger("signpost.routing")

SUPPORTED_SUFFIXES = (".toml", ".json")


def read_route_file(path: str | Path) -> dict[str, Any]:
    """Parse a route file and return its ``routes`` table.

    Raises ``ConfigurationError`` for unsupported extensions, parse errors
    and a missing or malformed ``routes`` table. ``OSError`` propagates.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        msg = f"Routes file {str(path)!r} must be one of: {', '.join(SUPPORTED_SUFFIXES)}"
        raise ConfigurationError(msg)

    try:
        if suffix == ".toml":
            with path.open("rb") as f:
                data = tomllib.load(f)
        else:
            data = json.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        msg = f"Routes file {str(path)!r} could not be parsed: {exc}"
        raise ConfigurationError(msg) from exc

    routes = data.get("routes") if isinstance(data, dict) else None
    if not isinstance(routes, dict):
        msg = f"Routes file {str(path)!r} must contain a 'routes' table."
        raise ConfigurationError(msg)
    return routes


def load_routes(path: str | Path) -> RouteCollection:
    """Load a route file into a new (unfrozen) RouteCollection."""
    routes = read_route_file(path)
    collection = RouteCollection.from_dict(routes)
    logger.debug("loaded %d route(s) from %s", len(collection), path)
    return collection
