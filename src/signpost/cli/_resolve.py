"""Target resolution — turn a CLI target into a Router.

Shared by every subcommand. A target is either a route file or a
``"module:attribute"`` import string.
"""

import importlib
import logging
import sys
from pathlib import Path

from signpost.errors import ConfigurationError
from signpost.routing.collection import RouteCollection
from signpost.routing.loader import SUPPORTED_SUFFIXES
from signpost.routing.router import Router

logger = logging.getLogger("signpost.cli")


def resolve_router(target: str) -> Router:
    """Resolve a CLI target to a Router.

    Accepts a path ending in ``.toml`` or ``.json``, or an import string
    in ``"module:attribute"`` format. When the attribute portion is
    omitted, defaults to ``"router"`` (e.g. ``"myapp.urls"`` resolves to
    ``myapp.urls.router``).

    The attribute may be a ``Router``, a ``RouteCollection`` (wrapped in a
    new Router), or a factory returning either.

    Raises:
        ConfigurationError: If a route file cannot be loaded.
        FileNotFoundError: If a route file does not exist.
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a Router or RouteCollection.

    """
    if target.lower().endswith(SUPPORTED_SUFFIXES):
        router = Router.from_file(Path(target))
        logger.debug("loaded %d route(s) from %s", len(router.collection), target)
        return router

    module_path, _, attr_name = target.partition(":")
    if not attr_name:
        attr_name = "router"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    # Factory functions are called once
    if callable(obj) and not isinstance(obj, (Router, RouteCollection)):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {target!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(obj, RouteCollection):
        obj = Router(obj)
    if not isinstance(obj, Router):
        msg = f"{target!r} resolved to {type(obj).__name__}, not a signpost Router or RouteCollection"
        raise TypeError(msg)
    logger.debug("resolved %s to %d route(s)", target, len(obj.collection))
    return obj


RESOLVE_ERRORS = (ConfigurationError, OSError, ModuleNotFoundError, AttributeError, TypeError)


def load_or_exit(target: str) -> Router:
    """Resolve *target*, or print the error to stderr and exit 1."""
    try:
        return resolve_router(target)
    except RESOLVE_ERRORS as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
