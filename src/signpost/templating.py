"""Kida template globals for URL generation.

Registers ``path()`` and ``url()`` on a kida Environment so templates can
link to routes by name::

    <a href="{{ path('blog_show', {'slug': post.slug}) }}">...</a>
    <link rel="canonical" href="{{ url('blog_show', {'slug': post.slug}) }}">
"""

from collections.abc import Callable, Mapping
from typing import Any

from kida import Environment

from signpost.routing.generator import ReferenceType
from signpost.routing.router import Router


def url_functions(router: Router) -> dict[str, Callable[..., str]]:
    """Build the ``path``/``url`` callables bound to *router*."""

    def path(name: str, params: Mapping[str, Any] | None = None) -> str:
        return router.generate(name, params, ReferenceType.RELATIVE_PATH)

    def url(name: str, params: Mapping[str, Any] | None = None) -> str:
        return router.generate(name, params, ReferenceType.ABSOLUTE_URL)

    return {"path": path, "url": url}


def register_url_functions(env: Environment, router: Router) -> Environment:
    """Add ``path()`` and ``url()`` globals to an existing environment."""
    for name, value in url_functions(router).items():
        env.add_global(name, value)
    return env


def create_environment(router: Router, loader: Any = None, *, autoescape: bool = True) -> Environment:
    """Create a kida Environment with the URL globals already registered."""
    options: dict[str, Any] = {"autoescape": autoescape}
    if loader is not None:
        options["loader"] = loader
    env = Environment(**options)
    return register_url_functions(env, router)
