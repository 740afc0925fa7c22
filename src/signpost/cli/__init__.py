"""Signpost CLI — inspect route tables, match paths, generate URLs.

Entry point registered as ``signpost`` in ``pyproject.toml``::

    [project.scripts]
    signpost = "signpost.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``signpost`` command."""
    parser = argparse.ArgumentParser(
        prog="signpost",
        description="Signpost — match requests to named routes and generate URLs.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log routing decisions to stderr",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- signpost routes --------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List routes in match order")
    routes_parser.add_argument(
        "target",
        help="Route file (.toml/.json) or import string (e.g. myapp.urls:router)",
    )

    # -- signpost match ---------------------------------------------------
    match_parser = subparsers.add_parser("match", help="Match a path against the routes")
    match_parser.add_argument("target", help="Route file or import string")
    match_parser.add_argument("path", help="Request path (e.g. /blog/my-post)")
    match_parser.add_argument("--method", default="GET", help="HTTP method (default: GET)")
    match_parser.add_argument("--host", default="", help="Request host")
    match_parser.add_argument("--scheme", default="http", help="Request scheme (default: http)")

    # -- signpost generate ------------------------------------------------
    generate_parser = subparsers.add_parser("generate", help="Generate a URL for a route")
    generate_parser.add_argument("target", help="Route file or import string")
    generate_parser.add_argument("name", help="Route name")
    generate_parser.add_argument(
        "params",
        nargs="*",
        metavar="KEY=VALUE",
        help="Route parameters; leftovers become the query string",
    )
    form = generate_parser.add_mutually_exclusive_group()
    form.add_argument("--absolute", action="store_true", help="Generate an absolute URL")
    form.add_argument("--network", action="store_true", help="Generate a network-path URL")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.command == "routes":
        from signpost.cli._routes import run_routes

        run_routes(args)
    elif args.command == "match":
        from signpost.cli._match import run_match

        run_match(args)
    elif args.command == "generate":
        from signpost.cli._generate import run_generate

        run_generate(args)
