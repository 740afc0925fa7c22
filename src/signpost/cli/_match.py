"""``signpost match`` — resolve a path to a route.

Exits 1 with the reason when the path is not found (404) or the method or
scheme is not allowed (405).
"""

import argparse
import sys

from signpost.cli._resolve import load_or_exit
from signpost.errors import MatchError


def run_match(args: argparse.Namespace) -> None:
    router = load_or_exit(args.target)
    try:
        result = router.match_path(
            args.path, args.method, host=args.host, scheme=args.scheme
        )
    except MatchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(f"Route: {result.route_name}")
    for key, value in result.parameters.items():
        print(f"  {key} = {value!r}")
