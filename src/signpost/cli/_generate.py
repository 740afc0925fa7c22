"""``signpost generate`` — build a URL from a route name and parameters."""

import argparse
import sys

from signpost.cli._resolve import load_or_exit
from signpost.errors import GenerationError
from signpost.routing.generator import ReferenceType


def parse_params(pairs: list[str]) -> dict[str, str]:
    """Parse ``key=value`` arguments. Repeated keys keep the last value."""
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            msg = f"Expected KEY=VALUE, got {pair!r}"
            raise ValueError(msg)
        params[key] = value
    return params


def run_generate(args: argparse.Namespace) -> None:
    try:
        params = parse_params(args.params)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    reference_type = ReferenceType.RELATIVE_PATH
    if args.absolute:
        reference_type = ReferenceType.ABSOLUTE_URL
    elif args.network:
        reference_type = ReferenceType.NETWORK_PATH

    router = load_or_exit(args.target)
    try:
        url = router.generate(args.name, params, reference_type)
    except GenerationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    print(url)
