"""``signpost routes`` — list routes in match order.

Resolves the target to a Router and prints NAME, METHOD, SCHEME, HOST and
PATH for every route, highest priority first.
"""

import argparse

from signpost.cli._resolve import load_or_exit


def run_routes(args: argparse.Namespace) -> None:
    """Print the route table for ``args.target``."""
    router = load_or_exit(args.target)
    routes = router.routes
    if not routes:
        print("No routes registered.")
        return

    rows: list[tuple[str, str, str, str, str]] = []
    for route in routes:
        paths = route.paths
        if route.is_localized:
            shown = ", ".join(f"{locale}: {template}" for locale, template in paths.items())
        else:
            shown = paths[None]
        rows.append(
            (
                route.name,
                ", ".join(sorted(route.methods)) or "ANY",
                ", ".join(sorted(route.schemes)) or "ANY",
                route.host or "ANY",
                shown,
            )
        )

    headers = ("NAME", "METHOD", "SCHEME", "HOST", "PATH")
    widths = [max(len(headers[i]), *(len(row[i]) for row in rows)) for i in range(4)]
    fmt = "  ".join(f"{{:<{w}}}" for w in widths) + "  {}"
    print(fmt.format(*headers))
    sep_len = sum(widths) + 8 + max(len(row[4]) for row in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))
