"""Wallhack CLI: API documentation, route listing, and the dev server.

Entry point registered as ``wallhack`` in ``pyproject.toml``::

    [project.scripts]
    wallhack = "wallhack.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``wallhack`` command."""
    parser = argparse.ArgumentParser(
        prog="wallhack",
        description="Wallhack: typed JSON handlers with generated API documentation.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- wallhack docs ----------------------------------------------------
    docs_parser = subparsers.add_parser("docs", help="Generate API documentation")
    docs_parser.add_argument("target", help="Import path of the package to document")
    docs_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write rendered docs here (.md for Markdown, anything else for HTML). "
        "Without it, structured JSON goes to stdout.",
    )
    docs_parser.add_argument(
        "--path",
        action="append",
        default=None,
        metavar="DIR",
        help="Directory to find the target in (repeatable, default: .)",
    )
    docs_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for each probe process",
    )
    docs_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    # -- wallhack routes --------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- wallhack run -----------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the dev server")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "docs":
        from wallhack.cli._docs import run_docs

        run_docs(args)
    elif args.command == "routes":
        from wallhack.cli._routes import run_routes

        run_routes(args)
    elif args.command == "run":
        from wallhack.cli._run import run_server

        run_server(args)
