"""``wallhack run``: development server command."""

import argparse
import sys

from wallhack.cli._resolve import resolve_app
from wallhack.errors import WallhackError


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it with pounce.

    ``--host`` and ``--port`` override the app config. The import string
    is forwarded so the reloader can reimport the app in debug mode.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError, WallhackError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    from wallhack.server.dev import run_dev_server

    run_dev_server(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        reload=app.config.debug,
        app_path=args.app,
    )
