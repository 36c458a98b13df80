"""``wallhack docs``: generate API documentation for a package.

Everything is rendered in memory first; the output file is only written
once the whole build has succeeded.
"""

import argparse
import sys
from pathlib import Path

from wallhack.config import ProbeConfig
from wallhack.errors import WallhackError


def _probe_config(args: argparse.Namespace) -> ProbeConfig:
    defaults = ProbeConfig()
    return ProbeConfig(
        search_paths=tuple(args.path) if args.path else defaults.search_paths,
        timeout=args.timeout if args.timeout is not None else defaults.timeout,
    )


def run_docs(args: argparse.Namespace) -> None:
    """Build documentation for ``args.target`` and write it out."""
    from wallhack.docs import build_docs, render_html, render_json, render_markdown

    try:
        groups = build_docs(args.target, _probe_config(args))
        if args.output is None:
            rendered = render_json(groups)
        elif Path(args.output).suffix.lower() == ".md":
            rendered = render_markdown(groups)
        else:
            rendered = render_html(groups, title=f"{args.target} API")
    except WallhackError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if args.output is None:
        sys.stdout.write(rendered)
        sys.stdout.write("\n")
        return

    try:
        Path(args.output).write_text(rendered, encoding="utf-8")
    except OSError as exc:
        print(f"Error: cannot write {args.output}: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
