"""API documentation from source.

Find the route tables of a package by reading its source, probe each in
a child interpreter for handler identities and sample responses, and
render the result::

    from wallhack.docs import build_docs, render_markdown

    groups = build_docs("shop.api")
    print(render_markdown(groups))
"""

from wallhack.docs.model import Endpoint, RouteGroup
from wallhack.docs.probe import ProbeRunner, ReflectionOracle
from wallhack.docs.render import render_data, render_html, render_json, render_markdown
from wallhack.docs.scanner import build_docs, scan

__all__ = [
    "Endpoint",
    "ProbeRunner",
    "ReflectionOracle",
    "RouteGroup",
    "build_docs",
    "render_data",
    "render_html",
    "render_json",
    "render_markdown",
    "scan",
]
