"""Documentation renderers.

``render_data`` returns the structured mapping that ``wallhack docs``
prints as JSON. ``render_markdown`` lays the same groups out as a
Markdown document, and ``render_html`` wraps that document in a
standalone HTML page.

Groups are ordered by name; endpoints keep their declaration order.
Endpoint doc text is emitted verbatim, so Markdown inside docstrings
renders as Markdown.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from wallhack.docs.model import RouteGroup
from wallhack.http.encoding import encode

MARKDOWN_TEMPLATE = """\
{% for group in groups %}
# {{ group.name }}

{% if group.doc %}
{{ group.doc }}

{% end %}
Name | Method | URL
-----|--------|----
{% for ep in group.endpoints %}
[{{ ep.func }}](#{{ ep.anchor }}) | {{ ep.method }} | `{{ ep.url }}`
{% end %}

{% for ep in group.endpoints %}
<a id="{{ ep.anchor }}"></a>
## {{ ep.func }}

    {{ ep.method }} {{ ep.url }}

{% if ep.doc %}
{{ ep.doc }}

{% end %}
{% if ep.example %}
Response:

```json
{{ ep.example }}
```

{% end %}
{% end %}
{% end %}
"""

HTML_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
<style>
body { font-family: system-ui, sans-serif; max-width: 60rem; margin: 2rem auto; padding: 0 1rem; }
table { border-collapse: collapse; }
th, td { border: 1px solid #ccc; padding: 0.25rem 0.5rem; text-align: left; }
pre { background: #f5f5f5; padding: 0.75rem; overflow-x: auto; }
</style>
</head>
<body>
{{ body }}
</body>
</html>
"""


@dataclass(frozen=True, slots=True)
class _EndpointView:
    func: str
    anchor: str
    method: str
    url: str
    doc: str
    example: str


@dataclass(frozen=True, slots=True)
class _GroupView:
    name: str
    doc: str
    endpoints: tuple[_EndpointView, ...]


def sorted_groups(groups: Mapping[str, RouteGroup]) -> list[RouteGroup]:
    return [groups[name] for name in sorted(groups)]


def render_data(groups: Mapping[str, RouteGroup]) -> dict[str, Any]:
    """``{name: {"Doc": ..., "Endpoints": [...]}}`` with groups sorted by name."""
    return {group.name: group.to_dict() for group in sorted_groups(groups)}


def render_json(groups: Mapping[str, RouteGroup]) -> str:
    return encode(render_data(groups), indent=2)


def _context(groups: Mapping[str, RouteGroup]) -> dict[str, Any]:
    views = []
    for group in sorted_groups(groups):
        endpoints = tuple(
            _EndpointView(
                func=ep.func,
                anchor=ep.anchor,
                method=ep.method,
                url=ep.url,
                doc=ep.doc,
                example=encode(ep.response, indent=4) if ep.response is not None else "",
            )
            for ep in group.endpoints
        )
        views.append(_GroupView(name=group.name, doc=group.doc, endpoints=endpoints))
    return {"groups": views}


def render_markdown(groups: Mapping[str, RouteGroup]) -> str:
    """Render all groups as one Markdown document."""
    from kida import Environment

    env = Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True)
    template = env.from_string(MARKDOWN_TEMPLATE)
    return template.render(_context(groups))


def render_html(groups: Mapping[str, RouteGroup], *, title: str = "API documentation") -> str:
    """Render all groups as a standalone HTML page."""
    from kida import Environment
    from kida.template import Markup
    from patitas import Markdown

    body = Markdown(plugins=["all"])(render_markdown(groups))
    env = Environment(autoescape=True)
    template = env.from_string(HTML_TEMPLATE)
    return template.render({"title": title, "body": Markup(body)})
