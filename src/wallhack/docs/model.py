"""Documentation data model.

``Endpoint`` and ``RouteGroup`` are built once per documentation run and
never mutated. ``to_dict()`` produces the structured output shape
(``Method``, ``URL``, ``Package``, ``Func``, ``Doc``, ``Response``).
"""

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Endpoint:
    """One documented route."""

    method: str
    url: str
    package: str
    func: str
    doc: str = ""
    response: Any = None

    @property
    def anchor(self) -> str:
        """Fragment identifier for this endpoint's section."""
        return self.func.replace(".", "-")

    def with_doc(self, doc: str) -> "Endpoint":
        return replace(self, doc=doc)

    def to_dict(self) -> dict[str, Any]:
        return {
            "Method": self.method,
            "URL": self.url,
            "Package": self.package,
            "Func": self.func,
            "Doc": self.doc,
            "Response": self.response,
        }


@dataclass(frozen=True, slots=True)
class RouteGroup:
    """All endpoints of one route-table variable, in declaration order."""

    name: str
    doc: str
    endpoints: tuple[Endpoint, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "Doc": self.doc,
            "Endpoints": [endpoint.to_dict() for endpoint in self.endpoints],
        }
