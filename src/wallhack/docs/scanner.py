"""Source scanner: finds route tables by reading, not importing, the target.

The scanner parses every module of the target with :mod:`ast` and looks
for module-level assignments whose value is a ``RouteTable(...)`` call
or whose annotation is ``RouteTable``. Names are resolved through each
module's imports, so ``from wallhack import RouteTable as RT`` and
``import wallhack.routing as routing`` are both recognised while an
unrelated class that happens to be called ``RouteTable`` is not.

Docstrings of public functions and methods are collected along the way
and attached to the endpoints the probe reports.
"""

import ast
import inspect
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from wallhack.config import ProbeConfig
from wallhack.docs.model import Endpoint, RouteGroup
from wallhack.docs.probe import ProbeRunner, ReflectionOracle
from wallhack.errors import ScanError

logger = logging.getLogger("wallhack.docs")

ROUTE_TABLE_NAMES = frozenset(
    {
        "wallhack.RouteTable",
        "wallhack.routing.RouteTable",
        "wallhack.routing.route.RouteTable",
    }
)


@dataclass(frozen=True, slots=True)
class SourceModule:
    """A parsed module of the scan target."""

    name: str
    path: Path
    is_package: bool
    lines: tuple[str, ...]
    tree: ast.Module


@dataclass(frozen=True, slots=True)
class TableDeclaration:
    """A module-level route-table assignment found in source."""

    module: str
    variable: str
    doc: str
    lineno: int


# -- Locating and parsing --


def locate_target(target: str, search_paths: Iterable[str]) -> list[tuple[str, Path, bool]]:
    """Find the source files for dotted module path *target*.

    A package yields every ``.py`` file directly inside it; a plain
    module yields itself. The first search path containing the target
    wins.

    Returns:
        ``(module name, file, is package __init__)`` triples, sorted by
        module name.
    """
    parts = target.split(".")
    if not all(part.isidentifier() for part in parts):
        msg = f"{target!r} is not a dotted module path"
        raise ScanError(msg)

    for root in search_paths:
        base = Path(root).joinpath(*parts)
        if base.is_dir():
            found: list[tuple[str, Path, bool]] = []
            for file in sorted(base.glob("*.py")):
                if file.stem == "__init__":
                    found.append((target, file, True))
                elif file.stem.isidentifier():
                    found.append((f"{target}.{file.stem}", file, False))
            if found:
                return sorted(found, key=lambda item: item[0])
        module_file = base.with_suffix(".py")
        if module_file.is_file():
            return [(target, module_file, False)]

    msg = f"cannot find {target!r} under {', '.join(map(str, search_paths)) or 'no search paths'}"
    raise ScanError(msg)


def parse_module(name: str, path: Path, is_package: bool) -> SourceModule:
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"cannot read {path}: {exc}"
        raise ScanError(msg) from exc
    try:
        tree = ast.parse(source, filename=str(path))
    except SyntaxError as exc:
        msg = f"{path}:{exc.lineno}: {exc.msg}"
        raise ScanError(msg) from exc
    return SourceModule(
        name=name,
        path=path,
        is_package=is_package,
        lines=tuple(source.splitlines()),
        tree=tree,
    )


# -- Docs table --


def collect_docs(module: SourceModule) -> dict[tuple[str, str], str]:
    """``(module, qualname) -> docstring`` for public functions and methods."""
    docs: dict[tuple[str, str], str] = {}
    for node in module.tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            if not node.name.startswith("_"):
                docs[(module.name, node.name)] = ast.get_docstring(node) or ""
        elif isinstance(node, ast.ClassDef) and not node.name.startswith("_"):
            for item in node.body:
                if not isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)):
                    continue
                if item.name.startswith("_") and item.name != "__call__":
                    continue
                docs[(module.name, f"{node.name}.{item.name}")] = ast.get_docstring(item) or ""
    return docs


# -- Import resolution --


def _package_of(module: SourceModule) -> str:
    if module.is_package:
        return module.name
    return module.name.rpartition(".")[0]


def _resolve_relative(module: SourceModule, level: int, name: str | None) -> str:
    base = _package_of(module).split(".")
    if level > 1:
        base = base[: len(base) - (level - 1)]
    parts = [p for p in base if p]
    if name:
        parts.append(name)
    return ".".join(parts)


def import_bindings(module: SourceModule) -> dict[str, str]:
    """Map each name bound by a module-level import to its qualified name."""
    bindings: dict[str, str] = {}
    for node in module.tree.body:
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.asname:
                    bindings[alias.asname] = alias.name
                else:
                    head = alias.name.partition(".")[0]
                    bindings[head] = head
        elif isinstance(node, ast.ImportFrom):
            source = (
                _resolve_relative(module, node.level, node.module)
                if node.level
                else node.module or ""
            )
            for alias in node.names:
                if alias.name == "*":
                    continue
                bindings[alias.asname or alias.name] = f"{source}.{alias.name}"
    return bindings


def _dotted(node: ast.expr) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = _dotted(node.value)
        return f"{base}.{node.attr}" if base else None
    return None


def resolve_name(node: ast.expr, bindings: dict[str, str]) -> str | None:
    """Qualified name of a ``Name``/``Attribute`` chain, or None if unbound."""
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        try:
            node = ast.parse(node.value, mode="eval").body
        except SyntaxError:
            return None
    if isinstance(node, ast.Subscript):
        node = node.value
    dotted = _dotted(node)
    if dotted is None:
        return None
    head, _, rest = dotted.partition(".")
    if head not in bindings:
        return None
    qualified = bindings[head]
    return f"{qualified}.{rest}" if rest else qualified


def _is_route_table(node: ast.expr | None, bindings: dict[str, str]) -> bool:
    return node is not None and resolve_name(node, bindings) in ROUTE_TABLE_NAMES


# -- Route-table declarations --


def _group_doc(module: SourceModule, index: int, node: ast.stmt) -> str:
    body = module.tree.body
    if index + 1 < len(body):
        following = body[index + 1]
        if (
            isinstance(following, ast.Expr)
            and isinstance(following.value, ast.Constant)
            and isinstance(following.value.value, str)
        ):
            return inspect.cleandoc(following.value.value)

    comments: list[str] = []
    lineno = node.lineno - 2
    while lineno >= 0:
        stripped = module.lines[lineno].strip()
        if not stripped.startswith("#"):
            break
        comments.append(stripped[1:].removeprefix(" "))
        lineno -= 1
    return "\n".join(reversed(comments))


def find_tables(module: SourceModule) -> list[TableDeclaration]:
    """Module-level route-table assignments, in source order."""
    bindings = import_bindings(module)
    found: list[TableDeclaration] = []
    for index, node in enumerate(module.tree.body):
        if isinstance(node, ast.Assign):
            targets = [t.id for t in node.targets if isinstance(t, ast.Name)]
            matched = isinstance(node.value, ast.Call) and _is_route_table(
                node.value.func, bindings
            )
        elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
            targets = [node.target.id]
            matched = _is_route_table(node.annotation, bindings) or (
                isinstance(node.value, ast.Call) and _is_route_table(node.value.func, bindings)
            )
        else:
            continue
        if not matched:
            continue
        doc = _group_doc(module, index, node)
        for variable in targets:
            found.append(
                TableDeclaration(
                    module=module.name, variable=variable, doc=doc, lineno=node.lineno
                )
            )
    return found


# -- Scan --


def scan(
    target: str,
    oracle: ReflectionOracle,
    search_paths: Iterable[str] = (".",),
) -> dict[str, RouteGroup]:
    """Document every route table declared in *target*.

    Raises:
        ScanError: the target cannot be found or parsed, or two route
            tables share a variable name.
        BuildPipelineError: the oracle failed for some route table.
    """
    search_paths = tuple(search_paths)
    modules = [parse_module(*entry) for entry in locate_target(target, search_paths)]

    docs: dict[tuple[str, str], str] = {}
    for module in modules:
        docs.update(collect_docs(module))

    groups: dict[str, RouteGroup] = {}
    origins: dict[str, str] = {}
    for module in modules:
        for table in find_tables(module):
            if table.variable in groups:
                msg = (
                    f"route table {table.variable!r} declared in both "
                    f"{origins[table.variable]} and {table.module}"
                )
                raise ScanError(msg)
            logger.info("probing %s.%s", table.module, table.variable)
            alias = table.module.rpartition(".")[2]
            endpoints = oracle.run(table.module, alias, table.variable)
            groups[table.variable] = RouteGroup(
                name=table.variable,
                doc=table.doc,
                endpoints=tuple(_attach_doc(endpoint, docs) for endpoint in endpoints),
            )
            origins[table.variable] = table.module

    logger.info("%s: %d route tables", target, len(groups))
    return groups


def _attach_doc(endpoint: Endpoint, docs: dict[tuple[str, str], str]) -> Endpoint:
    return endpoint.with_doc(docs.get((endpoint.package, endpoint.func), ""))


def build_docs(target: str, config: ProbeConfig | None = None) -> dict[str, RouteGroup]:
    """Scan *target* and probe each of its route tables in a child interpreter."""
    config = config or ProbeConfig()
    return scan(target, ProbeRunner(config), config.search_paths)
