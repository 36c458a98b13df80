"""Documentation probe: recovers runtime-only facts in a child interpreter.

Reading source tells the scanner *where* a route table is; only running
the code tells it which functions the routes point at and what their
responses look like. The probe renders a tiny program that imports the
target module and hands the route table to
:mod:`wallhack.docs.introspect`, runs it with the configured interpreter,
and decodes the JSON array it prints. Anything the target prints while
it is imported or introspected goes to stderr, so stdout carries only
the array.

Each step fails with its own ``BuildPipelineError`` subclass, so a
broken build says whether rendering, writing, launching, the child
itself, decoding, or the deadline was the problem.
"""

import keyword
import logging
import os
import subprocess
import tempfile
from collections.abc import Sequence
from contextlib import suppress
from pathlib import Path
from typing import Any, Protocol

import anyio

from wallhack.config import ProbeConfig
from wallhack.docs.model import Endpoint
from wallhack.errors import (
    ProbeExitError,
    ProbeIOError,
    ProbeLaunchError,
    ProbeOutputError,
    ProbeRenderError,
    ProbeTimeoutError,
)
from wallhack.http.encoding import decode_exact

logger = logging.getLogger("wallhack.probe")

PROBE_TEMPLATE = """\
import contextlib as _contextlib
import sys as _sys

from wallhack.docs.introspect import dump as _dump

if __name__ == "__main__":
    _stdout = _sys.stdout
    with _contextlib.redirect_stdout(_sys.stderr):
        import {{ import_path }} as {{ alias }}

        _status = _dump({{ alias }}.{{ variable }}, _stdout)
    _sys.exit(_status)
"""

_REQUIRED_KEYS = ("Method", "URL", "Package", "Func", "Response")
_PROGRAM_NAMES = frozenset({"_contextlib", "_sys", "_dump", "_stdout", "_status"})


class ReflectionOracle(Protocol):
    """Anything that can list the endpoints of a route-table variable."""

    def run(self, import_path: str, alias: str, variable: str) -> list[Endpoint]: ...


def _check_identifier(value: str, what: str) -> None:
    if not value.isidentifier() or keyword.iskeyword(value):
        msg = f"{what} {value!r} is not a valid Python identifier"
        raise ProbeRenderError(msg)


def render_probe(import_path: str, alias: str, variable: str) -> str:
    """Render the probe program source for one route-table variable."""
    for part in import_path.split("."):
        _check_identifier(part, "module name part")
    _check_identifier(alias, "alias")
    _check_identifier(variable, "variable")
    if alias in _PROGRAM_NAMES:
        msg = f"alias {alias!r} clashes with a name used by the probe program"
        raise ProbeRenderError(msg)

    try:
        from kida import Environment

        env = Environment(autoescape=False)
        template = env.from_string(PROBE_TEMPLATE)
        return template.render(
            {"import_path": import_path, "alias": alias, "variable": variable}
        )
    except Exception as exc:
        msg = f"cannot render probe for {import_path}.{variable}: {exc}"
        raise ProbeRenderError(msg) from exc


def parse_output(raw: bytes) -> list[Endpoint]:
    """Decode the probe's stdout into endpoints, validating every record."""
    try:
        data = decode_exact(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        msg = f"probe output is not valid JSON: {exc}"
        raise ProbeOutputError(msg) from exc

    if not isinstance(data, list):
        msg = f"probe output must be a JSON array, got {type(data).__name__}"
        raise ProbeOutputError(msg)

    endpoints: list[Endpoint] = []
    for index, item in enumerate(data):
        endpoints.append(_endpoint_from_record(index, item))
    return endpoints


def _endpoint_from_record(index: int, item: Any) -> Endpoint:
    if not isinstance(item, dict):
        msg = f"probe record {index} must be an object, got {type(item).__name__}"
        raise ProbeOutputError(msg)
    missing = [key for key in _REQUIRED_KEYS if key not in item]
    if missing:
        msg = f"probe record {index} is missing {', '.join(missing)}"
        raise ProbeOutputError(msg)
    for key in ("Method", "URL", "Func"):
        if not isinstance(item[key], str) or not item[key]:
            msg = f"probe record {index} has an empty or non-string {key}"
            raise ProbeOutputError(msg)
    if not isinstance(item["Package"], str):
        msg = f"probe record {index} has a non-string Package"
        raise ProbeOutputError(msg)
    return Endpoint(
        method=item["Method"],
        url=item["URL"],
        package=item["Package"],
        func=item["Func"],
        response=item["Response"],
    )


class ProbeRunner:
    """Runs the probe program in a child interpreter.

    Usage::

        runner = ProbeRunner(ProbeConfig(search_paths=("src",)))
        endpoints = runner.run("shop.api", "api", "URLS")

    One child process per call. The temporary directory holding the
    program is removed on every exit path.
    """

    __slots__ = ("config",)

    def __init__(self, config: ProbeConfig | None = None) -> None:
        self.config = config or ProbeConfig()

    def run(self, import_path: str, alias: str, variable: str) -> list[Endpoint]:
        """Synchronous entry point; see :meth:`arun`."""
        return anyio.run(self.arun, import_path, alias, variable)

    async def arun(self, import_path: str, alias: str, variable: str) -> list[Endpoint]:
        source = render_probe(import_path, alias, variable)

        # Creating, writing and removing the directory all report as ProbeIOError
        try:
            with tempfile.TemporaryDirectory(prefix="wallhack-probe-") as tmp:
                program = Path(tmp) / "probe.py"
                program.write_text(source, encoding="utf-8")
                stdout, returncode, diagnostics = await self._execute(program)
        except OSError as exc:
            msg = f"probe program I/O failed: {exc}"
            raise ProbeIOError(msg) from exc

        if returncode != 0:
            raise ProbeExitError(returncode, diagnostics)
        endpoints = parse_output(stdout)
        logger.debug("probe %s.%s: %d endpoints", import_path, variable, len(endpoints))
        return endpoints

    def _environment(self) -> dict[str, str]:
        env = dict(os.environ)
        paths = [os.path.abspath(p) for p in self.config.search_paths]
        if existing := env.get("PYTHONPATH"):
            paths.append(existing)
        env["PYTHONPATH"] = os.pathsep.join(paths)
        return env

    async def _execute(self, program: Path) -> tuple[bytes, int, str]:
        command: Sequence[str] = [self.config.python, str(program)]
        logger.debug("probe command: %s", " ".join(command))
        try:
            process = await anyio.open_process(
                command,
                stdin=subprocess.DEVNULL,
                env=self._environment(),
            )
        except OSError as exc:
            msg = f"cannot start {self.config.python}: {exc}"
            raise ProbeLaunchError(msg) from exc

        stdout = bytearray()
        stderr_tail = bytearray()
        limit = self.config.stderr_tail

        async def read_stdout() -> None:
            assert process.stdout is not None
            async for chunk in process.stdout:
                stdout.extend(chunk)

        async def read_stderr() -> None:
            assert process.stderr is not None
            async for chunk in process.stderr:
                for line in chunk.decode("utf-8", "replace").splitlines():
                    logger.debug("probe: %s", line)
                stderr_tail.extend(chunk)
                del stderr_tail[:-limit]

        try:
            with anyio.fail_after(self.config.timeout):
                async with anyio.create_task_group() as tg:
                    tg.start_soon(read_stdout)
                    tg.start_soon(read_stderr)
                returncode = await process.wait()
        except TimeoutError:
            with suppress(ProcessLookupError):
                process.kill()
            msg = f"probe did not finish within {self.config.timeout:g}s"
            raise ProbeTimeoutError(msg) from None
        finally:
            with anyio.CancelScope(shield=True):
                await process.aclose()

        return bytes(stdout), returncode, stderr_tail.decode("utf-8", "replace")
