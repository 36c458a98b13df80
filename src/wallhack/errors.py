"""Wallhack exception hierarchy.

Shared across the registry, the serving pipeline, and the documentation
build so every module raises and catches the same types.
"""

from dataclasses import dataclass


class WallhackError(Exception):
    """Base for all wallhack-specific errors."""


class ConfigurationError(WallhackError):
    """Raised when routes or handlers are configured incorrectly.

    Always fatal: surfaces while the registry is being built, before any
    request is served or any documentation is produced.
    """


class ContractError(ConfigurationError):
    """A handler does not match ``(ResponseSink, Request) -> (T, Exception | None)``."""

    def __init__(self, handler: str, position: str, expected: str, actual: str) -> None:
        self.handler = handler
        self.position = position
        self.expected = expected
        self.actual = actual
        super().__init__(f"{handler}: {position} must be {expected}, have {actual}")


class DuplicateRouteError(ConfigurationError):
    """The same (method, path) pair was registered twice."""

    def __init__(self, method: str, path: str) -> None:
        self.method = method
        self.path = path
        super().__init__(f"duplicate route in registry: {method} {path}")


@dataclass(frozen=True, slots=True)
class HTTPError(WallhackError):
    """An error that maps directly to an HTTP status code.

    Raised by the router or by handlers. The ASGI pipeline catches these
    and answers with an error envelope carrying ``status``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: the path exists but not for this HTTP method.

    Carries an ``Allow`` header listing the registered methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


# -- Documentation build ------------------------------------------------------


class BuildPipelineError(WallhackError):
    """A documentation build failed. Nothing is emitted.

    ``stage`` names the step that failed so the cause can be located
    without re-running the build.
    """

    stage = "build"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"{self.stage}: {detail}")


class ScanError(BuildPipelineError):
    """The target could not be located, read, or parsed."""

    stage = "scan"


class ProbeRenderError(BuildPipelineError):
    """The probe program could not be generated."""

    stage = "render"


class ProbeIOError(BuildPipelineError):
    """The probe program could not be written to its temporary location."""

    stage = "io"


class ProbeLaunchError(BuildPipelineError):
    """The probe interpreter could not be started."""

    stage = "launch"


class ProbeExitError(BuildPipelineError):
    """The probe process exited with a non-zero status."""

    stage = "exit"

    def __init__(self, returncode: int, diagnostics: str = "") -> None:
        self.returncode = returncode
        self.diagnostics = diagnostics
        detail = f"probe exited with status {returncode}"
        if diagnostics:
            detail = f"{detail}\n{diagnostics}"
        super().__init__(detail)


class ProbeOutputError(BuildPipelineError):
    """The probe output was not a well-formed JSON array of endpoints."""

    stage = "decode"


class ProbeTimeoutError(BuildPipelineError):
    """The probe did not finish in time and was killed."""

    stage = "timeout"
