"""Application and documentation-build configuration.

Both are frozen dataclasses: immutable after creation, no string-key
dict lookups.
"""

import sys
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Serving configuration. Immutable after creation.

    All fields have defaults. Override what you need::

        config = AppConfig(debug=True, port=3000)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Install the Recovery middleware as the outermost layer at freeze time
    recover_panics: bool = True

    # Status applied when a handler returns an error. None keeps the
    # transport default (200), which is the historical behaviour.
    error_status: int | None = None


@dataclass(frozen=True, slots=True)
class ProbeConfig:
    """Documentation probe configuration.

    ``search_paths`` are prepended to the child's ``PYTHONPATH`` and are
    also where the scanner looks for the target's source files.
    """

    python: str = sys.executable
    search_paths: tuple[str, ...] = (".",)
    timeout: float = 60.0
    stderr_tail: int = 4096  # bytes of child stderr kept for error messages
