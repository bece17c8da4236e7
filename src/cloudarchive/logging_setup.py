"""Console logging with Rich.

Installs a single RichHandler on the root logger. Safe to call more than
once: previous handlers installed here are replaced, not stacked.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

# Third-party loggers that are noisy at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "google", "urllib3", "uvicorn.access")


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for the CLI and the web server."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_cloudarchive", False):
            root.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="[%X]"))
    handler._cloudarchive = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level.upper())

    noisy_level = logging.DEBUG if level.upper() == "DEBUG" else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
