"""
Process-wide logging setup for the LawnCare Pro API.

``setup_logging`` attaches a console handler to the root logger and,
when ``LOG_FILE`` is set, a file handler as well.  A relative log file
is placed under the package root, the same way ``core.db`` resolves a
relative ``DATABASE_URL``, so the log does not move with the working
directory of whoever starts the server.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PACKAGE_ROOT = Path(__file__).resolve().parent.parent.parent  # lawn_care_api/


def resolve_log_path(logfile: str) -> Path:
    """Absolute path for ``logfile``; relative paths hang off the package root."""
    path = Path(logfile).expanduser()
    if not path.is_absolute():
        path = PACKAGE_ROOT / path
    return path.resolve()


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger once per process.

    ``level`` is a level name such as ``"DEBUG"`` (case insensitive;
    unknown names mean ``INFO``).  If the root logger already has
    handlers, for example under pytest or when ``create_app`` runs
    twice, nothing is changed.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list = [logging.StreamHandler()]
    if logfile:
        log_path = resolve_log_path(logfile)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
